"""Engine modules for Civic Badges integration.

Contains pure computation engines (no Home Assistant state):
- badge_engine: Tier table, tier resolution and ledger reconciliation
- certificate_engine: Certificate identity, filename and layout
"""

# Use relative imports within package to avoid mypy module resolution issues
from .badge_engine import (
    BadgeEngine,
    EarnedBadge,
    ReconcileResult,
    ThresholdDef,
    ThresholdTable,
)
from .certificate_engine import (
    Certificate,
    CertificateEngine,
    CertificateLayout,
    LayoutElement,
    PagePlacement,
)

__all__ = [
    "BadgeEngine",
    "Certificate",
    "CertificateEngine",
    "CertificateLayout",
    "EarnedBadge",
    "LayoutElement",
    "PagePlacement",
    "ReconcileResult",
    "ThresholdDef",
    "ThresholdTable",
]
