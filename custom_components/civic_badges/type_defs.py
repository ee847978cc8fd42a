"""Type definitions for Civic Badges data structures.

TypedDict is used for the JSON-shaped structures that cross a serialization
boundary (storage records, bus event payloads, service responses). In-memory
value objects (ThresholdDef, EarnedBadge, ReconcileResult, ...) are frozen
dataclasses living next to the engine that produces them.

IMPORTANT: This file must NOT import from managers or Home Assistant modules.
TypedDict is STATIC ANALYSIS ONLY; runtime shape validation happens in
BadgeEngine.parse_records().
"""

from typing import TypedDict

ISODatetime = str  # ISO 8601 datetime string "2026-01-18T12:30:00+00:00"
TierName = str


class EarnedBadgeRecord(TypedDict):
    """Stored form of an EarnedBadge.

    Stored in: BadgeStore value "earned_badges" (list of records)
    Managed by: BadgeLedger (rehydrate, reconcile, persist)
    """

    tier_name: TierName
    earned_at: ISODatetime


class StoredBadgeData(TypedDict):
    """Complete per-identity storage file contents."""

    earned_badges: list[EarnedBadgeRecord]
    last_unlocked_tier: TierName | None
    display_count: int | None


class BadgeUnlockedEvent(TypedDict):
    """Payload of the civic_badges_badge_unlocked bus event."""

    entry_id: str
    tier_name: TierName
    min_count: int
    icon: str
    earned_at: ISODatetime


class CertificateExportResponse(TypedDict):
    """Response data of the export_certificate service action."""

    certificate_id: str
    filename: str
    path: str
    url: str


__all__ = [
    "BadgeUnlockedEvent",
    "CertificateExportResponse",
    "EarnedBadgeRecord",
    "ISODatetime",
    "StoredBadgeData",
    "TierName",
]
