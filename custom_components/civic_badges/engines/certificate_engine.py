"""Certificate Engine - Pure logic for certificate identity and layout.

This engine provides stateless, pure Python functions for:
- Recipient name sanitization (never fails, falls back to "Citizen")
- Deterministic certificate id and filename
- The fixed certificate layout as a list of drawing instructions
- Fitting the rasterized layout onto a page (uniform scale, centred)

ARCHITECTURE: This is a pure logic engine with NO Home Assistant dependencies
and no imaging dependencies. Rasterization and export live in
certificate.CertificateRenderer, which consumes CertificateLayout.

Identical (recipient_name, tier, issued) inputs always produce an identical
certificate_id, filename and layout.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import re

from .. import const
from ..utils.dt_utils import dt_epoch_millis, dt_format_date, dt_now_utc
from .badge_engine import ThresholdDef

# C0 control characters plus markup-significant angle brackets
_UNSAFE_NAME_CHARS = re.compile(r"[<>\x00-\x1f]")
_WHITESPACE_RUN = re.compile(r"\s+")
_WHITESPACE = re.compile(r"\s")
_PATH_SEPARATORS = re.compile(r"[/\\]")

RGBA = tuple[int, int, int, int]

COLOR_TEXT_DARK: RGBA = (38, 50, 56, 255)
COLOR_TEXT_MUTED: RGBA = (84, 110, 122, 255)
COLOR_TEXT_SOFT: RGBA = (96, 125, 139, 255)
COLOR_TITLE: RGBA = (2, 119, 189, 255)
COLOR_FRAME: RGBA = (179, 229, 252, 255)
COLOR_BACKGROUND: RGBA = (255, 255, 255, 255)
COLOR_WATERMARK: RGBA = (2, 119, 189, 15)

ELEMENT_TEXT = "text"
ELEMENT_GLYPH = "glyph"
ELEMENT_FRAME = "frame"
ELEMENT_WATERMARK = "watermark"


# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True, slots=True)
class Certificate:
    """Ephemeral certificate value. Never persisted."""

    recipient_name: str
    tier: ThresholdDef
    issued: datetime
    certificate_id: str
    filename: str


@dataclass(frozen=True, slots=True)
class LayoutElement:
    """One drawing instruction on the logical canvas.

    Attributes:
        role: Stable element name ("title", "recipient", "footer_id", ...)
        kind: text, glyph, frame or watermark
        text: Text to draw (empty for frames)
        x, y: Anchor point in logical canvas units
        font_size: Font size in logical units
        color: RGBA fill (outline for frames)
        anchor: Pillow-style two-letter text anchor
        bold: Draw with a heavier stroke
        box: Rectangle (x0, y0, x1, y1) for frames
    """

    role: str
    kind: str
    text: str = ""
    x: float = 0
    y: float = 0
    font_size: int = 16
    color: RGBA = COLOR_TEXT_DARK
    anchor: str = "mm"
    bold: bool = False
    box: tuple[float, float, float, float] | None = None


@dataclass(frozen=True, slots=True)
class CertificateLayout:
    """Fixed-size drawing instruction set for a certificate."""

    width: int
    height: int
    background: RGBA
    elements: tuple[LayoutElement, ...] = field(default_factory=tuple)

    def element(self, role: str) -> LayoutElement | None:
        """Return the element with this role, or None."""
        for item in self.elements:
            if item.role == role:
                return item
        return None


@dataclass(frozen=True, slots=True)
class PagePlacement:
    """Where a raster lands on the page (page units)."""

    x: float
    y: float
    width: float
    height: float
    scale: float


# =============================================================================
# CERTIFICATE ENGINE
# =============================================================================


class CertificateEngine:
    """Pure logic engine for certificate identity and layout.

    All methods are static - no instance state.
    """

    @staticmethod
    def sanitize_name(name: object) -> str:
        """Strip control characters and angle brackets; never return empty.

        Non-string, empty or all-whitespace input yields the fallback name.
        """
        if not isinstance(name, str):
            return const.CERTIFICATE_FALLBACK_NAME
        cleaned = _UNSAFE_NAME_CHARS.sub("", name).strip()
        return cleaned or const.CERTIFICATE_FALLBACK_NAME

    @staticmethod
    def certificate_id(tier_name: str, issued: datetime) -> str:
        """Return "<PREFIX>-<TIERNAME_UPPERCASE_NO_SPACES>-<epoch_ms>"."""
        tier_part = _WHITESPACE.sub("", tier_name).upper()
        return f"{const.CERTIFICATE_ID_PREFIX}-{tier_part}-{dt_epoch_millis(issued)}"

    @staticmethod
    def filename(recipient_name: str, tier_name: str) -> str:
        """Return "<name_with_underscores>_<tier>_Certificate.pdf".

        Path separators are replaced too so the name is always a single
        path component.
        """
        name_part = _PATH_SEPARATORS.sub("_", _WHITESPACE_RUN.sub("_", recipient_name))
        tier_part = _PATH_SEPARATORS.sub("_", tier_name)
        return (
            f"{name_part}_{tier_part}{const.CERTIFICATE_FILENAME_SUFFIX}"
            f"{const.CERTIFICATE_FILE_EXTENSION}"
        )

    @staticmethod
    def build_certificate(
        recipient_name: object,
        tier: ThresholdDef,
        issued: datetime | None = None,
    ) -> Certificate:
        """Build the certificate value; issued defaults to now."""
        safe_name = CertificateEngine.sanitize_name(recipient_name)
        issued_at = issued if issued is not None else dt_now_utc()
        return Certificate(
            recipient_name=safe_name,
            tier=tier,
            issued=issued_at,
            certificate_id=CertificateEngine.certificate_id(tier.tier_name, issued_at),
            filename=CertificateEngine.filename(safe_name, tier.tier_name),
        )

    @staticmethod
    def build_layout(
        certificate: Certificate,
        width: int = const.CERTIFICATE_CANVAS_WIDTH,
        height: int = const.CERTIFICATE_CANVAS_HEIGHT,
    ) -> CertificateLayout:
        """Return the fixed certificate layout on a width x height canvas."""
        cx = width / 2
        margin = 32
        tier = certificate.tier

        elements = (
            LayoutElement(
                role="watermark",
                kind=ELEMENT_WATERMARK,
                text=const.CERTIFICATE_WATERMARK,
                x=cx,
                y=height / 2,
                font_size=96,
                color=COLOR_WATERMARK,
                bold=True,
            ),
            LayoutElement(
                role="frame",
                kind=ELEMENT_FRAME,
                color=COLOR_FRAME,
                box=(8, 8, width - 8, height - 8),
            ),
            LayoutElement(
                role="header_left",
                kind=ELEMENT_TEXT,
                text=const.CERTIFICATE_HEADER_LEFT,
                x=margin,
                y=44,
                font_size=14,
                anchor="lm",
            ),
            LayoutElement(
                role="header_right",
                kind=ELEMENT_TEXT,
                text=const.CERTIFICATE_HEADER_RIGHT,
                x=width - margin,
                y=44,
                font_size=14,
                anchor="rm",
            ),
            LayoutElement(
                role="title",
                kind=ELEMENT_TEXT,
                text=const.CERTIFICATE_TITLE,
                x=cx,
                y=124,
                font_size=40,
                color=COLOR_TITLE,
                bold=True,
            ),
            LayoutElement(
                role="subtitle",
                kind=ELEMENT_TEXT,
                text=const.CERTIFICATE_SUBTITLE,
                x=cx,
                y=166,
                font_size=16,
                color=COLOR_TEXT_MUTED,
            ),
            LayoutElement(
                role="presented_to",
                kind=ELEMENT_TEXT,
                text=const.CERTIFICATE_PRESENTED_TO,
                x=cx,
                y=232,
                font_size=20,
                color=COLOR_TEXT_SOFT,
            ),
            LayoutElement(
                role="recipient",
                kind=ELEMENT_TEXT,
                text=certificate.recipient_name,
                x=cx,
                y=290,
                font_size=52,
                bold=True,
            ),
            LayoutElement(
                role="tier",
                kind=ELEMENT_TEXT,
                text=f"For achieving the {tier.tier_name} Badge",
                x=cx,
                y=356,
                font_size=26,
            ),
            LayoutElement(
                role="min_count",
                kind=ELEMENT_TEXT,
                text=(
                    f"in recognition of filing {tier.min_count}+ civic reports "
                    "and contributing to a cleaner city."
                ),
                x=cx,
                y=392,
                font_size=16,
                color=COLOR_TEXT_MUTED,
            ),
            LayoutElement(
                role="icon",
                kind=ELEMENT_GLYPH,
                text=tier.icon,
                x=cx,
                y=468,
                font_size=72,
            ),
            LayoutElement(
                role="footer_date",
                kind=ELEMENT_TEXT,
                text=f"Date: {dt_format_date(certificate.issued)}",
                x=margin,
                y=height - 40,
                font_size=14,
                color=COLOR_TEXT_MUTED,
                anchor="lm",
            ),
            LayoutElement(
                role="footer_id",
                kind=ELEMENT_TEXT,
                text=f"Certificate ID: {certificate.certificate_id}",
                x=width - margin,
                y=height - 40,
                font_size=14,
                color=COLOR_TEXT_MUTED,
                anchor="rm",
            ),
        )
        return CertificateLayout(
            width=width,
            height=height,
            background=COLOR_BACKGROUND,
            elements=elements,
        )

    @staticmethod
    def fit_to_page(
        width: float,
        height: float,
        page_width: float = const.CERTIFICATE_PAGE_WIDTH_PT,
        page_height: float = const.CERTIFICATE_PAGE_HEIGHT_PT,
    ) -> PagePlacement:
        """Scale width x height uniformly to fit the page, centred."""
        if width <= 0 or height <= 0:
            raise ValueError("raster size must be positive")
        scale = min(page_width / width, page_height / height)
        placed_width = width * scale
        placed_height = height * scale
        return PagePlacement(
            x=(page_width - placed_width) / 2,
            y=(page_height - placed_height) / 2,
            width=placed_width,
            height=placed_height,
            scale=scale,
        )
