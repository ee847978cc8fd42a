# File: certificate.py
"""Certificate rendering and export for the Civic Badges integration.

Rasterizes a CertificateLayout with Pillow, places the raster centred on an
A4 landscape page and writes a single-page PDF into the export directory.

All Pillow and file system work runs in the executor. A missing export
directory is not an error: the export is skipped and None is returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image, ImageDraw, ImageFont

from . import const
from .engines.certificate_engine import (
    COLOR_TITLE,
    ELEMENT_FRAME,
    ELEMENT_GLYPH,
    ELEMENT_WATERMARK,
    CertificateEngine,
    PagePlacement,
)
from .exceptions import RenderTargetUnavailable

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant

    from .engines.certificate_engine import (
        Certificate,
        CertificateLayout,
        LayoutElement,
    )
    from .type_defs import CertificateExportResponse

WATERMARK_ANGLE = 28
FRAME_RADIUS = 12
MEDALLION_RING = 3


@dataclass(frozen=True, slots=True)
class CertificateDocument:
    """An exported certificate file."""

    certificate: Certificate
    path: Path
    url: str
    placement: PagePlacement

    def as_response(self) -> CertificateExportResponse:
        """Return the service response payload."""
        return {
            const.RESPONSE_CERTIFICATE_ID: self.certificate.certificate_id,
            const.RESPONSE_FILENAME: self.certificate.filename,
            const.RESPONSE_PATH: str(self.path),
            const.RESPONSE_URL: self.url,
        }  # type: ignore[return-value]


def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    return ImageFont.load_default(size=size)


def _draw_watermark(
    image: Image.Image, element: LayoutElement, scale: int
) -> Image.Image:
    """Composite the rotated, faint watermark text over the image."""
    layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
    ImageDraw.Draw(layer).text(
        (element.x * scale, element.y * scale),
        element.text,
        font=_font(element.font_size * scale),
        fill=element.color,
        anchor="mm",
    )
    layer = layer.rotate(
        WATERMARK_ANGLE,
        resample=Image.Resampling.BICUBIC,
        center=(element.x * scale, element.y * scale),
    )
    return Image.alpha_composite(image, layer)


def _draw_glyph(draw: ImageDraw.ImageDraw, element: LayoutElement, scale: int) -> None:
    """Draw the tier medallion; plain text icons are written inside it.

    The bundled font has no emoji or mdi glyphs, so those icons are shown
    as the medallion alone.
    """
    radius = element.font_size * scale * 0.6
    cx, cy = element.x * scale, element.y * scale
    draw.ellipse(
        (cx - radius, cy - radius, cx + radius, cy + radius),
        outline=COLOR_TITLE,
        width=MEDALLION_RING * scale,
    )
    text = element.text
    if text and text.isascii() and not text.startswith("mdi:"):
        draw.text(
            (cx, cy),
            text,
            font=_font(int(element.font_size * scale * 0.5)),
            fill=element.color,
            anchor="mm",
        )


def render_layout(
    layout: CertificateLayout, scale: int = const.CERTIFICATE_RASTER_SCALE
) -> Image.Image:
    """Rasterize a layout at the given scale (RGBA)."""
    image = Image.new(
        "RGBA", (layout.width * scale, layout.height * scale), layout.background
    )

    for element in layout.elements:
        if element.kind == ELEMENT_WATERMARK:
            image = _draw_watermark(image, element, scale)

    draw = ImageDraw.Draw(image)
    for element in layout.elements:
        if element.kind == ELEMENT_WATERMARK:
            continue
        if element.kind == ELEMENT_FRAME and element.box is not None:
            draw.rounded_rectangle(
                tuple(v * scale for v in element.box),
                radius=FRAME_RADIUS * scale,
                outline=element.color,
                width=2 * scale,
            )
        elif element.kind == ELEMENT_GLYPH:
            _draw_glyph(draw, element, scale)
        else:
            draw.text(
                (element.x * scale, element.y * scale),
                element.text,
                font=_font(element.font_size * scale),
                fill=element.color,
                anchor=element.anchor,
                stroke_width=scale if element.bold else 0,
                stroke_fill=element.color,
            )
    return image


def render_page(
    layout: CertificateLayout, dpi: int = const.CERTIFICATE_PAGE_DPI
) -> tuple[Image.Image, PagePlacement]:
    """Rasterize a layout and place it centred on an A4 landscape page (RGB)."""
    raster = render_layout(layout)
    page_size = (
        round(const.CERTIFICATE_PAGE_WIDTH_PT * dpi / 72),
        round(const.CERTIFICATE_PAGE_HEIGHT_PT * dpi / 72),
    )
    placement = CertificateEngine.fit_to_page(
        raster.width, raster.height, page_size[0], page_size[1]
    )
    fitted = raster.resize(
        (round(placement.width), round(placement.height)),
        Image.Resampling.LANCZOS,
    )
    page = Image.new("RGB", page_size, (255, 255, 255))
    page.paste(fitted, (round(placement.x), round(placement.y)), fitted)
    return page, placement


class CertificateRenderer:
    """Writes certificate PDFs into a fixed export directory."""

    def __init__(
        self,
        hass: HomeAssistant,
        export_dir: str | Path,
        url_prefix: str = const.CERTIFICATE_EXPORT_URL_PREFIX,
    ) -> None:
        """Initialize the renderer.

        Args:
            hass: Home Assistant core object (executor access)
            export_dir: Directory the PDF files are written to
            url_prefix: URL under which export_dir is served
        """
        self.hass = hass
        self._export_dir = Path(export_dir)
        self._url_prefix = url_prefix.rstrip("/")

    @property
    def export_dir(self) -> Path:
        """Return the export directory."""
        return self._export_dir

    async def async_export(self, certificate: Certificate) -> CertificateDocument | None:
        """Render and save a certificate; None if the directory is unavailable."""
        try:
            return await self.hass.async_add_executor_job(self._export, certificate)
        except RenderTargetUnavailable as err:
            const.LOGGER.warning(
                "WARNING: Certificate export skipped, directory unavailable: %s",
                err.target,
            )
            return None

    def _export(self, certificate: Certificate) -> CertificateDocument:
        """Render and write the PDF (executor)."""
        if not self._export_dir.is_dir():
            raise RenderTargetUnavailable(str(self._export_dir))

        layout = CertificateEngine.build_layout(certificate)
        page, placement = render_page(layout)
        path = self._export_dir / certificate.filename
        try:
            page.save(path, "PDF", resolution=float(const.CERTIFICATE_PAGE_DPI))
        except OSError as err:
            raise RenderTargetUnavailable(str(path)) from err

        const.LOGGER.info(
            "INFO: Exported certificate %s to %s", certificate.certificate_id, path
        )
        return CertificateDocument(
            certificate=certificate,
            path=path,
            url=f"{self._url_prefix}/{certificate.filename}",
            placement=placement,
        )
