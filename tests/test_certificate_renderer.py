"""Tests for certificate rasterization and PDF export."""

# pylint: disable=redefined-outer-name  # Pytest fixtures shadow names

from __future__ import annotations

from datetime import UTC, datetime
import logging
from pathlib import Path

import pytest
from homeassistant.core import HomeAssistant

from custom_components.civic_badges.certificate import (
    CertificateRenderer,
    render_layout,
    render_page,
)
from custom_components.civic_badges.engines.badge_engine import ThresholdDef
from custom_components.civic_badges.engines.certificate_engine import (
    CertificateEngine,
)

ISSUED = datetime(2025, 4, 7, 12, 30, tzinfo=UTC)
DIAMOND = ThresholdDef(50, "Diamond", "💎")


@pytest.fixture
def renderer(hass: HomeAssistant, tmp_path: Path) -> CertificateRenderer:
    """Renderer exporting into a temporary directory."""
    return CertificateRenderer(hass, tmp_path)


class TestRaster:
    """Pillow rendering of the layout."""

    def test_raster_is_twice_the_canvas(self) -> None:
        cert = CertificateEngine.build_certificate("Asha Verma", DIAMOND, ISSUED)
        image = render_layout(CertificateEngine.build_layout(cert))

        assert image.size == (1920, 1280)
        assert image.mode == "RGBA"

    def test_page_is_a4_landscape(self) -> None:
        cert = CertificateEngine.build_certificate("Asha Verma", DIAMOND, ISSUED)
        page, placement = render_page(CertificateEngine.build_layout(cert))

        assert page.size == (1684, 1190)
        assert page.mode == "RGB"
        assert placement.width == pytest.approx(1684)
        assert placement.x == pytest.approx(0)

    @pytest.mark.parametrize(
        "name", ["😀 Emoji Fan", "आशा वर्मा", "\x00\x1b", "A" * 300]
    )
    def test_unusual_names_render(self, name: str) -> None:
        cert = CertificateEngine.build_certificate(
            name, ThresholdDef(5, "Helper", "mdi:hand-heart"), ISSUED
        )
        image = render_layout(CertificateEngine.build_layout(cert), scale=1)
        assert image.size == (960, 640)

    def test_plain_text_icon_renders(self) -> None:
        cert = CertificateEngine.build_certificate(
            "Asha", ThresholdDef(5, "Starter", "S"), ISSUED
        )
        image = render_layout(CertificateEngine.build_layout(cert), scale=1)
        assert image.size == (960, 640)


class TestExport:
    """PDF export into the export directory."""

    async def test_export_writes_pdf(
        self, renderer: CertificateRenderer, tmp_path: Path
    ) -> None:
        cert = CertificateEngine.build_certificate("Asha Verma", DIAMOND, ISSUED)

        document = await renderer.async_export(cert)

        assert document is not None
        assert document.path == tmp_path / "Asha_Verma_Diamond_Certificate.pdf"
        assert document.path.read_bytes().startswith(b"%PDF")
        assert document.url == "/local/civic_badges/Asha_Verma_Diamond_Certificate.pdf"
        assert document.as_response() == {
            "certificate_id": cert.certificate_id,
            "filename": "Asha_Verma_Diamond_Certificate.pdf",
            "path": str(document.path),
            "url": document.url,
        }

    async def test_same_inputs_same_file(
        self, renderer: CertificateRenderer, tmp_path: Path
    ) -> None:
        cert = CertificateEngine.build_certificate("Asha Verma", DIAMOND, ISSUED)

        first = await renderer.async_export(cert)
        second = await renderer.async_export(cert)

        assert first.path == second.path
        assert len(list(tmp_path.iterdir())) == 1

    async def test_missing_directory_skips_export(
        self,
        hass: HomeAssistant,
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        renderer = CertificateRenderer(hass, tmp_path / "missing")
        cert = CertificateEngine.build_certificate("Asha Verma", DIAMOND, ISSUED)

        with caplog.at_level(logging.WARNING):
            document = await renderer.async_export(cert)

        assert document is None
        assert "directory unavailable" in caplog.text
        assert not (tmp_path / "missing").exists()

    async def test_custom_url_prefix(self, hass: HomeAssistant, tmp_path: Path) -> None:
        renderer = CertificateRenderer(hass, tmp_path, url_prefix="/local/certs/")
        cert = CertificateEngine.build_certificate("Asha", DIAMOND, ISSUED)

        document = await renderer.async_export(cert)

        assert document.url == "/local/certs/Asha_Diamond_Certificate.pdf"
