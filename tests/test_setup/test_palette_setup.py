"""Tests for colour palette theming."""

from __future__ import annotations

import pytest

from precast.errors import SetupError
from precast.setup.color_palette import ColorPaletteSetup, load_palettes, palettes_by_category

pytestmark = pytest.mark.unit


class TestPaletteTable:
    def test_ids_are_unique(self):
        palettes = load_palettes()
        assert "minimal-pro" in palettes
        assert all(p["id"] == key for key, p in palettes.items())

    def test_every_palette_defines_primary(self):
        assert all("primary" in p["colors"] for p in load_palettes().values())

    def test_categories(self):
        assert {p["id"] for p in palettes_by_category("modern")} >= {"minimal-pro", "monochrome"}


class TestLookup:
    def test_unknown_palette(self):
        with pytest.raises(SetupError, match="Unknown color palette: neon"):
            ColorPaletteSetup().palette("neon")

    def test_category_lists_choices(self):
        with pytest.raises(SetupError, match="palette category") as exc_info:
            ColorPaletteSetup().palette("modern")
        assert "minimal-pro" in str(exc_info.value)


class TestSetup:
    async def test_tailwind_theme_block(self, make_config, scaffold, renderer):
        config = make_config(backend="none", color_palette="minimal-pro")
        project = await scaffold(config)
        await ColorPaletteSetup().setup(config, project, renderer)

        palette = (project / "src" / "palette.css").read_text(encoding="utf-8")
        assert palette.startswith("/* Minimal Pro:")
        assert "@theme {" in palette
        assert "--color-primary: #0F172A;" in palette
        css = (project / "src" / "index.css").read_text(encoding="utf-8")
        assert '@import "./palette.css";' in css

    async def test_plain_css_root_block(self, make_config, scaffold, renderer):
        config = make_config(framework="vue", backend="none", styling="css", color_palette="monochrome")
        project = await scaffold(config)
        await ColorPaletteSetup().setup(config, project, renderer)
        assert ":root {" in (project / "src" / "palette.css").read_text(encoding="utf-8")

    async def test_framework_without_stylesheet(self, make_config, tmp_path, mock_renderer):
        config = make_config(framework="none", backend="express", color_palette="minimal-pro")
        with pytest.raises(SetupError, match="no global stylesheet"):
            await ColorPaletteSetup().setup(config, tmp_path, mock_renderer)
