"""Colour palette theming.

Palettes live in ``palettes.yaml`` beside this module.  The palette is written
to ``palette.css`` next to the framework's global stylesheet, which imports
it; with Tailwind the variables sit in an ``@theme`` block so they also become
utility classes (``bg-primary``, ``text-text-secondary``...).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from precast.errors import SetupError
from precast.scaffolder.generator import STYLESHEETS
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig

from .base import SetupGenerator, load_table
from .ui_library import add_to_stylesheet


def load_palettes() -> dict[str, dict[str, Any]]:
    return {palette["id"]: palette for palette in load_table("palettes.yaml")}


def palettes_by_category(category: str) -> list[dict[str, Any]]:
    return [p for p in load_palettes().values() if p["category"] == category]


class ColorPaletteSetup(SetupGenerator):
    id = "color-palette"
    name = "Color palette"

    def palette(self, palette_id: str | None) -> dict[str, Any]:
        palettes = load_palettes()
        if palette_id in palettes:
            return palettes[palette_id]
        in_category = palettes_by_category(palette_id or "")
        if in_category:
            ids = ", ".join(p["id"] for p in in_category)
            raise SetupError(f"'{palette_id}' is a palette category; pick one of: {ids}")
        raise SetupError(f"Unknown color palette: {palette_id}")

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        palette = self.palette(config.color_palette)
        stylesheet = STYLESHEETS.get(config.framework)
        if stylesheet is None:
            raise SetupError(f"{config.framework} has no global stylesheet for a palette")
        main = config.web_dir(project_path) / stylesheet
        target = main.parent / "palette.css"
        context = {**config.template_context(), "palette": palette}
        written = [await renderer.render_to_file("palette/palette.css.j2", target, context)]
        written.append(await add_to_stylesheet(main, ('@import "./palette.css";',)))
        return written
