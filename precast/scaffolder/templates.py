"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``precast/scaffolder/templates/`` directory and renders them with the
project's template context.  Supports single-file rendering, batch tree
rendering, and string-based rendering for inline template content.

Template file names follow two conventions so the package data stays free of
dotfiles and per-language duplicates:

* a ``dot-`` prefix becomes ``.`` (``dot-editorconfig.j2`` -> ``.editorconfig``);
* ``__ext__`` and ``__jsx__`` are replaced by the context's ``ext`` and
  ``jsx_ext`` (``src/main.__jsx__.j2`` -> ``src/main.tsx``).
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    The renderer discovers ``.j2`` template files under a configurable
    template directory.  Templates are rendered with a context dictionary,
    normally :meth:`ProjectConfig.template_context`.  Undefined variables are
    errors so a typo in a template fails the step instead of writing blanks.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["pascal_case"] = _pascal_case_filter
        self.env.filters["camel_case"] = _camel_case_filter
        self.env.filters["snake_case"] = _snake_case_filter

    # -- Single template rendering -----------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"orm/prisma/schema.prisma.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    # -- File-based rendering (async) --------------------------------------

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a template and write the result to *output_path*.

        Parent directories are created automatically.  Returns the output
        path.
        """
        content = self.render(template_path, context)
        out = Path(output_path)
        await asyncio.to_thread(_write_file, out, content)
        return out

    async def render_tree(
        self,
        template_prefix: str,
        output_dir: str | Path,
        context: dict[str, Any],
        *,
        skip_patterns: list[str] | None = None,
    ) -> list[Path]:
        """Render every ``*.j2`` file under *template_prefix* to *output_dir*.

        The directory structure is preserved and output names go through
        :func:`output_name`: ``frameworks/react/src/main.__jsx__.j2`` rendered
        with ``template_prefix="frameworks/react"`` writes
        ``<output_dir>/src/main.tsx`` for a TypeScript project.

        Args:
            template_prefix: Subdirectory inside the template root to scan.
            output_dir: Target directory where rendered files are written.
            context: Template context variables.
            skip_patterns: Optional list of relative-path substrings to skip.

        Returns:
            List of written file paths.
        """
        skip_patterns = skip_patterns or []
        prefix_path = self.template_dir / template_prefix
        if not prefix_path.is_dir():
            return []

        written: list[Path] = []
        out_base = Path(output_dir)

        for template_file in sorted(prefix_path.rglob("*.j2")):
            rel_str = template_file.relative_to(prefix_path).as_posix()
            if any(pat in rel_str for pat in skip_patterns):
                continue

            output_file = out_base / output_name(rel_str, context)
            template_key = f"{template_prefix}/{rel_str}"
            written.append(await self.render_to_file(template_key, output_file, context))

        return written

    # -- Utility -----------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root directory.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )


def output_name(relative_template: str, context: dict[str, Any]) -> str:
    """Map a template path to the file name it renders to."""
    name = relative_template[: -len(".j2")] if relative_template.endswith(".j2") else relative_template
    parts = []
    for part in name.split("/"):
        if part.startswith("dot-"):
            part = "." + part[len("dot-"):]
        part = part.replace("__ext__", context.get("ext", "ts"))
        part = part.replace("__jsx__", context.get("jsx_ext", "tsx"))
        parts.append(part)
    return "/".join(parts)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _pascal_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word.capitalize() for word in parts if word)


def _snake_case_filter(value: str) -> str:
    """Convert ``SomeThing`` or ``some-thing`` to ``some_thing``."""
    s1 = re.sub(r"(.)([A-Z][a-z]+)", r"\1_\2", value)
    s2 = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", s1)
    return re.sub(r"[-\s]+", "_", s2).lower()


def _camel_case_filter(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``someThing``."""
    pascal = _pascal_case_filter(value)
    if pascal:
        return pascal[0].lower() + pascal[1:]
    return ""


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _write_file(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
