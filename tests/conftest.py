"""Shared pytest fixtures for the Precast test suite.

Provides reusable fixtures for:
- Settings rooted in a temporary working directory
- The real Jinja2 template renderer and a recording mock renderer
- A fake process runner (no git or npm is ever spawned)
- A ``ProjectConfig`` factory and a scaffolded project directory
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from precast.collector import ErrorCollector
from precast.config import Settings
from precast.scaffolder import ProjectScaffolder, TemplateRenderer
from precast.stack.models import ProjectConfig
from precast.utils import ProcessRunner


# ---------------------------------------------------------------------------
# Settings & collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings whose working directory is a fresh temp directory."""
    return Settings(cwd=tmp_path)


@pytest.fixture
def renderer() -> TemplateRenderer:
    """The real renderer over the packaged templates."""
    return TemplateRenderer()


@pytest.fixture
def mock_renderer() -> MagicMock:
    """A mock TemplateRenderer that writes a marker line per rendered file."""
    renderer = MagicMock(spec=TemplateRenderer)

    async def mock_render_to_file(template_path: str, output_path, context):
        out = Path(output_path)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(f"# Rendered from {template_path}\n", encoding="utf-8")
        return out

    renderer.render_to_file = AsyncMock(side_effect=mock_render_to_file)
    renderer.render_tree = AsyncMock(return_value=[])
    return renderer


@pytest.fixture
def fake_runner() -> MagicMock:
    """A ProcessRunner whose commands all succeed without spawning anything."""
    runner = MagicMock(spec=ProcessRunner)
    runner.run = AsyncMock(return_value="")
    return runner


@pytest.fixture
def collector() -> ErrorCollector:
    return ErrorCollector()


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory for a valid React + Express configuration with overrides."""

    def _make(**overrides: Any) -> ProjectConfig:
        fields: dict[str, Any] = {
            "name": "test-app",
            "framework": "react",
            "backend": "express",
            "database": "none",
            "orm": "none",
            "styling": "tailwind",
            "runtime": "node",
            "typescript": True,
            "git": False,
            "docker": False,
        }
        fields.update(overrides)
        return ProjectConfig(**fields)

    return _make


@pytest.fixture
def scaffold(tmp_path: Path, renderer: TemplateRenderer):
    """Coroutine fixture: scaffold *config* into ``tmp_path/<name>``."""

    async def _scaffold(config: ProjectConfig) -> Path:
        project = tmp_path / config.name
        project.mkdir()
        await ProjectScaffolder(renderer).generate(config, project)
        return project

    return _scaffold
