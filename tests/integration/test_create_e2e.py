"""End-to-end project creation.

These tests run normalisation, validation and the orchestrator against the
real templates and verify that the generated project contains well-formed
configuration files.  Git and package installs go through a fake runner, so
no external tools are required.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from precast.orchestrator import ProjectOrchestrator
from precast.stack import ConfigValidator, ProjectConfig, normalize


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))


async def _create(settings, renderer, fake_runner, **fields: Any):
    """Normalise, validate and create a project; return the result."""
    validator = ConfigValidator()
    config = normalize(ProjectConfig(**fields))
    validation = validator.validate(config)
    assert validation.valid, validation.errors
    orchestrator = ProjectOrchestrator(settings, renderer=renderer, runner=fake_runner, validator=validator)
    return await orchestrator.create_project(config)


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.integration
class TestFullStackProject:
    """A React + Express + Postgres project with most features enabled."""

    @pytest.fixture
    async def result(self, settings, renderer, fake_runner):
        return await _create(
            settings, renderer, fake_runner,
            name="full-stack", framework="React", backend="express", database="PostgreSQL",
            orm="prisma", styling="tailwind", docker=True, git=True,
            auth_provider="better-auth", ui_library="shadcn", api_client="tanstack-query",
            plugins=["stripe"], powerups=["redis"], ai_context=["claude"], ai_assistant="claude",
            mcp_servers=["filesystem", "postgresql"], deployment_method="docker",
        )

    async def test_no_step_failed(self, result) -> None:
        assert result.success, [e.error for e in result.errors]

    async def test_manifests_are_valid_json(self, result) -> None:
        root = result.project_path
        for manifest in (root / "package.json", root / "apps" / "web" / "package.json",
                         root / "apps" / "api" / "package.json"):
            data = _load_json(manifest)
            assert data["name"]

        api = _load_json(root / "apps" / "api" / "package.json")
        assert {"@prisma/client", "better-auth", "stripe"} <= set(api["dependencies"])
        web = _load_json(root / "apps" / "web" / "package.json")
        assert {"@tanstack/react-query", "tailwind-merge", "@stripe/react-stripe-js"} <= set(web["dependencies"])

    async def test_compose_files_are_valid_yaml(self, result) -> None:
        root = result.project_path
        production = yaml.safe_load((root / "docker-compose.yml").read_text(encoding="utf-8"))
        assert set(production["services"]) == {"app", "postgres"}
        development = yaml.safe_load((root / "docker" / "docker-compose.yml").read_text(encoding="utf-8"))
        assert development["services"]["postgres"]["env_file"] == [".env"]
        services = yaml.safe_load(
            (root / "docker" / "docker-compose.services.yml").read_text(encoding="utf-8")
        )
        assert "redis" in services["services"]
        workflow = yaml.safe_load((root / ".github" / "workflows" / "docker.yml").read_text(encoding="utf-8"))
        assert "build" in workflow["jobs"]

    async def test_env_uses_generated_database_password(self, result) -> None:
        root = result.project_path
        docker_env = (root / "docker" / ".env").read_text(encoding="utf-8")
        api_env = (root / "apps" / "api" / ".env").read_text(encoding="utf-8")
        url = next(line for line in docker_env.splitlines() if line.startswith("DATABASE_URL="))
        assert url in api_env
        assert "postgres:postgres@" not in url

    async def test_metadata_round_trip(self, result) -> None:
        metadata = _load_json(result.project_path / "precast.json")
        assert metadata["name"] == "full-stack"
        assert metadata["framework"] == "react"
        assert metadata["database"] == "postgres"
        assert metadata["mcpServers"] == ["filesystem", "postgresql"]

    async def test_mcp_and_ai_files(self, result) -> None:
        root = result.project_path
        mcp = _load_json(root / ".mcp.json")
        assert set(mcp["mcpServers"]) == {"filesystem", "postgresql"}
        assert (root / "CLAUDE.md").is_file()


@pytest.mark.integration
class TestOtherStacks:
    @pytest.mark.parametrize("fields", [
        {"framework": "next", "backend": "next", "database": "sqlite", "orm": "drizzle"},
        {"framework": "vue", "backend": "hono", "database": "mysql", "orm": "drizzle"},
        {"framework": "svelte", "backend": "fastapi", "database": "postgres", "orm": "none"},
        {"framework": "angular", "backend": "none", "database": "none", "orm": "none"},
    ], ids=["next-integrated", "vue-hono", "svelte-fastapi", "angular-frontend"])
    async def test_creates_cleanly(self, settings, renderer, fake_runner, fields) -> None:
        result = await _create(settings, renderer, fake_runner, name="app", git=True, **fields)
        assert result.success, [e.error for e in result.errors]
        assert (result.project_path / ".gitignore").is_file()
        assert (result.project_path / "precast.json").is_file()
