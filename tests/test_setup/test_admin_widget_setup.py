"""Tests for the development service panel."""

from __future__ import annotations

import json

import pytest

from precast.setup.admin_widget import SERVICES_FILE, AdminWidgetSetup, service_registry

pytestmark = pytest.mark.unit


class TestServiceRegistry:
    def test_monorepo_health_url(self, make_config):
        services = service_registry(make_config())
        assert services[0]["health"] == "http://localhost:3001/health"

    def test_integrated_health_url(self, make_config):
        services = service_registry(make_config(framework="next", backend="next"))
        assert services[0]["health"] == "/api/health"

    def test_full_stack_order(self, make_config):
        config = make_config(database="postgres", orm="drizzle", auth_provider="better-auth",
                             plugins=["stripe"], docker=True, powerups=["redis"])
        services = service_registry(config)
        assert [s["key"] for s in services] == ["api", "database", "auth", "stripe", "docker"]
        assert services[1]["type"] == "drizzle"
        assert services[3]["category"] == "payments"
        assert services[4]["containers"] == [
            {"name": "postgres:16-alpine", "port": 5432}, {"name": "redis"},
        ]

    def test_frontend_only_is_empty(self, make_config):
        assert service_registry(make_config(backend="none")) == []


class TestSetup:
    async def test_react_widget(self, make_config, tmp_path, renderer):
        config = make_config(database="sqlite", orm="drizzle")
        await AdminWidgetSetup().setup(config, tmp_path, renderer)

        web = tmp_path / "apps" / "web"
        registry = json.loads((web / SERVICES_FILE).read_text(encoding="utf-8"))
        assert registry["services"][1]["name"] == "Sqlite"
        assert (web / "src" / "precast" / "PrecastWidget.tsx").is_file()

    async def test_vanilla_widget(self, make_config, tmp_path, renderer):
        config = make_config(framework="vue", database="sqlite", orm="drizzle", typescript=False)
        await AdminWidgetSetup().setup(config, tmp_path, renderer)
        assert (tmp_path / "apps" / "web" / "src" / "precast" / "widget.js").is_file()

    async def test_no_frontend_keeps_registry_at_root(self, make_config, tmp_path, mock_renderer):
        config = make_config(framework="none", backend="none", database="postgres", orm="prisma")
        await AdminWidgetSetup().setup(config, tmp_path, mock_renderer)
        assert (tmp_path / "precast-services.json").is_file()
        mock_renderer.render_tree.assert_not_called()
        assert AdminWidgetSetup().next_steps(config) == []
