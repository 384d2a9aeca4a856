"""Tests for business plugin installation."""

from __future__ import annotations

import json

import pytest

from precast.errors import SetupError
from precast.setup.plugins import PluginsSetup, load_plugins

pytestmark = pytest.mark.unit


class TestEntries:
    def test_every_plugin_has_a_name(self):
        assert all(entry["name"] for entry in load_plugins().values())

    def test_unknown_plugin(self, make_config):
        with pytest.raises(SetupError, match="Unknown plugin: paypal"):
            PluginsSetup().entries(make_config(plugins=["paypal"]))

    def test_requires_backend(self, make_config):
        with pytest.raises(SetupError, match="Stripe requires a backend"):
            PluginsSetup().entries(make_config(backend="none", plugins=["stripe"]))


class TestPackages:
    def test_react_gets_react_sdk(self, make_config):
        deps, _ = PluginsSetup().packages(make_config(plugins=["stripe"]))
        assert "@stripe/react-stripe-js" in deps

    def test_vue_falls_back_to_wildcard(self, make_config):
        deps, _ = PluginsSetup().packages(make_config(framework="vue", plugins=["stripe"]))
        assert deps == {"@stripe/stripe-js": "^7.3.0"}

    def test_backend_packages(self, make_config):
        deps, _ = PluginsSetup().backend_packages(make_config(plugins=["stripe", "resend"]))
        assert set(deps) == {"stripe", "resend"}

    def test_fastapi_uses_requirements(self, make_config):
        config = make_config(backend="fastapi", plugins=["stripe", "resend"])
        assert PluginsSetup().backend_packages(config) == ({}, {})
        assert PluginsSetup().python_requirements(config) == ["stripe>=12.0", "resend>=2.0"]

    def test_env_keeps_vite_key(self, make_config):
        env = PluginsSetup().env_variables(make_config(plugins=["stripe"]))
        assert "VITE_STRIPE_PUBLISHABLE_KEY" in env
        assert "NEXT_PUBLIC_STRIPE_PUBLISHABLE_KEY" not in env


class TestSetup:
    async def test_stripe_on_both_sides(self, make_config, scaffold, renderer):
        config = make_config(plugins=["stripe"])
        project = await scaffold(config)
        await PluginsSetup().setup(config, project, renderer)

        assert (project / "apps" / "web" / "src" / "lib" / "stripe-client.ts").is_file()
        assert (project / "apps" / "api" / "src" / "lib" / "stripe.ts").is_file()
        api = json.loads((project / "apps" / "api" / "package.json").read_text(encoding="utf-8"))
        assert "stripe" in api["dependencies"]
        web = json.loads((project / "apps" / "web" / "package.json").read_text(encoding="utf-8"))
        assert "@stripe/react-stripe-js" in web["dependencies"]

    async def test_fastapi_skips_server_templates(self, make_config, scaffold, renderer):
        config = make_config(backend="fastapi", plugins=["stripe"])
        project = await scaffold(config)
        await PluginsSetup().setup(config, project, renderer)

        assert not (project / "apps" / "api" / "src" / "lib" / "stripe.ts").exists()
        requirements = (project / "apps" / "api" / "requirements.txt").read_text(encoding="utf-8")
        assert "stripe>=12.0" in requirements

    def test_next_steps_fill_api_port(self, make_config):
        steps = PluginsSetup().next_steps(make_config(plugins=["stripe"]))
        assert any("localhost:3001/api/webhooks/stripe" in step for step in steps)
