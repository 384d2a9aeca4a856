"""Development-only service panel.

Writes ``src/precast/services.json`` describing the services the project was
generated with (API, database, auth, plugins, Docker containers) and a small
widget that lists them and pings the API health endpoint.  The widget renders
nothing in production builds.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from precast.scaffolder.docker_gen import DATABASE_SERVICES
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.catalog import DOCKER_POWERUPS
from precast.stack.models import API_PORT, ProjectConfig, is_set
from precast.utils import save_json, title_case

from .base import SetupGenerator, load_table

SERVICES_FILE = "src/precast/services.json"

_REACT_APPS = ("react", "next", "react-router", "tanstack-router", "tanstack-start")


def service_registry(config: ProjectConfig) -> list[dict[str, Any]]:
    """Services shown by the widget, in display order."""
    services: list[dict[str, Any]] = []
    if config.has_backend:
        services.append({
            "key": "api",
            "name": "API",
            "type": config.backend,
            "category": "infrastructure",
            "health": f"http://localhost:{API_PORT}/health" if config.is_monorepo else "/api/health",
        })
    if config.has_database:
        services.append({
            "key": "database",
            "name": title_case(config.database),
            "type": config.orm if config.has_orm else config.database,
            "category": "infrastructure",
        })
    if is_set(config.auth_provider):
        services.append({
            "key": "auth",
            "name": title_case(config.auth_provider or ""),
            "type": config.auth_provider,
            "category": "auth",
        })
    plugins = load_table("plugins.yaml")
    for plugin_id in config.plugins:
        entry = plugins.get(plugin_id, {})
        services.append({
            "key": plugin_id,
            "name": entry.get("name", title_case(plugin_id)),
            "type": plugin_id,
            "category": entry.get("category", "plugin"),
        })
    if config.docker:
        containers = []
        service_def = DATABASE_SERVICES.get(config.database)
        if service_def is not None:
            containers.append({"name": service_def["image"], "port": service_def["port"]})
        containers += [{"name": p} for p in config.powerups if p in DOCKER_POWERUPS]
        if containers:
            services.append({
                "key": "docker",
                "name": "Docker",
                "type": "compose",
                "category": "infrastructure",
                "containers": containers,
            })
    return services


class AdminWidgetSetup(SetupGenerator):
    id = "admin-widget"
    name = "Admin widget"

    def template(self, config: ProjectConfig) -> str:
        return "admin/react" if config.framework in _REACT_APPS else "admin/vanilla"

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        web = config.web_dir(project_path)
        if config.framework == "none":
            # No frontend to mount a widget in; keep the registry at the root.
            return [await save_json({"services": service_registry(config)}, web / "precast-services.json")]
        written = [await save_json({"services": service_registry(config)}, web / SERVICES_FILE)]
        written += await renderer.render_tree(self.template(config), web, config.template_context())
        return written

    def next_steps(self, config: ProjectConfig) -> list[str]:
        if config.framework in _REACT_APPS:
            return ["Render <PrecastWidget /> in your root layout to see configured services"]
        if config.framework == "none":
            return []
        return ["Call mountPrecastWidget() from your entry file to see configured services"]
