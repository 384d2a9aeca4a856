"""Business plugins (payments, email, analytics...).

A plugin touches both sides of the project: browser SDKs go to the web
package, server SDKs to the server package (``requirements.txt`` for FastAPI).
Install data comes from ``plugins.yaml``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from precast.errors import SetupError
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig
from precast.utils import ProcessRunner, add_command, append_lines, debug_log, update_package_json

from .base import SetupGenerator, fill_ports, framework_env, load_table, pick


def load_plugins() -> dict[str, dict[str, Any]]:
    return load_table("plugins.yaml")


class PluginsSetup(SetupGenerator):
    id = "plugins"
    name = "Plugins"

    def entries(self, config: ProjectConfig) -> dict[str, dict[str, Any]]:
        """Install data of the selected plugins after checking each one applies."""
        table = load_plugins()
        unknown = [p for p in config.plugins if p not in table]
        if unknown:
            raise SetupError(f"Unknown plugin: {', '.join(unknown)}")
        entries = {plugin_id: table[plugin_id] for plugin_id in config.plugins}
        for entry in entries.values():
            frameworks = entry.get("frameworks", ["*"])
            if "*" not in frameworks and config.framework not in frameworks:
                raise SetupError(f"{entry['name']} is not compatible with {config.framework}")
            if entry.get("requires_backend") and not config.has_backend:
                raise SetupError(f"{entry['name']} requires a backend")
            if entry.get("requires_database") and not config.has_database:
                raise SetupError(f"{entry['name']} requires a database")
        return entries

    def _collect(self, config: ProjectConfig, key: str, select: str) -> dict[str, str]:
        merged: dict[str, str] = {}
        for entry in self.entries(config).values():
            merged.update(pick(entry.get(key, {}), select, {}))
        return merged

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        return (
            self._collect(config, "dependencies", config.framework),
            self._collect(config, "dev_dependencies", config.framework),
        )

    def backend_packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        """npm packages for the server; FastAPI uses :meth:`python_requirements`."""
        if not config.has_backend or config.backend == "fastapi":
            return {}, {}
        return (
            self._collect(config, "backend_dependencies", config.backend),
            self._collect(config, "backend_dev_dependencies", config.backend),
        )

    def python_requirements(self, config: ProjectConfig) -> list[str]:
        if config.backend != "fastapi":
            return []
        requirements: list[str] = []
        for entry in self.entries(config).values():
            requirements += [r for r in entry.get("python_requirements", []) if r not in requirements]
        return requirements

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        env: dict[str, str] = {}
        for entry in self.entries(config).values():
            env.update(entry.get("env", {}))
        return framework_env(config, fill_ports(env, config))

    async def record_packages(self, config: ProjectConfig, project_path: Path) -> None:
        await super().record_packages(config, project_path)
        server = config.server_dir(project_path)
        deps, dev = self.backend_packages(config)
        if (deps or dev) and (server / "package.json").exists():
            await update_package_json(server, dependencies=deps, dev_dependencies=dev)
        requirements = self.python_requirements(config)
        if requirements:
            await append_lines(server / "requirements.txt", requirements)

    async def install_dependencies(
        self, config: ProjectConfig, project_path: Path, runner: ProcessRunner
    ) -> None:
        await super().install_dependencies(config, project_path, runner)
        deps, dev = self.backend_packages(config)
        cwd = config.server_dir(project_path)
        for group, is_dev in ((deps, False), (dev, True)):
            if group:
                specs = [f"{name}@{version}" for name, version in group.items()]
                await runner.run(add_command(config.package_manager, specs, dev=is_dev), cwd=cwd)

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        entries = self.entries(config)
        web = config.web_dir(project_path)
        server = config.server_dir(project_path)
        context = config.template_context()
        written: list[Path] = []
        scripts: dict[str, str] = {}
        for plugin_id, entry in entries.items():
            debug_log(f"Setting up plugin {plugin_id}")
            templates = entry.get("templates", {})
            if templates.get("web") and config.framework != "none":
                written += await renderer.render_tree(templates["web"], web, context)
            # Server templates are JavaScript; FastAPI projects only get requirements.
            if templates.get("server") and config.has_backend and config.backend != "fastapi":
                written += await renderer.render_tree(templates["server"], server, context)
            scripts.update(entry.get("scripts", {}))

        await self.record_packages(config, project_path)
        if scripts and (web / "package.json").exists():
            await update_package_json(web, scripts=scripts)
        return written

    def next_steps(self, config: ProjectConfig) -> list[str]:
        steps: list[str] = []
        for entry in self.entries(config).values():
            steps += fill_ports(entry.get("next_steps", []), config)
        return steps
