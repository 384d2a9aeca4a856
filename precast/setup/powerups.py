"""Power-up installation.

Install data comes from ``powerups.yaml``; the stack catalog decides which
power-ups a framework may select.  npm power-ups add packages, scripts and
optional template files to the web package.  Docker power-ups (Traefik,
Redis...) are collected into one ``docker/docker-compose.services.yml``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from precast.errors import SetupError
from precast.scaffolder.docker_gen import DockerGenerator
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.catalog import DOCKER_POWERUPS, StackCatalog
from precast.stack.models import ProjectConfig
from precast.utils import debug_log, update_package_json

from .base import SetupGenerator, fill_ports, framework_env, load_table, pick

SERVICES_FILE = "docker-compose.services.yml"
SERVICE_SCRIPTS = {
    "services:up": f"docker compose -f docker/{SERVICES_FILE} up -d",
    "services:down": f"docker compose -f docker/{SERVICES_FILE} down",
}


class PowerUpsSetup(SetupGenerator):
    id = "powerups"
    name = "Power-ups"

    def __init__(self, catalog: StackCatalog | None = None) -> None:
        self.catalog = catalog or StackCatalog()

    def entries(self, config: ProjectConfig) -> dict[str, dict[str, Any]]:
        table = load_table("powerups.yaml")
        unknown = [p for p in config.powerups if p not in table]
        if unknown:
            raise SetupError(f"Unknown powerup: {', '.join(unknown)}")
        for powerup_id in config.powerups:
            option = self.catalog.get_powerup(powerup_id)
            if option and "*" not in option.frameworks and config.framework not in option.frameworks:
                raise SetupError(f"{option.name} is not compatible with {config.framework}")
        return {powerup_id: table[powerup_id] or {} for powerup_id in config.powerups}

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        deps: dict[str, str] = {}
        dev: dict[str, str] = {}
        for entry in self.entries(config).values():
            deps.update(pick(entry.get("dependencies", {}), config.framework, {}))
            dev.update(pick(entry.get("dev_dependencies", {}), config.framework, {}))
        return deps, dev

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        env: dict[str, str] = {}
        for entry in self.entries(config).values():
            env.update(entry.get("env", {}))
        return framework_env(config, fill_ports(env, config))

    def services(self, config: ProjectConfig) -> dict[str, dict[str, Any]]:
        return {
            powerup_id: fill_ports(entry["service"], config)
            for powerup_id, entry in self.entries(config).items()
            if powerup_id in DOCKER_POWERUPS and "service" in entry
        }

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        entries = self.entries(config)
        web = config.web_dir(project_path)
        context = config.template_context()
        written: list[Path] = []
        scripts: dict[str, str] = {}
        for powerup_id, entry in entries.items():
            debug_log(f"Setting up power-up {powerup_id}")
            if entry.get("template"):
                written += await renderer.render_tree(entry["template"], web, context)
            scripts.update(entry.get("scripts", {}))

        services = self.services(config)
        if services:
            if not config.docker:
                raise SetupError("Docker power-ups need --docker")
            compose = await DockerGenerator(renderer).generate_service_compose(
                config, project_path, services, filename=SERVICES_FILE
            )
            if compose is not None:
                written.append(compose)
            root = Path(project_path)
            if (root / "package.json").exists():
                await update_package_json(root, scripts=SERVICE_SCRIPTS)

        await self.record_packages(config, project_path)
        if scripts and (web / "package.json").exists():
            await update_package_json(web, scripts=scripts)
        return written

    def next_steps(self, config: ProjectConfig) -> list[str]:
        steps: list[str] = []
        for entry in self.entries(config).values():
            steps += fill_ports(entry.get("next_steps", []), config)
        return steps
