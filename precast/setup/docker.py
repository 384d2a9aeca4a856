"""Local development database stack under ``docker/``."""

from __future__ import annotations

from pathlib import Path

from precast.scaffolder.docker_gen import DATABASE_SERVICES, LOCAL_DATABASES, DockerGenerator
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import ProjectConfig

from .base import SetupGenerator


class DockerComposeSetup(SetupGenerator):
    id = "docker-compose"
    name = "Docker compose"
    supported_databases = (*DATABASE_SERVICES, *sorted(LOCAL_DATABASES))

    def __init__(self) -> None:
        self.passwords: dict[str, str] = {}

    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        self.check_support(config)
        self.passwords = await DockerGenerator(renderer).generate_database_compose(config, project_path)
        if not self.passwords:
            return []
        docker_dir = Path(project_path) / "docker"
        return [docker_dir / name for name in ("docker-compose.yml", ".env", ".env.example", "README.md")]

    def next_steps(self, config: ProjectConfig) -> list[str]:
        if config.database not in DATABASE_SERVICES:
            return []
        return [f"Start {config.database} with `{config.package_manager} run docker:up`"]
