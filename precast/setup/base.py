"""Contract shared by the per-technology setup generators.

A generator writes its files into an already scaffolded project, records the
npm packages it needs in ``package.json`` and can install them on request.
Each generator also declares which stacks it supports and refuses others with
:class:`SetupError`; the validator decides what combinations are offered,
this is only a second line of defence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path
from typing import Any, TypeVar

import yaml

from precast.errors import SetupError
from precast.scaffolder.templates import TemplateRenderer
from precast.stack.models import API_PORT, ProjectConfig
from precast.utils import ProcessRunner, add_command, update_package_json

ANY = ("*",)
DATA_DIR = Path(__file__).parent

T = TypeVar("T")


class SetupGenerator(ABC):
    """Base class for a table-driven setup generator."""

    id: str = ""
    name: str = ""
    supported_frameworks: tuple[str, ...] = ANY
    supported_backends: tuple[str, ...] = ANY
    supported_databases: tuple[str, ...] = ANY
    supported_orms: tuple[str, ...] = ANY

    # -- Compatibility self-check ------------------------------------------

    def check_support(self, config: ProjectConfig) -> None:
        """Raise :class:`SetupError` if *config* is outside this generator's lists."""
        for label, value, supported in (
            ("framework", config.framework, self.supported_frameworks),
            ("backend", config.backend, self.supported_backends),
            ("database", config.database, self.supported_databases),
            ("ORM", config.orm, self.supported_orms),
        ):
            if supported != ANY and value not in supported:
                raise SetupError(f"{self.name} does not support {label} '{value}'")

    # -- Contract ----------------------------------------------------------

    @abstractmethod
    async def setup(
        self, config: ProjectConfig, project_path: Path, renderer: TemplateRenderer
    ) -> list[Path]:
        """Write files into *project_path*; return the paths written."""

    def packages(self, config: ProjectConfig) -> tuple[dict[str, str], dict[str, str]]:
        """``(dependencies, devDependencies)`` this generator needs."""
        return {}, {}

    def package_dir(self, config: ProjectConfig, project_path: Path) -> Path:
        """Package whose ``package.json`` receives the dependencies."""
        return config.web_dir(project_path)

    def env_variables(self, config: ProjectConfig) -> dict[str, str]:
        """Environment variables this generator reads, with example values."""
        return {}

    def next_steps(self, config: ProjectConfig) -> list[str]:
        return []

    async def install_dependencies(
        self, config: ProjectConfig, project_path: Path, runner: ProcessRunner
    ) -> None:
        """Install :meth:`packages` with the project's package manager."""
        deps, dev = self.packages(config)
        cwd = self.package_dir(config, project_path)
        for group, is_dev in ((deps, False), (dev, True)):
            if group:
                specs = [f"{name}@{version}" for name, version in group.items()]
                await runner.run(add_command(config.package_manager, specs, dev=is_dev), cwd=cwd)

    # -- Helpers -----------------------------------------------------------

    async def record_packages(self, config: ProjectConfig, project_path: Path) -> None:
        """Merge :meth:`packages` into ``package.json`` when there is one."""
        deps, dev = self.packages(config)
        target = self.package_dir(config, project_path)
        if (deps or dev) and (target / "package.json").exists():
            await update_package_json(target, dependencies=deps, dev_dependencies=dev)


@lru_cache(maxsize=None)
def load_table(filename: str) -> Any:
    """Parse a YAML data file shipped beside the setup modules."""
    with open(DATA_DIR / filename, encoding="utf-8") as fh:
        return yaml.safe_load(fh)


def framework_env(config: ProjectConfig, env: dict[str, str]) -> dict[str, str]:
    """Drop browser-exposed variables meant for another framework family.

    Next.js reads ``NEXT_PUBLIC_*`` and Vite-based apps read ``VITE_*``; a
    table lists both and each project keeps the one its bundler exposes.
    """
    public = "NEXT_PUBLIC_" if config.framework == "next" else "VITE_"
    return {
        key: value
        for key, value in env.items()
        if not key.startswith(("NEXT_PUBLIC_", "VITE_")) or key.startswith(public)
    }


def fill_ports(value: Any, config: ProjectConfig) -> Any:
    """Substitute ``{web_port}``/``{api_port}`` in strings nested inside *value*."""
    if isinstance(value, str):
        return value.replace("{web_port}", str(config.web_port)).replace("{api_port}", str(API_PORT))
    if isinstance(value, list):
        return [fill_ports(item, config) for item in value]
    if isinstance(value, dict):
        return {key: fill_ports(item, config) for key, item in value.items()}
    return value


def pick(table: dict[str, T], key: str, default: T) -> T:
    """``table[key]``, else the ``"*"`` wildcard entry, else *default*."""
    return table.get(key, table.get("*", default))


def lookup(registry: dict[str, SetupGenerator], key: str | None, kind: str) -> SetupGenerator:
    """Fetch a generator from *registry* or raise :class:`SetupError`."""
    generator = registry.get(key or "")
    if generator is None:
        raise SetupError(f"Unknown {kind}: {key}")
    return generator
