"""Pydantic models describing a stack selection.

``ProjectConfig`` is the working record for one project-creation run,
``ConfigUpdate`` is the explicit partial record used when features are added
to an existing project, and ``ValidationResult`` is the value returned by the
validator.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Axis(str, Enum):
    """One configurable dimension of the stack."""

    FRAMEWORK = "framework"
    BACKEND = "backend"
    DATABASE = "database"
    ORM = "orm"
    STYLING = "styling"
    RUNTIME = "runtime"


NONE = "none"
API_PORT = 3001
WEB_PORTS: dict[str, int] = {
    "next": 3000,
    "react-router": 3000,
    "tanstack-start": 3000,
    "angular": 4200,
    "react-native": 8081,
}


def is_set(value: str | None) -> bool:
    """True when an optional selection is present and not ``"none"``."""
    return bool(value) and value != NONE


class ProjectConfig(BaseModel):
    """Resolved configuration of the project being created.

    Field names are snake_case in Python; the sidecar metadata file uses the
    camelCase aliases (``packageManager``, ``uiLibrary``...).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., description="Project directory and package name")
    framework: str = Field(..., description="Frontend framework id")
    backend: str = Field(default=NONE)
    database: str = Field(default=NONE)
    orm: str = Field(default=NONE)
    styling: str = Field(default="css")
    runtime: str = Field(default="node")
    typescript: bool = Field(default=True)
    git: bool = Field(default=True)
    docker: bool = Field(default=False)
    ui_library: str | None = Field(default=None)
    ai_context: list[str] = Field(default_factory=list)
    package_manager: str = Field(default="npm")
    project_path: str = Field(default="", description="Absolute project directory once resolved")
    language: str = Field(default="typescript")
    auth_provider: str | None = Field(default=None)
    deployment_method: str | None = Field(default=None)
    auto_install: bool = Field(default=False)
    powerups: list[str] = Field(default_factory=list)
    plugins: list[str] = Field(default_factory=list)
    color_palette: str | None = Field(default=None)
    ai_assistant: str | None = Field(default=None)
    mcp_servers: list[str] = Field(default_factory=list)
    api_client: str | None = Field(default=None)

    @property
    def has_backend(self) -> bool:
        return is_set(self.backend)

    @property
    def has_database(self) -> bool:
        return is_set(self.database)

    @property
    def has_orm(self) -> bool:
        return is_set(self.orm)

    @property
    def is_monorepo(self) -> bool:
        """Standalone backends live in ``apps/api`` next to ``apps/web``."""
        from .catalog import INTEGRATED_BACKENDS

        return self.has_backend and self.backend not in INTEGRATED_BACKENDS

    @property
    def web_port(self) -> int:
        return WEB_PORTS.get(self.framework, 5173)

    @property
    def source_ext(self) -> str:
        return "ts" if self.typescript else "js"

    def web_dir(self, project_path: str | Path) -> Path:
        """Directory holding the frontend package."""
        root = Path(project_path)
        return root / "apps" / "web" if self.is_monorepo else root

    def server_dir(self, project_path: str | Path) -> Path:
        """Directory holding server code (the web root for integrated backends)."""
        root = Path(project_path)
        return root / "apps" / "api" if self.is_monorepo else root

    def apply(self, update: "ConfigUpdate") -> "ProjectConfig":
        """Return a copy with every field explicitly set on *update* applied."""
        return self.model_copy(update=update.model_dump(exclude_unset=True))

    def template_context(self) -> dict[str, Any]:
        """Flat Jinja2 context: every field plus a few derived values."""
        from precast.utils import db_name

        return {
            **self.model_dump(),
            "config": self,
            "db_name": db_name(self.name),
            "ext": self.source_ext,
            "jsx_ext": "tsx" if self.typescript else "jsx",
            "is_monorepo": self.is_monorepo,
            "web_port": self.web_port,
            "api_port": API_PORT,
        }


class ConfigUpdate(BaseModel):
    """Fields that ``precast add`` may change on an existing project.

    Every field is independently optional; only explicitly set fields are
    applied (see :meth:`ProjectConfig.apply`).
    """

    model_config = ConfigDict(extra="forbid")

    ui_library: str | None = None
    ai_assistant: str | None = None
    ai_context: list[str] | None = None
    auth_provider: str | None = None
    api_client: str | None = None
    powerups: list[str] | None = None
    plugins: list[str] | None = None
    docker: bool | None = None
    color_palette: str | None = None
    mcp_servers: list[str] | None = None

    def changed_fields(self) -> set[str]:
        return set(self.model_dump(exclude_unset=True))


class ValidationResult(BaseModel):
    """Outcome of one ``ConfigValidator.validate`` call."""

    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
