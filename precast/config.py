"""Precast CLI settings.

Centralised, typed settings for one CLI invocation. Like the project
configuration models, settings are Pydantic v2 models so they are validated at
construction time and can be built from environment variables without
boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Runtime settings shared by the orchestrator, generators and CLI.

    Instances are created once by the CLI entry point (or by a test) and passed
    by reference to whatever needs them.
    """

    cwd: Path = Field(default_factory=Path.cwd, description="Directory new projects are created in")
    template_dir: Path = Field(default=_DEFAULT_TEMPLATE_DIR)
    metadata_file: str = Field(default="precast.json")
    debug_log_dir: str = Field(default=".precast-debug")
    git_timeout: int = Field(default=60, ge=1, description="Per git command timeout in seconds")
    install_timeout: int = Field(
        default=600, ge=10, description="Package-manager install timeout in seconds"
    )
    debug: bool = Field(default=False)
    verbose: bool = Field(default=False)

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def debug_log_path(self) -> Path:
        """Append-only error log written when ``debug`` is enabled."""
        return self.cwd / self.debug_log_dir / "errors.log"

    def project_path(self, name: str) -> Path:
        """Resolve the target directory for a project called *name*."""
        return (self.cwd / name).resolve()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls, **overrides: Any) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            PRECAST_CWD, PRECAST_TEMPLATE_DIR, PRECAST_GIT_TIMEOUT,
            PRECAST_INSTALL_TIMEOUT, PRECAST_DEBUG (or DEBUG_ERRORS),
            PRECAST_VERBOSE.

        Keyword *overrides* win over the environment.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("PRECAST_CWD"):
            kwargs["cwd"] = Path(os.environ["PRECAST_CWD"])
        if os.environ.get("PRECAST_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["PRECAST_TEMPLATE_DIR"])
        if os.environ.get("PRECAST_GIT_TIMEOUT"):
            kwargs["git_timeout"] = int(os.environ["PRECAST_GIT_TIMEOUT"])
        if os.environ.get("PRECAST_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["PRECAST_INSTALL_TIMEOUT"])

        debug_flag = os.environ.get("PRECAST_DEBUG") or os.environ.get("DEBUG_ERRORS") or ""
        kwargs["debug"] = debug_flag.strip().lower() in _TRUTHY
        kwargs["verbose"] = os.environ.get("PRECAST_VERBOSE", "").strip().lower() in _TRUTHY

        kwargs.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**kwargs)
