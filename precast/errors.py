"""Exceptions raised while creating or enriching a project."""

from __future__ import annotations

from pathlib import Path


class ProjectCreationError(Exception):
    """Fatal failure while creating a project; the directory is rolled back."""


class DirectoryExistsError(ProjectCreationError):
    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Directory {self.path.name} already exists")


class UnknownFrameworkError(ProjectCreationError):
    def __init__(self, framework: str) -> None:
        self.framework = framework
        super().__init__(f"Unknown framework: {framework}")


class ConfigurationError(ProjectCreationError):
    """The configuration failed validation; carries every error message."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("Invalid configuration:\n" + "\n".join(f"  - {e}" for e in self.errors))


class SetupError(Exception):
    """A setup generator was asked to handle a stack it does not support."""
