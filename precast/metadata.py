"""Sidecar ``precast.json`` metadata.

The file records the resolved :class:`ProjectConfig` of a generated project so
that ``precast add`` can reload the stack without prompting again.  Keys are
camelCase; ``projectPath`` is omitted because it is implied by the location of
the file.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from precast import __version__
from precast.stack.models import ConfigUpdate, ProjectConfig
from precast.utils import load_json, save_json

METADATA_FILE = "precast.json"
SCHEMA_URL = "https://precast.dev/precast.schema.json"

_HEADER_KEYS = ("$schema", "version", "createdAt")


async def write_metadata(
    config: ProjectConfig,
    project_dir: str | Path,
    filename: str = METADATA_FILE,
) -> Path:
    """Write the sidecar for *config* into *project_dir*."""
    document: dict[str, Any] = {
        "$schema": SCHEMA_URL,
        "version": __version__,
        "createdAt": datetime.now(timezone.utc).isoformat(),
        **config.model_dump(by_alias=True, exclude={"project_path"}),
    }
    return await save_json(document, Path(project_dir) / filename)


def read_metadata(project_dir: str | Path, filename: str = METADATA_FILE) -> dict[str, Any] | None:
    """Return the raw sidecar document, or ``None`` when there is none.

    Raises:
        ValueError: If the file exists but is not a JSON object.
    """
    path = Path(project_dir) / filename
    if not path.is_file():
        return None
    return load_json(path)


def detect_project(project_dir: str | Path, filename: str = METADATA_FILE) -> ProjectConfig | None:
    """Rebuild the :class:`ProjectConfig` of an existing precast project.

    ``None`` means *project_dir* was not created by precast.
    """
    document = read_metadata(project_dir, filename)
    if document is None:
        return None
    fields = {k: v for k, v in document.items() if k not in _HEADER_KEYS}
    fields.setdefault("name", Path(project_dir).resolve().name)
    fields["projectPath"] = str(Path(project_dir).resolve())
    return ProjectConfig.model_validate(fields)


async def update_metadata(
    project_dir: str | Path,
    update: ConfigUpdate,
    filename: str = METADATA_FILE,
    resolved: ProjectConfig | None = None,
) -> Path | None:
    """Merge the explicitly set fields of *update* into an existing sidecar.

    When *resolved* is given the values of those fields are taken from it, so
    the sidecar records the normalised configuration the setup steps used.

    Header keys (``$schema``, ``version``, ``createdAt``) are preserved.
    Returns ``None`` when the project has no sidecar.
    """
    document = read_metadata(project_dir, filename)
    if document is None:
        return None
    changes = update.model_dump(exclude_unset=True)
    if resolved is not None:
        changes = {name: getattr(resolved, name) for name in changes}
    aliases = {name: field.alias or name for name, field in ProjectConfig.model_fields.items()}
    for name, value in changes.items():
        document[aliases[name]] = value
    return await save_json(document, Path(project_dir) / filename)
