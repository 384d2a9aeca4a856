"""Compatibility validation for stack configurations.

``ConfigValidator`` judges a fully or partially specified configuration.  It
runs three independent passes and aggregates their messages:

1. every registered :class:`CompatibilityRule`, in registration order;
2. schema validation (name format, field types);
3. the catalog's relational constraints (unknown ids, ``dependencies``,
   ``incompatible`` lists, power-up requirements and conflicts).

Validation never raises and never mutates its input.  Normalisation of user
input is a separate pure step, :func:`normalize`, run before validation.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, StrictBool, StringConstraints, ValidationError, field_validator

from precast.utils import err_console

from .catalog import (
    DOCKER_POWERUPS,
    REACT_FAMILY,
    VUE_FAMILY,
    StackCatalog,
    StackOption,
)
from .models import NONE, Axis, ProjectConfig, ValidationResult, is_set

Severity = Literal["error", "warning"]

NAME_PATTERN = re.compile(r"^[a-z0-9-]+$")
DEFAULT_CATALOG = StackCatalog()


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CompatibilityRule:
    """A named predicate over a configuration.

    ``check`` returns ``True`` when the configuration satisfies the rule; a
    ``False`` result contributes ``message`` to the errors or warnings of the
    result depending on ``severity``.
    """

    name: str
    check: Callable[[ProjectConfig], bool]
    message: str
    severity: Severity = "error"


def _mongoose_requires_mongodb(config: ProjectConfig) -> bool:
    return not (config.orm == "mongoose" and config.database != "mongodb")


def _prisma_sqlite(config: ProjectConfig) -> bool:
    return not (config.orm == "prisma" and config.database == "sqlite")


def _no_backend_no_database(config: ProjectConfig) -> bool:
    return not (config.backend == NONE and config.database != NONE)


def _docker_wants_database(config: ProjectConfig) -> bool:
    return not (config.docker is True and config.database == NONE)


def _typescript_recommended(config: ProjectConfig) -> bool:
    return not (config.typescript is False and getattr(config, "framework", None) in ("angular", "vue"))


def _powerups_need_docker(config: ProjectConfig) -> bool:
    if config.docker is True or not config.powerups:
        return True
    return not any(p in DOCKER_POWERUPS for p in config.powerups)


def _tunnel_with_traefik(config: ProjectConfig) -> bool:
    powerups = config.powerups or []
    has_tunnel = any(p in ("ngrok", "cloudflare-tunnel") for p in powerups)
    return not (has_tunnel and "traefik" not in powerups and is_set(config.backend))


def default_rules() -> list[CompatibilityRule]:
    """The built-in rule set, in evaluation order."""
    return [
        CompatibilityRule(
            name="mongoose-requires-mongodb",
            check=_mongoose_requires_mongodb,
            message="Mongoose ORM can only be used with MongoDB",
            severity="error",
        ),
        CompatibilityRule(
            name="prisma-sqlite-warning",
            check=_prisma_sqlite,
            message="SQLite with Prisma is not recommended for production use",
            severity="warning",
        ),
        CompatibilityRule(
            name="no-backend-no-database",
            check=_no_backend_no_database,
            message="Cannot use a database without a backend",
            severity="error",
        ),
        CompatibilityRule(
            name="docker-database-recommendation",
            check=_docker_wants_database,
            message="Docker setup is most useful when you have a database",
            severity="warning",
        ),
        CompatibilityRule(
            name="typescript-recommended",
            check=_typescript_recommended,
            message="TypeScript is highly recommended for Angular and Vue projects",
            severity="warning",
        ),
        CompatibilityRule(
            name="powerups-docker-dependency",
            check=_powerups_need_docker,
            message="Some selected PowerUps require Docker. Please enable Docker with --docker flag",
            severity="error",
        ),
        CompatibilityRule(
            name="tunnel-with-traefik-recommendation",
            check=_tunnel_with_traefik,
            message="Consider adding Traefik PowerUp for better routing when using tunnels with a backend",
            severity="warning",
        ),
    ]


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_AxisValue = Annotated[str, StringConstraints(strict=True, min_length=1)]


class _ConfigSchema(BaseModel):
    name: Annotated[str, StringConstraints(strict=True, min_length=1)]
    framework: _AxisValue
    backend: _AxisValue
    database: _AxisValue
    orm: _AxisValue
    styling: _AxisValue
    typescript: StrictBool
    git: StrictBool
    docker: StrictBool

    @field_validator("name")
    @classmethod
    def _name_format(cls, value: str) -> str:
        if not NAME_PATTERN.match(value):
            raise ValueError(
                "Project name must be lowercase and contain only letters, numbers, and hyphens"
            )
        return value


_SCHEMA_FIELDS = tuple(_ConfigSchema.model_fields)
_MISSING = object()


def _schema_errors(config: ProjectConfig) -> list[str]:
    data = {}
    for field in _SCHEMA_FIELDS:
        value = getattr(config, field, _MISSING)
        if value is not _MISSING:
            data[field] = value
    try:
        _ConfigSchema.model_validate(data)
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"])
            message = err["msg"].removeprefix("Value error, ")
            messages.append(f"{field}: {message}")
        return messages
    return []


# ---------------------------------------------------------------------------
# Normalisation
# ---------------------------------------------------------------------------

_ALIASES: dict[str, dict[str, str]] = {
    "framework": {"nextjs": "next", "next.js": "next", "reactjs": "react", "vuejs": "vue"},
    "backend": {"nodejs": "node", "nest": "nestjs", "workers": "cloudflare-workers"},
    "database": {
        "postgresql": "postgres",
        "pg": "postgres",
        "mongo": "mongodb",
        "sqlite3": "sqlite",
        "d1": "cloudflare-d1",
    },
    "orm": {"drizzle-orm": "drizzle"},
    "styling": {"tailwindcss": "tailwind", "sass": "scss"},
    "runtime": {"nodejs": "node"},
}

_OPTIONAL_IDS = (
    "ui_library",
    "auth_provider",
    "deployment_method",
    "color_palette",
    "ai_assistant",
    "api_client",
)
_LIST_IDS = ("ai_context", "powerups", "plugins", "mcp_servers")


def _clean_id(value: Any) -> Any:
    return value.strip().lower() if isinstance(value, str) else value


def normalize(config: ProjectConfig) -> ProjectConfig:
    """Return a canonical copy of *config*; the input is left untouched.

    * axis ids are stripped, lower-cased and legacy aliases mapped
      (``postgresql`` -> ``postgres``, ``nextjs`` -> ``next``...);
    * empty optional selections become ``None``;
    * list selections are cleaned and de-duplicated, keeping first occurrence;
    * ``language`` follows the ``typescript`` flag.
    """
    changes: dict[str, Any] = {}
    for axis in Axis:
        value = _clean_id(getattr(config, axis.value))
        changes[axis.value] = _ALIASES.get(axis.value, {}).get(value, value)

    for field in _OPTIONAL_IDS:
        value = _clean_id(getattr(config, field))
        changes[field] = value or None

    for field in _LIST_IDS:
        seen: list[str] = []
        for item in getattr(config, field):
            cleaned = _clean_id(item)
            if cleaned and cleaned not in seen:
                seen.append(cleaned)
        changes[field] = seen

    if changes["backend"] == "fastapi":
        changes["language"] = "python"
    else:
        changes["language"] = "typescript" if config.typescript else "javascript"

    return config.model_copy(update=changes)


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------


def _coerce(config: ProjectConfig | Mapping[str, Any]) -> ProjectConfig:
    if isinstance(config, ProjectConfig):
        return config
    fields = ProjectConfig.model_fields
    return ProjectConfig.model_construct(**{k: v for k, v in dict(config).items() if k in fields})


class ConfigValidator:
    """Validator for project configurations.

    Construct one per process (or per test) and pass it to whatever needs it.
    Rules can be added and removed by name to support plugin-contributed
    checks without touching the built-in table.

    Args:
        catalog: Catalog used for the relational pass.  ``None`` disables that
            pass so only rules and schema are evaluated.
        rules: Initial rule list; defaults to :func:`default_rules`.
    """

    def __init__(
        self,
        catalog: StackCatalog | None = DEFAULT_CATALOG,
        rules: list[CompatibilityRule] | None = None,
    ) -> None:
        self.catalog = catalog
        self._rules: list[CompatibilityRule] = list(default_rules() if rules is None else rules)

    # -- Rule registry -----------------------------------------------------

    @property
    def rules(self) -> list[CompatibilityRule]:
        return list(self._rules)

    def add_rule(self, rule: CompatibilityRule) -> None:
        self._rules.append(rule)

    def remove_rule(self, name: str) -> bool:
        """Remove the first rule called *name*; return whether one was found."""
        for index, rule in enumerate(self._rules):
            if rule.name == name:
                del self._rules[index]
                return True
        return False

    # -- Validation --------------------------------------------------------

    def validate(self, config: ProjectConfig | Mapping[str, Any]) -> ValidationResult:
        """Validate *config* and return every error and warning found."""
        candidate = _coerce(config)
        errors: list[str] = []
        warnings: list[str] = []

        for rule in self._rules:
            try:
                passed = rule.check(candidate)
            except Exception as exc:
                err_console.print(
                    f"[red]Error executing validation rule \"{rule.name}\": {exc}[/red]"
                )
                errors.append(f'Validation rule "{rule.name}" failed to execute')
                continue
            if not passed:
                (errors if rule.severity == "error" else warnings).append(rule.message)

        errors.extend(_schema_errors(candidate))

        if self.catalog is not None:
            errors.extend(
                m for m in self._catalog_errors(candidate) if m not in errors
            )

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def is_compatible(
        self,
        field1: str,
        value1: Any,
        field2: str,
        value2: Any,
        config: ProjectConfig | Mapping[str, Any],
    ) -> bool:
        """Whether ``field1=value1`` and ``field2=value2`` can coexist in *config*.

        Pure: *config* is copied, never modified.
        """
        base = config.model_dump() if isinstance(config, ProjectConfig) else dict(config)
        return self.validate({**base, field1: value1, field2: value2}).valid

    # -- Catalog relations -------------------------------------------------

    def _catalog_errors(self, config: ProjectConfig) -> list[str]:
        catalog = self.catalog
        assert catalog is not None
        errors: list[str] = []
        reported_pairs: set[frozenset[str]] = set()

        selections: dict[Axis, str] = {}
        for axis in Axis:
            value = getattr(config, axis.value, None)
            if isinstance(value, str) and value:
                selections[axis] = value
        # Mistyped fields are already reported by the schema pass.
        framework = selections.get(Axis.FRAMEWORK, "")

        for axis, value in selections.items():
            option = catalog.get_option(axis, value)
            if option is None:
                errors.append(f"Unknown {axis.value}: {value}")
                continue
            if option.id == NONE:
                continue

            for dep in option.dependencies:
                problem = self._unmet_dependency(option, dep, config, framework)
                if problem:
                    errors.append(problem)

            others = {v for a, v in selections.items() if a != axis and v != NONE}
            for other in option.incompatible:
                hit = (
                    (other == "typescript" and config.typescript is True)
                    or other in others
                    or (other in ("database", "orm") and is_set(getattr(config, other, None)))
                )
                pair = frozenset((option.id, other))
                if hit and pair not in reported_pairs:
                    reported_pairs.add(pair)
                    errors.append(f"{option.name} is incompatible with {self._display(other)}")

        orm = catalog.get_option(Axis.ORM, selections.get(Axis.ORM))
        if orm is not None and orm.id != NONE and getattr(config, "database", NONE) == NONE:
            errors.append(f"{orm.name} requires a database")

        powerups = getattr(config, "powerups", None)
        if isinstance(powerups, list):
            powerups = [p for p in powerups if isinstance(p, str)]
            if powerups:
                errors.extend(self._powerup_errors(powerups, framework))

        return list(dict.fromkeys(errors))

    def _unmet_dependency(
        self, option: StackOption, dep: str, config: ProjectConfig, framework: str
    ) -> str | None:
        if dep == "typescript":
            return None if config.typescript is True else f"{option.name} requires TypeScript"
        if dep == "node":
            return None if is_set(getattr(config, "backend", None)) else f"{option.name} requires a backend"
        if dep == "react":
            return None if framework in REACT_FAMILY else f"{option.name} requires React"
        if dep == "vue":
            return None if framework in VUE_FAMILY else f"{option.name} requires Vue"
        target = self.catalog.get_option(Axis.FRAMEWORK, dep, include_disabled=True)
        if target is not None and framework != dep:
            return f"{option.name} requires the {target.name} framework"
        # Language-level (python) and database-family dependencies are advisory.
        return None

    def _display(self, option_id: str) -> str:
        if option_id == "typescript":
            return "TypeScript"
        for axis in Axis:
            option = self.catalog.get_option(axis, option_id, include_disabled=True)
            if option is not None:
                return option.name
        return option_id

    def _powerup_errors(self, powerups: list[str], framework: str) -> list[str]:
        errors: list[str] = []
        for powerup_id in powerups:
            powerup = self.catalog.get_powerup(powerup_id)
            if powerup is None:
                errors.append(f"Unknown powerup: {powerup_id}")
                continue

            if "*" not in powerup.frameworks and framework not in powerup.frameworks:
                errors.append(f"{powerup.name} is not compatible with {framework}")

            for requirement in powerup.requires:
                satisfied = (
                    requirement == framework
                    or (requirement == "react" and framework in REACT_FAMILY)
                    or (requirement == "vue" and framework in VUE_FAMILY)
                )
                if not satisfied:
                    errors.append(f"{powerup.name} requires {requirement}")

            if framework in powerup.incompatible:
                errors.append(f"{powerup.name} is incompatible with {framework}")

            for other_id in powerups:
                if other_id != powerup_id and other_id in powerup.conflicts:
                    other = self.catalog.get_powerup(other_id)
                    errors.append(f"{powerup.name} conflicts with {other.name if other else other_id}")
        return errors
