"""Next-choice recommendations for interactive prompting.

Recommendations are advisory: they order and pre-filter prompt choices but
never override an explicit selection and never reject a configuration.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .catalog import DEFAULT_SELECTIONS, StackCatalog, StackOption
from .models import NONE, Axis, ProjectConfig
from .validator import ConfigValidator

POPULAR_FRAMEWORKS = ["react", "vue", "next"]

BACKEND_RECOMMENDATIONS: dict[str, list[str]] = {
    "next": ["next", "none"],
    "nuxt": ["nuxt", "none"],
    "remix": ["remix", "none"],
    "react": ["express", "fastify", "hono", "none"],
    "vue": ["express", "fastify", "hono", "none"],
    "angular": ["express", "fastify", "nestjs", "none"],
    "svelte": ["sveltekit", "express", "fastify", "none"],
    "solid": ["express", "fastify", "hono", "none"],
    "vanilla": ["express", "fastify", "hono", "none"],
    "astro": ["astro", "none"],
}
GENERIC_BACKENDS = ["express", "fastify", "hono", "none"]

GENERIC_DATABASES = ["postgres", "mysql", "mongodb", "sqlite", "none"]

ORM_RECOMMENDATIONS: dict[str, list[str]] = {
    "postgres": ["prisma", "drizzle", "none"],
    "mysql": ["prisma", "drizzle", "none"],
    "mongodb": ["mongoose", "prisma", "none"],
    "sqlite": ["prisma", "drizzle", "none"],
    "none": ["none"],
}


def _as_dict(partial: ProjectConfig | Mapping[str, Any] | None) -> dict[str, Any]:
    if partial is None:
        return {}
    if isinstance(partial, ProjectConfig):
        return partial.model_dump()
    return {k: v for k, v in partial.items() if v is not None}


class ConfigRecommender:
    """Suggests options for the next unanswered axis.

    Args:
        validator: Used by :meth:`prompt_choices` to hide incompatible options.
        catalog: Source of option listings; defaults to the validator's catalog.
    """

    def __init__(
        self,
        validator: ConfigValidator | None = None,
        catalog: StackCatalog | None = None,
    ) -> None:
        self.validator = validator or ConfigValidator()
        self.catalog = catalog or self.validator.catalog or StackCatalog()

    def get_recommendations(
        self, partial: ProjectConfig | Mapping[str, Any] | None
    ) -> dict[str, list[str]]:
        """Map each axis that is next in line to its recommended ids.

        An axis is "next in line" when the axis before it is answered and it
        is not.  Several axes can be reported at once.
        """
        data = _as_dict(partial)
        framework = data.get("framework")
        backend = data.get("backend")
        database = data.get("database")

        recommendations: dict[str, list[str]] = {}
        if not framework:
            recommendations["framework"] = list(POPULAR_FRAMEWORKS)
        if framework and not backend:
            recommendations["backend"] = list(
                BACKEND_RECOMMENDATIONS.get(framework, GENERIC_BACKENDS)
            )
        if backend and not database:
            recommendations["database"] = [NONE] if backend == NONE else list(GENERIC_DATABASES)
        if database and not data.get("orm"):
            recommendations["orm"] = list(ORM_RECOMMENDATIONS.get(database, [NONE]))
        return recommendations

    def prompt_choices(
        self, axis: Axis | str, partial: ProjectConfig | Mapping[str, Any] | None = None
    ) -> list[StackOption]:
        """Options to offer for *axis* given the answers so far.

        Recommended ids come first (in recommendation order), then the rest of
        the catalog listing.  Options that :meth:`ConfigValidator.is_compatible`
        rejects against the partial configuration are dropped; if that would
        leave nothing, the unfiltered listing is returned instead.
        """
        axis = Axis(axis)
        data = _as_dict(partial)
        options = self.catalog.list_options(axis)

        recommended = self.get_recommendations(data).get(axis.value, [])
        rank = {option_id: index for index, option_id in enumerate(recommended)}
        options.sort(key=lambda o: rank.get(o.id, len(rank)))

        # Unanswered axes fall back to catalog defaults so the schema pass
        # only judges the candidate.
        base: dict[str, Any] = {
            **DEFAULT_SELECTIONS,
            "name": "preview",
            "typescript": True,
            "git": True,
            "docker": False,
            **data,
        }
        compatible = [
            o for o in options
            if self.validator.is_compatible(axis.value, o.id, axis.value, o.id, base)
        ]
        return compatible or options
