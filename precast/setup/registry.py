"""Known ids for the optional feature flags.

The CLI checks user-supplied ids against these tables before any project
files are written, so a typo fails fast with the list of supported values
instead of surfacing later as a failed setup step.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from precast.stack.models import NONE

from .ai_context import CONTEXT_FILES
from .api_client import API_CLIENT_GENERATORS
from .auth import AUTH_ALIASES, AUTH_GENERATORS
from .color_palette import load_palettes
from .deployment import DEPLOYMENT_GENERATORS
from .plugins import load_plugins
from .ui_library import UI_GENERATORS

# Config field -> (label, loader of the supported ids)
FEATURE_IDS: dict[str, tuple[str, Callable[[], Iterable[str]]]] = {
    "auth_provider": ("auth provider", lambda: [*AUTH_GENERATORS, *AUTH_ALIASES]),
    "ui_library": ("UI library", lambda: UI_GENERATORS),
    "api_client": ("API client", lambda: API_CLIENT_GENERATORS),
    "deployment_method": ("deployment method", lambda: DEPLOYMENT_GENERATORS),
    "color_palette": ("color palette", lambda: load_palettes()),
    "ai_context": ("AI assistant", lambda: CONTEXT_FILES),
    "plugins": ("plugin", lambda: load_plugins()),
}


def _values(value: Any) -> list[str]:
    if value is None:
        return []
    items = value if isinstance(value, list) else [value]
    return [str(item).strip().lower() for item in items]


def feature_errors(values: Mapping[str, Any]) -> list[str]:
    """One message per unknown id in *values* (keyed by config field)."""
    errors: list[str] = []
    for field, (label, loader) in FEATURE_IDS.items():
        supported: list[str] | None = None
        for value in _values(values.get(field)):
            if value in ("", NONE):
                continue
            if supported is None:
                supported = [str(item) for item in loader()]
            if value not in supported:
                errors.append(
                    f'Invalid {label} "{value}". Supported values: {", ".join(supported)}'
                )
    return errors
