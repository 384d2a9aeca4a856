"""Stack catalog, configuration models, validation and recommendations."""

from .catalog import DEFAULT_SELECTIONS, PowerUpOption, StackCatalog, StackOption
from .models import NONE, Axis, ConfigUpdate, ProjectConfig, ValidationResult, is_set
from .recommender import ConfigRecommender
from .validator import CompatibilityRule, ConfigValidator, default_rules, normalize

__all__ = [
    "Axis",
    "CompatibilityRule",
    "ConfigRecommender",
    "ConfigUpdate",
    "ConfigValidator",
    "DEFAULT_SELECTIONS",
    "NONE",
    "PowerUpOption",
    "ProjectConfig",
    "StackCatalog",
    "StackOption",
    "ValidationResult",
    "default_rules",
    "is_set",
    "normalize",
]
