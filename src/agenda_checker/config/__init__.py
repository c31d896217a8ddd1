"""Config loading: ``agenda-check.toml`` plus ``AGENDA_CHECK_`` env overrides, validated strictly."""

from agenda_checker.config.loader import (
    DEFAULT_CONFIG_FILE,
    ENV_PREFIX,
    ConfigLoadError,
    effective_config,
    load_config,
    resolve_sparql_credentials,
)
from agenda_checker.config.schema import (
    DEFAULT_CONFIG,
    CheckerConfig,
    ConfigValidationError,
    ConfigValidationIssue,
    apply_profile_overlay,
    default_config,
    merge_config,
    redact_config,
    validate_config,
)

__all__ = [
    "CheckerConfig",
    "ConfigLoadError",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "DEFAULT_CONFIG",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "apply_profile_overlay",
    "default_config",
    "effective_config",
    "load_config",
    "merge_config",
    "redact_config",
    "resolve_sparql_credentials",
    "validate_config",
]
