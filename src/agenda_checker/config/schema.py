"""
agenda-checker - configuration schema and validation.

File: src/agenda_checker/config/schema.py

Purpose
- Built-in defaults plus strict validation of ``agenda-check.toml``.

Functional requirements
- Every field belongs to a known section and is checked by one rule in
  ``FIELD_RULES``; all failures are reported together with dotted paths.
- Profiles are partial overlays over the same sections.
- Credentials are only ever referenced by env var name (``*_env`` keys).
"""

from __future__ import annotations

import copy
import math
import re
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Final, Literal, TypedDict
from urllib.parse import urlsplit

from agenda_checker.constants import (
    CONFIG_SCHEMA_VERSION,
    DEFAULT_REPAIR_GRAPH,
    DEFAULT_SPARQL_ENDPOINT,
    PRECEDES_TREATMENT_PREDICATE,
)

_ENV_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")
_PROFILE_NAME = re.compile(r"^[a-z][a-z0-9_-]*$")
_SENSITIVE_TOKENS: Final[frozenset[str]] = frozenset(
    {"secret", "token", "password", "passwd", "credential", "credentials", "auth"}
)


class SparqlConfig(TypedDict):
    endpoint: str
    timeout_seconds: float
    max_retries: int
    username_env: str
    password_env: str


class RepairConfig(TypedDict):
    graph: str
    precedes_treatment_predicate: str


class ObservabilityConfig(TypedDict):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"]
    log_format: Literal["json", "text"]
    log_dir: str
    log_to_file: bool
    redact_secrets: bool


class CheckerConfig(TypedDict):
    meta: dict[str, int]
    sparql: SparqlConfig
    repair: RepairConfig
    observability: ObservabilityConfig
    profiles: dict[str, dict[str, dict[str, object]]]


DEFAULT_CONFIG: Final[CheckerConfig] = {
    "meta": {"schema_version": CONFIG_SCHEMA_VERSION},
    "sparql": {
        "endpoint": DEFAULT_SPARQL_ENDPOINT,
        "timeout_seconds": 30.0,
        "max_retries": 2,
        "username_env": "AGENDA_CHECK_SPARQL_USERNAME",
        "password_env": "AGENDA_CHECK_SPARQL_PASSWORD",
    },
    "repair": {
        "graph": DEFAULT_REPAIR_GRAPH,
        "precedes_treatment_predicate": PRECEDES_TREATMENT_PREDICATE,
    },
    "observability": {
        "log_level": "WARNING",
        "log_format": "text",
        "log_dir": "logs/",
        "log_to_file": False,
        "redact_secrets": True,
    },
    "profiles": {
        "debug": {
            "observability": {"log_level": "DEBUG", "log_format": "json", "log_to_file": True},
        },
    },
}


@dataclass(frozen=True, slots=True)
class ConfigValidationIssue:
    path: str
    message: str


class ConfigValidationError(ValueError):
    """Raised when strict config validation fails."""

    def __init__(self, issues: Sequence[ConfigValidationIssue]) -> None:
        self.issues = tuple(issues)
        rendered = "\n".join(f"- {item.path}: {item.message}" for item in self.issues)
        super().__init__(f"invalid config:\n{rendered or '- unknown validation failure'}")


class _IssueCollector:
    __slots__ = ("items",)

    def __init__(self) -> None:
        self.items: list[ConfigValidationIssue] = []

    def add(self, path: str, message: str) -> None:
        self.items.append(ConfigValidationIssue(path=path, message=message))


# ---------------------------------------------------------------------------
# Field rules: each returns the normalized value or raises ValueError.
# ---------------------------------------------------------------------------

_Rule = Callable[[object], object]


def _text(value: object) -> str:
    if not isinstance(value, str):
        raise ValueError(f"expected string, got {type(value).__name__}")
    if not value.strip():
        raise ValueError("must not be empty")
    return value.strip()


def _http_url(value: object) -> str:
    url = _text(value)
    parts = urlsplit(url)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValueError("must be an absolute http(s) URL")
    if parts.username is not None or parts.password is not None:
        raise ValueError("embedded credentials are forbidden; use username_env/password_env")
    return url


def _bare_iri(value: object) -> str:
    text = _text(value)
    if any(char in text for char in '<>"{}|^`\\ '):
        raise ValueError("must be a bare IRI without angle brackets or whitespace")
    if ":" not in text:
        raise ValueError("must be an absolute IRI")
    return text


def _env_name(value: object) -> str:
    name = _text(value)
    if not _ENV_NAME.fullmatch(name):
        raise ValueError("must be an env var name (example: AGENDA_CHECK_SPARQL_PASSWORD)")
    return name


def _positive_seconds(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected number, got {type(value).__name__}")
    if not math.isfinite(value) or value <= 0:
        raise ValueError("must be a finite number > 0")
    return float(value)


def _retry_count(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected integer, got {type(value).__name__}")
    if value < 0:
        raise ValueError("must be >= 0")
    return value


def _flag(value: object) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"expected boolean, got {type(value).__name__}")
    return value


def _one_of(*allowed: str) -> _Rule:
    def rule(value: object) -> str:
        text = _text(value)
        if text not in allowed:
            raise ValueError(f"invalid value {text!r}; expected one of: {', '.join(allowed)}")
        return text

    return rule


FIELD_RULES: Final[dict[str, dict[str, _Rule]]] = {
    "sparql": {
        "endpoint": _http_url,
        "timeout_seconds": _positive_seconds,
        "max_retries": _retry_count,
        "username_env": _env_name,
        "password_env": _env_name,
    },
    "repair": {
        "graph": _bare_iri,
        "precedes_treatment_predicate": _bare_iri,
    },
    "observability": {
        "log_level": _one_of("DEBUG", "INFO", "WARNING", "ERROR"),
        "log_format": _one_of("json", "text"),
        "log_dir": _text,
        "log_to_file": _flag,
        "redact_secrets": _flag,
    },
}


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def default_config() -> dict[str, Any]:
    return copy.deepcopy(dict(DEFAULT_CONFIG))


def migration_guidance(found_version: int) -> str:
    if found_version < CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is older than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade agenda-check.toml to the current schema"
        )
    if found_version > CONFIG_SCHEMA_VERSION:
        return (
            f"schema version {found_version} is newer than supported {CONFIG_SCHEMA_VERSION}; "
            "upgrade agenda-checker"
        )
    return "schema version is current"


def merge_config(base: Mapping[str, Any], overlay: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``overlay`` merged in, table by table."""

    merged = copy.deepcopy(dict(base))
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def validate_config(config: object, *, active_profile: str | None = None) -> dict[str, Any]:
    """Return a normalized copy of ``config`` or raise ``ConfigValidationError``."""

    issues = _IssueCollector()
    if not isinstance(config, Mapping):
        raise ConfigValidationError(
            [ConfigValidationIssue("<root>", f"expected object, got {type(config).__name__}")]
        )

    _reject_unknown(config, {"meta", "profiles", *FIELD_RULES}, "", issues)
    normalized: dict[str, Any] = {"meta": _check_meta(config.get("meta"), issues)}
    for section in FIELD_RULES:
        normalized[section] = _check_section(config.get(section), section, issues, partial=False)
    normalized["profiles"] = _check_profiles(config.get("profiles", {}), issues)

    if active_profile and active_profile not in normalized["profiles"]:
        issues.add("profiles", f"profile {active_profile!r} is not defined")
    if issues.items:
        raise ConfigValidationError(issues.items)
    return normalized


def apply_profile_overlay(config: Mapping[str, Any], profile: str) -> dict[str, Any]:
    """Merge the named profile over ``config`` and re-validate the result."""

    profiles = config.get("profiles")
    if not isinstance(profiles, Mapping) or profile not in profiles:
        raise ConfigValidationError(
            [ConfigValidationIssue("profiles", f"profile {profile!r} is not defined")]
        )
    return validate_config(merge_config(config, profiles[profile]), active_profile=profile)


def redact_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``config`` with values under credential-looking keys masked."""

    out: dict[str, Any] = {}
    for key in sorted(config):
        value = config[key]
        if is_sensitive_key(key):
            out[key] = "<redacted>"
        elif isinstance(value, Mapping):
            out[key] = redact_config(value)
        else:
            out[key] = value
    return out


def is_sensitive_key(key: str) -> bool:
    lowered = key.lower()
    if lowered.endswith("_env"):
        return False
    return any(token in _SENSITIVE_TOKENS for token in re.split(r"[^a-z0-9]+", lowered))


# ---------------------------------------------------------------------------
# Section checks
# ---------------------------------------------------------------------------


def _check_meta(payload: object, issues: _IssueCollector) -> dict[str, int]:
    if not isinstance(payload, Mapping):
        issues.add("meta", "missing required section")
        return {}
    _reject_unknown(payload, {"schema_version"}, "meta", issues)
    version = payload.get("schema_version")
    if isinstance(version, bool) or not isinstance(version, int):
        issues.add("meta.schema_version", "expected integer")
    elif version != CONFIG_SCHEMA_VERSION:
        issues.add("meta.schema_version", migration_guidance(version))
    else:
        return {"schema_version": version}
    return {}


def _check_section(
    payload: object,
    path: str,
    issues: _IssueCollector,
    *,
    partial: bool,
) -> dict[str, Any]:
    section = path.rsplit(".", 1)[-1]
    if not isinstance(payload, Mapping):
        issues.add(path, "missing required section" if payload is None else "expected table")
        return {}

    rules = FIELD_RULES[section]
    _reject_unknown(payload, set(rules), path, issues)
    out: dict[str, Any] = {}
    for key, rule in rules.items():
        if key not in payload:
            if not partial:
                issues.add(f"{path}.{key}", "missing required field")
            continue
        try:
            out[key] = rule(payload[key])
        except ValueError as exc:
            issues.add(f"{path}.{key}", str(exc))
    return out


def _check_profiles(payload: object, issues: _IssueCollector) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        issues.add("profiles", "expected table")
        return {}
    out: dict[str, Any] = {}
    for name in sorted(payload):
        path = f"profiles.{name}"
        overlay = payload[name]
        if not _PROFILE_NAME.fullmatch(name):
            issues.add(path, "profile names must match [a-z][a-z0-9_-]*")
        elif not isinstance(overlay, Mapping):
            issues.add(path, "profile overlay must be a table")
        else:
            _reject_unknown(overlay, set(FIELD_RULES), path, issues)
            out[name] = {
                section: _check_section(overlay[section], f"{path}.{section}", issues, partial=True)
                for section in FIELD_RULES
                if section in overlay
            }
    return out


def _reject_unknown(
    payload: Mapping[str, object],
    allowed: set[str],
    path: str,
    issues: _IssueCollector,
) -> None:
    for key in sorted(set(payload) - allowed):
        key_path = f"{path}.{key}" if path else key
        if is_sensitive_key(key):
            issues.add(key_path, "embedded secret values are forbidden; use an *_env key")
        else:
            issues.add(key_path, "unknown field")


__all__ = [
    "CheckerConfig",
    "ConfigValidationError",
    "ConfigValidationIssue",
    "DEFAULT_CONFIG",
    "FIELD_RULES",
    "apply_profile_overlay",
    "default_config",
    "is_sensitive_key",
    "merge_config",
    "migration_guidance",
    "redact_config",
    "validate_config",
]
