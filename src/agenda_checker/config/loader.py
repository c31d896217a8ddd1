"""
agenda-checker - runtime config loader.

File: src/agenda_checker/config/loader.py

Purpose
- Build the effective config from defaults, ``agenda-check.toml``, a named
  profile, ``AGENDA_CHECK_<SECTION>_<KEY>`` env vars and CLI overrides,
  in that order of increasing precedence.
- Resolve SPARQL credentials from the env vars the config names.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from agenda_checker.config.schema import (
    DEFAULT_CONFIG,
    FIELD_RULES,
    apply_profile_overlay,
    default_config,
    merge_config,
    redact_config,
    validate_config,
)

DEFAULT_CONFIG_FILE: Final[str] = "agenda-check.toml"
ENV_PREFIX: Final[str] = "AGENDA_CHECK_"

_TRUE: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE: Final[frozenset[str]] = frozenset({"0", "false", "no", "off"})


class ConfigLoadError(ValueError):
    """Raised when config cannot be read or an override cannot be coerced."""


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    cli_overrides: Mapping[str, object] | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Return the validated effective config.

    ``cli_overrides`` maps dotted keys such as ``"sparql.endpoint"`` to values;
    ``None`` values are ignored. Without ``config_path`` a missing
    ``./agenda-check.toml`` is fine; an explicit path must exist.
    """

    env = os.environ if environ is None else environ
    path = Path(config_path or DEFAULT_CONFIG_FILE).expanduser().resolve()

    config = validate_config(merge_config(default_config(), _read_toml(path, config_path is not None)))
    selected = (profile or env.get(f"{ENV_PREFIX}PROFILE") or "").strip() or None
    if selected is not None:
        config = apply_profile_overlay(config, selected)
    config = merge_config(config, _env_overrides(env))
    config = merge_config(config, _cli_overrides(cli_overrides or {}))
    config = validate_config(config, active_profile=selected)

    observability = config["observability"]
    observability["log_dir"] = _relative_to(observability["log_dir"], path.parent)
    return config


def effective_config(config: Mapping[str, Any]) -> dict[str, Any]:
    """Redacted copy of ``config`` for display."""

    return redact_config(config)


def resolve_sparql_credentials(
    config: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> tuple[str, str] | None:
    """Return ``(username, password)`` when both named env vars are set."""

    env = os.environ if environ is None else environ
    sparql = config["sparql"]
    username_env, password_env = sparql["username_env"], sparql["password_env"]
    username = env.get(username_env, "").strip()
    password = env.get(password_env, "")
    if not username and not password:
        return None
    if not username or not password:
        raise ConfigLoadError(
            f"SPARQL credentials need both {username_env} and {password_env} to be set"
        )
    return (username, password)


def _read_toml(path: Path, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigLoadError(f"config file not found: {path}")
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read config file {path}: {exc}") from exc


def _env_overrides(env: Mapping[str, str]) -> dict[str, dict[str, object]]:
    overrides: dict[str, dict[str, object]] = {}
    for section, rules in FIELD_RULES.items():
        defaults: Mapping[str, object] = DEFAULT_CONFIG[section]  # type: ignore[literal-required]
        for key in rules:
            name = f"{ENV_PREFIX}{section}_{key}".upper()
            if name in env:
                overrides.setdefault(section, {})[key] = _coerce(env[name], defaults[key], name)
    return overrides


def _coerce(raw: str, default: object, name: str) -> object:
    value = raw.strip()
    if isinstance(default, bool):
        if value.lower() in _TRUE:
            return True
        if value.lower() in _FALSE:
            return False
        raise ConfigLoadError(f"{name} must be a boolean (true/false/1/0/yes/no/on/off)")
    if isinstance(default, (int, float)):
        try:
            return type(default)(value)
        except ValueError as exc:
            kind = "an integer" if isinstance(default, int) else "a number"
            raise ConfigLoadError(f"{name} must be {kind}") from exc
    return value


def _cli_overrides(overrides: Mapping[str, object]) -> dict[str, dict[str, object]]:
    payload: dict[str, dict[str, object]] = {}
    for dotted, value in overrides.items():
        if value is None:
            continue
        section, _, key = dotted.partition(".")
        if not key:
            raise ConfigLoadError(f"invalid CLI override key {dotted!r}")
        payload.setdefault(section, {})[key] = value
    return payload


def _relative_to(raw: str, base_dir: Path) -> str:
    candidate = Path(os.path.expandvars(raw)).expanduser()
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    return Path(os.path.normpath(candidate)).as_posix()


__all__ = [
    "ConfigLoadError",
    "DEFAULT_CONFIG_FILE",
    "ENV_PREFIX",
    "effective_config",
    "load_config",
    "resolve_sparql_credentials",
]
