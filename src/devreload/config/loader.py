"""Configuration file loading.

Handles:
- YAML file parsing
- Environment variable overrides
- Conversion from dict to the typed Settings dataclasses
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml

from devreload.config.schema import (
    DEFAULT_MAX_AGE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_ROUTE,
    LoggingConfig,
    ReloadConfig,
    Settings,
)

_log = logging.getLogger("devreload.config")

CONFIG_FILENAME = "devreload.yaml"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file, returning an empty dict if missing or invalid."""
    if not path.exists():
        return {}

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except yaml.YAMLError as e:
        _log.warning("Invalid YAML in %s: %s", path, e)
        return {}
    except OSError as e:
        _log.warning("Error reading %s: %s", path, e)
        return {}


def _parse_bool(value: str) -> bool | None:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return None


def _parse_float(name: str, value: str) -> float | None:
    try:
        return float(value)
    except ValueError:
        _log.warning("Ignoring %s=%r: not a number", name, value)
        return None


def env_overrides() -> dict[str, Any]:
    """Build a config dict from DEVRELOAD_* environment variables."""
    reload: dict[str, Any] = {}
    log: dict[str, Any] = {}

    enabled = os.environ.get("DEVRELOAD_ENABLED")
    if enabled is not None:
        parsed = _parse_bool(enabled)
        if parsed is None:
            _log.warning("Ignoring DEVRELOAD_ENABLED=%r: not a boolean", enabled)
        else:
            reload["enabled"] = parsed

    route = os.environ.get("DEVRELOAD_ROUTE")
    if route:
        reload["route"] = route

    max_age = os.environ.get("DEVRELOAD_MAX_AGE")
    if max_age:
        reload["max_age"] = _parse_float("DEVRELOAD_MAX_AGE", max_age)

    poll_interval = os.environ.get("DEVRELOAD_POLL_INTERVAL")
    if poll_interval:
        reload["poll_interval"] = _parse_float("DEVRELOAD_POLL_INTERVAL", poll_interval)

    log_path = os.environ.get("DEVRELOAD_LOG")
    if log_path:
        log["file"] = log_path

    log_level = os.environ.get("DEVRELOAD_LOG_LEVEL")
    if log_level:
        log["level"] = log_level

    overrides: dict[str, Any] = {}
    if reload:
        overrides["reload"] = reload
    if log:
        overrides["logging"] = log
    return overrides


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two section dicts; None never overrides a set value."""
    result = {section: dict(values) for section, values in base.items() if isinstance(values, dict)}
    for section, values in override.items():
        target = result.setdefault(section, {})
        target.update({k: v for k, v in values.items() if v is not None})
    return result


def _typed(data: dict[str, Any], key: str, kind: type | tuple[type, ...], default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    kinds = kind if isinstance(kind, tuple) else (kind,)
    # bool is an int subclass
    if not isinstance(value, kinds) or (isinstance(value, bool) and bool not in kinds):
        _log.warning("Ignoring %s=%r: wrong type", key, value)
        return default
    return value


def dict_to_settings(data: dict[str, Any]) -> Settings:
    """Convert a merged dict to typed Settings."""
    reload_data = data.get("reload") or {}
    max_age = _typed(reload_data, "max_age", (int, float), None)
    reload = ReloadConfig(
        route=_typed(reload_data, "route", str, DEFAULT_ROUTE),
        enabled=_typed(reload_data, "enabled", bool, True),
        max_age=DEFAULT_MAX_AGE if max_age is None else max_age,
        poll_interval=_typed(reload_data, "poll_interval", (int, float), DEFAULT_POLL_INTERVAL),
    )

    log_data = data.get("logging") or {}
    logging_config = LoggingConfig(
        level=_typed(log_data, "level", str, None),
        file=_typed(log_data, "file", str, None),
    )

    return Settings(reload=reload, logging=logging_config)


def load_config(path: str | os.PathLike[str] | None = None) -> Settings:
    """Load settings from an optional YAML file plus environment overrides.

    Priority order (highest to lowest):
    1. DEVRELOAD_* environment variables
    2. The YAML file at ``path`` (default ``./devreload.yaml``)
    3. Built-in defaults

    Args:
        path: Config file location. Missing files are not an error.

    Returns:
        Typed Settings object.
    """
    config_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME

    file_data = load_yaml_file(config_path)
    if file_data:
        _log.debug("Loaded config from %s", config_path)

    merged = _merge(file_data, env_overrides())
    return dict_to_settings(merged)
