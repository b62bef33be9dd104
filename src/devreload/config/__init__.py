"""Configuration management for devreload.

Settings come from an optional YAML file and DEVRELOAD_* environment
variables (highest priority).

Example usage:
    from devreload.config import load_config

    settings = load_config("devreload.yaml")
    reloader = Reloader(settings.reload)
"""

from devreload.config.loader import (
    dict_to_settings,
    env_overrides,
    load_config,
    load_yaml_file,
)
from devreload.config.schema import (
    DEFAULT_MAX_AGE,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_ROUTE,
    LoggingConfig,
    ReloadConfig,
    Settings,
)

__all__ = [
    "load_config",
    "load_yaml_file",
    "env_overrides",
    "dict_to_settings",
    "ReloadConfig",
    "LoggingConfig",
    "Settings",
    "DEFAULT_ROUTE",
    "DEFAULT_MAX_AGE",
    "DEFAULT_POLL_INTERVAL",
]
