"""Configuration schema dataclasses for devreload."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta

DEFAULT_ROUTE = "/dev/reload"
DEFAULT_MAX_AGE = timedelta(hours=1)
DEFAULT_POLL_INTERVAL = 0.5


def _default_logger() -> logging.Logger:
    return logging.getLogger("devreload").getChild("reload")


@dataclass(frozen=True)
class ReloadConfig:
    """Settings a Reloader is constructed with.

    Only ``enabled`` has a runtime counterpart (``Reloader.set_enabled``);
    everything else is fixed for the Reloader's lifetime.
    """

    logger: logging.Logger = field(default_factory=_default_logger)
    route: str = DEFAULT_ROUTE  # Mount path of the event stream
    enabled: bool = True
    max_age: timedelta = DEFAULT_MAX_AGE  # Staleness allowed for cached assets
    poll_interval: float = DEFAULT_POLL_INTERVAL  # Seconds between tree scans

    def __post_init__(self) -> None:
        if not self.route or not self.route.startswith("/"):
            raise ValueError(f"route must start with '/': {self.route!r}")
        if isinstance(self.max_age, (int, float)):
            object.__setattr__(self, "max_age", timedelta(seconds=self.max_age))
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive: {self.poll_interval!r}")

    @property
    def max_age_seconds(self) -> int:
        """Max age in whole seconds, truncated."""
        return int(self.max_age.total_seconds())


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str | None = None  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    file: str | None = None  # Log file path


@dataclass
class Settings:
    """Root settings object returned by ``load_config``."""

    reload: ReloadConfig = field(default_factory=ReloadConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
