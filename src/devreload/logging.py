"""Package logging: one ``devreload`` logger, file or console output."""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devreload.config.schema import LoggingConfig

logger = logging.getLogger("devreload")

_initialized = False


class _LowercaseLevelFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.levelname = record.levelname.lower()
        return super().format(record)


def resolve_level(config: LoggingConfig | None) -> int:
    """Numeric level for a config; unknown or missing names mean INFO."""
    if config is None or not config.level:
        return logging.INFO
    level = logging.getLevelName(config.level.upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Attach handlers to the package logger. Only the first call has effect.

    Output goes to ``config.file`` or ``$DEVRELOAD_LOG`` when set, otherwise to
    stderr if it is a terminal.
    """
    global _initialized
    if _initialized:
        return
    _initialized = True

    level = resolve_level(config)
    logger.setLevel(level)
    formatter = _LowercaseLevelFormatter(
        "%(asctime)s %(levelname)s: %(message)s", datefmt="%H:%M:%S"
    )

    log_path = config.file if config and config.file else os.environ.get("DEVRELOAD_LOG")
    if log_path:
        try:
            handler: logging.Handler = logging.FileHandler(
                os.path.expanduser(log_path), mode="a", encoding="utf-8"
            )
        except OSError as e:
            if not sys.stderr.isatty():
                return
            print(f"[devreload] Failed to open log file: {e}", file=sys.stderr)
            handler = logging.StreamHandler(sys.stderr)
    elif sys.stderr.isatty():
        handler = logging.StreamHandler(sys.stderr)
    else:
        return

    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def get_logger(name: str | None = None) -> logging.Logger:
    """Child of the package logger, e.g. ``get_logger("watching")``."""
    if name:
        return logger.getChild(name)
    return logger
