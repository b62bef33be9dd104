"""devreload: live reload for ASGI apps during development."""

__version__ = "0.1.0"

from devreload.config import LoggingConfig, ReloadConfig, Settings, load_config
from devreload.errors import DevReloadError, StreamingUnsupportedError
from devreload.logging import get_logger, setup_logging
from devreload.reloader import Reloader, ReloadChannel, Subscription
from devreload.watching import DirectoryWatcher, directory_fingerprint

__all__ = [
    # Notifier
    "Reloader",
    "ReloadChannel",
    "Subscription",
    # Watching
    "DirectoryWatcher",
    "directory_fingerprint",
    # Config
    "ReloadConfig",
    "LoggingConfig",
    "Settings",
    "load_config",
    # Logging
    "setup_logging",
    "get_logger",
    # Errors
    "DevReloadError",
    "StreamingUnsupportedError",
]
