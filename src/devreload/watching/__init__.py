"""Directory watching for devreload.

Provides a polling fingerprint watcher that needs no OS change-notification
API. Detection latency is bounded by the polling interval.
"""

from devreload.watching.watcher import (
    DirectoryWatcher,
    directory_fingerprint,
)

__all__ = [
    "DirectoryWatcher",
    "directory_fingerprint",
]
