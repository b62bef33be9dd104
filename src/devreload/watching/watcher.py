"""Directory watching implementation using polling.

A tree is summarised by a fingerprint built from every file's relative path,
modification time and size. The watcher recomputes it on a fixed interval and
calls its notify callback whenever it flips. File contents are never read.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from devreload.config.schema import DEFAULT_POLL_INTERVAL
from devreload.logging import get_logger

if TYPE_CHECKING:
    import logging

log = get_logger("watching")


def _walk(directory: str, prefix: str, hasher: hashlib._Hash) -> None:
    with os.scandir(directory) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    for entry in entries:
        rel = f"{prefix}{entry.name}"
        if entry.is_dir(follow_symlinks=False):
            _walk(entry.path, f"{rel}/", hasher)
            continue
        stat = entry.stat(follow_symlinks=False)
        # Names that are not valid UTF-8 are hashed as their raw bytes.
        hasher.update(os.fsencode(rel) + f":{stat.st_mtime_ns}:{stat.st_size};".encode())


def directory_fingerprint(root: str | os.PathLike[str]) -> str:
    """Produce a deterministic hash of a directory tree's current state.

    Every non-directory entry contributes ``relpath:mtime_ns:size;`` in
    depth-first, name-sorted order. Directories only contribute through the
    files below them.

    Raises:
        OSError: If the root or any directory below it cannot be read.
    """
    hasher = hashlib.sha1()
    _walk(os.fspath(root), "", hasher)
    return hasher.hexdigest()


class DirectoryWatcher:
    """Polls a directory tree and calls ``notify`` whenever it changes.

    Example:
        watcher = DirectoryWatcher(Path("web"), reloader.notify)
        task = asyncio.create_task(watcher.run())
        ...
        task.cancel()
    """

    def __init__(
        self,
        root: str | os.PathLike[str],
        notify: Callable[[], None],
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            root: Directory tree to watch
            notify: Called with no arguments when the tree changes, and once
                more when the watcher is cancelled
            poll_interval: Seconds between scans
            logger: Where scan failures are reported
        """
        self._root = Path(root)
        self._notify = notify
        self._poll_interval = poll_interval
        self._log = logger or log
        self._fingerprint = ""

    @property
    def root(self) -> Path:
        return self._root

    @property
    def poll_interval(self) -> float:
        return self._poll_interval

    @property
    def fingerprint(self) -> str:
        """Last known-good fingerprint, empty until a scan succeeds."""
        return self._fingerprint

    async def _scan(self) -> str:
        return await asyncio.to_thread(directory_fingerprint, self._root)

    async def check(self) -> bool:
        """Rescan once and notify if the tree changed.

        Returns:
            True if a change was detected.
        """
        try:
            fingerprint = await self._scan()
        except Exception as e:
            self._log.error("dev reload watcher failed to scan %s: %s", self._root, e)
            return False

        if fingerprint == self._fingerprint:
            return False

        self._fingerprint = fingerprint
        self._notify()
        return True

    async def run(self) -> None:
        """Poll until cancelled.

        A final notification is sent on cancellation so that open streams
        wake up instead of hanging.
        """
        try:
            try:
                self._fingerprint = await self._scan()
            except Exception as e:
                self._log.error("dev reload watcher failed to read %s: %s", self._root, e)

            self._log.info(
                "Watching %s for changes (interval: %.2fs)", self._root, self._poll_interval
            )
            while True:
                await asyncio.sleep(self._poll_interval)
                await self.check()
        finally:
            self._notify()
