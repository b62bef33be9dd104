"""Live reload notifier.

The Reloader keeps a registry of subscribers, each owning a single-slot
ReloadChannel, and broadcasts reload signals to them without ever blocking on
a slow reader. A subscriber that has not consumed its pending signal is
skipped: one pending reload is as good as many.
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import threading
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING, NamedTuple

from devreload.config.schema import ReloadConfig
from devreload.watching import DirectoryWatcher

if TYPE_CHECKING:
    from jinja2 import Environment
    from starlette.types import ASGIApp

    from devreload.web.cache import CacheControlMiddleware
    from devreload.web.stream import ReloadStreamHandler


class ReloadChannel:
    """Single-slot signal channel read by one subscriber.

    ``offer`` never blocks: it fills the slot if it is free and reports
    whether it did. ``receive`` waits for a token and returns False once the
    channel is closed and drained. Offers and closes may come from any
    thread; wake-ups are delivered on the loop the reader waits on.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending = False
        self._closed = False
        self._wakeup = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> bool:
        """True if a token is waiting to be received."""
        return self._pending

    def offer(self) -> bool:
        """Place a token in the slot unless it is occupied or closed."""
        with self._lock:
            if self._closed or self._pending:
                return False
            self._pending = True
        self._wake()
        return True

    def close(self) -> bool:
        """Close the channel. Returns False if it was already closed."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
        self._wake()
        return True

    def take(self) -> bool:
        """Consume a pending token without waiting."""
        with self._lock:
            pending, self._pending = self._pending, False
        return pending

    async def receive(self) -> bool:
        """Wait for the next token.

        Returns:
            True when a token was consumed, False when the channel is closed.
            A token offered before close is still delivered first.
        """
        self._loop = asyncio.get_running_loop()
        while True:
            self._wakeup.clear()
            if self.take():
                return True
            if self._closed:
                return False
            await self._wakeup.wait()

    def _wake(self) -> None:
        loop = self._loop
        if loop is None or _running_loop() is loop:
            self._wakeup.set()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(self._wakeup.set)


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


def _closed_channel() -> ReloadChannel:
    channel = ReloadChannel()
    channel.close()
    return channel


def _noop() -> None:
    pass


class Subscription(NamedTuple):
    """A reload subscription: a release function and the channel it guards.

    Unpacks as ``release, channel = reloader.subscribe()``. Used as a context
    manager it releases on exit.
    """

    release: Callable[[], None]
    channel: ReloadChannel

    @property
    def gone(self) -> bool:
        """True if the reloader was already closed when this was issued."""
        return self.release is _noop

    def __enter__(self) -> Subscription:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


class Reloader:
    """Broadcasts reload signals to subscribed clients.

    Example:
        reloader = Reloader(ReloadConfig(route="/dev/reload"))
        reloader.start("web")
        app.add_route(reloader.route, reloader.handler())
        ...
        await reloader.aclose()
    """

    def __init__(self, config: ReloadConfig | None = None) -> None:
        config = config or ReloadConfig()
        self._config = config
        self._log = config.logger
        self._lock = threading.Lock()
        self._closed = False
        self._next_id = 0
        self._clients: dict[int, ReloadChannel] = {}
        self._route = config.route
        self._enabled = config.enabled
        self._max_age = config.max_age_seconds
        self._watcher: DirectoryWatcher | None = None
        self._watch_task: asyncio.Task[None] | None = None

    @property
    def config(self) -> ReloadConfig:
        return self._config

    @property
    def route(self) -> str:
        return self._route

    @property
    def max_age(self) -> int:
        """Cache max-age in whole seconds."""
        return self._max_age

    @property
    def watcher(self) -> DirectoryWatcher | None:
        """The directory watcher started by ``start``, if any."""
        return self._watcher

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._clients)

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._enabled = enabled

    def subscribe(self) -> Subscription:
        """Register a new listener.

        Callers must release the subscription once they stop listening so the
        entry is reclaimed. If the reloader is already closed the channel is
        returned closed and release does nothing.
        """
        with self._lock:
            if self._closed:
                return Subscription(_noop, _closed_channel())

            client_id = self._next_id
            self._next_id += 1
            channel = ReloadChannel()
            self._clients[client_id] = channel

        released = False

        def release() -> None:
            nonlocal released
            with self._lock:
                if released:
                    return
                released = True
                owned = self._clients.pop(client_id, None)
            if owned is not None:
                owned.close()

        return Subscription(release, channel)

    def notify(self) -> None:
        """Offer a reload token to every current subscriber without blocking.

        Subscribers whose slot is still occupied are skipped.
        """
        with self._lock:
            if self._closed:
                return
            channels = list(self._clients.values())

        for channel in channels:
            channel.offer()

    def close(self) -> None:
        """Stop the watcher and close every subscriber channel.

        Safe to call more than once and from any thread.
        """
        task = self._watch_task
        if task is not None and not task.done():
            loop = task.get_loop()
            if _running_loop() is loop:
                task.cancel()
            elif not loop.is_closed():
                loop.call_soon_threadsafe(task.cancel)

        with self._lock:
            if self._closed:
                return
            self._closed = True
            channels = list(self._clients.values())
            self._clients.clear()

        for channel in channels:
            channel.close()
        self._log.debug("Live reload closed, released %d subscribers", len(channels))

    async def aclose(self) -> None:
        """Close, then wait for the watcher task to finish."""
        self.close()
        task = self._watch_task
        if task is not None:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def start(self, root: str | os.PathLike[str]) -> asyncio.Task[None]:
        """Start polling a directory tree for changes.

        Every time the tree's fingerprint flips, all subscribers are
        notified. Must be called from within a running event loop; ``close``
        stops the watcher.

        Raises:
            RuntimeError: If a watcher is already running or the reloader is
                closed.
        """
        if self.closed:
            raise RuntimeError("Reloader is closed")
        if self._watch_task is not None and not self._watch_task.done():
            raise RuntimeError("Reloader is already watching a directory")

        self._watcher = watcher = DirectoryWatcher(
            root,
            self.notify,
            poll_interval=self._config.poll_interval,
            logger=self._log,
        )
        self._watch_task = asyncio.create_task(watcher.run(), name="devreload-watcher")
        return self._watch_task

    def handler(self) -> ReloadStreamHandler:
        """ASGI app streaming reload events; mount it at ``route``."""
        from devreload.web.stream import ReloadStreamHandler

        return ReloadStreamHandler(self)

    def cache_middleware(self, app: ASGIApp) -> CacheControlMiddleware:
        """Wrap an ASGI app so its responses are cacheable while enabled."""
        from devreload.web.cache import CacheControlMiddleware

        return CacheControlMiddleware(app, reloader=self)

    def parse_template(self, env: Environment, source: str | None = None) -> Environment:
        """Register the reload snippet and template globals on a Jinja2 env."""
        from devreload.web.templates import install_template_support

        return install_template_support(env, self, source)

    async def __aenter__(self) -> Reloader:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
