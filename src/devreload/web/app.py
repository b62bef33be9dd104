"""Wiring a Reloader into a FastAPI or Starlette application."""

from __future__ import annotations

import contextlib
import os
from collections.abc import AsyncIterator, Callable
from typing import TYPE_CHECKING, Any

from devreload.logging import get_logger

if TYPE_CHECKING:
    from starlette.applications import Starlette

    from devreload.reloader import Reloader

log = get_logger("app")


def install(app: Starlette, reloader: Reloader) -> None:
    """Mount the reload stream at ``reloader.route``.

    The endpoint accepts every method so that non-GET requests get the
    stream's own 405 rather than the router's.
    """
    app.add_route(reloader.route, reloader.handler(), include_in_schema=False)
    log.debug("Live reload stream mounted at %s", reloader.route)


def lifespan(
    reloader: Reloader,
    root: str | os.PathLike[str] | None = None,
) -> Callable[[Any], contextlib.AbstractAsyncContextManager[None]]:
    """Build an app lifespan that runs the watcher for the app's lifetime.

    The watcher starts on startup when ``root`` is given and the reloader is
    enabled. On shutdown the reloader is closed first, so open streams end
    before the server waits for connections to drain.

    Usage:
        app = FastAPI(lifespan=lifespan(reloader, "web"))
    """

    @contextlib.asynccontextmanager
    async def _lifespan(app: Any) -> AsyncIterator[None]:
        if root is not None and reloader.enabled:
            reloader.start(root)
        try:
            yield
        finally:
            await reloader.aclose()

    return _lifespan
