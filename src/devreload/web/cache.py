"""Cache-Control middleware gated on the reloader's enabled flag."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import MutableHeaders

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Message, Receive, Scope, Send

    from devreload.reloader import Reloader


def cache_control_value(max_age: int) -> str:
    return f"stale-while-revalidate, max-age={max_age}"


class CacheControlMiddleware:
    """Lets browsers cache assets while live reload is enabled.

    Responses get ``Cache-Control: stale-while-revalidate, max-age=<n>``
    unless the wrapped app set its own. When the reloader is disabled,
    requests pass straight through.

    Usage:
        app.add_middleware(CacheControlMiddleware, reloader=reloader)
        app.mount("/static", reloader.cache_middleware(StaticFiles(directory="web")))
    """

    def __init__(self, app: ASGIApp, reloader: Reloader) -> None:
        self.app = app
        self.reloader = reloader

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self.reloader.enabled:
            await self.app(scope, receive, send)
            return

        value = cache_control_value(self.reloader.max_age)

        async def send_with_cache_control(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers.setdefault("Cache-Control", value)
            await send(message)

        await self.app(scope, receive, send_with_cache_control)
