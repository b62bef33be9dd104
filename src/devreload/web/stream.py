"""Server-sent event stream that tells browsers to reload.

The connection stays open until the client disconnects, the reloader closes
its channel, or the server shuts down.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import anyio
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from devreload.errors import StreamingUnsupportedError
from devreload.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

    from devreload.reloader import Reloader, Subscription

log = get_logger("stream")

CONNECTED = ": connected\n\n"
RELOAD_EVENT = "data: reload\n\n"

EVENT_STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}

# HTTP/1.0 has no chunked transfer coding to frame an open-ended body.
_STREAMING_HTTP_VERSIONS = {"1.1", "2", "2.0", "3", "3.0"}


def require_streaming(scope: Scope) -> None:
    """Check that the connection can carry an incrementally flushed body.

    HTTP/1.0 is refused. A server could still stream to such a client by
    closing the connection to end the body, but then the connection cannot
    be kept alive, and an EventSource on a keep-alive proxy never sees the
    end of the stream. Clients that hit this should talk HTTP/1.1 or later.

    Raises:
        StreamingUnsupportedError: For HTTP/1.0 connections.
    """
    http_version = scope.get("http_version", "1.1")
    if http_version not in _STREAMING_HTTP_VERSIONS:
        raise StreamingUnsupportedError(f"cannot stream over HTTP/{http_version}")


async def reload_events(subscription: Subscription) -> AsyncIterator[str]:
    """Yield the stream body: a connect comment, then one event per signal."""
    yield CONNECTED
    while await subscription.channel.receive():
        yield RELOAD_EVENT


class EventStreamResponse(StreamingResponse):
    """Streams reload events for one subscription and then releases it.

    The body always races the client's ``http.disconnect`` so that a closed
    tab ends the stream promptly. Write failures end it silently.
    """

    def __init__(self, subscription: Subscription) -> None:
        super().__init__(reload_events(subscription), headers=EVENT_STREAM_HEADERS)
        self.subscription = subscription

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            async with anyio.create_task_group() as task_group:

                async def stream() -> None:
                    with contextlib.suppress(OSError):
                        await self.stream_response(send)
                    task_group.cancel_scope.cancel()

                task_group.start_soon(stream)
                await self.listen_for_disconnect(receive)
                task_group.cancel_scope.cancel()
        finally:
            self.subscription.release()


class ReloadStreamHandler:
    """ASGI endpoint exposing a Reloader as an event stream.

    Mount it at the reloader's route, e.g.
    ``app.add_route(reloader.route, reloader.handler())``.
    """

    def __init__(self, reloader: Reloader) -> None:
        self.reloader = reloader

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = self.respond(Request(scope, receive))
        await response(scope, receive, send)

    def respond(self, request: Request) -> Response:
        """Pick the response for a request; subscribes only for streams."""
        if request.method != "GET":
            return PlainTextResponse(
                "method not allowed", status_code=405, headers={"Allow": "GET"}
            )

        try:
            require_streaming(request.scope)
        except StreamingUnsupportedError as e:
            log.warning("Live reload stream refused: %s", e)
            return PlainTextResponse("streaming unsupported", status_code=500)

        subscription = self.reloader.subscribe()
        if subscription.gone:
            return Response(status_code=410, headers=EVENT_STREAM_HEADERS)

        return EventStreamResponse(subscription)
