"""Shared test utilities for devreload tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

FAST_POLL = 0.02


def make_scope(
    method: str = "GET",
    path: str = "/dev/reload",
    http_version: str = "1.1",
) -> dict[str, Any]:
    """Build a minimal ASGI HTTP scope."""
    return {
        "type": "http",
        "asgi": {"version": "3.0", "spec_version": "2.4"},
        "http_version": http_version,
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "query_string": b"",
        "root_path": "",
        "headers": [(b"host", b"testserver")],
        "client": ("127.0.0.1", 50000),
        "server": ("testserver", 80),
    }


class ASGIRecorder:
    """Plays the server side of one ASGI HTTP connection.

    The request body is delivered once; ``http.disconnect`` is only returned
    after ``disconnect()`` is called, like a browser keeping a tab open.
    """

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []
        self._request_sent = False
        self._disconnected = asyncio.Event()
        self._changed = asyncio.Event()

    async def receive(self) -> dict[str, Any]:
        if not self._request_sent:
            self._request_sent = True
            return {"type": "http.request", "body": b"", "more_body": False}
        await self._disconnected.wait()
        return {"type": "http.disconnect"}

    async def send(self, message: dict[str, Any]) -> None:
        self.messages.append(message)
        self._changed.set()

    def disconnect(self) -> None:
        self._disconnected.set()

    @property
    def status(self) -> int | None:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return message["status"]
        return None

    @property
    def headers(self) -> dict[str, str]:
        for message in self.messages:
            if message["type"] == "http.response.start":
                return {k.decode(): v.decode() for k, v in message["headers"]}
        return {}

    @property
    def body(self) -> str:
        return b"".join(
            m.get("body", b"") for m in self.messages if m["type"] == "http.response.body"
        ).decode()

    @property
    def finished(self) -> bool:
        return any(
            m["type"] == "http.response.body" and not m.get("more_body", False)
            for m in self.messages
        )

    async def wait_for(self, predicate: Callable[[], bool], timeout: float = 2.0) -> None:
        """Wait until ``predicate`` holds after some sent message."""

        async def _wait() -> None:
            while not predicate():
                self._changed.clear()
                await self._changed.wait()

        await asyncio.wait_for(_wait(), timeout)



def replace_file(path: Path, text: str) -> None:
    """Swap in new content atomically so a concurrent scan never sees a half-written file.

    The staging copy lives one level above the file, outside the watched tree.
    """
    staging = path.parent.parent / f".{path.name}.staging"
    staging.write_text(text)
    os.replace(staging, path)
