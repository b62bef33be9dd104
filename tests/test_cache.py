"""Tests for the enablement-gated Cache-Control middleware."""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from devreload.config import ReloadConfig
from devreload.reloader import Reloader
from devreload.web.cache import CacheControlMiddleware, cache_control_value


async def asset(request: Request) -> PlainTextResponse:
    return PlainTextResponse("body { color: red }")


async def pinned(request: Request) -> PlainTextResponse:
    return PlainTextResponse("pinned", headers={"Cache-Control": "no-store"})


def _app(reloader: Reloader) -> Starlette:
    return Starlette(
        routes=[Route("/static/app.css", asset), Route("/pinned", pinned)],
        middleware=[Middleware(CacheControlMiddleware, reloader=reloader)],
    )


@pytest.fixture
def reloader() -> Reloader:
    return Reloader(ReloadConfig(max_age=timedelta(minutes=10)))


class TestCacheControlMiddleware:
    """Tests for CacheControlMiddleware."""

    def test_enabled_adds_header(self, reloader: Reloader) -> None:
        response = TestClient(_app(reloader)).get("/static/app.css")

        assert response.status_code == 200
        assert response.headers["cache-control"] == "stale-while-revalidate, max-age=600"

    def test_disabled_passes_through(self, reloader: Reloader) -> None:
        reloader.set_enabled(False)

        response = TestClient(_app(reloader)).get("/static/app.css")

        assert response.status_code == 200
        assert "cache-control" not in response.headers
        assert response.text == "body { color: red }"

    def test_follows_runtime_toggle(self, reloader: Reloader) -> None:
        client = TestClient(_app(reloader))

        assert "cache-control" in client.get("/static/app.css").headers
        reloader.set_enabled(False)
        assert "cache-control" not in client.get("/static/app.css").headers
        reloader.set_enabled(True)
        assert "cache-control" in client.get("/static/app.css").headers

    def test_explicit_header_wins(self, reloader: Reloader) -> None:
        response = TestClient(_app(reloader)).get("/pinned")
        assert response.headers["cache-control"] == "no-store"

    def test_wraps_single_app(self, reloader: Reloader) -> None:
        """reloader.cache_middleware wraps any ASGI app, e.g. a static mount."""
        wrapped = reloader.cache_middleware(PlainTextResponse("asset"))

        response = TestClient(wrapped).get("/anything")

        assert response.headers["cache-control"] == cache_control_value(600)

    def test_header_value_format(self) -> None:
        assert cache_control_value(3600) == "stale-while-revalidate, max-age=3600"
