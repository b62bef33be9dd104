"""Root pytest configuration for all tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from devreload.config import ReloadConfig
from devreload.reloader import Reloader
from tests.utils import FAST_POLL, ASGIRecorder

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(scope="session")
def anyio_backend():
    """Set anyio backend to asyncio."""
    return "asyncio"


@pytest.fixture
def reloader() -> Reloader:
    """A fresh, enabled Reloader polling quickly."""
    return Reloader(ReloadConfig(poll_interval=FAST_POLL))


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A directory tree with a single three-byte file."""
    root = tmp_path / "web"
    root.mkdir()
    (root / "a.txt").write_text("abc")
    return root


@pytest.fixture
def recorder() -> ASGIRecorder:
    return ASGIRecorder()
