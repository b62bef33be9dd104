"""Jinja2 integration for the live reload snippet.

The snippet is package data, read once by ``load_reload_template`` and handed
to each environment that needs it. Pages include it with::

    {% include "devreload/reload.html" %}

and it renders nothing while live reload is disabled.
"""

from __future__ import annotations

import functools
from importlib import resources
from typing import TYPE_CHECKING

from jinja2 import ChoiceLoader, DictLoader, Environment

if TYPE_CHECKING:
    from devreload.reloader import Reloader

RELOAD_TEMPLATE_NAME = "devreload/reload.html"


@functools.cache
def load_reload_template() -> str:
    """Read the packaged reload snippet (once per process)."""
    return (resources.files("devreload.web") / "assets" / "reload.html").read_text(encoding="utf-8")


def install_template_support(
    env: Environment,
    reloader: Reloader,
    source: str | None = None,
) -> Environment:
    """Expose live reload state to templates rendered by ``env``.

    Registers the globals ``live_reload_enabled()`` and ``live_reload_route``
    and makes the snippet loadable as ``devreload/reload.html`` alongside the
    environment's own templates.

    Args:
        env: Jinja2 environment, e.g. ``Jinja2Templates(...).env``
        reloader: Reloader whose state the templates reflect
        source: Snippet source; defaults to the packaged one

    Returns:
        The same environment, for chaining.
    """
    if source is None:
        source = load_reload_template()

    env.globals["live_reload_enabled"] = lambda: reloader.enabled
    env.globals["live_reload_route"] = reloader.route

    snippet_loader = DictLoader({RELOAD_TEMPLATE_NAME: source})
    if env.loader is None:
        env.loader = snippet_loader
    else:
        env.loader = ChoiceLoader([snippet_loader, env.loader])
    return env
