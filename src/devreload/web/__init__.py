"""HTTP-facing pieces of devreload.

- ReloadStreamHandler: the event stream browsers subscribe to
- CacheControlMiddleware: caching headers while live reload is enabled
- install_template_support: Jinja2 globals and the reload snippet
- install / lifespan: application wiring
"""

from devreload.web.app import install, lifespan
from devreload.web.cache import CacheControlMiddleware
from devreload.web.stream import (
    CONNECTED,
    EVENT_STREAM_HEADERS,
    RELOAD_EVENT,
    EventStreamResponse,
    ReloadStreamHandler,
    require_streaming,
)
from devreload.web.templates import (
    RELOAD_TEMPLATE_NAME,
    install_template_support,
    load_reload_template,
)

__all__ = [
    "ReloadStreamHandler",
    "EventStreamResponse",
    "require_streaming",
    "CONNECTED",
    "RELOAD_EVENT",
    "EVENT_STREAM_HEADERS",
    "CacheControlMiddleware",
    "install_template_support",
    "load_reload_template",
    "RELOAD_TEMPLATE_NAME",
    "install",
    "lifespan",
]
