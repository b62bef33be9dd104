"""Exception types raised by devreload."""


class DevReloadError(Exception):
    """Base class for devreload errors."""


class StreamingUnsupportedError(DevReloadError):
    """The connection cannot deliver a response body incrementally."""
