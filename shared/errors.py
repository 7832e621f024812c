from __future__ import annotations


class WSCountError(Exception):
    """Base class for errors raised by wscount."""
    pass


class ConnectionFailedError(WSCountError):
    """Raised when the WebSocket connection cannot be established."""

    def __init__(self, endpoint: str, cause: BaseException) -> None:
        super().__init__(f"Could not connect to {endpoint}: {cause}")
        self.endpoint = endpoint
        self.cause = cause


class SendAfterCloseError(WSCountError):
    """Raised when sending on a connection that is not open."""
    pass


class MalformedPayloadError(WSCountError):
    """Raised when an inbound frame is neither text nor binary."""
    pass


class ConfigError(WSCountError, ValueError):
    """Raised when configuration values or files are invalid."""
    pass
