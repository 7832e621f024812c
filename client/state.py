from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class ConnectionState(str, Enum):
    """
    Lifecycle of one connection:

        connecting -> open -> closed
        open -> closing -> closed
        connecting -> closed   (connection failed)
    """

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class ClientEvent(str, Enum):
    OPEN = "open"
    MESSAGE = "message"
    CLOSE = "close"
    ERROR = "error"


@dataclass
class OutboundCounter:
    value: int = 0

    def next(self) -> int:
        self.value += 1
        return self.value
