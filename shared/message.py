from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Union

from shared.errors import MalformedPayloadError

# Body of every outbound frame, N starts at 1
COUNT_MESSAGE_TEMPLATE = "send message count: {count}"


class MessageKind(str, Enum):
    """Kind of a WebSocket data frame."""

    TEXT = "text"
    BINARY = "binary"


Payload = Union[str, bytes]


@dataclass(frozen=True)
class InboundMessage:
    """
    One inbound frame, tagged with its kind.

    The kind is decided once at the transport boundary by ``from_frame``;
    everything downstream branches on ``kind`` instead of inspecting the
    payload type again.

    Record layout produced by ``to_record``:
    {
    "messageLength": INT (bytes for binary, characters for text),
    "messageType":   "text" | "binary",
    "messageData":   STRING | BYTES
    }
    """
    kind: MessageKind
    data: Payload

    @classmethod
    def text(cls, data: str) -> "InboundMessage":
        return cls(MessageKind.TEXT, data)

    @classmethod
    def binary(cls, data: bytes) -> "InboundMessage":
        return cls(MessageKind.BINARY, bytes(data))

    @classmethod
    def from_frame(cls, frame: Any) -> "InboundMessage":
        """Classify a frame as delivered by the websockets library"""
        if isinstance(frame, str):
            return cls.text(frame)
        if isinstance(frame, (bytes, bytearray, memoryview)):
            return cls.binary(bytes(frame))
        raise MalformedPayloadError(f"Unsupported frame payload type: {type(frame).__name__}")

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def is_binary(self) -> bool:
        return self.kind is MessageKind.BINARY

    def to_record(self) -> Dict[str, Any]:
        return {
            "messageLength": self.length,
            "messageType": self.kind.value,
            "messageData": self.data,
        }


def format_count_message(count: int) -> str:
    """Outbound text body for the given tick count"""
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")
    return COUNT_MESSAGE_TEMPLATE.format(count=count)
