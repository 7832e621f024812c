import asyncio
import os
import sys
import tempfile
from pathlib import Path
from typing import Any, List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# keep test runs from writing ./logs
os.environ.setdefault("WSCOUNT_LOG_DIR", tempfile.mkdtemp(prefix="wscount-logs-"))


def default_server_ws(port: int) -> str:
    return f"ws://127.0.0.1:{port}/"


class DummyWebSocket:
    """In-memory stand-in for a websockets client connection.

    Frames queued with ``feed`` are yielded by ``async for``; ``finish`` ends
    the iteration the way a clean remote close does.
    """

    def __init__(self) -> None:
        self.sent_messages: List[Any] = []
        self.closed = False
        self.close_code: Optional[int] = None
        self.close_reason: Optional[str] = None
        self._inbound: asyncio.Queue = asyncio.Queue()

    def feed(self, *frames: Any) -> None:
        for frame in frames:
            self._inbound.put_nowait(frame)

    def finish(self, code: int = 1000, reason: str = "") -> None:
        self.close_code = code
        self.close_reason = reason
        self._inbound.put_nowait(None)

    async def send(self, data: Any) -> None:
        self.sent_messages.append(data)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        self.closed = True
        self.finish(code, reason)

    def __aiter__(self) -> "DummyWebSocket":
        return self

    async def __anext__(self) -> Any:
        frame = await self._inbound.get()
        if frame is None:
            raise StopAsyncIteration
        return frame


class DummyConnector:
    """Replaces websockets.connect; records the call and returns a DummyWebSocket."""

    def __init__(self) -> None:
        self.websocket = DummyWebSocket()
        self.calls: List[tuple] = []

    async def __call__(self, uri: str, **kwargs: Any) -> DummyWebSocket:
        self.calls.append((uri, kwargs))
        return self.websocket


@pytest.fixture
def connector() -> DummyConnector:
    return DummyConnector()
