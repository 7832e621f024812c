from __future__ import annotations
import asyncio
from contextlib import suppress
from typing import Any, Awaitable, Callable, Dict, List, Optional

import websockets

from client.state import ClientEvent, ConnectionState, OutboundCounter
from shared.config import DEFAULT_INTERVAL, DEFAULT_MAX_SIZE, ClientConfig
from shared.errors import ConnectionFailedError, MalformedPayloadError, SendAfterCloseError
from shared.log import get_logger, log_inbound_message
from shared.message import InboundMessage, format_count_message

logger = get_logger(__name__)


EventHandler = Callable[..., Awaitable[None]]
MessageSink = Callable[[InboundMessage], None]
Connector = Callable[..., Awaitable[Any]]


class MessagingClient:
    """
    Duplex WebSocket client with a periodic counted sender.

    Once the connection is open a producer task sends
    ``send message count: N`` every ``interval`` seconds (N = 1, 2, ...).
    Every inbound frame is classified as text or binary and handed to
    ``sink`` (by default logged as a record).

    Extra listeners can be registered per event with ``on``:
        open()                       connection reached the open state
        message(InboundMessage)      one inbound frame
        close(code, reason)          connection ended
        error(exception)             connection failure or transport fault
    """

    def __init__(
        self,
        endpoint: str,
        *,
        interval: float = DEFAULT_INTERVAL,
        sink: Optional[MessageSink] = None,
        max_messages: Optional[int] = None,
        max_size: Optional[int] = DEFAULT_MAX_SIZE,
        open_timeout: float = 10.0,
        connector: Connector = websockets.connect,
    ) -> None:
        self.endpoint = endpoint
        self.interval = interval
        self.sink: MessageSink = sink or log_inbound_message
        self.max_messages = max_messages
        self.max_size = max_size
        self.open_timeout = open_timeout
        self._connector = connector

        self.websocket: Optional[Any] = None
        self.state = ConnectionState.CLOSED
        self.counter = OutboundCounter()
        self.received_count = 0
        self.close_code: Optional[int] = None
        self.close_reason: str = ""
        self.handlers: Dict[ClientEvent, List[EventHandler]] = {event: [] for event in ClientEvent}

        self._started = False
        self._close_handled = False
        self._producer: Optional[asyncio.Task] = None
        self._closer: Optional[asyncio.Task] = None

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> "MessagingClient":
        return cls(
            config.endpoint,
            interval=config.interval,
            max_messages=config.max_messages,
            max_size=config.max_size,
            open_timeout=config.open_timeout,
            **kwargs,
        )

    @property
    def is_open(self) -> bool:
        return self.state is ConnectionState.OPEN

    def on(self, event: ClientEvent | str, handler: EventHandler) -> None:
        self.handlers[ClientEvent(event)].append(handler)

    # ========================================
    #           LIFECYCLE
    # ========================================

    async def start(self) -> bool:
        """
        Connect to the endpoint and start the producer once open.

        Returns False when the connection cannot be established; the failure
        is logged and reported to ``error`` listeners instead of raised.
        """
        if self._started:
            raise RuntimeError("MessagingClient can only be started once")
        self._started = True

        self.state = ConnectionState.CONNECTING
        logger.info("Connecting to %s", self.endpoint, extra={"endpoint": self.endpoint})
        try:
            self.websocket = await self._connector(
                self.endpoint,
                max_size=self.max_size,
                open_timeout=self.open_timeout,
            )
        except Exception as e:
            self.state = ConnectionState.CLOSED
            await self._handle_error(ConnectionFailedError(self.endpoint, e))
            return False

        if self.state is not ConnectionState.CONNECTING:
            # close() was called while the handshake was in flight
            await self.websocket.close()
            return False

        self.state = ConnectionState.OPEN
        await self._handle_open()
        return True

    async def run(self) -> bool:
        """Connect, then dispatch inbound frames until the connection ends"""
        if not await self.start():
            return False
        await self.recv_loop()
        return True

    async def recv_loop(self) -> None:
        assert self.websocket is not None
        try:
            async for frame in self.websocket:
                await self._handle_message(frame)
        except websockets.exceptions.ConnectionClosedError as e:
            await self._handle_error(e)
        finally:
            await self._handle_close()

    async def send_text(self, text: str) -> None:
        """Send one text frame; only allowed while the connection is open"""
        if not self.is_open or self.websocket is None:
            raise SendAfterCloseError(f"Cannot send on a {self.state.value} connection")
        await self.websocket.send(text)
        logger.debug("Sent %r", text)

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.state in (ConnectionState.CLOSING, ConnectionState.CLOSED):
            return
        self.state = ConnectionState.CLOSING
        await self._stop_producer()
        if self.websocket is not None:
            try:
                await self.websocket.close(code=code, reason=reason)
            except Exception as e:
                logger.error(f"Error closing connection: {e}")
        await self._handle_close()

    # ========================================
    #           EVENT HANDLERS
    # ========================================

    async def _handle_open(self) -> None:
        logger.info("Connected to %s", self.endpoint, extra={"endpoint": self.endpoint})
        self._producer = asyncio.create_task(self._produce())
        await self._emit(ClientEvent.OPEN)

    async def _handle_message(self, frame: Any) -> None:
        try:
            message = InboundMessage.from_frame(frame)
        except MalformedPayloadError as e:
            logger.warning("Dropping inbound frame: %s", e)
            return

        self.received_count += 1
        try:
            self.sink(message)
        except Exception as e:
            logger.error("Message sink failed: %s", e)
        await self._emit(ClientEvent.MESSAGE, message)

    async def _handle_close(self) -> None:
        if self._close_handled:
            return
        self._close_handled = True
        self.state = ConnectionState.CLOSED
        await self._stop_producer()

        if self.websocket is not None:
            self.close_code = getattr(self.websocket, "close_code", None)
            self.close_reason = getattr(self.websocket, "close_reason", None) or ""
        logger.info(
            "Connection closed (code=%s, reason=%r) after %d sent / %d received",
            self.close_code,
            self.close_reason,
            self.counter.value,
            self.received_count,
            extra={"endpoint": self.endpoint},
        )
        await self._emit(ClientEvent.CLOSE, self.close_code, self.close_reason)

    async def _handle_error(self, error: BaseException) -> None:
        logger.error("%s", error, extra={"endpoint": self.endpoint})
        await self._emit(ClientEvent.ERROR, error)

    async def _emit(self, event: ClientEvent, *args: Any) -> None:
        for handler in list(self.handlers[event]):
            try:
                await handler(*args)
            except Exception as e:
                logger.error("Error in %s listener: %s", event.value, e)

    # ========================================
    #           PERIODIC PRODUCER
    # ========================================

    async def _produce(self) -> None:
        """Send one counted message per tick while the connection is open"""
        while self.is_open:
            await asyncio.sleep(self.interval)
            if not self.is_open:
                break
            # counted only once the frame went out
            text = format_count_message(self.counter.value + 1)
            try:
                await self.send_text(text)
            except (SendAfterCloseError, websockets.exceptions.ConnectionClosed) as e:
                logger.warning("Stopping producer: %s", e)
                return
            self.counter.next()
            if self.max_messages is not None and self.counter.value >= self.max_messages:
                # one more interval for the replies, then close from outside this task
                await asyncio.sleep(self.interval)
                self._closer = asyncio.create_task(self.close())
                return

    async def _stop_producer(self) -> None:
        task = self._producer
        if task is None or task is asyncio.current_task():
            return
        if task.done():
            self._producer = None
            if not task.cancelled() and task.exception() is not None:
                await self._handle_error(task.exception())
            return
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
