"""
Client event delivery.

A client reports its lifecycle through a :class:`ClientHandler`: an object
with three synchronous methods called from the client's own task. Two
implementations are provided: :class:`CallbackHandler` for plain callables,
and :class:`QueueHandler`, which turns the calls into :class:`ClientEvent`
records on an ordered AnyIO memory stream.

For every connection, ``on_connect`` precedes all of its ``on_message``
calls, which precede its ``on_close``. ``on_close`` fires exactly once per
dial attempt, including attempts that never connected.
"""

import enum
import math
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

import anyio


class ClientHandler(Protocol):
    """Receiver of client lifecycle notifications.

    Implementations must not block: they run on the client's task and stall
    its read and reconnect cycle while they execute.
    """

    def on_connect(self) -> None:
        ...

    def on_message(self, data: bytes) -> None:
        ...

    def on_close(self) -> None:
        ...


class CallbackHandler:
    """Adapts up to three plain callables to the :class:`ClientHandler` interface."""

    def __init__(
        self,
        on_connect: Optional[Callable[[], None]] = None,
        on_message: Optional[Callable[[bytes], None]] = None,
        on_close: Optional[Callable[[], None]] = None,
    ):
        self._on_connect = on_connect
        self._on_message = on_message
        self._on_close = on_close

    def on_connect(self) -> None:
        if self._on_connect is not None:
            self._on_connect()

    def on_message(self, data: bytes) -> None:
        if self._on_message is not None:
            self._on_message(data)

    def on_close(self) -> None:
        if self._on_close is not None:
            self._on_close()


class EventType(enum.Enum):
    CONNECTED = "connected"
    MESSAGE = "message"
    CLOSED = "closed"


@dataclass(frozen=True)
class ClientEvent:
    """A single lifecycle event; ``data`` is set for MESSAGE events only."""

    type: EventType
    data: Optional[bytes] = None


class QueueHandler:
    """Delivers client events in order over an AnyIO memory object stream.

    Handler calls never block or raise into the client: when the buffer is
    full, or the handler has been closed, the event is dropped and counted in
    :attr:`dropped`.

    Example:
        handler = QueueHandler()
        async with TcpClient(config, handler):
            async for event in handler:
                ...
    """

    def __init__(self, max_buffer_size: float = math.inf):
        """Initialize the queue.

        Args:
            max_buffer_size: Number of undelivered events kept before new
                events are dropped. Unbounded by default.
        """
        self._send, self._receive = anyio.create_memory_object_stream(max_buffer_size)
        self.dropped = 0

    def _put(self, event: ClientEvent) -> None:
        try:
            self._send.send_nowait(event)
        except (anyio.WouldBlock, anyio.ClosedResourceError, anyio.BrokenResourceError):
            self.dropped += 1

    def on_connect(self) -> None:
        self._put(ClientEvent(EventType.CONNECTED))

    def on_message(self, data: bytes) -> None:
        self._put(ClientEvent(EventType.MESSAGE, data))

    def on_close(self) -> None:
        self._put(ClientEvent(EventType.CLOSED))

    async def receive(self) -> ClientEvent:
        """Wait for the next event.

        Raises:
            anyio.EndOfStream: If the handler was closed and drained.
        """
        return await self._receive.receive()

    def __aiter__(self):
        return self

    async def __anext__(self) -> ClientEvent:
        try:
            return await self._receive.receive()
        except anyio.EndOfStream:
            raise StopAsyncIteration from None

    async def aclose(self) -> None:
        """Stop accepting events; already queued events can still be received."""
        await self._send.aclose()
