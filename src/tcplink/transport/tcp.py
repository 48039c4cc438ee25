"""
TCP implementation of the transport protocols, built on AnyIO socket streams.
"""

import math
from typing import Optional, Union

import anyio
from anyio.abc import SocketStream

from tcplink.transport.errors import (
    DialError,
    DialRefusedError,
    DialTimeoutError,
    ReadError,
    WriteError,
)
from tcplink.transport.protocol import ReadResult


def _is_refused(exc: BaseException) -> bool:
    """Check whether a dial failure was caused by a refused connection.

    ``anyio.connect_tcp`` tries every resolved address and raises a generic
    OSError chained to the individual failures.
    """
    if isinstance(exc, ConnectionRefusedError):
        return True
    nested = getattr(exc, "exceptions", None)
    if nested:
        return all(_is_refused(e) for e in nested)
    if exc.__cause__ is not None:
        return _is_refused(exc.__cause__)
    return False


def _is_dial_failure(exc: BaseException) -> bool:
    """Check whether an error from ``anyio.connect_tcp`` is a failed dial.

    Besides OSError, address resolution and socket setup report malformed
    hosts and ports as ValueError (IDNA errors are UnicodeError) or
    OverflowError, possibly wrapped in an exception group by the parallel
    connection attempts.
    """
    nested = getattr(exc, "exceptions", None)
    if nested:
        return all(_is_dial_failure(e) for e in nested)
    return isinstance(exc, (OSError, ValueError, OverflowError))


class TcpConnection:
    """A :class:`~tcplink.transport.protocol.Connection` over an AnyIO socket stream."""

    def __init__(self, stream: SocketStream):
        """Wrap an already connected stream.

        Args:
            stream: The connected socket stream; ownership passes to this object.
        """
        self._stream = stream
        self._closed = False
        self._read_deadline: Optional[float] = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, data: bytes) -> int:
        if self._closed:
            raise WriteError("Connection is closed")
        if not data:
            return 0

        # A write is never interrupted halfway by cancellation.
        with anyio.CancelScope(shield=True):
            try:
                await self._stream.send(data)
            except (anyio.ClosedResourceError, anyio.BrokenResourceError, OSError) as e:
                raise WriteError(f"Write failed: {e}") from e
        return len(data)

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        self._read_deadline = deadline

    async def read(self, max_bytes: int) -> ReadResult:
        if self._closed:
            return ReadResult.eof()

        deadline = math.inf if self._read_deadline is None else self._read_deadline
        try:
            with anyio.CancelScope(deadline=deadline):
                data = await self._stream.receive(max_bytes)
                return ReadResult.received(data)
        except (anyio.EndOfStream, anyio.ClosedResourceError):
            return ReadResult.eof()
        except (anyio.BrokenResourceError, OSError) as e:
            return ReadResult.failed(ReadError(f"Read failed: {e}"))

        # Only reached when the deadline cancelled the receive.
        return ReadResult.timeout()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        with anyio.CancelScope(shield=True):
            await self._stream.aclose()

    async def __aenter__(self) -> "TcpConnection":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class TcpConnector:
    """Dials plain TCP connections with a strict timeout."""

    async def dial(self, host: str, port: Union[int, str], timeout: float) -> TcpConnection:
        try:
            port_number = int(port)
        except ValueError as e:
            raise DialError(f"Invalid port: {port!r}") from e
        if not 0 <= port_number <= 65535:
            raise DialError(f"Invalid port: {port!r} is outside 0..65535")

        try:
            with anyio.fail_after(timeout):
                stream = await anyio.connect_tcp(host, port_number)
        except TimeoutError as e:
            raise DialTimeoutError(
                f"Connection to {host}:{port} timed out after {timeout} seconds"
            ) from e
        except Exception as e:
            if not _is_dial_failure(e):
                raise
            if _is_refused(e):
                raise DialRefusedError(f"Connection to {host}:{port} refused") from e
            raise DialError(f"Connection to {host}:{port} failed: {e}") from e

        return TcpConnection(stream)
