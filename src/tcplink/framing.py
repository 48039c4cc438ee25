"""
Delimiter framing for an unbounded, arbitrarily chunked byte stream.

:class:`DelimiterFramer` is the sans-I/O half: it only turns chunks into
messages. :func:`read_frames` drives it from a live connection, using a
per-read deadline as the idle-flush tick so no separate timer task is needed.
"""

from typing import Callable, List, Optional

import anyio

from tcplink.transport.protocol import Connection, ReadStatus

MessageCallback = Callable[[bytes], None]

DEFAULT_BUFFER_SIZE = 4096


class DelimiterFramer:
    """Accumulates bytes and splits them into messages on a single delimiter byte.

    The partial buffer never contains the delimiter, and empty segments
    (consecutive delimiters, or a delimiter at the start of the stream) are
    dropped rather than emitted as zero-length messages.
    """

    def __init__(self, delimiter: Optional[int]):
        """Initialize a framer.

        Args:
            delimiter: The byte value that ends a message, or None to never
                split (only :meth:`flush` then produces messages).
        """
        if delimiter is not None and not 0 <= delimiter <= 255:
            raise ValueError(f"delimiter must be in 0..255, got {delimiter}")
        self.delimiter = delimiter
        self._separator = None if delimiter is None else bytes([delimiter])
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of buffered bytes not yet emitted."""
        return len(self._buffer)

    def feed(self, data: bytes) -> List[bytes]:
        """Consume a chunk and return the messages it completes, in order."""
        if self._separator is None or self._separator not in data:
            self._buffer += data
            return []

        segments = data.split(self._separator)
        messages = []

        head = bytes(self._buffer) + segments[0]
        if head:
            messages.append(head)
        messages.extend(segment for segment in segments[1:-1] if segment)

        self._buffer = bytearray(segments[-1])
        return messages

    def flush(self) -> Optional[bytes]:
        """Return the partial message and reset the buffer, or None if it is empty."""
        if not self._buffer:
            return None
        message = bytes(self._buffer)
        self._buffer.clear()
        return message

    def reset(self) -> None:
        """Drop any partial message."""
        self._buffer.clear()


async def read_frames(
    connection: Connection,
    delimiter: Optional[int],
    idle_flush_timeout: float,
    on_message: MessageCallback,
    *,
    buffer_size: int = DEFAULT_BUFFER_SIZE,
) -> None:
    """Read from ``connection`` until it ends, emitting each framed message.

    Every read is bounded by ``idle_flush_timeout``; a read that times out
    while a partial message is buffered flushes it. End-of-stream flushes the
    partial message and returns normally.

    Args:
        connection: The live connection to read from.
        delimiter: The byte value that ends a message, or None.
        idle_flush_timeout: Seconds of silence after which a partial message
            is emitted.
        on_message: Called synchronously with every message.
        buffer_size: Maximum bytes requested per read.

    Raises:
        ReadError: If the connection fails. The partial message is discarded,
            since it cannot be trusted to be complete.
    """
    framer = DelimiterFramer(delimiter)

    while True:
        connection.set_read_deadline(anyio.current_time() + idle_flush_timeout)
        result = await connection.read(buffer_size)

        if result.status is ReadStatus.DATA:
            for message in framer.feed(result.data):
                on_message(message)
        elif result.status is ReadStatus.TIMEOUT:
            message = framer.flush()
            if message is not None:
                on_message(message)
        elif result.status is ReadStatus.EOF:
            message = framer.flush()
            if message is not None:
                on_message(message)
            return
        else:
            raise result.error
