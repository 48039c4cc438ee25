"""
Protocol definitions for the transport layer.

A :class:`Connector` dials the remote endpoint and hands back a
:class:`Connection`. Connections report read outcomes as values rather than
exceptions, because a read timeout is the normal idle-flush tick and EOF is
the normal end of a session.
"""

import enum
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from tcplink.transport.errors import ReadError


class ReadStatus(enum.Enum):
    """Outcome of a single bounded read."""

    DATA = "data"
    TIMEOUT = "timeout"
    EOF = "eof"
    ERROR = "error"


@dataclass(frozen=True)
class ReadResult:
    """Result of :meth:`Connection.read`.

    ``data`` is only non-empty for :attr:`ReadStatus.DATA`; ``error`` is only
    set for :attr:`ReadStatus.ERROR`.
    """

    status: ReadStatus
    data: bytes = b""
    error: Optional[ReadError] = None

    @classmethod
    def received(cls, data: bytes) -> "ReadResult":
        return cls(ReadStatus.DATA, data)

    @classmethod
    def timeout(cls) -> "ReadResult":
        return cls(ReadStatus.TIMEOUT)

    @classmethod
    def eof(cls) -> "ReadResult":
        return cls(ReadStatus.EOF)

    @classmethod
    def failed(cls, error: ReadError) -> "ReadResult":
        return cls(ReadStatus.ERROR, error=error)


class Connection(Protocol):
    """A live, bidirectional byte-stream connection."""

    @property
    def closed(self) -> bool:
        """Whether :meth:`close` has been called."""
        ...

    async def write(self, data: bytes) -> int:
        """Write all of ``data`` to the peer.

        Args:
            data: The bytes to send.

        Returns:
            The number of bytes written.

        Raises:
            WriteError: If the connection is closed or the write fails.
        """
        ...

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        """Bound subsequent reads by an absolute ``anyio.current_time()`` instant.

        Args:
            deadline: The instant at which a pending read reports
                :attr:`ReadStatus.TIMEOUT`, or None to read without a bound.
        """
        ...

    async def read(self, max_bytes: int) -> ReadResult:
        """Read up to ``max_bytes`` bytes, honouring the current read deadline."""
        ...

    async def close(self) -> None:
        """Close the connection.

        Idempotent, and safe to call while another task is blocked in
        :meth:`read`; that read then reports :attr:`ReadStatus.EOF`.
        """
        ...


class Connector(Protocol):
    """Something that can dial a remote endpoint."""

    async def dial(self, host: str, port: Union[int, str], timeout: float) -> Connection:
        """Establish a new connection.

        Args:
            host: The remote host.
            port: The remote port.
            timeout: Seconds allowed before the dial is abandoned.

        Returns:
            A live connection.

        Raises:
            DialTimeoutError: If no connection is established within ``timeout``.
            DialRefusedError: If the peer refuses the connection.
            DialError: For any other failure (DNS resolution, unreachable host).
        """
        ...
