"""
Error hierarchy for the transport layer.

Dial errors are always recoverable: the supervisor logs them and retries after
the backoff interval. Read timeouts and end-of-stream are not errors at all;
they are reported as :class:`~tcplink.transport.protocol.ReadStatus` values.
"""

from tcplink.errors import TcpLinkError


class TransportError(TcpLinkError):
    """Base class for all transport-related errors."""

    pass


class DialError(TransportError):
    """Error establishing a connection to the remote endpoint."""

    pass


class DialTimeoutError(DialError):
    """Connection was not established within the dial timeout."""

    pass


class DialRefusedError(DialError):
    """Connection was actively refused by the remote endpoint."""

    pass


class ReadError(TransportError):
    """Error reading from an established connection (reset, I/O failure)."""

    pass


class WriteError(TransportError):
    """Error writing to an established connection."""

    pass
