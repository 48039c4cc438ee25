"""
Transport layer for tcplink.

This package defines the connector/connection protocols the supervisor
depends on, a TCP implementation on top of AnyIO, and the transport error
hierarchy.
"""

from tcplink.transport.errors import (
    DialError,
    DialRefusedError,
    DialTimeoutError,
    ReadError,
    TransportError,
    WriteError,
)
from tcplink.transport.protocol import Connection, Connector, ReadResult, ReadStatus
from tcplink.transport.tcp import TcpConnection, TcpConnector
from tcplink.transport.telnet import TELNET_HANDSHAKE, send_telnet_handshake

__all__ = [
    "Connection",
    "Connector",
    "ReadResult",
    "ReadStatus",
    "TcpConnection",
    "TcpConnector",
    "TELNET_HANDSHAKE",
    "send_telnet_handshake",
    "TransportError",
    "DialError",
    "DialTimeoutError",
    "DialRefusedError",
    "ReadError",
    "WriteError",
]
