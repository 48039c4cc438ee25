"""
tcplink: a resilient, self-reconnecting TCP client with delimiter framing.
"""

from tcplink.client import TcpClient
from tcplink.config import ClientConfig
from tcplink.errors import ConfigurationError, InvalidTransitionError, TcpLinkError
from tcplink.events import CallbackHandler, ClientEvent, ClientHandler, EventType, QueueHandler
from tcplink.framing import DelimiterFramer, read_frames
from tcplink.supervisor import State, Supervisor, Trigger, transition
from tcplink.transport.errors import (
    DialError,
    DialRefusedError,
    DialTimeoutError,
    ReadError,
    TransportError,
    WriteError,
)

__version__ = "1.0.4"

__all__ = [
    "TcpClient",
    "ClientConfig",
    "ClientHandler",
    "CallbackHandler",
    "QueueHandler",
    "ClientEvent",
    "EventType",
    "DelimiterFramer",
    "read_frames",
    "State",
    "Trigger",
    "Supervisor",
    "transition",
    "TcpLinkError",
    "ConfigurationError",
    "InvalidTransitionError",
    "TransportError",
    "DialError",
    "DialTimeoutError",
    "DialRefusedError",
    "ReadError",
    "WriteError",
]
