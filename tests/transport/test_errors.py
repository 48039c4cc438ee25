"""
Tests for the error hierarchy.

This module contains tests for the error hierarchy of tcplink and its transport layer.
"""

import pytest

from tcplink.errors import ConfigurationError, InvalidTransitionError, TcpLinkError
from tcplink.supervisor import State, Trigger
from tcplink.transport.errors import (
    DialError,
    DialRefusedError,
    DialTimeoutError,
    ReadError,
    TransportError,
    WriteError,
)


def test_error_hierarchy():
    """Test that the error hierarchy is correctly implemented."""
    assert issubclass(ConfigurationError, TcpLinkError)
    assert issubclass(InvalidTransitionError, TcpLinkError)
    assert issubclass(TransportError, TcpLinkError)
    assert issubclass(DialError, TransportError)
    assert issubclass(DialTimeoutError, DialError)
    assert issubclass(DialRefusedError, DialError)
    assert issubclass(ReadError, TransportError)
    assert issubclass(WriteError, TransportError)

    timeout_error = DialTimeoutError("Connection timed out")
    assert isinstance(timeout_error, TransportError)
    assert str(timeout_error) == "Connection timed out"


def test_dial_errors_are_not_read_or_write_errors():
    assert not issubclass(DialError, (ReadError, WriteError))
    assert not issubclass(WriteError, ReadError)


def test_error_handling():
    """Test error handling in a typical use case."""
    try:
        raise DialRefusedError("Connection to 127.0.0.1:1 refused")
    except DialError as e:
        assert "refused" in str(e)
    except TransportError:
        pytest.fail("DialRefusedError should be caught by DialError")


def test_invalid_transition_message():
    error = InvalidTransitionError(State.STOPPED, Trigger.START)
    assert str(error) == "No transition from STOPPED on START"
