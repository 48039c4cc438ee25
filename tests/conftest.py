"""
Pytest configuration for tcplink tests.

This module contains scripted connection/connector doubles and fixtures.
"""

from typing import Callable, List, Optional

import anyio
import anyio.lowlevel
import pytest

from tcplink.config import ClientConfig
from tcplink.supervisor import Supervisor
from tcplink.telemetry import LoggingFacade, TracingFacade
from tcplink.transport.errors import DialRefusedError, ReadError, WriteError
from tcplink.transport.protocol import ReadResult

TIMEOUT = object()


class MockConnection:
    """Connection double that replays a script of read outcomes.

    Script items: ``bytes`` are delivered as data, :data:`TIMEOUT` as an
    idle read, a :class:`ReadError` as a failed read. When the script runs
    out the connection reports EOF, or, with ``hold_open``, idles until its
    read deadline like a silent peer.
    """

    def __init__(self, script=(), *, hold_open: bool = False, fail_writes: Optional[Exception] = None):
        self.script = list(script)
        self.hold_open = hold_open
        self.fail_writes = fail_writes
        self.written: List[bytes] = []
        self.deadlines: List[float] = []
        self.reads = 0
        self.close_count = 0
        self._closed = False
        self._deadline: Optional[float] = None

    @property
    def closed(self) -> bool:
        return self._closed

    async def write(self, data: bytes) -> int:
        await anyio.lowlevel.checkpoint()
        if self.fail_writes is not None:
            raise self.fail_writes
        if self._closed:
            raise WriteError("Connection is closed")
        self.written.append(bytes(data))
        return len(data)

    def set_read_deadline(self, deadline: Optional[float]) -> None:
        self._deadline = deadline
        self.deadlines.append(deadline)

    async def read(self, max_bytes: int) -> ReadResult:
        self.reads += 1
        await anyio.lowlevel.checkpoint()
        if self._closed:
            return ReadResult.eof()
        if self.script:
            item = self.script.pop(0)
            if item is TIMEOUT:
                return ReadResult.timeout()
            if isinstance(item, ReadError):
                return ReadResult.failed(item)
            return ReadResult.received(item)
        if not self.hold_open:
            return ReadResult.eof()
        await anyio.sleep_until(self._deadline)
        return ReadResult.eof() if self._closed else ReadResult.timeout()

    async def close(self) -> None:
        self.close_count += 1
        self._closed = True


class MockConnector:
    """Connector double handing out scripted outcomes in order.

    Each outcome is a connection or an exception to raise. Once the list is
    exhausted every dial is refused.
    """

    def __init__(self, outcomes=()):
        self.outcomes = list(outcomes)
        self.dials = []

    async def dial(self, host, port, timeout):
        self.dials.append((host, port, timeout, anyio.current_time()))
        await anyio.lowlevel.checkpoint()
        outcome = self.outcomes.pop(0) if self.outcomes else DialRefusedError("refused")
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class RecordingHandler:
    """Handler that records every call, with the time it happened."""

    def __init__(self, on_connect: Optional[Callable[[], None]] = None):
        self.events = []
        self.times = []
        self._on_connect = on_connect

    def _record(self, *event):
        self.events.append(event)
        self.times.append(anyio.current_time())

    def on_connect(self) -> None:
        self._record("connect")
        if self._on_connect is not None:
            self._on_connect()

    def on_message(self, data: bytes) -> None:
        self._record("message", data)

    def on_close(self) -> None:
        self._record("close")

    def count(self, kind: str) -> int:
        return sum(1 for event in self.events if event[0] == kind)

    @property
    def messages(self) -> List[bytes]:
        return [event[1] for event in self.events if event[0] == "message"]


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it holds, failing the test after ``timeout``."""
    with anyio.fail_after(timeout):
        while not predicate():
            await anyio.sleep(0.002)


def make_config(**overrides) -> ClientConfig:
    values = {
        "host": "127.0.0.1",
        "port": 5555,
        "dial_timeout": 0.5,
        "idle_flush_timeout": 0.01,
        "backoff_interval": 0.02,
        "name": "test",
    }
    values.update(overrides)
    return ClientConfig(**values)


def make_supervisor(config: ClientConfig, connector, handler) -> Supervisor:
    return Supervisor(
        config,
        connector,
        handler,
        logger=LoggingFacade("tcplink.test", enabled=False),
        tracer=TracingFacade("tcplink.test", enabled=False),
    )


@pytest.fixture
def handler():
    """Fixture providing a recording handler."""
    return RecordingHandler()


# Anyio Backend Selection - only use asyncio
@pytest.fixture(params=["asyncio"])
def anyio_backend(request):
    """Fixture to run tests with different anyio backends."""
    return request.param
