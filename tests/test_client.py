"""
Unit tests for the TcpClient class.
"""

import anyio
import pytest

from tcplink import TcpClient, __version__
from tcplink.events import CallbackHandler
from tcplink.supervisor import State
from tcplink.transport.errors import WriteError
from tcplink.transport.tcp import TcpConnector
from tests.conftest import MockConnection, MockConnector, make_config, wait_until


def test_version():
    assert __version__ == "1.0.4"


def test_init_with_defaults():
    """Test initialization with default handler and connector."""
    client = TcpClient(make_config())
    assert isinstance(client._connector, TcpConnector)
    assert isinstance(client._handler, CallbackHandler)
    assert client.state is State.IDLE
    assert client.connected is False


@pytest.mark.anyio
async def test_send_while_disconnected_is_noop():
    client = TcpClient(make_config(), connector=MockConnector())
    assert await client.send(b"lost") == 0


@pytest.mark.anyio
async def test_send_writes_to_live_connection(handler):
    connection = MockConnection(hold_open=True)
    client = TcpClient(make_config(), handler, connector=MockConnector([connection]))

    async with client:
        await wait_until(lambda: client.connected)
        assert await client.send(b"ping\n") == 5

    assert connection.written == [b"ping\n"]
    assert client.state is State.STOPPED


@pytest.mark.anyio
async def test_send_error_reaches_caller_only(handler):
    connection = MockConnection(hold_open=True, fail_writes=WriteError("broken pipe"))
    client = TcpClient(make_config(), handler, connector=MockConnector([connection]))

    async with client:
        await wait_until(lambda: client.connected)
        with pytest.raises(WriteError):
            await client.send(b"ping")
        assert client.state is State.CONNECTED
        assert handler.events == [("connect",)]


@pytest.mark.anyio
async def test_context_manager_stops_client(handler):
    client = TcpClient(make_config(), handler, connector=MockConnector())

    async with client:
        await wait_until(lambda: handler.count("close") >= 1)

    assert client.state is State.STOPPED
    assert client.connected is False


@pytest.mark.anyio
async def test_start_in_caller_task_group(handler):
    client = TcpClient(make_config(), handler, connector=MockConnector([MockConnection(hold_open=True)]))

    async with anyio.create_task_group() as tg:
        client.start(tg)
        await wait_until(lambda: client.connected)
        client.stop()

    assert handler.events == [("connect",), ("close",)]
    assert client.state is State.STOPPED


@pytest.mark.anyio
async def test_send_from_handler_task(handler):
    """Test the common pattern of replying as soon as the client connects."""
    connection = MockConnection(hold_open=True)
    client = TcpClient(make_config(), handler, connector=MockConnector([connection]))

    async with anyio.create_task_group() as tg:
        client.start(tg)
        await wait_until(lambda: client.connected)
        await client.send(b"Hello, TCP test\n")
        client.stop()

    assert connection.written == [b"Hello, TCP test\n"]


@pytest.mark.anyio
async def test_many_clients_are_independent():
    connectors = [MockConnector([MockConnection([f"{i}\n".encode()], hold_open=True)]) for i in range(20)]
    received = [[] for _ in range(20)]
    clients = [
        TcpClient(
            make_config(name=str(i), delimiter=10),
            CallbackHandler(on_message=received[i].append),
            connector=connectors[i],
        )
        for i in range(20)
    ]

    async with anyio.create_task_group() as tg:
        for client in clients:
            client.start(tg)
        await wait_until(lambda: all(received))
        clients[0].stop()
        await wait_until(lambda: clients[0].state is State.STOPPED)
        assert all(client.connected for client in clients[1:])
        for client in clients[1:]:
            client.stop()

    assert received == [[f"{i}".encode()] for i in range(20)]
