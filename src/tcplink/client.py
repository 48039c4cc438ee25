"""
Core tcplink client implementation.
"""

from types import TracebackType
from typing import Optional, Type

import anyio
from anyio.abc import TaskGroup

from tcplink.config import ClientConfig
from tcplink.events import CallbackHandler, ClientHandler
from tcplink.supervisor import State, Supervisor
from tcplink.telemetry import get_telemetry
from tcplink.transport.errors import WriteError
from tcplink.transport.protocol import Connector
from tcplink.transport.tcp import TcpConnector


class TcpClient:
    """
    A TCP client that stays connected to one endpoint, reconnecting after every
    disconnect or failed dial, and delivers delimiter-framed messages to a handler.

    A client is single-use: once stopped it does not restart.
    """

    def __init__(
        self,
        config: ClientConfig,
        handler: Optional[ClientHandler] = None,
        *,
        connector: Optional[Connector] = None,
    ):
        """Initialize the client.

        Args:
            config: Endpoint, framing and timing settings.
            handler: Receiver of connect, message and close notifications.
                Defaults to a handler that ignores everything.
            connector: Dials the endpoint; defaults to :class:`TcpConnector`.
        """
        self._config = config
        self._handler = handler if handler is not None else CallbackHandler()
        self._connector = connector if connector is not None else TcpConnector()

        # Set up telemetry; the debug flag gates all diagnostic output
        self._tracer, self._logger = get_telemetry(
            "tcplink.client",
            enabled=config.debug,
            client=config.name,
            address=config.address,
        )

        self._supervisor = Supervisor(
            config,
            self._connector,
            self._handler,
            logger=self._logger,
            tracer=self._tracer,
        )
        self._task_group: Optional[TaskGroup] = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def state(self) -> State:
        return self._supervisor.state

    @property
    def connected(self) -> bool:
        return self._supervisor.connection is not None

    async def run(self) -> None:
        """Run the reconnect loop until :meth:`stop` is called or the task is cancelled."""
        await self._supervisor.run()

    def start(self, task_group: TaskGroup) -> None:
        """Run the reconnect loop in the background of ``task_group``.

        Args:
            task_group: A task group owned by the caller; cancelling it stops
                the client.
        """
        name = f"tcplink-{self._config.name or self._config.address}"
        task_group.start_soon(self.run, name=name)

    def stop(self) -> None:
        """Stop the client.

        Equivalent to cancelling the task running :meth:`run`, but driven locally.
        """
        self._supervisor.stop()

    async def send(self, data: bytes) -> int:
        """Write ``data`` to the current connection.

        Sends are fire-and-forget: while disconnected the call does nothing
        and returns 0. Nothing is queued for a later connection.

        Args:
            data: The bytes to send.

        Returns:
            The number of bytes written.

        Raises:
            WriteError: If the write to a live connection fails. The reconnect
                cycle is not affected.
        """
        connection = self._supervisor.connection
        if connection is None:
            self._logger.debug("send.skipped", size=len(data))
            return 0

        try:
            return await connection.write(data)
        except WriteError as e:
            self._logger.error("send.failed", size=len(data), error=str(e))
            raise

    async def __aenter__(self) -> "TcpClient":
        """Start the client in an internal task group."""
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        self.start(task_group)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> Optional[bool]:
        """Stop the client and wait until it has shut down."""
        self.stop()
        task_group, self._task_group = self._task_group, None
        return await task_group.__aexit__(exc_type, exc_val, exc_tb)
