"""
Reconnect supervisor.

The supervisor owns one client's lifecycle. It cycles dial, connect, read,
disconnect and back off until it is stopped, either locally through
:meth:`Supervisor.stop` or by cancellation of the task running
:meth:`Supervisor.run`. The state machine is explicit: :func:`transition`
is a pure function over :data:`TRANSITIONS`, so its rules can be checked
without a socket.
"""

import enum
from typing import Dict, Optional, Tuple

import anyio

from tcplink.config import ClientConfig
from tcplink.errors import InvalidTransitionError
from tcplink.events import ClientHandler
from tcplink.framing import read_frames
from tcplink.telemetry import LoggingFacade, TracingFacade
from tcplink.transport.errors import DialError, ReadError, WriteError
from tcplink.transport.protocol import Connection, Connector
from tcplink.transport.telnet import send_telnet_handshake


class State(enum.Enum):
    IDLE = "idle"
    DIALING = "dialing"
    CONNECTED = "connected"
    BACKING_OFF = "backing_off"
    STOPPED = "stopped"


class Trigger(enum.Enum):
    START = "start"
    DIAL_SUCCEEDED = "dial_succeeded"
    DIAL_FAILED = "dial_failed"
    CONNECTION_LOST = "connection_lost"
    BACKOFF_ELAPSED = "backoff_elapsed"
    STOP = "stop"


TRANSITIONS: Dict[Tuple[State, Trigger], State] = {
    (State.IDLE, Trigger.START): State.DIALING,
    (State.DIALING, Trigger.DIAL_SUCCEEDED): State.CONNECTED,
    (State.DIALING, Trigger.DIAL_FAILED): State.BACKING_OFF,
    (State.CONNECTED, Trigger.CONNECTION_LOST): State.BACKING_OFF,
    (State.BACKING_OFF, Trigger.BACKOFF_ELAPSED): State.DIALING,
    (State.IDLE, Trigger.STOP): State.STOPPED,
    (State.DIALING, Trigger.STOP): State.STOPPED,
    (State.CONNECTED, Trigger.STOP): State.STOPPED,
    (State.BACKING_OFF, Trigger.STOP): State.STOPPED,
}


def transition(state: State, trigger: Trigger) -> State:
    """Return the state that follows ``state`` on ``trigger``.

    Raises:
        InvalidTransitionError: If the pair is not in :data:`TRANSITIONS`.
            STOPPED has no outgoing transitions.
    """
    try:
        return TRANSITIONS[(state, trigger)]
    except KeyError:
        raise InvalidTransitionError(state, trigger) from None


class Supervisor:
    """Runs the dial/read/backoff cycle for one client.

    All mutable state (current state, connection, attempt bookkeeping) is
    written only by the task executing :meth:`run` and the reader task it
    spawns for each connection.
    """

    def __init__(
        self,
        config: ClientConfig,
        connector: Connector,
        handler: ClientHandler,
        *,
        logger: LoggingFacade,
        tracer: TracingFacade,
    ):
        self._config = config
        self._connector = connector
        self._handler = handler
        self._logger = logger
        self._tracer = tracer

        self._state = State.IDLE
        self._connection: Optional[Connection] = None
        self._stop_requested = False
        self._stop_event: Optional[anyio.Event] = None
        self._phase_scope: Optional[anyio.CancelScope] = None
        self._attempt_open = False
        self._attempts = 0

    @property
    def state(self) -> State:
        return self._state

    @property
    def connection(self) -> Optional[Connection]:
        """The live connection, or None while disconnected."""
        return self._connection

    @property
    def attempts(self) -> int:
        """Number of dial attempts started so far."""
        return self._attempts

    def stop(self) -> None:
        """Request a local stop.

        Takes effect at the next suspension point: an active dial or read is
        cancelled and a backoff wait ends early. A write in flight completes.
        """
        if self._stop_requested:
            return
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()
        if self._phase_scope is not None:
            self._phase_scope.cancel()

    def _fire(self, trigger: Trigger) -> State:
        previous = self._state
        self._state = transition(previous, trigger)
        self._logger.debug(
            "state.changed",
            previous=previous.value,
            state=self._state.value,
            trigger=trigger.value,
        )
        return self._state

    def _finish_attempt(self) -> None:
        # on_close fires exactly once per dial attempt.
        if self._attempt_open:
            self._attempt_open = False
            self._handler.on_close()

    async def run(self) -> None:
        """Supervise the connection until stopped.

        Returns normally after a local stop. Cancellation of the calling task
        propagates once the connection has been closed.

        Raises:
            InvalidTransitionError: If the supervisor was already run.
        """
        self._fire(Trigger.STOP if self._stop_requested else Trigger.START)
        self._stop_event = anyio.Event()
        if self._stop_requested:
            self._stop_event.set()
        self._logger.info("client.started", address=self._config.address)
        try:
            while self._state is not State.STOPPED:
                if self._state is State.DIALING:
                    await self._dial_phase()
                elif self._state is State.CONNECTED:
                    await self._connected_phase()
                else:
                    await self._backoff_phase()
        finally:
            await self._shutdown()

    async def _shutdown(self) -> None:
        self._finish_attempt()
        connection, self._connection = self._connection, None
        if connection is not None:
            await connection.close()
        if self._state is not State.STOPPED:
            self._state = transition(self._state, Trigger.STOP)
        self._logger.info("client.stopped", address=self._config.address, attempts=self._attempts)

    async def _dial_phase(self) -> None:
        if self._stop_requested:
            self._fire(Trigger.STOP)
            return

        self._attempts += 1
        self._attempt_open = True
        connection = None
        error: Optional[DialError] = None

        with self._tracer.start_as_current_span(
            "tcplink.dial",
            {"net.peer.name": self._config.host, "net.peer.port": str(self._config.port)},
        ) as span:
            with anyio.CancelScope() as scope:
                self._phase_scope = scope
                if self._stop_requested:
                    scope.cancel()
                try:
                    connection = await self._connector.dial(
                        self._config.host, self._config.port, self._config.dial_timeout
                    )
                except DialError as e:
                    error = e
                    span.record_exception(e)
            self._phase_scope = None

        if connection is not None and self._stop_requested:
            self._finish_attempt()
            await connection.close()
            self._fire(Trigger.STOP)
            return

        if connection is not None:
            self._connection = connection
            self._logger.info("connection.established", attempt=self._attempts)
            self._fire(Trigger.DIAL_SUCCEEDED)
            return

        if error is not None:
            self._logger.warning(
                "dial.failed",
                attempt=self._attempts,
                error=str(error),
                error_type=type(error).__name__,
            )
        self._finish_attempt()
        self._fire(Trigger.STOP if self._stop_requested else Trigger.DIAL_FAILED)

    async def _connected_phase(self) -> None:
        connection = self._connection
        messages = 0

        def deliver(data: bytes) -> None:
            nonlocal messages
            messages += 1
            self._logger.debug("message.received", size=len(data), data=data)
            self._handler.on_message(data)

        with self._tracer.start_as_current_span(
            "tcplink.session", {"net.peer.name": self._config.host}
        ) as span:
            await self._greet(connection)
            self._handler.on_connect()

            async with anyio.create_task_group() as tg:
                self._phase_scope = tg.cancel_scope
                if self._stop_requested:
                    tg.cancel_scope.cancel()
                tg.start_soon(self._read, connection, deliver, span)
            self._phase_scope = None
            span.set_attribute("tcplink.messages", messages)

        self._finish_attempt()
        self._connection = None
        await connection.close()
        self._logger.info("connection.closed", attempt=self._attempts, messages=messages)
        self._fire(Trigger.STOP if self._stop_requested else Trigger.CONNECTION_LOST)

    async def _greet(self, connection: Connection) -> None:
        try:
            if self._config.telnet:
                await send_telnet_handshake(connection)
            if self._config.hello:
                await connection.write(self._config.hello)
        except WriteError as e:
            # The reader notices the broken connection right after.
            self._logger.warning("connection.greeting_failed", error=str(e))

    async def _read(self, connection: Connection, deliver, span) -> None:
        try:
            await read_frames(
                connection,
                self._config.delimiter,
                self._config.idle_flush_timeout,
                deliver,
                buffer_size=self._config.read_buffer_size,
            )
        except ReadError as e:
            span.record_exception(e)
            self._logger.warning("connection.read_failed", error=str(e))
        else:
            self._logger.debug("connection.eof")

    async def _backoff_phase(self) -> None:
        self._logger.debug("backoff.start", seconds=self._config.backoff_interval)
        with anyio.move_on_after(self._config.backoff_interval):
            await self._stop_event.wait()
        self._fire(Trigger.STOP if self._stop_requested else Trigger.BACKOFF_ELAPSED)
