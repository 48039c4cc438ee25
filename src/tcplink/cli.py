"""
Command-line entry point: run one or more clients against an endpoint.

Example:
  tcplink 127.0.0.1 5555 --clients 10 --delimiter 9 --telnet --hello 'Hi\\n' --debug
"""

import argparse
import signal
from typing import List, Optional

import anyio
import structlog

from tcplink.client import TcpClient
from tcplink.config import ClientConfig
from tcplink.errors import ConfigurationError
from tcplink.events import CallbackHandler
from tcplink.telemetry import configure_telemetry


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tcplink", description="Keep TCP clients connected and print the messages they receive."
    )
    parser.add_argument("host", help="Remote host.")
    parser.add_argument("port", help="Remote port.")
    parser.add_argument("--clients", type=int, default=1, help="Number of independent clients.")
    parser.add_argument("--name", default="client-", help="Name prefix for log correlation.")
    parser.add_argument(
        "--delimiter", type=lambda value: int(value, 0), default=None,
        help="Message delimiter byte, e.g. 10 or 0x09. Default: idle flush only.")
    parser.add_argument("--telnet", action="store_true", default=None, help="Send telnet negotiation.")
    parser.add_argument("--hello", default=None, help="Text sent after every connect.")
    parser.add_argument("--dial-timeout", type=float, default=None, help="Dial timeout (seconds).")
    parser.add_argument("--idle-flush", type=float, default=None, help="Idle flush timeout (seconds).")
    parser.add_argument("--backoff", type=float, default=None, help="Reconnect backoff (seconds).")
    parser.add_argument(
        "--duration", type=float, default=None,
        help="Stop after this many seconds. Default: run until SIGINT/SIGTERM.")
    parser.add_argument("--debug", action="store_true", default=None, help="Emit client diagnostics.")
    return parser


def _build_configs(args: argparse.Namespace) -> List[ClientConfig]:
    hello = args.hello.encode("utf-8").decode("unicode_escape").encode("latin-1") if args.hello else None
    return [
        ClientConfig.from_env(
            args.host,
            args.port,
            name=f"{args.name}{index}",
            delimiter=args.delimiter,
            telnet=args.telnet,
            hello=hello,
            dial_timeout=args.dial_timeout,
            idle_flush_timeout=args.idle_flush,
            backoff_interval=args.backoff,
            debug=args.debug,
        )
        for index in range(args.clients)
    ]


def _make_handler(name: str, logger) -> CallbackHandler:
    return CallbackHandler(
        on_connect=lambda: logger.info("connected", client=name),
        on_message=lambda data: logger.info(
            "received", client=name, message=data.decode("utf-8", errors="replace")
        ),
        on_close=lambda: logger.info("closed", client=name),
    )


async def _wait_for_signal(logger) -> None:
    with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
        async for signum in signals:
            logger.info("shutdown.signal", signal=signal.Signals(signum).name)
            return


async def _run(configs: List[ClientConfig], duration: Optional[float]) -> None:
    logger = structlog.get_logger("tcplink.cli")
    clients = [TcpClient(config, _make_handler(config.name, logger)) for config in configs]

    async with anyio.create_task_group() as tg:
        for client in clients:
            client.start(tg)

        with anyio.move_on_after(duration):
            await _wait_for_signal(logger)

        for client in clients:
            client.stop()

    logger.info("shutdown.complete", clients=len(clients))


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.clients < 1:
        parser.error("--clients must be at least 1")

    try:
        configs = _build_configs(args)
    except ConfigurationError as e:
        parser.error(str(e))

    configure_telemetry(
        service_name="tcplink",
        trace_enabled=False,
        log_level="DEBUG" if args.debug else "INFO",
    )
    anyio.run(_run, configs, args.duration)
    return 0
