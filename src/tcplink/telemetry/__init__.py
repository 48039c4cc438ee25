"""
Telemetry module for tcplink.

Diagnostic output goes through structlog and tracing through OpenTelemetry.
Both sit behind small facades so a client can switch all of it off with its
``debug`` flag.
"""

from tcplink.telemetry.config import configure_telemetry
from tcplink.telemetry.facade import LoggingFacade, TracingFacade


def get_telemetry(name: str, enabled: bool = True, **context) -> tuple:
    """
    Get tracer and logger instances for the given name.

    Args:
        name: The name to use for the tracer and logger
        enabled: Whether output is produced; when False both are no-ops
        **context: Key/value pairs bound to every log entry

    Returns:
        A tuple containing a tracer and logger
    """
    return TracingFacade(name, enabled), LoggingFacade(name, enabled, **context)


__all__ = [
    "LoggingFacade",
    "TracingFacade",
    "configure_telemetry",
    "get_telemetry",
]
