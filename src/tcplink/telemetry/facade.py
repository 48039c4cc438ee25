"""
Facades over structlog and OpenTelemetry.
"""

from typing import Any, Dict, Optional

import structlog
from opentelemetry import trace

from tcplink.telemetry.logging import NoOpLogger
from tcplink.telemetry.tracing import NoOpSpan


class TracingFacade:
    """Creates spans from a named OpenTelemetry tracer, or no-op spans when disabled."""

    def __init__(self, name: str, enabled: bool = True):
        """
        Initialize a new tracing facade.

        Args:
            name: The name of the tracer
            enabled: Whether spans are recorded
        """
        self.name = name
        self.tracer = trace.get_tracer(name) if enabled else None

    def start_as_current_span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        """
        Start a span and make it current for the duration of a ``with`` block.

        Args:
            name: The name of the span
            attributes: Optional attributes to set on the span

        Returns:
            A context manager yielding the span
        """
        if self.tracer is None:
            return NoOpSpan(name, attributes)
        return self.tracer.start_as_current_span(name, attributes=attributes)


class LoggingFacade:
    """Structured logger bound to a fixed context, or a no-op logger when disabled."""

    def __init__(self, name: str, enabled: bool = True, **context: Any):
        """
        Initialize a new logging facade.

        Args:
            name: The name of the logger
            enabled: Whether log entries are emitted
            **context: Key/value pairs added to every entry
        """
        self.name = name
        self.enabled = enabled
        if enabled:
            self.logger = structlog.get_logger(name).bind(**context)
        else:
            self.logger = NoOpLogger(name)

    def debug(self, event: str, **kwargs: Any) -> None:
        self.logger.debug(event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self.logger.info(event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self.logger.warning(event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self.logger.error(event, **kwargs)
