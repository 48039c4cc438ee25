"""
Configuration functions for the telemetry module.

This module configures structlog and the OpenTelemetry SDK with sensible
defaults, reading the standard ``OTEL_*`` environment variables.
"""

import logging
import os
from typing import Any, List, Optional

import structlog
from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from tcplink.config import get_env_bool
from tcplink.errors import ConfigurationError

SUPPORTED_EXPORTERS = ("console",)


def configure_telemetry(
    service_name: Optional[str] = None,
    trace_enabled: Optional[bool] = None,
    log_level: str = "INFO",
    log_processors: Optional[List[Any]] = None,
    trace_exporters: Optional[List[str]] = None,
) -> bool:
    """
    Configure OpenTelemetry and structlog with sensible defaults.

    Args:
        service_name: The name of the service
        trace_enabled: Whether tracing is enabled
        log_level: The log level
        log_processors: Additional log processors, run before rendering
        trace_exporters: The trace exporters to use

    Returns:
        True if tracing is enabled, False otherwise

    Raises:
        ConfigurationError: If the log level or an exporter is unknown
    """
    if trace_enabled is None:
        trace_enabled = not get_env_bool("OTEL_SDK_DISABLED", False)

    if service_name is None:
        service_name = os.environ.get("OTEL_SERVICE_NAME", "tcplink")

    if trace_enabled:
        provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
        _configure_exporters(provider, trace_exporters)
        trace.set_tracer_provider(provider)

    _configure_structlog(log_level, log_processors)
    return trace_enabled


def _configure_exporters(tracer_provider: TracerProvider, exporters: Optional[List[str]] = None) -> None:
    """
    Configure trace exporters.

    Args:
        tracer_provider: The tracer provider to configure
        exporters: The exporters to use, or None to read OTEL_TRACES_EXPORTER
    """
    if exporters is None:
        exporter_env = os.environ.get("OTEL_TRACES_EXPORTER", "")
        exporters = [ex.strip() for ex in exporter_env.split(",") if ex.strip()]

    for exporter_name in exporters:
        if exporter_name == "none":
            continue
        if exporter_name not in SUPPORTED_EXPORTERS:
            raise ConfigurationError(
                f"Unsupported trace exporter: {exporter_name}. "
                f"Available exporters: {', '.join(SUPPORTED_EXPORTERS)}"
            )
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))


def _add_trace_context(_, __, event_dict):
    """Add trace context to log entries if a span is active."""
    context = trace.get_current_span().get_span_context()
    if context.is_valid:
        event_dict["trace_id"] = format(context.trace_id, "032x")
        event_dict["span_id"] = format(context.span_id, "016x")
    return event_dict


def _configure_structlog(log_level: str, processors: Optional[List[Any]] = None) -> None:
    """
    Configure structlog on top of the standard library logging module.

    Args:
        log_level: The log level
        processors: Additional processors to add
    """
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {log_level}")

    logging.basicConfig(format="%(message)s", level=level)

    chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.processors.add_log_level,
        _add_trace_context,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if processors:
        chain.extend(processors)
    chain.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=chain,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
