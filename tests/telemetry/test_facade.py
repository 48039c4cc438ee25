"""Tests for the telemetry facades."""

import structlog
from structlog.testing import capture_logs

from tcplink.telemetry import get_telemetry
from tcplink.telemetry.facade import LoggingFacade, TracingFacade
from tcplink.telemetry.logging import NoOpLogger
from tcplink.telemetry.tracing import NoOpSpan


def test_tracing_facade_disabled():
    tracer = TracingFacade("test_tracer", enabled=False)

    assert tracer.name == "test_tracer"
    assert tracer.tracer is None

    with tracer.start_as_current_span("test_span", {"key": "value"}) as span:
        span.set_attribute("other", 1)
        span.record_exception(RuntimeError("ignored"))

    assert isinstance(span, NoOpSpan)
    assert span.name == "test_span"
    assert span.attributes == {"key": "value", "other": 1}


def test_tracing_facade_enabled():
    tracer = TracingFacade("test_tracer")

    assert tracer.tracer is not None
    with tracer.start_as_current_span("test_span", {"key": "value"}) as span:
        span.set_attribute("other", 1)


def test_logging_facade_disabled():
    logger = LoggingFacade("test_logger", enabled=False, client="a")

    assert isinstance(logger.logger, NoOpLogger)
    logger.debug("test_event", key="value")
    logger.info("test_event", key="value")
    logger.warning("test_event", key="value")
    logger.error("test_event", key="value")


def test_logging_facade_binds_context():
    with capture_logs() as logs:
        logger = LoggingFacade("test_logger", client="dev-1", address="127.0.0.1:5555")
        logger.info("connection.established", attempt=1)
        logger.warning("dial.failed", error="refused")

    assert logs == [
        {
            "event": "connection.established",
            "log_level": "info",
            "client": "dev-1",
            "address": "127.0.0.1:5555",
            "attempt": 1,
        },
        {
            "event": "dial.failed",
            "log_level": "warning",
            "client": "dev-1",
            "address": "127.0.0.1:5555",
            "error": "refused",
        },
    ]


def test_get_telemetry():
    tracer, logger = get_telemetry("tcplink.test", enabled=False)
    assert isinstance(tracer, TracingFacade)
    assert isinstance(logger, LoggingFacade)
    assert logger.enabled is False


def test_noop_logger():
    logger = NoOpLogger("test_logger")
    assert logger.name == "test_logger"
    assert NoOpLogger().name == ""


def test_structlog_is_importable():
    assert structlog.get_logger("tcplink") is not None
