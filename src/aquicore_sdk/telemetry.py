"""Logging and tracing for the Aquicore SDK.

SDK loggers run every event through :func:`redact_secrets` before the
processors configured by the application, so access tokens, passwords
and query strings never reach a log sink. Span attributes holding URLs
are stripped of their query string the same way.
"""

from __future__ import annotations

from collections.abc import Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Generator, MutableMapping

    from .config import TelemetryConfig

SDK_NAME = "aquicore-sdk"
SDK_VERSION = "0.1.0"

REDACTED = "[redacted]"

# Wire and config names of credentials.
SECRET_KEYS = frozenset(
    {"authToken", "access_token", "refresh_token", "password", "client_secret"}
)
URL_KEYS = frozenset({"url", "uri", "http.url"})

_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def redact_url(url: str) -> str:
    """Strip the query string, which may carry the access token."""
    return url.split("?", 1)[0]


def _scrub(key: str, value: Any) -> Any:
    if value is None:
        return value
    if key in SECRET_KEYS:
        return REDACTED
    if key in URL_KEYS and isinstance(value, str):
        return redact_url(value)
    if isinstance(value, Mapping):
        return {k: _scrub(str(k), v) for k, v in value.items()}
    return value


def redact_secrets(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credentials and URL query strings.

    Nested mappings, such as request params, are scrubbed as well.
    """
    for key in list(event_dict):
        event_dict[key] = _scrub(key, event_dict[key])
    return event_dict


def _configured_processors(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> Any:
    """Run the processor chain currently configured in structlog."""
    result: Any = event_dict
    for processor in structlog.get_config()["processors"]:
        result = processor(logger, method_name, result)
    return result


def _sdk_logger(name: str) -> structlog.BoundLogger:
    return structlog.wrap_logger(
        None,
        processors=[redact_secrets, _configured_processors],
        logger_factory_args=(name,),
    )


def get_tracer() -> trace.Tracer:
    """Get or create the SDK tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(SDK_NAME, SDK_VERSION)
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the SDK logger."""
    global _logger
    if _logger is None:
        _logger = _sdk_logger(SDK_NAME)
    return _logger


def tracer_for(config: TelemetryConfig | None) -> trace.Tracer:
    """Tracer for one client; a no-op tracer when telemetry is disabled."""
    if config is None:
        return get_tracer()
    if not config.enabled:
        return trace.NoOpTracer()
    return trace.get_tracer(config.service_name, SDK_VERSION)


def logger_for(config: TelemetryConfig | None) -> structlog.BoundLogger:
    """Logger for one client, bound to its service name."""
    if config is None:
        return get_logger()
    return get_logger().bind(service=config.service_name)


def configure_telemetry(config: TelemetryConfig) -> None:
    """Configure process-wide logging and tracing.

    Renders JSON at ``config.log_level``. Applications that configure
    structlog themselves can skip this; SDK events stay redacted either way.

    Args:
        config: Telemetry configuration.
    """
    global _tracer, _logger

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _log_level_to_int(config.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
    )

    _tracer = trace.get_tracer(config.service_name, SDK_VERSION)
    _logger = _sdk_logger(config.service_name)


def _log_level_to_int(level: str) -> int:
    levels = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    return levels.get(level.upper(), 20)


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
    tracer: trace.Tracer | None = None,
) -> Generator[trace.Span, None, None]:
    """Context manager for tracing an operation.

    Args:
        name: Name of the operation.
        attributes: Optional span attributes. URL values lose their query.
        tracer: Tracer to use; defaults to the SDK tracer.

    Yields:
        The active span.
    """
    tracer = tracer or get_tracer()
    with tracer.start_as_current_span(name) as span:
        for key, value in (attributes or {}).items():
            span.set_attribute(key, _scrub(key, value))
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise
