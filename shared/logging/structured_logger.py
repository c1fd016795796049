"""Structured logging setup with structlog.

Application loggers and third-party stdlib loggers (uvicorn, pymongo) go
through the same processor chain, so every line on stdout is either JSON or
console-rendered with the same fields: timestamp, level, logger, app,
environment, the request correlation id and, when a span is active, the
OpenTelemetry trace and span ids.
"""

import logging
import sys
from typing import Any, Dict, List

import structlog
from opentelemetry import trace
from structlog.types import EventDict, Processor, WrappedLogger

# Driver and server loggers that are chatty below WARNING
NOISY_LOGGERS = ("pymongo", "pymongo.serverSelection", "pymongo.connection", "uvicorn.access")


def add_static_fields(fields: Dict[str, str]) -> Processor:
    """Processor stamping fixed key/values (app name, environment) on entries."""

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in fields.items():
            event_dict.setdefault(key, value)
        return event_dict

    return processor


def add_trace_context(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Attach the current trace and span ids, if a recording span is active."""
    span = trace.get_current_span()
    if span.is_recording():
        context = span.get_span_context()
        event_dict["trace_id"] = format(context.trace_id, "032x")
        event_dict["span_id"] = format(context.span_id, "016x")
    return event_dict


def _shared_processors(app_name: str, environment: str) -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        add_static_fields({"app": app_name, "environment": environment}),
        add_trace_context,
    ]


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    app_name: str = "garage-api",
    environment: str = "development",
) -> None:
    """Configure structlog and route stdlib logging through it.

    Safe to call more than once (each application factory call does): the
    root handler is replaced, not stacked.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        json_logs: Render JSON lines; console rendering otherwise
        app_name: Stamped on every entry
        environment: Stamped on every entry
    """
    shared = _shared_processors(app_name, environment)
    if json_logs:
        rendering = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        rendering = [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=[
            *shared,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *rendering,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level.upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, root.level))


def bind_context(**kwargs: Any) -> None:
    """Bind key/values to every entry logged from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)
