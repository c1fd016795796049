"""OpenTelemetry tracing.

Spans are exported over OTLP/HTTP to a collector. Until ``configure_tracing``
runs, the global provider is the API's no-op one and ``trace_function``
costs next to nothing.
"""

import functools
import inspect
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional, TypeVar

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.trace import Status, StatusCode

F = TypeVar("F", bound=Callable[..., Any])


def configure_tracing(
    service_name: str,
    service_version: str = "0.1.0",
    otlp_endpoint: Optional[str] = None,
    sampling_rate: float = 0.1,
) -> TracerProvider:
    """Install a global tracer provider exporting to an OTLP/HTTP collector.

    Sampling follows the parent span's decision when there is one, otherwise
    keeps ``sampling_rate`` of new traces.

    Args:
        service_name: ``service.name`` resource attribute
        service_version: ``service.version`` resource attribute
        otlp_endpoint: Collector traces URL; the exporter's default
            (``OTEL_EXPORTER_OTLP_TRACES_ENDPOINT`` or localhost:4318) when None
        sampling_rate: Ratio of root traces kept, 0.0 to 1.0

    Returns:
        The installed provider (shut it down on exit to flush spans)
    """
    provider = TracerProvider(
        resource=Resource.create(
            {
                "service.name": service_name,
                "service.namespace": "garage",
                "service.version": service_version,
            }
        ),
        sampler=ParentBased(TraceIdRatioBased(sampling_rate)),
    )

    exporter = OTLPSpanExporter(endpoint=otlp_endpoint) if otlp_endpoint else OTLPSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    return provider


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


@contextmanager
def _operation_span(name: str, func: Callable[..., Any]) -> Iterator[trace.Span]:
    with get_tracer(func.__module__).start_as_current_span(
        name, record_exception=False, set_status_on_exception=False
    ) as span:
        span.set_attribute("code.function", func.__qualname__)
        span.set_attribute("code.namespace", func.__module__)
        try:
            yield span
        except Exception as exc:
            span.record_exception(exc)
            span.set_status(Status(StatusCode.ERROR, type(exc).__name__))
            raise


def trace_function(span_name: Optional[str] = None) -> Callable[[F], F]:
    """Run the decorated function (sync or async) inside its own span.

    Exceptions are recorded on the span and re-raised unchanged.

    Args:
        span_name: Span name; the function's qualified name when omitted
    """

    def decorator(func: F) -> F:
        name = span_name or func.__qualname__

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with _operation_span(name, func):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            with _operation_span(name, func):
                return func(*args, **kwargs)

        return sync_wrapper  # type: ignore[return-value]

    return decorator
