"""Request logging and HTTP metrics middleware."""

import time
import uuid
from typing import Optional

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from shared.logging import bind_context, unbind_context
from shared.metrics import GarageMetrics, get_metrics

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request, records HTTP metrics and propagates a correlation ID."""

    def __init__(self, app: ASGIApp, metrics: Optional[GarageMetrics] = None, quiet_paths: tuple = ()):
        super().__init__(app)
        self.metrics = metrics or get_metrics()
        self.quiet_paths = tuple(quiet_paths)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Process request and log details."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())

        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"
        quiet = path.startswith(self.quiet_paths) if self.quiet_paths else False

        bind_context(correlation_id=correlation_id)
        self.metrics.http_requests_in_progress.labels(method=method, endpoint=path).inc()
        start_time = time.perf_counter()

        if not quiet:
            logger.info("request_started", method=method, path=path, client_ip=client_ip)

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            self.metrics.http_requests_total.labels(method=method, endpoint=path, status=500).inc()
            self.metrics.http_request_duration.labels(method=method, endpoint=path).observe(duration)
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True,
            )
            raise
        else:
            duration = time.perf_counter() - start_time
            self.metrics.http_requests_total.labels(
                method=method, endpoint=path, status=response.status_code
            ).inc()
            self.metrics.http_request_duration.labels(method=method, endpoint=path).observe(duration)

            if not quiet:
                logger.info(
                    "request_completed",
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    duration=f"{duration:.3f}s",
                )

            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        finally:
            self.metrics.http_requests_in_progress.labels(method=method, endpoint=path).dec()
            unbind_context("correlation_id")
