"""FastAPI middleware components."""

from garage_api.src.middleware.request_logging import CORRELATION_HEADER, RequestLoggingMiddleware

__all__ = ["CORRELATION_HEADER", "RequestLoggingMiddleware"]
