"""
Shared plumbing for MongoDB repositories.

Wraps driver errors into ``StoreFailure`` so that callers see one error type
for every connectivity or write problem, logs them and counts them.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

import structlog
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from garage_api.src.errors import StoreFailure
from shared.metrics import GarageMetrics, get_metrics

logger = structlog.get_logger(__name__)


class MongoRepository:
    """Base repository bound to a single async collection."""

    record_type = "document"

    def __init__(self, collection: AsyncCollection, metrics: Optional[GarageMetrics] = None):
        """
        Initialize repository.

        Args:
            collection: pymongo async collection
            metrics: Metrics sink (process-wide metrics when omitted)
        """
        self.collection = collection
        self.metrics = metrics or get_metrics()

    @property
    def collection_name(self) -> str:
        return getattr(self.collection, "name", self.record_type)

    @asynccontextmanager
    async def store_operation(self, operation: str, **context: Any) -> AsyncIterator[None]:
        """
        Context manager translating driver errors for one store call.

        Raises:
            StoreFailure: If the driver raises any PyMongoError
        """
        try:
            yield
        except PyMongoError as e:
            self.metrics.store_errors.labels(
                collection=self.collection_name, operation=operation
            ).inc()
            logger.error(
                f"{self.record_type}_{operation}_failed",
                collection=self.collection_name,
                error=str(e),
                **context,
            )
            raise StoreFailure(
                f"Record store {operation} on '{self.collection_name}' failed",
                {"collection": self.collection_name, "operation": operation},
            ) from e
