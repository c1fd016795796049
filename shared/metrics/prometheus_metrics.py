"""Prometheus metrics definitions and helpers.

Provides the metric definitions used by the GraphQL service: HTTP traffic,
record store failures, enrichment outcomes and relationship maintenance.
"""

from functools import lru_cache
from typing import Callable

from prometheus_client import (
    Counter,
    Gauge,
    Histogram,
    generate_latest,
    REGISTRY,
    CollectorRegistry,
)


class GarageMetrics:
    """Vehicle/part service metrics."""

    def __init__(self, registry: CollectorRegistry = REGISTRY) -> None:
        """Initialize service metrics.

        Args:
            registry: Prometheus registry to use
        """
        self.registry = registry

        # HTTP traffic
        self.http_requests_total = Counter(
            "http_requests_total",
            "Total HTTP requests",
            ["method", "endpoint", "status"],
            registry=registry,
        )

        self.http_request_duration = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["method", "endpoint"],
            registry=registry,
        )

        self.http_requests_in_progress = Gauge(
            "http_requests_in_progress",
            "HTTP requests currently in progress",
            ["method", "endpoint"],
            registry=registry,
        )

        # Record store failures
        self.store_errors = Counter(
            "garage_store_errors_total",
            "Record store operations that raised a driver error",
            ["collection", "operation"],
            registry=registry,
        )

        # Enrichment outcomes (success | fallback)
        self.enrichment_requests = Counter(
            "garage_enrichment_requests_total",
            "Enrichment provider calls by outcome",
            ["outcome"],
            registry=registry,
        )

        self.enrichment_duration = Histogram(
            "garage_enrichment_duration_seconds",
            "Time spent waiting for the enrichment provider",
            buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0],
            registry=registry,
        )

        # Reference list maintenance (append | detach)
        self.reference_updates = Counter(
            "garage_reference_updates_total",
            "Vehicle reference list updates applied by mutations",
            ["action"],
            registry=registry,
        )

        # Parts materialized per vehicle read
        self.parts_per_vehicle = Histogram(
            "garage_parts_per_vehicle",
            "Number of parts materialized for a vehicle",
            buckets=[0, 1, 5, 10, 25, 50, 100, 500],
            registry=registry,
        )


@lru_cache()
def get_metrics() -> GarageMetrics:
    """Return the process-wide metrics bound to the default registry."""
    return GarageMetrics()


def get_metrics_handler(registry: CollectorRegistry = REGISTRY) -> Callable[[], bytes]:
    """Get metrics handler for HTTP endpoint.

    Returns:
        Function that generates Prometheus metrics output
    """

    def metrics_handler() -> bytes:
        return generate_latest(registry)

    return metrics_handler
