"""Metrics module using Prometheus."""

from .prometheus_metrics import (
    GarageMetrics,
    get_metrics,
    get_metrics_handler,
)

__all__ = [
    "GarageMetrics",
    "get_metrics",
    "get_metrics_handler",
]
