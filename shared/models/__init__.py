"""Shared Pydantic models."""

from .common import (
    HealthStatus,
    MongoDBConfig,
    ReadinessReport,
    ServiceInfo,
)

__all__ = [
    "HealthStatus",
    "MongoDBConfig",
    "ReadinessReport",
    "ServiceInfo",
]
