"""Common Pydantic models shared across services."""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class HealthStatus(str, Enum):
    """Health status enum."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class MongoDBConfig(BaseModel):
    """MongoDB connection configuration."""

    model_config = ConfigDict(frozen=True)

    connection_string: str = Field(..., description="MongoDB connection string")
    database: str = Field(..., description="Database name")
    vehicles_collection: str = Field("vehicles", description="Vehicle collection name")
    parts_collection: str = Field("parts", description="Part collection name")
    server_selection_timeout_ms: int = Field(
        5000, gt=0, description="Server selection timeout in milliseconds"
    )


class ServiceInfo(BaseModel):
    """Liveness response body."""

    model_config = ConfigDict(use_enum_values=True)

    status: HealthStatus = Field(..., description="Service health status")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    environment: str = Field(..., description="Deployment environment")


class ReadinessReport(BaseModel):
    """Readiness response body with per-dependency health."""

    model_config = ConfigDict(use_enum_values=True)

    status: str = Field(..., description="ready | not_ready")
    service: str = Field(..., description="Service name")
    version: str = Field(..., description="Service version")
    checks: Dict[str, HealthStatus] = Field(
        default_factory=dict, description="Dependency health status"
    )

    @property
    def is_ready(self) -> bool:
        return self.status == "ready"
