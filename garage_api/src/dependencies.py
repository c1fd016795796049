"""
Dependency wiring for the MongoDB client, repositories and services.

Provides:
- MongoDB client creation and shutdown (one client per process)
- Construction of repositories and services from a database handle
- FastAPI dependencies resolving the services stored on ``app.state``

Business logic never reaches for module globals: the lifespan builds a
``GarageServices`` container once and request handlers receive it through
FastAPI's dependency injection.
"""

from dataclasses import dataclass
from typing import Any, Optional

import structlog
from fastapi import HTTPException, Request, status
from pymongo import AsyncMongoClient

from garage_api.src.config import Settings
from garage_api.src.repositories.part_repo import PartRepository
from garage_api.src.repositories.vehicle_repo import VehicleRepository
from garage_api.src.services.enrichment import (
    EnrichmentProvider,
    JokeApiProvider,
    StaticEnrichmentProvider,
)
from garage_api.src.services.mutation_service import MutationService
from garage_api.src.services.query_service import QueryService
from garage_api.src.services.resolver import RelationshipResolver
from shared.metrics import GarageMetrics, get_metrics
from shared.models import MongoDBConfig

logger = structlog.get_logger(__name__)


# ============================================================================
# MONGODB CLIENT
# ============================================================================


def mongodb_config_from_settings(settings: Settings) -> MongoDBConfig:
    """Extract the MongoDB part of the settings."""
    return MongoDBConfig(
        connection_string=settings.mongodb_url,
        database=settings.mongodb_database,
        vehicles_collection=settings.vehicles_collection,
        parts_collection=settings.parts_collection,
        server_selection_timeout_ms=settings.mongodb_server_selection_timeout_ms,
    )


async def init_mongo_client(config: MongoDBConfig) -> AsyncMongoClient:
    """
    Create the MongoDB client and verify connectivity.

    Should be called during application startup.

    Returns:
        Connected async client

    Raises:
        pymongo.errors.PyMongoError: If the server cannot be reached
    """
    client: AsyncMongoClient = AsyncMongoClient(
        config.connection_string,
        serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        appname="garage-api",
    )

    try:
        await client.admin.command("ping")
    except Exception as e:
        logger.error("mongodb_connect_failed", error=str(e))
        await client.close()
        raise

    logger.info("mongodb_connected", database=config.database)
    return client


async def close_mongo_client(client: Optional[AsyncMongoClient]) -> None:
    """Close the MongoDB client. Should be called during shutdown."""
    if client is not None:
        await client.close()
        logger.info("mongodb_client_closed")


# ============================================================================
# SERVICES CONTAINER
# ============================================================================


@dataclass
class GarageServices:
    """Process-wide repositories and services, built once at startup."""

    database: Any
    vehicle_repo: VehicleRepository
    part_repo: PartRepository
    enrichment: EnrichmentProvider
    resolver: RelationshipResolver
    queries: QueryService
    mutations: MutationService

    async def ping(self) -> bool:
        """Check the record store answers a ping."""
        await self.database.command("ping")
        return True

    async def create_indexes(self) -> None:
        await self.vehicle_repo.create_indexes()
        await self.part_repo.create_indexes()
        logger.info("mongodb_indexes_ensured")

    async def close(self) -> None:
        close = getattr(self.enrichment, "close", None)
        if close is not None:
            await close()


def build_enrichment(settings: Settings) -> EnrichmentProvider:
    """Joke API provider, or the static fallback when enrichment is disabled."""
    if not settings.enrichment_enabled:
        logger.info("enrichment_disabled")
        return StaticEnrichmentProvider(settings.enrichment_fallback)
    return JokeApiProvider(
        settings.enrichment_url,
        timeout_seconds=settings.enrichment_timeout_seconds,
    )


def build_services(
    database: Any,
    settings: Settings,
    enrichment: Optional[EnrichmentProvider] = None,
    metrics: Optional[GarageMetrics] = None,
) -> GarageServices:
    """
    Wire repositories and services over a database handle.

    Args:
        database: pymongo ``AsyncDatabase`` (or a compatible double)
        settings: Application settings
        enrichment: Enrichment provider (built from settings when omitted)
        metrics: Metrics sink (process-wide when omitted)
    """
    metrics = metrics or get_metrics()
    enrichment = enrichment or build_enrichment(settings)

    vehicle_repo = VehicleRepository(database[settings.vehicles_collection], metrics)
    part_repo = PartRepository(database[settings.parts_collection], metrics)
    resolver = RelationshipResolver(
        part_repo,
        enrichment,
        fallback=settings.enrichment_fallback,
        enrichment_timeout=settings.enrichment_timeout_seconds,
        metrics=metrics,
    )

    return GarageServices(
        database=database,
        vehicle_repo=vehicle_repo,
        part_repo=part_repo,
        enrichment=enrichment,
        resolver=resolver,
        queries=QueryService(vehicle_repo, part_repo, resolver),
        mutations=MutationService(vehicle_repo, part_repo, resolver, metrics),
    )


# ============================================================================
# FASTAPI DEPENDENCIES
# ============================================================================


def get_services(request: Request) -> GarageServices:
    """
    Services container for the current application.

    Raises:
        HTTPException: 503 if the application has not finished starting
    """
    services = getattr(request.app.state, "services", None)
    if services is None:
        logger.error("services_not_initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is starting up",
        )
    return services
