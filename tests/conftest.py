"""Shared fixtures: settings, in-memory store, wired services and API client."""

import os

os.environ.setdefault("GARAGE_API_TRACING_ENABLED", "false")
os.environ.setdefault("GARAGE_API_LOG_FORMAT", "text")

import pytest
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from garage_api.src.config import Settings
from garage_api.src.dependencies import build_services
from garage_api.src.main import create_app
from garage_api.src.services.enrichment import StaticEnrichmentProvider
from shared.metrics import GarageMetrics
from tests.doubles import JOKE, InMemoryDatabase


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        environment="development",
        enrichment_enabled=False,
        enrichment_timeout_seconds=0.2,
        tracing_enabled=False,
        log_format="text",
        cors_enabled=False,
    )


@pytest.fixture
def metrics() -> GarageMetrics:
    """Metrics bound to a private registry so tests never collide."""
    return GarageMetrics(registry=CollectorRegistry())


@pytest.fixture
def database() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def enrichment() -> StaticEnrichmentProvider:
    return StaticEnrichmentProvider(JOKE)


@pytest.fixture
def services(database, settings, enrichment, metrics):
    return build_services(database, settings, enrichment=enrichment, metrics=metrics)


@pytest.fixture
def vehicles_collection(database, settings):
    return database[settings.vehicles_collection]


@pytest.fixture
def parts_collection(database, settings):
    return database[settings.parts_collection]


@pytest.fixture
def client(settings, database, enrichment, metrics):
    """API test client over the in-memory store."""
    app = create_app(settings=settings, database=database, enrichment=enrichment, metrics=metrics)
    with TestClient(app) as c:
        yield c
