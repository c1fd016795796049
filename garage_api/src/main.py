"""
FastAPI application entry point for the vehicle and parts GraphQL API.

The application factory assembles:
- GraphQL endpoint (queries and mutations over vehicles and parts)
- Liveness, readiness and Prometheus metrics endpoints
- Request logging with correlation IDs
- Optional OpenTelemetry tracing
- MongoDB client lifecycle (opened and closed by the lifespan)
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import structlog
import uvicorn
from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST
from starlette.exceptions import HTTPException as StarletteHTTPException

from garage_api.src.config import Settings, get_settings
from garage_api.src.dependencies import (
    build_services,
    close_mongo_client,
    init_mongo_client,
    mongodb_config_from_settings,
)
from garage_api.src.gql import create_graphql_router
from garage_api.src.middleware import RequestLoggingMiddleware
from garage_api.src.services.enrichment import EnrichmentProvider
from shared.logging import configure_logging
from shared.metrics import GarageMetrics, get_metrics, get_metrics_handler
from shared.models import HealthStatus, ReadinessReport, ServiceInfo
from shared.tracing import configure_tracing

logger = structlog.get_logger(__name__)


def _build_lifespan(
    settings: Settings,
    database: Any,
    enrichment: Optional[EnrichmentProvider],
    metrics: GarageMetrics,
):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """
        Startup: tracing, MongoDB connection, service wiring, indexes.
        Shutdown: enrichment session, MongoDB client, span flush.
        """
        logger.info(
            "application_starting",
            version=settings.app_version,
            environment=settings.environment,
        )

        client = None
        tracer_provider = None

        try:
            if settings.tracing_enabled:
                tracer_provider = configure_tracing(
                    service_name=settings.app_name,
                    service_version=settings.app_version,
                    otlp_endpoint=settings.tracing_otlp_endpoint,
                    sampling_rate=settings.tracing_sample_rate,
                )
                logger.info("tracing_enabled", endpoint=settings.tracing_otlp_endpoint)

            db = database
            if db is None:
                logger.info("connecting_mongodb", host=settings.mongodb_host_display)
                client = await init_mongo_client(mongodb_config_from_settings(settings))
                db = client[settings.mongodb_database]

            services = build_services(db, settings, enrichment=enrichment, metrics=metrics)
            if settings.mongodb_create_indexes:
                await services.create_indexes()
            app.state.services = services
        except Exception as e:
            logger.error("application_startup_failed", error=str(e), exc_info=True)
            await close_mongo_client(client)
            raise

        logger.info("application_started", graphql_path=settings.graphql_path)
        try:
            yield
        finally:
            logger.info("application_shutting_down")
            await app.state.services.close()
            app.state.services = None
            await close_mongo_client(client)
            if tracer_provider is not None:
                tracer_provider.shutdown()
            logger.info("application_shutdown_complete")

    return lifespan


def _add_exception_handlers(app: FastAPI) -> None:
    """JSON bodies for HTTP errors outside the GraphQL endpoint."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        logger.warning(
            "http_exception",
            path=request.url.path,
            status_code=exc.status_code,
            detail=exc.detail,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("unexpected_exception", path=request.url.path, error=str(exc), exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )


def _add_operational_routes(app: FastAPI, settings: Settings, metrics: GarageMetrics) -> None:
    """Liveness, readiness, metrics and service info."""

    @app.get("/health", tags=["Health"], response_model=ServiceInfo)
    async def health_check() -> ServiceInfo:
        """Liveness: answers without touching MongoDB."""
        return ServiceInfo(
            status=HealthStatus.HEALTHY,
            service=settings.app_name,
            version=settings.app_version,
            environment=settings.environment,
        )

    @app.get("/ready", tags=["Health"])
    async def readiness_check(request: Request) -> JSONResponse:
        """Readiness: 503 until MongoDB answers a ping."""
        mongodb = HealthStatus.UNHEALTHY
        services = request.app.state.services
        if services is not None:
            try:
                await services.ping()
                mongodb = HealthStatus.HEALTHY
            except Exception as e:
                logger.error("mongodb_health_check_failed", error=str(e))

        report = ReadinessReport(
            status="ready" if mongodb == HealthStatus.HEALTHY else "not_ready",
            service=settings.app_name,
            version=settings.app_version,
            checks={"mongodb": mongodb},
        )
        return JSONResponse(
            status_code=status.HTTP_200_OK if report.is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
            content=report.model_dump(),
        )

    if settings.metrics_enabled:
        render_metrics = get_metrics_handler(metrics.registry)

        @app.get(settings.metrics_endpoint, tags=["Monitoring"])
        async def metrics_endpoint() -> Response:
            return Response(content=render_metrics(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/", tags=["Health"])
    async def root() -> Dict[str, Any]:
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "graphql": settings.graphql_path,
            "health": "/health",
        }


def create_app(
    settings: Optional[Settings] = None,
    database: Any = None,
    enrichment: Optional[EnrichmentProvider] = None,
    metrics: Optional[GarageMetrics] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (cached settings when omitted)
        database: Pre-built database handle; when given, the lifespan opens
            no MongoDB client of its own
        enrichment: Enrichment provider override
        metrics: Metrics sink override

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    metrics = metrics or get_metrics()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        app_name=settings.app_name,
        environment=settings.environment,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "GraphQL API over vehicles and their parts. "
            "Keeps vehicle part references consistent with the stored parts."
        ),
        lifespan=_build_lifespan(settings, database, enrichment, metrics),
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.services = None

    if settings.cors_enabled:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "OPTIONS"],
            allow_headers=["*"],
        )

    app.add_middleware(
        RequestLoggingMiddleware,
        metrics=metrics,
        quiet_paths=("/health", "/ready", settings.metrics_endpoint),
    )

    if settings.tracing_enabled:
        FastAPIInstrumentor.instrument_app(app)

    _add_exception_handlers(app)
    _add_operational_routes(app, settings, metrics)

    app.include_router(
        create_graphql_router(graphql_ide=settings.graphql_ide_enabled),
        prefix=settings.graphql_path,
    )

    return app


app = create_app()


def run() -> None:
    """Serve ``app`` with Uvicorn using the configured host and port."""
    settings = get_settings()
    logger.info("starting_uvicorn_server", host=settings.host, port=settings.port)

    uvicorn.run(
        "garage_api.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    run()
