"""
Service configuration (pydantic-settings).

Every field can be set through a ``GARAGE_API_``-prefixed environment
variable or a ``.env`` file, e.g. ``GARAGE_API_MONGODB_URL`` or
``GARAGE_API_ENRICHMENT_TIMEOUT_SECONDS``. Groups:

- HTTP server (host, port, environment)
- MongoDB (URL, database, collection names)
- GraphQL mount path and IDE
- Enrichment provider (joke API URL, timeout, fallback text)
- CORS, metrics, tracing and logging
"""

from functools import lru_cache
from typing import Dict, FrozenSet, List, Optional

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_CHOICES: Dict[str, FrozenSet[str]] = {
    "log_level": frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}),
    "environment": frozenset({"development", "staging", "production"}),
    "log_format": frozenset({"json", "text"}),
}


class Settings(BaseSettings):
    """Settings for the vehicle and parts API, resolved once per process."""

    # =========================================================================
    # API Settings
    # =========================================================================

    app_name: str = Field(
        default="Garage GraphQL API",
        description="Application name"
    )
    app_version: str = Field(
        default="0.1.0",
        description="API version"
    )

    debug: bool = Field(
        default=False,
        description="Debug mode - enables verbose logging and error traces"
    )
    environment: str = Field(
        default="production",
        description="Environment: development|staging|production"
    )

    host: str = Field(
        default="0.0.0.0",
        description="API bind host"
    )
    port: int = Field(
        default=4000,
        description="API bind port",
        gt=0,
        lt=65536
    )

    # =========================================================================
    # MongoDB Settings
    # =========================================================================

    mongodb_url: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URL"
    )
    mongodb_database: str = Field(
        default="garage",
        description="Database holding the vehicle and part collections"
    )
    vehicles_collection: str = Field(
        default="vehicles",
        description="Collection name for vehicle documents"
    )
    parts_collection: str = Field(
        default="parts",
        description="Collection name for part documents"
    )
    mongodb_server_selection_timeout_ms: int = Field(
        default=5000,
        description="How long the driver waits for a usable server (milliseconds)",
        gt=0
    )
    mongodb_create_indexes: bool = Field(
        default=True,
        description="Create lookup indexes on startup"
    )

    # =========================================================================
    # GraphQL Settings
    # =========================================================================

    graphql_path: str = Field(
        default="/graphql",
        description="Mount path of the GraphQL endpoint"
    )
    graphql_ide_enabled: bool = Field(
        default=True,
        description="Serve the GraphiQL IDE on GET requests to the GraphQL path"
    )

    # =========================================================================
    # Enrichment Provider Settings
    # =========================================================================

    enrichment_enabled: bool = Field(
        default=True,
        description="Fetch a joke for every materialized vehicle"
    )
    enrichment_url: str = Field(
        default="https://official-joke-api.appspot.com/jokes/random",
        description="Joke API endpoint returning {setup, punchline}"
    )
    enrichment_timeout_seconds: float = Field(
        default=3.0,
        description="Upper bound for a single enrichment call (seconds)",
        gt=0,
        le=60
    )
    enrichment_fallback: str = Field(
        default="No joke available",
        description="Text returned when the enrichment call fails",
        min_length=1
    )

    # =========================================================================
    # CORS Settings
    # =========================================================================

    cors_enabled: bool = Field(
        default=True,
        description="Enable CORS middleware"
    )
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    # =========================================================================
    # Monitoring and Observability
    # =========================================================================

    metrics_enabled: bool = Field(
        default=True,
        description="Enable Prometheus metrics"
    )
    metrics_endpoint: str = Field(
        default="/metrics",
        description="Metrics endpoint path"
    )

    tracing_enabled: bool = Field(
        default=False,
        description="Enable OpenTelemetry tracing"
    )
    tracing_otlp_endpoint: Optional[str] = Field(
        default=None,
        description="OTLP/HTTP traces endpoint (e.g. http://otel-collector:4318/v1/traces)"
    )
    tracing_sample_rate: float = Field(
        default=0.1,
        description="Trace sampling rate (0.0-1.0, where 1.0 = 100%)",
        ge=0.0,
        le=1.0
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG|INFO|WARNING|ERROR|CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json|text"
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level", "environment", "log_format")
    @classmethod
    def normalize_choice(cls, v: str, info: ValidationInfo) -> str:
        """Case-insensitive match against the allowed values of the field."""
        allowed = _CHOICES[info.field_name]
        normalized = v.upper() if info.field_name == "log_level" else v.lower()
        if normalized not in allowed:
            raise ValueError(f"{info.field_name} must be one of {list(allowed)}, got: {v}")
        return normalized

    @field_validator("cors_origins")
    @classmethod
    def default_cors_origins(cls, v: List[str]) -> List[str]:
        # an empty list means any origin
        return v or ["*"]

    @field_validator("graphql_path", "metrics_endpoint")
    @classmethod
    def normalize_path(cls, v: str, info: ValidationInfo) -> str:
        """Mount paths are absolute and carry no trailing slash."""
        if not v.startswith("/") or v == "/":
            raise ValueError(f"{info.field_name} must be an absolute path, got: {v}")
        return v.rstrip("/")

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def mongodb_host_display(self) -> str:
        """MongoDB URL without credentials, safe for logging."""
        return self.mongodb_url.split("@")[-1]

    # =========================================================================
    # Model Config
    # =========================================================================

    model_config = SettingsConfigDict(
        env_prefix="GARAGE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Process-wide settings, read from the environment on first use."""
    return Settings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()
