"""Business logic services.

This package contains the relationship resolver, the read and write
services built on it, and the enrichment providers.
"""

from garage_api.src.services.enrichment import (
    EnrichmentProvider,
    JokeApiProvider,
    StaticEnrichmentProvider,
)
from garage_api.src.services.mutation_service import MutationService
from garage_api.src.services.query_service import QueryService
from garage_api.src.services.resolver import RelationshipResolver

__all__ = [
    "EnrichmentProvider",
    "JokeApiProvider",
    "StaticEnrichmentProvider",
    "MutationService",
    "QueryService",
    "RelationshipResolver",
]
