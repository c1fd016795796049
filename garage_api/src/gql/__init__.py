"""GraphQL surface: schema, types and request context."""

from garage_api.src.gql.schema import create_graphql_router, schema
from garage_api.src.gql.types import Part, Vehicle

__all__ = ["create_graphql_router", "schema", "Part", "Vehicle"]
