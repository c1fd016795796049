"""Per-request GraphQL context."""

from fastapi import Depends
from strawberry.fastapi import BaseContext

from garage_api.src.dependencies import GarageServices, get_services
from garage_api.src.services.mutation_service import MutationService
from garage_api.src.services.query_service import QueryService


class GarageContext(BaseContext):
    """Carries the shared services into resolvers; holds no state of its own."""

    def __init__(self, queries: QueryService, mutations: MutationService):
        super().__init__()
        self.queries = queries
        self.mutations = mutations


async def get_context(services: GarageServices = Depends(get_services)) -> GarageContext:
    """FastAPI dependency used as the GraphQL router's context getter."""
    return GarageContext(queries=services.queries, mutations=services.mutations)
