"""
GraphQL schema: queries, mutations and the FastAPI router.

Resolvers are thin: they pull the services from the request context,
delegate, and convert views to GraphQL types. Domain errors surface in the
``errors`` array with their message; any other exception is masked.
"""

from typing import List, Optional

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import Info

from garage_api.src.errors import GarageError
from garage_api.src.gql.context import GarageContext, get_context
from garage_api.src.gql.types import Part, Vehicle


@strawberry.type
class Query:
    @strawberry.field(description="Vehicle by id, or null when it does not exist.")
    async def vehicle(self, info: Info[GarageContext, None], id: strawberry.ID) -> Optional[Vehicle]:
        view = await info.context.queries.get_vehicle_by_id(id)
        return Vehicle.from_view(view) if view else None

    @strawberry.field(description="All vehicles with their parts.")
    async def vehicles(self, info: Info[GarageContext, None]) -> List[Vehicle]:
        return [Vehicle.from_view(v) for v in await info.context.queries.list_vehicles()]

    @strawberry.field(description="All parts.")
    async def parts(self, info: Info[GarageContext, None]) -> List[Part]:
        return [Part.from_view(p) for p in await info.context.queries.list_parts()]

    @strawberry.field(description="Vehicles whose manufacturer matches exactly.")
    async def vehicles_by_manufacturer(
        self, info: Info[GarageContext, None], manufacturer: str
    ) -> List[Vehicle]:
        views = await info.context.queries.list_vehicles_by_manufacturer(manufacturer)
        return [Vehicle.from_view(v) for v in views]

    @strawberry.field(description="Parts owned by the given vehicle.")
    async def parts_by_vehicle(
        self, info: Info[GarageContext, None], vehicle_id: strawberry.ID
    ) -> List[Part]:
        views = await info.context.queries.list_parts_by_vehicle(vehicle_id)
        return [Part.from_view(p) for p in views]

    @strawberry.field(description="Vehicles with startYear <= year <= endYear.")
    async def vehicles_by_year_range(
        self, info: Info[GarageContext, None], start_year: int, end_year: int
    ) -> List[Vehicle]:
        views = await info.context.queries.list_vehicles_by_year_range(start_year, end_year)
        return [Vehicle.from_view(v) for v in views]


@strawberry.type
class Mutation:
    @strawberry.mutation(description="Create a vehicle with no parts.")
    async def add_vehicle(
        self, info: Info[GarageContext, None], name: str, manufacturer: str, year: int
    ) -> Vehicle:
        view = await info.context.mutations.add_vehicle(name, manufacturer, year)
        return Vehicle.from_view(view)

    @strawberry.mutation(description="Create a part and attach it to its vehicle.")
    async def add_part(
        self, info: Info[GarageContext, None], name: str, price: float, vehicle_id: strawberry.ID
    ) -> Part:
        view = await info.context.mutations.add_part(name, price, vehicle_id)
        return Part.from_view(view)

    @strawberry.mutation(
        description="Update the supplied vehicle fields. The returned parts list is always empty."
    )
    async def update_vehicle(
        self,
        info: Info[GarageContext, None],
        id: strawberry.ID,
        name: Optional[str] = None,
        manufacturer: Optional[str] = None,
        year: Optional[int] = None,
    ) -> Optional[Vehicle]:
        view = await info.context.mutations.update_vehicle(
            id, name=name, manufacturer=manufacturer, year=year
        )
        return Vehicle.from_view(view) if view else None

    @strawberry.mutation(description="Delete a part and detach it from its vehicle.")
    async def delete_part(self, info: Info[GarageContext, None], id: strawberry.ID) -> Part:
        view = await info.context.mutations.delete_part(id)
        return Part.from_view(view)


def should_mask_error(error: GraphQLError) -> bool:
    """Mask unexpected exceptions; keep domain and GraphQL validation errors."""
    original = error.original_error
    if original is None:
        return False
    return not isinstance(original, GarageError)


schema = strawberry.Schema(
    query=Query,
    mutation=Mutation,
    extensions=[lambda: MaskErrors(should_mask_error=should_mask_error)],
)


def create_graphql_router(graphql_ide: bool = True) -> GraphQLRouter:
    """GraphQL router bound to the shared schema and request context."""
    return GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if graphql_ide else None,
    )
