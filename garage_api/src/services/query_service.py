"""Read operations over vehicles and parts."""

from typing import List, Optional

from garage_api.src.errors import ValidationFailure
from garage_api.src.mapping import parse_object_id, to_part_view
from garage_api.src.models.views import PartView, VehicleView
from garage_api.src.repositories.part_repo import PartRepository
from garage_api.src.repositories.vehicle_repo import VehicleRepository
from garage_api.src.services.resolver import RelationshipResolver
from shared.tracing import trace_function


class QueryService:
    """Read-only operations; vehicle results are composed by the resolver."""

    def __init__(
        self,
        vehicle_repo: VehicleRepository,
        part_repo: PartRepository,
        resolver: RelationshipResolver,
    ):
        self.vehicle_repo = vehicle_repo
        self.part_repo = part_repo
        self.resolver = resolver

    @trace_function("query.vehicle")
    async def get_vehicle_by_id(self, vehicle_id: str) -> Optional[VehicleView]:
        """Composed vehicle, or ``None`` when it does not exist."""
        document = await self.vehicle_repo.get_by_id(parse_object_id(vehicle_id, "id"))
        if document is None:
            return None
        return await self.resolver.resolve_vehicle(document)

    @trace_function("query.vehicles")
    async def list_vehicles(self) -> List[VehicleView]:
        documents = await self.vehicle_repo.find_all()
        return await self.resolver.resolve_many(documents)

    @trace_function("query.parts")
    async def list_parts(self) -> List[PartView]:
        documents = await self.part_repo.find_all()
        return [to_part_view(d) for d in documents]

    @trace_function("query.vehicles_by_manufacturer")
    async def list_vehicles_by_manufacturer(self, manufacturer: str) -> List[VehicleView]:
        documents = await self.vehicle_repo.find_by_manufacturer(manufacturer)
        return await self.resolver.resolve_many(documents)

    @trace_function("query.parts_by_vehicle")
    async def list_parts_by_vehicle(self, vehicle_id: str) -> List[PartView]:
        """Parts whose owning-vehicle attribute is ``vehicle_id``."""
        documents = await self.part_repo.find_by_vehicle(parse_object_id(vehicle_id, "vehicleId"))
        return [to_part_view(d) for d in documents]

    @trace_function("query.vehicles_by_year_range")
    async def list_vehicles_by_year_range(self, start_year: int, end_year: int) -> List[VehicleView]:
        """
        Vehicles with ``start_year <= year <= end_year``.

        Raises:
            ValidationFailure: If start_year is after end_year
        """
        if start_year > end_year:
            raise ValidationFailure(
                f"startYear ({start_year}) must not be after endYear ({end_year})",
                {"field": "startYear"},
            )
        documents = await self.vehicle_repo.find_by_year_range(start_year, end_year)
        return await self.resolver.resolve_many(documents)
