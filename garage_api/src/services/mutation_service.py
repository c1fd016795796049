"""
Write operations over vehicles and parts.

Every mutation keeps the two collections consistent: a vehicle's ``parts``
list must name exactly the parts whose ``vehicleId`` points back at it.
MongoDB does not enforce this, so the side effects below do.

    add_vehicle     insert with empty reference list
    add_part        insert part, then $push its id onto the owner (undone on failure)
    update_vehicle  $set supplied fields only, references untouched
    delete_part     delete part, then $pull its id from every vehicle
"""

import math
from typing import Any, Dict, Optional

import structlog
from bson import ObjectId

from garage_api.src.errors import NotFoundError, StoreFailure, ValidationFailure
from garage_api.src.mapping import parse_object_id, to_part_view, to_vehicle_view
from garage_api.src.models.views import PartView, VehicleView
from garage_api.src.repositories.part_repo import PartRepository
from garage_api.src.repositories.vehicle_repo import VehicleRepository
from garage_api.src.services.resolver import RelationshipResolver
from shared.metrics import GarageMetrics, get_metrics
from shared.tracing import trace_function

logger = structlog.get_logger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationFailure(f"{field} must not be blank", {"field": field})
    return value


class MutationService:
    """Vehicle/part writes with their consistency side effects."""

    def __init__(
        self,
        vehicle_repo: VehicleRepository,
        part_repo: PartRepository,
        resolver: RelationshipResolver,
        metrics: Optional[GarageMetrics] = None,
    ):
        self.vehicle_repo = vehicle_repo
        self.part_repo = part_repo
        self.resolver = resolver
        self.metrics = metrics or get_metrics()

    @trace_function("mutation.add_vehicle")
    async def add_vehicle(self, name: str, manufacturer: str, year: int) -> VehicleView:
        """
        Create a vehicle with no parts.

        Returns:
            The new vehicle with an empty parts list and enrichment text
        """
        _require_text(name, "name")
        _require_text(manufacturer, "manufacturer")

        document = await self.vehicle_repo.insert_vehicle(name, manufacturer, year)
        joke = await self.resolver.enrichment_text()

        logger.info("vehicle_created", vehicle_id=str(document["_id"]), manufacturer=manufacturer)
        return to_vehicle_view(document, [], joke)

    @trace_function("mutation.add_part")
    async def add_part(self, name: str, price: float, vehicle_id: str) -> PartView:
        """
        Create a part and link it to its owning vehicle.

        The link is an atomic ``$push`` so concurrent additions to the same
        vehicle are all kept.

        Raises:
            ValidationFailure: On a blank name, non-finite price or malformed id
            NotFoundError: If the owning vehicle does not exist, or is gone
                by the time the link is written (the part is removed again)
            StoreFailure: If a write fails; a part left without its link is
                removed before the error is raised
        """
        _require_text(name, "name")
        if price is None or not math.isfinite(price):
            raise ValidationFailure("price must be a finite number", {"field": "price"})
        owner_id = parse_object_id(vehicle_id, "vehicleId")

        if not await self.vehicle_repo.exists(owner_id):
            logger.warning("part_owner_not_found", vehicle_id=vehicle_id)
            raise NotFoundError("Vehicle not found", {"vehicle_id": vehicle_id})

        document = await self.part_repo.insert_part(name, price, owner_id)
        part_id = document["_id"]
        try:
            matched = await self.vehicle_repo.append_part(owner_id, part_id)
        except StoreFailure:
            await self._discard_unlinked_part(part_id, vehicle_id)
            raise

        if not matched:
            logger.error("part_owner_vanished", part_id=str(part_id), vehicle_id=vehicle_id)
            await self._discard_unlinked_part(part_id, vehicle_id)
            raise NotFoundError("Vehicle not found", {"vehicle_id": vehicle_id})

        self.metrics.reference_updates.labels(action="append").inc()

        logger.info("part_created", part_id=str(document["_id"]), vehicle_id=vehicle_id)
        return to_part_view(document)

    @trace_function("mutation.update_vehicle")
    async def update_vehicle(
        self,
        vehicle_id: str,
        name: Optional[str] = None,
        manufacturer: Optional[str] = None,
        year: Optional[int] = None,
    ) -> Optional[VehicleView]:
        """
        Update the supplied fields of a vehicle.

        Omitted fields keep their stored values. The response reflects the
        re-read document; its parts list is empty because composition is not
        re-run for updates.

        Returns:
            Updated vehicle, or ``None`` if it does not exist
        """
        object_id = parse_object_id(vehicle_id, "id")

        updates: Dict[str, Any] = {}
        if name is not None:
            updates["name"] = _require_text(name, "name")
        if manufacturer is not None:
            updates["manufacturer"] = _require_text(manufacturer, "manufacturer")
        if year is not None:
            updates["year"] = year

        if updates:
            await self.vehicle_repo.update_fields(object_id, updates)

        document = await self.vehicle_repo.get_by_id(object_id)
        if document is None:
            logger.info("vehicle_update_target_missing", vehicle_id=vehicle_id)
            return None

        joke = await self.resolver.enrichment_text()
        return to_vehicle_view(document, [], joke)

    @trace_function("mutation.delete_part")
    async def delete_part(self, part_id: str) -> PartView:
        """
        Delete a part and detach it from every vehicle listing it.

        Detachment matches on reference-list membership rather than on the
        part's ``vehicleId``, so a list that drifted from the back-reference
        is cleaned as well.

        Returns:
            The deleted part

        Raises:
            NotFoundError: If the part does not exist (nothing is modified)
        """
        object_id = parse_object_id(part_id, "id")

        document = await self.part_repo.get_by_id(object_id)
        if document is None:
            raise NotFoundError("Part not found", {"part_id": part_id})

        view = to_part_view(document)
        await self.part_repo.delete(object_id)
        detached = await self.vehicle_repo.detach_part(object_id)
        self.metrics.reference_updates.labels(action="detach").inc(detached)

        if detached != 1:
            logger.warning(
                "part_detach_unexpected_count",
                part_id=part_id,
                owner_id=view.vehicle_id,
                detached=detached,
            )

        logger.info("part_deleted", part_id=part_id, vehicle_id=view.vehicle_id)
        return view

    async def _discard_unlinked_part(self, part_id: ObjectId, vehicle_id: str) -> None:
        """Remove a part whose ``$push`` onto the owner did not happen."""
        await self.part_repo.delete(part_id)
        logger.warning("unlinked_part_discarded", part_id=str(part_id), vehicle_id=vehicle_id)
