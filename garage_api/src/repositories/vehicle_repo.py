"""
Vehicle repository for MongoDB operations.

Provides async access to the ``vehicles`` collection, including the atomic
reference-list primitives (``$push`` / ``$pull``) the mutation service uses to
keep vehicles and parts consistent.
"""

from typing import Any, Dict, List, Optional

import structlog
from bson import ObjectId

from garage_api.src.models.records import VehicleDocument, new_vehicle_document
from garage_api.src.repositories.base import MongoRepository

logger = structlog.get_logger(__name__)


class VehicleRepository(MongoRepository):
    """Repository for vehicle documents."""

    record_type = "vehicle"

    async def create_indexes(self) -> None:
        """Create indexes backing the manufacturer, year and reference lookups."""
        async with self.store_operation("create_indexes"):
            await self.collection.create_index("manufacturer")
            await self.collection.create_index("year")
            await self.collection.create_index("parts")

    async def insert_vehicle(self, name: str, manufacturer: str, year: int) -> VehicleDocument:
        """
        Insert a new vehicle with an empty reference list.

        Returns:
            The stored document, including its assigned ``_id``
        """
        document = new_vehicle_document(name, manufacturer, year)
        async with self.store_operation("insert", name=name):
            result = await self.collection.insert_one(document)

        document["_id"] = result.inserted_id
        logger.info("vehicle_inserted", vehicle_id=str(result.inserted_id), name=name)
        return document

    async def get_by_id(self, vehicle_id: ObjectId) -> Optional[VehicleDocument]:
        """Point lookup; ``None`` when the vehicle does not exist."""
        async with self.store_operation("find_one", vehicle_id=str(vehicle_id)):
            document = await self.collection.find_one({"_id": vehicle_id})

        if not document:
            logger.debug("vehicle_not_found", vehicle_id=str(vehicle_id))
            return None
        return document

    async def exists(self, vehicle_id: ObjectId) -> bool:
        async with self.store_operation("exists", vehicle_id=str(vehicle_id)):
            document = await self.collection.find_one({"_id": vehicle_id}, {"_id": 1})
        return document is not None

    async def find_all(self) -> List[VehicleDocument]:
        return await self._find({})

    async def find_by_manufacturer(self, manufacturer: str) -> List[VehicleDocument]:
        """Exact-match scan on manufacturer."""
        return await self._find({"manufacturer": manufacturer})

    async def find_by_year_range(self, start_year: int, end_year: int) -> List[VehicleDocument]:
        """Scan for vehicles with ``start_year <= year <= end_year``."""
        return await self._find({"year": {"$gte": start_year, "$lte": end_year}})

    async def update_fields(self, vehicle_id: ObjectId, fields: Dict[str, Any]) -> int:
        """
        Apply a ``$set`` of the given fields.

        Returns:
            Number of matched documents (0 when the vehicle does not exist)
        """
        async with self.store_operation("update", vehicle_id=str(vehicle_id)):
            result = await self.collection.update_one({"_id": vehicle_id}, {"$set": fields})

        logger.info(
            "vehicle_updated",
            vehicle_id=str(vehicle_id),
            fields=sorted(fields),
            matched=result.matched_count,
        )
        return result.matched_count

    async def append_part(self, vehicle_id: ObjectId, part_id: ObjectId) -> int:
        """
        Atomically append a part id to the vehicle's reference list.

        Uses ``$push`` so concurrent appends to the same vehicle never lose
        updates.

        Returns:
            Number of matched documents
        """
        async with self.store_operation(
            "append_part", vehicle_id=str(vehicle_id), part_id=str(part_id)
        ):
            result = await self.collection.update_one(
                {"_id": vehicle_id}, {"$push": {"parts": part_id}}
            )
        return result.matched_count

    async def detach_part(self, part_id: ObjectId) -> int:
        """
        Remove a part id from every vehicle reference list containing it.

        Returns:
            Number of modified vehicles
        """
        async with self.store_operation("detach_part", part_id=str(part_id)):
            result = await self.collection.update_many(
                {"parts": part_id}, {"$pull": {"parts": part_id}}
            )
        return result.modified_count

    async def _find(self, query: Dict[str, Any]) -> List[VehicleDocument]:
        async with self.store_operation("find", query=str(query)):
            return await self.collection.find(query).to_list()
