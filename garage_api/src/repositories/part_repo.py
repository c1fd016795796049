"""
Part repository for MongoDB operations.

Provides async access to the ``parts`` collection.
"""

from typing import Any, Dict, Iterable, List, Optional

import structlog
from bson import ObjectId

from garage_api.src.models.records import PartDocument, new_part_document
from garage_api.src.repositories.base import MongoRepository

logger = structlog.get_logger(__name__)


class PartRepository(MongoRepository):
    """Repository for part documents."""

    record_type = "part"

    async def create_indexes(self) -> None:
        """Index the owning-vehicle attribute used by ``find_by_vehicle``."""
        async with self.store_operation("create_indexes"):
            await self.collection.create_index("vehicleId")

    async def insert_part(self, name: str, price: float, vehicle_id: ObjectId) -> PartDocument:
        """
        Insert a part owned by ``vehicle_id``.

        Returns:
            The stored document, including its assigned ``_id``
        """
        document = new_part_document(name, price, vehicle_id)
        async with self.store_operation("insert", name=name, vehicle_id=str(vehicle_id)):
            result = await self.collection.insert_one(document)

        document["_id"] = result.inserted_id
        logger.info(
            "part_inserted",
            part_id=str(result.inserted_id),
            vehicle_id=str(vehicle_id),
            name=name,
        )
        return document

    async def get_by_id(self, part_id: ObjectId) -> Optional[PartDocument]:
        """Point lookup; ``None`` when the part does not exist."""
        async with self.store_operation("find_one", part_id=str(part_id)):
            document = await self.collection.find_one({"_id": part_id})

        if not document:
            logger.debug("part_not_found", part_id=str(part_id))
            return None
        return document

    async def find_all(self) -> List[PartDocument]:
        return await self._find({})

    async def find_by_ids(self, part_ids: Iterable[ObjectId]) -> List[PartDocument]:
        """Single ``$in`` scan; results come back in store order."""
        return await self._find({"_id": {"$in": list(part_ids)}})

    async def find_by_vehicle(self, vehicle_id: ObjectId) -> List[PartDocument]:
        """Scan on the owning-vehicle attribute."""
        return await self._find({"vehicleId": vehicle_id})

    async def delete(self, part_id: ObjectId) -> int:
        """
        Delete a part.

        Returns:
            Number of deleted documents (0 or 1)
        """
        async with self.store_operation("delete", part_id=str(part_id)):
            result = await self.collection.delete_one({"_id": part_id})

        logger.info("part_deleted_from_store", part_id=str(part_id), deleted=result.deleted_count)
        return result.deleted_count

    async def _find(self, query: Dict[str, Any]) -> List[PartDocument]:
        async with self.store_operation("find", query=str(query)):
            return await self.collection.find(query).to_list()
