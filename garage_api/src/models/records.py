"""Stored document shapes for the ``vehicles`` and ``parts`` collections.

Field names match what is persisted in MongoDB (``vehicleId`` and ``parts``
are camelCase on disk).
"""

from typing import List, TypedDict

from bson import ObjectId


class VehicleDocument(TypedDict, total=False):
    """Vehicle as stored. ``parts`` holds the ids of the parts it owns."""

    _id: ObjectId
    name: str
    manufacturer: str
    year: int
    parts: List[ObjectId]


class PartDocument(TypedDict, total=False):
    """Part as stored. ``vehicleId`` is the mandatory owning vehicle."""

    _id: ObjectId
    name: str
    price: float
    vehicleId: ObjectId


def new_vehicle_document(name: str, manufacturer: str, year: int) -> VehicleDocument:
    """Build a vehicle document ready for insertion (no parts yet)."""
    return {
        "name": name,
        "manufacturer": manufacturer,
        "year": year,
        "parts": [],
    }


def new_part_document(name: str, price: float, vehicle_id: ObjectId) -> PartDocument:
    """Build a part document owned by ``vehicle_id``."""
    return {
        "name": name,
        "price": price,
        "vehicleId": vehicle_id,
    }
