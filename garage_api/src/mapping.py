"""
Mapping between stored documents and API views.

Pure functions, no I/O. Identifiers are translated here: ObjectIds become
strings on the way out and incoming id strings are parsed (and rejected when
malformed) before they reach the store.
"""

from typing import Any, Iterable, Mapping

from bson import ObjectId

from garage_api.src.errors import InvalidIdentifierError, MalformedRecordError
from garage_api.src.models.views import PartView, VehicleView


_PART_FIELDS = ("_id", "name", "price", "vehicleId")
_VEHICLE_FIELDS = ("_id", "name", "manufacturer", "year")


def parse_object_id(value: str, field: str = "id") -> ObjectId:
    """
    Convert an external id string to an ObjectId.

    Args:
        value: Identifier as received from the caller
        field: Argument name, used in the error message

    Returns:
        Parsed ObjectId

    Raises:
        InvalidIdentifierError: If value is not a 24-character hex ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise InvalidIdentifierError(field, str(value))
    return ObjectId(value)


def _require(document: Mapping[str, Any], fields: Iterable[str], record_type: str) -> None:
    for name in fields:
        if document.get(name) is None:
            record_id = document.get("_id")
            raise MalformedRecordError(
                record_type, name, str(record_id) if record_id is not None else None
            )


def to_part_view(document: Mapping[str, Any]) -> PartView:
    """
    Map a stored part document to its API view.

    Raises:
        MalformedRecordError: If the document has no id, name, price or
            owning vehicle
    """
    _require(document, _PART_FIELDS, "part")
    return PartView(
        id=str(document["_id"]),
        name=document["name"],
        price=float(document["price"]),
        vehicle_id=str(document["vehicleId"]),
    )


def to_vehicle_view(
    document: Mapping[str, Any],
    parts: Iterable[PartView],
    enrichment: str,
) -> VehicleView:
    """
    Assemble a composed vehicle from its document, parts and enrichment text.

    Args:
        document: Stored vehicle document
        parts: Already-mapped parts, in the order they should be returned
        enrichment: Enrichment text (or fallback)

    Raises:
        MalformedRecordError: If a mandatory vehicle attribute is missing
    """
    _require(document, _VEHICLE_FIELDS, "vehicle")
    return VehicleView(
        id=str(document["_id"]),
        name=document["name"],
        manufacturer=document["manufacturer"],
        year=int(document["year"]),
        joke=enrichment,
        parts=list(parts),
    )


def part_reference_ids(document: Mapping[str, Any]) -> list:
    """Return the vehicle's embedded part reference list (empty when absent)."""
    return list(document.get("parts") or [])
