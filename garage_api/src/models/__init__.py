"""Data models for the GraphQL service.

This package contains the stored document shapes and the API-facing views
built from them.
"""

from garage_api.src.models.records import (
    PartDocument,
    VehicleDocument,
    new_part_document,
    new_vehicle_document,
)
from garage_api.src.models.views import PartView, VehicleView

__all__ = [
    "PartDocument",
    "VehicleDocument",
    "new_part_document",
    "new_vehicle_document",
    "PartView",
    "VehicleView",
]
