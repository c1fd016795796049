"""API-facing views built from stored documents.

Views are read-only projections: identifiers are plain strings and a
vehicle view carries its fully materialized parts.
"""

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class PartView(BaseModel):
    """Part as returned to API callers."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Part identifier")
    name: str = Field(..., description="Part name")
    price: float = Field(..., description="Part price")
    vehicle_id: str = Field(..., min_length=1, description="Owning vehicle identifier")


class VehicleView(BaseModel):
    """Composed vehicle: own fields, owned parts and an enrichment string."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Vehicle identifier")
    name: str = Field(..., description="Vehicle name")
    manufacturer: str = Field(..., description="Manufacturer name")
    year: int = Field(..., description="Model year")
    joke: str = Field(..., description="Enrichment text (or the configured fallback)")
    parts: List[PartView] = Field(default_factory=list, description="Owned parts")
