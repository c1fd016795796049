"""GraphQL object types."""

from typing import List

import strawberry

from garage_api.src.models.views import PartView, VehicleView


@strawberry.type(description="A part owned by exactly one vehicle.")
class Part:
    id: strawberry.ID
    name: str
    price: float
    vehicle_id: strawberry.ID

    @classmethod
    def from_view(cls, view: PartView) -> "Part":
        return cls(
            id=strawberry.ID(view.id),
            name=view.name,
            price=view.price,
            vehicle_id=strawberry.ID(view.vehicle_id),
        )


@strawberry.type(description="A vehicle with its parts materialized.")
class Vehicle:
    id: strawberry.ID
    name: str
    manufacturer: str
    year: int
    joke: str
    parts: List[Part]

    @classmethod
    def from_view(cls, view: VehicleView) -> "Vehicle":
        return cls(
            id=strawberry.ID(view.id),
            name=view.name,
            manufacturer=view.manufacturer,
            year=view.year,
            joke=view.joke,
            parts=[Part.from_view(p) for p in view.parts],
        )
