"""Data generators for load testing."""

from .garage_seeder import GarageSeeder, generate_part_document, generate_vehicle_document

__all__ = [
    "GarageSeeder",
    "generate_part_document",
    "generate_vehicle_document",
]
