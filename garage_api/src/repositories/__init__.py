"""MongoDB repositories for vehicles and parts."""

from garage_api.src.repositories.part_repo import PartRepository
from garage_api.src.repositories.vehicle_repo import VehicleRepository

__all__ = ["PartRepository", "VehicleRepository"]
