"""carfuel - In-memory car registry with fuel tracking and consumption statistics."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("carfuel")
except PackageNotFoundError:
    __version__ = "0+local"
from carfuel.client import CarFuelClient
from carfuel.config import CarFuelConfig
from carfuel.exceptions import (
    CarFuelApiError,
    CarFuelConfigError,
    CarFuelError,
    CarFuelTransportError,
    CarFuelValidationError,
    CarNotFoundError,
    DuplicateCarError,
)
from carfuel.models import Car, FuelEntry, FuelStats
from carfuel.service import CarService, compute_fuel_stats
from carfuel.state import CarStore, IdSequence

__all__ = [
    "__version__",
    "Car",
    "CarFuelApiError",
    "CarFuelClient",
    "CarFuelConfig",
    "CarFuelConfigError",
    "CarFuelError",
    "CarFuelTransportError",
    "CarFuelValidationError",
    "CarNotFoundError",
    "CarService",
    "CarStore",
    "DuplicateCarError",
    "FuelEntry",
    "FuelStats",
    "IdSequence",
    "compute_fuel_stats",
]
