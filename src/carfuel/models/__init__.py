"""Data models for cars, fuel entries and the HTTP envelope."""

from carfuel.models._base import CarFuelBaseModel
from carfuel.models.api import ApiMeta, ApiResponse
from carfuel.models.car import Car, FuelEntry
from carfuel.models.requests import AddFuelRequest, CreateCarRequest, parse_request
from carfuel.models.stats import FuelStats

__all__ = [
    "AddFuelRequest",
    "ApiMeta",
    "ApiResponse",
    "Car",
    "CarFuelBaseModel",
    "CreateCarRequest",
    "FuelEntry",
    "FuelStats",
    "parse_request",
]
