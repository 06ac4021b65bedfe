"""Fuel statistics model."""

from __future__ import annotations

from carfuel.models._base import CarFuelBaseModel


class FuelStats(CarFuelBaseModel):
    """Aggregate computed on demand from a car's fuel history.

    Parameters
    ----------
    total_fuel : float
        Sum of liters across all entries.
    total_cost : float
        Sum of price across all entries.
    average_consumption : float
        Liters per 100 distance units, ``0.0`` when it cannot be derived.
    """

    total_fuel: float = 0.0
    total_cost: float = 0.0
    average_consumption: float = 0.0
