"""Car and fuel entry models."""

from __future__ import annotations

from pydantic import Field

from carfuel.models._base import CarFuelBaseModel


class FuelEntry(CarFuelBaseModel):
    """One refueling event attached to a car.

    Parameters
    ----------
    id : int
        Fuel entry id, drawn from a sequence independent of car ids.
    liters : float
        Fuel added, always positive.
    price : float
        Amount paid, currency-agnostic and never negative.
    odometer : int
        Odometer reading at the time of refueling.
    """

    id: int
    liters: float
    price: float
    odometer: int


class Car(CarFuelBaseModel):
    """A vehicle and its refueling history.

    ``id`` is ``None`` until the store assigns one. ``fuel_entries`` is
    kept in the order entries were accepted.
    """

    id: int | None = None
    brand: str
    model: str
    year: int
    fuel_entries: tuple[FuelEntry, ...] = Field(default_factory=tuple)

    def __str__(self) -> str:
        return f"{self.brand} {self.model} {self.year}"
