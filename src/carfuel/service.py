"""Car and fuel business rules on top of :class:`~carfuel.state.store.CarStore`."""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable
from datetime import date
from operator import attrgetter
from typing import Any

from carfuel._constants import FIRST_CAR_YEAR, FUTURE_YEAR_ALLOWANCE
from carfuel.exceptions import CarFuelValidationError, CarNotFoundError, DuplicateCarError
from carfuel.models.car import Car, FuelEntry
from carfuel.models.stats import FuelStats
from carfuel.state.sequence import IdSequence
from carfuel.state.store import CarStore

_logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def compute_fuel_stats(entries: tuple[FuelEntry, ...] | list[FuelEntry]) -> FuelStats:
    """Aggregate a fuel history.

    Average consumption is liters per 100 distance units over the span
    between the lowest and highest odometer readings. It is ``0.0`` with
    fewer than two entries or when that span is not positive.
    """
    if not entries:
        return FuelStats()

    total_fuel = sum(entry.liters for entry in entries)
    total_cost = sum(entry.price for entry in entries)

    average_consumption = 0.0
    if len(entries) >= 2:
        # sorted() is stable: equal readings keep insertion order.
        by_odometer = sorted(entries, key=attrgetter("odometer"))
        distance = by_odometer[-1].odometer - by_odometer[0].odometer
        if distance > 0:
            average_consumption = (total_fuel / distance) * 100

    return FuelStats(
        total_fuel=total_fuel,
        total_cost=total_cost,
        average_consumption=average_consumption,
    )


class CarService:
    """Validation, duplicate detection and fuel statistics for cars.

    Parameters
    ----------
    store : CarStore
        Owner of all car records.
    fuel_entry_ids : IdSequence or None
        Source of fuel entry ids; a fresh sequence starting at 1 if omitted.
    clock : callable
        Returns today's date. Read on every validation so the upper year
        bound follows the calendar.
    """

    def __init__(
        self,
        store: CarStore,
        *,
        fuel_entry_ids: IdSequence | None = None,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._fuel_entry_ids = fuel_entry_ids if fuel_entry_ids is not None else IdSequence()
        self._clock = clock
        self._create_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_car_input(self, brand: str | None, model: str | None, year: int | None) -> tuple[str, str, int]:
        """Return trimmed brand and model with the year, or raise."""
        if not isinstance(brand, str) or not brand.strip():
            raise CarFuelValidationError("Brand cannot be null or empty")
        if not isinstance(model, str) or not model.strip():
            raise CarFuelValidationError("Model cannot be null or empty")
        if year is None:
            raise CarFuelValidationError("Year cannot be null")
        if not _is_integral(year):
            raise CarFuelValidationError("Year must be an integer")
        year = int(year)

        current_year = self._clock().year
        if year < FIRST_CAR_YEAR:
            raise CarFuelValidationError(f"Year cannot be before {FIRST_CAR_YEAR} (first car was invented)")
        if year > current_year + FUTURE_YEAR_ALLOWANCE:
            raise CarFuelValidationError(
                f"Year cannot be more than {FUTURE_YEAR_ALLOWANCE} year(s) in the future"
            )
        return brand.strip(), model.strip(), year

    @staticmethod
    def _validate_fuel_input(
        liters: float | None, price: float | None, odometer: int | None
    ) -> tuple[float, float, int]:
        if liters is None or not _is_number(liters) or liters <= 0:
            raise CarFuelValidationError("Liters must be a positive number")
        if price is None or not _is_number(price) or price < 0:
            raise CarFuelValidationError("Price cannot be negative")
        if odometer is None or not _is_integral(odometer) or odometer < 0:
            raise CarFuelValidationError("Odometer must be a non-negative number")
        return float(liters), float(price), int(odometer)

    def _require_car(self, car_id: int) -> Car:
        car = self._store.find_by_id(car_id)
        if car is None:
            raise CarNotFoundError(f"Car with ID {car_id} not found", car_id=car_id)
        return car

    # ------------------------------------------------------------------
    # Cars
    # ------------------------------------------------------------------

    def create_car(self, brand: str | None, model: str | None, year: int | None) -> Car:
        brand, model, year = self._validate_car_input(brand, model, year)

        with self._create_lock:
            if self._store.exists_by_brand_model_year(brand, model, year):
                raise DuplicateCarError(
                    f"Car with brand '{brand}', model '{model}', and year {year} already exists",
                    brand=brand,
                    model=model,
                    year=year,
                )
            car = self._store.save(Car(brand=brand, model=model, year=year))

        _logger.debug("Created car %s (id=%s)", car, car.id)
        return car

    def get_all_cars(self) -> list[Car]:
        return self._store.find_all()

    def get_car_by_id(self, car_id: int) -> Car:
        return self._require_car(car_id)

    def update_car(self, car_id: int, brand: str | None, model: str | None, year: int | None) -> Car:
        """Replace brand, model and year of an existing car.

        Unlike :meth:`create_car` this does not check the new values against
        other cars, so an update can produce a brand/model/year collision.
        """
        existing = self._require_car(car_id)
        brand, model, year = self._validate_car_input(brand, model, year)

        updated = existing.model_copy(update={"brand": brand, "model": model, "year": year})
        return self._store.update(updated)

    def delete_car(self, car_id: int) -> None:
        self._require_car(car_id)
        if not self._store.delete_by_id(car_id):
            # Removed by a concurrent caller after the existence check.
            raise CarNotFoundError(f"Car with ID {car_id} not found", car_id=car_id)

    def car_exists(self, car_id: int) -> bool:
        return self._store.exists_by_id(car_id)

    # ------------------------------------------------------------------
    # Fuel
    # ------------------------------------------------------------------

    def add_fuel_entry(
        self,
        car_id: int,
        liters: float | None,
        price: float | None,
        odometer: int | None,
    ) -> FuelEntry:
        """Append a refueling event to a car.

        The odometer must not be lower than the highest reading already
        recorded for the car. The check and the append run under the car's
        lock, so concurrent calls cannot both pass against a stale maximum.
        """
        self._require_car(car_id)
        fuel, cost, reading = self._validate_fuel_input(liters, price, odometer)

        def _build(existing: tuple[FuelEntry, ...]) -> FuelEntry:
            if existing:
                max_odometer = max(entry.odometer for entry in existing)
                if reading < max_odometer:
                    raise CarFuelValidationError(
                        f"Odometer reading ({reading}) cannot be less than previous maximum ({max_odometer})"
                    )
            return FuelEntry(id=self._fuel_entry_ids.next(), liters=fuel, price=cost, odometer=reading)

        return self._store.append_fuel_entry(car_id, _build)

    def get_fuel_stats(self, car_id: int) -> FuelStats:
        car = self._require_car(car_id)
        return compute_fuel_stats(car.fuel_entries)
