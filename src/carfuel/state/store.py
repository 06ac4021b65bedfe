"""Thread-safe in-memory car store.

This is the only component allowed to mutate car records. Reads return
frozen :class:`~carfuel.models.car.Car` snapshots whose fuel history is a
tuple, so nothing outside the store can append to or reorder it.

Locking: ``CarStore._lock`` guards the record map and the id sequence.
Each record carries its own lock that serializes mutations of that car.
The store lock is never held while waiting for a record lock; code that
needs both takes the record lock first.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from carfuel.exceptions import CarNotFoundError
from carfuel.models.car import Car, FuelEntry
from carfuel.state.sequence import IdSequence

_logger = logging.getLogger(__name__)

FuelEntryFactory = Callable[[tuple[FuelEntry, ...]], FuelEntry]
"""Builds the entry to append from the car's current history; may raise to abort."""


def _not_found(car_id: int) -> CarNotFoundError:
    return CarNotFoundError(f"Car with ID {car_id} not found", car_id=car_id)


@dataclass
class _CarRecord:
    """Mutable stored state for a single car."""

    id: int
    brand: str
    model: str
    year: int
    fuel_entries: list[FuelEntry] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def snapshot(self) -> Car:
        with self.lock:
            return self.snapshot_locked()

    def snapshot_locked(self) -> Car:
        """Snapshot for callers that already hold ``lock``."""
        return Car(
            id=self.id,
            brand=self.brand,
            model=self.model,
            year=self.year,
            fuel_entries=tuple(self.fuel_entries),
        )

    def matches(self, brand: str, model: str, year: int) -> bool:
        return (
            self.year == year
            and self.brand.casefold() == brand.casefold()
            and self.model.casefold() == model.casefold()
        )


class CarStore:
    """In-memory store for car records.

    Car ids come from *id_sequence* (a fresh :class:`IdSequence` starting at
    1 by default). Ids are never reused, even after deletion.
    """

    def __init__(self, *, id_sequence: IdSequence | None = None) -> None:
        self._ids = id_sequence if id_sequence is not None else IdSequence()
        self._records: dict[int, _CarRecord] = {}
        self._lock = threading.Lock()

    def _record(self, car_id: int) -> _CarRecord | None:
        with self._lock:
            return self._records.get(car_id)

    def _all_records(self) -> list[_CarRecord]:
        with self._lock:
            return list(self._records.values())

    def save(self, car: Car) -> Car:
        """Store *car* under the next id and return it with the id populated."""
        with self._lock:
            car_id = self._ids.next()
            record = _CarRecord(
                id=car_id,
                brand=car.brand,
                model=car.model,
                year=car.year,
                fuel_entries=list(car.fuel_entries),
            )
            self._records[car_id] = record
        _logger.debug("Saved car id=%s brand=%s model=%s year=%s", car_id, car.brand, car.model, car.year)
        return record.snapshot()

    def find_by_id(self, car_id: int) -> Car | None:
        record = self._record(car_id)
        return record.snapshot() if record is not None else None

    def find_all(self) -> list[Car]:
        """Snapshot of every stored car in insertion order."""
        return [record.snapshot() for record in self._all_records()]

    def exists_by_id(self, car_id: int) -> bool:
        with self._lock:
            return car_id in self._records

    def exists_by_brand_model_year(self, brand: str | None, model: str | None, year: int | None) -> bool:
        return self.find_by_brand_model_year(brand, model, year) is not None

    def find_by_brand_model_year(self, brand: str | None, model: str | None, year: int | None) -> Car | None:
        """First car matching brand/model case-insensitively and year exactly."""
        if brand is None or model is None or year is None:
            return None
        for record in self._all_records():
            with record.lock:
                if record.matches(brand, model, year):
                    return record.snapshot_locked()
        return None

    def update(self, car: Car) -> Car:
        """Overwrite brand, model and year of the stored car with ``car.id``.

        The stored record is modified in place, so its fuel history is kept
        whatever ``car.fuel_entries`` holds.
        """
        if car.id is None:
            raise ValueError("car id is required for update")
        record = self._record(car.id)
        if record is None:
            raise _not_found(car.id)
        with record.lock:
            if self._record(car.id) is not record:
                raise _not_found(car.id)
            record.brand = car.brand
            record.model = car.model
            record.year = car.year
            updated = record.snapshot_locked()
        _logger.debug("Updated car id=%s brand=%s model=%s year=%s", car.id, car.brand, car.model, car.year)
        return updated

    def delete_by_id(self, car_id: int) -> bool:
        """Remove the car, waiting for any in-flight update or append on it."""
        record = self._record(car_id)
        if record is None:
            return False
        with record.lock:
            with self._lock:
                if self._records.get(car_id) is not record:
                    return False
                del self._records[car_id]
        _logger.debug("Deleted car id=%s", car_id)
        return True

    def append_fuel_entry(self, car_id: int, factory: FuelEntryFactory) -> FuelEntry:
        """Append the entry built by *factory* while holding the car's lock.

        *factory* receives the current history and either returns the new
        entry or raises; on raise nothing is appended. No other mutation of
        the same car can interleave between the factory call and the append.
        """
        record = self._record(car_id)
        if record is None:
            raise _not_found(car_id)
        with record.lock:
            if self._record(car_id) is not record:
                raise _not_found(car_id)
            entry = factory(tuple(record.fuel_entries))
            record.fuel_entries.append(entry)
        _logger.debug("Appended fuel entry id=%s to car id=%s", entry.id, car_id)
        return entry
