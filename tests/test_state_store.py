from __future__ import annotations

import threading

import pytest

from carfuel.exceptions import CarNotFoundError
from carfuel.models.car import Car, FuelEntry
from carfuel.state.sequence import IdSequence
from carfuel.state.store import CarStore


def _car(brand: str = "Toyota", model: str = "Corolla", year: int = 2018) -> Car:
    return Car(brand=brand, model=model, year=year)


def _entry(entry_id: int, odometer: int) -> FuelEntry:
    return FuelEntry(id=entry_id, liters=40.0, price=50.0, odometer=odometer)


def test_save_assigns_increasing_ids_starting_at_one() -> None:
    store = CarStore()

    first = store.save(_car())
    second = store.save(_car(model="Yaris"))

    assert first.id == 1
    assert second.id == 2
    assert store.find_by_id(1) == first


def test_ids_are_not_reused_after_delete() -> None:
    store = CarStore()
    first = store.save(_car())

    assert store.delete_by_id(first.id) is True
    assert store.delete_by_id(first.id) is False

    assert store.save(_car()).id == 2
    assert store.find_by_id(first.id) is None


def test_injected_sequence_is_used() -> None:
    store = CarStore(id_sequence=IdSequence(start=100))

    assert store.save(_car()).id == 100


def test_find_all_keeps_insertion_order() -> None:
    store = CarStore()
    store.save(_car(model="A"))
    store.save(_car(model="B"))
    store.save(_car(model="C"))

    assert [car.model for car in store.find_all()] == ["A", "B", "C"]


def test_brand_model_lookup_is_case_insensitive_and_year_exact() -> None:
    store = CarStore()
    saved = store.save(_car())

    assert store.exists_by_brand_model_year("TOYOTA", "corolla", 2018) is True
    assert store.find_by_brand_model_year("toyota", "COROLLA", 2018) == saved
    assert store.exists_by_brand_model_year("Toyota", "Corolla", 2019) is False
    assert store.find_by_brand_model_year("Toyota", "Corolla", 2019) is None


@pytest.mark.parametrize(
    ("brand", "model", "year"),
    [(None, "Corolla", 2018), ("Toyota", None, 2018), ("Toyota", "Corolla", None)],
)
def test_brand_model_lookup_with_missing_argument_is_false(brand, model, year) -> None:
    store = CarStore()
    store.save(_car())

    assert store.exists_by_brand_model_year(brand, model, year) is False
    assert store.find_by_brand_model_year(brand, model, year) is None


def test_update_changes_attributes_but_keeps_fuel_history() -> None:
    store = CarStore()
    saved = store.save(_car())
    store.append_fuel_entry(saved.id, lambda _existing: _entry(1, 1000))

    # A caller-supplied history must not replace the stored one.
    updated = store.update(saved.model_copy(update={"brand": "Honda", "model": "Civic", "year": 2020}))

    assert (updated.brand, updated.model, updated.year) == ("Honda", "Civic", 2020)
    assert [entry.odometer for entry in updated.fuel_entries] == [1000]
    assert store.find_by_id(saved.id) == updated


def test_update_unknown_id_raises_not_found() -> None:
    store = CarStore()

    with pytest.raises(CarNotFoundError) as exc_info:
        store.update(Car(id=42, brand="Toyota", model="Corolla", year=2018))

    assert exc_info.value.car_id == 42


def test_update_without_id_is_rejected() -> None:
    store = CarStore()

    with pytest.raises(ValueError):
        store.update(_car())


def test_snapshots_are_isolated_from_later_appends() -> None:
    store = CarStore()
    saved = store.save(_car())
    before = store.find_by_id(saved.id)

    store.append_fuel_entry(saved.id, lambda _existing: _entry(1, 1000))

    assert before.fuel_entries == ()
    assert isinstance(store.find_by_id(saved.id).fuel_entries, tuple)
    assert len(store.find_by_id(saved.id).fuel_entries) == 1


def test_append_factory_sees_existing_history_and_can_abort() -> None:
    store = CarStore()
    saved = store.save(_car())
    store.append_fuel_entry(saved.id, lambda _existing: _entry(1, 1000))
    seen: list[tuple[FuelEntry, ...]] = []

    def _reject(existing: tuple[FuelEntry, ...]) -> FuelEntry:
        seen.append(existing)
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError):
        store.append_fuel_entry(saved.id, _reject)

    assert [entry.odometer for entry in seen[0]] == [1000]
    assert len(store.find_by_id(saved.id).fuel_entries) == 1


def test_append_to_unknown_car_raises_not_found() -> None:
    store = CarStore()

    with pytest.raises(CarNotFoundError):
        store.append_fuel_entry(7, lambda _existing: _entry(1, 0))


@pytest.mark.concurrency
def test_concurrent_saves_never_share_an_id() -> None:
    store = CarStore()
    workers = 16
    per_worker = 50
    barrier = threading.Barrier(workers)
    ids: list[int] = []
    ids_lock = threading.Lock()

    def _worker(worker: int) -> None:
        barrier.wait()
        for i in range(per_worker):
            car = store.save(_car(model=f"M{worker}-{i}"))
            with ids_lock:
                ids.append(car.id)

    threads = [threading.Thread(target=_worker, args=(n,)) for n in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(ids) == list(range(1, workers * per_worker + 1))
    assert len(store.find_all()) == workers * per_worker


@pytest.mark.concurrency
def test_id_sequence_has_no_duplicates_or_skips_under_contention() -> None:
    sequence = IdSequence()
    workers = 8
    barrier = threading.Barrier(workers)
    drawn: list[list[int]] = [[] for _ in range(workers)]

    def _worker(slot: int) -> None:
        barrier.wait()
        for _ in range(200):
            drawn[slot].append(sequence.next())

    threads = [threading.Thread(target=_worker, args=(n,)) for n in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    merged = sorted(value for values in drawn for value in values)
    assert merged == list(range(1, workers * 200 + 1))
    assert sequence.peek() == workers * 200 + 1


@pytest.mark.concurrency
def test_brand_model_lookup_never_returns_a_car_that_no_longer_matches() -> None:
    store = CarStore()
    saved = store.save(_car())
    stop = threading.Event()
    mismatches: list[Car] = []

    def _flip() -> None:
        names = ["Honda", "Toyota"]
        n = 0
        while not stop.is_set():
            store.update(saved.model_copy(update={"brand": names[n % 2]}))
            n += 1

    flipper = threading.Thread(target=_flip)
    flipper.start()
    try:
        for _ in range(2000):
            found = store.find_by_brand_model_year("toyota", "corolla", 2018)
            if found is not None and found.brand != "Toyota":
                mismatches.append(found)
    finally:
        stop.set()
        flipper.join()

    assert mismatches == []


def test_delete_waits_for_in_flight_mutation_of_the_same_car() -> None:
    store = CarStore()
    saved = store.save(_car())
    entered = threading.Event()
    release = threading.Event()
    deleted: list[bool] = []

    def _slow_factory(_existing: tuple[FuelEntry, ...]) -> FuelEntry:
        entered.set()
        release.wait(timeout=5)
        return _entry(1, 1000)

    appender = threading.Thread(target=store.append_fuel_entry, args=(saved.id, _slow_factory))
    appender.start()
    assert entered.wait(timeout=5)

    deleter = threading.Thread(target=lambda: deleted.append(store.delete_by_id(saved.id)))
    deleter.start()
    deleter.join(timeout=0.2)
    assert deleter.is_alive()
    assert store.exists_by_id(saved.id)

    release.set()
    appender.join(timeout=5)
    deleter.join(timeout=5)

    assert deleted == [True]
    assert store.find_by_id(saved.id) is None


def test_update_after_delete_raises_not_found() -> None:
    store = CarStore()
    saved = store.save(_car())
    store.delete_by_id(saved.id)

    with pytest.raises(CarNotFoundError):
        store.update(saved)
