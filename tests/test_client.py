from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from typing import Any

import pytest
from aiohttp import test_utils

from carfuel.client import CarFuelClient
from carfuel.config import CarFuelConfig
from carfuel.exceptions import (
    CarFuelApiError,
    CarFuelError,
    CarFuelTransportError,
    CarFuelValidationError,
    CarNotFoundError,
    DuplicateCarError,
)
from carfuel.server import create_app
from carfuel.service import CarService
from carfuel.state.store import CarStore


class _StaticTransport:
    """Returns one canned ``(status, body)`` pair and records the call."""

    def __init__(self, status: int, body: dict[str, Any]) -> None:
        self._status = status
        self._body = body
        self.calls: list[tuple[str, str, Mapping[str, Any] | None, Mapping[str, str] | None]] = []

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> tuple[int, dict[str, Any]]:
        self.calls.append((method, endpoint, json_body, params))
        return self._status, self._body


def _config() -> CarFuelConfig:
    return CarFuelConfig(base_url="http://carfuel.invalid")


@pytest.mark.asyncio
async def test_round_trip_against_live_server() -> None:
    service = CarService(CarStore(), clock=lambda: date(2030, 1, 1))
    async with test_utils.TestServer(create_app(service)) as server:
        config = CarFuelConfig(base_url=str(server.make_url("/")).rstrip("/"))
        async with CarFuelClient(config) as client:
            car = await client.create_car("Toyota", "Corolla", 2018)
            await client.add_fuel_entry(car.id, 40, 52.5, 45000)
            await client.add_fuel_entry(car.id, 35, 48, 45500)

            stats = await client.get_fuel_stats(car.id)
            queried = await client.query_fuel_stats(car.id)
            fetched = await client.get_car(car.id)
            cars = await client.get_cars()

            assert stats.average_consumption == pytest.approx(15.0)
            assert queried == stats
            assert [entry.odometer for entry in fetched.fuel_entries] == [45000, 45500]
            assert [c.id for c in cars] == [car.id]

            updated = await client.update_car(car.id, "Toyota", "Camry", 2019)
            assert updated.model == "Camry"

            await client.delete_car(car.id)
            with pytest.raises(CarNotFoundError):
                await client.get_car(car.id)

            await client.create_car("Honda", "Civic", 2019)
            with pytest.raises(DuplicateCarError):
                await client.create_car("HONDA", "civic", 2019)

            with pytest.raises(CarFuelValidationError):
                await client.create_car("Benz", "Motorwagen", 1885)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "error_cls"),
    [
        (400, CarFuelValidationError),
        (404, CarNotFoundError),
        (409, DuplicateCarError),
        (500, CarFuelApiError),
    ],
)
async def test_error_envelopes_map_to_exceptions(status: int, error_cls: type[CarFuelError]) -> None:
    transport = _StaticTransport(status, {"success": False, "message": "nope", "errors": ["nope"]})

    async with CarFuelClient(_config(), transport=transport) as client:
        with pytest.raises(error_cls, match="nope"):
            await client.get_car(3)

    assert transport.calls == [("GET", "/api/cars/3", None, None)]


@pytest.mark.asyncio
async def test_api_error_carries_status_and_endpoint() -> None:
    transport = _StaticTransport(503, {"success": False, "message": "down"})

    async with CarFuelClient(_config(), transport=transport) as client:
        with pytest.raises(CarFuelApiError) as exc_info:
            await client.get_fuel_stats(1)

    assert exc_info.value.status_code == 503
    assert exc_info.value.endpoint == "/api/cars/1/fuel/stats"


@pytest.mark.asyncio
async def test_missing_data_is_transport_error() -> None:
    transport = _StaticTransport(200, {"success": True, "message": "ok", "data": None})

    async with CarFuelClient(_config(), transport=transport) as client:
        with pytest.raises(CarFuelTransportError):
            await client.get_car(1)


@pytest.mark.asyncio
async def test_add_fuel_entry_sends_body() -> None:
    transport = _StaticTransport(
        201,
        {"success": True, "data": {"id": 7, "liters": 40.0, "price": 52.5, "odometer": 45000}},
    )

    async with CarFuelClient(_config(), transport=transport) as client:
        entry = await client.add_fuel_entry(2, 40, 52.5, 45000)

    assert entry.id == 7
    assert transport.calls == [
        ("POST", "/api/cars/2/fuel", {"liters": 40, "price": 52.5, "odometer": 45000}, None)
    ]


@pytest.mark.asyncio
async def test_calls_outside_context_manager_fail() -> None:
    client = CarFuelClient(_config())

    with pytest.raises(CarFuelError):
        await client.get_cars()
