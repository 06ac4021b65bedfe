"""High-level async client for the carfuel HTTP API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from carfuel._constants import CARS_PATH, FUEL_STATS_QUERY_PATH
from carfuel._transport import HttpTransport, Transport
from carfuel.config import CarFuelConfig
from carfuel.exceptions import (
    CarFuelApiError,
    CarFuelError,
    CarFuelTransportError,
    CarFuelValidationError,
    CarNotFoundError,
    DuplicateCarError,
)
from carfuel.models.car import Car, FuelEntry
from carfuel.models.stats import FuelStats

_logger = logging.getLogger(__name__)

_ERROR_BY_STATUS: dict[int, type[CarFuelError]] = {
    400: CarFuelValidationError,
    404: CarNotFoundError,
    409: DuplicateCarError,
}


def _raise_for_envelope(status: int, endpoint: str, body: Mapping[str, Any]) -> None:
    """Turn an error envelope back into the matching exception."""
    message = str(body.get("message") or f"HTTP {status} from {endpoint}")
    error_cls = _ERROR_BY_STATUS.get(status)
    if error_cls is not None:
        raise error_cls(message)
    raise CarFuelApiError(message, status_code=status, endpoint=endpoint)


class CarFuelClient:
    """Async client for the carfuel API.

    Usage::

        async with CarFuelClient(config) as client:
            car = await client.create_car("Toyota", "Corolla", 2018)
            await client.add_fuel_entry(car.id, 40, 52.5, 45000)
            stats = await client.get_fuel_stats(car.id)
    """

    def __init__(
        self,
        config: CarFuelConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport: Transport | None = transport

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CarFuelClient:
        if self._transport is None:
            if self._http_session is None:
                timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
                self._http_session = aiohttp.ClientSession(timeout=timeout)
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _call(
        self,
        method: str,
        endpoint: str,
        *,
        json_body: Mapping[str, Any] | None = None,
        params: Mapping[str, str] | None = None,
    ) -> Any:
        if self._transport is None:
            raise CarFuelError("Client is not open; use 'async with CarFuelClient(...)'")
        status, body = await self._transport.request(method, endpoint, json_body=json_body, params=params)
        if not 200 <= status < 300:
            _raise_for_envelope(status, endpoint, body)
        if body.get("success") is False:
            raise CarFuelApiError(str(body.get("message") or ""), status_code=status, endpoint=endpoint)
        return body.get("data")

    @staticmethod
    def _car_path(car_id: int) -> str:
        return f"{CARS_PATH}/{car_id}"

    @staticmethod
    def _expect(data: Any, endpoint: str, kind: type) -> Any:
        if not isinstance(data, kind):
            raise CarFuelTransportError(f"Missing 'data' in response from {endpoint}", endpoint=endpoint)
        return data

    # ------------------------------------------------------------------
    # Cars
    # ------------------------------------------------------------------

    async def create_car(self, brand: str, model: str, year: int) -> Car:
        data = await self._call("POST", CARS_PATH, json_body={"brand": brand, "model": model, "year": year})
        return Car.model_validate(self._expect(data, CARS_PATH, dict))

    async def get_cars(self) -> list[Car]:
        data = await self._call("GET", CARS_PATH)
        return [Car.model_validate(item) for item in self._expect(data, CARS_PATH, list)]

    async def get_car(self, car_id: int) -> Car:
        endpoint = self._car_path(car_id)
        data = await self._call("GET", endpoint)
        return Car.model_validate(self._expect(data, endpoint, dict))

    async def update_car(self, car_id: int, brand: str, model: str, year: int) -> Car:
        endpoint = self._car_path(car_id)
        data = await self._call("PUT", endpoint, json_body={"brand": brand, "model": model, "year": year})
        return Car.model_validate(self._expect(data, endpoint, dict))

    async def delete_car(self, car_id: int) -> None:
        await self._call("DELETE", self._car_path(car_id))

    # ------------------------------------------------------------------
    # Fuel
    # ------------------------------------------------------------------

    async def add_fuel_entry(self, car_id: int, liters: float, price: float, odometer: int) -> FuelEntry:
        endpoint = f"{self._car_path(car_id)}/fuel"
        data = await self._call(
            "POST",
            endpoint,
            json_body={"liters": liters, "price": price, "odometer": odometer},
        )
        return FuelEntry.model_validate(self._expect(data, endpoint, dict))

    async def get_fuel_stats(self, car_id: int) -> FuelStats:
        endpoint = f"{self._car_path(car_id)}/fuel/stats"
        data = await self._call("GET", endpoint)
        return FuelStats.model_validate(self._expect(data, endpoint, dict))

    async def query_fuel_stats(self, car_id: int) -> FuelStats:
        """Fetch statistics through the ``?carId=`` query endpoint."""
        data = await self._call("GET", FUEL_STATS_QUERY_PATH, params={"carId": str(car_id)})
        return FuelStats.model_validate(self._expect(data, FUEL_STATS_QUERY_PATH, dict))
