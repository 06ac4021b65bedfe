"""aiohttp REST API over :class:`~carfuel.service.CarService`.

Handlers only translate between HTTP and service calls. Domain
exceptions are mapped to status codes in :func:`error_middleware`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from aiohttp import web
from aiohttp.log import access_logger
from pydantic import ValidationError

from carfuel._constants import CARS_PATH, FUEL_STATS_QUERY_PATH
from carfuel.config import CarFuelConfig
from carfuel.exceptions import CarFuelValidationError, CarNotFoundError, DuplicateCarError
from carfuel.models.api import ApiResponse
from carfuel.models.requests import AddFuelRequest, CreateCarRequest, RequestModel, parse_request
from carfuel.service import CarService
from carfuel.state.store import CarStore

_logger = logging.getLogger(__name__)

SERVICE_KEY = web.AppKey("service", CarService)

_CAR_ID_PATTERN = re.compile(r"[+-]?[0-9]+")

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]

routes = web.RouteTableDef()


def _envelope(status: int, body: ApiResponse) -> web.Response:
    return web.json_response(body.to_wire(), status=status)


def _error(status: int, message: str) -> web.Response:
    return _envelope(status, ApiResponse.error(message))


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Map domain exceptions to error envelopes.

    Anything outside the three domain kinds becomes a 500 whose body does
    not reveal the cause; the traceback goes to the log.
    """
    try:
        return await handler(request)
    except CarFuelValidationError as exc:
        return _error(400, str(exc))
    except CarNotFoundError as exc:
        return _error(404, str(exc))
    except DuplicateCarError as exc:
        return _error(409, str(exc))
    except web.HTTPException as exc:
        if exc.status >= 400:
            return _error(exc.status, exc.reason)
        raise
    except Exception:
        _logger.exception("Unexpected error handling %s %s", request.method, request.path)
        return _error(500, "An unexpected error occurred")


def _service(request: web.Request) -> CarService:
    return request.app[SERVICE_KEY]


def _parse_car_id(raw: str | None) -> int:
    # int() alone would also take "1_0", " 3 " and non-ASCII digits.
    if raw is None or _CAR_ID_PATTERN.fullmatch(raw) is None:
        raise CarFuelValidationError(f"Invalid carId format: {raw}")
    return int(raw)


async def _read_body(request: web.Request, model_cls: type[RequestModel]) -> Any:
    try:
        payload = await request.json()
    except ValueError:
        raise CarFuelValidationError("Malformed JSON request body") from None
    try:
        return parse_request(model_cls, payload)
    except ValidationError as exc:
        messages = model_cls.error_messages(exc)
        raise CarFuelValidationError("Validation failed: " + ", ".join(messages)) from None


# ------------------------------------------------------------------
# Cars
# ------------------------------------------------------------------


@routes.post(CARS_PATH)
async def create_car(request: web.Request) -> web.Response:
    body: CreateCarRequest = await _read_body(request, CreateCarRequest)
    car = _service(request).create_car(body.brand, body.model, body.year)
    return _envelope(201, ApiResponse.ok("Car created successfully", car.to_wire()))


@routes.get(CARS_PATH)
async def get_all_cars(request: web.Request) -> web.Response:
    cars = _service(request).get_all_cars()
    return _envelope(200, ApiResponse.ok("Cars retrieved successfully", [car.to_wire() for car in cars]))


@routes.get(CARS_PATH + "/{id}")
async def get_car(request: web.Request) -> web.Response:
    car = _service(request).get_car_by_id(_parse_car_id(request.match_info["id"]))
    return _envelope(200, ApiResponse.ok("Car retrieved successfully", car.to_wire()))


@routes.put(CARS_PATH + "/{id}")
async def update_car(request: web.Request) -> web.Response:
    car_id = _parse_car_id(request.match_info["id"])
    body: CreateCarRequest = await _read_body(request, CreateCarRequest)
    car = _service(request).update_car(car_id, body.brand, body.model, body.year)
    return _envelope(200, ApiResponse.ok("Car updated successfully", car.to_wire()))


@routes.delete(CARS_PATH + "/{id}")
async def delete_car(request: web.Request) -> web.Response:
    _service(request).delete_car(_parse_car_id(request.match_info["id"]))
    return _envelope(200, ApiResponse.ok("Car deleted successfully"))


# ------------------------------------------------------------------
# Fuel
# ------------------------------------------------------------------


@routes.post(CARS_PATH + "/{id}/fuel")
async def add_fuel_entry(request: web.Request) -> web.Response:
    car_id = _parse_car_id(request.match_info["id"])
    body: AddFuelRequest = await _read_body(request, AddFuelRequest)
    entry = _service(request).add_fuel_entry(car_id, body.liters, body.price, body.odometer)
    return _envelope(201, ApiResponse.ok("Fuel entry added successfully", entry.to_wire()))


@routes.get(CARS_PATH + "/{id}/fuel/stats")
async def get_fuel_stats(request: web.Request) -> web.Response:
    stats = _service(request).get_fuel_stats(_parse_car_id(request.match_info["id"]))
    return _envelope(200, ApiResponse.ok("Fuel statistics retrieved successfully", stats.to_wire()))


@routes.get(FUEL_STATS_QUERY_PATH)
async def query_fuel_stats(request: web.Request) -> web.Response:
    """Same statistic as ``/api/cars/{id}/fuel/stats`` keyed by ``?carId=``."""
    raw = request.query.get("carId")
    if not raw:
        return _error(400, "carId parameter is required")
    stats = _service(request).get_fuel_stats(_parse_car_id(raw))
    return _envelope(200, ApiResponse.ok("Fuel statistics retrieved successfully", stats.to_wire()))


# ------------------------------------------------------------------
# Application
# ------------------------------------------------------------------


def create_app(service: CarService | None = None) -> web.Application:
    """Build the application around *service* (a fresh in-memory one by default)."""
    app = web.Application(middlewares=[error_middleware])
    app[SERVICE_KEY] = service if service is not None else CarService(CarStore())
    app.add_routes(routes)
    return app


def run_server(config: CarFuelConfig, service: CarService | None = None) -> None:
    """Serve until interrupted. All state is lost on exit."""
    _logger.info("Serving car fuel API on http://%s:%s", config.host, config.port)
    web.run_app(
        create_app(service),
        host=config.host,
        port=config.port,
        access_log=access_logger if config.access_log else None,
        print=None,
    )
