"""Command line entry point.

Usage
-----
::

    carfuel serve [--host H] [--port P]
    carfuel create-car --brand Toyota --model Corolla --year 2018
    carfuel add-fuel --car-id 1 --liters 40 --price 52.5 --odometer 45000
    carfuel fuel-stats --car-id 1

Client commands talk to the server at ``--base-url`` (or
``CARFUEL_BASE_URL``). Every setting can also come from ``CARFUEL_*``
environment variables, see :class:`carfuel.config.CarFuelConfig`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from typing import Any

from carfuel.client import CarFuelClient
from carfuel.config import CarFuelConfig
from carfuel.exceptions import CarFuelError, CarNotFoundError
from carfuel.models.stats import FuelStats
from carfuel.server import run_server


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="carfuel", description="Car fuel tracking client and server")
    parser.add_argument("--base-url", help="API root for client commands (default: CARFUEL_BASE_URL)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    serve = commands.add_parser("serve", help="Run the HTTP API server")
    serve.add_argument("--host", help="Bind address (default: CARFUEL_HOST or 127.0.0.1)")
    serve.add_argument("--port", type=int, help="Listen port (default: CARFUEL_PORT or 8080)")

    create = commands.add_parser("create-car", help="Register a car")
    create.add_argument("--brand", required=True)
    create.add_argument("--model", required=True)
    create.add_argument("--year", type=int, required=True)

    fuel = commands.add_parser("add-fuel", help="Record a refueling")
    fuel.add_argument("--car-id", "--carId", dest="car_id", type=int, required=True)
    fuel.add_argument("--liters", type=float, required=True)
    fuel.add_argument("--price", type=float, required=True)
    fuel.add_argument("--odometer", type=int, required=True)

    stats = commands.add_parser("fuel-stats", help="Show fuel statistics for a car")
    stats.add_argument("--car-id", "--carId", dest="car_id", type=int, required=True)

    return parser


def _configure_logging(verbose: bool, config: CarFuelConfig) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=config.log_level.upper())


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


def format_fuel_stats(stats: FuelStats) -> str:
    return "\n".join(
        [
            f"Total fuel: {stats.total_fuel:.0f} L",
            f"Total cost: {stats.total_cost:.2f}",
            f"Average consumption: {stats.average_consumption:.1f} L/100km",
        ]
    )


async def _run_client_command(args: argparse.Namespace, config: CarFuelConfig) -> None:
    async with CarFuelClient(config) as client:
        if args.command == "create-car":
            car = await client.create_car(args.brand, args.model, args.year)
            print("Car created successfully!")
            _print_json(car.to_wire())
        elif args.command == "add-fuel":
            entry = await client.add_fuel_entry(args.car_id, args.liters, args.price, args.odometer)
            print("Fuel entry added successfully!")
            _print_json(entry.to_wire())
        elif args.command == "fuel-stats":
            stats = await client.get_fuel_stats(args.car_id)
            print(format_fuel_stats(stats))


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.command == "serve":
        if args.host:
            overrides["host"] = args.host
        if args.port is not None:
            overrides["port"] = args.port

    try:
        config = CarFuelConfig.from_env(**overrides)
    except CarFuelError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _configure_logging(args.verbose, config)

    if args.command == "serve":
        run_server(config)
        return 0

    try:
        asyncio.run(_run_client_command(args, config))
    except CarNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 1
    except CarFuelError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
