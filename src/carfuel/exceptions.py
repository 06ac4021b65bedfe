"""Custom exception hierarchy for carfuel."""

from __future__ import annotations


class CarFuelError(Exception):
    """Base exception for all carfuel errors."""


class CarFuelConfigError(CarFuelError):
    """Invalid or missing configuration."""


class CarFuelValidationError(CarFuelError):
    """Caller-supplied data violates a domain rule.

    Covers empty brand/model, out-of-range year, non-positive liters,
    negative price or odometer, and odometer regression.
    """


class CarNotFoundError(CarFuelError):
    """Referenced car id does not exist."""

    def __init__(self, message: str, *, car_id: int | None = None) -> None:
        self.car_id = car_id
        super().__init__(message)


class DuplicateCarError(CarFuelError):
    """A car with the same brand, model and year already exists."""

    def __init__(
        self,
        message: str,
        *,
        brand: str = "",
        model: str = "",
        year: int | None = None,
    ) -> None:
        self.brand = brand
        self.model = model
        self.year = year
        super().__init__(message)


class CarFuelTransportError(CarFuelError):
    """HTTP-level failure (network, unexpected status, invalid JSON)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class CarFuelApiError(CarFuelError):
    """Server answered with an error envelope outside the domain error kinds.

    Validation, not-found and duplicate envelopes are raised as
    :class:`CarFuelValidationError`, :class:`CarNotFoundError` and
    :class:`DuplicateCarError` instead.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)
