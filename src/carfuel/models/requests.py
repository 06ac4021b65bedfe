"""Pydantic request models for the HTTP API.

These models give the HTTP layer a "validate → normalize → execute" flow
before a request reaches :class:`carfuel.service.CarService`. The service
still applies the domain rules; these only reject malformed bodies.
"""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import ConfigDict, Field, ValidationError, field_validator

from carfuel.models._base import CarFuelBaseModel


class RequestModel(CarFuelBaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    _MISSING_MESSAGES: ClassVar[dict[str, str]] = {}
    """Field name -> message when the field is absent or ``null``."""
    _INVALID_MESSAGES: ClassVar[dict[str, str]] = {}
    """Field name -> message for any other constraint failure."""

    @classmethod
    def error_messages(cls, exc: ValidationError) -> list[str]:
        """Translate a pydantic error into one readable message per field."""
        messages: list[str] = []
        for error in exc.errors():
            loc = error.get("loc") or ("",)
            field = str(loc[0])
            if error.get("type") == "missing" or error.get("input") is None:
                message = cls._MISSING_MESSAGES.get(field)
            else:
                message = cls._INVALID_MESSAGES.get(field)
            if message is None:
                message = f"{field}: {error.get('msg', 'invalid value')}"
            if message not in messages:
                messages.append(message)
        return messages


class CreateCarRequest(RequestModel):
    """Body of ``POST /api/cars`` and ``PUT /api/cars/{id}``."""

    _MISSING_MESSAGES: ClassVar[dict[str, str]] = {
        "brand": "Brand cannot be blank",
        "model": "Model cannot be blank",
        "year": "Year cannot be null",
    }
    _INVALID_MESSAGES: ClassVar[dict[str, str]] = {
        "brand": "Brand cannot be blank",
        "model": "Model cannot be blank",
        "year": "Year must be an integer",
    }

    brand: str
    model: str
    year: int

    @field_validator("brand", "model")
    @classmethod
    def _non_blank(cls, value: str) -> str:
        if not value:
            raise ValueError("must be non-blank")
        return value


class AddFuelRequest(RequestModel):
    """Body of ``POST /api/cars/{id}/fuel``."""

    _MISSING_MESSAGES: ClassVar[dict[str, str]] = {
        "liters": "Liters cannot be null",
        "price": "Price cannot be null",
        "odometer": "Odometer cannot be null",
    }
    _INVALID_MESSAGES: ClassVar[dict[str, str]] = {
        "liters": "Liters must be a positive number",
        "price": "Price must be a positive number",
        "odometer": "Odometer must be a non-negative number",
    }

    liters: float = Field(gt=0, allow_inf_nan=False)
    price: float = Field(gt=0, allow_inf_nan=False)
    odometer: int = Field(ge=0)


def parse_request(model_cls: type[RequestModel], payload: Any) -> RequestModel:
    """Validate *payload* against *model_cls*; non-dict payloads count as empty."""
    if not isinstance(payload, dict):
        payload = {}
    return model_cls.model_validate(payload)
