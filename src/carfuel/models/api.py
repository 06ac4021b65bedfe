"""Response envelope shared by every HTTP endpoint."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import Field

from carfuel._constants import API_VERSION
from carfuel.models._base import CarFuelBaseModel


def _utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class ApiMeta(CarFuelBaseModel):
    timestamp: str = Field(default_factory=_utc_timestamp)
    version: str = API_VERSION


class ApiResponse(CarFuelBaseModel):
    """Standard ``{success, message, errors, data, meta}`` envelope.

    ``data`` holds an already JSON-ready value (see
    :meth:`CarFuelBaseModel.to_wire`).
    """

    success: bool
    message: str = ""
    errors: list[str] = Field(default_factory=list)
    data: Any = None
    meta: ApiMeta = Field(default_factory=ApiMeta)

    @classmethod
    def ok(cls, message: str, data: Any = None) -> ApiResponse:
        return cls(success=True, message=message, data=data)

    @classmethod
    def error(cls, message: str, errors: list[str] | None = None) -> ApiResponse:
        return cls(success=False, message=message, errors=errors if errors is not None else [message])
