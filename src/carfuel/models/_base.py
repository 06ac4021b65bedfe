"""Base model for carfuel domain and wire models.

Every model inherits from :class:`CarFuelBaseModel` which provides:

* ``alias_generator=to_camel`` so snake_case fields serialize to the
  camelCase keys HTTP callers expect (``fuelEntries``, ``totalFuel``).
* ``populate_by_name=True`` so models can be built from either form.
* ``frozen=True`` so snapshots handed out by the store cannot be mutated.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CarFuelBaseModel(BaseModel):
    """Base for carfuel models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)
