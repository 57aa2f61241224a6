from __future__ import annotations

import math
import os
from enum import Enum
from typing import Dict, Set

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import UNBOUNDED


# ---------------------------
# Distance units & slider
# ---------------------------

class DistanceUnit(str, Enum):
    KILOMETER = "kilometer"
    MILE = "mile"

    @property
    def conversion_rate(self) -> int:
        """Meters per unit."""
        return _CONVERSION_RATES[self]

    @property
    def display_name(self) -> str:
        return f"{self.value}s"


_CONVERSION_RATES: Dict[DistanceUnit, int] = {
    DistanceUnit.KILOMETER: 1000,
    DistanceUnit.MILE: 1609,
}

DEFAULT_DISTANCE_UNIT = DistanceUnit(
    os.getenv("POISEARCH_DISTANCE_UNIT", DistanceUnit.KILOMETER.value).strip().lower()
)

# 0 = slider untouched, SLIDER_MAX = "everything"; both mean no cutoff
SLIDER_MIN = 0
SLIDER_MAX = int(os.getenv("POISEARCH_SLIDER_MAX", "10"))


# ---------------------------
# Geo
# ---------------------------

EARTH_RADIUS_M = 6_371_000.0


# ---------------------------
# Pydantic models shared around the package
# ---------------------------

class BrowseSettings(BaseModel):
    """
    Application-wide browse preferences.

    Passed explicitly to whoever builds a Query; there is no process-global
    instance.  Persisting it is the caller's business.
    """

    model_config = ConfigDict(validate_assignment=True)

    distance_unit: DistanceUnit = DEFAULT_DISTANCE_UNIT
    max_distance: float = Field(default=UNBOUNDED, ge=0)
    location_permissions_granted: bool = False
    liked_ids: Set[str] = Field(default_factory=set)
    tags: Dict[str, bool] = Field(default_factory=dict)

    @field_validator("distance_unit", mode="before")
    @classmethod
    def _coerce_unit(cls, value):
        if isinstance(value, str):
            try:
                return DistanceUnit(value.strip().lower())
            except ValueError:
                raise ValueError(f"Unknown distance unit: {value!r}") from None
        return value

    def max_distance_from_slider(self, slider_value: float) -> float:
        """Convert a slider position into a cutoff in meters."""
        if slider_value <= SLIDER_MIN or slider_value >= SLIDER_MAX:
            return UNBOUNDED
        return float(slider_value) * self.distance_unit.conversion_rate

    def set_max_distance_from_slider(self, slider_value: float) -> None:
        self.max_distance = self.max_distance_from_slider(slider_value)

    def slider_value(self) -> int:
        """Inverse of :meth:`max_distance_from_slider`; 0 when out of range."""
        if math.isinf(self.max_distance):
            return SLIDER_MIN
        value = int(self.max_distance / self.distance_unit.conversion_rate)
        if value < SLIDER_MIN or value > SLIDER_MAX:
            return SLIDER_MIN
        return value

    def is_liked(self, item_id: str) -> bool:
        return item_id in self.liked_ids

    def with_liked(self, item_id: str, liked: bool) -> "BrowseSettings":
        liked_ids = set(self.liked_ids)
        if liked:
            liked_ids.add(item_id)
        else:
            liked_ids.discard(item_id)
        return self.model_copy(update={"liked_ids": liked_ids})
