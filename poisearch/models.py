"""Typed containers shared across the filtering engine."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import UNBOUNDED
from .ordering import OrderingStrategy
from .tags import TagState


class Position(BaseModel):
    """A reference coordinate in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Item(BaseModel):
    """
    Canonical schema for a single point of interest.

    ``id`` is the identity used by the diff engine.  ``distance`` is refreshed
    by the caller whenever the reference position moves.
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(min_length=1)
    title: str = ""
    category: str = ""
    wheelchair_accessible: bool = False
    child_friendly: bool = False
    cheap_entry: bool = False
    free_entry: bool = False
    liked: bool = False
    distance: float = Field(default=UNBOUNDED, ge=0)
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def content_key(self) -> Tuple[str, str, str]:
        return (self.id, self.title, self.category)

    def same_content(self, other: "Item") -> bool:
        """True when nothing a list row displays has changed."""
        return self.content_key() == other.content_key()

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass(frozen=True)
class Query:
    """One re-filter request.  Build a new one for every user interaction."""

    text: str = ""
    max_distance: float = UNBOUNDED
    tags: TagState = field(default_factory=TagState)
    ordering: OrderingStrategy = OrderingStrategy.ALPHABETIC
    reference_position: Optional[Position] = None

    def __post_init__(self) -> None:
        if self.text is None:
            object.__setattr__(self, "text", "")
        if math.isnan(self.max_distance) or self.max_distance < 0:
            raise ValueError(f"max_distance must be >= 0, got {self.max_distance!r}")
        if not isinstance(self.tags, TagState):
            object.__setattr__(self, "tags", TagState.from_mapping(self.tags))

    @property
    def is_unbounded(self) -> bool:
        return math.isinf(self.max_distance)
