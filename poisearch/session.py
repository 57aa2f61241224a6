from __future__ import annotations

"""
Search screen state without the screen.

:class:`SearchSession` holds what the user has typed, toggled and dragged,
turns it into a fresh :class:`~poisearch.models.Query` on every interaction
and re-runs the result set.  Everything about widgets, permissions and
storage stays with the caller; the session only needs the settings value it
is handed and the item snapshots it is fed.
"""

from dataclasses import replace
from typing import Hashable, List, Optional, Sequence, Set, Tuple

from loguru import logger

from .catalog import apply_liked
from .config import BrowseSettings
from .constants import SEPARATELY_HANDLED_TAGS, UNBOUNDED
from .geo import with_distances
from .models import Item, Position, Query
from .ordering import OrderingStrategy, select_ordering
from .result_set import ApplyResult, DiffListener, SortedResultSet
from .tags import TagState


def results_count_text(n: int) -> str:
    return "1 result" if n == 1 else f"{n} results"


class SearchSession:
    def __init__(
        self,
        settings: Optional[BrowseSettings] = None,
        listener: Optional[DiffListener] = None,
    ) -> None:
        self.settings = settings or BrowseSettings()
        self.listener = listener
        self.results = SortedResultSet()

        self.text = ""
        self.max_distance = UNBOUNDED
        self.tags = TagState.from_mapping(self.settings.tags)
        self.position: Optional[Position] = None
        self._candidates: List[Item] = []
        self._held_tags: Optional[Tuple[Tuple[Hashable, bool], ...]] = None

    # ---------------------------
    # Query building
    # ---------------------------

    @property
    def ordering(self) -> OrderingStrategy:
        return select_ordering(
            self.settings.location_permissions_granted and self.position is not None
        )

    def build_query(self) -> Query:
        return Query(
            text=self.text,
            max_distance=self.max_distance,
            tags=self.tags,
            ordering=self.ordering,
            reference_position=self.position,
        )

    def refresh(self) -> ApplyResult:
        """Re-filter the current candidates with a freshly built query."""
        return self.results.apply(self._candidates, self.build_query(), listener=self.listener)

    # ---------------------------
    # Inputs
    # ---------------------------

    def set_candidates(self, items: Sequence[Item]) -> ApplyResult:
        items = apply_liked(items, self.settings.liked_ids)
        if self.position is not None:
            items = with_distances(items, self.position)
        self._candidates = list(items)
        logger.info("Session received {} candidate(s)", len(self._candidates))
        return self.refresh()

    def set_text(self, text: Optional[str]) -> ApplyResult:
        self.text = text or ""
        return self.refresh()

    def set_tag(self, tag: Hashable, active: bool) -> ApplyResult:
        self.tags = self.tags.with_tag(tag, active)
        return self.refresh()

    def set_slider(self, value: float) -> ApplyResult:
        return self.set_max_distance(self.settings.max_distance_from_slider(value))

    def set_max_distance(self, meters: float) -> ApplyResult:
        # the Query rejects bad cutoffs before the session keeps them
        query = replace(self.build_query(), max_distance=meters)
        self.max_distance = query.max_distance
        return self.results.apply(self._candidates, query, listener=self.listener)

    def set_position(self, latitude: float, longitude: float) -> Optional[ApplyResult]:
        """Recompute distances and re-filter; ``None`` when nothing moved."""
        position = Position(latitude=latitude, longitude=longitude)
        if position == self.position:
            return None
        self.position = position
        self._candidates = with_distances(self._candidates, position)
        return self.refresh()

    def set_liked(self, liked_ids: Set[str]) -> Optional[ApplyResult]:
        """Sync liked flags; ``None`` when the liked set is unchanged."""
        liked_ids = set(liked_ids)
        if liked_ids == self.settings.liked_ids:
            return None
        self.settings = self.settings.model_copy(update={"liked_ids": liked_ids})
        self._candidates = apply_liked(self._candidates, liked_ids)
        return self.refresh()

    # ---------------------------
    # Tag picker
    # ---------------------------

    def open_tag_selector(self) -> TagState:
        """
        Hand the picker every tag except the ones driven by dedicated
        checkboxes; they are restored by :meth:`close_tag_selector`.
        """
        self._held_tags = tuple(
            (tag, self.tags.is_active(tag)) for tag in SEPARATELY_HANDLED_TAGS
        )
        picker_tags = self.tags
        for tag in SEPARATELY_HANDLED_TAGS:
            picker_tags = picker_tags.remove(tag)
        return picker_tags

    def close_tag_selector(self, picked: TagState) -> ApplyResult:
        tags = TagState.from_mapping(picked)
        for tag, active in self._held_tags or ():
            tags = tags.with_tag(tag, active)
        self._held_tags = None
        self.tags = tags
        return self.refresh()

    # ---------------------------
    # Outputs
    # ---------------------------

    @property
    def count(self) -> int:
        return self.results.size()

    def count_text(self) -> str:
        return results_count_text(self.count)

    def items(self) -> List[Item]:
        return self.results.items()
