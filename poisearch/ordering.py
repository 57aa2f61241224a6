from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, List, Tuple

if TYPE_CHECKING:
    from .models import Item


class OrderingStrategy(str, Enum):
    """Total orders over items.  Ties always fall back to the item id."""

    ALPHABETIC = "alphabetic"
    SHORTEST_DISTANCE = "shortest_distance"

    def sort_key(self, item: "Item") -> Tuple[Any, str]:
        if self is OrderingStrategy.SHORTEST_DISTANCE:
            return (item.distance, item.id)
        return (item.title.casefold(), item.id)

    def compare(self, a: "Item", b: "Item") -> int:
        """-1, 0 or 1; 0 only when both items share an id."""
        ka, kb = self.sort_key(a), self.sort_key(b)
        if ka < kb:
            return -1
        if ka > kb:
            return 1
        return 0

    def sort(self, items: Iterable["Item"]) -> List["Item"]:
        return sorted(items, key=self.sort_key)


def select_ordering(has_position: bool) -> OrderingStrategy:
    """Distance ordering needs a reference position; otherwise go alphabetic."""
    return OrderingStrategy.SHORTEST_DISTANCE if has_position else OrderingStrategy.ALPHABETIC
