"""Incremental filtered/sorted result sets for browsing points of interest."""

from .constants import UNBOUNDED, TagID
from .models import Item, Position, Query
from .ordering import OrderingStrategy, select_ordering
from .predicate import matches
from .result_set import ApplyResult, Changed, Insert, Move, Remove, SortedResultSet, replay_diff
from .tags import TagState

__all__ = [
    "UNBOUNDED",
    "TagID",
    "Item",
    "Position",
    "Query",
    "OrderingStrategy",
    "select_ordering",
    "matches",
    "ApplyResult",
    "Changed",
    "Insert",
    "Move",
    "Remove",
    "SortedResultSet",
    "replay_diff",
    "TagState",
]
