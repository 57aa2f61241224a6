from __future__ import annotations

"""
Predicate evaluation for search queries.

An item survives a query when all three clauses hold:

- text: the query text is empty, or the title contains it (case-insensitive)
- tags: every active tag's rule holds for the item
- distance: the cutoff is unbounded, or ``item.distance <= max_distance``

Tags without a rule are skipped rather than rejecting everything, so a stale
tag coming from saved settings cannot empty the result list.
"""

from typing import Callable, Dict, Hashable, Iterable, List, Optional

from loguru import logger

from .constants import CATEGORY_TAGS, FLAG_TAGS
from .models import Item, Query
from .tags import TagState

TagRule = Callable[[Item], bool]


def _flag_rule(field_name: str) -> TagRule:
    return lambda item: bool(getattr(item, field_name))


def _category_rule(category: str) -> TagRule:
    return lambda item: item.category.strip().casefold() == category


TAG_RULES: Dict[Hashable, TagRule] = {
    **{tag: _flag_rule(name) for tag, name in FLAG_TAGS.items()},
    **{tag: _category_rule(cat) for tag, cat in CATEGORY_TAGS.items()},
}


def text_matches(item: Item, text: Optional[str]) -> bool:
    if not text:
        return True
    return text.casefold() in item.title.casefold()


def tags_match(item: Item, tags: TagState) -> bool:
    for tag in tags.active_tags():
        rule = TAG_RULES.get(tag)
        if rule is None:
            continue
        if not rule(item):
            return False
    return True


def distance_matches(item: Item, max_distance: float) -> bool:
    # inf <= inf holds, so unknown distances still pass an unbounded cutoff
    return item.distance <= max_distance


def matches(item: Item, query: Query) -> bool:
    return (
        text_matches(item, query.text)
        and tags_match(item, query.tags)
        and distance_matches(item, query.max_distance)
    )


def unsupported_tags(tags: TagState) -> List[Hashable]:
    """Active tags the evaluator has no rule for (and therefore ignores)."""
    return [t for t in tags.active_tags() if t not in TAG_RULES]


def filter_candidates(candidates: Iterable[Item], query: Query) -> List[Item]:
    """
    Return the candidates that satisfy ``query``, in input order.

    Only the first occurrence of an id is considered; later duplicates are
    dropped and reported.
    """
    ignored = unsupported_tags(query.tags)
    if ignored:
        logger.debug("Ignoring tags without a filter rule: {}", ignored)

    seen = set()
    duplicates = 0
    out: List[Item] = []
    for item in candidates:
        if item.id in seen:
            duplicates += 1
            continue
        seen.add(item.id)
        if matches(item, query):
            out.append(item)

    if duplicates:
        logger.warning("Dropped {} candidate(s) with duplicate ids", duplicates)
    return out
