from __future__ import annotations

"""
Tag activation snapshots.

A :class:`TagState` maps tag identifiers to booleans.  A tag that is absent
or ``False`` does not constrain a search; a tag set to ``True`` requires the
matching item attribute.  Snapshots are copy-on-write: every change returns
a new instance, so a Query holding an older snapshot never sees it move.

Keys are usually :class:`~poisearch.constants.TagID` members, but any
hashable is accepted; the predicate ignores tags it has no rule for.
"""

from types import MappingProxyType
from typing import Dict, FrozenSet, Hashable, Iterator, Mapping, Optional

from .constants import TagID


def normalise_tag(tag: Hashable) -> Hashable:
    """Map ``"wheelchair_accessible"`` style strings onto TagID members."""
    if isinstance(tag, str) and not isinstance(tag, TagID):
        try:
            return TagID(tag.strip().lower())
        except ValueError:
            return tag
    return tag


class TagState:
    __slots__ = ("_values",)

    def __init__(self, values: Optional[Mapping[Hashable, bool]] = None) -> None:
        self._values: Mapping[Hashable, bool] = MappingProxyType(
            {normalise_tag(k): bool(v) for k, v in (values or {}).items()}
        )

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[Hashable, bool]]) -> "TagState":
        if isinstance(values, TagState):
            return values
        return cls(values)

    def with_tag(self, tag: Hashable, active: bool) -> "TagState":
        values = dict(self._values)
        values[normalise_tag(tag)] = bool(active)
        return TagState(values)

    def remove(self, tag: Hashable) -> "TagState":
        tag = normalise_tag(tag)
        if tag not in self._values:
            return self
        values = dict(self._values)
        del values[tag]
        return TagState(values)

    def is_active(self, tag: Hashable) -> bool:
        return self._values.get(normalise_tag(tag), False)

    def active_tags(self) -> FrozenSet[Hashable]:
        return frozenset(k for k, v in self._values.items() if v)

    def as_dict(self) -> Dict[Hashable, bool]:
        return dict(self._values)

    def __contains__(self, tag: object) -> bool:
        return normalise_tag(tag) in self._values

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TagState):
            return NotImplemented
        return dict(self._values) == dict(other._values)

    def __hash__(self) -> int:
        return hash(frozenset(self._values.items()))

    def __repr__(self) -> str:
        return f"TagState({dict(self._values)!r})"
