from __future__ import annotations

"""
Incremental sorted result set.

:class:`SortedResultSet` keeps the ordered list of items that passed the last
query.  Every :meth:`SortedResultSet.apply` filters a fresh candidate snapshot,
sorts the survivors and returns the operations that turn the previous list
into the new one.  Operations come in a fixed order:

1. ``Remove`` for ids that dropped out, highest position first
2. ``Insert`` for ids that are new
3. ``Move`` for retained ids whose relative order changed
4. ``Changed`` for retained ids whose displayed content changed

Positions are always relative to the list as it stands when the operation is
replayed, so :func:`replay_diff` applied to the previous list reproduces the
new one exactly.  Moves are computed after removes and inserts, and only for
items outside the longest run of retained items that is already in order,
which keeps their number minimal.
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import (
    Dict,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    Set,
    Union,
)

from loguru import logger

from .models import Item, Query
from .predicate import filter_candidates


# =============================================================================
# Diff operations
# =============================================================================

@dataclass(frozen=True)
class Remove:
    id: str
    position: int

    def dispatch(self, listener: "DiffListener") -> None:
        listener.on_removed(self)


@dataclass(frozen=True)
class Insert:
    id: str
    position: int
    item: Item

    def dispatch(self, listener: "DiffListener") -> None:
        listener.on_inserted(self)


@dataclass(frozen=True)
class Move:
    id: str
    from_position: int
    to_position: int

    def dispatch(self, listener: "DiffListener") -> None:
        listener.on_moved(self)


@dataclass(frozen=True)
class Changed:
    id: str
    position: int
    item: Item

    def dispatch(self, listener: "DiffListener") -> None:
        listener.on_changed(self)


DiffOp = Union[Remove, Insert, Move, Changed]


class DiffListener(Protocol):
    """Receives one batch of operations per apply, bracketed by begin/end."""

    def begin_batch(self) -> None: ...
    def end_batch(self) -> None: ...
    def on_removed(self, op: Remove) -> None: ...
    def on_inserted(self, op: Insert) -> None: ...
    def on_moved(self, op: Move) -> None: ...
    def on_changed(self, op: Changed) -> None: ...


class ApplyResult(NamedTuple):
    items: List[Item]
    diff: List[DiffOp]


# =============================================================================
# Diff computation
# =============================================================================

def _longest_increasing_run(values: Sequence[int]) -> List[int]:
    """Indices of one longest strictly increasing subsequence of ``values``."""
    tail_vals: List[int] = []
    tail_idx: List[int] = []
    parent = [-1] * len(values)

    for i, v in enumerate(values):
        k = bisect_left(tail_vals, v)
        if k > 0:
            parent[i] = tail_idx[k - 1]
        if k == len(tail_vals):
            tail_vals.append(v)
            tail_idx.append(i)
        else:
            tail_vals[k] = v
            tail_idx[k] = i

    out: List[int] = []
    i = tail_idx[-1] if tail_idx else -1
    while i >= 0:
        out.append(i)
        i = parent[i]
    out.reverse()
    return out


def compute_diff(previous: Sequence[Item], current: Sequence[Item]) -> List[DiffOp]:
    """
    Operations turning ``previous`` into ``current``.

    Both sequences must be free of duplicate ids.  Identity is the item id;
    content changes are detected with :meth:`Item.same_content`.
    """
    new_rank: Dict[str, int] = {item.id: i for i, item in enumerate(current)}
    old_by_id: Dict[str, Item] = {item.id: item for item in previous}
    ops: List[DiffOp] = []

    # removes, back to front so earlier positions stay valid
    for pos in range(len(previous) - 1, -1, -1):
        item = previous[pos]
        if item.id not in new_rank:
            ops.append(Remove(item.id, pos))

    work: List[str] = [item.id for item in previous if item.id in new_rank]
    in_order = _longest_increasing_run([new_rank[i] for i in work])
    stable: Set[str] = {work[j] for j in in_order}

    # inserts anchor on the nearest preceding item that will not move
    anchor: Optional[str] = None
    for item in current:
        if item.id in old_by_id:
            if item.id in stable:
                anchor = item.id
            continue
        pos = 0 if anchor is None else work.index(anchor) + 1
        work.insert(pos, item.id)
        ops.append(Insert(item.id, pos, item))
        anchor = item.id

    # movers land right after their predecessor in the new order
    before: Optional[str] = None
    for item in current:
        if item.id in old_by_id and item.id not in stable:
            src = work.index(item.id)
            work.pop(src)
            dst = 0 if before is None else work.index(before) + 1
            work.insert(dst, item.id)
            if src != dst:
                ops.append(Move(item.id, src, dst))
        before = item.id

    for pos, item in enumerate(current):
        old = old_by_id.get(item.id)
        if old is not None and not old.same_content(item):
            ops.append(Changed(item.id, pos, item))

    return ops


def replay_diff(previous: Sequence[Item], ops: Iterable[DiffOp]) -> List[Item]:
    """Apply ``ops`` to a copy of ``previous`` the way a list renderer would."""
    out = list(previous)
    for op in ops:
        if isinstance(op, Remove):
            if out[op.position].id != op.id:
                raise ValueError(f"Remove({op.id!r}) does not match position {op.position}")
            del out[op.position]
        elif isinstance(op, Insert):
            out.insert(op.position, op.item)
        elif isinstance(op, Move):
            moved = out.pop(op.from_position)
            if moved.id != op.id:
                raise ValueError(f"Move({op.id!r}) does not match position {op.from_position}")
            out.insert(op.to_position, moved)
        elif isinstance(op, Changed):
            out[op.position] = op.item
        else:
            raise TypeError(f"Unknown diff op: {op!r}")
    return out


def dispatch_batch(listener: DiffListener, ops: Sequence[DiffOp]) -> None:
    listener.begin_batch()
    try:
        for op in ops:
            op.dispatch(listener)
    finally:
        listener.end_batch()


# =============================================================================
# Result set
# =============================================================================

class SortedResultSet:
    """
    Ordered, de-duplicated view of the items passing the last applied query.

    Not thread-safe; callers serialise ``apply`` calls.  Inputs are never
    mutated.
    """

    def __init__(self) -> None:
        self._items: List[Item] = []
        self._by_id: Dict[str, Item] = {}
        self._positions: Dict[str, int] = {}

    def apply(
        self,
        candidates: Iterable[Item],
        query: Query,
        listener: Optional[DiffListener] = None,
    ) -> ApplyResult:
        survivors = filter_candidates(candidates, query)
        # snapshots, so in-place edits by the caller show up as changes next time
        ordered = [item.model_copy() for item in query.ordering.sort(survivors)]
        ops = compute_diff(self._items, ordered)

        self._replace(ordered)

        logger.debug(
            "apply: {} candidate(s) matched, {} op(s) ({} ordering)",
            len(ordered), len(ops), query.ordering.value,
        )
        # state is already final when the listener sees the batch
        if listener is not None:
            dispatch_batch(listener, ops)
        return ApplyResult(list(ordered), ops)

    def clear(self, listener: Optional[DiffListener] = None) -> List[DiffOp]:
        ops = compute_diff(self._items, [])
        self._replace([])
        if listener is not None:
            dispatch_batch(listener, ops)
        return ops

    def _replace(self, ordered: List[Item]) -> None:
        self._items = ordered
        self._by_id = {item.id: item for item in ordered}
        self._positions = {item.id: i for i, item in enumerate(ordered)}

    def size(self) -> int:
        return len(self._items)

    def items(self) -> List[Item]:
        return list(self._items)

    def get(self, item_id: str) -> Optional[Item]:
        return self._by_id.get(item_id)

    def position_of(self, item_id: str) -> int:
        """Index of ``item_id`` in the current list; ``KeyError`` if absent."""
        return self._positions[item_id]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(list(self._items))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def __getitem__(self, position: int) -> Item:
        return self._items[position]
