import random

from poisearch.constants import TagID
from poisearch.models import Item, Query
from poisearch.ordering import OrderingStrategy
from poisearch.predicate import matches
from poisearch.result_set import (
    Changed,
    Insert,
    Move,
    Remove,
    SortedResultSet,
    compute_diff,
    replay_diff,
)
from poisearch.tags import TagState


class RecordingListener:
    """Collects callbacks so batching can be asserted on."""

    def __init__(self):
        self.events = []

    def begin_batch(self):
        self.events.append("begin")

    def end_batch(self):
        self.events.append("end")

    def on_removed(self, op):
        self.events.append(op)

    def on_inserted(self, op):
        self.events.append(op)

    def on_moved(self, op):
        self.events.append(op)

    def on_changed(self, op):
        self.events.append(op)


def _keys(items):
    return [it.content_key() for it in items]


def _catalogue():
    return [
        Item(id="a", title="Abbey", distance=400, wheelchair_accessible=True),
        Item(id="b", title="Bridge", distance=100, child_friendly=True),
        Item(id="c", title="Castle", distance=300, wheelchair_accessible=True, child_friendly=True),
        Item(id="d", title="Docks", distance=200),
        Item(id="e", title="East Gate", distance=500, child_friendly=True),
    ]


def test_castle_cave_scenario():
    candidates = [
        Item(id="a", title="Castle", distance=5),
        Item(id="b", title="Cave", distance=15),
    ]
    rs = SortedResultSet()
    items, diff = rs.apply(candidates, Query(text="ca", max_distance=10))

    assert [it.id for it in items] == ["a"]
    assert len(diff) == 1
    assert isinstance(diff[0], Insert)
    assert (diff[0].id, diff[0].position) == ("a", 0)
    assert rs.size() == 1


def test_second_identical_apply_is_empty():
    rs = SortedResultSet()
    q = Query(tags=TagState({TagID.CHILD_FRIENDLY: True}))
    first = rs.apply(_catalogue(), q)
    second = rs.apply(_catalogue(), q)

    assert first.diff
    assert second.diff == []
    assert _keys(first.items) == _keys(second.items)


def test_result_is_sorted_and_sound():
    rs = SortedResultSet()
    q = Query(max_distance=400, ordering=OrderingStrategy.SHORTEST_DISTANCE)
    items, _ = rs.apply(_catalogue(), q)

    assert [it.id for it in items] == ["b", "d", "c", "a"]
    for x, y in zip(items, items[1:]):
        assert q.ordering.compare(x, y) < 0
    assert all(matches(it, q) for it in items)
    expected = {it.id for it in _catalogue() if matches(it, q)}
    assert {it.id for it in items} == expected


def test_removes_come_first_back_to_front():
    rs = SortedResultSet()
    rs.apply(_catalogue(), Query())
    items, diff = rs.apply(_catalogue(), Query(text="ga"))
    assert [it.id for it in items] == ["e"]
    assert all(isinstance(op, Remove) for op in diff)
    assert [op.position for op in diff] == [3, 2, 1, 0]


def test_ordering_switch_emits_only_moves():
    rs = SortedResultSet()
    before, _ = rs.apply(_catalogue(), Query())
    after, diff = rs.apply(_catalogue(), Query(ordering=OrderingStrategy.SHORTEST_DISTANCE))

    assert diff
    assert all(isinstance(op, Move) for op in diff)
    assert _keys(replay_diff(before, diff)) == _keys(after)
    # a..e by title -> b,d,c,a,e by distance; longest kept run is 3 long
    assert len(diff) == 2


def test_single_item_moving_is_one_move():
    prev = [Item(id=i, title=i) for i in "abcde"]
    new = [prev[1], prev[2], prev[3], prev[4], prev[0]]
    diff = compute_diff(prev, new)
    assert diff == [Move("a", 0, 4)]


def test_insert_between_neighbours_does_not_shift_into_moves():
    prev = [Item(id=i, title=i) for i in "acd"]
    new = [prev[0], Item(id="b", title="b"), prev[1], prev[2]]
    diff = compute_diff(prev, new)
    assert len(diff) == 1
    assert isinstance(diff[0], Insert)
    assert diff[0].position == 1


def test_content_change_without_move():
    rs = SortedResultSet()
    rs.apply([Item(id="x", title="Old Mill", category="museum")], Query())
    items, diff = rs.apply([Item(id="x", title="Old Mill", category="gallery")], Query())

    assert len(diff) == 1
    assert isinstance(diff[0], Changed)
    assert diff[0].position == 0
    assert diff[0].item.category == "gallery"
    assert rs.get("x").category == "gallery"


def test_flag_change_alone_is_not_a_content_change():
    rs = SortedResultSet()
    rs.apply([Item(id="x", title="Mill")], Query())
    _, diff = rs.apply([Item(id="x", title="Mill", liked=True)], Query())
    assert diff == []
    assert rs.get("x").liked


def test_tag_toggle_restores_previous_state():
    rs = SortedResultSet()
    base = Query()
    prev, _ = rs.apply(_catalogue(), base)

    on = Query(tags=base.tags.with_tag(TagID.WHEELCHAIR_ACCESSIBLE, True))
    filtered, _ = rs.apply(_catalogue(), on)
    assert {it.id for it in filtered} == {"a", "c"}

    off = Query(tags=on.tags.with_tag(TagID.WHEELCHAIR_ACCESSIBLE, False))
    restored, diff = rs.apply(_catalogue(), off)
    assert _keys(restored) == _keys(prev)
    assert replay_diff(filtered, diff) == restored


def test_empty_candidates_remove_everything():
    rs = SortedResultSet()
    rs.apply(_catalogue(), Query())
    items, diff = rs.apply([], Query())
    assert items == []
    assert len(diff) == 5
    assert rs.size() == 0


def test_listener_sees_one_bracketed_batch():
    rs = SortedResultSet()
    listener = RecordingListener()
    rs.apply(_catalogue()[:2], Query(), listener=listener)
    rs.apply(_catalogue()[1:3], Query(), listener=listener)

    assert listener.events[0] == "begin"
    assert listener.events[3] == "end"
    second = listener.events[4:]
    assert second[0] == "begin" and second[-1] == "end"
    kinds = [type(op) for op in second[1:-1]]
    assert kinds == [Remove, Insert]


def test_clear_reports_removes():
    rs = SortedResultSet()
    rs.apply(_catalogue(), Query())
    ops = rs.clear()
    assert len(ops) == 5
    assert len(rs) == 0


def test_lookup_helpers():
    rs = SortedResultSet()
    rs.apply(_catalogue(), Query(ordering=OrderingStrategy.SHORTEST_DISTANCE))
    assert "c" in rs
    assert "z" not in rs
    assert rs.position_of("c") == 2
    assert rs[0].id == "b"
    assert [it.id for it in rs] == ["b", "d", "c", "a", "e"]


def test_random_transitions_replay_exactly():
    rng = random.Random(7)
    rs = SortedResultSet()
    previous = []
    for _ in range(40):
        pool = [
            Item(
                id=str(i),
                title=rng.choice(["Abbey", "Bridge", "Castle", "Docks"]) + str(rng.randint(0, 3)),
                category=rng.choice(["museum", "park"]),
                distance=float(rng.randint(0, 50)),
                child_friendly=rng.random() < 0.5,
            )
            for i in range(rng.randint(0, 25))
        ]
        q = Query(
            max_distance=float(rng.choice([10, 30, 50])),
            tags=TagState({TagID.CHILD_FRIENDLY: rng.random() < 0.3}),
            ordering=rng.choice(list(OrderingStrategy)),
        )
        items, diff = rs.apply(pool, q)

        assert _keys(replay_diff(previous, diff)) == _keys(items)
        assert len({it.id for it in items}) == len(items)
        kinds = [type(op) for op in diff]
        order = {Remove: 0, Insert: 1, Move: 2, Changed: 3}
        assert [order[k] for k in kinds] == sorted(order[k] for k in kinds)
        previous = items


def test_in_place_title_edit_is_reported_as_changed():
    items = [Item(id="a", title="Abbey"), Item(id="b", title="Bridge")]
    rs = SortedResultSet()
    rs.apply(items, Query())

    items[0].title = "Abbey Ruins"
    _, diff = rs.apply(items, Query())

    assert diff == [Changed("a", 0, rs.get("a"))]
    assert diff[0].item.title == "Abbey Ruins"


def test_position_of_ignores_later_edits_to_caller_items():
    items = [Item(id=i, title=i, distance=d) for i, d in zip("abc", (1, 2, 3))]
    rs = SortedResultSet()
    rs.apply(items, Query(ordering=OrderingStrategy.SHORTEST_DISTANCE))

    items[0].distance = 10
    assert rs.position_of("a") == 0
    assert rs[rs.position_of("a")].id == "a"
    assert rs.get("a").distance == 1


def test_apply_leaves_candidates_untouched():
    items = _catalogue()
    before = [it.model_dump() for it in items]
    ids = [id(it) for it in items]

    SortedResultSet().apply(items, Query(ordering=OrderingStrategy.SHORTEST_DISTANCE))

    assert [id(it) for it in items] == ids
    assert [it.model_dump() for it in items] == before
