from poisearch.constants import TagID
from poisearch.tags import TagState


def test_with_tag_is_copy_on_write():
    empty = TagState()
    on = empty.with_tag(TagID.WHEELCHAIR_ACCESSIBLE, True)

    assert not empty.is_active(TagID.WHEELCHAIR_ACCESSIBLE)
    assert len(empty) == 0
    assert on.is_active(TagID.WHEELCHAIR_ACCESSIBLE)
    assert on.active_tags() == frozenset({TagID.WHEELCHAIR_ACCESSIBLE})


def test_false_and_absent_tags_are_inactive():
    state = TagState({TagID.CHILD_FRIENDLY: False})
    assert TagID.CHILD_FRIENDLY in state
    assert not state.is_active(TagID.CHILD_FRIENDLY)
    assert not state.is_active(TagID.FREE_ENTRY)
    assert state.active_tags() == frozenset()


def test_remove_drops_entry_and_keeps_original():
    state = TagState({TagID.LIKED_BY_YOU: True, TagID.FREE_ENTRY: True})
    removed = state.remove(TagID.LIKED_BY_YOU)

    assert TagID.LIKED_BY_YOU not in removed
    assert removed.active_tags() == frozenset({TagID.FREE_ENTRY})
    assert state.is_active(TagID.LIKED_BY_YOU)
    # removing something absent is a no-op
    assert removed.remove(TagID.LIKED_BY_YOU) == removed


def test_string_keys_normalise_to_tag_ids():
    state = TagState({"wheelchair_accessible": True})
    assert state.is_active(TagID.WHEELCHAIR_ACCESSIBLE)
    assert TagID.WHEELCHAIR_ACCESSIBLE in state.active_tags()


def test_unknown_tags_are_legal_keys():
    state = TagState().with_tag("rooftop_bar", True)
    assert state.is_active("rooftop_bar")
    assert "rooftop_bar" in state.active_tags()


def test_equality_and_hash_follow_contents():
    a = TagState({TagID.CHEAP_ENTRY: True})
    b = TagState().with_tag(TagID.CHEAP_ENTRY, True)
    assert a == b
    assert hash(a) == hash(b)
    assert a != b.with_tag(TagID.CHEAP_ENTRY, False)
