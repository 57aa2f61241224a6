from __future__ import annotations

"""Shared vocabulary used across the filtering engine.

Tag identifiers form a closed enumeration.  Attribute tags map onto the boolean
flags carried by every :class:`~poisearch.models.Item`; category tags map onto
the item's category label.
"""

from enum import Enum
from typing import Dict

# Sentinel for "no distance cutoff".  Compared with ``<=`` like any other
# cutoff, so every finite distance passes.
UNBOUNDED: float = float("inf")


class TagID(str, Enum):
    LIKED_BY_YOU = "liked_by_you"
    WHEELCHAIR_ACCESSIBLE = "wheelchair_accessible"
    CHILD_FRIENDLY = "child_friendly"
    CHEAP_ENTRY = "cheap_entry"
    FREE_ENTRY = "free_entry"

    # category tags
    MUSEUM = "museum"
    CHURCH = "church"
    MONUMENT = "monument"
    PARK = "park"
    BRIDGE = "bridge"
    BUILDING = "building"


# attribute tag -> Item field
FLAG_TAGS: Dict[TagID, str] = {
    TagID.LIKED_BY_YOU: "liked",
    TagID.WHEELCHAIR_ACCESSIBLE: "wheelchair_accessible",
    TagID.CHILD_FRIENDLY: "child_friendly",
    TagID.CHEAP_ENTRY: "cheap_entry",
    TagID.FREE_ENTRY: "free_entry",
}

# category tag -> normalised category label
CATEGORY_TAGS: Dict[TagID, str] = {
    TagID.MUSEUM: "museum",
    TagID.CHURCH: "church",
    TagID.MONUMENT: "monument",
    TagID.PARK: "park",
    TagID.BRIDGE: "bridge",
    TagID.BUILDING: "building",
}

# Tags the search screen drives with dedicated checkboxes instead of the
# generic tag picker.
SEPARATELY_HANDLED_TAGS = (TagID.LIKED_BY_YOU, TagID.WHEELCHAIR_ACCESSIBLE)
