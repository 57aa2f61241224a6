from __future__ import annotations

"""
Catalogue snapshot -> Item values.

The catalogue collaborator hands over a pandas DataFrame (database export,
API dump, fixture file...).  This module standardises its columns, coerces
the flag fields and builds validated :class:`~poisearch.models.Item` values.
Rows that cannot become an Item are logged and skipped.
"""

from typing import Dict, Iterable, List, Optional, Sequence, Set

import pandas as pd
from loguru import logger
from pydantic import ValidationError

from .constants import UNBOUNDED
from .models import Item


# ---------------------------
# Column detection / standardization
# ---------------------------

COLUMN_CANDIDATES: Dict[str, List[str]] = {
    "id": ["id", "ID", "location_id", "place_id"],
    "title": ["title", "Title", "name", "Name"],
    "category": ["category", "Category", "location_type", "place_type", "type"],
    "wheelchair_accessible": ["wheelchair_accessible", "wheelchair", "accessible"],
    "child_friendly": ["child_friendly", "kid_friendly", "family_friendly"],
    "cheap_entry": ["cheap_entry", "cheap"],
    "free_entry": ["free_entry", "free"],
    "latitude": ["latitude", "lat"],
    "longitude": ["longitude", "lon", "lng"],
    "distance": ["distance", "distance_m"],
}

FLAG_COLUMNS = ("wheelchair_accessible", "child_friendly", "cheap_entry", "free_entry")


def _standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename the first matching candidate column (case-insensitive) per field."""
    col_map: Dict[str, str] = {}
    lower_to_original = {str(c).lower(): c for c in df.columns}

    for canon, candidates in COLUMN_CANDIDATES.items():
        for candidate in candidates:
            original = lower_to_original.get(candidate.lower())
            if original is not None:
                col_map[original] = canon
                break

    df_std = df.rename(columns=col_map)
    if "id" not in df_std.columns:
        raise KeyError("Catalogue DataFrame must contain an id column.")
    return df_std


# ---------------------------
# Field parsing helpers
# ---------------------------

def _is_missing(value) -> bool:
    if value is None:
        return True
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _coerce_bool(value) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in {"yes", "y", "true", "1"}
    return bool(value)


def _coerce_float(value) -> Optional[float]:
    if _is_missing(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _coerce_str(value) -> str:
    if _is_missing(value):
        return ""
    return str(value).strip()


def _build_item(row: pd.Series, liked_ids: Set[str]) -> Item:
    item_id = _coerce_str(row.get("id"))
    distance = _coerce_float(row.get("distance"))
    return Item(
        id=item_id,
        title=_coerce_str(row.get("title")),
        category=_coerce_str(row.get("category")),
        liked=item_id in liked_ids,
        distance=UNBOUNDED if distance is None else distance,
        latitude=_coerce_float(row.get("latitude")),
        longitude=_coerce_float(row.get("longitude")),
        **{col: _coerce_bool(row.get(col)) for col in FLAG_COLUMNS},
    )


def items_from_frame(df: pd.DataFrame, liked_ids: Optional[Iterable[str]] = None) -> List[Item]:
    """
    Build Items from a catalogue DataFrame.

    ``liked_ids`` marks the user's liked locations; the catalogue itself does
    not know about them.
    """
    if df is None:
        raise ValueError("df must be provided to items_from_frame")

    liked = set(liked_ids or ())
    df_std = _standardize_columns(df)

    items: List[Item] = []
    for idx, row in df_std.iterrows():
        try:
            items.append(_build_item(row, liked))
        except ValidationError as e:
            logger.warning("Skipping catalogue row {}: {}", idx, e.errors()[0].get("msg", e))

    logger.info("Loaded {} item(s) from catalogue ({} row(s))", len(items), len(df_std))
    return items


def apply_liked(items: Sequence[Item], liked_ids: Iterable[str]) -> List[Item]:
    """Copies of ``items`` with the liked flag synced to ``liked_ids``."""
    liked = set(liked_ids)
    return [
        it if it.liked == (it.id in liked) else it.model_copy(update={"liked": it.id in liked})
        for it in items
    ]
