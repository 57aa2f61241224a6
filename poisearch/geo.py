from __future__ import annotations

"""
Distance refresh for a moving reference position.

The filtering engine only reads ``Item.distance``; this module is what a
caller uses to recompute it whenever the user's position changes, before the
next ``apply``.
"""

from typing import List, Sequence, Union

import numpy as np

from .config import EARTH_RADIUS_M
from .constants import UNBOUNDED
from .models import Item, Position


def haversine_m(
    lat1: Union[float, np.ndarray],
    lon1: Union[float, np.ndarray],
    lat2: float,
    lon2: float,
) -> Union[float, np.ndarray]:
    """Great-circle distance in meters.  Accepts arrays for the first point."""
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = phi2 - phi1
    dlmb = np.radians(lon2) - np.radians(lon1)
    a = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlmb / 2.0) ** 2
    return 2.0 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def with_distances(items: Sequence[Item], position: Position) -> List[Item]:
    """
    Copies of ``items`` with ``distance`` measured from ``position``.

    Items without coordinates get an unknown (infinite) distance so they sort
    last and only pass an unbounded cutoff.
    """
    if not items:
        return []

    lats = np.array([it.latitude if it.has_coordinates else np.nan for it in items], dtype="float64")
    lons = np.array([it.longitude if it.has_coordinates else np.nan for it in items], dtype="float64")
    with np.errstate(invalid="ignore"):
        dists = haversine_m(lats, lons, position.latitude, position.longitude)
    dists = np.where(np.isnan(dists), UNBOUNDED, dists)

    return [it.model_copy(update={"distance": float(d)}) for it, d in zip(items, dists)]
