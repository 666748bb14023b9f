"""Short-range distances between map points."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

from kikk.reference.geography import METERS_PER_DEGREE, REGEOCODE_THRESHOLD_M

if TYPE_CHECKING:
    from kikk.schemas import LatLng, UserLocation


def distance_m(a: LatLng, b: LatLng) -> float:
    """Approximate distance in meters (equirectangular, 111 km per degree).

    Longitude differences are scaled by the cosine of the mean latitude.
    """
    mean_lat = math.radians((a.lat + b.lat) / 2)
    dy = (b.lat - a.lat) * METERS_PER_DEGREE
    dx = (b.lng - a.lng) * METERS_PER_DEGREE * math.cos(mean_lat)
    return math.hypot(dx, dy)


def needs_regeocode(
    previous: LatLng | None, current: LatLng, threshold_m: float = REGEOCODE_THRESHOLD_M
) -> bool:
    """True when a moved point should get a fresh place name."""
    if previous is None:
        return True
    return distance_m(previous, current) > threshold_m


def nearby_locations(
    point: LatLng, locations: list[UserLocation], radius_m: float
) -> list[UserLocation]:
    """Saved locations within ``radius_m`` of ``point``, nearest first."""
    within = [(distance_m(point, loc.location), loc) for loc in locations]
    within = [(d, loc) for d, loc in within if d <= radius_m]
    within.sort(key=lambda pair: pair[0])
    return [loc for _, loc in within]
