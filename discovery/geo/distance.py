"""
Distance helpers: haversine distance and unit conversion.

All distance comparisons in the pipeline happen in kilometers.
"""

import math
from typing import Union

from ..models.preferences import COUNTRY_LEVEL_DISTANCE, DistanceUnit
from ..models.profile import Coordinates

EARTH_RADIUS_KM = 6371.0
KM_PER_MILE = 1.60934


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points (haversine)."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    d_lat = lat2 - lat1
    d_lng = math.radians(b.lng - a.lng)
    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def to_km(value: float, unit: Union[DistanceUnit, str]) -> float:
    """
    Convert a distance to kilometers. Sentinels pass through unchanged:
    negative (unlimited) and >= 999999 (country-level).
    """
    if value < 0 or value >= COUNTRY_LEVEL_DISTANCE:
        return value
    if DistanceUnit(unit) == DistanceUnit.MILES:
        return value * KM_PER_MILE
    return value
