"""Geocoding and distance: haversine, unit conversion, cached location lookup."""

from .distance import EARTH_RADIUS_KM, KM_PER_MILE, distance_km, to_km
from .geocoder import CoordinateCache, Geocoder, ResolvedLocation, normalize_location

__all__ = [
    "CoordinateCache",
    "EARTH_RADIUS_KM",
    "Geocoder",
    "KM_PER_MILE",
    "ResolvedLocation",
    "distance_km",
    "normalize_location",
    "to_km",
]
