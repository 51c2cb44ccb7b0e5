"""
Geocoder: resolve free-text locations to coordinates.

Lookup order: injected CoordinateCache, remote Google Geocoding API (bounded timeout),
then the local fallback dataset (known cities, then country centroids). Remote
failures never reach callers; they are logged and recovered from local data.
"""

import logging
import re
import threading
from typing import Dict, Optional

import requests
from pydantic import BaseModel

from ..errors import GeocodeUnavailable
from ..models.profile import Coordinates
from .fallback_locations import CITY_CONFIDENCE, COUNTRY_CONFIDENCE, lookup_city, lookup_country

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
REMOTE_CONFIDENCE = 0.95
DEFAULT_TIMEOUT_SECONDS = 3.0


class ResolvedLocation(BaseModel):
    lat: float
    lng: float
    confidence: float
    country: Optional[str] = None
    # remote | fallback_city | fallback_country
    source: str

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)


def normalize_location(text: str) -> str:
    """Lower-case, collapse whitespace, and normalize comma spacing."""
    key = re.sub(r"\s+", " ", text.strip().lower())
    key = re.sub(r",+", ",", key)
    return re.sub(r"\s*,\s*", ", ", key)


class CoordinateCache:
    """
    Append-only, thread-safe location cache keyed by normalized location text.
    Created once at application startup and shared by all requests.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entries: Dict[str, ResolvedLocation] = {}

    def get(self, key: str) -> Optional[ResolvedLocation]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, location: ResolvedLocation) -> ResolvedLocation:
        """Store location unless the key is already cached; returns the cached entry."""
        with self._lock:
            return self._entries.setdefault(key, location)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class Geocoder:
    """Resolves location text to coordinates; see module docstring for lookup order."""

    def __init__(
        self,
        cache: CoordinateCache,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.cache = cache
        self.api_key = api_key
        self.timeout = timeout

    def resolve_coordinates(self, location_text: Optional[str]) -> Optional[ResolvedLocation]:
        """Return resolved coordinates, or None when nothing (remote or local) matches."""
        if not location_text or not location_text.strip():
            return None
        key = normalize_location(location_text)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        if self.api_key:
            try:
                return self.cache.put(key, self._remote_lookup(location_text))
            except GeocodeUnavailable as e:
                logger.warning("[geocoder] REMOTE_UNAVAILABLE location=%r error=%s", key, e)
                # Not cached: a later request may reach the remote service.
                return self._fallback(key)

        location = self._fallback(key)
        if location is not None:
            self.cache.put(key, location)
        return location

    def _remote_lookup(self, location_text: str) -> ResolvedLocation:
        """Query the Google Geocoding API; raises GeocodeUnavailable on any failure."""
        try:
            response = requests.get(
                GEOCODE_URL,
                params={"address": location_text, "key": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            raise GeocodeUnavailable(str(e)) from e

        status = data.get("status")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise GeocodeUnavailable(f"status={status}")
        result = results[0]
        try:
            loc = result["geometry"]["location"]
            lat, lng = float(loc["lat"]), float(loc["lng"])
        except (KeyError, TypeError, ValueError) as e:
            raise GeocodeUnavailable(f"malformed result: {e}") from e

        country = None
        for component in result.get("address_components", []):
            if "country" in component.get("types", []):
                country = component.get("long_name")
        logger.info("[geocoder] resolved %r -> (%.4f, %.4f) country=%s", location_text, lat, lng, country)
        return ResolvedLocation(
            lat=lat,
            lng=lng,
            confidence=REMOTE_CONFIDENCE,
            country=country,
            source="remote",
        )

    def _fallback(self, key: str) -> Optional[ResolvedLocation]:
        city = lookup_city(key)
        if city is not None:
            lat, lng, country = city
            return ResolvedLocation(
                lat=lat, lng=lng, confidence=CITY_CONFIDENCE, country=country, source="fallback_city"
            )
        centroid = lookup_country(key)
        if centroid is not None:
            lat, lng, country = centroid
            return ResolvedLocation(
                lat=lat, lng=lng, confidence=COUNTRY_CONFIDENCE, country=country, source="fallback_country"
            )
        logger.info("[geocoder] NO_MATCH location=%r", key)
        return None
