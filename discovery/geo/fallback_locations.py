"""
Local location dataset used when remote geocoding is unavailable.

Keys are normalized location strings ("city, country"). Cities resolve with high
confidence; country centroids are a coarse fallback.
"""

from typing import Dict, Optional, Tuple

CITY_CONFIDENCE = 0.95
COUNTRY_CONFIDENCE = 0.6

# (lat, lng, country)
CITY_LOCATIONS: Dict[str, Tuple[float, float, str]] = {
    # Ghana
    "accra, ghana": (5.6037, -0.1870, "Ghana"),
    "kumasi, ghana": (6.6885, -1.6244, "Ghana"),
    "tamale, ghana": (9.4075, -0.8533, "Ghana"),
    # Nigeria
    "lagos, nigeria": (6.5244, 3.3792, "Nigeria"),
    "abuja, nigeria": (9.0765, 7.3986, "Nigeria"),
    "kano, nigeria": (12.0022, 8.5920, "Nigeria"),
    # USA
    "richardson, tx, usa": (32.9483, -96.7299, "USA"),
    "dallas, tx, usa": (32.7767, -96.7970, "USA"),
    "houston, tx, usa": (29.7604, -95.3698, "USA"),
    "austin, tx, usa": (30.2672, -97.7431, "USA"),
    "new york, ny, usa": (40.7128, -74.0060, "USA"),
    "los angeles, ca, usa": (34.0522, -118.2437, "USA"),
    "chicago, il, usa": (41.8781, -87.6298, "USA"),
    "miami, fl, usa": (25.7617, -80.1918, "USA"),
    # Europe
    "madrid, spain": (40.4168, -3.7038, "Spain"),
    "barcelona, spain": (41.3851, 2.1734, "Spain"),
    "berlin, germany": (52.5200, 13.4050, "Germany"),
    "munich, germany": (48.1351, 11.5820, "Germany"),
    "london, uk": (51.5074, -0.1278, "UK"),
    "manchester, uk": (53.4808, -2.2426, "UK"),
    "paris, france": (48.8566, 2.3522, "France"),
    "rome, italy": (41.9028, 12.4964, "Italy"),
    "amsterdam, netherlands": (52.3676, 4.9041, "Netherlands"),
    # Canada
    "toronto, canada": (43.6532, -79.3832, "Canada"),
    "vancouver, canada": (49.2827, -123.1207, "Canada"),
    "montreal, canada": (45.5019, -73.5674, "Canada"),
}

COUNTRY_CENTROIDS: Dict[str, Tuple[float, float, str]] = {
    "usa": (39.8283, -98.5795, "USA"),
    "united states": (39.8283, -98.5795, "USA"),
    "spain": (40.4637, -3.7492, "Spain"),
    "germany": (51.1657, 10.4515, "Germany"),
    "ghana": (7.9465, -1.0232, "Ghana"),
    "nigeria": (9.0820, 8.6753, "Nigeria"),
    "uk": (55.3781, -3.4360, "UK"),
    "united kingdom": (55.3781, -3.4360, "UK"),
    "france": (46.6034, 1.8883, "France"),
    "italy": (41.8719, 12.5674, "Italy"),
    "netherlands": (52.1326, 5.2913, "Netherlands"),
    "canada": (56.1304, -106.3468, "Canada"),
}


def lookup_city(key: str) -> Optional[Tuple[float, float, str]]:
    """Exact city match, then the first city key the location text starts with."""
    if key in CITY_LOCATIONS:
        return CITY_LOCATIONS[key]
    first = key.split(",")[0].strip()
    for city_key, entry in CITY_LOCATIONS.items():
        if city_key.split(",")[0] == first and city_key.split(", ")[-1] in key:
            return entry
    return None


def lookup_country(key: str) -> Optional[Tuple[float, float, str]]:
    """Country centroid for the last comma-separated part of the location text."""
    if key in COUNTRY_CENTROIDS:
        return COUNTRY_CENTROIDS[key]
    last = key.split(",")[-1].strip()
    return COUNTRY_CENTROIDS.get(last)
