"""
Preference model: immutable snapshot of a user's discovery preferences.

Stored preference blobs are loosely typed (JSON strings, bare strings, legacy values).
UserPreferences.from_storage() parses them once, field by field, into tagged variants;
a malformed field falls back to its neutral default and is logged, never raised.
"""

import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

UNLIMITED_DISTANCE = -1
COUNTRY_LEVEL_DISTANCE = 999999

# Pool country value meaning "no country restriction".
ANYWHERE = "ANYWHERE"


class DealBreakerKind(str, Enum):
    SMOKING = "smoking"
    DRINKING = "drinking"
    DIFFERENT_RELIGION = "different_religion"
    NO_EDUCATION = "no_education"
    HAS_CHILDREN = "has_children"
    LONG_DISTANCE = "long_distance"
    UNKNOWN = "unknown"


class DealBreaker(BaseModel):
    """A parsed deal-breaker; raw keeps the stored value for unknown kinds."""

    model_config = ConfigDict(frozen=True)

    kind: DealBreakerKind
    raw: str

    @classmethod
    def parse(cls, raw: Any) -> "DealBreaker":
        text = str(raw).strip().lower()
        try:
            kind = DealBreakerKind(text)
        except ValueError:
            kind = DealBreakerKind.UNKNOWN
        return cls(kind=kind, raw=text)


class MatchingPriority(str, Enum):
    VALUES = "values"
    PERSONALITY = "personality"
    LOOKS = "looks"
    CAREER = "career"
    RELIGION = "religion"
    TRIBE = "tribe"
    INTELLECT = "intellect"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, raw: Any) -> "MatchingPriority":
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.UNKNOWN


class DistanceUnit(str, Enum):
    MILES = "mi"
    KM = "km"


class DistancePreference(BaseModel):
    """Maximum distance; -1 is unlimited, >= 999999 is country-level."""

    model_config = ConfigDict(frozen=True)

    value: float = UNLIMITED_DISTANCE
    unit: DistanceUnit = DistanceUnit.MILES

    @property
    def is_unlimited(self) -> bool:
        return self.value < 0

    @property
    def is_country_level(self) -> bool:
        return self.value >= COUNTRY_LEVEL_DISTANCE


class ChildrenPreference(str, Enum):
    YES = "yes"
    NO = "no"
    ANY = "any"


class SubstanceLevel(str, Enum):
    """Ordered smoking/drinking scale: none < occasional < social < regular."""

    NONE = "none"
    OCCASIONAL = "occasional"
    SOCIAL = "social"
    REGULAR = "regular"

    @property
    def rank(self) -> int:
        return _SUBSTANCE_ORDER.index(self)

    @classmethod
    def parse(cls, raw: Any) -> Optional["SubstanceLevel"]:
        """Map stored wording to a level; None for unknown values."""
        if raw is None:
            return None
        if isinstance(raw, bool):
            return cls.REGULAR if raw else cls.NONE
        return _SUBSTANCE_ALIASES.get(str(raw).strip().lower())


_SUBSTANCE_ORDER = [
    SubstanceLevel.NONE,
    SubstanceLevel.OCCASIONAL,
    SubstanceLevel.SOCIAL,
    SubstanceLevel.REGULAR,
]

_SUBSTANCE_ALIASES = {
    "none": SubstanceLevel.NONE,
    "no": SubstanceLevel.NONE,
    "never": SubstanceLevel.NONE,
    "occasional": SubstanceLevel.OCCASIONAL,
    "occasionally": SubstanceLevel.OCCASIONAL,
    "rarely": SubstanceLevel.OCCASIONAL,
    "social": SubstanceLevel.SOCIAL,
    "socially": SubstanceLevel.SOCIAL,
    "regular": SubstanceLevel.REGULAR,
    "regularly": SubstanceLevel.REGULAR,
    "yes": SubstanceLevel.REGULAR,
    "often": SubstanceLevel.REGULAR,
}


class UserPreferences(BaseModel):
    """Discovery preferences for one ranking pass. Defaults are permissive."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[int] = None
    min_age: Optional[int] = None
    max_age: Optional[int] = None
    distance: DistancePreference = DistancePreference()
    deal_breakers: Tuple[DealBreaker, ...] = ()
    max_smoking: Optional[SubstanceLevel] = None
    max_drinking: Optional[SubstanceLevel] = None
    children_preference: Optional[ChildrenPreference] = None
    children_deal_breaker: bool = False
    matching_priorities: Tuple[MatchingPriority, ...] = ()
    religion_preferences: Tuple[str, ...] = ()
    ethnicity_preferences: Tuple[str, ...] = ()
    body_type_preferences: Tuple[str, ...] = ()
    education_preferences: Tuple[str, ...] = ()
    min_height: Optional[float] = None
    max_height: Optional[float] = None
    pool_country: Optional[str] = None

    def has_deal_breaker(self, kind: DealBreakerKind) -> bool:
        return any(db.kind == kind for db in self.deal_breakers)

    @property
    def active_deal_breakers(self) -> List[DealBreakerKind]:
        """Known deal-breaker kinds; unknown/legacy entries are ignored by filters."""
        return [db.kind for db in self.deal_breakers if db.kind != DealBreakerKind.UNKNOWN]

    @property
    def restricts_pool_country(self) -> bool:
        return bool(self.pool_country) and self.pool_country.strip().upper() != ANYWHERE

    @classmethod
    def from_storage(cls, raw: Optional[Dict[str, Any]], user_id: Optional[int] = None) -> "UserPreferences":
        """
        Build preferences from a stored blob (camelCase or snake_case keys).

        Each field is parsed independently: corrupt JSON or wrong types replace only that
        field with its default and log a warning with the user id and field name.
        """
        if not raw:
            return cls(user_id=user_id)
        parsers: List[Tuple[str, Tuple[str, ...], Callable[[Any], Any]]] = [
            ("min_age", ("min_age", "minAge"), _parse_int),
            ("max_age", ("max_age", "maxAge"), _parse_int),
            ("deal_breakers", ("deal_breakers", "dealBreakers"), _parse_deal_breakers),
            ("max_smoking", ("max_smoking", "smokingPreference"), _parse_substance),
            ("max_drinking", ("max_drinking", "drinkingPreference"), _parse_substance),
            ("children_preference", ("children_preference", "hasChildrenPreference"), _parse_children),
            ("children_deal_breaker", ("children_deal_breaker", "childrenDealBreaker"), _parse_bool),
            ("matching_priorities", ("matching_priorities", "matchingPriorities"), _parse_priorities),
            ("religion_preferences", ("religion_preferences", "religionPreference"), _parse_str_list),
            ("ethnicity_preferences", ("ethnicity_preferences", "ethnicityPreference"), _parse_str_list),
            ("body_type_preferences", ("body_type_preferences", "bodyTypePreference"), _parse_str_list),
            ("education_preferences", ("education_preferences", "educationLevelPreference"), _parse_str_list),
            ("min_height", ("min_height", "minHeightPreference"), _parse_float),
            ("max_height", ("max_height", "maxHeightPreference"), _parse_float),
            ("pool_country", ("pool_country", "meetPoolCountry", "poolCountry"), _parse_str),
        ]
        values: Dict[str, Any] = {"user_id": user_id}
        for field, keys, parser in parsers:
            value = _lookup(raw, keys)
            if value is None:
                continue
            try:
                parsed = parser(value)
            except (ValueError, TypeError) as e:
                logger.warning(
                    "[preferences] MALFORMED_FIELD user_id=%s field=%s error=%s",
                    user_id, field, e,
                )
                continue
            if parsed is not None:
                values[field] = parsed
        try:
            values["distance"] = _parse_distance(raw)
        except (ValueError, TypeError) as e:
            logger.warning(
                "[preferences] MALFORMED_FIELD user_id=%s field=distance error=%s",
                user_id, e,
            )
        return cls(**values)


def _lookup(raw: Dict[str, Any], keys: Tuple[str, ...]) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return None


def _load_list(value: Any) -> List[Any]:
    """Lists pass through; strings are JSON-decoded, falling back to a single value."""
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            parsed = json.loads(text)
            if not isinstance(parsed, list):
                raise ValueError(f"expected a JSON list, got {type(parsed).__name__}")
            return parsed
        return [text]
    raise TypeError(f"expected list or string, got {type(value).__name__}")


def _parse_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not an age")
    return int(value)


def _parse_float(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    return float(value)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "yes", "1"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "no", "0", ""):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _parse_str(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        raise TypeError(f"expected string, got {type(value).__name__}")
    return value.strip() or None


def _parse_str_list(value: Any) -> Tuple[str, ...]:
    return tuple(str(v).strip() for v in _load_list(value) if str(v).strip())


def _parse_deal_breakers(value: Any) -> Tuple[DealBreaker, ...]:
    return tuple(DealBreaker.parse(v) for v in _load_list(value) if str(v).strip())


def _parse_priorities(value: Any) -> Tuple[MatchingPriority, ...]:
    return tuple(MatchingPriority.parse(v) for v in _load_list(value) if str(v).strip())


def _parse_substance(value: Any) -> Optional[SubstanceLevel]:
    level = SubstanceLevel.parse(value)
    if level is None:
        raise ValueError(f"unknown tolerance: {value!r}")
    return level


def _parse_children(value: Any) -> ChildrenPreference:
    return ChildrenPreference(str(value).strip().lower())


def _parse_distance(raw: Dict[str, Any]) -> DistancePreference:
    value = _lookup(raw, ("distance", "distance_preference", "distancePreference"))
    if value is None:
        return DistancePreference()
    if isinstance(value, dict):
        return DistancePreference.model_validate(value)
    unit = _lookup(raw, ("distance_unit", "distanceUnit")) or DistanceUnit.MILES.value
    return DistancePreference(value=_parse_float(value), unit=DistanceUnit(str(unit).strip().lower()))
