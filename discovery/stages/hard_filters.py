"""
Hard Filter Engine

Removes candidates that fail any non-negotiable criterion before scoring.
Gates run in a fixed order and short-circuit per candidate:

1. identity      self, matched, already swiped, blocked, suspended, hidden/inactive
2. deal_breakers smoking, drinking, different_religion, no_education, has_children
3. age           candidate age within [min_age, max_age], inclusive
4. distance      haversine limit (km), country-level, long_distance tightening, pool country
5. substances    smoking/drinking level <= declared tolerance
6. children      has-children must match the preference when it is a deal-breaker

The public entry point is apply_hard_filters.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..geo.distance import KM_PER_MILE, distance_km, to_km
from ..models.config import RankingConfig, resolve_config
from ..models.preferences import (
    COUNTRY_LEVEL_DISTANCE,
    ChildrenPreference,
    DealBreakerKind,
    SubstanceLevel,
    UserPreferences,
)
from ..models.profile import Coordinates, UserProfile

logger = logging.getLogger(__name__)

GATES = ("identity", "deal_breakers", "age", "distance", "substances", "children")

RELIGION_GROUPS: Dict[str, FrozenSet[str]] = {
    "christianity": frozenset({
        "christianity-roman-catholic",
        "christianity-methodist",
        "christianity-presbyterian",
        "christianity-anglican",
        "christianity-pentecostal",
        "christianity-charismatic",
        "christianity-baptist",
        "christianity-seventh-day-adventist",
        "christianity-evangelical",
        "christianity-church-of-christ",
        "christianity-apostolic",
        "christianity-lutheran",
        "christianity-jehovahs-witness",
        "christianity-salvation-army",
        "christianity-other",
    }),
    "islam": frozenset({"islam-sunni", "islam-ahmadiyya", "islam-shia", "islam-sufi", "islam-other"}),
    "traditional": frozenset({
        "traditional-akan",
        "traditional-ewe",
        "traditional-ga-adangme",
        "traditional-dagbani",
        "traditional-other",
    }),
    "other": frozenset({
        "other-bahai",
        "other-buddhism",
        "other-hinduism",
        "other-judaism",
        "other-rastafarianism",
        "other-other",
    }),
    "none": frozenset({"none-atheist", "none-agnostic", "none-secular", "none-prefer-not-to-say"}),
}

# Deal-breaker -> candidate attribute on the substance scale. Any level above none violates it.
SUBSTANCE_DEAL_BREAKERS: Dict[DealBreakerKind, str] = {
    DealBreakerKind.SMOKING: "smoking",
    DealBreakerKind.DRINKING: "drinking",
}

# Deal-breaker -> (candidate attribute, values that violate it). Exact match.
DEAL_BREAKER_VIOLATIONS: Dict[DealBreakerKind, Tuple[str, FrozenSet[Optional[str]]]] = {
    DealBreakerKind.NO_EDUCATION: ("education_level", frozenset({None, "", "no_formal_education"})),
    DealBreakerKind.HAS_CHILDREN: ("has_children", frozenset({"yes"})),
}


class ExclusionContext(BaseModel):
    """Ids removed by the identity gate, gathered by the caller from swipe history."""

    matched_ids: Set[int] = set()
    swiped_ids: Set[int] = set()
    # Either direction.
    blocked_ids: Set[int] = set()


class HardFilterReport(BaseModel):
    total: int = 0
    passed: int = 0
    excluded: Dict[str, int] = Field(default_factory=lambda: {gate: 0 for gate in GATES})


class _DistanceRule(BaseModel):
    """Resolved distance limit for one ranking pass."""

    model_config = ConfigDict(frozen=True)

    # None = unlimited; COUNTRY_LEVEL_DISTANCE = same-country check.
    limit_km: Optional[float] = None
    user_coordinates: Optional[Coordinates] = None
    user_countries: FrozenSet[str] = frozenset()
    pool_country: Optional[str] = None


def religion_group(religion: Optional[str]) -> Optional[str]:
    """Group for a religion value; community-added 'global-*' values form their own group."""
    if not religion:
        return None
    for group, denominations in RELIGION_GROUPS.items():
        if religion in denominations:
            return group
    if religion.startswith("global-"):
        return "global"
    return None


def _owner_religion_groups(owner: UserProfile, prefs: UserPreferences) -> Set[str]:
    values = list(prefs.religion_preferences) or ([owner.religion] if owner.religion else [])
    return {g for g in (religion_group(v) for v in values) if g}


def violated_deal_breaker(
    subject: UserProfile,
    owner: UserProfile,
    prefs: UserPreferences,
) -> Optional[DealBreakerKind]:
    """First of owner's deal-breakers that subject violates, else None."""
    for kind in prefs.active_deal_breakers:
        if kind == DealBreakerKind.DIFFERENT_RELIGION:
            owner_groups = _owner_religion_groups(owner, prefs)
            subject_group = religion_group(subject.religion)
            # Unknown religion on either side is let through.
            if owner_groups and subject_group and subject_group not in owner_groups:
                return kind
            continue
        if kind in SUBSTANCE_DEAL_BREAKERS:
            level = SubstanceLevel.parse(getattr(subject, SUBSTANCE_DEAL_BREAKERS[kind]))
            if level is not None and level != SubstanceLevel.NONE:
                return kind
            continue
        rule = DEAL_BREAKER_VIOLATIONS.get(kind)
        if rule is None:
            # long_distance is enforced by the distance gate.
            continue
        attribute, violating = rule
        if getattr(subject, attribute) in violating:
            return kind
    return None


def effective_distance_limit_km(prefs: UserPreferences, config: RankingConfig) -> Optional[float]:
    """
    Distance limit in km after long_distance tightening.
    None = unlimited; COUNTRY_LEVEL_DISTANCE = compare countries instead of distance.
    """
    distance = prefs.distance
    if prefs.has_deal_breaker(DealBreakerKind.LONG_DISTANCE):
        if distance.is_unlimited:
            return config.long_distance_unlimited_miles * KM_PER_MILE
        if distance.is_country_level:
            return config.long_distance_country_miles * KM_PER_MILE
        return min(
            to_km(distance.value, distance.unit) * config.long_distance_factor,
            config.long_distance_cap_miles * KM_PER_MILE,
        )
    if distance.is_unlimited:
        return None
    if distance.is_country_level:
        return float(COUNTRY_LEVEL_DISTANCE)
    return to_km(distance.value, distance.unit)


def _passes_identity(candidate: UserProfile, user: UserProfile, ctx: ExclusionContext, now: datetime) -> bool:
    cid = candidate.id
    if cid == user.id:
        return False
    if cid in ctx.matched_ids or cid in ctx.swiped_ids or cid in ctx.blocked_ids:
        return False
    if candidate.is_suspended_at(now):
        return False
    if candidate.profile_hidden or not candidate.has_activated_profile:
        return False
    return True


def _passes_age(candidate: UserProfile, prefs: UserPreferences, now: datetime) -> bool:
    if prefs.min_age is None and prefs.max_age is None:
        return True
    age = candidate.age(now.date())
    if age is None:
        return False
    if prefs.min_age is not None and age < prefs.min_age:
        return False
    if prefs.max_age is not None and age > prefs.max_age:
        return False
    return True


def _passes_distance(candidate: UserProfile, rule: _DistanceRule) -> bool:
    if rule.pool_country and rule.pool_country not in candidate.country_identities():
        return False
    if rule.limit_km is None:
        return True
    if rule.limit_km >= COUNTRY_LEVEL_DISTANCE:
        if not rule.user_countries:
            return True
        return bool(rule.user_countries & candidate.country_identities())
    if rule.user_coordinates is None:
        return True
    if candidate.coordinates is None:
        return False
    return distance_km(rule.user_coordinates, candidate.coordinates) <= rule.limit_km


def _within_tolerance(value: Optional[str], tolerance: Optional[SubstanceLevel]) -> bool:
    if tolerance is None:
        return True
    level = SubstanceLevel.parse(value)
    if level is None:
        return True
    return level.rank <= tolerance.rank


def _passes_substances(candidate: UserProfile, prefs: UserPreferences) -> bool:
    return (
        _within_tolerance(candidate.smoking, prefs.max_smoking)
        and _within_tolerance(candidate.drinking, prefs.max_drinking)
    )


def _passes_children(candidate: UserProfile, prefs: UserPreferences) -> bool:
    if not prefs.children_deal_breaker:
        return True
    wanted = prefs.children_preference
    if wanted is None or wanted == ChildrenPreference.ANY:
        return True
    return candidate.has_children == wanted.value


def _build_distance_rule(
    user: UserProfile,
    prefs: UserPreferences,
    config: RankingConfig,
) -> _DistanceRule:
    limit_km = effective_distance_limit_km(prefs, config)
    if limit_km is not None and limit_km < COUNTRY_LEVEL_DISTANCE and user.coordinates is None:
        logger.warning(
            "[hard_filters] USER_COORDINATES_MISSING user_id=%s location=%r; distance gate passes all",
            user.id, user.location,
        )
    return _DistanceRule(
        limit_km=limit_km,
        user_coordinates=user.coordinates,
        user_countries=frozenset(user.country_identities()),
        pool_country=prefs.pool_country.strip().lower() if prefs.restricts_pool_country else None,
    )


def apply_hard_filters(
    user: UserProfile,
    prefs: UserPreferences,
    candidates: List[UserProfile],
    context: ExclusionContext,
    now: datetime,
    config: Optional[RankingConfig] = None,
    candidate_preferences: Optional[Dict[int, UserPreferences]] = None,
) -> Tuple[List[UserProfile], HardFilterReport]:
    """
    Return candidates that pass every gate, in input order, plus per-gate exclusion counts.

    Profiles are expected to carry resolved coordinates; a candidate without
    coordinates fails a finite distance limit.
    """
    config = resolve_config(config)
    candidate_preferences = candidate_preferences or {}
    rule = _build_distance_rule(user, prefs, config)

    def _deal_breakers(candidate: UserProfile) -> bool:
        if violated_deal_breaker(candidate, user, prefs) is not None:
            return False
        if config.reciprocal_deal_breakers:
            their_prefs = candidate_preferences.get(candidate.id)
            if their_prefs is not None and violated_deal_breaker(user, candidate, their_prefs) is not None:
                return False
        return True

    gates: List[Tuple[str, Callable[[UserProfile], bool]]] = [
        ("identity", lambda c: _passes_identity(c, user, context, now)),
        ("deal_breakers", _deal_breakers),
        ("age", lambda c: _passes_age(c, prefs, now)),
        ("distance", lambda c: _passes_distance(c, rule)),
        ("substances", lambda c: _passes_substances(c, prefs)),
        ("children", lambda c: _passes_children(c, prefs)),
    ]

    report = HardFilterReport(total=len(candidates))
    passed: List[UserProfile] = []
    for candidate in candidates:
        failed_gate = next((name for name, gate in gates if not gate(candidate)), None)
        if failed_gate is not None:
            report.excluded[failed_gate] += 1
            logger.debug("[hard_filters] excluded candidate_id=%s gate=%s", candidate.id, failed_gate)
            continue
        passed.append(candidate)
    report.passed = len(passed)
    logger.info(
        "[hard_filters] user_id=%s total=%d passed=%d excluded=%s",
        user.id, report.total, report.passed, report.excluded,
    )
    return passed, report
