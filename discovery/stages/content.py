"""
Content-Based Scorer

Compares two profiles on their own attributes:
- jaccard:    categorical dimensions present on both profiles
- tfidf:      free text (bio, profession, interests, goal, schools)
- cosine:     numeric feature vector (age, height, activity, completeness)
- preference: how well the candidate meets the user's ranked matching priorities

combined = 0.25 * jaccard + 0.20 * tfidf + 0.30 * cosine + 0.25 * preference
"""

import logging
import math
import re
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from ..models.config import RankingConfig, resolve_config
from ..models.preferences import DealBreakerKind, MatchingPriority, UserPreferences
from ..models.profile import UserProfile
from ..models.scoring import ContentBreakdown
from ..utils.scores import clamp01, exponential_decay, hours_since
from ..utils.similarity import cosine_similarity, jaccard
from .hard_filters import religion_group

logger = logging.getLogger(__name__)

NEUTRAL = 0.5

CATEGORICAL_DIMENSIONS = (
    "ethnicity",
    "secondary_tribe",
    "religion",
    "body_type",
    "education_level",
    "smoking",
    "drinking",
    "has_children",
    "wants_children",
    "relationship_goal",
)

EDUCATION_HIERARCHY = {
    "high_school": 1,
    "some_college": 2,
    "bachelors": 3,
    "masters": 4,
    "doctorate": 5,
}

# Normalization ranges for the numeric feature vector.
AGE_MIN, AGE_SPAN = 18, 62
HEIGHT_MIN_CM, HEIGHT_SPAN_CM = 140.0, 70.0

_NON_WORD = re.compile(r"[^\w\s]")


# -----------------------------------------------------------------------------
# Jaccard over categorical dimensions
# -----------------------------------------------------------------------------


def categorical_jaccard(a: UserProfile, b: UserProfile) -> float:
    """
    Jaccard over "dim=value" tokens for dimensions set on both profiles.
    Returns 0.5 when no dimension is comparable.
    """
    shared = [d for d in CATEGORICAL_DIMENSIONS if getattr(a, d) and getattr(b, d)]
    if not shared:
        return NEUTRAL
    tokens_a = {f"{d}={str(getattr(a, d)).lower()}" for d in shared}
    tokens_b = {f"{d}={str(getattr(b, d)).lower()}" for d in shared}
    return jaccard(tokens_a, tokens_b)


# -----------------------------------------------------------------------------
# TF-IDF over free text
# -----------------------------------------------------------------------------


def tokenize(text: str) -> List[str]:
    """Lower-case, strip punctuation, keep tokens of 3+ characters."""
    return [t for t in _NON_WORD.sub(" ", text.lower()).split() if len(t) > 2]


def tfidf_similarity(text_a: str, text_b: str) -> float:
    """
    Cosine similarity of TF-IDF vectors over the two-document corpus.
    TF = count / document length; IDF = ln((1 + N) / (1 + df)) + 1.
    Empty documents give 0.0.
    """
    tokens_a, tokens_b = tokenize(text_a), tokenize(text_b)
    if not tokens_a or not tokens_b:
        return 0.0
    counts_a, counts_b = Counter(tokens_a), Counter(tokens_b)
    vocabulary = sorted(set(counts_a) | set(counts_b))
    n_docs = 2

    def _idf(term: str) -> float:
        df = (term in counts_a) + (term in counts_b)
        return math.log((1 + n_docs) / (1 + df)) + 1

    vec_a = [counts_a[t] / len(tokens_a) * _idf(t) for t in vocabulary]
    vec_b = [counts_b[t] / len(tokens_b) * _idf(t) for t in vocabulary]
    return clamp01(cosine_similarity(vec_a, vec_b))


# -----------------------------------------------------------------------------
# Numeric feature cosine
# -----------------------------------------------------------------------------


def feature_vector(profile: UserProfile, now: datetime, config: RankingConfig) -> List[float]:
    """[age, height, activity, completeness], each in [0, 1]; missing features are 0.5."""
    age = profile.age(now.date())
    age_feature = clamp01((age - AGE_MIN) / AGE_SPAN) if age is not None else NEUTRAL
    height_feature = (
        clamp01((profile.height - HEIGHT_MIN_CM) / HEIGHT_SPAN_CM)
        if profile.height
        else NEUTRAL
    )
    activity_feature = (
        exponential_decay(hours_since(profile.last_active, now), config.activity_half_life_hours)
        if profile.last_active
        else NEUTRAL
    )
    return [age_feature, height_feature, activity_feature, profile.completeness()]


# -----------------------------------------------------------------------------
# Preference alignment (matching priorities)
# -----------------------------------------------------------------------------


def _average(factors: Sequence[float]) -> float:
    return sum(factors) / len(factors) if factors else NEUTRAL


def _lower_set(values) -> set:
    return {str(v).strip().lower() for v in values if v}


def _values_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    factors = []
    mine, theirs = _lower_set(user.interests), _lower_set(candidate.interests)
    if mine and theirs:
        factors.append(len(mine & theirs) / min(len(mine), len(theirs)))
    if candidate.religion and prefs.religion_preferences:
        factors.append(1.0 if candidate.religion in prefs.religion_preferences else 0.0)
    if candidate.relationship_goal and user.relationship_goal:
        factors.append(1.0 if candidate.relationship_goal.lower() == user.relationship_goal.lower() else 0.0)
    if candidate.wants_children and user.wants_children:
        factors.append(1.0 if candidate.wants_children == user.wants_children else 0.0)
    return _average(factors)


def _personality_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    factors = []
    mine, theirs = _lower_set(user.interests), _lower_set(candidate.interests)
    if mine and theirs:
        factors.append(jaccard(mine, theirs))
    if candidate.bio and user.bio:
        factors.append(tfidf_similarity(user.bio, candidate.bio))
    return _average(factors)


def _looks_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    factors = []
    if candidate.body_type and prefs.body_type_preferences:
        factors.append(1.0 if candidate.body_type in prefs.body_type_preferences else 0.3)
    if candidate.height and prefs.min_height is not None and prefs.max_height is not None:
        factors.append(1.0 if prefs.min_height <= candidate.height <= prefs.max_height else 0.0)
    return _average(factors)


def _career_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    factors = []
    if candidate.education_level and prefs.education_preferences:
        factors.append(1.0 if candidate.education_level in prefs.education_preferences else 0.0)
    if candidate.profession and user.profession:
        same = candidate.profession.strip().lower() == user.profession.strip().lower()
        factors.append(1.0 if same else 0.6)
    return _average(factors)


def _religion_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    wanted = set(prefs.religion_preferences) or ({user.religion} if user.religion else set())
    if not candidate.religion or not wanted:
        return NEUTRAL
    if candidate.religion in wanted:
        return 1.0
    if prefs.has_deal_breaker(DealBreakerKind.DIFFERENT_RELIGION):
        return 0.1
    candidate_group = religion_group(candidate.religion)
    if candidate_group and candidate_group in {religion_group(r) for r in wanted}:
        return 0.7
    return 0.3


def _tribe_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    wanted = _lower_set(prefs.ethnicity_preferences) or _lower_set([user.ethnicity, user.secondary_tribe])
    if not wanted:
        return NEUTRAL
    values = [v.lower() for v in (candidate.ethnicity, candidate.secondary_tribe) if v]
    if not values:
        return NEUTRAL
    return sum(1 for v in values if v in wanted) / len(values)


def _intellect_score(candidate: UserProfile, user: UserProfile, prefs: UserPreferences) -> float:
    factors = []
    level = EDUCATION_HIERARCHY.get(candidate.education_level or "")
    targets = [EDUCATION_HIERARCHY[e] for e in prefs.education_preferences if e in EDUCATION_HIERARCHY]
    if not targets and user.education_level in EDUCATION_HIERARCHY:
        targets = [EDUCATION_HIERARCHY[user.education_level]]
    if level and targets:
        gap = min(abs(level - t) for t in targets)
        factors.append(1.0 - gap / (len(EDUCATION_HIERARCHY) - 1))
    if candidate.college_university:
        factors.append(0.7)
    return _average(factors)


PRIORITY_SCORERS: Dict[MatchingPriority, Callable[[UserProfile, UserProfile, UserPreferences], float]] = {
    MatchingPriority.VALUES: _values_score,
    MatchingPriority.PERSONALITY: _personality_score,
    MatchingPriority.LOOKS: _looks_score,
    MatchingPriority.CAREER: _career_score,
    MatchingPriority.RELIGION: _religion_score,
    MatchingPriority.TRIBE: _tribe_score,
    MatchingPriority.INTELLECT: _intellect_score,
}


def preference_alignment(
    candidate: UserProfile,
    user: UserProfile,
    prefs: UserPreferences,
    config: Optional[RankingConfig] = None,
) -> float:
    """
    Weighted priority sub-scores (0.40 / 0.30 / 0.20 by rank), normalized by the
    weights actually used. Empty priority list gives 0.5.
    """
    config = resolve_config(config)
    priorities = list(prefs.matching_priorities)
    if not priorities:
        return NEUTRAL
    weights = config.priority_weights
    if len(priorities) > len(weights):
        logger.debug(
            "[content] user_id=%s has %d matching priorities; using first %d",
            user.id, len(priorities), len(weights),
        )
        priorities = priorities[: len(weights)]
    weighted = 0.0
    used = 0.0
    for weight, priority in zip(weights, priorities):
        scorer = PRIORITY_SCORERS.get(priority)
        sub = clamp01(scorer(candidate, user, prefs)) if scorer else NEUTRAL
        weighted += weight * sub
        used += weight
    return clamp01(weighted / used) if used > 0 else NEUTRAL


def score_content(
    user: UserProfile,
    candidate: UserProfile,
    prefs: UserPreferences,
    now: datetime,
    config: Optional[RankingConfig] = None,
) -> ContentBreakdown:
    """Content-based compatibility of candidate for user."""
    config = resolve_config(config)
    jaccard_score = clamp01(categorical_jaccard(user, candidate))
    tfidf_score = tfidf_similarity(user.text_document(), candidate.text_document())
    cosine_score = clamp01(
        cosine_similarity(feature_vector(user, now, config), feature_vector(candidate, now, config))
    )
    preference_score = preference_alignment(candidate, user, prefs, config)
    combined = (
        config.content_weight_jaccard * jaccard_score
        + config.content_weight_tfidf * tfidf_score
        + config.content_weight_cosine * cosine_score
        + config.content_weight_preference * preference_score
    )
    return ContentBreakdown(
        jaccard=jaccard_score,
        tfidf=tfidf_score,
        cosine=cosine_score,
        preference=preference_score,
        combined=clamp01(combined),
    )
