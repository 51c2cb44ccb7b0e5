"""Data models for the discovery ranking pipeline."""

from .config import DEFAULT_CONFIG, RankingConfig, resolve_config
from .interaction import AppMode, InteractionRecord, Match, SwipeAction, ensure_interactions
from .preferences import (
    ANYWHERE,
    COUNTRY_LEVEL_DISTANCE,
    UNLIMITED_DISTANCE,
    ChildrenPreference,
    DealBreaker,
    DealBreakerKind,
    DistancePreference,
    DistanceUnit,
    MatchingPriority,
    SubstanceLevel,
    UserPreferences,
)
from .profile import Coordinates, UserProfile, ensure_profiles
from .scoring import CandidateScore, CollaborativeBreakdown, ContentBreakdown, ContextBreakdown

__all__ = [
    "ANYWHERE",
    "AppMode",
    "COUNTRY_LEVEL_DISTANCE",
    "CandidateScore",
    "ChildrenPreference",
    "CollaborativeBreakdown",
    "ContentBreakdown",
    "ContextBreakdown",
    "Coordinates",
    "DEFAULT_CONFIG",
    "DealBreaker",
    "DealBreakerKind",
    "DistancePreference",
    "DistanceUnit",
    "InteractionRecord",
    "Match",
    "MatchingPriority",
    "RankingConfig",
    "SubstanceLevel",
    "SwipeAction",
    "UNLIMITED_DISTANCE",
    "UserPreferences",
    "UserProfile",
    "ensure_interactions",
    "ensure_profiles",
    "resolve_config",
]
