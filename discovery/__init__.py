"""
Discovery ranking pipeline

Single entry point for the discovery package:
- models/: RankingConfig, UserProfile, UserPreferences, InteractionRecord, CandidateScore
- geo/: Geocoder, CoordinateCache, haversine distance
- stages/: hard filters, content / collaborative / context scorers, aggregation, diversity
- history: SwipeHistory (record, undo) over an InteractionStore
"""

from .errors import DiscoveryError, EmptyHistory, GeocodeUnavailable, InvalidSwipe, UnknownUserError
from .geo import CoordinateCache, Geocoder, distance_km, to_km
from .history import InteractionStore, SwipeHistory, SwipeResult, UndoResult
from .models import (
    DEFAULT_CONFIG,
    AppMode,
    CandidateScore,
    InteractionRecord,
    Match,
    RankingConfig,
    SwipeAction,
    UserPreferences,
    UserProfile,
    resolve_config,
)
from .stages import DiscoveryResult, apply_hard_filters, rank_discovery_pool

__all__ = [
    "AppMode",
    "CandidateScore",
    "CoordinateCache",
    "DEFAULT_CONFIG",
    "DiscoveryError",
    "DiscoveryResult",
    "EmptyHistory",
    "GeocodeUnavailable",
    "Geocoder",
    "InteractionRecord",
    "InteractionStore",
    "InvalidSwipe",
    "Match",
    "RankingConfig",
    "SwipeAction",
    "SwipeHistory",
    "SwipeResult",
    "UndoResult",
    "UnknownUserError",
    "UserPreferences",
    "UserProfile",
    "apply_hard_filters",
    "distance_km",
    "rank_discovery_pool",
    "resolve_config",
    "to_km",
]
