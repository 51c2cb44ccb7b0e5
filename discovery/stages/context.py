"""
Context-Aware Scorer: freshness signal for a candidate.

activity     max(floor, 0.5 ** (hours_since_active / 24))
online       0 offline, 0.7 online, 1.0 online and chat-eligible
completeness filled essential fields / 5

combined = 0.4 * activity + 0.3 * online + 0.3 * completeness
"""

from datetime import datetime
from typing import Optional

from ..models.config import RankingConfig, resolve_config
from ..models.profile import UserProfile
from ..models.scoring import ContextBreakdown
from ..utils.scores import clamp01, exponential_decay, hours_since


def activity_score(candidate: UserProfile, now: datetime, config: RankingConfig) -> float:
    """Exponential decay since last activity; never-active candidates get the floor."""
    if candidate.last_active is None:
        return config.activity_floor
    decay = exponential_decay(hours_since(candidate.last_active, now), config.activity_half_life_hours)
    return clamp01(max(config.activity_floor, decay))


def online_boost(candidate: UserProfile, chat_eligible: bool, config: RankingConfig) -> float:
    if not candidate.is_online:
        return 0.0
    return config.online_chat_boost if chat_eligible else config.online_boost


def score_context(
    candidate: UserProfile,
    now: datetime,
    chat_eligible: bool = False,
    has_preferences: bool = False,
    config: Optional[RankingConfig] = None,
) -> ContextBreakdown:
    """
    Freshness of a candidate. chat_eligible means the candidate already sent the
    user a positive swipe in this mode.
    """
    config = resolve_config(config)
    activity = activity_score(candidate, now, config)
    online = clamp01(online_boost(candidate, chat_eligible, config))
    completeness = candidate.completeness(has_preferences=has_preferences)
    combined = (
        config.context_weight_activity * activity
        + config.context_weight_online * online
        + config.context_weight_completeness * completeness
    )
    return ContextBreakdown(
        activity=activity,
        online_boost=online,
        completeness=completeness,
        combined=clamp01(combined),
    )
