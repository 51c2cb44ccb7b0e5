"""
Pipeline orchestrator: hard filters, then scoring and aggregation, then diversity
injection, producing the final ranked discovery list.

The main entry point is rank_discovery_pool. `now` is passed explicitly so that a
ranking pass is a pure function of its inputs.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel

from ..geo.geocoder import Geocoder
from ..models.config import RankingConfig, resolve_config
from ..models.interaction import AppMode, InteractionRecord, Match
from ..models.preferences import UserPreferences
from ..models.profile import UserProfile
from ..models.scoring import CandidateScore
from .aggregation import build_candidate_score, score_candidates
from .collaborative import CollaborativeScorer
from .content import score_content
from .context import score_context
from .diversity import DiversityReport, apply_diversity_injection
from .hard_filters import ExclusionContext, HardFilterReport, apply_hard_filters

logger = logging.getLogger(__name__)


class DiscoveryResult(BaseModel):
    """Ranked list plus the reports needed to explain it."""

    ranked: List[CandidateScore]
    pool_size: int
    filter_report: HardFilterReport
    diversity: DiversityReport


def _with_coordinates(profile: UserProfile, geocoder: Optional[Geocoder]) -> UserProfile:
    """Fill in coordinates from the location text when the profile has none."""
    if profile.coordinates is not None or geocoder is None or not profile.location:
        return profile
    resolved = geocoder.resolve_coordinates(profile.location)
    if resolved is None:
        return profile
    return profile.model_copy(update={"coordinates": resolved.coordinates})


def build_exclusion_context(
    user_id: int,
    mode: AppMode,
    interactions: Iterable[InteractionRecord],
    matches: Iterable[Match],
    blocked_ids: Optional[Set[int]] = None,
) -> ExclusionContext:
    """Matched (any mode), already swiped (this mode), and blocked ids for the user."""
    return ExclusionContext(
        matched_ids={m.other(user_id) for m in matches if m.involves(user_id)},
        swiped_ids={r.target_id for r in interactions if r.user_id == user_id and r.mode == mode},
        blocked_ids=set(blocked_ids or ()),
    )


def _chat_eligible_ids(user_id: int, mode: AppMode, interactions: Iterable[InteractionRecord]) -> Set[int]:
    """Users who already sent user_id a positive swipe in this mode."""
    return {
        r.user_id
        for r in interactions
        if r.target_id == user_id and r.mode == mode and r.action.is_positive
    }


def rank_discovery_pool(
    user: UserProfile,
    preferences: UserPreferences,
    candidates: List[UserProfile],
    interactions: List[InteractionRecord],
    matches: List[Match],
    mode: AppMode,
    now: datetime,
    limit: Optional[int] = None,
    config: Optional[RankingConfig] = None,
    geocoder: Optional[Geocoder] = None,
    blocked_ids: Optional[Set[int]] = None,
    preferences_by_id: Optional[Dict[int, UserPreferences]] = None,
    profiles_by_id: Optional[Dict[int, UserProfile]] = None,
) -> DiscoveryResult:
    """
    Rank candidates for user's discovery stack.

    preferences_by_id: stored preferences of other users (collaborative cohort and
        reciprocal deal-breakers). profiles_by_id: profiles of swipe targets outside the
        candidate list (collaborative similarity). Both default to what is passed in.

    Returns:
        DiscoveryResult with at most `limit` ranked candidates.
    """
    # Resolve config (use defaults when None)
    config = resolve_config(config)
    limit = limit if limit is not None else config.default_limit

    # Coordinates for the distance gate
    user = _with_coordinates(user, geocoder)
    candidates = [_with_coordinates(c, geocoder) for c in candidates]

    preferences_by_id = dict(preferences_by_id or {})
    preferences_by_id.setdefault(user.id, preferences)
    profiles_by_id = dict(profiles_by_id or {})
    profiles_by_id.update({c.id: c for c in candidates})
    profiles_by_id[user.id] = user

    # Stage 1: hard filters
    context = build_exclusion_context(user.id, mode, interactions, matches, blocked_ids)
    eligible, filter_report = apply_hard_filters(
        user,
        preferences,
        candidates,
        context,
        now,
        config=config,
        candidate_preferences=preferences_by_id,
    )
    if not eligible:
        logger.info("[orchestrator] user_id=%s mode=%s: no eligible candidates", user.id, mode.value)
        return DiscoveryResult(
            ranked=[],
            pool_size=0,
            filter_report=filter_report,
            diversity=DiversityReport(reason="empty pool"),
        )

    # Stage 2: independent scorers, then hybrid aggregation
    collaborative = CollaborativeScorer(
        interactions, matches, profiles_by_id, preferences_by_id, now, config
    )
    chat_eligible = _chat_eligible_ids(user.id, mode, interactions)

    def _score_one(candidate: UserProfile) -> CandidateScore:
        return build_candidate_score(
            candidate.id,
            score_content(user, candidate, preferences, now, config),
            collaborative.score(user.id, candidate),
            score_context(
                candidate,
                now,
                chat_eligible=candidate.id in chat_eligible,
                has_preferences=candidate.id in preferences_by_id,
                config=config,
            ),
            config,
        )

    ranked = score_candidates(eligible, _score_one)

    # Stage 3: diversity injection over the full ranked pool, then cut to limit
    ranked, diversity = apply_diversity_injection(ranked, profiles_by_id, limit, now.date(), config)

    return DiscoveryResult(
        ranked=ranked[:limit],
        pool_size=len(eligible),
        filter_report=filter_report,
        diversity=diversity,
    )
