"""
Hybrid Ranking Aggregator

Blends the three scorers into one final score per candidate and sorts:
final = 0.40 * content + 0.35 * collaborative + 0.25 * context.
Sort is by final score descending, then candidate id ascending.
"""

import logging
from typing import Callable, List

from ..models.config import RankingConfig
from ..models.profile import UserProfile
from ..models.scoring import CandidateScore, CollaborativeBreakdown, ContentBreakdown, ContextBreakdown
from ..utils.scores import clamp01

logger = logging.getLogger(__name__)


def get_reasons(
    content: ContentBreakdown,
    collaborative: CollaborativeBreakdown,
    context: ContextBreakdown,
) -> List[str]:
    """Human-readable reasons for a candidate (max 3)."""
    reasons = []
    if content.combined >= 0.6:
        reasons.append("Strong profile compatibility")
    if content.preference >= 0.7:
        reasons.append("Matches your top priorities")
    if content.tfidf >= 0.3:
        reasons.append("Similar interests and background")
    if not collaborative.cold_start and collaborative.blended >= 0.6:
        reasons.append("Liked by similar users")
    if context.online_boost > 0:
        reasons.append("Online now")
    elif context.activity >= 0.7:
        reasons.append("Recently active")
    return reasons[:3]


def build_candidate_score(
    candidate_id: int,
    content: ContentBreakdown,
    collaborative: CollaborativeBreakdown,
    context: ContextBreakdown,
    config: RankingConfig,
) -> CandidateScore:
    """Weighted blend of the clamped sub-scores."""
    final = (
        config.weight_content * clamp01(content.combined)
        + config.weight_collaborative * clamp01(collaborative.blended)
        + config.weight_context * clamp01(context.combined)
    )
    return CandidateScore(
        candidate_id=candidate_id,
        content=content,
        collaborative=collaborative,
        context=context,
        final_score=clamp01(final),
        reasons=get_reasons(content, collaborative, context),
    )


def sort_candidates(scored: List[CandidateScore]) -> List[CandidateScore]:
    """Final score descending; ties broken by candidate id ascending."""
    return sorted(scored, key=lambda s: (-s.final_score, s.candidate_id))


def score_candidates(
    candidates: List[UserProfile],
    score_one: Callable[[UserProfile], CandidateScore],
) -> List[CandidateScore]:
    """
    Score every candidate and return them sorted. A candidate whose scoring raises
    is logged and left out; the rest of the batch continues.
    """
    scored: List[CandidateScore] = []
    for candidate in candidates:
        try:
            scored.append(score_one(candidate))
        except Exception:
            logger.exception("[aggregation] SCORING_FAILED candidate_id=%s; skipping", candidate.id)
    return sort_candidates(scored)
