"""Pure helpers: candidate card formatting and page-size constants."""

from discovery.models.interaction import Match
from discovery.models.scoring import CandidateScore

from .models import (
    CandidateCard,
    CollaborativeDetail,
    ContentDetail,
    ContextDetail,
    MatchInfo,
    ScoreBreakdown,
)

# Discovery page size (used by routes/discovery)
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def to_candidate_card(scored: CandidateScore, queue_position: int) -> CandidateCard:
    """Build an API candidate card from a scored candidate."""
    return CandidateCard(
        candidate_id=scored.candidate_id,
        final_score=round(scored.final_score, 4),
        breakdown=ScoreBreakdown(
            content=scored.content.combined,
            collaborative=scored.collaborative.blended,
            context=scored.context.combined,
            content_detail=ContentDetail(
                jaccard=scored.content.jaccard,
                tfidf=scored.content.tfidf,
                cosine=scored.content.cosine,
                preference=scored.content.preference,
            ),
            collaborative_detail=CollaborativeDetail(
                matrix=scored.collaborative.matrix,
                traditional=scored.collaborative.traditional,
                cold_start=scored.collaborative.cold_start,
            ),
            context_detail=ContextDetail(
                activity=scored.context.activity,
                online_boost=scored.context.online_boost,
                completeness=scored.context.completeness,
            ),
        ),
        reasons=scored.reasons,
        diversity_injected=scored.diversity_injected,
        queue_position=queue_position,
    )


def to_match_info(match: Match) -> MatchInfo:
    return MatchInfo(
        user_a=match.user_a,
        user_b=match.user_b,
        mode=match.mode.value,
        created_at=match.created_at,
    )
