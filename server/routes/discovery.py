"""Discovery endpoint: ranked candidate list for a user."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query

from discovery.errors import UnknownUserError
from discovery.models.interaction import AppMode

from ..models import DiscoveryResponse, DiversityInfo, FilterStats
from ..state import get_state
from ..utils import MAX_PAGE_SIZE, to_candidate_card

router = APIRouter()


@router.get("/{user_id}", response_model=DiscoveryResponse)
def get_discovery_pool(
    user_id: int,
    mode: AppMode = Query(AppMode.MEET),
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE),
):
    """Ranked discovery candidates for user_id in the given mode."""
    state = get_state()
    try:
        result = state.discovery.get_ranked_discovery_pool(user_id, mode=mode, limit=limit)
    except UnknownUserError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return DiscoveryResponse(
        user_id=user_id,
        mode=mode.value,
        candidates=[to_candidate_card(scored, i) for i, scored in enumerate(result.ranked)],
        returned_count=len(result.ranked),
        pool_size=result.pool_size,
        filter_stats=FilterStats(
            total=result.filter_report.total,
            passed=result.filter_report.passed,
            excluded=dict(result.filter_report.excluded),
        ),
        diversity=DiversityInfo(
            applied=result.diversity.applied,
            reason=result.diversity.reason,
            injected_ids=list(result.diversity.injected_ids),
        ),
    )
