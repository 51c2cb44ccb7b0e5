"""
Diversity injection: post-ranking swap of the lowest top-N slots for
under-represented candidates.

Only runs when the filtered pool has at least diversity_threshold candidates.
Of the top N (N = requested limit, capped by the pool), floor(diversity_ratio * N)
tail slots are handed to candidates from outside the top N whose gender, ethnicity,
religion, or age bracket is not yet represented in it. Injected candidates keep their
relative score order; displaced candidates follow immediately after the top N.
"""

import logging
import math
from datetime import date
from typing import Dict, List, Optional, Set, Tuple

from pydantic import BaseModel

from ..models.config import RankingConfig, resolve_config
from ..models.profile import UserProfile
from ..models.scoring import CandidateScore
from ..utils.scores import age_bracket

logger = logging.getLogger(__name__)

DIVERSITY_DIMENSIONS = ("gender", "ethnicity", "religion", "age_bracket")


class DiversityReport(BaseModel):
    applied: bool = False
    reason: str = ""
    injected_ids: List[int] = []


def _attributes(profile: Optional[UserProfile], today: date) -> Dict[str, Optional[str]]:
    if profile is None:
        return {dim: None for dim in DIVERSITY_DIMENSIONS}
    return {
        "gender": profile.gender,
        "ethnicity": profile.ethnicity,
        "religion": profile.religion,
        "age_bracket": age_bracket(profile.age(today)),
    }


def _novel_values(attrs: Dict[str, Optional[str]], represented: Dict[str, Set[str]]) -> int:
    return sum(1 for dim, value in attrs.items() if value and value not in represented[dim])


def apply_diversity_injection(
    ranked: List[CandidateScore],
    profiles_by_id: Dict[int, UserProfile],
    limit: int,
    today: date,
    config: Optional[RankingConfig] = None,
) -> Tuple[List[CandidateScore], DiversityReport]:
    """
    Return (reordered list, report). Below threshold, or with nothing to inject,
    the input list is returned unchanged.
    """
    config = resolve_config(config)
    pool_size = len(ranked)
    if pool_size < config.diversity_threshold:
        logger.info(
            "[diversity] skipped: pool_size=%d < threshold=%d", pool_size, config.diversity_threshold
        )
        return ranked, DiversityReport(reason=f"pool_size {pool_size} below threshold {config.diversity_threshold}")

    n = min(limit, pool_size)
    slots = math.floor(config.diversity_ratio * n)
    if slots == 0 or n >= pool_size:
        logger.info("[diversity] skipped: slots=%d top_n=%d pool_size=%d", slots, n, pool_size)
        return ranked, DiversityReport(reason="no slots or no candidates outside top N")

    top, rest = ranked[:n], ranked[n:]
    represented: Dict[str, Set[str]] = {dim: set() for dim in DIVERSITY_DIMENSIONS}
    for scored in top:
        for dim, value in _attributes(profiles_by_id.get(scored.candidate_id), today).items():
            if value:
                represented[dim].add(value)

    injected: List[CandidateScore] = []
    for scored in rest:
        if len(injected) >= slots:
            break
        attrs = _attributes(profiles_by_id.get(scored.candidate_id), today)
        if _novel_values(attrs, represented) == 0:
            continue
        injected.append(scored)
        for dim, value in attrs.items():
            if value:
                represented[dim].add(value)

    if not injected:
        logger.info("[diversity] skipped: no under-represented candidates outside top %d", n)
        return ranked, DiversityReport(reason="no under-represented candidates")

    injected_ids = {s.candidate_id for s in injected}
    kept = top[: n - len(injected)]
    displaced = top[n - len(injected):]
    result = (
        kept
        + [s.model_copy(update={"diversity_injected": True}) for s in injected]
        + displaced
        + [s for s in rest if s.candidate_id not in injected_ids]
    )
    logger.info("[diversity] injected %d candidates into top %d: %s", len(injected), n, sorted(injected_ids))
    return result, DiversityReport(applied=True, reason="injected", injected_ids=[s.candidate_id for s in injected])
