"""Discovery-related Pydantic models."""

from typing import Dict, List

from pydantic import BaseModel

from .common import CandidateCard


class FilterStats(BaseModel):
    total: int
    passed: int
    excluded: Dict[str, int] = {}


class DiversityInfo(BaseModel):
    applied: bool
    reason: str = ""
    injected_ids: List[int] = []


class DiscoveryResponse(BaseModel):
    user_id: int
    mode: str
    candidates: List[CandidateCard]
    returned_count: int
    pool_size: int
    filter_stats: FilterStats
    diversity: DiversityInfo
