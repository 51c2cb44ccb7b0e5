"""Common Pydantic models shared across routes."""

from typing import List, Optional

from pydantic import BaseModel


class ContentDetail(BaseModel):
    jaccard: float
    tfidf: float
    cosine: float
    preference: float


class CollaborativeDetail(BaseModel):
    matrix: float
    traditional: float
    cold_start: bool = False


class ContextDetail(BaseModel):
    activity: float
    online_boost: float
    completeness: float


class ScoreBreakdown(BaseModel):
    content: float
    collaborative: float
    context: float
    content_detail: Optional[ContentDetail] = None
    collaborative_detail: Optional[CollaborativeDetail] = None
    context_detail: Optional[ContextDetail] = None


class CandidateCard(BaseModel):
    candidate_id: int
    final_score: float
    breakdown: ScoreBreakdown
    reasons: List[str] = []
    diversity_injected: bool = False
    queue_position: Optional[int] = None
