"""
Scoring model: per-candidate score breakdowns produced by the ranking pass.

Contains:
- ContentBreakdown, CollaborativeBreakdown, ContextBreakdown: sub-scores in [0, 1]
- CandidateScore: a candidate with its weighted final score and reasons
"""

from typing import Dict, List

from pydantic import BaseModel


class ContentBreakdown(BaseModel):
    jaccard: float
    tfidf: float
    cosine: float
    preference: float
    combined: float


class CollaborativeBreakdown(BaseModel):
    matrix: float
    traditional: float
    blended: float
    cold_start: bool = False


class ContextBreakdown(BaseModel):
    activity: float
    online_boost: float
    completeness: float
    combined: float


class CandidateScore(BaseModel):
    """A candidate with all its scoring components."""

    candidate_id: int
    content: ContentBreakdown
    collaborative: CollaborativeBreakdown
    context: ContextBreakdown
    final_score: float
    reasons: List[str] = []
    diversity_injected: bool = False

    def breakdown(self) -> Dict[str, float]:
        """Flat view of the three combined sub-scores."""
        return {
            "content": self.content.combined,
            "collaborative": self.collaborative.blended,
            "context": self.context.combined,
        }
