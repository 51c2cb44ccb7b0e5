"""Pipeline stages: hard filters, scorers, aggregation, diversity, orchestration."""

from .aggregation import build_candidate_score, get_reasons, score_candidates, sort_candidates
from .collaborative import CollaborativeScorer
from .content import preference_alignment, score_content, tfidf_similarity
from .context import score_context
from .diversity import DiversityReport, apply_diversity_injection
from .hard_filters import ExclusionContext, HardFilterReport, apply_hard_filters
from .orchestrator import DiscoveryResult, build_exclusion_context, rank_discovery_pool

__all__ = [
    "CollaborativeScorer",
    "DiscoveryResult",
    "DiversityReport",
    "ExclusionContext",
    "HardFilterReport",
    "apply_diversity_injection",
    "apply_hard_filters",
    "build_candidate_score",
    "build_exclusion_context",
    "get_reasons",
    "preference_alignment",
    "rank_discovery_pool",
    "score_candidates",
    "score_content",
    "score_context",
    "sort_candidates",
    "tfidf_similarity",
]
