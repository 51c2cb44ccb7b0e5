"""Shared helpers for the discovery pipeline."""

from .scores import age_bracket, age_on, clamp01, ensure_utc, exponential_decay, hours_since
from .similarity import cosine_similarity, jaccard

__all__ = [
    "age_bracket",
    "age_on",
    "clamp01",
    "cosine_similarity",
    "ensure_utc",
    "exponential_decay",
    "hours_since",
    "jaccard",
]
