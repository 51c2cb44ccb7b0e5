"""
Similarity utilities: cosine and Jaccard similarity for content scoring.
"""

from typing import Iterable, List

import numpy as np


def cosine_similarity(v1: List[float], v2: List[float]) -> float:
    """Compute cosine similarity between two vectors."""
    if not v1 or not v2:
        return 0.0
    v1 = np.array(v1, dtype=float)
    v2 = np.array(v2, dtype=float)
    dot_product = np.dot(v1, v2)
    norm_product = np.linalg.norm(v1) * np.linalg.norm(v2)
    return float(dot_product / norm_product) if norm_product > 0 else 0.0


def jaccard(a: Iterable, b: Iterable) -> float:
    """|A ∩ B| / |A ∪ B|; 0.0 when both are empty."""
    set_a, set_b = set(a), set(b)
    union = set_a | set_b
    if not union:
        return 0.0
    return len(set_a & set_b) / len(union)
