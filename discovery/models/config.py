"""
Ranking configuration: hard filters, scorer weights, hybrid blend, and diversity.

RankingConfig defaults are defined here. The server may pass a dict
(e.g. from ranking_config.json if present); from_dict() merges it with these defaults.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, model_validator


def _check_sum(name: str, *weights: float) -> None:
    total = sum(weights)
    if abs(total - 1.0) > 0.01:
        raise ValueError(f"{name} weights must sum to 1.0, got {total}")


class RankingConfig(BaseModel):
    """Configuration for the discovery ranking pipeline."""

    # -------------------------------------------------------------------------
    # Hard Filters
    # -------------------------------------------------------------------------

    # Also check the candidate's deal-breakers against the requesting user.
    reciprocal_deal_breakers: bool = False

    # long_distance deal-breaker tightening (miles).
    # unlimited -> long_distance_unlimited_miles, country-level -> long_distance_country_miles,
    # otherwise min(preference * long_distance_factor, long_distance_cap_miles).
    long_distance_unlimited_miles: float = 25.0
    long_distance_country_miles: float = 100.0
    long_distance_factor: float = 0.6
    long_distance_cap_miles: float = 50.0

    # -------------------------------------------------------------------------
    # Content-Based Scorer (must sum to 1.0)
    # combined = jaccard * w_j + tfidf * w_t + cosine * w_c + preference * w_p
    # -------------------------------------------------------------------------

    content_weight_jaccard: float = 0.25
    content_weight_tfidf: float = 0.20
    content_weight_cosine: float = 0.30
    content_weight_preference: float = 0.25

    # Weights for matching priorities by rank (1st, 2nd, 3rd). Extra priorities are dropped.
    priority_weights: List[float] = [0.40, 0.30, 0.20]

    # -------------------------------------------------------------------------
    # Collaborative Filtering Scorer (must sum to 1.0)
    # blended = matrix * w_m + traditional * w_t
    # -------------------------------------------------------------------------

    collaborative_weight_matrix: float = 0.3
    collaborative_weight_traditional: float = 0.7

    # Max boost added to the matrix score from co-likers who also liked the candidate.
    similar_user_boost_max: float = 0.2

    # -------------------------------------------------------------------------
    # Context-Aware Scorer (must sum to 1.0)
    # combined = activity * w_a + online * w_o + completeness * w_c
    # -------------------------------------------------------------------------

    context_weight_activity: float = 0.4
    context_weight_online: float = 0.3
    context_weight_completeness: float = 0.3

    # activity = max(floor, 0.5 ** (hours_since_active / half_life))
    activity_half_life_hours: float = 24.0
    activity_floor: float = 0.1

    # Online boost; chat boost applies when the candidate already liked the user.
    online_boost: float = 0.7
    online_chat_boost: float = 1.0

    # -------------------------------------------------------------------------
    # Hybrid Aggregation (must sum to 1.0)
    # final = content * w_c + collaborative * w_cf + context * w_ctx
    # -------------------------------------------------------------------------

    weight_content: float = 0.40
    weight_collaborative: float = 0.35
    weight_context: float = 0.25

    # -------------------------------------------------------------------------
    # Diversity Injection
    # -------------------------------------------------------------------------

    # Injection only runs when the filtered pool has at least this many candidates.
    diversity_threshold: int = 5
    # Fraction of the top N slots swapped for under-represented candidates.
    diversity_ratio: float = 0.15

    # Default number of candidates returned per discovery request.
    default_limit: int = 20

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        _check_sum(
            "Content",
            self.content_weight_jaccard,
            self.content_weight_tfidf,
            self.content_weight_cosine,
            self.content_weight_preference,
        )
        _check_sum(
            "Collaborative",
            self.collaborative_weight_matrix,
            self.collaborative_weight_traditional,
        )
        _check_sum(
            "Context",
            self.context_weight_activity,
            self.context_weight_online,
            self.context_weight_completeness,
        )
        _check_sum(
            "Hybrid",
            self.weight_content,
            self.weight_collaborative,
            self.weight_context,
        )
        if not self.priority_weights:
            raise ValueError("priority_weights cannot be empty")
        return self

    @property
    def hybrid_weights(self) -> Dict[str, float]:
        return {
            "content": self.weight_content,
            "collaborative": self.weight_collaborative,
            "context": self.weight_context,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "RankingConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "hard_filters" in config_dict:
            hf = config_dict["hard_filters"]
            if "reciprocal_deal_breakers" in hf:
                flat["reciprocal_deal_breakers"] = hf["reciprocal_deal_breakers"]
            ld = hf.get("long_distance", {})
            for key in ("unlimited_miles", "country_miles", "factor", "cap_miles"):
                if key in ld:
                    flat[f"long_distance_{key}"] = ld[key]
        if "content" in config_dict:
            c = config_dict["content"]
            for key in ("jaccard", "tfidf", "cosine", "preference"):
                if key in c:
                    flat[f"content_weight_{key}"] = c[key]
            if "priority_weights" in c:
                flat["priority_weights"] = c["priority_weights"]
        if "collaborative" in config_dict:
            cf = config_dict["collaborative"]
            for key in ("matrix", "traditional"):
                if key in cf:
                    flat[f"collaborative_weight_{key}"] = cf[key]
            if "similar_user_boost_max" in cf:
                flat["similar_user_boost_max"] = cf["similar_user_boost_max"]
        if "context" in config_dict:
            ctx = config_dict["context"]
            for key in ("activity", "online", "completeness"):
                if key in ctx:
                    flat[f"context_weight_{key}"] = ctx[key]
            for key in ("activity_half_life_hours", "activity_floor", "online_boost", "online_chat_boost"):
                if key in ctx:
                    flat[key] = ctx[key]
        if "hybrid" in config_dict:
            h = config_dict["hybrid"]
            for key in ("content", "collaborative", "context"):
                if key in h:
                    flat[f"weight_{key}"] = h[key]
        if "diversity" in config_dict:
            d = config_dict["diversity"]
            flat["diversity_threshold"] = d.get("threshold", 5)
            flat["diversity_ratio"] = d.get("ratio", 0.15)
        if "default_limit" in config_dict:
            flat["default_limit"] = config_dict["default_limit"]
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = RankingConfig()


def resolve_config(config: Optional["RankingConfig"]) -> "RankingConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
