"""
Shared fixtures for the discovery ranking tests.

All tests rank against a fixed clock (NOW) so ages, activity decay, and
swipe timestamps are reproducible.
"""

import math
from datetime import date, datetime, timezone
from pathlib import Path

import pytest

from discovery.models import (
    CandidateScore,
    CollaborativeBreakdown,
    ContentBreakdown,
    ContextBreakdown,
    Coordinates,
    UserPreferences,
    UserProfile,
)

NOW = datetime(2026, 10, 16, 12, 0, tzinfo=timezone.utc)
DATA_DIR = Path(__file__).parent.parent / "data"

# Kilometers per degree of longitude on the equator (haversine, R = 6371 km).
KM_PER_DEGREE = 6371.0 * math.pi / 180


def born_years_ago(years: int) -> date:
    """Birth date giving exactly `years` of age on NOW."""
    return date(NOW.year - years, 1, 1)


def point_at_km(km: float) -> Coordinates:
    """A point `km` east of (0, 0) along the equator."""
    return Coordinates(lat=0.0, lng=km / KM_PER_DEGREE)


ORIGIN = Coordinates(lat=0.0, lng=0.0)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def make_profile():
    """Factory for UserProfile with sensible defaults; keyword overrides win."""

    def _make(id: int, **overrides) -> UserProfile:
        fields = {
            "id": id,
            "gender": "female",
            "date_of_birth": born_years_ago(28),
            "coordinates": ORIGIN,
            "last_active": NOW,
        }
        fields.update(overrides)
        return UserProfile(**fields)

    return _make


@pytest.fixture
def make_score():
    """Factory for CandidateScore with a given final score and neutral sub-scores."""

    def _make(candidate_id: int, final: float) -> CandidateScore:
        return CandidateScore(
            candidate_id=candidate_id,
            content=ContentBreakdown(jaccard=0.5, tfidf=0.0, cosine=0.5, preference=0.5, combined=final),
            collaborative=CollaborativeBreakdown(matrix=0.5, traditional=0.5, blended=0.5, cold_start=True),
            context=ContextBreakdown(activity=0.5, online_boost=0.0, completeness=0.5, combined=0.5),
            final_score=final,
        )

    return _make


@pytest.fixture
def permissive_prefs() -> UserPreferences:
    return UserPreferences(user_id=1)
