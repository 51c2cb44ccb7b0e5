#!/usr/bin/env python3
"""
Collaborative Scorer Tests

blended = 0.3 * matrix + 0.7 * traditional

- matrix: signed pair ratings (like +1, star +2, dislike -1, match +2) mapped to
  [0, 1], plus a boost from co-likers who also liked the candidate
- traditional: approval rate of users with overlapping matching priorities on
  profiles like the candidate (same gender and age bracket)

Run:
----
    pytest tests/test_collaborative.py -v
"""

from datetime import timedelta

import pytest
from conftest import NOW, born_years_ago

from discovery.models import (
    AppMode,
    InteractionRecord,
    Match,
    MatchingPriority,
    SwipeAction,
    UserPreferences,
)
from discovery.stages.collaborative import CollaborativeScorer

USER_ID = 1
CANDIDATE_ID = 2


def _swipe(user_id, target_id, action, minutes_ago=60):
    return InteractionRecord(
        user_id=user_id,
        target_id=target_id,
        action=SwipeAction(action),
        mode=AppMode.MEET,
        timestamp=NOW - timedelta(minutes=minutes_ago),
    )


def _prefs(user_id, *priorities):
    return UserPreferences(user_id=user_id, matching_priorities=tuple(MatchingPriority(p) for p in priorities))


class TestColdStart:
    def test_no_history_is_exactly_neutral(self, make_profile):
        candidate = make_profile(CANDIDATE_ID)
        scorer = CollaborativeScorer([], [], {CANDIDATE_ID: candidate}, {}, NOW)
        result = scorer.score(USER_ID, candidate)
        assert result.blended == 0.5
        assert result.cold_start is True


class TestMatrixScore:
    def _score(self, make_profile, interactions, matches=()):
        candidate = make_profile(CANDIDATE_ID)
        scorer = CollaborativeScorer(interactions, list(matches), {CANDIDATE_ID: candidate}, {}, NOW)
        return scorer.score(USER_ID, candidate)

    def test_like_maps_to_three_quarters(self, make_profile):
        result = self._score(make_profile, [_swipe(USER_ID, CANDIDATE_ID, "like")])
        assert result.matrix == pytest.approx(0.75)
        assert result.traditional == 0.5
        assert result.blended == pytest.approx(0.3 * 0.75 + 0.7 * 0.5)
        assert result.cold_start is False

    def test_dislike_maps_to_one_quarter(self, make_profile):
        result = self._score(make_profile, [_swipe(USER_ID, CANDIDATE_ID, "dislike")])
        assert result.matrix == pytest.approx(0.25)

    def test_match_adds_rating(self, make_profile):
        match = Match(user_a=USER_ID, user_b=CANDIDATE_ID, created_at=NOW)
        result = self._score(make_profile, [_swipe(USER_ID, CANDIDATE_ID, "like")], [match])
        # mean(+1, +2) = 1.5 -> (1.5 + 2) / 4
        assert result.matrix == pytest.approx(0.875)

    def test_co_liker_boost(self, make_profile):
        interactions = [
            _swipe(USER_ID, 5, "like"),
            _swipe(10, 5, "like"),
            _swipe(10, CANDIDATE_ID, "like"),
            _swipe(11, 5, "like"),
        ]
        result = self._score(make_profile, interactions)
        # no direct rating (0.5) + 0.2 * 1 of 2 co-likers
        assert result.matrix == pytest.approx(0.6)


class TestTraditionalScore:
    @pytest.fixture(autouse=True)
    def setup(self, make_profile):
        self.candidate = make_profile(CANDIDATE_ID, gender="female", date_of_birth=born_years_ago(28))
        self.profiles = {
            CANDIDATE_ID: self.candidate,
            20: make_profile(20, gender="female", date_of_birth=born_years_ago(27)),
            21: make_profile(21, gender="female", date_of_birth=born_years_ago(26)),
            22: make_profile(22, gender="male", date_of_birth=born_years_ago(28)),
            23: make_profile(23, gender="female", date_of_birth=born_years_ago(41)),
        }
        self.preferences = {
            USER_ID: _prefs(USER_ID, "values"),
            10: _prefs(10, "values", "looks"),
            11: _prefs(11, "career"),
        }

    def test_cohort_votes_on_similar_profiles(self):
        interactions = [
            _swipe(10, 20, "like"),
            _swipe(10, 21, "star"),
            _swipe(10, CANDIDATE_ID, "dislike"),
            # different gender / age bracket: not counted
            _swipe(10, 22, "dislike"),
            _swipe(10, 23, "dislike"),
            # votes on the requesting user are skipped
            _swipe(10, USER_ID, "dislike"),
            # no priority overlap: not in cohort
            _swipe(11, 20, "dislike"),
        ]
        scorer = CollaborativeScorer(interactions, [], self.profiles, self.preferences, NOW)
        result = scorer.score(USER_ID, self.candidate)
        assert result.traditional == pytest.approx(2 / 3)
        # user has no swipes of their own
        assert result.matrix == 0.5
        assert result.cold_start is False
        assert result.blended == pytest.approx(0.3 * 0.5 + 0.7 * 2 / 3)

    def test_no_cohort_votes_is_neutral(self):
        scorer = CollaborativeScorer([], [], self.profiles, self.preferences, NOW)
        assert scorer.traditional_score(USER_ID, self.candidate) == (0.5, False)

    def test_bounded(self):
        interactions = [_swipe(10, 20, "star"), _swipe(USER_ID, CANDIDATE_ID, "star")]
        scorer = CollaborativeScorer(
            interactions,
            [Match(user_a=USER_ID, user_b=CANDIDATE_ID, created_at=NOW)],
            self.profiles,
            self.preferences,
            NOW,
        )
        result = scorer.score(USER_ID, self.candidate)
        assert 0.0 <= result.matrix <= 1.0
        assert 0.0 <= result.blended <= 1.0
