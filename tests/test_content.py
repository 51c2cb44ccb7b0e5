#!/usr/bin/env python3
"""
Content Scorer Tests

combined = 0.25 * jaccard + 0.20 * tfidf + 0.30 * cosine + 0.25 * preference

Run:
----
    pytest tests/test_content.py -v
"""

import pytest
from conftest import NOW

from discovery.models import DealBreaker, MatchingPriority, UserPreferences
from discovery.stages.content import (
    categorical_jaccard,
    preference_alignment,
    score_content,
    tfidf_similarity,
    tokenize,
)

BIO_A = "Software engineer who loves hiking, jazz and cooking"
BIO_B = "Nurse who loves hiking and cooking on weekends"


def _prefs(priorities=(), **kwargs) -> UserPreferences:
    return UserPreferences(
        user_id=1,
        matching_priorities=tuple(MatchingPriority.parse(p) for p in priorities),
        **kwargs,
    )


class TestTfidf:
    def test_tokenize_drops_short_tokens_and_punctuation(self):
        assert tokenize("I love AI, jazz & hiking!") == ["love", "jazz", "hiking"]

    def test_empty_text_scores_zero(self):
        assert tfidf_similarity("", BIO_B) == 0.0
        assert tfidf_similarity("", "") == 0.0

    def test_identical_text(self):
        assert tfidf_similarity(BIO_A, BIO_A) == pytest.approx(1.0)

    def test_overlap_is_between_zero_and_one(self):
        score = tfidf_similarity(BIO_A, BIO_B)
        assert 0.0 < score < 1.0
        assert tfidf_similarity("jazz saxophone", "football stadium") == 0.0

    def test_empty_bios_give_zero_in_breakdown(self, make_profile):
        user = make_profile(1, bio="")
        candidate = make_profile(2, bio="")
        breakdown = score_content(user, candidate, _prefs(), NOW)
        assert breakdown.tfidf == 0.0


class TestJaccard:
    def test_nothing_comparable_is_neutral(self, make_profile):
        assert categorical_jaccard(make_profile(1), make_profile(2)) == 0.5

    def test_identical_and_partial(self, make_profile):
        a = make_profile(1, religion="islam-sunni", smoking="no", relationship_goal="marriage")
        b = make_profile(2, religion="islam-sunni", smoking="no", relationship_goal="marriage")
        c = make_profile(3, religion="islam-sunni", smoking="yes")
        assert categorical_jaccard(a, b) == 1.0
        # religion matches, smoking differs: 1 shared token of 3 distinct
        assert categorical_jaccard(a, c) == pytest.approx(1 / 3)


class TestPreferenceAlignment:
    def test_no_priorities_is_neutral(self, make_profile):
        assert preference_alignment(make_profile(2), make_profile(1), _prefs()) == 0.5

    def test_extra_priorities_are_truncated(self, make_profile):
        user = make_profile(1, religion="christianity-methodist", ethnicity="akan", education_level="masters")
        candidate = make_profile(2, religion="islam-sunni", ethnicity="akan", education_level="bachelors")
        three = _prefs(["religion", "tribe", "intellect"])
        five = _prefs(["religion", "tribe", "intellect", "looks", "career"])
        assert preference_alignment(candidate, user, five) == pytest.approx(
            preference_alignment(candidate, user, three)
        )

    def test_unknown_priority_scores_neutral(self, make_profile):
        assert preference_alignment(make_profile(2), make_profile(1), _prefs(["astrology"])) == 0.5

    def test_religion_scoring_levels(self, make_profile):
        user = make_profile(1, religion="christianity-methodist")
        prefs = _prefs(["religion"])

        def score(religion, p=prefs):
            return preference_alignment(make_profile(2, religion=religion), user, p)

        assert score("christianity-methodist") == 1.0
        assert score("christianity-anglican") == pytest.approx(0.7)
        assert score("islam-sunni") == pytest.approx(0.3)

        strict = _prefs(["religion"], deal_breakers=(DealBreaker.parse("different_religion"),))
        assert score("christianity-anglican", strict) == pytest.approx(0.1)

    def test_rank_weights_normalized(self, make_profile):
        """Religion match (1.0) first, tribe mismatch (0.0) second: 0.40 / 0.70."""
        user = make_profile(1, religion="islam-sunni", ethnicity="ewe")
        candidate = make_profile(2, religion="islam-sunni", ethnicity="akan")
        score = preference_alignment(candidate, user, _prefs(["religion", "tribe"]))
        assert score == pytest.approx(0.40 / 0.70)


class TestScoreContent:
    def test_combined_uses_weights(self, make_profile):
        user = make_profile(1, bio=BIO_A, religion="islam-sunni", height=175)
        candidate = make_profile(2, bio=BIO_B, religion="islam-sunni", height=165)
        b = score_content(user, candidate, _prefs(["values"]), NOW)
        expected = 0.25 * b.jaccard + 0.20 * b.tfidf + 0.30 * b.cosine + 0.25 * b.preference
        assert b.combined == pytest.approx(expected)
        for value in (b.jaccard, b.tfidf, b.cosine, b.preference, b.combined):
            assert 0.0 <= value <= 1.0

    def test_deterministic(self, make_profile):
        user = make_profile(1, bio=BIO_A, interests=["jazz", "hiking"])
        candidate = make_profile(2, bio=BIO_B, interests=["hiking"])
        prefs = _prefs(["personality", "values"])
        assert score_content(user, candidate, prefs, NOW) == score_content(user, candidate, prefs, NOW)
