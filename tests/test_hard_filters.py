#!/usr/bin/env python3
"""
Hard Filter Tests

Non-negotiable gates applied before scoring:
- identity: self, matched, swiped, blocked, suspended, hidden/inactive
- deal_breakers: smoking, drinking, different_religion, no_education, has_children
- age: inclusive [min_age, max_age]
- distance: haversine km limit, country-level, long_distance tightening, pool country
- substances: smoking/drinking tolerance
- children: only when flagged as a deal-breaker

Run:
----
    pytest tests/test_hard_filters.py -v
"""

from datetime import timedelta

import pytest
from conftest import NOW, ORIGIN, born_years_ago, point_at_km

from discovery.geo.distance import KM_PER_MILE
from discovery.models import (
    ChildrenPreference,
    DealBreaker,
    DistancePreference,
    DistanceUnit,
    RankingConfig,
    SubstanceLevel,
    UserPreferences,
)
from discovery.stages.hard_filters import (
    ExclusionContext,
    apply_hard_filters,
    effective_distance_limit_km,
    religion_group,
)

EMPTY_CONTEXT = ExclusionContext()


def _prefs(**kwargs) -> UserPreferences:
    if "deal_breakers" in kwargs:
        kwargs["deal_breakers"] = tuple(DealBreaker.parse(d) for d in kwargs["deal_breakers"])
    return UserPreferences(user_id=1, **kwargs)


def _ids(profiles):
    return [p.id for p in profiles]


class TestEndToEndPool:
    """Three candidates where only the first satisfies age, distance, and smoking."""

    def test_only_first_candidate_survives(self, make_profile):
        user = make_profile(1, date_of_birth=born_years_ago(27), smoking="no")
        candidates = [
            make_profile(2, date_of_birth=born_years_ago(25), coordinates=point_at_km(10), smoking="no"),
            make_profile(3, date_of_birth=born_years_ago(35), coordinates=point_at_km(20), smoking="no"),
            make_profile(4, date_of_birth=born_years_ago(28), coordinates=point_at_km(500), smoking="yes"),
        ]
        prefs = _prefs(
            min_age=22,
            max_age=30,
            distance=DistancePreference(value=40, unit=DistanceUnit.KM),
            deal_breakers=["smoking"],
        )
        passed, report = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]
        assert report.total == 3
        assert report.passed == 1
        assert report.excluded["age"] == 1
        assert report.excluded["deal_breakers"] == 1

    def test_preserves_input_order(self, make_profile, permissive_prefs):
        user = make_profile(1)
        candidates = [make_profile(i) for i in (9, 3, 7)]
        passed, _ = apply_hard_filters(user, permissive_prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [9, 3, 7]


class TestIdentityGate:
    def test_excludes_self_matched_swiped_blocked(self, make_profile, permissive_prefs):
        user = make_profile(1)
        candidates = [make_profile(i) for i in (1, 2, 3, 4, 5)]
        context = ExclusionContext(matched_ids={2}, swiped_ids={3}, blocked_ids={4})
        passed, report = apply_hard_filters(user, permissive_prefs, candidates, context, NOW)
        assert _ids(passed) == [5]
        assert report.excluded["identity"] == 4

    def test_suspension_respects_expiry(self, make_profile, permissive_prefs):
        user = make_profile(1)
        candidates = [
            make_profile(2, is_suspended=True),
            make_profile(3, is_suspended=True, suspension_expires_at=NOW + timedelta(days=1)),
            make_profile(4, is_suspended=True, suspension_expires_at=NOW - timedelta(days=1)),
        ]
        passed, _ = apply_hard_filters(user, permissive_prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [4]

    def test_hidden_and_inactive_profiles(self, make_profile, permissive_prefs):
        user = make_profile(1)
        candidates = [
            make_profile(2, profile_hidden=True),
            make_profile(3, has_activated_profile=False),
            make_profile(4),
        ]
        passed, _ = apply_hard_filters(user, permissive_prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [4]


class TestDealBreakers:
    def test_religion_groups(self):
        assert religion_group("christianity-methodist") == "christianity"
        assert religion_group("islam-sunni") == "islam"
        assert religion_group("global-something") == "global"
        assert religion_group("made-up") is None
        assert religion_group(None) is None

    def test_different_religion_uses_groups(self, make_profile):
        user = make_profile(1, religion="christianity-methodist")
        candidates = [
            make_profile(2, religion="christianity-anglican"),
            make_profile(3, religion="islam-sunni"),
            make_profile(4),
        ]
        prefs = _prefs(deal_breakers=["different_religion"])
        passed, report = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2, 4]
        assert report.excluded["deal_breakers"] == 1

    def test_no_education_and_has_children(self, make_profile):
        user = make_profile(1)
        candidates = [
            make_profile(2, education_level="bachelors", has_children="no"),
            make_profile(3, education_level=None),
            make_profile(4, education_level="no_formal_education"),
            make_profile(5, education_level="masters", has_children=True),
        ]
        prefs = _prefs(deal_breakers=["no_education", "has_children"])
        passed, _ = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]

    @pytest.mark.parametrize("attribute", ["smoking", "drinking"])
    def test_substance_deal_breaker_rejects_every_level_above_none(self, make_profile, attribute):
        user = make_profile(1)
        wordings = ["occasional", "occasionally", "rarely", "social", "socially",
                    "regular", "regularly", "often", "yes", True]
        candidates = [make_profile(i, **{attribute: w}) for i, w in enumerate(wordings, start=2)]
        candidates += [
            make_profile(20, **{attribute: "no"}),
            make_profile(21, **{attribute: "never"}),
            make_profile(22, **{attribute: "none"}),
            make_profile(23),
        ]
        prefs = _prefs(deal_breakers=[attribute])
        passed, report = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [20, 21, 22, 23]
        assert report.excluded["deal_breakers"] == len(wordings)

    def test_unknown_deal_breakers_are_ignored(self, make_profile):
        user = make_profile(1)
        prefs = _prefs(deal_breakers=["pineapple_on_pizza"])
        passed, _ = apply_hard_filters(user, prefs, [make_profile(2)], EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]

    def test_reciprocal_only_when_enabled(self, make_profile):
        user = make_profile(1, smoking="yes")
        candidate = make_profile(2)
        their_prefs = {2: UserPreferences(user_id=2, deal_breakers=(DealBreaker.parse("smoking"),))}
        prefs = _prefs()

        passed, _ = apply_hard_filters(
            user, prefs, [candidate], EMPTY_CONTEXT, NOW, candidate_preferences=their_prefs
        )
        assert _ids(passed) == [2]

        config = RankingConfig(reciprocal_deal_breakers=True)
        passed, _ = apply_hard_filters(
            user, prefs, [candidate], EMPTY_CONTEXT, NOW, config=config, candidate_preferences=their_prefs
        )
        assert passed == []


class TestAgeGate:
    def test_bounds_are_inclusive(self, make_profile):
        user = make_profile(1)
        candidates = [make_profile(i, date_of_birth=born_years_ago(age)) for i, age in ((2, 21), (3, 22), (4, 30), (5, 31))]
        passed, _ = apply_hard_filters(user, _prefs(min_age=22, max_age=30), candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [3, 4]

    def test_missing_birth_date_fails_when_bounded(self, make_profile):
        user = make_profile(1)
        passed, _ = apply_hard_filters(
            user, _prefs(min_age=22), [make_profile(2, date_of_birth=None)], EMPTY_CONTEXT, NOW
        )
        assert passed == []


class TestDistanceGate:
    def test_25_miles_includes_40km_excludes_41km(self, make_profile):
        user = make_profile(1, coordinates=ORIGIN)
        candidates = [make_profile(2, coordinates=point_at_km(40)), make_profile(3, coordinates=point_at_km(41))]
        prefs = _prefs(distance=DistancePreference(value=25, unit=DistanceUnit.MILES))
        passed, report = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]
        assert report.excluded["distance"] == 1

    def test_boundary_is_inclusive(self, make_profile):
        user = make_profile(1, coordinates=ORIGIN)
        prefs = _prefs(distance=DistancePreference(value=0, unit=DistanceUnit.KM))
        passed, _ = apply_hard_filters(user, prefs, [make_profile(2, coordinates=ORIGIN)], EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]

    def test_unlimited_passes_everyone(self, make_profile, permissive_prefs):
        user = make_profile(1)
        far = make_profile(2, coordinates=point_at_km(5000))
        passed, _ = apply_hard_filters(user, permissive_prefs, [far], EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]

    def test_user_without_coordinates_passes_everyone(self, make_profile):
        user = make_profile(1, coordinates=None)
        prefs = _prefs(distance=DistancePreference(value=10, unit=DistanceUnit.KM))
        passed, _ = apply_hard_filters(
            user, prefs, [make_profile(2, coordinates=point_at_km(900))], EMPTY_CONTEXT, NOW
        )
        assert _ids(passed) == [2]

    def test_candidate_without_coordinates_fails_finite_limit(self, make_profile):
        user = make_profile(1)
        prefs = _prefs(distance=DistancePreference(value=10, unit=DistanceUnit.KM))
        passed, _ = apply_hard_filters(user, prefs, [make_profile(2, coordinates=None)], EMPTY_CONTEXT, NOW)
        assert passed == []

    def test_country_level_compares_countries(self, make_profile):
        user = make_profile(1, location="Accra, Ghana")
        candidates = [
            make_profile(2, location="Kumasi, Ghana", coordinates=point_at_km(200)),
            make_profile(3, location="Lagos, Nigeria", coordinates=point_at_km(400)),
        ]
        prefs = _prefs(distance=DistancePreference(value=999999))
        passed, _ = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]

    def test_pool_country(self, make_profile, now):
        user = make_profile(1, location="Accra, Ghana")
        candidates = [
            make_profile(2, location="Lagos, Nigeria"),
            make_profile(3, location="Accra, Ghana"),
            make_profile(4, location="Accra, Ghana", country_of_origin="Nigeria"),
        ]
        passed, _ = apply_hard_filters(user, _prefs(pool_country="Nigeria"), candidates, EMPTY_CONTEXT, now)
        assert _ids(passed) == [2, 4]

        passed, _ = apply_hard_filters(user, _prefs(pool_country="ANYWHERE"), candidates, EMPTY_CONTEXT, now)
        assert _ids(passed) == [2, 3, 4]


class TestLongDistanceTightening:
    config = RankingConfig()

    def test_unlimited_becomes_25_miles(self):
        prefs = _prefs(deal_breakers=["long_distance"])
        assert effective_distance_limit_km(prefs, self.config) == pytest.approx(25 * KM_PER_MILE)

    def test_country_level_becomes_100_miles(self):
        prefs = _prefs(deal_breakers=["long_distance"], distance=DistancePreference(value=999999))
        assert effective_distance_limit_km(prefs, self.config) == pytest.approx(100 * KM_PER_MILE)

    def test_finite_is_scaled_and_capped(self):
        small = _prefs(deal_breakers=["long_distance"], distance=DistancePreference(value=40, unit=DistanceUnit.MILES))
        large = _prefs(deal_breakers=["long_distance"], distance=DistancePreference(value=200, unit=DistanceUnit.MILES))
        assert effective_distance_limit_km(small, self.config) == pytest.approx(24 * KM_PER_MILE)
        assert effective_distance_limit_km(large, self.config) == pytest.approx(50 * KM_PER_MILE)

    def test_without_deal_breaker(self):
        assert effective_distance_limit_km(_prefs(), self.config) is None
        prefs = _prefs(distance=DistancePreference(value=10, unit=DistanceUnit.KM))
        assert effective_distance_limit_km(prefs, self.config) == 10

    def test_gate_uses_tightened_limit(self, make_profile):
        user = make_profile(1)
        candidates = [make_profile(2, coordinates=point_at_km(30)), make_profile(3, coordinates=point_at_km(45))]
        passed, _ = apply_hard_filters(user, _prefs(deal_breakers=["long_distance"]), candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2]


class TestSubstancesAndChildren:
    def test_tolerance_levels(self, make_profile):
        user = make_profile(1)
        candidates = [
            make_profile(2, smoking="no"),
            make_profile(3, smoking="occasionally"),
            make_profile(4, smoking="socially"),
            make_profile(5, smoking="sometimes"),
        ]
        prefs = _prefs(max_smoking=SubstanceLevel.OCCASIONAL)
        passed, report = apply_hard_filters(user, prefs, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2, 3, 5]
        assert report.excluded["substances"] == 1

    def test_children_only_as_deal_breaker(self, make_profile):
        user = make_profile(1)
        candidates = [make_profile(2, has_children="yes"), make_profile(3, has_children="no")]

        soft = _prefs(children_preference=ChildrenPreference.NO)
        passed, _ = apply_hard_filters(user, soft, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [2, 3]

        hard = _prefs(children_preference=ChildrenPreference.NO, children_deal_breaker=True)
        passed, report = apply_hard_filters(user, hard, candidates, EMPTY_CONTEXT, NOW)
        assert _ids(passed) == [3]
        assert report.excluded["children"] == 1
