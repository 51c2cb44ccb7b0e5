"""
Collaborative Filtering Scorer

Behavioral signal from swipe history, built once per ranking pass:
- matrix:      signed pair ratings (like +1, star +2, dislike -1, match +2) mapped to [0, 1],
               plus a boost from co-likers who also liked the candidate
- traditional: approval rate among users with overlapping matching priorities
               toward profiles like the candidate (same gender and age bracket)

blended = 0.3 * matrix + 0.7 * traditional, clamped to [0, 1].
With no signal on either side the blended score is exactly 0.5.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Set, Tuple

from ..models.config import RankingConfig, resolve_config
from ..models.interaction import InteractionRecord, Match, SwipeAction
from ..models.preferences import MatchingPriority, UserPreferences
from ..models.profile import UserProfile
from ..models.scoring import CollaborativeBreakdown
from ..utils.scores import age_bracket, clamp01

logger = logging.getLogger(__name__)

NEUTRAL = 0.5

ACTION_RATINGS = {
    SwipeAction.LIKE: 1.0,
    SwipeAction.STAR: 2.0,
    SwipeAction.DISLIKE: -1.0,
}
MATCH_RATING = 2.0
# Signed ratings span [-RATING_SPAN/2, RATING_SPAN/2].
RATING_SPAN = 4.0


def _pair(a: int, b: int) -> Tuple[int, int]:
    return (a, b) if a <= b else (b, a)


class CollaborativeScorer:
    """Indexes interactions and matches once; score() is then a cheap lookup per candidate."""

    def __init__(
        self,
        interactions: Iterable[InteractionRecord],
        matches: Iterable[Match],
        profiles_by_id: Dict[int, UserProfile],
        preferences_by_id: Dict[int, UserPreferences],
        now: datetime,
        config: Optional[RankingConfig] = None,
    ):
        self.config = resolve_config(config)
        self.profiles_by_id = profiles_by_id
        self.preferences_by_id = preferences_by_id
        self.today = now.date()

        self._pair_ratings: Dict[Tuple[int, int], List[float]] = defaultdict(list)
        self._liked: Dict[int, Set[int]] = defaultdict(set)
        self._likers: Dict[int, Set[int]] = defaultdict(set)
        self._records_by_user: Dict[int, List[InteractionRecord]] = defaultdict(list)
        for record in interactions:
            self._pair_ratings[_pair(record.user_id, record.target_id)].append(ACTION_RATINGS[record.action])
            self._records_by_user[record.user_id].append(record)
            if record.action.is_positive:
                self._liked[record.user_id].add(record.target_id)
                self._likers[record.target_id].add(record.user_id)
        for match in matches:
            self._pair_ratings[_pair(match.user_a, match.user_b)].append(MATCH_RATING)

    def has_history(self, user_id: int) -> bool:
        return bool(self._records_by_user.get(user_id))

    def matrix_score(self, user_id: int, candidate_id: int) -> Tuple[float, bool]:
        """(score, cold_start). Users without history get 0.5 and no boost."""
        if not self.has_history(user_id):
            return NEUTRAL, True
        ratings = self._pair_ratings.get(_pair(user_id, candidate_id))
        if ratings:
            mean = sum(ratings) / len(ratings)
            base = (mean + RATING_SPAN / 2) / RATING_SPAN
        else:
            base = NEUTRAL

        co_likers: Set[int] = set()
        for target in self._liked.get(user_id, ()):
            co_likers |= self._likers.get(target, set())
        co_likers.discard(user_id)
        co_likers.discard(candidate_id)
        boost = 0.0
        if co_likers:
            also_liked = len(co_likers & self._likers.get(candidate_id, set()))
            boost = self.config.similar_user_boost_max * also_liked / len(co_likers)
        return clamp01(base + boost), False

    def _cohort(self, user_id: int, candidate_id: int) -> List[int]:
        prefs = self.preferences_by_id.get(user_id)
        mine = {p for p in (prefs.matching_priorities if prefs else ()) if p != MatchingPriority.UNKNOWN}
        if not mine:
            return []
        return sorted(
            uid
            for uid, other in self.preferences_by_id.items()
            if uid not in (user_id, candidate_id) and mine & set(other.matching_priorities)
        )

    def _resembles(self, target_id: int, candidate: UserProfile, bracket: Optional[str]) -> bool:
        if target_id == candidate.id:
            return True
        target = self.profiles_by_id.get(target_id)
        if target is None or not candidate.gender or bracket is None:
            return False
        return target.gender == candidate.gender and age_bracket(target.age(self.today)) == bracket

    def traditional_score(self, user_id: int, candidate: UserProfile) -> Tuple[float, bool]:
        """(score, has_signal). Positive / total cohort votes on similar profiles; 0.5 without votes."""
        cohort = self._cohort(user_id, candidate.id)
        if not cohort:
            return NEUTRAL, False
        bracket = age_bracket(candidate.age(self.today))
        positive = total = 0
        for uid in cohort:
            for record in self._records_by_user.get(uid, ()):
                if record.target_id == user_id or not self._resembles(record.target_id, candidate, bracket):
                    continue
                total += 1
                positive += record.action.is_positive
        if total == 0:
            return NEUTRAL, False
        return positive / total, True

    def score(self, user_id: int, candidate: UserProfile) -> CollaborativeBreakdown:
        matrix, matrix_cold = self.matrix_score(user_id, candidate.id)
        traditional, has_signal = self.traditional_score(user_id, candidate)
        if matrix_cold and not has_signal:
            return CollaborativeBreakdown(
                matrix=matrix, traditional=traditional, blended=NEUTRAL, cold_start=True
            )
        blended = (
            self.config.collaborative_weight_matrix * matrix
            + self.config.collaborative_weight_traditional * traditional
        )
        return CollaborativeBreakdown(
            matrix=matrix,
            traditional=traditional,
            blended=clamp01(blended),
            cold_start=False,
        )
