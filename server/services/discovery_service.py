"""
Discovery service: the three operations exposed by the core.

- get_ranked_discovery_pool(user_id, mode, limit)
- record_swipe(user_id, mode, target_id, action)
- undo_last_swipe(user_id, mode)

Gathers inputs from the profile and interaction stores, runs the ranking pipeline,
and publishes match/undo events.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from discovery.errors import UnknownUserError
from discovery.geo.geocoder import Geocoder
from discovery.history import InteractionStore, SwipeHistory, SwipeResult, UndoResult
from discovery.models.config import RankingConfig, resolve_config
from discovery.models.interaction import AppMode, InteractionRecord, SwipeAction
from discovery.stages.orchestrator import DiscoveryResult, rank_discovery_pool

from .event_channel import EventChannel, LoggingEventChannel
from .profile_store import ProfileStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DiscoveryService:
    def __init__(
        self,
        profile_store: ProfileStore,
        interaction_store: InteractionStore,
        geocoder: Optional[Geocoder] = None,
        config: Optional[RankingConfig] = None,
        events: Optional[EventChannel] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.profile_store = profile_store
        self.interaction_store = interaction_store
        self.geocoder = geocoder
        self.config = resolve_config(config)
        self.events = events or LoggingEventChannel()
        self.clock = clock
        self.history = SwipeHistory(interaction_store, clock=clock)

    def _require_profile(self, user_id: int):
        profile = self.profile_store.get_profile(user_id)
        if profile is None:
            raise UnknownUserError(user_id)
        return profile

    def get_ranked_discovery_pool(
        self,
        user_id: int,
        mode: AppMode = AppMode.MEET,
        limit: Optional[int] = None,
    ) -> DiscoveryResult:
        """Ranked candidates for user_id; an empty pool yields an empty list."""
        user = self._require_profile(user_id)
        preferences_by_id = self.profile_store.list_preferences()
        preferences = preferences_by_id.get(user_id) or self.profile_store.get_preferences(user_id)
        result = rank_discovery_pool(
            user,
            preferences,
            self.profile_store.list_candidates(user_id, mode),
            self.interaction_store.list_records(),
            self.interaction_store.list_matches(),
            mode,
            self.clock(),
            limit=limit,
            config=self.config,
            geocoder=self.geocoder,
            blocked_ids=self.interaction_store.blocked_ids(user_id),
            preferences_by_id=preferences_by_id,
            profiles_by_id={p.id: p for p in self.profile_store.list_profiles()},
        )
        logger.info(
            "[discovery] user_id=%s mode=%s pool=%d returned=%d diversity=%s",
            user_id, mode.value, result.pool_size, len(result.ranked), result.diversity.applied,
        )
        return result

    def record_swipe(
        self,
        user_id: int,
        mode: AppMode,
        target_id: int,
        action: SwipeAction,
    ) -> SwipeResult:
        self._require_profile(user_id)
        self._require_profile(target_id)
        result = self.history.record_swipe(user_id, mode, target_id, action)
        if result.match is not None:
            self.events.publish("match_created", result.match.model_dump(mode="json"))
        return result

    def undo_last_swipe(self, user_id: int, mode: AppMode) -> UndoResult:
        """Raises EmptyHistory when the user has nothing to undo in this mode."""
        result = self.history.undo_last_swipe(user_id, mode)
        self.events.publish("swipe_undone", result.record.model_dump(mode="json"))
        if result.retracted_match is not None:
            self.events.publish("match_retracted", result.retracted_match.model_dump(mode="json"))
        return result

    def swipe_history(self, user_id: int, mode: AppMode) -> List[InteractionRecord]:
        return self.history.history(user_id, mode)
