"""
Swipe history and undo stack.

Every swipe is appended as an InteractionRecord; a positive swipe that meets an
earlier positive swipe from the target creates a Match. Undo pops the record with
the latest timestamp for (user, mode). Undoing a like or star retracts the match
with its target unless another positive swipe from the user still backs it.

Inserts and undos are serialized per user; match checks are serialized per pair.
Timestamps are strictly increasing per (user, mode), so "latest" is unambiguous even
for swipes within the same clock tick.
"""

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Protocol, Set

from pydantic import BaseModel

from .errors import EmptyHistory, InvalidSwipe
from .models.interaction import AppMode, InteractionRecord, Match, SwipeAction
from .utils.scores import ensure_utc

logger = logging.getLogger(__name__)

TIMESTAMP_STEP = timedelta(microseconds=1)


class InteractionStore(Protocol):
    """Protocol for swipe and match persistence. Implement in memory or on Firestore."""

    def append_record(self, record: InteractionRecord) -> InteractionRecord:
        """Persist a record; returns it with record_id assigned."""
        ...

    def list_records(
        self,
        user_id: Optional[int] = None,
        mode: Optional[AppMode] = None,
    ) -> List[InteractionRecord]:
        """Records filtered by swiping user and/or mode, newest first."""
        ...

    def latest_record(self, user_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        """Record with the greatest timestamp for (user, mode), or None."""
        ...

    def pop_latest_record(self, user_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        """Atomically delete and return the latest record for (user, mode), or None."""
        ...

    def find_positive_record(self, user_id: int, target_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        """A like/star from user_id on target_id in mode, if any."""
        ...

    def add_match(self, match: Match) -> Match:
        ...

    def list_matches(self, user_id: Optional[int] = None) -> List[Match]:
        ...

    def delete_match(self, user_id: int, other_id: int, mode: AppMode) -> Optional[Match]:
        """Delete and return the match between the two users in mode, if any."""
        ...

    def blocked_ids(self, user_id: int) -> Set[int]:
        """Users blocked by user_id or who blocked user_id."""
        ...


class SwipeResult(BaseModel):
    record: InteractionRecord
    match: Optional[Match] = None


class UndoResult(BaseModel):
    record: InteractionRecord
    retracted_match: Optional[Match] = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SwipeHistory:
    """Per-user serialized swipe recording and LIFO undo on top of an InteractionStore."""

    def __init__(self, store: InteractionStore, clock: Callable[[], datetime] = _utcnow):
        self.store = store
        self._clock = clock
        self._locks: Dict[Any, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: Any) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _pair_lock(self, user_id: int, other_id: int) -> threading.Lock:
        # Always taken after the user lock, never the other way round.
        return self._lock_for((min(user_id, other_id), max(user_id, other_id)))

    def _next_timestamp(self, user_id: int, mode: AppMode) -> datetime:
        now = ensure_utc(self._clock())
        latest = self.store.latest_record(user_id, mode)
        if latest is not None and ensure_utc(latest.timestamp) >= now:
            return ensure_utc(latest.timestamp) + TIMESTAMP_STEP
        return now

    def _match_if_mutual(self, record: InteractionRecord) -> Optional[Match]:
        user_id, target_id, mode = record.user_id, record.target_id, record.mode
        if self.store.find_positive_record(target_id, user_id, mode) is None:
            return None
        if any(m.involves(target_id) and m.mode == mode for m in self.store.list_matches(user_id)):
            return None
        match = self.store.add_match(
            Match(
                user_a=min(user_id, target_id),
                user_b=max(user_id, target_id),
                mode=mode,
                created_at=record.timestamp,
                created_by_record=record.record_id,
            )
        )
        logger.info("[swipes] match user_a=%s user_b=%s mode=%s", match.user_a, match.user_b, mode.value)
        return match

    def record_swipe(
        self,
        user_id: int,
        mode: AppMode,
        target_id: int,
        action: SwipeAction,
    ) -> SwipeResult:
        """Append a swipe; create a match when it completes a mutual positive swipe."""
        if user_id == target_id:
            raise InvalidSwipe(f"User {user_id} cannot swipe on themselves")
        with self._lock_for(user_id):
            record = self.store.append_record(
                InteractionRecord(
                    user_id=user_id,
                    target_id=target_id,
                    action=action,
                    mode=mode,
                    timestamp=self._next_timestamp(user_id, mode),
                )
            )
            match = None
            if action.is_positive:
                with self._pair_lock(user_id, target_id):
                    match = self._match_if_mutual(record)
        logger.info(
            "[swipes] recorded user_id=%s target_id=%s action=%s mode=%s",
            user_id, target_id, action.value, mode.value,
        )
        return SwipeResult(record=record, match=match)

    def undo_last_swipe(self, user_id: int, mode: AppMode) -> UndoResult:
        """Pop the latest swipe for (user, mode). Raises EmptyHistory when there is none."""
        with self._lock_for(user_id):
            record = self.store.pop_latest_record(user_id, mode)
            if record is None:
                raise EmptyHistory(user_id, mode.value)
            retracted = None
            if record.action.is_positive:
                with self._pair_lock(user_id, record.target_id):
                    if self.store.find_positive_record(user_id, record.target_id, mode) is None:
                        retracted = self.store.delete_match(user_id, record.target_id, mode)
        logger.info(
            "[swipes] undo user_id=%s target_id=%s action=%s mode=%s retracted_match=%s",
            user_id, record.target_id, record.action.value, mode.value, retracted is not None,
        )
        return UndoResult(record=record, retracted_match=retracted)

    def history(self, user_id: int, mode: AppMode) -> List[InteractionRecord]:
        """The undo stack for (user, mode), newest first."""
        return self.store.list_records(user_id=user_id, mode=mode)
