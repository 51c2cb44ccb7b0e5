"""
Interaction stores: swipe records, matches, and blocks.

Implementations of discovery.history.InteractionStore:
- InMemoryInteractionStore: process-local, optionally seeded from a JSON file (local dev, tests)
- FirestoreInteractionStore: collections 'interactions', 'matches', 'blocks' (production)
"""

import json
import logging
import threading
from itertools import count
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

from firebase_admin import firestore

from discovery.models.interaction import AppMode, InteractionRecord, Match, SwipeAction

from .firebase import get_firestore_client

logger = logging.getLogger(__name__)


class InMemoryInteractionStore:
    """
    Interaction store held in memory. Used for local testing and the JSON data source.
    All operations take one lock, so pop_latest_record is atomic.
    """

    def __init__(self, seed_path: Optional[Union[Path, str]] = None):
        self._lock = threading.RLock()
        self._ids = count(1)
        self._records: Dict[str, InteractionRecord] = {}
        # record_id -> insertion sequence, breaks timestamp ties
        self._sequence: Dict[str, int] = {}
        self._matches: List[Match] = []
        # (blocker, blocked)
        self._blocks: Set[Tuple[int, int]] = set()
        if seed_path:
            self._load(Path(seed_path))

    def _load(self, path: Path) -> None:
        if not path.exists():
            logger.warning("[interaction_store] seed file not found: %s", path)
            return
        with open(path) as f:
            data = json.load(f)
        for item in data.get("interactions", []):
            self.append_record(InteractionRecord.model_validate(item))
        for item in data.get("matches", []):
            self.add_match(Match.model_validate(item))
        for blocker, blocked in data.get("blocks", []):
            self.block(int(blocker), int(blocked))
        logger.info(
            "[interaction_store] seeded %d records, %d matches, %d blocks from %s",
            len(self._records), len(self._matches), len(self._blocks), path,
        )

    def append_record(self, record: InteractionRecord) -> InteractionRecord:
        with self._lock:
            stored = record.model_copy(update={"record_id": record.record_id or str(next(self._ids))})
            self._records[stored.record_id] = stored
            self._sequence[stored.record_id] = len(self._sequence)
            return stored

    def list_records(
        self,
        user_id: Optional[int] = None,
        mode: Optional[AppMode] = None,
    ) -> List[InteractionRecord]:
        with self._lock:
            out = [
                r for r in self._records.values()
                if (user_id is None or r.user_id == user_id) and (mode is None or r.mode == mode)
            ]
            return sorted(out, key=lambda r: (r.timestamp, self._sequence[r.record_id]), reverse=True)

    def latest_record(self, user_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        records = self.list_records(user_id=user_id, mode=mode)
        return records[0] if records else None

    def pop_latest_record(self, user_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        with self._lock:
            latest = self.latest_record(user_id, mode)
            if latest is None:
                return None
            return self._records.pop(latest.record_id)

    def find_positive_record(self, user_id: int, target_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        with self._lock:
            for r in self._records.values():
                if r.user_id == user_id and r.target_id == target_id and r.mode == mode and r.action.is_positive:
                    return r
        return None

    def add_match(self, match: Match) -> Match:
        with self._lock:
            self._matches.append(match)
        return match

    def list_matches(self, user_id: Optional[int] = None) -> List[Match]:
        with self._lock:
            return [m for m in self._matches if user_id is None or m.involves(user_id)]

    def delete_match(self, user_id: int, other_id: int, mode: AppMode) -> Optional[Match]:
        with self._lock:
            for i, m in enumerate(self._matches):
                if m.mode == mode and m.involves(user_id) and m.involves(other_id):
                    return self._matches.pop(i)
        return None

    def block(self, blocker_id: int, blocked_id: int) -> None:
        with self._lock:
            self._blocks.add((blocker_id, blocked_id))

    def blocked_ids(self, user_id: int) -> Set[int]:
        with self._lock:
            return {b for a, b in self._blocks if a == user_id} | {a for a, b in self._blocks if b == user_id}


class FirestoreInteractionStore:
    """
    Interaction store backed by Firestore.
    interactions: { userId, targetId, action, mode, timestamp }
    matches:      { userA, userB, mode, createdAt, createdByRecord }
    blocks:       { blockerId, blockedId }
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
    ):
        self._db = get_firestore_client(project_id, credentials_path)
        self._interactions = self._db.collection("interactions")
        self._matches = self._db.collection("matches")
        self._blocks = self._db.collection("blocks")

    @staticmethod
    def _doc_to_record(doc) -> InteractionRecord:
        d = doc.to_dict()
        return InteractionRecord(
            user_id=d["userId"],
            target_id=d["targetId"],
            action=SwipeAction(d["action"]),
            mode=AppMode(d.get("mode", AppMode.MEET.value)),
            timestamp=d["timestamp"],
            record_id=doc.id,
        )

    @staticmethod
    def _doc_to_match(doc) -> Match:
        d = doc.to_dict()
        return Match(
            user_a=d["userA"],
            user_b=d["userB"],
            mode=AppMode(d.get("mode", AppMode.MEET.value)),
            created_at=d["createdAt"],
            created_by_record=d.get("createdByRecord"),
        )

    def append_record(self, record: InteractionRecord) -> InteractionRecord:
        _, ref = self._interactions.add({
            "userId": record.user_id,
            "targetId": record.target_id,
            "action": record.action.value,
            "mode": record.mode.value,
            "timestamp": record.timestamp,
        })
        return record.model_copy(update={"record_id": ref.id})

    def list_records(
        self,
        user_id: Optional[int] = None,
        mode: Optional[AppMode] = None,
    ) -> List[InteractionRecord]:
        query = self._interactions
        if user_id is not None:
            query = query.where("userId", "==", user_id)
        if mode is not None:
            query = query.where("mode", "==", mode.value)
        out = [self._doc_to_record(doc) for doc in query.stream()]
        return sorted(out, key=lambda r: (r.timestamp, r.record_id), reverse=True)

    def _latest_query(self, user_id: int, mode: AppMode):
        return (
            self._interactions.where("userId", "==", user_id)
            .where("mode", "==", mode.value)
            .order_by("timestamp", direction=firestore.Query.DESCENDING)
            .limit(1)
        )

    def latest_record(self, user_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        docs = list(self._latest_query(user_id, mode).stream())
        return self._doc_to_record(docs[0]) if docs else None

    def pop_latest_record(self, user_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        """Read-and-delete the latest record in one transaction."""
        query = self._latest_query(user_id, mode)

        @firestore.transactional
        def _pop(transaction):
            docs = list(query.stream(transaction=transaction))
            if not docs:
                return None
            transaction.delete(docs[0].reference)
            return docs[0]

        doc = _pop(self._db.transaction())
        return self._doc_to_record(doc) if doc is not None else None

    def find_positive_record(self, user_id: int, target_id: int, mode: AppMode) -> Optional[InteractionRecord]:
        query = (
            self._interactions.where("userId", "==", user_id)
            .where("targetId", "==", target_id)
            .where("mode", "==", mode.value)
        )
        for doc in query.stream():
            record = self._doc_to_record(doc)
            if record.action.is_positive:
                return record
        return None

    def add_match(self, match: Match) -> Match:
        self._matches.add({
            "userA": match.user_a,
            "userB": match.user_b,
            "mode": match.mode.value,
            "createdAt": match.created_at,
            "createdByRecord": match.created_by_record,
        })
        return match

    def list_matches(self, user_id: Optional[int] = None) -> List[Match]:
        if user_id is None:
            return [self._doc_to_match(doc) for doc in self._matches.stream()]
        out = [self._doc_to_match(doc) for doc in self._matches.where("userA", "==", user_id).stream()]
        out += [self._doc_to_match(doc) for doc in self._matches.where("userB", "==", user_id).stream()]
        return out

    def delete_match(self, user_id: int, other_id: int, mode: AppMode) -> Optional[Match]:
        query = (
            self._matches.where("userA", "==", min(user_id, other_id))
            .where("userB", "==", max(user_id, other_id))
            .where("mode", "==", mode.value)
            .limit(1)
        )
        for doc in query.stream():
            match = self._doc_to_match(doc)
            doc.reference.delete()
            return match
        return None

    def blocked_ids(self, user_id: int) -> Set[int]:
        out = {doc.to_dict()["blockedId"] for doc in self._blocks.where("blockerId", "==", user_id).stream()}
        out |= {doc.to_dict()["blockerId"] for doc in self._blocks.where("blockedId", "==", user_id).stream()}
        return out
