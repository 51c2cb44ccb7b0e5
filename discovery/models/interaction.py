"""
Interaction models: swipes (like, dislike, star) and the matches they create.

Records are append-only; the only deletion is the undo of the most recent swipe.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict


class SwipeAction(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"
    # Super-like.
    STAR = "star"

    @property
    def is_positive(self) -> bool:
        return self in (SwipeAction.LIKE, SwipeAction.STAR)


class AppMode(str, Enum):
    MEET = "MEET"
    SUITE = "SUITE"
    HEAT = "HEAT"


class InteractionRecord(BaseModel):
    """One swipe by user_id on target_id in a given app mode."""

    model_config = ConfigDict(extra="allow")

    user_id: int
    target_id: int
    action: SwipeAction
    mode: AppMode = AppMode.MEET
    timestamp: datetime
    record_id: Optional[str] = None


class Match(BaseModel):
    """Mutual positive swipe between two users in one mode."""

    user_a: int
    user_b: int
    mode: AppMode = AppMode.MEET
    created_at: datetime
    created_by_record: Optional[str] = None

    def involves(self, user_id: int) -> bool:
        return user_id in (self.user_a, self.user_b)

    def other(self, user_id: int) -> int:
        return self.user_b if self.user_a == user_id else self.user_a


def ensure_interactions(
    items: List[Union[Dict, "InteractionRecord"]],
) -> List["InteractionRecord"]:
    """Convert list of dicts or InteractionRecords to list of InteractionRecord models."""
    return [
        InteractionRecord.model_validate(r) if isinstance(r, dict) else r
        for r in items
    ]
