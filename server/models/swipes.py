"""Swipe-related Pydantic models."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from discovery.models.interaction import AppMode, SwipeAction


class SwipeRequest(BaseModel):
    user_id: int
    target_id: int
    action: SwipeAction
    mode: AppMode = AppMode.MEET


class MatchInfo(BaseModel):
    user_a: int
    user_b: int
    mode: str
    created_at: datetime


class SwipeResponse(BaseModel):
    record_id: Optional[str] = None
    user_id: int
    target_id: int
    action: str
    mode: str
    timestamp: datetime
    matched: bool = False
    match: Optional[MatchInfo] = None


class UndoRequest(BaseModel):
    user_id: int
    mode: AppMode = AppMode.MEET


class UndoResponse(BaseModel):
    undone_target_id: int
    undone_action: str
    mode: str
    match_retracted: bool = False


class HistoryEntry(BaseModel):
    record_id: Optional[str] = None
    target_id: int
    action: str
    timestamp: datetime


class HistoryResponse(BaseModel):
    user_id: int
    mode: str
    entries: List[HistoryEntry]
