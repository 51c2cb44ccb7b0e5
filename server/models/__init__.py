"""Pydantic request/response models for the API."""

from .common import CandidateCard, CollaborativeDetail, ContentDetail, ContextDetail, ScoreBreakdown
from .discovery import DiscoveryResponse, DiversityInfo, FilterStats
from .swipes import (
    HistoryEntry,
    HistoryResponse,
    MatchInfo,
    SwipeRequest,
    SwipeResponse,
    UndoRequest,
    UndoResponse,
)

__all__ = [
    "CandidateCard",
    "CollaborativeDetail",
    "ContentDetail",
    "ContextDetail",
    "DiscoveryResponse",
    "DiversityInfo",
    "FilterStats",
    "HistoryEntry",
    "HistoryResponse",
    "MatchInfo",
    "ScoreBreakdown",
    "SwipeRequest",
    "SwipeResponse",
    "UndoRequest",
    "UndoResponse",
]
