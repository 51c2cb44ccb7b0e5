"""Swipe endpoints: record, undo, and history."""

from fastapi import APIRouter, HTTPException, Query

from discovery.errors import EmptyHistory, InvalidSwipe, UnknownUserError
from discovery.models.interaction import AppMode

from ..models import (
    HistoryEntry,
    HistoryResponse,
    SwipeRequest,
    SwipeResponse,
    UndoRequest,
    UndoResponse,
)
from ..state import get_state
from ..utils import to_match_info

router = APIRouter()


@router.post("", response_model=SwipeResponse)
def record_swipe(request: SwipeRequest):
    """Record a like, dislike, or star. Reports a match when the swipe is mutual."""
    state = get_state()
    try:
        result = state.discovery.record_swipe(request.user_id, request.mode, request.target_id, request.action)
    except UnknownUserError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidSwipe as e:
        raise HTTPException(status_code=400, detail=str(e))

    record = result.record
    return SwipeResponse(
        record_id=record.record_id,
        user_id=record.user_id,
        target_id=record.target_id,
        action=record.action.value,
        mode=record.mode.value,
        timestamp=record.timestamp,
        matched=result.match is not None,
        match=to_match_info(result.match) if result.match is not None else None,
    )


@router.post("/undo", response_model=UndoResponse)
def undo_last_swipe(request: UndoRequest):
    """Undo the most recent swipe for the user in this mode."""
    state = get_state()
    try:
        result = state.discovery.undo_last_swipe(request.user_id, request.mode)
    except EmptyHistory as e:
        raise HTTPException(status_code=409, detail=str(e))

    return UndoResponse(
        undone_target_id=result.record.target_id,
        undone_action=result.record.action.value,
        mode=result.record.mode.value,
        match_retracted=result.retracted_match is not None,
    )


@router.get("/{user_id}/history", response_model=HistoryResponse)
def swipe_history(user_id: int, mode: AppMode = Query(AppMode.MEET)):
    state = get_state()
    records = state.discovery.swipe_history(user_id, mode)
    return HistoryResponse(
        user_id=user_id,
        mode=mode.value,
        entries=[
            HistoryEntry(
                record_id=r.record_id,
                target_id=r.target_id,
                action=r.action.value,
                timestamp=r.timestamp,
            )
            for r in records
        ],
    )
