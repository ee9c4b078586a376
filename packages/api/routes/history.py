"""Undo/redo endpoint routes."""

from fastapi import APIRouter, Depends

from packages.timeline.session import EditingSession

from ..dependencies import get_session
from ..schemas import HistoryResponse


router = APIRouter(prefix="/api/history", tags=["history"])


def _history_response(session: EditingSession, applied: bool) -> HistoryResponse:
    return HistoryResponse(
        applied=applied,
        can_undo=session.history.can_undo,
        can_redo=session.history.can_redo,
    )


@router.get("", response_model=HistoryResponse, summary="Get undo/redo availability")
async def get_history(session: EditingSession = Depends(get_session)):
    return _history_response(session, applied=False)


@router.post("/undo", response_model=HistoryResponse, summary="Undo the last edit")
async def undo(session: EditingSession = Depends(get_session)):
    """Undo one edit. With nothing to undo this is a no-op and ``applied`` is false."""
    return _history_response(session, session.undo())


@router.post("/redo", response_model=HistoryResponse, summary="Redo the last undone edit")
async def redo(session: EditingSession = Depends(get_session)):
    """Redo one undone edit. With nothing to redo this is a no-op and ``applied`` is false."""
    return _history_response(session, session.redo())
