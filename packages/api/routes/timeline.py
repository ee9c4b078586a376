"""Timeline editing endpoint routes."""

from fastapi import APIRouter, Body, Depends, HTTPException

from packages.core.types import ClipType
from packages.timeline.models import TextData, TimelineState
from packages.timeline.session import EditingSession

from ..dependencies import get_session
from ..schemas import (
    ClipCreateRequest,
    ClipUpdateRequest,
    DragRequest,
    EffectRequest,
    ErrorResponse,
    ResizeRequest,
    SplitRequest,
    SplitResponse,
    TrackCreateRequest,
    TrackUpdateRequest,
    TransitionRequest,
)


router = APIRouter(prefix="/api/timeline", tags=["timeline"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Clip or track not found"}}
_REJECTED = {
    409: {"model": ErrorResponse, "description": "Edit would overlap another clip"},
    422: {"model": ErrorResponse, "description": "Edit rejected by validation"},
}


@router.get("", summary="Get the timeline")
async def get_timeline(session: EditingSession = Depends(get_session)):
    """Return the full timeline structure in its persisted form."""
    return session.state.to_dict()


@router.put("", summary="Replace the timeline")
async def put_timeline(
    data: dict = Body(...),
    session: EditingSession = Depends(get_session),
):
    """Replace the whole timeline. The previous one can be restored with undo."""
    try:
        state = TimelineState.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(
            status_code=422,
            detail={
                "error": "invalid_timeline",
                "message": f"Timeline could not be parsed: {e}",
            },
        )
    session.replace_timeline(state)
    return session.state.to_dict()


# ============ Tracks ============


@router.post("/tracks", status_code=201, summary="Add a track")
async def add_track(
    request: TrackCreateRequest,
    session: EditingSession = Depends(get_session),
):
    """Append a track. New tracks render on top of existing ones."""
    return session.add_track(request.name, request.type).to_dict()


@router.patch("/tracks/{index}", responses=_NOT_FOUND, summary="Update a track")
async def update_track(
    index: int,
    request: TrackUpdateRequest,
    session: EditingSession = Depends(get_session),
):
    track = session.set_track_flags(index, muted=request.muted, hidden=request.hidden, name=request.name)
    return track.to_dict()


@router.delete("/tracks/{index}", responses={**_NOT_FOUND, **_REJECTED}, summary="Remove a track")
async def remove_track(
    index: int,
    session: EditingSession = Depends(get_session),
):
    """Remove a track and all of its clips. The last track cannot be removed."""
    return session.remove_track(index).to_dict()


# ============ Clips ============


@router.post("/clips", status_code=201, responses={**_NOT_FOUND, **_REJECTED}, summary="Add a clip")
async def add_clip(
    request: ClipCreateRequest,
    session: EditingSession = Depends(get_session),
):
    props = {"name": request.name, "asset_id": request.asset_id, "trim_start": request.trim_start}
    if request.text_data is not None:
        props["text_data"] = TextData(**request.text_data.model_dump())
    elif request.type == ClipType.TEXT:
        props["text_data"] = TextData()
    clip = session.add_clip(
        request.track_index,
        request.type,
        start_time=request.start_time,
        duration=request.duration,
        **props,
    )
    return clip.to_dict()


@router.patch("/clips/{clip_id}", responses={**_NOT_FOUND, **_REJECTED}, summary="Edit clip properties")
async def update_clip(
    clip_id: int,
    request: ClipUpdateRequest,
    session: EditingSession = Depends(get_session),
):
    """Apply property edits atomically; nothing changes if any value is rejected."""
    changes = request.model_dump(exclude_unset=True, exclude_none=True, exclude={"text_data"})
    if request.text_data is not None:
        changes["text_data"] = TextData(**request.text_data.model_dump())
    return session.update_clip(clip_id, **changes).to_dict()


@router.delete("/clips/{clip_id}", responses=_NOT_FOUND, summary="Delete a clip")
async def delete_clip(
    clip_id: int,
    session: EditingSession = Depends(get_session),
):
    return session.remove_clip(clip_id).to_dict()


@router.post("/clips/{clip_id}/drag", responses={**_NOT_FOUND, **_REJECTED}, summary="Move a clip")
async def drag_clip(
    clip_id: int,
    request: DragRequest,
    session: EditingSession = Depends(get_session),
):
    """Move a clip to a snapped start time on its track."""
    return session.drag_clip(clip_id, request.start_time).to_dict()


@router.post("/clips/{clip_id}/resize", responses={**_NOT_FOUND, **_REJECTED}, summary="Resize a clip")
async def resize_clip(
    clip_id: int,
    request: ResizeRequest,
    session: EditingSession = Depends(get_session),
):
    return session.resize_clip(clip_id, request.side, request.delta).to_dict()


@router.post(
    "/clips/{clip_id}/split",
    response_model=SplitResponse,
    responses={**_NOT_FOUND, **_REJECTED},
    summary="Split a clip",
)
async def split_clip(
    clip_id: int,
    request: SplitRequest,
    session: EditingSession = Depends(get_session),
):
    """Split at the given time, or at the playhead when no time is sent."""
    if request.time is None:
        first, second = session.split_at_playhead(clip_id)
    else:
        first, second = session.split_clip(clip_id, request.time)
    return SplitResponse(first=first.to_dict(), second=second.to_dict())


@router.post(
    "/clips/{clip_id}/duplicate",
    status_code=201,
    responses={**_NOT_FOUND, **_REJECTED},
    summary="Duplicate a clip",
)
async def duplicate_clip(
    clip_id: int,
    session: EditingSession = Depends(get_session),
):
    return session.duplicate_clip(clip_id).to_dict()


@router.post("/clips/{clip_id}/effects", responses={**_NOT_FOUND, **_REJECTED}, summary="Add an effect")
async def add_effect(
    clip_id: int,
    request: EffectRequest,
    session: EditingSession = Depends(get_session),
):
    session.add_effect(clip_id, request.type, request.intensity)
    return session.editor.find_clip(clip_id)[0].to_dict()


@router.delete(
    "/clips/{clip_id}/effects/{index}",
    responses={**_NOT_FOUND, **_REJECTED},
    summary="Remove an effect",
)
async def remove_effect(
    clip_id: int,
    index: int,
    session: EditingSession = Depends(get_session),
):
    session.remove_effect(clip_id, index)
    return session.editor.find_clip(clip_id)[0].to_dict()


@router.post(
    "/clips/{clip_id}/transition",
    responses={**_NOT_FOUND, **_REJECTED},
    summary="Set a clip transition",
)
async def set_transition(
    clip_id: int,
    request: TransitionRequest,
    session: EditingSession = Depends(get_session),
):
    return session.set_transition(clip_id, request.type, request.duration).to_dict()
