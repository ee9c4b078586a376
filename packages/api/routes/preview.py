"""Playback, preview frame and export endpoint routes."""

from typing import Optional

import cv2
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response

from packages.core.config import FrameCutConfig
from packages.timeline.session import EditingSession
from packages.video.exporter import ExportSettings, FFmpegEncoder

from ..dependencies import get_session, get_settings
from ..schemas import ErrorResponse, ExportRequest, ExportResponse, PlaybackResponse, SeekRequest


router = APIRouter(prefix="/api", tags=["preview"])


def _playback(session: EditingSession) -> PlaybackResponse:
    return PlaybackResponse(
        time=session.current_time,
        playing=session.playing,
        duration=session.duration,
    )


@router.get("/playback", response_model=PlaybackResponse, summary="Get playhead state")
async def get_playback(session: EditingSession = Depends(get_session)):
    return _playback(session)


@router.post("/playback/seek", response_model=PlaybackResponse, summary="Move the playhead")
async def seek(
    request: SeekRequest,
    session: EditingSession = Depends(get_session),
):
    session.seek(request.time)
    return _playback(session)


@router.get(
    "/preview/frame",
    responses={200: {"content": {"image/png": {}}}},
    summary="Render a preview frame",
)
def preview_frame(
    time: Optional[float] = Query(None, ge=0.0, description="Timeline time; defaults to the playhead"),
    session: EditingSession = Depends(get_session),
):
    """Composite the timeline at ``time`` and return it as a PNG."""
    frame = session.render_preview(time)
    ok, encoded = cv2.imencode(".png", cv2.cvtColor(frame, cv2.COLOR_RGB2BGR))
    if not ok:
        raise HTTPException(
            status_code=500,
            detail={
                "error": "encode_failed",
                "message": "Preview frame could not be encoded",
            },
        )
    return Response(content=encoded.tobytes(), media_type="image/png")


@router.post(
    "/export",
    response_model=ExportResponse,
    responses={
        409: {"model": ErrorResponse, "description": "An export is already running"},
        500: {"model": ErrorResponse, "description": "Export failed"},
    },
    summary="Export the timeline",
)
def export(
    request: ExportRequest,
    session: EditingSession = Depends(get_session),
    config: FrameCutConfig = Depends(get_settings),
):
    """
    Export the timeline to the exports directory.

    Export runs in real time, so this request takes at least as long as
    the timeline.
    """
    settings = ExportSettings(
        format=request.format,
        fps=request.fps or session.fps,
        resolution=session.resolution,
        quality=request.quality,
        include_audio=request.include_audio,
    )
    output_path = config.exports_dir / request.output_name
    result = session.export(output_path, settings=settings, encoder=FFmpegEncoder(output_path, settings))
    return ExportResponse(**result.to_dict())
