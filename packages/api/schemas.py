"""Pydantic schemas for API request/response models."""

from typing import Optional

from pydantic import BaseModel, Field

from packages.core.types import ClipType, EffectType, ResizeSide, TextAnimation, TrackType, TransitionType
from packages.video.exporter import ExportFormat


# ============ Track Schemas ============

class TrackCreateRequest(BaseModel):
    """Request body for adding a track."""
    name: Optional[str] = Field(None, max_length=100)
    type: TrackType = TrackType.VIDEO


class TrackUpdateRequest(BaseModel):
    """Request body for renaming, muting or hiding a track."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    muted: Optional[bool] = None
    hidden: Optional[bool] = None


# ============ Clip Schemas ============

class TextDataSchema(BaseModel):
    """Content and styling of a text clip."""
    text: str = Field("Hello World", max_length=1000)
    font_family: str = "sans-serif"
    font_size: int = Field(48, ge=8, le=200)
    color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: int = Field(0, ge=0, le=20)
    bg_color: str = "#000000"
    bg_opacity: float = Field(0.0, ge=0.0, le=100.0)
    align: str = Field("center", pattern="^(left|center|right)$")
    bold: bool = False
    italic: bool = False
    animation: TextAnimation = TextAnimation.NONE
    x: float = 0.0
    y: float = 0.0


class ClipCreateRequest(BaseModel):
    """Request body for adding a clip to a track."""
    track_index: int = Field(..., ge=0)
    type: ClipType
    start_time: float = Field(0.0, ge=0.0)
    duration: float = Field(5.0, gt=0.0)
    asset_id: Optional[str] = None
    name: str = ""
    trim_start: float = Field(0.0, ge=0.0)
    text_data: Optional[TextDataSchema] = None


class ClipUpdateRequest(BaseModel):
    """Direct property edits; omitted fields are left unchanged."""
    name: Optional[str] = None
    start_time: Optional[float] = None
    duration: Optional[float] = None
    trim_start: Optional[float] = None
    opacity: Optional[float] = None
    volume: Optional[float] = None
    fade_in: Optional[float] = None
    fade_out: Optional[float] = None
    transition_duration: Optional[float] = None
    text_data: Optional[TextDataSchema] = None


class DragRequest(BaseModel):
    """Move a clip to a new start time."""
    start_time: float


class ResizeRequest(BaseModel):
    """Move one edge of a clip."""
    side: ResizeSide
    delta: float


class SplitRequest(BaseModel):
    """Split time; the playhead is used when omitted."""
    time: Optional[float] = None


class EffectRequest(BaseModel):
    """Append an effect to a clip."""
    type: EffectType
    intensity: float = Field(100.0, ge=0.0, le=100.0)


class TransitionRequest(BaseModel):
    """Set or clear (type=null) a clip's transition."""
    type: Optional[TransitionType] = None
    duration: float = Field(0.5, gt=0.0, le=3.0)


class SplitResponse(BaseModel):
    """Both halves of a split clip."""
    first: dict
    second: dict


# ============ History Schemas ============

class HistoryResponse(BaseModel):
    """Result of an undo or redo."""
    applied: bool
    can_undo: bool
    can_redo: bool


# ============ Media & Project Schemas ============

class MediaImportRequest(BaseModel):
    """Import a media file from the server filesystem."""
    path: str = Field(..., min_length=1)


class MediaResponse(BaseModel):
    """A media asset in the library."""
    id: str
    name: str
    type: str
    path: str = ""
    duration: Optional[float] = None


class ProjectRequest(BaseModel):
    """Project file name, relative to the projects directory."""
    name: str = Field(..., min_length=1, max_length=200, pattern=r"^[\w\-. ]+$")


class ProjectLoadResponse(BaseModel):
    """Result of opening a project."""
    timeline: dict
    missing_media: list[str] = Field(default_factory=list)


# ============ Playback & Export Schemas ============

class SeekRequest(BaseModel):
    """Move the playhead."""
    time: float = Field(..., ge=0.0)


class PlaybackResponse(BaseModel):
    """Current playhead and play state."""
    time: float
    playing: bool
    duration: float


class ExportRequest(BaseModel):
    """Export the timeline to a file in the exports directory."""
    output_name: str = Field(..., min_length=1, max_length=200, pattern=r"^[\w\-. ]+$")
    format: ExportFormat = ExportFormat.MP4
    fps: Optional[float] = Field(None, gt=0.0, le=120.0)
    quality: int = Field(23, ge=0, le=51)
    include_audio: bool = True


class ExportResponse(BaseModel):
    """Finished export."""
    output: str
    frames_rendered: int
    duration: float
    format: str


# ============ Error Schemas ============

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = None


# ============ Health Schemas ============

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
    services: dict[str, str] = Field(default_factory=dict)
