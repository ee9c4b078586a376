"""Shared type definitions for FrameCut.

Contains canonical type definitions used across packages.
Domain-specific types should remain in their respective packages.

Core Types (shared across packages):
- TrackType: Lane kind (video/audio/text)
- ClipType: Clip source kind (video/audio/image/text)
- EffectType: Per-pixel effects
- TransitionType: Clip boundary transitions
- TextAnimation: Text entrance animations
- ResizeSide: Clip edge grabbed by a resize
- MediaRef: Persisted reference to an external media asset

Domain-Specific Types (remain in packages):
- timeline.Clip / timeline.Track / timeline.TimelineState: Data model
- video.MediaAsset: Decoded asset held by the media library
- video.ExportSettings: Export pipeline options
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


# ============ Enums ============


class TrackType(Enum):
    """Track lane kind. A track only holds clips that fit its kind."""

    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"


class ClipType(Enum):
    """Clip source kind."""

    VIDEO = "video"
    AUDIO = "audio"
    IMAGE = "image"
    TEXT = "text"

    @property
    def is_visual(self) -> bool:
        """Clip contributes pixels to the composited frame."""
        return self != ClipType.AUDIO

    @property
    def is_audible(self) -> bool:
        """Clip drives an audio transport."""
        return self in (ClipType.AUDIO, ClipType.VIDEO)

    @property
    def accepts_effects(self) -> bool:
        """Pixel effects only apply to sampled media."""
        return self in (ClipType.VIDEO, ClipType.IMAGE)


class EffectType(Enum):
    """Per-pixel effects, parameterized by intensity 0-100."""

    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SATURATION = "saturation"
    GRAYSCALE = "grayscale"
    SEPIA = "sepia"
    INVERT = "invert"
    HUE_ROTATE = "hue-rotate"
    BLUR = "blur"
    SHARPEN = "sharpen"
    VIGNETTE = "vignette"


class TransitionType(Enum):
    """Time-windowed blend at a clip's start and end boundary."""

    FADE = "fade"
    DISSOLVE = "dissolve"
    WIPE_LEFT = "wipeLeft"
    WIPE_RIGHT = "wipeRight"


class TextAnimation(Enum):
    """Entrance animation for text clips."""

    NONE = "none"
    FADE_IN = "fadeIn"
    SLIDE_UP = "slideUp"
    SLIDE_LEFT = "slideLeft"
    SCALE = "scale"
    TYPEWRITER = "typewriter"


class ResizeSide(Enum):
    """Clip edge grabbed by a resize."""

    LEFT = "left"
    RIGHT = "right"


# Track kind each clip kind is placed on by default
TRACK_FOR_CLIP: dict[ClipType, TrackType] = {
    ClipType.VIDEO: TrackType.VIDEO,
    ClipType.IMAGE: TrackType.VIDEO,
    ClipType.AUDIO: TrackType.AUDIO,
    ClipType.TEXT: TrackType.TEXT,
}


# ============ Dataclasses ============


@dataclass
class MediaRef:
    """Persisted reference to an external media asset.

    Binary content is never embedded in a project; assets are
    re-linked by id, then by file name, when a project is reopened.
    """

    id: str
    name: str
    type: str
    path: str = ""
    duration: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "path": self.path,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MediaRef":
        """Create from dictionary."""
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            type=data.get("type", ""),
            path=data.get("path", ""),
            duration=data.get("duration"),
        )
