"""Data models for the editing timeline.

Attributes are snake_case; the persisted JSON form uses the camelCase
keys of the project format (``startTime``, ``trimStart``...).
"""

import copy
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from packages.core.types import ClipType, EffectType, TextAnimation, TrackType, TransitionType

MIN_CLIP_DURATION = 0.1
DEFAULT_TRANSITION_DURATION = 0.5
DEFAULT_ZOOM = 100.0  # pixels per second


@dataclass
class Effect:
    """A pixel effect applied to a clip."""
    type: EffectType
    intensity: float = 100.0

    def to_dict(self) -> dict:
        return {"type": self.type.value, "intensity": self.intensity}

    @classmethod
    def from_dict(cls, data: dict) -> "Effect":
        return cls(
            type=EffectType(data["type"]),
            intensity=data.get("intensity", 100.0),
        )


@dataclass
class TextData:
    """Content and styling of a text clip."""
    text: str = "Hello World"
    font_family: str = "sans-serif"
    font_size: int = 48
    color: str = "#ffffff"
    stroke_color: str = "#000000"
    stroke_width: int = 0
    bg_color: str = "#000000"
    bg_opacity: float = 0.0  # percent, 0-100
    align: str = "center"
    bold: bool = False
    italic: bool = False
    animation: TextAnimation = TextAnimation.NONE
    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "fontFamily": self.font_family,
            "fontSize": self.font_size,
            "color": self.color,
            "strokeColor": self.stroke_color,
            "strokeWidth": self.stroke_width,
            "bgColor": self.bg_color,
            "bgOpacity": self.bg_opacity,
            "align": self.align,
            "bold": self.bold,
            "italic": self.italic,
            "animation": self.animation.value,
            "x": self.x,
            "y": self.y,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TextData":
        return cls(
            text=data.get("text", ""),
            font_family=data.get("fontFamily", "sans-serif"),
            font_size=data.get("fontSize", 48),
            color=data.get("color", "#ffffff"),
            stroke_color=data.get("strokeColor", "#000000"),
            stroke_width=data.get("strokeWidth", 0),
            bg_color=data.get("bgColor", "#000000"),
            bg_opacity=data.get("bgOpacity", 0.0),
            align=data.get("align", "center"),
            bold=data.get("bold", False),
            italic=data.get("italic", False),
            animation=TextAnimation(data.get("animation") or "none"),
            x=data.get("x", 0.0),
            y=data.get("y", 0.0),
        )


@dataclass
class Clip:
    """A time-bounded reference to a media or text source on a track."""
    id: int
    type: ClipType
    name: str = ""
    asset_id: Optional[str] = None
    start_time: float = 0.0
    duration: float = 5.0
    trim_start: float = 0.0
    opacity: float = 1.0
    volume: float = 1.0
    fade_in: float = 0.0
    fade_out: float = 0.0
    effects: List[Effect] = field(default_factory=list)
    transition: Optional[TransitionType] = None
    transition_duration: float = DEFAULT_TRANSITION_DURATION
    text_data: Optional[TextData] = None

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration

    def is_active(self, time: float) -> bool:
        """Half-open activity test: start <= time < end."""
        return self.start_time <= time < self.end_time

    def media_time(self, time: float) -> float:
        """Position in the asset's own timeline for a timeline time."""
        return time - self.start_time + self.trim_start

    def clone(self, new_id: int) -> "Clip":
        """Deep copy with a new identity; effects and text are never aliased."""
        twin = copy.deepcopy(self)
        twin.id = new_id
        return twin

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.value,
            "name": self.name,
            "assetId": self.asset_id,
            "startTime": self.start_time,
            "duration": self.duration,
            "trimStart": self.trim_start,
            "opacity": self.opacity,
            "volume": self.volume,
            "fadeIn": self.fade_in,
            "fadeOut": self.fade_out,
            "effects": [effect.to_dict() for effect in self.effects],
            "transition": self.transition.value if self.transition else None,
            "transitionDuration": self.transition_duration,
            "textData": self.text_data.to_dict() if self.text_data else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Clip":
        transition = data.get("transition")
        text_data = data.get("textData")
        return cls(
            id=data["id"],
            type=ClipType(data["type"]),
            name=data.get("name", ""),
            asset_id=data.get("assetId"),
            start_time=data.get("startTime", 0.0),
            duration=data.get("duration", 5.0),
            trim_start=data.get("trimStart", 0.0),
            opacity=data.get("opacity", 1.0),
            volume=data.get("volume", 1.0),
            fade_in=data.get("fadeIn", 0.0),
            fade_out=data.get("fadeOut", 0.0),
            effects=[Effect.from_dict(e) for e in data.get("effects", [])],
            transition=TransitionType(transition) if transition else None,
            transition_duration=data.get("transitionDuration", DEFAULT_TRANSITION_DURATION),
            text_data=TextData.from_dict(text_data) if text_data else None,
        )


@dataclass
class Track:
    """A lane of non-overlapping clips, kept sorted by start time."""
    id: int
    name: str
    type: TrackType = TrackType.VIDEO
    clips: List[Clip] = field(default_factory=list)
    muted: bool = False
    hidden: bool = False

    def sort_clips(self) -> None:
        self.clips.sort(key=lambda c: c.start_time)

    def clip_at(self, time: float) -> Optional[Clip]:
        for clip in self.clips:
            if clip.is_active(time):
                return clip
        return None

    @property
    def end_time(self) -> float:
        return max((c.end_time for c in self.clips), default=0.0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "muted": self.muted,
            "hidden": self.hidden,
            "clips": [clip.to_dict() for clip in self.clips],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Track":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            type=TrackType(data.get("type", "video")),
            clips=[Clip.from_dict(c) for c in data.get("clips", [])],
            muted=data.get("muted", False),
            hidden=data.get("hidden", False),
        )


@dataclass
class TimelineState:
    """The whole editable model: tracks back-to-front, zoom and id counter.

    Track index 0 is the back-most layer; later tracks composite on top.
    """
    tracks: List[Track] = field(default_factory=list)
    zoom: float = DEFAULT_ZOOM
    clip_id_counter: int = 0

    @classmethod
    def default(cls) -> "TimelineState":
        """New-project layout: two video lanes, a text lane and an audio lane."""
        return cls(tracks=[
            Track(id=0, name="Video 1", type=TrackType.VIDEO),
            Track(id=1, name="Video 2", type=TrackType.VIDEO),
            Track(id=2, name="Text", type=TrackType.TEXT),
            Track(id=3, name="Audio 1", type=TrackType.AUDIO),
        ])

    def iter_clips(self) -> Iterator[Tuple[int, Clip]]:
        """Yield (track_index, clip) in render order."""
        for index, track in enumerate(self.tracks):
            for clip in track.clips:
                yield index, clip

    def total_duration(self) -> float:
        """End of the last clip on any track (0 for an empty timeline)."""
        return max((track.end_time for track in self.tracks), default=0.0)

    def copy(self) -> "TimelineState":
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        return {
            "tracks": [track.to_dict() for track in self.tracks],
            "zoom": self.zoom,
            "clipIdCounter": self.clip_id_counter,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TimelineState":
        return cls(
            tracks=[Track.from_dict(t) for t in data.get("tracks", [])],
            zoom=data.get("zoom", DEFAULT_ZOOM),
            clip_id_counter=data.get("clipIdCounter", 0),
        )
