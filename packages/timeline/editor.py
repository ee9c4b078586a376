"""
Timeline Editor - invariant-preserving mutations of tracks and clips.

Every structural edit validates the resulting interval before touching
the model: a rejected edit raises a ValidationError and leaves the
state exactly as it was.
"""

import copy
import logging
from dataclasses import fields
from typing import Callable, List, Optional, Tuple

from packages.core.errors import (
    AssetNotFoundError,
    ClipNotFoundError,
    MinimumDurationError,
    OverlapError,
    SplitRangeError,
    TrackNotFoundError,
    TrimRangeError,
    ValidationError,
)
from packages.core.protocols import AssetSource
from packages.core.types import TRACK_FOR_CLIP, ClipType, EffectType, ResizeSide, TrackType, TransitionType
from packages.core.utils import clamp

from .models import (
    DEFAULT_TRANSITION_DURATION,
    MIN_CLIP_DURATION,
    Clip,
    Effect,
    TimelineState,
    Track,
)

logger = logging.getLogger(__name__)

SPLIT_GUARD = 0.05  # seconds kept clear of either edge when splitting
DUPLICATE_GAP = 0.1
GRID_STEP = 0.5
MIN_ZOOM = 10.0
MAX_ZOOM = 500.0
MAX_TRANSITION_DURATION = 3.0
EPSILON = 1e-9

# Clip fields a direct property edit may not touch
_LOCKED_FIELDS = {"id", "type"}
_CLIP_FIELDS = {f.name for f in fields(Clip)}


class TimelineEditor:
    """
    Sole mutator of a TimelineState.

    Usage:
        editor = TimelineEditor(TimelineState.default(), assets=library)
        clip = editor.add_clip(0, ClipType.VIDEO, start_time=0, duration=10, asset_id="media_0")
        editor.split_clip(clip.id, 4.0)
    """

    def __init__(
        self,
        state: Optional[TimelineState] = None,
        assets: Optional[AssetSource] = None,
        snap_pixels: float = 5.0,
        playhead: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the editor.

        Args:
            state: Model to edit (default: new-project layout)
            assets: Asset collaborator used for duration bounds
            snap_pixels: Snap tolerance in screen pixels
            playhead: Callable returning the current playhead time
        """
        self.state = state if state is not None else TimelineState.default()
        self.assets = assets
        self.snap_pixels = snap_pixels
        self.snap_enabled = True
        self._playhead = playhead or (lambda: 0.0)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def track(self, track_index: int) -> Track:
        if not 0 <= track_index < len(self.state.tracks):
            raise TrackNotFoundError(track_index)
        return self.state.tracks[track_index]

    def find_clip(self, clip_id: int) -> Tuple[Clip, int]:
        """Return (clip, track_index) for a clip id."""
        for index, track in enumerate(self.state.tracks):
            for clip in track.clips:
                if clip.id == clip_id:
                    return clip, index
        raise ClipNotFoundError(clip_id)

    def asset_duration(self, asset_id: Optional[str]) -> Optional[float]:
        """Duration of the underlying asset, or None when unknown."""
        if asset_id is None or self.assets is None:
            return None
        try:
            return self.assets.get_duration(asset_id)
        except AssetNotFoundError:
            return None

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def overlaps(
        self,
        track_index: int,
        exclude_clip_id: Optional[int],
        start: float,
        duration: float,
    ) -> bool:
        """Whether [start, start+duration) intersects any other clip on the track."""
        end = start + duration
        for clip in self.track(track_index).clips:
            if clip.id == exclude_clip_id:
                continue
            if start < clip.end_time - EPSILON and end > clip.start_time + EPSILON:
                return True
        return False

    @property
    def snap_threshold(self) -> float:
        """Snap tolerance in seconds at the current zoom."""
        return self.snap_pixels / self.state.zoom

    def snap_candidates(self) -> List[float]:
        """Clip edges (track order, clip order, start before end), then the playhead."""
        candidates = []
        for _, clip in self.state.iter_clips():
            candidates.append(clip.start_time)
            candidates.append(clip.end_time)
        candidates.append(self._playhead())
        return candidates

    def snap_time(self, time: float) -> float:
        """
        Snap a time to the nearest clip edge, playhead or half-second grid point.

        Only candidates strictly within the zoom-scaled threshold are
        considered. Ties keep the earliest candidate in evaluation order.
        """
        if not self.snap_enabled:
            return time

        threshold = self.snap_threshold
        best = None
        best_distance = threshold

        candidates = self.snap_candidates()
        candidates.append(round(time / GRID_STEP) * GRID_STEP)

        for candidate in candidates:
            distance = abs(time - candidate)
            if distance < best_distance:
                best = candidate
                best_distance = distance

        return time if best is None else best

    def time_to_pixel(self, time: float) -> float:
        return time * self.state.zoom

    def pixel_to_time(self, pixel: float) -> float:
        return pixel / self.state.zoom

    def next_free_start(self, track_index: int) -> float:
        """End of the last clip on a track, where appended clips go."""
        return self.track(track_index).end_time

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _reject(self, error: ValidationError) -> ValidationError:
        logger.debug("Edit rejected: %s", error.message)
        return error

    def _check_interval(
        self,
        track_index: int,
        clip: Clip,
        start: float,
        duration: float,
        trim_start: float,
    ) -> None:
        """Raise unless the interval is legal for the clip on the track."""
        if start < -EPSILON:
            raise self._reject(ValidationError(
                f"Start time {start:.3f}s is negative",
                code="negative_start",
                details={"start": start},
            ))
        if duration < MIN_CLIP_DURATION - EPSILON:
            raise self._reject(MinimumDurationError(duration, MIN_CLIP_DURATION))
        if trim_start < -EPSILON:
            raise self._reject(TrimRangeError(trim_start, duration, 0.0))

        asset_duration = self.asset_duration(clip.asset_id)
        if asset_duration is not None and trim_start + duration > asset_duration + EPSILON:
            raise self._reject(TrimRangeError(trim_start, duration, asset_duration))

        if self.overlaps(track_index, clip.id, start, duration):
            raise self._reject(OverlapError(track_index, start, duration))

    def _check_properties(self, clip: Clip) -> None:
        """Range checks for the scalar clip properties."""
        problems = []
        if not 0.0 <= clip.opacity <= 1.0:
            problems.append("opacity must be within [0, 1]")
        if not 0.0 <= clip.volume <= 1.0:
            problems.append("volume must be within [0, 1]")
        if clip.fade_in < 0 or clip.fade_out < 0:
            problems.append("fades must be non-negative")
        if not 0.0 < clip.transition_duration <= MAX_TRANSITION_DURATION:
            problems.append(f"transition duration must be within (0, {MAX_TRANSITION_DURATION}]")
        for effect in clip.effects:
            if not 0.0 <= effect.intensity <= 100.0:
                problems.append(f"{effect.type.value} intensity must be within [0, 100]")
        if clip.type == ClipType.TEXT and clip.text_data is None:
            problems.append("text clips require text data")

        if problems:
            raise self._reject(ValidationError(
                f"Invalid clip properties: {'; '.join(problems)}",
                code="invalid_properties",
                details={"clip_id": clip.id, "problems": problems},
            ))

    def _check_track_type(self, track_index: int, clip_type: ClipType) -> None:
        track = self.track(track_index)
        expected = TRACK_FOR_CLIP[clip_type]
        if track.type != expected:
            raise self._reject(ValidationError(
                f"A {clip_type.value} clip cannot be placed on {track.type.value} track '{track.name}'",
                code="track_type_mismatch",
                details={"track": track_index, "clip_type": clip_type.value},
            ))

    def validate_state(self, state: TimelineState, check_assets: bool = True) -> None:
        """
        Check a whole model before it replaces the edited one.

        Every clip goes through the same checks as a single edit, and
        clip ids must be unique across tracks. Clips are re-sorted and
        the id counter is raised past the largest id in use.

        Args:
            state: Candidate model, normalized in place
            check_assets: Bound trims by asset durations from ``assets``

        Raises:
            ValidationError: On the first clip that breaks an invariant
        """
        checker = TimelineEditor(state, assets=self.assets if check_assets else None)
        seen = set()
        for index, track in enumerate(state.tracks):
            track.sort_clips()
            for clip in track.clips:
                if clip.id in seen:
                    raise self._reject(ValidationError(
                        f"Clip id {clip.id} is used more than once",
                        code="duplicate_clip_id",
                        details={"clip_id": clip.id},
                    ))
                seen.add(clip.id)
                checker._check_track_type(index, clip.type)
                checker._check_properties(clip)
                checker._check_interval(index, clip, clip.start_time, clip.duration, clip.trim_start)

        if seen:
            state.clip_id_counter = max(state.clip_id_counter, max(seen) + 1)

    # ------------------------------------------------------------------
    # Clip operations
    # ------------------------------------------------------------------

    def add_clip(
        self,
        track_index: int,
        clip_type: ClipType,
        start_time: float = 0.0,
        duration: float = 5.0,
        **props,
    ) -> Clip:
        """
        Create a clip on a track.

        Args:
            track_index: Target track
            clip_type: Kind of clip
            start_time: Timeline position in seconds
            duration: Length in seconds
            **props: Any other Clip field (asset_id, trim_start, effects...)

        Returns:
            The committed clip

        Raises:
            ValidationError: If the clip overlaps or is out of range
        """
        unknown = set(props) - (_CLIP_FIELDS - _LOCKED_FIELDS - {"start_time", "duration"})
        if unknown:
            raise self._reject(ValidationError(
                f"Unknown clip properties: {', '.join(sorted(unknown))}",
                code="unknown_property",
                details={"properties": sorted(unknown)},
            ))

        clip = Clip(
            id=self.state.clip_id_counter,
            type=clip_type,
            start_time=start_time,
            duration=duration,
            **copy.deepcopy(props),
        )
        self._check_track_type(track_index, clip_type)
        self._check_properties(clip)
        self._check_interval(track_index, clip, clip.start_time, clip.duration, clip.trim_start)

        track = self.track(track_index)
        track.clips.append(clip)
        track.sort_clips()
        self.state.clip_id_counter += 1
        return clip

    def remove_clip(self, clip_id: int) -> Clip:
        clip, track_index = self.find_clip(clip_id)
        self.state.tracks[track_index].clips.remove(clip)
        return clip

    def drag_clip(self, clip_id: int, proposed_start: float) -> Clip:
        """
        Move a clip to a snapped start time on its own track.

        Raises:
            OverlapError: If the snapped interval collides; the clip stays put
        """
        clip, track_index = self.find_clip(clip_id)
        new_start = max(0.0, self.snap_time(max(0.0, proposed_start)))

        if self.overlaps(track_index, clip.id, new_start, clip.duration):
            raise self._reject(OverlapError(track_index, new_start, clip.duration))

        clip.start_time = new_start
        self.state.tracks[track_index].sort_clips()
        return clip

    def resize_clip(self, clip_id: int, side: ResizeSide, delta: float) -> Clip:
        """
        Move one edge of a clip by delta seconds.

        Left: start and trim move together, the end time stays fixed.
        Right: only the duration changes, capped by the remaining asset
        length and floored at the minimum duration.
        """
        clip, track_index = self.find_clip(clip_id)
        side = ResizeSide(side)

        if side == ResizeSide.LEFT:
            new_start = max(0.0, self.snap_time(max(0.0, clip.start_time + delta)))
            shift = new_start - clip.start_time
            if clip.type.is_audible and clip.trim_start + shift < 0:
                # Cannot reveal media before the asset's first frame
                shift = -clip.trim_start
                new_start = clip.start_time + shift
            new_duration = clip.duration - shift
            new_trim = max(0.0, clip.trim_start + shift)
        else:
            new_duration = max(MIN_CLIP_DURATION, clip.duration + delta)
            new_end = self.snap_time(clip.start_time + new_duration)
            new_duration = new_end - clip.start_time
            asset_duration = self.asset_duration(clip.asset_id)
            if asset_duration is not None:
                new_duration = min(new_duration, asset_duration - clip.trim_start)
            new_duration = max(MIN_CLIP_DURATION, new_duration)
            new_start = clip.start_time
            new_trim = clip.trim_start

        self._check_interval(track_index, clip, new_start, new_duration, new_trim)

        clip.start_time = new_start
        clip.duration = new_duration
        clip.trim_start = new_trim
        self.state.tracks[track_index].sort_clips()
        return clip

    def split_clip(self, clip_id: int, at_time: float) -> Tuple[Clip, Clip]:
        """
        Split a clip in two at a timeline time.

        The original keeps its id and is shortened; the new clip covers
        the remainder with its trim advanced by the split offset.

        Raises:
            SplitRangeError: If at_time is within the guard band of an edge
        """
        clip, track_index = self.find_clip(clip_id)
        offset = at_time - clip.start_time

        if offset <= SPLIT_GUARD or offset >= clip.duration - SPLIT_GUARD:
            raise self._reject(SplitRangeError(clip_id, at_time, SPLIT_GUARD))

        second = clip.clone(self.state.clip_id_counter)
        second.start_time = at_time
        second.duration = clip.duration - offset
        second.trim_start = clip.trim_start + offset
        clip.duration = offset

        track = self.state.tracks[track_index]
        track.clips.append(second)
        track.sort_clips()
        self.state.clip_id_counter += 1
        return clip, second

    def duplicate_clip(self, clip_id: int) -> Clip:
        """Place a deep copy right after the original, separated by a fixed gap."""
        clip, track_index = self.find_clip(clip_id)
        twin = clip.clone(self.state.clip_id_counter)
        twin.start_time = clip.end_time + DUPLICATE_GAP

        if self.overlaps(track_index, None, twin.start_time, twin.duration):
            raise self._reject(OverlapError(track_index, twin.start_time, twin.duration))

        track = self.state.tracks[track_index]
        track.clips.append(twin)
        track.sort_clips()
        self.state.clip_id_counter += 1
        return twin

    def update_clip(self, clip_id: int, **changes) -> Clip:
        """
        Apply direct property edits atomically.

        The edited copy is validated as a whole; nothing is written
        unless every change is acceptable.
        """
        clip, track_index = self.find_clip(clip_id)

        forbidden = set(changes) & _LOCKED_FIELDS
        unknown = set(changes) - _CLIP_FIELDS
        if forbidden or unknown:
            bad = sorted(forbidden | unknown)
            raise self._reject(ValidationError(
                f"Cannot set clip properties: {', '.join(bad)}",
                code="unknown_property",
                details={"properties": bad},
            ))

        candidate = copy.deepcopy(clip)
        for name, value in copy.deepcopy(changes).items():
            setattr(candidate, name, value)

        self._check_properties(candidate)
        self._check_interval(
            track_index, candidate, candidate.start_time, candidate.duration, candidate.trim_start
        )

        track = self.state.tracks[track_index]
        track.clips[track.clips.index(clip)] = candidate
        track.sort_clips()
        return candidate

    def add_effect(self, clip_id: int, effect_type: EffectType, intensity: float = 100.0) -> Effect:
        """Append an effect to the end of a clip's effect chain."""
        clip, _ = self.find_clip(clip_id)
        if not clip.type.accepts_effects:
            raise self._reject(ValidationError(
                f"Effects cannot be applied to {clip.type.value} clips",
                code="effects_unsupported",
                details={"clip_id": clip_id},
            ))
        if not 0.0 <= intensity <= 100.0:
            raise self._reject(ValidationError(
                f"Effect intensity {intensity} is outside [0, 100]",
                code="invalid_properties",
                details={"intensity": intensity},
            ))
        effect = Effect(type=EffectType(effect_type), intensity=intensity)
        clip.effects.append(effect)
        return effect

    def remove_effect(self, clip_id: int, index: int) -> Effect:
        clip, _ = self.find_clip(clip_id)
        if not 0 <= index < len(clip.effects):
            raise self._reject(ValidationError(
                f"Clip {clip_id} has no effect at index {index}",
                code="effect_not_found",
                details={"clip_id": clip_id, "index": index},
            ))
        return clip.effects.pop(index)

    def set_transition(
        self,
        clip_id: int,
        transition: Optional[TransitionType],
        duration: float = DEFAULT_TRANSITION_DURATION,
    ) -> Clip:
        """Configure (or clear, with None) the boundary transition of a clip."""
        if transition is not None:
            transition = TransitionType(transition)
        return self.update_clip(clip_id, transition=transition, transition_duration=duration)

    # ------------------------------------------------------------------
    # Track operations
    # ------------------------------------------------------------------

    def add_track(self, name: Optional[str] = None, track_type: TrackType = TrackType.VIDEO) -> Track:
        """Append a track; it becomes the top-most layer."""
        index = len(self.state.tracks)
        track = Track(
            id=index,
            name=name or f"Track {index + 1}",
            type=TrackType(track_type),
        )
        self.state.tracks.append(track)
        return track

    def remove_track(self, track_index: int) -> Track:
        """Remove a track and every clip on it. The last track cannot be removed."""
        track = self.track(track_index)
        if len(self.state.tracks) <= 1:
            raise self._reject(ValidationError(
                "Cannot remove the only track",
                code="last_track",
                details={"track": track_index},
            ))
        self.state.tracks.pop(track_index)
        for index, remaining in enumerate(self.state.tracks):
            remaining.id = index
        return track

    def set_track_flags(
        self,
        track_index: int,
        muted: Optional[bool] = None,
        hidden: Optional[bool] = None,
        name: Optional[str] = None,
    ) -> Track:
        track = self.track(track_index)
        if muted is not None:
            track.muted = muted
        if hidden is not None:
            track.hidden = hidden
        if name:
            track.name = name
        return track

    # ------------------------------------------------------------------
    # View settings
    # ------------------------------------------------------------------

    def set_zoom(self, zoom: float) -> float:
        self.state.zoom = clamp(zoom, MIN_ZOOM, MAX_ZOOM)
        return self.state.zoom

    def set_snap_enabled(self, enabled: bool) -> None:
        self.snap_enabled = enabled

    def load_state(self, state: TimelineState) -> None:
        """Replace the edited model (undo/redo and project loading)."""
        self.state = state
