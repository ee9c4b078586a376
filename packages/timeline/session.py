"""
Editing Session - the one object that owns an editing project.

The session owns the timeline model, its editor, undo history, media
library, compositor, audio sync and playhead. Nothing else holds editor
state; callers pass the session around instead of relying on globals.

Every logical edit runs inside ``record()``: a snapshot is taken before
the edit and pushed onto the undo stack only if the edit commits.
"""

import logging
import time as _time
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Tuple

import numpy as np

from packages.core.config import FrameCutConfig, get_config
from packages.core.errors import AssetImportError, ProjectLoadError, ValidationError
from packages.core.protocols import EncoderSink
from packages.core.types import TRACK_FOR_CLIP, ClipType, EffectType, MediaRef, ResizeSide, TrackType, TransitionType
from packages.video.audio_sync import AudioSyncController
from packages.video.compositor import Compositor
from packages.video.exporter import ExportPipeline, ExportResult, ExportSettings, FFmpegEncoder
from packages.video.media import MediaAsset, MediaLibrary

from .editor import TimelineEditor
from .gestures import GestureController
from .history import HistoryManager
from .models import Clip, Effect, TextData, TimelineState, Track
from .project import ProjectDocument, load_project, relink_media, save_project

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_DURATION = 5.0
DEFAULT_TEXT_DURATION = 5.0


class EditingSession:
    """
    A single editing project and its playback state.

    Usage:
        session = EditingSession()
        asset = session.import_media("intro.mp4")
        clip = session.add_media_clip(asset.id)
        session.split_clip(clip.id, 2.0)
        session.undo()
    """

    def __init__(
        self,
        config: Optional[FrameCutConfig] = None,
        library: Optional[MediaLibrary] = None,
        state: Optional[TimelineState] = None,
        sleep: Callable[[float], None] = _time.sleep,
    ):
        self.config = config or get_config()
        self.library = library if library is not None else MediaLibrary()
        self.fps = self.config.fps
        self.current_time = 0.0
        self.playing = False
        self.missing_media: List[MediaRef] = []

        self.editor = TimelineEditor(
            state,
            assets=self.library,
            snap_pixels=self.config.snap_pixels,
            playhead=lambda: self.current_time,
        )
        self.history = HistoryManager(self.config.undo_limit)
        self.gestures = GestureController(self.editor, self.history)
        self.compositor = Compositor(self.library, resolution=self.config.resolution)
        self.audio_sync = AudioSyncController(self.library)
        self.pipeline = ExportPipeline(self.compositor, self.audio_sync, assets=self.library, sleep=sleep)

    @property
    def state(self) -> TimelineState:
        return self.editor.state

    @property
    def resolution(self) -> Tuple[int, int]:
        return self.compositor.settings.resolution

    @property
    def duration(self) -> float:
        return self.state.total_duration()

    # ============ History ============

    @contextmanager
    def record(self) -> Iterator[TimelineEditor]:
        """
        Wrap one logical edit.

        On success the pre-edit snapshot goes onto the undo stack; on
        failure the model is put back exactly as it was and the error
        propagates.
        """
        snapshot = self.state.copy()
        try:
            yield self.editor
        except Exception:
            self.editor.load_state(snapshot)
            raise
        self.history.push(snapshot)

    def undo(self) -> bool:
        """Returns False when there was nothing to undo."""
        self.gestures.cancel()
        restored = self.history.undo(self.state)
        if restored is None:
            return False
        self.editor.load_state(restored)
        self._resync()
        return True

    def redo(self) -> bool:
        self.gestures.cancel()
        restored = self.history.redo(self.state)
        if restored is None:
            return False
        self.editor.load_state(restored)
        self._resync()
        return True

    # ============ Edits ============

    def replace_timeline(self, state: TimelineState) -> None:
        """Swap in a whole model as one undoable edit."""
        self.gestures.cancel()
        with self.record() as editor:
            editor.validate_state(state)
            editor.load_state(state)
        self._resync()

    def add_clip(
        self,
        track_index: int,
        clip_type: ClipType,
        start_time: float = 0.0,
        duration: float = 5.0,
        **props,
    ) -> Clip:
        with self.record() as editor:
            return editor.add_clip(track_index, clip_type, start_time, duration, **props)

    def remove_clip(self, clip_id: int) -> Clip:
        with self.record() as editor:
            return editor.remove_clip(clip_id)

    def drag_clip(self, clip_id: int, start_time: float) -> Clip:
        with self.record() as editor:
            return editor.drag_clip(clip_id, start_time)

    def resize_clip(self, clip_id: int, side: ResizeSide, delta: float) -> Clip:
        with self.record() as editor:
            return editor.resize_clip(clip_id, side, delta)

    def split_clip(self, clip_id: int, at_time: float) -> Tuple[Clip, Clip]:
        with self.record() as editor:
            return editor.split_clip(clip_id, at_time)

    def split_at_playhead(self, clip_id: int) -> Tuple[Clip, Clip]:
        return self.split_clip(clip_id, self.current_time)

    def duplicate_clip(self, clip_id: int) -> Clip:
        with self.record() as editor:
            return editor.duplicate_clip(clip_id)

    def update_clip(self, clip_id: int, **changes) -> Clip:
        with self.record() as editor:
            return editor.update_clip(clip_id, **changes)

    def add_effect(self, clip_id: int, effect_type: EffectType, intensity: float = 100.0) -> Effect:
        with self.record() as editor:
            return editor.add_effect(clip_id, effect_type, intensity)

    def remove_effect(self, clip_id: int, index: int) -> Effect:
        with self.record() as editor:
            return editor.remove_effect(clip_id, index)

    def set_transition(
        self,
        clip_id: int,
        transition: Optional[TransitionType],
        duration: float = 0.5,
    ) -> Clip:
        with self.record() as editor:
            return editor.set_transition(clip_id, transition, duration)

    def add_track(self, name: Optional[str] = None, track_type: TrackType = TrackType.VIDEO) -> Track:
        with self.record() as editor:
            return editor.add_track(name, track_type)

    def remove_track(self, track_index: int) -> Track:
        with self.record() as editor:
            track = editor.remove_track(track_index)
        self._resync()
        return track

    def set_track_flags(
        self,
        track_index: int,
        muted: Optional[bool] = None,
        hidden: Optional[bool] = None,
        name: Optional[str] = None,
    ) -> Track:
        with self.record() as editor:
            track = editor.set_track_flags(track_index, muted=muted, hidden=hidden, name=name)
        self._resync()
        return track

    def _track_for(self, track_type: TrackType, name: str) -> int:
        """Index of the first track of a kind, adding one if there is none."""
        for index, track in enumerate(self.state.tracks):
            if track.type == track_type:
                return index
        self.editor.add_track(name, track_type)
        return len(self.state.tracks) - 1

    def add_media_clip(self, asset_id: str) -> Clip:
        """Append an imported asset to the end of the first matching track."""
        asset = self.library.get(asset_id)
        track_type = TRACK_FOR_CLIP[asset.type]
        duration = asset.duration or DEFAULT_IMAGE_DURATION

        with self.record() as editor:
            index = self._track_for(track_type, track_type.value.capitalize())
            return editor.add_clip(
                index,
                asset.type,
                start_time=editor.next_free_start(index),
                duration=duration,
                asset_id=asset.id,
                name=asset.name,
            )

    def add_text_clip(self, text: str = "Hello World", duration: float = DEFAULT_TEXT_DURATION, **style) -> Clip:
        """
        Add a text clip at the playhead, centred on the canvas.

        If the playhead position is taken, the clip goes after the last
        clip on the text track instead.
        """
        width, height = self.resolution
        style.setdefault("x", width / 2)
        style.setdefault("y", height / 2)
        text_data = TextData(text=text, **style)

        with self.record() as editor:
            index = self._track_for(TrackType.TEXT, "Text")
            start = self.current_time
            if editor.overlaps(index, None, start, duration):
                start = editor.next_free_start(index)
            return editor.add_clip(
                index,
                ClipType.TEXT,
                start_time=start,
                duration=duration,
                name=text[:20],
                text_data=text_data,
            )

    # ============ Playback ============

    @property
    def is_playing(self) -> bool:
        return self.playing

    def set_playing(self, playing: bool) -> None:
        if playing:
            self.play()
        else:
            self.pause()

    def play(self) -> None:
        if self.current_time >= self.duration:
            self.current_time = 0.0
        self.playing = True
        self.audio_sync.update(self.state, self.current_time, playing=True, force_seek=True)

    def pause(self) -> None:
        self.playing = False
        self.audio_sync.stop_all(self.state)

    def stop(self) -> None:
        self.pause()
        self.seek(0.0)

    def seek(self, time: float) -> float:
        self.current_time = max(0.0, time)
        self.audio_sync.seek(self.state, self.current_time, playing=self.playing)
        return self.current_time

    def tick(self, dt: float) -> float:
        """
        Advance the preview clock by dt seconds of real time.

        Playback stops at the end of the timeline.
        """
        if not self.playing:
            return self.current_time
        self.library.advance(dt)
        self.current_time += dt
        if self.current_time >= self.duration:
            self.current_time = self.duration
            self.pause()
            return self.current_time
        self.audio_sync.update(self.state, self.current_time, playing=True)
        return self.current_time

    def render_preview(self, time: Optional[float] = None) -> np.ndarray:
        return self.compositor.render(self.state, self.current_time if time is None else time)

    def _resync(self) -> None:
        """Re-evaluate every transport after a discontinuous model change."""
        self.audio_sync.seek(self.state, self.current_time, playing=self.playing)

    # ============ Media & projects ============

    def import_media(self, path) -> MediaAsset:
        return self.library.import_file(path)

    def remove_media(self, asset_id: str) -> MediaAsset:
        """Drop an asset; clips that use it stay and are skipped when rendering."""
        return self.library.remove(asset_id)

    def new_project(self) -> None:
        self.gestures.cancel()
        self.pause()
        self.library.clear()
        self.editor.load_state(TimelineState.default())
        self.history.clear()
        self.current_time = 0.0
        self.missing_media = []

    def save_project(self, path) -> Path:
        document = ProjectDocument(
            timeline=self.state.copy(),
            media=self.library.refs(),
            resolution=self.resolution,
            fps=self.fps,
        )
        return save_project(Path(path), document)

    def load_project(self, path, search_dirs: Iterable[Path] = ()) -> ProjectDocument:
        """
        Replace the session contents with a saved project.

        Media is re-linked by stored path, then by file name in
        ``search_dirs`` and the project's own directory. References that
        cannot be resolved end up in ``missing_media``.
        """
        path = Path(path)
        document = load_project(path)
        try:
            self.editor.validate_state(document.timeline, check_assets=False)
        except ValidationError as e:
            raise ProjectLoadError(str(path), e.message) from e

        self.gestures.cancel()
        self.pause()
        self.library.clear()
        resolved, missing = relink_media(document.media, [*search_dirs, path.parent])
        for ref in resolved:
            try:
                self.library.import_file(ref.path, asset_id=ref.id)
            except AssetImportError as e:
                logger.warning("Could not re-import %s: %s", ref.id, e.message)
                missing.append(ref)

        self.editor.load_state(document.timeline)
        self.history.clear()
        self.fps = document.fps
        self.compositor.settings.resolution = document.resolution
        self.current_time = 0.0
        self.missing_media = missing
        return document

    def export(
        self,
        output_path,
        settings: Optional[ExportSettings] = None,
        encoder: Optional[EncoderSink] = None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> ExportResult:
        """Export the timeline; defaults to the ffmpeg encoder at the session fps and size."""
        settings = settings or ExportSettings(fps=self.fps, resolution=self.resolution)
        if encoder is None:
            encoder = FFmpegEncoder(output_path, settings)
        return self.pipeline.run(self.state, encoder, settings, player=self, on_progress=on_progress)
