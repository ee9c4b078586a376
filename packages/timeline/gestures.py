"""
Gesture state machine for interactive drag and resize.

Idle -> Dragging | Resizing -> Idle. Exactly one gesture may be active.
Pointer deltas are always relative to the press position, so a gesture
can be replayed from any input source.
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from packages.core.errors import GestureError, ValidationError
from packages.core.types import ResizeSide

from .editor import TimelineEditor
from .history import HistoryManager
from .models import TimelineState

logger = logging.getLogger(__name__)


class GestureState(Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class GestureController:
    """Modal drag/resize of one clip, committing a single history entry."""

    def __init__(self, editor: TimelineEditor, history: HistoryManager):
        self.editor = editor
        self.history = history
        self.state = GestureState.IDLE
        self.clip_id: Optional[int] = None
        self.side: Optional[ResizeSide] = None
        self._snapshot: Optional[TimelineState] = None
        self._pressed: Optional[Tuple[float, float, float]] = None

    @property
    def active(self) -> bool:
        return self.state != GestureState.IDLE

    def _geometry(self) -> Tuple[float, float, float]:
        clip, _ = self.editor.find_clip(self.clip_id)
        return clip.start_time, clip.duration, clip.trim_start

    def _restore(self, geometry: Tuple[float, float, float]) -> None:
        clip, track_index = self.editor.find_clip(self.clip_id)
        clip.start_time, clip.duration, clip.trim_start = geometry
        self.editor.state.tracks[track_index].sort_clips()

    def _begin(self, clip_id: int, state: GestureState) -> None:
        if self.active:
            raise GestureError(f"a {self.state.value} gesture is already active")
        self.editor.find_clip(clip_id)  # raises if unknown
        self.clip_id = clip_id
        self.state = state
        self._snapshot = self.editor.state.copy()
        self._pressed = self._geometry()

    def begin_drag(self, clip_id: int) -> None:
        self._begin(clip_id, GestureState.DRAGGING)

    def begin_resize(self, clip_id: int, side: ResizeSide) -> None:
        self._begin(clip_id, GestureState.RESIZING)
        self.side = ResizeSide(side)

    def update(self, delta: float) -> bool:
        """
        Apply a pointer movement of ``delta`` seconds since the press.

        Returns:
            True if the new position was accepted; on rejection the clip
            keeps its last valid geometry
        """
        if not self.active:
            raise GestureError("no gesture in progress")

        last_valid = self._geometry()
        try:
            if self.state == GestureState.DRAGGING:
                self.editor.drag_clip(self.clip_id, self._pressed[0] + delta)
            else:
                self._restore(self._pressed)
                self.editor.resize_clip(self.clip_id, self.side, delta)
        except ValidationError:
            self._restore(last_valid)
            return False
        return True

    def end(self) -> bool:
        """
        Release the gesture.

        Returns:
            True if the clip moved and a history entry was recorded
        """
        if not self.active:
            raise GestureError("no gesture in progress")
        changed = self._geometry() != self._pressed
        if changed:
            self.history.push(self._snapshot)
            logger.debug("Committed %s of clip %s", self.state.value, self.clip_id)
        self._reset()
        return changed

    def cancel(self) -> None:
        """Abandon the gesture and put the clip back where it was pressed."""
        if not self.active:
            return
        self._restore(self._pressed)
        self._reset()

    def _reset(self) -> None:
        self.state = GestureState.IDLE
        self.clip_id = None
        self.side = None
        self._snapshot = None
        self._pressed = None
