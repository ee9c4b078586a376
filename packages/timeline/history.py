"""
History Manager - bounded undo/redo of full timeline snapshots.

Snapshots are independent deep copies. The manager never holds a
reference into the live model, and it never decides when a snapshot is
taken; callers push before each logical edit.
"""

import logging
from collections import deque
from typing import Deque, Optional

from .models import TimelineState

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class HistoryManager:
    """
    Two bounded stacks of TimelineState snapshots.

    Usage:
        history = HistoryManager()
        history.push(state)            # before an edit
        state = history.undo(state)    # returns the restored state
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError(f"History capacity must be positive, got {capacity}")
        self.capacity = capacity
        # maxlen drops the oldest entry on overflow
        self._undo: Deque[TimelineState] = deque(maxlen=capacity)
        self._redo: Deque[TimelineState] = deque(maxlen=capacity)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def push(self, state: TimelineState) -> None:
        """Record a pre-edit snapshot and invalidate the redo stack."""
        self._undo.append(state.copy())
        self._redo.clear()

    def undo(self, current: TimelineState) -> Optional[TimelineState]:
        """
        Step back one edit.

        Args:
            current: The live state, saved onto the redo stack

        Returns:
            The restored state, or None when there is nothing to undo
        """
        if not self._undo:
            return None
        self._redo.append(current.copy())
        restored = self._undo.pop()
        logger.debug("Undo (%d left)", len(self._undo))
        return restored

    def redo(self, current: TimelineState) -> Optional[TimelineState]:
        """Step forward one undone edit; None when there is nothing to redo."""
        if not self._redo:
            return None
        self._undo.append(current.copy())
        restored = self._redo.pop()
        logger.debug("Redo (%d left)", len(self._redo))
        return restored

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
