"""Timeline package - data model, geometry engine, history and gestures.

The editing session lives in ``packages.timeline.session`` and is not
re-exported here, since it pulls in the video package:

    from packages.timeline.session import EditingSession
"""

from .editor import TimelineEditor
from .gestures import GestureController, GestureState
from .history import HistoryManager
from .models import (
    DEFAULT_TRANSITION_DURATION,
    DEFAULT_ZOOM,
    MIN_CLIP_DURATION,
    Clip,
    Effect,
    TextData,
    TimelineState,
    Track,
)
from .project import ProjectDocument, load_project, relink_media, save_project

__all__ = [
    # Model
    "Clip",
    "Effect",
    "TextData",
    "Track",
    "TimelineState",
    "MIN_CLIP_DURATION",
    "DEFAULT_TRANSITION_DURATION",
    "DEFAULT_ZOOM",
    # Editing
    "TimelineEditor",
    "HistoryManager",
    "GestureController",
    "GestureState",
    # Projects
    "ProjectDocument",
    "save_project",
    "load_project",
    "relink_media",
]
