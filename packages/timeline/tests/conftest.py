"""
Shared fixtures for timeline package tests.
"""

import numpy as np
import pytest

from packages.core.config import Environment, FrameCutConfig, LogLevel
from packages.core.types import ClipType, TrackType
from packages.timeline.editor import TimelineEditor
from packages.timeline.models import TimelineState, Track
from packages.video.media import MediaLibrary


@pytest.fixture
def test_config(tmp_path):
    """Testing config rooted in tmp_path (no directories are created)."""
    return FrameCutConfig(
        data_dir=tmp_path,
        projects_dir=tmp_path / "projects",
        exports_dir=tmp_path / "exports",
        env=Environment.TESTING,
        log_level=LogLevel.INFO,
        debug=False,
        fps=10.0,
        resolution=(64, 36),
        undo_limit=50,
        snap_pixels=5.0,
        api_host="localhost",
        api_port=8000,
        cors_origins=("*",),
    )


@pytest.fixture
def library():
    """Library with a 10s video (media_0), a 20s audio track (media_1) and an image (media_2)."""
    lib = MediaLibrary()
    frames = np.zeros((100, 36, 64, 3), dtype=np.uint8)
    lib.add_asset("intro.mp4", ClipType.VIDEO, frames=frames, fps=10.0)
    lib.add_asset("music.mp3", ClipType.AUDIO, duration=20.0)
    lib.add_asset("logo.png", ClipType.IMAGE, frames=np.full((1, 36, 64, 3), 200, dtype=np.uint8))
    return lib


@pytest.fixture
def state():
    """Two video tracks, a text track and an audio track, all empty."""
    return TimelineState.default()


@pytest.fixture
def editor(state, library):
    """Editor with snapping disabled so positions are exact."""
    ed = TimelineEditor(state, assets=library)
    ed.set_snap_enabled(False)
    return ed


@pytest.fixture
def single_track_state():
    return TimelineState(tracks=[Track(id=0, name="Video 1", type=TrackType.VIDEO)])
