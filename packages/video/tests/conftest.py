"""
Shared fixtures for video package tests.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from packages.core.types import ClipType, TrackType
from packages.timeline.models import Clip, TimelineState, Track
from packages.video.media import MediaLibrary

WIDTH, HEIGHT = 16, 8


@pytest.fixture
def sample_frames():
    """Create sample video frames (10 frames, 8x16, RGB)."""
    return np.random.randint(0, 255, (10, HEIGHT, WIDTH, 3), dtype=np.uint8)


@pytest.fixture
def library():
    """red (media_0, 2s video), blue (media_1, image) and music (media_2, 10s audio)."""
    lib = MediaLibrary()
    red = np.zeros((20, HEIGHT, WIDTH, 3), dtype=np.uint8)
    red[..., 0] = 255
    blue = np.zeros((1, HEIGHT, WIDTH, 3), dtype=np.uint8)
    blue[..., 2] = 255
    lib.add_asset("red.mp4", ClipType.VIDEO, frames=red, fps=10.0)
    lib.add_asset("blue.png", ClipType.IMAGE, frames=blue)
    lib.add_asset("music.mp3", ClipType.AUDIO, duration=10.0)
    return lib


@pytest.fixture
def empty_state():
    return TimelineState(tracks=[
        Track(id=0, name="Video 1", type=TrackType.VIDEO),
        Track(id=1, name="Video 2", type=TrackType.VIDEO),
        Track(id=2, name="Audio 1", type=TrackType.AUDIO),
    ])


@pytest.fixture
def layered_state(empty_state):
    """red on the back track [0,2), blue on the front track [1,3)."""
    empty_state.tracks[0].clips.append(
        Clip(id=0, type=ClipType.VIDEO, asset_id="media_0", start_time=0, duration=2)
    )
    empty_state.tracks[1].clips.append(
        Clip(id=1, type=ClipType.IMAGE, asset_id="media_1", start_time=1, duration=2)
    )
    empty_state.clip_id_counter = 2
    return empty_state


@pytest.fixture
def mock_cv2_video_capture(mocker):
    """Mock cv2.VideoCapture for video loading tests."""
    mock_cap = MagicMock()
    mock_cap.isOpened.return_value = True
    mock_cap.get.return_value = 25.0  # FPS

    # Return 5 frames then stop
    frames = [np.random.randint(0, 255, (HEIGHT, WIDTH, 3), dtype=np.uint8) for _ in range(5)]
    read_returns = [(True, frame) for frame in frames] + [(False, None)]
    mock_cap.read.side_effect = read_returns

    mocker.patch('cv2.VideoCapture', return_value=mock_cap)
    return mock_cap


@pytest.fixture
def mock_ffmpeg(mocker):
    """Mock subprocess calls for ffmpeg."""
    mock_run = mocker.patch('subprocess.run')
    mock_run.return_value = MagicMock(returncode=0, stdout=b'', stderr=b'')

    mock_popen = mocker.patch('subprocess.Popen')
    process = MagicMock()
    process.returncode = 0
    process.stdin = MagicMock()
    process.stderr.read.return_value = b''
    mock_popen.return_value = process

    return mock_run, mock_popen
