"""
Shared fixtures for API package tests.
"""

import os

# The app reads its config at import time; keep it away from the real data dir
os.environ.setdefault("FRAMECUT_ENV", "testing")

import numpy as np
import pytest
from fastapi.testclient import TestClient

from packages.core.config import Environment, FrameCutConfig, LogLevel
from packages.core.types import ClipType
from packages.timeline.session import EditingSession
from packages.video.media import MediaLibrary


@pytest.fixture
def test_config(tmp_path):
    """Testing config with projects and exports under tmp_path."""
    (tmp_path / "projects").mkdir()
    (tmp_path / "exports").mkdir()
    return FrameCutConfig(
        data_dir=tmp_path,
        projects_dir=tmp_path / "projects",
        exports_dir=tmp_path / "exports",
        env=Environment.TESTING,
        log_level=LogLevel.INFO,
        debug=False,
        fps=10.0,
        resolution=(32, 18),
        undo_limit=50,
        snap_pixels=5.0,
        api_host="localhost",
        api_port=8000,
        cors_origins=("*",),
    )


@pytest.fixture
def library():
    """A 4s green video (media_0) and a 6s audio file (media_1)."""
    lib = MediaLibrary()
    green = np.zeros((40, 18, 32, 3), dtype=np.uint8)
    green[..., 1] = 255
    lib.add_asset("green.mp4", ClipType.VIDEO, frames=green, fps=10.0)
    lib.add_asset("voice.wav", ClipType.AUDIO, duration=6.0)
    return lib


@pytest.fixture
def session(test_config, library):
    """Editing session that exports without real-time pacing."""
    return EditingSession(config=test_config, library=library, sleep=lambda _: None)


@pytest.fixture
def client(session, test_config):
    """TestClient bound to the test session and config."""
    from packages.api.dependencies import get_session, get_settings
    from packages.api.main import app

    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_settings] = lambda: test_config

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()
