"""FastAPI dependency injection for the editing session."""

from functools import lru_cache

from packages.core.config import FrameCutConfig, get_config
from packages.timeline.session import EditingSession


def get_settings() -> FrameCutConfig:
    """Get the application configuration."""
    return get_config()


@lru_cache()
def get_session() -> EditingSession:
    """Get or create the editing session singleton."""
    return EditingSession(config=get_config())
