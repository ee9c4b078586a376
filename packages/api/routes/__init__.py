"""API route modules."""

from .history import router as history_router
from .media import router as media_router
from .preview import router as preview_router
from .timeline import router as timeline_router

__all__ = ["timeline_router", "history_router", "media_router", "preview_router"]
