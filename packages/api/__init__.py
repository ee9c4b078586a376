"""FrameCut API package - REST endpoints for timeline editing and export."""

from .main import app
from .schemas import (
    ClipCreateRequest,
    ErrorResponse,
    ExportRequest,
    ExportResponse,
    HealthResponse,
    HistoryResponse,
)

__all__ = [
    "app",
    "ClipCreateRequest",
    "ExportRequest",
    "ExportResponse",
    "HistoryResponse",
    "ErrorResponse",
    "HealthResponse",
]
