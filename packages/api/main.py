"""FrameCut API - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from packages.core.config import get_config
from packages.core.errors import (
    AssetNotFoundError,
    ClipNotFoundError,
    ExportError,
    ExportInProgressError,
    FrameCutError,
    MediaError,
    OverlapError,
    StorageError,
    TimelineError,
    TrackNotFoundError,
)
from packages.core.log import configure_logging
from packages.core.utils import ensure_dir

from .routes import history_router, media_router, preview_router, timeline_router
from .schemas import HealthResponse

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

# Most specific first
_STATUS_CODES = [
    ((ClipNotFoundError, TrackNotFoundError, AssetNotFoundError), 404),
    ((OverlapError, ExportInProgressError), 409),
    ((TimelineError, MediaError, StorageError), 422),
    ((ExportError,), 500),
]


def status_for(error: FrameCutError) -> int:
    """HTTP status for a domain error."""
    for types, status in _STATUS_CODES:
        if isinstance(error, types):
            return status
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    config = get_config()
    configure_logging(config.log_level)
    logger.info("FrameCut API starting (%s)", config.env.value)
    logger.info("Projects directory: %s", config.projects_dir)
    logger.info("Exports directory: %s", config.exports_dir)

    ensure_dir(config.projects_dir)
    ensure_dir(config.exports_dir)

    yield

    # Shutdown
    logger.info("FrameCut API shutting down")


app = FastAPI(
    title="FrameCut API",
    description="REST API for multi-track timeline editing, preview and export",
    version=API_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
config = get_config()
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(timeline_router)
app.include_router(history_router)
app.include_router(media_router)
app.include_router(preview_router)


@app.exception_handler(FrameCutError)
async def framecut_error_handler(request: Request, exc: FrameCutError):
    """Render domain errors in the same shape as HTTPException details."""
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content={"detail": exc.to_dict()})


@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Check if the API is healthy and all services are running."""
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        services={
            "api": "running",
            "timeline": "available",
            "compositor": "available",
            "export": "available",
        },
    )


@app.get("/", include_in_schema=False)
async def root():
    """Point the root at the API documentation."""
    return {
        "message": f"FrameCut API v{API_VERSION}",
        "docs": "/docs",
        "health": "/api/health",
    }
