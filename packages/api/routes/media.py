"""Media library and project file endpoint routes."""

from fastapi import APIRouter, Depends

from packages.core.config import FrameCutConfig
from packages.timeline.project import PROJECT_SUFFIX
from packages.timeline.session import EditingSession

from ..dependencies import get_session, get_settings
from ..schemas import (
    ErrorResponse,
    MediaImportRequest,
    MediaResponse,
    ProjectLoadResponse,
    ProjectRequest,
)


router = APIRouter(prefix="/api", tags=["media"])


@router.get("/media", response_model=list[MediaResponse], summary="List media assets")
async def list_media(session: EditingSession = Depends(get_session)):
    return [MediaResponse(**ref.to_dict()) for ref in session.library.refs()]


@router.post(
    "/media",
    status_code=201,
    response_model=MediaResponse,
    responses={422: {"model": ErrorResponse, "description": "File could not be imported"}},
    summary="Import a media file",
)
def import_media(
    request: MediaImportRequest,
    session: EditingSession = Depends(get_session),
):
    """Decode a file from the server filesystem into the media library."""
    asset = session.import_media(request.path)
    return MediaResponse(**asset.to_ref().to_dict())


@router.post(
    "/media/{asset_id}/clip",
    status_code=201,
    responses={404: {"model": ErrorResponse, "description": "Asset not found"}},
    summary="Append an asset to the timeline",
)
async def add_media_clip(
    asset_id: str,
    session: EditingSession = Depends(get_session),
):
    """Append the asset after the last clip on the first track of its kind."""
    return session.add_media_clip(asset_id).to_dict()


@router.delete(
    "/media/{asset_id}",
    response_model=MediaResponse,
    responses={404: {"model": ErrorResponse, "description": "Asset not found"}},
    summary="Remove a media asset",
)
async def remove_media(
    asset_id: str,
    session: EditingSession = Depends(get_session),
):
    """Remove an asset. Clips that use it stay on the timeline and render as empty."""
    return MediaResponse(**session.remove_media(asset_id).to_ref().to_dict())


# ============ Projects ============


def _project_path(config: FrameCutConfig, name: str):
    if not name.endswith(PROJECT_SUFFIX):
        name += PROJECT_SUFFIX
    return config.projects_dir / name


@router.post("/project/new", summary="Start a new project")
async def new_project(session: EditingSession = Depends(get_session)):
    session.new_project()
    return session.state.to_dict()


@router.post("/project/save", summary="Save the project")
def save_project(
    request: ProjectRequest,
    session: EditingSession = Depends(get_session),
    config: FrameCutConfig = Depends(get_settings),
):
    path = session.save_project(_project_path(config, request.name))
    return {"path": str(path)}


@router.post(
    "/project/load",
    response_model=ProjectLoadResponse,
    responses={422: {"model": ErrorResponse, "description": "Project could not be loaded"}},
    summary="Open a saved project",
)
def load_project(
    request: ProjectRequest,
    session: EditingSession = Depends(get_session),
    config: FrameCutConfig = Depends(get_settings),
):
    """Open a project; media that cannot be re-linked is listed in ``missing_media``."""
    session.load_project(_project_path(config, request.name), search_dirs=[config.data_dir])
    return ProjectLoadResponse(
        timeline=session.state.to_dict(),
        missing_media=[ref.id for ref in session.missing_media],
    )
