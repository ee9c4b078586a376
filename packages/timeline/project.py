"""
Project documents: save, load and media re-linking.

A project stores the timeline structure plus references to its media.
Binary content is never embedded; on load each reference is resolved by
its stored path, then by file name inside the search directories.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Iterable, List, Tuple

from packages.core.errors import ProjectLoadError, StorageError
from packages.core.types import MediaRef
from packages.core.utils import now_iso, safe_json_save

from .models import TimelineState

logger = logging.getLogger(__name__)

PROJECT_VERSION = "1.0"
PROJECT_SUFFIX = ".json"


@dataclass
class ProjectDocument:
    """Everything needed to reopen an editing session."""
    timeline: TimelineState
    media: List[MediaRef] = field(default_factory=list)
    resolution: Tuple[int, int] = (1280, 720)
    fps: float = 30.0
    version: str = PROJECT_VERSION
    saved_at: str = ""

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "savedAt": self.saved_at,
            "resolution": {"width": self.resolution[0], "height": self.resolution[1]},
            "fps": self.fps,
            "timeline": self.timeline.to_dict(),
            "media": [ref.to_dict() for ref in self.media],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectDocument":
        resolution = data.get("resolution") or {}
        return cls(
            timeline=TimelineState.from_dict(data["timeline"]),
            media=[MediaRef.from_dict(m) for m in data.get("media", [])],
            resolution=(int(resolution.get("width", 1280)), int(resolution.get("height", 720))),
            fps=float(data.get("fps", 30.0)),
            version=str(data.get("version", PROJECT_VERSION)),
            saved_at=str(data.get("savedAt", "")),
        )


def save_project(path: Path, document: ProjectDocument) -> Path:
    """
    Write a project document as JSON.

    Raises:
        StorageError: If the file cannot be written
    """
    path = Path(path)
    document = replace(document, saved_at=now_iso())
    if not safe_json_save(path, document.to_dict()):
        raise StorageError("save", str(path), "could not write project file")
    logger.info("Saved project to %s", path)
    return path


def _validate(data, path: Path) -> None:
    if not isinstance(data, dict):
        raise ProjectLoadError(str(path), "document is not a JSON object")
    timeline = data.get("timeline")
    if not isinstance(timeline, dict) or not isinstance(timeline.get("tracks"), list):
        raise ProjectLoadError(str(path), "missing timeline tracks")
    if not isinstance(data.get("media", []), list):
        raise ProjectLoadError(str(path), "media must be a list")


def load_project(path: Path) -> ProjectDocument:
    """
    Read and validate a project document.

    Raises:
        ProjectLoadError: If the file is missing, not JSON, or malformed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ProjectLoadError(str(path), "file not found")
    except json.JSONDecodeError as e:
        raise ProjectLoadError(str(path), f"invalid JSON: {e}")

    _validate(data, path)
    try:
        document = ProjectDocument.from_dict(data)
    except (KeyError, TypeError, ValueError) as e:
        raise ProjectLoadError(str(path), f"malformed timeline: {e}")

    logger.info("Loaded project %s (%d tracks)", path, len(document.timeline.tracks))
    return document


def relink_media(
    refs: Iterable[MediaRef],
    search_dirs: Iterable[Path] = (),
) -> Tuple[List[MediaRef], List[MediaRef]]:
    """
    Resolve media references against the filesystem.

    Args:
        refs: References stored in the project
        search_dirs: Directories searched by file name when a stored path is gone

    Returns:
        (resolved, missing); resolved references carry the path that was found
    """
    search_dirs = [Path(d) for d in search_dirs]
    resolved, missing = [], []

    for ref in refs:
        if ref.path and Path(ref.path).is_file():
            resolved.append(ref)
            continue

        name = ref.name or Path(ref.path).name
        found = next(
            (d / name for d in search_dirs if name and (d / name).is_file()),
            None,
        )
        if found is not None:
            resolved.append(replace(ref, path=str(found)))
        else:
            logger.warning("Media %s (%s) could not be re-linked", ref.id, name)
            missing.append(ref)

    return resolved, missing
