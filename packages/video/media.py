"""
Media Library - Import, decode, and serve media assets to the editor.
"""

import logging
import math
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import cv2
import numpy as np

from packages.core.errors import AssetImportError, AssetNotFoundError, SampleDecodeError
from packages.core.types import ClipType, MediaRef

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".webm", ".mov", ".avi", ".mkv", ".m4v"}
AUDIO_EXTENSIONS = {".mp3", ".wav", ".ogg", ".m4a", ".aac", ".flac"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".webp"}

_ID_PATTERN = re.compile(r"^media_(\d+)$")


class MediaTransport:
    """
    Playback transport of one audio-capable asset.

    Position only advances while playing; reaching the end of a known
    duration pauses the transport.
    """

    def __init__(self, duration: Optional[float] = None):
        self.duration = duration
        self.position = 0.0
        self.volume = 1.0
        self._paused = True

    @property
    def paused(self) -> bool:
        return self._paused

    def play(self) -> None:
        self._paused = False

    def pause(self) -> None:
        self._paused = True

    def advance(self, dt: float) -> None:
        if self._paused:
            return
        self.position += dt
        if self.duration is not None and self.position >= self.duration:
            self.position = self.duration
            self._paused = True


@dataclass
class MediaAsset:
    """A decoded media asset held by the library."""

    id: str
    name: str
    type: ClipType
    path: str = ""
    frames: Optional[np.ndarray] = None  # (num_frames, height, width, 3), RGB
    fps: float = 30.0
    duration: Optional[float] = None
    transport: Optional[MediaTransport] = None

    @property
    def num_frames(self) -> int:
        return 0 if self.frames is None else len(self.frames)

    @property
    def resolution(self) -> Tuple[int, int]:
        """Returns (width, height)."""
        if self.num_frames == 0:
            return (0, 0)
        return (self.frames.shape[2], self.frames.shape[1])

    def frame_at(self, media_time: float) -> np.ndarray:
        """Frame shown at a media time, clamped to the first and last frame."""
        if self.num_frames == 0:
            raise SampleDecodeError(self.id, media_time, "asset has no visual frames")
        if self.type == ClipType.IMAGE:
            return self.frames[0]
        index = int(math.floor(media_time * self.fps + 1e-6))
        index = max(0, min(index, self.num_frames - 1))
        return self.frames[index]

    def to_ref(self) -> MediaRef:
        return MediaRef(
            id=self.id,
            name=self.name,
            type=self.type.value,
            path=self.path,
            duration=self.duration,
        )


def classify(path: Path) -> ClipType:
    """Clip kind for a media file, by extension."""
    ext = Path(path).suffix.lower()
    if ext in VIDEO_EXTENSIONS:
        return ClipType.VIDEO
    if ext in AUDIO_EXTENSIONS:
        return ClipType.AUDIO
    if ext in IMAGE_EXTENSIONS:
        return ClipType.IMAGE
    raise AssetImportError(str(path), f"unsupported file type '{ext or path}'")


def probe_duration(path: Path) -> Optional[float]:
    """Container duration via ffprobe, or None when it cannot be read."""
    try:
        result = subprocess.run(
            [
                "ffprobe", "-v", "error",
                "-show_entries", "format=duration",
                "-of", "default=noprint_wrappers=1:nokey=1",
                str(path),
            ],
            capture_output=True,
            timeout=10,
        )
    except (subprocess.SubprocessError, FileNotFoundError):
        return None
    if result.returncode != 0:
        return None
    try:
        return float(result.stdout.decode().strip())
    except ValueError:
        return None


class MediaLibrary:
    """
    Asset source for the editor, decoding with OpenCV.

    Usage:
        library = MediaLibrary()
        asset = library.import_file("intro.mp4")
        frame = library.get_sample(asset.id, 1.5)
    """

    def __init__(self):
        self._assets: Dict[str, MediaAsset] = {}
        self._counter = 0

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, asset_id: str) -> bool:
        return asset_id in self._assets

    def __iter__(self) -> Iterator[MediaAsset]:
        return iter(list(self._assets.values()))

    def _next_id(self) -> str:
        asset_id = f"media_{self._counter}"
        self._counter += 1
        return asset_id

    def _claim_id(self, asset_id: str) -> None:
        """Keep generated ids clear of an explicitly supplied one."""
        match = _ID_PATTERN.match(asset_id)
        if match:
            self._counter = max(self._counter, int(match.group(1)) + 1)

    def _load_video(self, path: Path) -> Tuple[np.ndarray, float]:
        """Load video frames from file."""
        cap = cv2.VideoCapture(str(path))

        if not cap.isOpened():
            raise AssetImportError(str(path), "could not open video")

        fps = cap.get(cv2.CAP_PROP_FPS) or 30.0
        frames = []

        while True:
            ret, frame = cap.read()
            if not ret:
                break
            # Convert BGR to RGB
            frames.append(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))

        cap.release()

        if not frames:
            raise AssetImportError(str(path), "no frames could be decoded")

        return np.array(frames), fps

    def _load_image(self, path: Path) -> np.ndarray:
        image = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if image is None:
            raise AssetImportError(str(path), "could not decode image")
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)[np.newaxis, ...]

    def import_file(self, path, asset_id: Optional[str] = None) -> MediaAsset:
        """
        Import a media file.

        Args:
            path: File to import
            asset_id: Keep this id (re-linking a saved project)

        Returns:
            The registered MediaAsset

        Raises:
            AssetImportError: If the file is missing or cannot be decoded;
                the library is left unchanged
        """
        path = Path(path)
        if not path.is_file():
            raise AssetImportError(str(path), "file not found")

        clip_type = classify(path)

        if clip_type == ClipType.VIDEO:
            frames, fps = self._load_video(path)
            asset = MediaAsset(
                id="", name=path.name, type=clip_type, path=str(path),
                frames=frames, fps=fps, duration=len(frames) / fps,
            )
        elif clip_type == ClipType.IMAGE:
            asset = MediaAsset(
                id="", name=path.name, type=clip_type, path=str(path),
                frames=self._load_image(path),
            )
        else:
            asset = MediaAsset(
                id="", name=path.name, type=clip_type, path=str(path),
                duration=probe_duration(path),
            )

        return self._register(asset, asset_id)

    def add_asset(
        self,
        name: str,
        clip_type: ClipType,
        frames: Optional[np.ndarray] = None,
        fps: float = 30.0,
        duration: Optional[float] = None,
        asset_id: Optional[str] = None,
    ) -> MediaAsset:
        """Register already-decoded media (generated or in-memory content)."""
        clip_type = ClipType(clip_type)
        if duration is None and clip_type == ClipType.VIDEO and frames is not None:
            duration = len(frames) / fps
        asset = MediaAsset(
            id="", name=name, type=clip_type, frames=frames, fps=fps, duration=duration,
        )
        return self._register(asset, asset_id)

    def _register(self, asset: MediaAsset, asset_id: Optional[str]) -> MediaAsset:
        if asset_id:
            self._claim_id(asset_id)
            asset.id = asset_id
        else:
            asset.id = self._next_id()
        if asset.type.is_audible:
            asset.transport = MediaTransport(asset.duration)
        self._assets[asset.id] = asset
        logger.info("Imported %s %s as %s", asset.type.value, asset.name, asset.id)
        return asset

    def get(self, asset_id: str) -> MediaAsset:
        try:
            return self._assets[asset_id]
        except KeyError:
            raise AssetNotFoundError(asset_id)

    def remove(self, asset_id: str) -> MediaAsset:
        asset = self.get(asset_id)
        if asset.transport is not None:
            asset.transport.pause()
        return self._assets.pop(asset_id)

    def clear(self) -> None:
        for asset in self._assets.values():
            if asset.transport is not None:
                asset.transport.pause()
        self._assets.clear()
        self._counter = 0

    # ============ Asset source ============

    def get_sample(self, asset_id: str, media_time: float) -> np.ndarray:
        return self.get(asset_id).frame_at(media_time)

    def get_duration(self, asset_id: str) -> Optional[float]:
        return self.get(asset_id).duration

    def get_transport(self, asset_id: str) -> Optional[MediaTransport]:
        return self.get(asset_id).transport

    def advance(self, dt: float) -> None:
        """Advance every playing transport by dt seconds."""
        for asset in self._assets.values():
            if asset.transport is not None:
                asset.transport.advance(dt)

    def refs(self) -> List[MediaRef]:
        return [asset.to_ref() for asset in self._assets.values()]
