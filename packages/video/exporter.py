"""
Exporter - Drive the timeline on a virtual clock into a live-capture encoder.
"""

import logging
import os
import platform
import subprocess
import threading
import time as _time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional, Tuple

import cv2
import numpy as np

from packages.core.errors import EncoderError, ExportError, ExportInProgressError
from packages.core.protocols import AssetSource, EncoderSink
from packages.core.utils import format_duration, frame_count
from packages.timeline.models import TimelineState

from .audio_sync import AudioCaptureGraph, AudioSyncController
from .compositor import Compositor

logger = logging.getLogger(__name__)


class ExportFormat(Enum):
    """Supported export formats."""
    MP4 = "mp4"
    WEBM = "webm"


@dataclass
class ExportSettings:
    """Settings for video export."""
    format: ExportFormat = ExportFormat.MP4
    fps: float = 30.0
    resolution: Tuple[int, int] = (1280, 720)  # (width, height)
    quality: int = 23  # CRF for H.264/VP9 (lower = better, 0-51)
    include_audio: bool = True
    use_hwaccel: bool = False  # Use hardware acceleration
    hwaccel_type: str = "auto"  # "cuda", "videotoolbox", "vaapi", "auto"


@dataclass
class ExportResult:
    """Outcome of a finished export."""
    output: Any  # whatever the encoder produced, a Path for FFmpegEncoder
    frames_rendered: int
    duration: float
    format: ExportFormat

    def to_dict(self) -> dict:
        return {
            "output": str(self.output),
            "frames_rendered": self.frames_rendered,
            "duration": self.duration,
            "format": self.format.value,
        }


class LiveCapture:
    """
    Latest-frame slot shared by the render loop and the encoder.

    The render loop publishes; the encoder samples whatever is current
    on its own schedule.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._frame: Optional[np.ndarray] = None
        self._time = 0.0
        self.frames_published = 0

    def publish(self, frame: np.ndarray, time: float) -> None:
        with self._lock:
            self._frame = frame
            self._time = time
            self.frames_published += 1

    def latest(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._frame

    @property
    def time(self) -> float:
        with self._lock:
            return self._time


# ============ ffmpeg encoder ============


def check_ffmpeg() -> None:
    """Verify ffmpeg is available."""
    try:
        subprocess.run(
            ["ffmpeg", "-version"],
            capture_output=True,
            check=True
        )
    except (subprocess.CalledProcessError, FileNotFoundError):
        raise EncoderError("ffmpeg not found. Please install ffmpeg.")


def _detect_hwaccel() -> str:
    """Detect available hardware acceleration."""
    # Check for NVIDIA CUDA
    try:
        result = subprocess.run(
            ["nvidia-smi"],
            capture_output=True,
            timeout=5
        )
        if result.returncode == 0:
            return "cuda"
    except (subprocess.SubprocessError, FileNotFoundError):
        pass

    if platform.system() == "Darwin":
        return "videotoolbox"

    if os.path.exists("/dev/dri"):
        return "vaapi"

    return ""


_H264_ENCODERS = {
    "cuda": "h264_nvenc",
    "videotoolbox": "h264_videotoolbox",
    "vaapi": "h264_vaapi",
}


class FFmpegEncoder:
    """
    Encoder sink that samples a LiveCapture into an ffmpeg pipe.

    A background thread reads the capture once per frame interval and
    writes raw RGB frames to ffmpeg's stdin. Audio is not muxed.

    Usage:
        encoder = FFmpegEncoder("out.mp4", settings)
        encoder.start(capture, graph, fps=30, resolution=(1280, 720))
        ...
        path = encoder.stop()
    """

    def __init__(self, output_path, settings: Optional[ExportSettings] = None):
        self.settings = settings or ExportSettings()
        self.output_path = self._resolve_path(Path(output_path))
        self.frames_written = 0
        self._process: Optional[subprocess.Popen] = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()
        self._capture = None
        self._audio = None
        self._fps = self.settings.fps
        self._resolution = self.settings.resolution
        self._error: Optional[Exception] = None
        # Set once ffmpeg has opened output_path
        self._owns_output = False

    def _resolve_path(self, path: Path) -> Path:
        """Match the file suffix to the export format."""
        ext = path.suffix.lower().lstrip(".")
        if ext in ("mp4", "m4v"):
            self.settings.format = ExportFormat.MP4
            return path
        if ext == "webm":
            self.settings.format = ExportFormat.WEBM
            return path
        return path.with_suffix(f".{self.settings.format.value}")

    def _hwaccel(self) -> str:
        hwaccel = self.settings.hwaccel_type
        if hwaccel == "auto":
            hwaccel = _detect_hwaccel()
        return hwaccel

    def build_command(self, fps: float, resolution: Tuple[int, int]) -> list:
        """ffmpeg command line reading raw RGB frames from stdin."""
        width, height = resolution
        cmd = ["ffmpeg", "-y"]  # -y overwrites output

        hwaccel = self._hwaccel() if self.settings.use_hwaccel else ""
        if hwaccel in _H264_ENCODERS:
            cmd.extend(["-hwaccel", hwaccel])

        cmd.extend([
            "-f", "rawvideo",
            "-vcodec", "rawvideo",
            "-pix_fmt", "rgb24",
            "-s", f"{width}x{height}",
            "-r", str(fps),
            "-i", "-"  # Read from pipe
        ])

        if self.settings.format == ExportFormat.MP4:
            cmd.extend([
                "-c:v", _H264_ENCODERS.get(hwaccel, "libx264"),
                "-crf", str(self.settings.quality),
                "-preset", "medium",
                "-pix_fmt", "yuv420p",
                "-movflags", "+faststart"
            ])
        else:
            cmd.extend([
                "-c:v", "libvpx-vp9",
                "-crf", str(self.settings.quality),
                "-b:v", "0",
                "-pix_fmt", "yuv420p"
            ])

        cmd.append(str(self.output_path))
        return cmd

    def start(self, capture, audio, fps: float, resolution: Tuple[int, int]) -> None:
        if self._process is not None:
            raise EncoderError("encoder already started", str(self.output_path))
        check_ffmpeg()

        self._capture = capture
        self._audio = audio
        self._fps = fps
        self._resolution = resolution
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            self._process = subprocess.Popen(
                self.build_command(fps, resolution),
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE
            )
        except OSError as e:
            raise EncoderError(f"could not start ffmpeg: {e}", str(self.output_path))
        self._owns_output = True

        self._stop.clear()
        self._thread = threading.Thread(target=self._pump, name="ffmpeg-encoder", daemon=True)
        self._thread.start()
        logger.info("Encoding %s at %sfps %dx%d", self.output_path, fps, *resolution)

    def _pump(self) -> None:
        """Sample the capture once per frame interval."""
        interval = 1.0 / self._fps
        width, height = self._resolution
        while not self._stop.is_set():
            frame = self._capture.latest()
            if frame is not None:
                if frame.shape[1] != width or frame.shape[0] != height:
                    frame = cv2.resize(frame, (width, height), interpolation=cv2.INTER_LINEAR)
                try:
                    self._process.stdin.write(np.ascontiguousarray(frame, dtype=np.uint8).tobytes())
                except (BrokenPipeError, OSError, ValueError) as e:
                    # ffmpeg may close early on error
                    self._error = e
                    return
                self.frames_written += 1
            self._stop.wait(interval)

    def _join(self) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def stop(self) -> Path:
        """Flush, wait for ffmpeg and return the output path."""
        if self._process is None:
            raise EncoderError("encoder was never started", str(self.output_path))
        self._join()

        process, self._process = self._process, None
        if process.stdin:
            try:
                process.stdin.close()
            except (BrokenPipeError, OSError):
                pass
        stderr = process.stderr.read() if process.stderr else b""
        process.wait()

        if process.returncode != 0 or self._error is not None:
            self._discard()
            detail = stderr.decode(errors="replace") if stderr else str(self._error)
            raise EncoderError(f"ffmpeg failed: {detail}", str(self.output_path))

        return self.output_path

    def abort(self) -> None:
        """Kill ffmpeg and delete whatever was written."""
        self._join()
        process, self._process = self._process, None
        if process is not None:
            process.kill()
            process.wait()
        self._discard()

    def _discard(self) -> None:
        if self._owns_output and self.output_path.exists():
            self.output_path.unlink()
            logger.info("Discarded partial output %s", self.output_path)


# ============ Export pipeline ============


class ExportPipeline:
    """
    Fixed-step export driver.

    Steps a virtual clock from 0 to the timeline duration at the target
    fps. Every step renders into the live capture, re-syncs audio, and
    then yields one frame interval so the encoder can sample in real
    time. Export never runs faster than real time.

    Usage:
        pipeline = ExportPipeline(compositor, audio_sync, assets=library)
        result = pipeline.run(state, FFmpegEncoder("out.mp4"), ExportSettings(fps=30))
    """

    def __init__(
        self,
        compositor: Compositor,
        audio_sync: AudioSyncController,
        assets: Optional[AssetSource] = None,
        sleep: Callable[[float], None] = _time.sleep,
        capture_factory: Callable[[], LiveCapture] = LiveCapture,
    ):
        self.compositor = compositor
        self.audio_sync = audio_sync
        self.assets = assets
        self.sleep = sleep
        self.capture_factory = capture_factory
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def run(
        self,
        state: TimelineState,
        encoder: EncoderSink,
        settings: Optional[ExportSettings] = None,
        player=None,
        on_progress: Optional[Callable[[int, int], None]] = None,
    ) -> ExportResult:
        """
        Export the whole timeline.

        Args:
            state: Timeline model (read only)
            encoder: Sink sampling the live capture
            settings: Export settings
            player: Object with ``is_playing`` and ``set_playing(bool)``;
                its play state is restored afterwards
            on_progress: Called with (frame_index, last_index) per frame

        Returns:
            ExportResult

        Raises:
            ExportInProgressError: If an export is already running
            ExportError: If any step fails; partial output is discarded
        """
        settings = settings or ExportSettings()
        duration = state.total_duration()
        if duration <= 0:
            raise ExportError("timeline is empty", code="empty_timeline")

        if not self._lock.acquire(blocking=False):
            raise ExportInProgressError()

        was_playing = False
        fps = settings.fps
        last_index = frame_count(duration, fps)
        graph: Optional[AudioCaptureGraph] = None
        logger.info("Export started: %s at %sfps (%d frames)", format_duration(duration), fps, last_index + 1)

        try:
            if player is not None:
                was_playing = bool(player.is_playing)
                player.set_playing(False)
            capture = self.capture_factory()
            if settings.include_audio:
                graph = AudioCaptureGraph.connect(state, self.assets)
            else:
                graph = AudioCaptureGraph()
            encoder.start(capture, graph, fps, settings.resolution)

            interval = 1.0 / fps
            for index in range(last_index + 1):
                time = index / fps
                frame = self.compositor.render(state, time)
                capture.publish(frame, time)
                graph.set_gains(self.audio_sync.update(state, time, playing=True, force_seek=True))
                if on_progress is not None:
                    on_progress(index, last_index)
                self.sleep(interval)

            output = encoder.stop()
        except Exception as e:
            encoder.abort()
            logger.error("Export failed: %s", e)
            if isinstance(e, ExportError):
                raise
            raise ExportError(str(e), details={"type": type(e).__name__}) from e
        finally:
            try:
                self.audio_sync.stop_all(state)
                if graph is not None:
                    graph.release()
                if player is not None:
                    player.set_playing(was_playing)
            finally:
                self._lock.release()

        logger.info("Export finished: %s", output)
        return ExportResult(
            output=output,
            frames_rendered=last_index + 1,
            duration=duration,
            format=settings.format,
        )
