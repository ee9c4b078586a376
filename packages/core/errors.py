"""Custom exception classes for FrameCut.

Exception Hierarchy:
    FrameCutError (base)
    ├── ConfigurationError
    │   └── MissingConfigError
    ├── TimelineError
    │   ├── ValidationError
    │   │   ├── OverlapError
    │   │   ├── SplitRangeError
    │   │   ├── MinimumDurationError
    │   │   └── TrimRangeError
    │   ├── ClipNotFoundError
    │   ├── TrackNotFoundError
    │   └── GestureError
    ├── MediaError
    │   ├── AssetImportError
    │   ├── AssetNotFoundError
    │   └── SampleDecodeError
    ├── ExportError
    │   ├── EncoderError
    │   └── ExportInProgressError
    └── StorageError
        └── ProjectLoadError
"""

from typing import Any, Optional


class FrameCutError(Exception):
    """Base exception for all FrameCut errors.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        result: dict[str, Any] = {
            "error": self.code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# ============ Configuration Errors ============


class ConfigurationError(FrameCutError):
    """Error in application configuration."""

    pass


class MissingConfigError(ConfigurationError):
    """Required configuration value is missing."""

    def __init__(self, config_key: str, env_var: Optional[str] = None):
        message = f"Missing required configuration: {config_key}"
        if env_var:
            message += f" (set via {env_var})"
        super().__init__(
            message=message,
            code="missing_config",
            details={"config_key": config_key, "env_var": env_var},
        )


# ============ Timeline Errors ============


class TimelineError(FrameCutError):
    """Base class for timeline editing errors."""

    pass


class ValidationError(TimelineError):
    """An edit was rejected before commit; the model is unchanged."""

    def __init__(
        self,
        message: str,
        code: str = "validation_error",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message=message, code=code, details=details)


class OverlapError(ValidationError):
    """Clip interval would intersect another clip on the same track."""

    def __init__(self, track_index: int, start: float, duration: float):
        super().__init__(
            message=(
                f"Interval [{start:.3f}, {start + duration:.3f}) overlaps "
                f"an existing clip on track {track_index}"
            ),
            code="clip_overlap",
            details={"track": track_index, "start": start, "duration": duration},
        )
        self.track_index = track_index
        self.start = start
        self.duration = duration


class SplitRangeError(ValidationError):
    """Split point falls inside the guard band at a clip edge."""

    def __init__(self, clip_id: int, at_time: float, guard: float):
        super().__init__(
            message=f"Cannot split clip {clip_id} at {at_time:.3f}s: within {guard}s of an edge",
            code="split_out_of_range",
            details={"clip_id": clip_id, "time": at_time, "guard": guard},
        )


class MinimumDurationError(ValidationError):
    """Clip would become shorter than the minimum duration."""

    def __init__(self, duration: float, minimum: float):
        super().__init__(
            message=f"Duration {duration:.3f}s is below the {minimum}s minimum",
            code="duration_too_short",
            details={"duration": duration, "minimum": minimum},
        )


class TrimRangeError(ValidationError):
    """Trim window does not fit inside the underlying asset."""

    def __init__(self, trim_start: float, duration: float, asset_duration: float):
        super().__init__(
            message=(
                f"Trim window {trim_start:.3f}s + {duration:.3f}s exceeds "
                f"asset duration {asset_duration:.3f}s"
            ),
            code="trim_out_of_range",
            details={
                "trim_start": trim_start,
                "duration": duration,
                "asset_duration": asset_duration,
            },
        )


class ClipNotFoundError(TimelineError):
    """Clip id does not exist on any track."""

    def __init__(self, clip_id: int):
        super().__init__(
            message=f"Clip {clip_id} not found",
            code="clip_not_found",
            details={"clip_id": clip_id},
        )
        self.clip_id = clip_id


class TrackNotFoundError(TimelineError):
    """Track index is out of range."""

    def __init__(self, track_index: int):
        super().__init__(
            message=f"Track {track_index} not found",
            code="track_not_found",
            details={"track": track_index},
        )
        self.track_index = track_index


class GestureError(TimelineError):
    """Gesture started while another is active, or updated while idle."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Gesture error: {reason}",
            code="gesture_error",
            details={"reason": reason},
        )


# ============ Media Errors ============


class MediaError(FrameCutError):
    """Base class for media asset errors."""

    pass


class AssetImportError(MediaError):
    """Asset could not be decoded and was not added."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            message=f"Failed to import '{path}': {reason}",
            code="asset_import_error",
            details={"path": path, "reason": reason},
        )


class AssetNotFoundError(MediaError):
    """Asset id is not registered in the media library."""

    def __init__(self, asset_id: str):
        super().__init__(
            message=f"Asset '{asset_id}' not found",
            code="asset_not_found",
            details={"asset_id": asset_id},
        )
        self.asset_id = asset_id


class SampleDecodeError(MediaError):
    """A visual sample could not be produced for a media time."""

    def __init__(self, asset_id: str, media_time: float, reason: str):
        super().__init__(
            message=f"Cannot decode '{asset_id}' at {media_time:.3f}s: {reason}",
            code="sample_decode_error",
            details={"asset_id": asset_id, "media_time": media_time, "reason": reason},
        )


# ============ Export Errors ============


class ExportError(FrameCutError):
    """Export aborted; partial output was discarded."""

    def __init__(
        self,
        reason: str,
        code: str = "export_failed",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            message=f"Export failed: {reason}",
            code=code,
            details={"reason": reason, **(details or {})},
        )
        self.reason = reason


class EncoderError(ExportError):
    """Encoder could not be started or failed while encoding."""

    def __init__(self, reason: str, output_path: Optional[str] = None):
        super().__init__(
            reason=reason,
            code="encoder_error",
            details={"output_path": output_path},
        )


class ExportInProgressError(ExportError):
    """Another export is already running for this session."""

    def __init__(self):
        super().__init__(reason="an export is already in progress", code="export_in_progress")


# ============ Storage Errors ============


class StorageError(FrameCutError):
    """Error reading/writing to storage."""

    def __init__(self, operation: str, path: str, reason: str):
        super().__init__(
            message=f"Storage {operation} failed for '{path}': {reason}",
            code="storage_error",
            details={"operation": operation, "path": path, "reason": reason},
        )


class ProjectLoadError(StorageError):
    """Project document is missing or malformed."""

    def __init__(self, path: str, reason: str):
        super().__init__(operation="load", path=path, reason=reason)
        self.code = "project_load_error"
