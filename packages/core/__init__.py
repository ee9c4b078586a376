"""Core package - shared utilities, types, and configuration.

This package provides common functionality used across all FrameCut packages:
- Configuration management
- Logging setup
- Shared type definitions
- Protocol interfaces
- Custom exceptions
- Utility functions

Example usage:
    from packages.core import get_config, ClipType, OverlapError

    config = get_config()
    print(f"Exports directory: {config.exports_dir}")

    if overlaps:
        raise OverlapError(track_index, start, duration)
"""

# Configuration
from .config import (
    Environment,
    FrameCutConfig,
    LogLevel,
    clear_config_cache,
    get_config,
)
from .log import configure_logging

# Types
from .types import (
    TRACK_FOR_CLIP,
    ClipType,
    EffectType,
    MediaRef,
    ResizeSide,
    TextAnimation,
    TrackType,
    TransitionType,
)

# Protocols
from .protocols import (
    AssetSource,
    EncoderSink,
    FrameCapture,
    Serializable,
    Transport,
)

# Errors
from .errors import (
    AssetImportError,
    AssetNotFoundError,
    ClipNotFoundError,
    ConfigurationError,
    EncoderError,
    ExportError,
    ExportInProgressError,
    FrameCutError,
    GestureError,
    MediaError,
    MinimumDurationError,
    MissingConfigError,
    OverlapError,
    ProjectLoadError,
    SampleDecodeError,
    SplitRangeError,
    StorageError,
    TimelineError,
    TrackNotFoundError,
    TrimRangeError,
    ValidationError,
)

# Utilities
from .utils import (
    clamp,
    ensure_dir,
    format_duration,
    format_timecode,
    frame_count,
    hex_to_rgb,
    now_iso,
    safe_json_save,
)

__all__ = [
    # Config
    "Environment",
    "LogLevel",
    "FrameCutConfig",
    "get_config",
    "clear_config_cache",
    "configure_logging",
    # Types
    "TrackType",
    "ClipType",
    "EffectType",
    "TransitionType",
    "TextAnimation",
    "ResizeSide",
    "MediaRef",
    "TRACK_FOR_CLIP",
    # Protocols
    "AssetSource",
    "Transport",
    "FrameCapture",
    "EncoderSink",
    "Serializable",
    # Errors
    "FrameCutError",
    "ConfigurationError",
    "MissingConfigError",
    "TimelineError",
    "ValidationError",
    "OverlapError",
    "SplitRangeError",
    "MinimumDurationError",
    "TrimRangeError",
    "ClipNotFoundError",
    "TrackNotFoundError",
    "GestureError",
    "MediaError",
    "AssetImportError",
    "AssetNotFoundError",
    "SampleDecodeError",
    "ExportError",
    "EncoderError",
    "ExportInProgressError",
    "StorageError",
    "ProjectLoadError",
    # Utils
    "clamp",
    "now_iso",
    "frame_count",
    "format_timecode",
    "format_duration",
    "hex_to_rgb",
    "ensure_dir",
    "safe_json_save",
]
