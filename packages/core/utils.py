"""Common utility functions for FrameCut.

Provides helper functions used across multiple packages.
"""

from __future__ import annotations

import json
import math
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


# ============ Numeric Utilities ============


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


# ============ Time Utilities ============


def now_iso() -> str:
    """Get current time in ISO format (UTC).

    Returns:
        ISO formatted datetime string with Z suffix
    """
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def frame_count(duration: float, fps: float) -> int:
    """Number of frame intervals covering a duration.

    Rounded before the ceiling so float noise such as
    ``0.3 * 10 == 3.0000000000000004`` does not add a frame.

    Args:
        duration: Duration in seconds
        fps: Frames per second

    Returns:
        ceil(duration * fps)
    """
    return math.ceil(round(duration * fps, 9))


def format_timecode(seconds: float) -> str:
    """Format seconds as ``MM:SS.mmm``.

    Examples:
        >>> format_timecode(75.5)
        '01:15.500'
    """
    seconds = max(0.0, seconds)
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    millis = int(round((seconds % 1) * 1000)) % 1000
    return f"{minutes:02d}:{secs:02d}.{millis:03d}"


def format_duration(seconds: float) -> str:
    """Format seconds as human-readable duration.

    Returns:
        Formatted string (e.g., "1.5s", "2m 30s")
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    minutes = int(seconds // 60)
    remaining_seconds = seconds % 60
    return f"{minutes}m {remaining_seconds:.0f}s"


# ============ Color Utilities ============


def hex_to_rgb(color: str, default: tuple[int, int, int] = (255, 255, 255)) -> tuple[int, int, int]:
    """Parse ``#rrggbb`` or ``#rgb`` into an RGB tuple.

    Args:
        color: Hex color string
        default: Returned when the string is not a valid color

    Returns:
        (r, g, b) with components in 0-255
    """
    if not color:
        return default
    match = _HEX_COLOR.match(color.strip())
    if not match:
        return default
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))


# ============ File Utilities ============


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, creating if necessary.

    Args:
        path: Directory path

    Returns:
        The path (for chaining)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_json_save(path: Path, data: Any, indent: int = 2) -> bool:
    """Safely save data as JSON.

    Creates parent directories if needed.

    Args:
        path: Path to save to
        data: Data to serialize
        indent: JSON indentation

    Returns:
        True if successful, False otherwise
    """
    try:
        ensure_dir(path.parent)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        return True
    except (OSError, TypeError):
        return False
