"""Environment and path configuration for FrameCut.

Provides centralized configuration with sensible defaults.
All configuration is loaded from environment variables.

Usage:
    from packages.core import get_config

    config = get_config()
    print(f"Projects directory: {config.projects_dir}")
    print(f"Environment: {config.env}")
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path


class Environment(Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class LogLevel(Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class FrameCutConfig:
    """Application configuration.

    Immutable configuration object created from environment variables.
    All paths are absolute.

    Attributes:
        data_dir: Base data directory
        projects_dir: Directory for saved project documents
        exports_dir: Directory for exported videos
        env: Current environment (development/production/testing)
        log_level: Logging level
        debug: Debug mode enabled
        fps: Default preview/export frame rate
        resolution: Default canvas size (width, height)
        undo_limit: Maximum number of undo snapshots kept
        snap_pixels: Snap tolerance in screen pixels
        api_host: API server host
        api_port: API server port
        cors_origins: Allowed CORS origins
    """

    # Core paths
    data_dir: Path
    projects_dir: Path
    exports_dir: Path

    # Environment
    env: Environment
    log_level: LogLevel
    debug: bool

    # Editor settings
    fps: float
    resolution: tuple[int, int]
    undo_limit: int
    snap_pixels: float

    # API settings
    api_host: str
    api_port: int
    cors_origins: tuple[str, ...]

    def __post_init__(self) -> None:
        """Ensure directories exist in non-testing environments."""
        if self.env != Environment.TESTING:
            for path in [self.data_dir, self.projects_dir, self.exports_dir]:
                path.mkdir(parents=True, exist_ok=True)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env == Environment.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env == Environment.PRODUCTION

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.env == Environment.TESTING


def _find_project_root() -> Path:
    """Find project root by looking for packages/ directory.

    Walks up from the current file's location to find the project root.
    Falls back to current working directory if not found.

    Returns:
        Path to project root
    """
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "packages").exists():
            return parent
    return Path.cwd()


def _get_env_path(var: str, default: Path) -> Path:
    """Get path from environment variable or use default.

    Args:
        var: Environment variable name
        default: Default path if not set

    Returns:
        Absolute path from env var or default
    """
    value = os.environ.get(var)
    if value:
        path = Path(value)
        # Make relative paths absolute from project root
        if not path.is_absolute():
            path = _find_project_root() / path
        return path
    return default


def _parse_resolution(value: str, default: tuple[int, int]) -> tuple[int, int]:
    """Parse a ``WIDTHxHEIGHT`` string, falling back to default when malformed."""
    parts = value.lower().split("x")
    if len(parts) != 2:
        return default
    try:
        width, height = int(parts[0]), int(parts[1])
    except ValueError:
        return default
    if width <= 0 or height <= 0:
        return default
    return (width, height)


def _get_env_number(var: str, default: float, cast=float):
    """Read a positive number from the environment, or the default."""
    value = os.environ.get(var)
    if not value:
        return default
    try:
        number = cast(value)
    except ValueError:
        return default
    return number if number > 0 else default


@lru_cache(maxsize=1)
def get_config() -> FrameCutConfig:
    """Get the application configuration (singleton).

    Configuration is loaded from environment variables:
    - FRAMECUT_DATA_DIR: Base data directory
    - FRAMECUT_PROJECTS_DIR: Saved projects directory
    - FRAMECUT_EXPORTS_DIR: Directory for exported videos
    - FRAMECUT_ENV: Environment (development/production/testing)
    - FRAMECUT_LOG_LEVEL: Logging level (DEBUG/INFO/WARNING/ERROR)
    - FRAMECUT_DEBUG: Enable debug mode (1/true/yes)
    - FRAMECUT_FPS: Default frame rate (default: 30)
    - FRAMECUT_RESOLUTION: Canvas size as WxH (default: 1280x720)
    - FRAMECUT_UNDO_LIMIT: Undo history capacity (default: 50)
    - FRAMECUT_SNAP_PIXELS: Snap tolerance in pixels (default: 5)
    - API_HOST: API server host (default: 0.0.0.0)
    - API_PORT: API server port (default: 8000)
    - API_CORS_ORIGINS: Comma-separated CORS origins (default: *)

    Returns:
        Immutable FrameCutConfig instance
    """
    project_root = _find_project_root()

    # Determine environment
    env_str = os.environ.get("FRAMECUT_ENV", "development").lower()
    try:
        env = Environment(env_str)
    except ValueError:
        env = Environment.DEVELOPMENT

    # Determine log level
    log_str = os.environ.get("FRAMECUT_LOG_LEVEL", "INFO").upper()
    try:
        log_level = LogLevel(log_str)
    except ValueError:
        log_level = LogLevel.INFO

    # Debug mode
    debug_str = os.environ.get("FRAMECUT_DEBUG", "").lower()
    debug = debug_str in ("1", "true", "yes") or env == Environment.DEVELOPMENT

    # Paths
    data_dir = _get_env_path("FRAMECUT_DATA_DIR", project_root / "data")
    projects_dir = _get_env_path("FRAMECUT_PROJECTS_DIR", data_dir / "projects")
    exports_dir = _get_env_path("FRAMECUT_EXPORTS_DIR", data_dir / "exports")

    # Editor settings
    fps = _get_env_number("FRAMECUT_FPS", 30.0)
    resolution = _parse_resolution(os.environ.get("FRAMECUT_RESOLUTION", ""), (1280, 720))
    undo_limit = _get_env_number("FRAMECUT_UNDO_LIMIT", 50, cast=int)
    snap_pixels = _get_env_number("FRAMECUT_SNAP_PIXELS", 5.0)

    # API settings
    api_host = os.environ.get("API_HOST", "0.0.0.0")
    api_port = int(os.environ.get("API_PORT", "8000"))
    cors_str = os.environ.get("API_CORS_ORIGINS", "*")
    cors_origins = tuple(s.strip() for s in cors_str.split(",") if s.strip())

    return FrameCutConfig(
        data_dir=data_dir,
        projects_dir=projects_dir,
        exports_dir=exports_dir,
        env=env,
        log_level=log_level,
        debug=debug,
        fps=fps,
        resolution=resolution,
        undo_limit=undo_limit,
        snap_pixels=snap_pixels,
        api_host=api_host,
        api_port=api_port,
        cors_origins=cors_origins,
    )


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing when environment variables change
    between test cases.
    """
    get_config.cache_clear()
