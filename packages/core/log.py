"""Logging setup for FrameCut.

Modules log through ``logging.getLogger(__name__)``; this module only
attaches a handler to the shared ``packages`` logger.
"""

from __future__ import annotations

import logging
from typing import Optional

from .config import LogLevel

ROOT_LOGGER = "packages"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[LogLevel] = None) -> logging.Logger:
    """Attach a stream handler to the package logger.

    Calling this more than once replaces the level but never stacks handlers.

    Args:
        level: Log level (defaults to the configured level)

    Returns:
        The configured package logger
    """
    if level is None:
        from .config import get_config

        level = get_config().log_level

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level.value)

    if not any(getattr(h, "_framecut", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._framecut = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    return logger
