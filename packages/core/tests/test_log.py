"""Tests for logging setup."""

import logging

import pytest

from packages.core.config import LogLevel
from packages.core.log import ROOT_LOGGER, configure_logging


@pytest.fixture
def package_logger():
    """Restore the package logger after each test."""
    logger = logging.getLogger(ROOT_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    logger.handlers = handlers
    logger.setLevel(level)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_sets_level(self, package_logger):
        logger = configure_logging(LogLevel.DEBUG)

        assert logger is package_logger
        assert logger.level == logging.DEBUG

    def test_does_not_stack_handlers(self, package_logger):
        configure_logging(LogLevel.INFO)
        count = len(package_logger.handlers)

        configure_logging(LogLevel.WARNING)

        assert len(package_logger.handlers) == count
        assert package_logger.level == logging.WARNING

    def test_module_loggers_propagate(self, package_logger):
        configure_logging(LogLevel.INFO)

        child = logging.getLogger("packages.timeline.editor")

        assert child.getEffectiveLevel() == logging.INFO
