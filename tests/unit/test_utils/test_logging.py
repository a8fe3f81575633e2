"""Tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from keyrelay.config.settings import LoggingConfig
from keyrelay.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def _reset_logger():
    logger = logging.getLogger("keyrelay")
    level = logger.level
    yield
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level)


def test_default_level_is_info() -> None:
    setup_logging()
    logger = logging.getLogger("keyrelay")
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1


def test_repeated_setup_replaces_handlers() -> None:
    setup_logging(LoggingConfig(level="DEBUG"))
    setup_logging(LoggingConfig(level="WARNING"))
    logger = logging.getLogger("keyrelay")
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1


def test_file_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "keyrelay.log"
    setup_logging(LoggingConfig(file=str(log_file)))
    logging.getLogger("keyrelay.session.host").info("New client joined from IP: 10.0.0.7")
    for handler in logging.getLogger("keyrelay").handlers:
        handler.flush()
    assert "New client joined from IP: 10.0.0.7" in log_file.read_text()
