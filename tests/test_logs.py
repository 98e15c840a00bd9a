"""Tests for logging configuration."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.logging import RichHandler

from changeversion.config.models import LoggingSettings
from changeversion.logs import LOG_FILENAME, configure_logging


@pytest.fixture(autouse=True)
def _reset_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("changeversion")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


def test_console_handler_uses_configured_level() -> None:
    logger = configure_logging(LoggingSettings(level="error"))

    handlers = [handler for handler in logger.handlers if isinstance(handler, RichHandler)]
    assert len(handlers) == 1
    assert handlers[0].level == logging.ERROR


def test_verbose_forces_debug() -> None:
    logger = configure_logging(LoggingSettings(level="error"), verbose=True)

    assert logger.level == logging.DEBUG


def test_file_handler_written_inside_control_folder(tmp_path: Path) -> None:
    logger = configure_logging(LoggingSettings(), log_dir=tmp_path)

    logging.getLogger("changeversion.repository").info("recorded commit")
    for handler in logger.handlers:
        handler.flush()

    assert "recorded commit" in (tmp_path / LOG_FILENAME).read_text(encoding="utf-8")


def test_log_file_created_on_first_record(tmp_path: Path) -> None:
    configure_logging(LoggingSettings(), log_dir=tmp_path)

    logging.getLogger("changeversion.repository").debug("below file level")
    assert not (tmp_path / LOG_FILENAME).exists()

    logging.getLogger("changeversion.repository").info("recorded commit")
    assert (tmp_path / LOG_FILENAME).exists()


def test_file_logging_skipped_when_folder_missing(tmp_path: Path) -> None:
    logger = configure_logging(LoggingSettings(), log_dir=tmp_path / "absent")

    assert all(isinstance(handler, RichHandler) for handler in logger.handlers)
    assert not (tmp_path / "absent").exists()


def test_file_logging_can_be_disabled(tmp_path: Path) -> None:
    configure_logging(LoggingSettings(file_logging=False), log_dir=tmp_path)

    assert not (tmp_path / LOG_FILENAME).exists()


def test_repeated_configuration_replaces_handlers(tmp_path: Path) -> None:
    configure_logging(LoggingSettings(), log_dir=tmp_path)
    logger = configure_logging(LoggingSettings(), log_dir=tmp_path)

    assert len(logger.handlers) == 2
