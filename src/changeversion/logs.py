"""Logging configuration for the ChangeVersion CLI."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from changeversion.config.models import LoggingSettings

LOG_FILENAME = "cv.log"
_HANDLER_MARKER = "_changeversion_handler"


def configure_logging(
    settings: LoggingSettings,
    *,
    log_dir: Path | None = None,
    verbose: bool = False,
) -> logging.Logger:
    """Attach console and file handlers to the package logger.

    Repeated calls replace the handlers installed by a previous call.

    Args:
        settings: Logging configuration.
        log_dir: Control folder receiving the rotating log file, when it exists.
        verbose: Force DEBUG level regardless of ``settings.level``.

    Returns:
        logging.Logger: The configured ``changeversion`` logger.
    """

    logger = logging.getLogger("changeversion")
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    level = logging.DEBUG if verbose else logging.getLevelName(settings.level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    logger.setLevel(level)

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=False,
    )
    console_handler.setLevel(level)
    setattr(console_handler, _HANDLER_MARKER, True)
    logger.addHandler(console_handler)

    if settings.file_logging and log_dir is not None and log_dir.is_dir():
        file_handler = RotatingFileHandler(
            log_dir / LOG_FILENAME,
            maxBytes=settings.max_size_mb * 1024 * 1024,
            backupCount=settings.backup_count,
            encoding="utf-8",
            delay=True,
        )
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        setattr(file_handler, _HANDLER_MARKER, True)
        logger.addHandler(file_handler)
        logger.setLevel(min(level, file_handler.level))

    return logger


__all__ = ["LOG_FILENAME", "configure_logging"]
