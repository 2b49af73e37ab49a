"""Logging setup for the sprint engine."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "sprint_engine"
CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"


def setup_logging(
    level: str | int = "INFO",
    log_file: Path | str | None = None,
) -> logging.Logger:
    """Configure the ``sprint_engine`` logger.

    Args:
        level: Level name or number for the console handler.
        log_file: Optional file that receives everything at DEBUG.

    Returns:
        The package logger. Calling again replaces its handlers.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    return logger
