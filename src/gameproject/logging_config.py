"""Logging setup for the ``gameproject`` package."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOGGER_NAME = "gameproject"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int | str = logging.INFO, log_file: Path | str | None = None) -> logging.Logger:
    """Configure the package logger.

    Records go to stderr so stdout stays free for whatever transport the host
    process speaks. Existing handlers are replaced, which makes repeated calls
    safe.

    Args:
        level: Logging level, as a number or a name such as ``"DEBUG"``.
        log_file: Optional path that receives a copy of every record.

    Returns:
        The configured ``gameproject`` logger.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialised at level %s", logging.getLevelName(logger.level))
    return logger


__all__ = ["LOGGER_NAME", "setup_logging"]
