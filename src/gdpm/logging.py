"""
Logging for gdpm.

All modules log under the ``gdpm`` logger; the CLI attaches handlers once
at startup through :func:`setup_logging`.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "gdpm"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(
    level: str | int = "WARNING",
    format: str = DEFAULT_FORMAT,
    stream: TextIO | None = None,
    file: str | None = None,
) -> logging.Logger:
    """
    Route gdpm log records to *stream* (stderr by default) and *file*.

    Unknown level names fall back to WARNING. Calling this again replaces
    the handlers from the previous call.

    Example:
        setup_logging("DEBUG", file="gdpm.log")
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.close()
    root.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stderr)]
    if file:
        handlers.append(logging.FileHandler(file, encoding="utf-8"))

    formatter = logging.Formatter(format)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Logger for a gdpm submodule, e.g. ``get_logger("installer")``."""
    if name == LOGGER_NAME or name.startswith(f"{LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
