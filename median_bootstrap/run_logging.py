"""
Run log file setup.

Every module logs through ``logging.getLogger(__name__)``; this attaches an
append-mode file handler to the package logger so one run's records land in
a single file (``bootstrap.log`` by default) with date, time and source line.
"""

from __future__ import annotations

import logging
from pathlib import Path

PACKAGE_LOGGER = "median_bootstrap"
LOG_FORMAT = "%(asctime)s %(filename)s:%(lineno)d: %(message)s"
LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"


def configure_run_logging(path: Path | str, level: int = logging.INFO) -> logging.Handler:
    """
    Route package log records to ``path``, appending to any existing file.

    Calling again with the same path returns the existing handler. Failure
    to open the file raises OSError.
    """
    resolved = Path(path).resolve()
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in package_logger.handlers:
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == resolved:
            return handler

    resolved.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(resolved, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler


def close_run_logging(handler: logging.Handler) -> None:
    """Detach and close a handler returned by :func:`configure_run_logging`."""
    logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
    handler.close()
