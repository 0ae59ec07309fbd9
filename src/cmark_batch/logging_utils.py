"""Logging setup for applications embedding cmark_batch."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

from __future__ import annotations

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "cmark_batch"


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
    logger_name: str = PACKAGE_LOGGER,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the package logger.

    Only the ``cmark_batch`` logger hierarchy is touched, so the host
    application's own logging configuration is left alone. Calling this
    again replaces the handlers from the previous call.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or string name (e.g., "DEBUG").
    log_file : str, optional
        Path to a log file to tee output into.
    trace_mode : bool, default False
        Emit timestamps, thread names and logger names. Useful when
        following units of a batch across worker threads.
    logger_name : str, default "cmark_batch"
        Logger to configure.

    Returns
    -------
    logging.Logger
        The configured logger.

    """
    resolved_level = log_level if isinstance(log_level, int) else getattr(logging, str(log_level).upper(), logging.INFO)

    logger = logging.getLogger(logger_name)
    logger.setLevel(resolved_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = False

    format_str = (
        "[%(asctime)s] [%(levelname)s] [%(threadName)s] [%(name)s] %(message)s"
        if trace_mode
        else "%(levelname)s: %(message)s"
    )
    date_format = "%Y-%m-%d %H:%M:%S" if trace_mode else None
    formatter = logging.Formatter(format_str, datefmt=date_format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(resolved_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not create log file %s: %s", log_file, exc)
        else:
            file_handler.setLevel(resolved_level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
            logger.info("Logging to file: %s", log_file)

    return logger


__all__ = ["configure_logging"]
