"""Logging utilities for getsetgen commands."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "getsetgen"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the getsetgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the getsetgen logger with console output and optional file sink.

    The console stays quiet apart from warnings unless ``verbose`` is set, so a
    successful run prints nothing. The file sink, when given, records debug
    detail regardless.
    """
    console_level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose or log_file is not None else logging.WARNING)
    logger.propagate = False

    # Reset handlers so repeated in-process runs do not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(console_level)
    stream_handler.setFormatter(logging.Formatter("[getsetgen] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
