"""Logging for facematch.

Handlers live on the ``facematch`` package logger only. Module loggers
(``facematch.cropper``, ``facematch.services.rekognition``, ...) are plain
children that propagate to it, so a crop warning and the Rekognition call that
triggered it come out in the same stream and format. boto3/botocore loggers
are attached to the same handlers at WARNING so AWS errors show up without
the request-level chatter.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "facematch"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
AWS_LOGGERS = ("boto3", "botocore")


class ColoredFormatter(logging.Formatter):
    """Colors the level name on a terminal; plain text everywhere else."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str, datefmt: str, stream=None):
        super().__init__(fmt, datefmt=datefmt)
        stream = stream if stream is not None else sys.stdout
        self.use_color = hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname) if self.use_color else None
        if color is None:
            return super().format(record)
        # Copy: other handlers format the same record without colors
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def _level_from_config() -> str:
    try:
        from facematch.config import get_config

        return get_config().log_level
    except ValueError:
        # Invalid settings are reported by whoever loads Config for real
        return "INFO"


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """Attach handlers to the package logger (once) and return it.

    Args:
        level: Level name; defaults to ``LOG_LEVEL`` from Config.
        log_file: Optional file that receives an uncolored copy of the log.

    Returns:
        The ``facematch`` package logger.

    Example:
        >>> setup_logging(level="DEBUG", log_file="facematch.log")
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if package_logger.handlers:
        if level is not None:
            package_logger.setLevel(level.upper())
        return package_logger

    package_logger.setLevel(getattr(logging, (level or _level_from_config()).upper(), logging.INFO))

    handlers = [logging.StreamHandler(sys.stdout)]
    handlers[0].setFormatter(ColoredFormatter(LOG_FORMAT, DATE_FORMAT, sys.stdout))
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        handlers.append(file_handler)

    for handler in handlers:
        package_logger.addHandler(handler)
    package_logger.propagate = False

    for name in AWS_LOGGERS:
        aws_logger = logging.getLogger(name)
        aws_logger.setLevel(logging.WARNING)
        for handler in handlers:
            aws_logger.addHandler(handler)
        aws_logger.propagate = False

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a facematch module; configures the package on first use.

    Names outside the package (e.g. ``__main__`` in scripts) are nested under
    ``facematch`` so they share its handlers.
    """
    setup_logging()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name.strip('_')}"
    return logging.getLogger(name)
