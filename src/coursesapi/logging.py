"""Logging for the Courses API.

Everything under the ``coursesapi`` logger (registry mutations, rule
rejections, app lifecycle) goes to one rotating file and, when asked, the
console. The API app calls :func:`setup_logging` when it starts.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from coursesapi.config import ConfigError

LOG_DIR_ENV = "COURSESAPI_LOG_DIR"
LOG_LEVEL_ENV = "COURSESAPI_LOG_LEVEL"

DEFAULT_LOG_DIR = "logs"
DEFAULT_LOG_FILE = "coursesapi.log"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_BACKUP_COUNT = 5

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER = "coursesapi"


def parse_level(level: str) -> int:
    """Turn a level name such as ``"info"`` into its logging constant.

    Raises:
        ConfigError: If the name isn't a standard logging level.
    """
    value = logging.getLevelNamesMapping().get(level.upper())
    if value is None:
        raise ConfigError(f"{LOG_LEVEL_ENV} must be a logging level name, got {level!r}")
    return value


def _formatted(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logging(
    log_dir: str | Path | None = None,
    level: str | None = None,
    *,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    console: bool = True,
) -> logging.Logger:
    """Send ``coursesapi`` logs to a rotating file and optionally the console.

    Calling it again closes and replaces the handlers of the previous call.

    Args:
        log_dir: Directory for the log file, created if missing. Falls back to
            COURSESAPI_LOG_DIR, then ``logs``.
        level: Level name. Falls back to COURSESAPI_LOG_LEVEL, then INFO.
        log_file: File name inside ``log_dir``.
        max_bytes: Size at which the file is rotated.
        backup_count: Rotated files to keep.
        console: Also log to stderr.

    Returns:
        The ``coursesapi`` logger.

    Raises:
        ConfigError: If the level name is unknown.
    """
    level = level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)
    log_level = parse_level(level)

    log_path = Path(log_dir or os.environ.get(LOG_DIR_ENV, DEFAULT_LOG_DIR)) / log_file
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    file_handler = RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    logger.addHandler(_formatted(file_handler, log_level))
    if console:
        logger.addHandler(_formatted(logging.StreamHandler(), log_level))

    logger.info("Courses API logging to %s at %s", log_path, logging.getLevelName(log_level))
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a component logger, e.g. ``get_logger("api")`` -> ``coursesapi.api``."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
