"""Logging setup for ExhibitFlow.

Every module logger is created with ``get_logger(__name__)`` and so nests
under the ``exhibitflow`` logger. Configuring that one logger (console,
optional rotating file, ISO 8601 timestamps) covers the store, the service
layer and the API.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import List, Union

PACKAGE_LOGGER = "exhibitflow"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    name = str(level).upper()
    if name not in LEVELS:
        raise ValueError(f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}")
    return getattr(logging, name)


def _build_handlers(
    name: str,
    log_dir: str,
    file_logging: bool,
    console_logging: bool,
    max_bytes: int,
    backup_count: int,
) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if file_logging:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            directory / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        ))
    if console_logging:
        handlers.append(logging.StreamHandler())
    return handlers


def setup_logger(
    name: str = PACKAGE_LOGGER,
    *,
    level: Union[str, int] = "INFO",
    log_dir: str = "logs",
    file_logging: bool = False,
    console_logging: bool = True,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach handlers to the ``name`` logger and set its level.

    Calling it again only updates the level; handlers are attached once.

    Args:
        name: Logger name
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL) or number
        log_dir: Directory for ``<name>.log`` when file logging is on
        file_logging: Write to a size-rotated log file
        console_logging: Write to stderr
        max_bytes: Log file size that triggers rotation
        backup_count: Rotated files kept

    Raises:
        ValueError: On an unknown level name
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in _build_handlers(name, log_dir, file_logging, console_logging, max_bytes, backup_count):
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger


def configure_from_settings(settings) -> logging.Logger:
    """Configure the package logger from application ``Settings``."""
    return setup_logger(
        PACKAGE_LOGGER,
        level=settings.log_level,
        log_dir=settings.log_dir,
        file_logging=settings.file_logging,
    )


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
