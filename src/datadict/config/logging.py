"""Logging setup for the datadict package logger."""

import logging
import sys
from pathlib import Path
from typing import Optional
from .settings import get_settings

PACKAGE_LOGGER = "datadict"

DEFAULT_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - "
    "[%(filename)s:%(lineno)d] - %(message)s"
)


def resolve_level(name: str) -> int:
    """
    Turn a level name such as "debug" or "WARNING" into its numeric value.

    Raises:
        ValueError: If the name is not a standard logging level
    """
    level = getattr(logging, name.strip().upper(), None)
    if not isinstance(level, int):
        raise ValueError(
            f"Unknown log level '{name}' (use DEBUG, INFO, WARNING, ERROR or CRITICAL)"
        )
    return level


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure the package logger.

    Unset arguments fall back to the LOG_LEVEL and LOG_FILE settings.
    Existing handlers are replaced, so calling this again reconfigures.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file that receives the same records
        format_string: Optional custom format string

    Raises:
        ValueError: If the level name is unknown
    """
    settings = get_settings()
    numeric_level = resolve_level(level or settings.log_level)
    log_file_path = log_file or settings.log_file
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)
    package_logger.handlers.clear()

    # stderr keeps the JSON the CLI prints on stdout parseable
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file_path:
        handlers.append(logging.FileHandler(log_file_path, encoding="utf-8"))
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    package_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """
    Logger under the package namespace, configuring it on first use.

    Args:
        name: Module name (typically __name__)
    """
    if not logging.getLogger(PACKAGE_LOGGER).handlers:
        setup_logging()

    if name.startswith(PACKAGE_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
