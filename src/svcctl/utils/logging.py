"""Logging setup utilities."""

import logging
from pathlib import Path
from typing import Optional

from svcctl.utils.paths import ensure_parent_exists

ROOT_LOGGER = "svcctl"

_FORMAT = "[%(asctime)s] %(levelname)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    log_file: Optional[Path] = None,
    level: str = "INFO",
    name: str = ROOT_LOGGER,
) -> logging.Logger:
    """
    Set up logging with both file and console handlers.

    Args:
        log_file: Path to log file. If None, only console logging is enabled.
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        name: Logger name.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Clear existing handlers to avoid duplicates
    logger.handlers.clear()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATEFMT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        log_path = ensure_parent_exists(log_file)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """
    Get a named logger below the ``svcctl`` root.

    If neither the logger nor the root has handlers yet, a basic console
    handler is attached to the root so that child loggers propagate to it.
    """
    root = logging.getLogger(ROOT_LOGGER)
    logger = logging.getLogger(name)
    if not logger.handlers and not root.handlers:
        root.setLevel(logging.INFO)
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATEFMT))
        root.addHandler(handler)
    return logger
