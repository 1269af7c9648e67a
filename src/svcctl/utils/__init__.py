"""Utility functions and classes."""

from svcctl.utils.paths import expand_path, file_exists
from svcctl.utils.logging import get_logger, setup_logging

__all__ = ["expand_path", "file_exists", "get_logger", "setup_logging"]
