"""Path expansion and validation utilities."""

from pathlib import Path
from typing import Union


def expand_path(path: Union[str, Path]) -> Path:
    """Expand ~ and environment variables in a path."""
    return Path(path).expanduser().resolve()


def ensure_parent_exists(path: Union[str, Path]) -> Path:
    """Ensure the parent directory of a path exists, creating it if necessary."""
    path = expand_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def get_config_dir() -> Path:
    """Get the svcctl state directory (~/.svcctl)."""
    return Path("~/.svcctl").expanduser()


def get_config_file() -> Path:
    """Get the path to the config file."""
    return get_config_dir() / "config.json"


def get_alias_file() -> Path:
    """Get the default path of the persisted alias table."""
    return get_config_dir() / "svcaliases.json"


def get_log_file() -> Path:
    """Get the default log file path."""
    return get_config_dir() / "svcctl.log"


def file_exists(path: Union[str, Path]) -> bool:
    """Return True if anything exists at ``path``."""
    try:
        Path(path).stat()
    except OSError:
        return False
    return True
