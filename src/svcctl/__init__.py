"""
svcctl - uniform service control across init systems

Resolves a logical keyword ("docker", "fail2ban", "supervisor") to the
unit actually installed under systemd, OpenRC or SysV init, and runs
start/stop/status style actions through the right tool.
"""

__version__ = "1.0.0"

from svcctl.core.config import Config
from svcctl.core.context import ServiceContext, get_context
from svcctl.errors import (
    CommandError,
    CommandTimeoutError,
    DiscoveryError,
    DiscoveryTimeoutError,
    ManagerUnavailableError,
    SafeRestartError,
    ServiceActionError,
    ServiceError,
    ServiceNotFoundError,
)

__all__ = [
    "CommandError",
    "CommandTimeoutError",
    "Config",
    "DiscoveryError",
    "DiscoveryTimeoutError",
    "ManagerUnavailableError",
    "SafeRestartError",
    "ServiceActionError",
    "ServiceContext",
    "ServiceError",
    "ServiceNotFoundError",
    "get_context",
    "__version__",
]
