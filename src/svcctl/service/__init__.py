"""Init-system managers (systemd, OpenRC, SysV init)."""

from svcctl.service.base import ServiceConfig, ServiceManager, ServiceResult, ServiceStatus, StatusKind
from svcctl.service.handler import ServiceHandler
from svcctl.service.registry import ManagerRegistry

__all__ = [
    "ManagerRegistry",
    "ServiceConfig",
    "ServiceHandler",
    "ServiceManager",
    "ServiceResult",
    "ServiceStatus",
    "StatusKind",
]
