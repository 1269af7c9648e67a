"""Name resolution, caching and process-wide state."""

from svcctl.core.aliases import AliasStore
from svcctl.core.cache import SingleFlight, TTLCache
from svcctl.core.config import Config
from svcctl.core.context import ServiceContext, get_context
from svcctl.core.executor import CommandExecutor
from svcctl.core.resolver import ServiceNameResolver

__all__ = [
    "AliasStore",
    "CommandExecutor",
    "Config",
    "ServiceContext",
    "ServiceNameResolver",
    "SingleFlight",
    "TTLCache",
    "get_context",
]
