"""Process-scoped state shared by the resolver and the facade."""

from __future__ import annotations

import threading
from typing import Optional

from svcctl.core.aliases import AliasStore
from svcctl.core.cache import SingleFlight, TTLCache
from svcctl.core.config import Config, ConfigData
from svcctl.core.executor import CommandExecutor
from svcctl.core.resolver import ServiceNameResolver
from svcctl.core.watcher import UnitWatcher
from svcctl.service.base import ServiceConfig, ServiceManager
from svcctl.service.handler import ServiceHandler
from svcctl.service.registry import ManagerRegistry
from svcctl.utils.logging import get_logger


class ServiceContext:
    """
    Owns everything that lives for the whole process: the chosen manager,
    both caches, the alias table and the resolver built on them.

    Lifecycle:
        - start() detects the manager and loads persisted aliases, once.
        - reload() re-probes the manager (tests, or after an init change).
        - close() stops the watcher and writes pending alias changes.

    Example:
        ctx = ServiceContext(Config().data).start()
        ctx.handler("docker").restart()
        ctx.close()
    """

    def __init__(
        self,
        config: Optional[ConfigData] = None,
        registry: Optional[ManagerRegistry] = None,
        executor: Optional[CommandExecutor] = None,
    ) -> None:
        self.config = config or Config().data
        cfg = self.config
        self.executor = executor or CommandExecutor(cfg.timeouts.default)
        self.registry = registry or ManagerRegistry.with_defaults(
            executor=self.executor,
            elevate_with=cfg.managers.elevate_with,
            probe_timeout=cfg.timeouts.probe,
            priority=cfg.managers.priority,
            max_retries=cfg.managers.max_retries,
            initial_backoff=cfg.managers.initial_backoff,
        )
        self.aliases = AliasStore(
            cfg.aliases.file,
            flush_delay=cfg.aliases.flush_delay,
            predefined=cfg.aliases.extra,
        )
        self.resolver = ServiceNameResolver(
            self.registry,
            self.aliases,
            existence_cache=TTLCache(cfg.cache.existence_ttl),
            discovery_cache=TTLCache(cfg.cache.discovery_ttl),
            flight=SingleFlight(),
            candidate_window=cfg.timeouts.candidate_window,
            max_parallel_probes=cfg.managers.max_parallel_probes,
        )
        self._watcher: Optional[UnitWatcher] = None
        self._started = False
        self._init = SingleFlight()
        self._logger = get_logger("svcctl.context")

    @property
    def manager(self) -> ServiceManager:
        return self.registry.active

    def start(self) -> ServiceContext:
        """
        Detect the manager and load persisted aliases (first call only).

        Concurrent first callers share one initialization; no lock is held
        while the alias probes run.
        """
        if not self._started:
            self._init.do("start", self._initialize)
        return self

    def _initialize(self) -> None:
        if self._started:
            return
        manager = self.registry.active
        loaded = self.aliases.load(self.resolver.confirm_exists)
        self._logger.debug(f"{manager.name}: {loaded} persisted alias entries still valid")
        if self.config.watch_unit_dirs:
            self._watcher = UnitWatcher(self.resolver.invalidate)
            self._watcher.watch_all(manager.unit_dirs).start()
        self._started = True

    def reload(self) -> ServiceManager:
        """Re-probe the init system and drop cached lookups."""
        manager = self.registry.reload()
        self.resolver.invalidate()
        self._logger.info(f"Service manager reloaded: {manager.name}")
        return manager

    def resolve(self, keyword: str) -> str:
        self.start()
        return self.resolver.resolve(keyword)

    def handler(self, keyword: str) -> ServiceHandler:
        """Resolve ``keyword`` and build a handler for it."""
        name = self.resolve(keyword)
        manager = self.manager
        return ServiceHandler(
            ServiceConfig.for_manager(manager.name, name),
            manager,
            self.executor,
            control_timeout=self.config.timeouts.control,
            probe_timeout=self.config.timeouts.probe,
        )

    def close(self) -> None:
        if self._watcher:
            self._watcher.stop()
            self._watcher = None
        self.aliases.close()

    def __enter__(self) -> ServiceContext:
        return self.start()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


_default: Optional[ServiceContext] = None
_default_lock = threading.Lock()


def get_context() -> ServiceContext:
    """Return the process-wide context, creating it on first use."""
    global _default
    if _default is None:
        with _default_lock:
            if _default is None:
                _default = ServiceContext()
    return _default


def set_context(context: Optional[ServiceContext]) -> Optional[ServiceContext]:
    """Install ``context`` as the process-wide context; returns the previous one."""
    global _default
    with _default_lock:
        previous, _default = _default, context
    return previous
