"""Init-system registry and active-manager detection."""

from __future__ import annotations

import threading
import time
from typing import Callable, Iterable, Optional, Sequence, Type

from svcctl.core.executor import CommandExecutor
from svcctl.errors import ManagerUnavailableError
from svcctl.service.base import ServiceConfig, ServiceManager
from svcctl.service.openrc import OpenRCManager
from svcctl.service.systemd import SystemdManager
from svcctl.service.sysvinit import SysVInitManager
from svcctl.utils.logging import get_logger

DEFAULT_PRIORITY = ("systemd", "openrc", "sysvinit")

BUILTIN_MANAGERS: dict[str, Type[ServiceManager]] = {
    "systemd": SystemdManager,
    "openrc": OpenRCManager,
    "sysvinit": SysVInitManager,
}


class ManagerRegistry:
    """
    Registry of init-system managers.

    Holds one instance per supported init system and selects the single
    active manager for the host. Selection happens once, on first use;
    reload() forces a fresh probe.

    Example:
        registry = ManagerRegistry.with_defaults()
        manager = registry.active  # SystemdManager on most hosts
    """

    def __init__(
        self,
        priority: Sequence[str] = DEFAULT_PRIORITY,
        max_retries: int = 5,
        initial_backoff: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._managers: dict[str, ServiceManager] = {}
        self._priority = list(priority)
        self.max_retries = max_retries
        self.initial_backoff = initial_backoff
        self._sleep = sleep
        self._active: Optional[ServiceManager] = None
        self._failure: Optional[ManagerUnavailableError] = None
        self._lock = threading.Lock()
        self._logger = get_logger("svcctl.registry")

    @classmethod
    def with_defaults(
        cls,
        executor: Optional[CommandExecutor] = None,
        elevate_with: str = "sudo",
        probe_timeout: float = 5.0,
        **kwargs,
    ) -> ManagerRegistry:
        """Create a registry holding the built-in systemd, OpenRC and SysV managers."""
        registry = cls(**kwargs)
        executor = executor or CommandExecutor()
        for manager_class in BUILTIN_MANAGERS.values():
            registry.register(
                manager_class(
                    executor=executor,
                    elevate_with=elevate_with,
                    probe_timeout=probe_timeout,
                )
            )
        return registry

    def register(self, manager: ServiceManager) -> None:
        """Register a manager under its name, replacing any previous one."""
        with self._lock:
            self._managers[manager.name.lower()] = manager

    def get(self, name: str) -> ServiceManager:
        """
        Get a registered manager by name.

        Raises:
            ValueError: If no manager is registered under ``name``.
        """
        try:
            return self._managers[name.lower()]
        except KeyError:
            raise ValueError(
                f"Unknown service manager: {name}. "
                f"Available: {', '.join(self.names())}"
            ) from None

    def names(self) -> list[str]:
        return sorted(self._managers)

    @property
    def priority(self) -> list[str]:
        return list(self._priority)

    def set_priority(self, order: Iterable[str]) -> None:
        """Change the probe order; takes effect on the next detection."""
        with self._lock:
            self._priority = list(order)

    def detect(self) -> Optional[ServiceManager]:
        """Probe managers in priority order once; return the first usable one."""
        for name in self._priority:
            manager = self._managers.get(name)
            if manager is None or not manager.is_available():
                continue
            if self._smoke_test(manager):
                return manager
        return None

    def _smoke_test(self, manager: ServiceManager) -> bool:
        try:
            argv = manager.build_command("status", ServiceConfig.for_manager(manager.name, "test-service"))
        except Exception as e:
            self._logger.debug(f"{manager.name} failed smoke test: {e}")
            return False
        return bool(argv)

    def initialize(self) -> ServiceManager:
        """
        Select the active manager, retrying with exponential backoff.

        Raises:
            ManagerUnavailableError: No manager was usable after all retries.
        """
        backoff = self.initial_backoff
        for attempt in range(1, self.max_retries + 1):
            manager = self.detect()
            if manager is not None:
                self._logger.info(f"Initialized service manager: {manager.name}")
                return manager

            self._logger.warning(f"Manager init attempt {attempt}/{self.max_retries} failed")
            if attempt < self.max_retries:
                self._sleep(backoff)
                backoff *= 2

        self._logger.critical("All manager initialization attempts failed")
        raise ManagerUnavailableError(self._priority)

    @property
    def active(self) -> ServiceManager:
        """
        The host's active manager, detected on first access.

        A failed detection is remembered and re-raised without probing
        again until reload() is called.

        Raises:
            ManagerUnavailableError: Detection failed.
        """
        manager = self._active
        if manager is not None:
            return manager
        with self._lock:
            if self._active is None:
                self._active = self._detect_locked()
            return self._active

    def _detect_locked(self) -> ServiceManager:
        if self._failure is not None:
            raise self._failure
        try:
            return self.initialize()
        except ManagerUnavailableError as e:
            self._failure = e
            raise

    def reload(self) -> ServiceManager:
        """Forget the active manager (or a failed detection) and probe again."""
        with self._lock:
            self._active = None
            self._failure = None
            self._active = self._detect_locked()
            return self._active

    def __repr__(self) -> str:
        active = self._active.name if self._active else None
        return f"ManagerRegistry(managers={self.names()}, active={active})"
