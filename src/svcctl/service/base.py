"""Abstract base class for init-system service managers."""

from __future__ import annotations

import os
import re
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Sequence

from svcctl.core.executor import PROBE_TIMEOUT, CommandExecutor
from svcctl.errors import CommandError
from svcctl.utils.logging import get_logger
from svcctl.utils.paths import file_exists


class StatusKind(str, Enum):
    """Which boolean a status probe answers."""

    ACTIVE = "active"
    ENABLED = "enabled"


@dataclass(frozen=True)
class ServiceConfig:
    """
    Concrete service names keyed by manager name.

    A logical service can carry a different literal name under each init
    system; a handle looks up the one for the active manager.
    """

    names: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", MappingProxyType(dict(self.names)))

    @classmethod
    def for_manager(cls, manager: str, service: str) -> ServiceConfig:
        return cls({manager: service})

    def name_for(self, manager: str) -> str:
        return self.names.get(manager, "")


@dataclass
class ServiceStatus:
    """Derived state of a service; never persisted."""

    is_active: bool = False
    is_enabled: bool = False
    is_exists: bool = False
    output: str = ""


@dataclass
class ServiceResult:
    """Outcome of a control action."""

    success: bool
    message: str
    output: str = ""


def is_safe_name(name: str) -> bool:
    """True if ``name`` is a bare unit name: no path separator, not ``.`` or ``..``."""
    return bool(name) and "/" not in name and name not in (".", "..")


def is_privileged() -> bool:
    """True when running as root."""
    return os.geteuid() == 0


class ServiceManager(ABC):
    """
    Abstract base class for init-system managers.

    Subclasses supply the control tool, the compiled status patterns and
    the manager-specific probes. Shared behaviour (privilege elevation,
    pattern matching, not-found handling) lives here.
    """

    name: str = ""
    tool: str = ""
    unit_dirs: tuple[Path, ...] = ()

    active_pattern: Optional[re.Pattern] = None
    enabled_pattern: Optional[re.Pattern] = None

    # Any of these in probe output means "no such service", which is a clean False.
    NOT_FOUND_MARKERS: tuple[str, ...] = (
        "could not be found",
        "does not exist",
        "no such file",
    )

    def __init__(
        self,
        executor: Optional[CommandExecutor] = None,
        privileged: Optional[bool] = None,
        elevate_with: str = "sudo",
        probe_timeout: float = PROBE_TIMEOUT,
    ) -> None:
        self.executor = executor or CommandExecutor()
        self._privileged = privileged
        self.elevate_with = elevate_with
        self.probe_timeout = probe_timeout
        self._logger = get_logger(f"svcctl.service.{self.name}")

    @property
    def privileged(self) -> bool:
        if self._privileged is None:
            return is_privileged()
        return self._privileged

    def is_available(self) -> bool:
        """Return True if the control tool is on PATH."""
        return shutil.which(self.tool) is not None

    def service_exists(self, config: ServiceConfig) -> bool:
        """Check whether the service named for this manager is installed."""
        name = config.name_for(self.name)
        if not is_safe_name(name):
            return False
        return self._exists(name)

    @abstractmethod
    def _exists(self, name: str) -> bool:
        """Manager-specific existence probe for a concrete name."""

    @abstractmethod
    def build_command(self, action: str, config: ServiceConfig) -> list[str]:
        """
        Build the argv for an action.

        Args:
            action: start, stop, restart, enable, disable, status, is-enabled
                or is-active; other actions are passed through to the tool.
            config: Names of the target service.

        Returns:
            The full argument vector, elevated when needed.
        """

    @abstractmethod
    def find_services(self, keyword: str) -> list[str]:
        """
        List installed services whose name contains ``keyword``.

        Order follows the underlying tool's output.
        """

    def parse_status(self, output: str, config: ServiceConfig, kind: StatusKind) -> bool:
        """Decide active/enabled from raw probe output."""
        if not output or self.is_not_found(output):
            return False
        kind = StatusKind(kind)
        pattern = self.active_pattern if kind is StatusKind.ACTIVE else self.enabled_pattern
        if pattern is None:
            return False
        return pattern.search(output) is not None

    def is_not_found(self, output: str) -> bool:
        lowered = output.lower()
        return any(marker in lowered for marker in self.NOT_FOUND_MARKERS)

    def base_command(self) -> list[str]:
        """The control tool, prefixed with the elevation tool when not root."""
        if self.privileged or not self.elevate_with:
            return [self.tool]
        return [self.elevate_with, self.tool]

    def probe(self, argv: Sequence[str], timeout: Optional[float] = None) -> str:
        """
        Run a read-only probe and return its output.

        A non-zero exit is an expected state for probes (inactive, disabled,
        unknown unit), so the captured output is returned for parsing.
        Timeouts and spawn failures still raise.
        """
        try:
            return self.executor.run(argv, self.probe_timeout if timeout is None else timeout)
        except CommandError as e:
            if not e.exited:
                raise
            self._logger.debug(f"probe exited {e.returncode}: {e.command}")
            return e.output

    def find_unit_path(self, name: str) -> Optional[Path]:
        """Return the on-disk unit file or init script for ``name``."""
        for directory in self.unit_dirs:
            candidate = directory / name
            if file_exists(candidate):
                return candidate
        return None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(tool={self.tool!r})"
