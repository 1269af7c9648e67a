"""Per-request handle that runs control actions on a resolved service."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from svcctl.core.executor import CONTROL_TIMEOUT, PROBE_TIMEOUT, CommandExecutor
from svcctl.errors import CommandError, ServiceActionError, ServiceError
from svcctl.service.base import (
    ServiceConfig,
    ServiceManager,
    ServiceResult,
    ServiceStatus,
    StatusKind,
    is_safe_name,
)
from svcctl.utils.logging import get_logger


class ServiceHandler:
    """
    Runs actions for one service under the active manager.

    A handler is built per request from an already-resolved name and is
    not mutated afterwards.

    Example:
        handler = ServiceHandler(ServiceConfig.for_manager("systemd", "docker.service"), manager)
        handler.restart()
        handler.check_status().is_active
    """

    def __init__(
        self,
        config: ServiceConfig,
        manager: ServiceManager,
        executor: Optional[CommandExecutor] = None,
        control_timeout: float = CONTROL_TIMEOUT,
        probe_timeout: float = PROBE_TIMEOUT,
    ) -> None:
        self.config = config
        self.manager = manager
        self.executor = executor or manager.executor
        self.control_timeout = control_timeout
        self.probe_timeout = probe_timeout
        self._logger = get_logger("svcctl.service")

    @property
    def manager_name(self) -> str:
        return self.manager.name

    @property
    def service_name(self) -> str:
        return self.config.name_for(self.manager.name)

    def service_path(self) -> Path:
        """
        Locate the unit file or init script on disk.

        Raises:
            ServiceError: The name is unsafe or no file was found.
        """
        name = self.service_name
        if not name:
            raise ServiceError(f"service name not found for {self.manager_name}")
        if not is_safe_name(name):
            raise ServiceError(f"invalid path: {name!r}")

        path = self.manager.find_unit_path(name)
        if path is None:
            raise ServiceError(f"service path not found for {name}")
        return path

    # Control actions

    def execute(self, action: str) -> ServiceResult:
        """
        Run a control action through the manager.

        Raises:
            ServiceActionError: The tool failed; chained to the CommandError.
        """
        service = self.service_name
        argv = self.manager.build_command(action, self.config)
        try:
            output = self.executor.run(argv, self.control_timeout)
        except CommandError as e:
            self._logger.error(f"{action} operation failed: {e}")
            raise ServiceActionError(action, service, e.output) from e

        message = f"{action} : {service} completed"
        self._logger.info(f"[{self.manager_name}]: {message}")
        return ServiceResult(success=True, message=message, output=output)

    def start(self) -> ServiceResult:
        return self.execute("start")

    def stop(self) -> ServiceResult:
        return self.execute("stop")

    def restart(self) -> ServiceResult:
        return self.execute("restart")

    def enable(self) -> ServiceResult:
        return self.execute("enable")

    def disable(self) -> ServiceResult:
        return self.execute("disable")

    # Probes

    def _probe(self, action: str, kind: StatusKind) -> tuple[bool, str]:
        argv = self.manager.build_command(action, self.config)
        output = self.manager.probe(argv, self.probe_timeout)
        return self.manager.parse_status(output, self.config, kind), output

    def is_active(self) -> ServiceStatus:
        active, output = self._probe("status", StatusKind.ACTIVE)
        return ServiceStatus(is_active=active, output=output)

    def is_enabled(self) -> ServiceStatus:
        enabled, output = self._probe("is-enabled", StatusKind.ENABLED)
        return ServiceStatus(is_enabled=enabled, output=output)

    def is_exists(self) -> ServiceStatus:
        return ServiceStatus(is_exists=self.manager.service_exists(self.config))

    def check_status(self) -> ServiceStatus:
        """
        Run the active and enabled probes concurrently and merge them.

        Raises:
            CommandError: A probe timed out or could not be run.
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="svcctl-status") as pool:
            active = pool.submit(self._probe, "status", StatusKind.ACTIVE)
            enabled = pool.submit(self._probe, "is-enabled", StatusKind.ENABLED)
            is_active, output = active.result()
            is_enabled, _ = enabled.result()

        return ServiceStatus(
            is_active=is_active,
            is_enabled=is_enabled,
            output=output,
        )

    def __repr__(self) -> str:
        return f"ServiceHandler({self.manager_name}:{self.service_name})"
