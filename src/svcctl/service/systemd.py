"""systemd service manager."""

from __future__ import annotations

import re
from pathlib import Path

from svcctl.errors import CommandError
from svcctl.service.base import ServiceConfig, ServiceManager, StatusKind


class SystemdManager(ServiceManager):
    """Drives units through ``systemctl``."""

    name = "systemd"
    tool = "systemctl"
    unit_dirs = (
        Path("/etc/systemd/system"),
        Path("/usr/lib/systemd/system"),
        Path("/usr/share/systemd/system"),
        Path("/usr/local/lib/systemd/system"),
    )

    active_pattern = re.compile(r"Active:\s+active\b", re.IGNORECASE)
    enabled_pattern = re.compile(r"\s*enabled\s*", re.IGNORECASE)

    def _exists(self, name: str) -> bool:
        # list-unit-files exits 1 with "0 unit files listed." for unknown units
        try:
            output = self.executor.run([self.tool, "list-unit-files", name], self.probe_timeout)
        except CommandError as e:
            if e.exited:
                return False
            raise
        return name in output

    def build_command(self, action: str, config: ServiceConfig) -> list[str]:
        return [*self.base_command(), action, config.name_for(self.name)]

    def parse_status(self, output: str, config: ServiceConfig, kind: StatusKind) -> bool:
        if StatusKind(kind) is StatusKind.ENABLED:
            # is-enabled prints a single word; "enabled-runtime" and friends don't count
            if not output or self.is_not_found(output):
                return False
            return self.enabled_pattern.fullmatch(output) is not None
        return super().parse_status(output, config, kind)

    def find_services(self, keyword: str) -> list[str]:
        output = self.executor.run(
            [self.tool, "list-unit-files", "--type=service", "--no-legend"],
            self.probe_timeout,
        )
        services = []
        for line in output.splitlines():
            fields = line.split()
            if fields and keyword in fields[0]:
                services.append(fields[0])
        return services
