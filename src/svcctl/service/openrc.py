"""OpenRC service manager."""

from __future__ import annotations

import re
from pathlib import Path

from svcctl.service.base import ServiceConfig, ServiceManager


class OpenRCManager(ServiceManager):
    """Drives init scripts through ``rc-service`` and ``rc-update``."""

    name = "openrc"
    tool = "rc-service"
    unit_dirs = (Path("/etc/init.d"),)

    # rc-service prints " * status: started"
    active_pattern = re.compile(
        r"^\s*(?:\*\s*)?status:\s+(started|running|active)\s*$",
        re.IGNORECASE | re.MULTILINE,
    )
    # rc-update rows look like " sshd | default"
    enabled_pattern = re.compile(
        r"^[^|\n]+\|\s*(default|enabled)\b.*$",
        re.IGNORECASE | re.MULTILINE,
    )

    def _list(self) -> list[str]:
        output = self.executor.run([self.tool, "-l"], self.probe_timeout)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def _exists(self, name: str) -> bool:
        """Whole-line match against ``rc-service -l``, so a prefix such as ``ngin`` is not installed."""
        return name in self._list()

    def build_command(self, action: str, config: ServiceConfig) -> list[str]:
        service = config.name_for(self.name)
        if action == "is-enabled":
            return ["rc-update", "check", service]
        if action == "is-active":
            action = "status"
        return [*self.base_command(), service, action]

    def find_services(self, keyword: str) -> list[str]:
        return [line for line in self._list() if keyword in line]
