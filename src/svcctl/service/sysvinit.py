"""SysV init-script service manager."""

from __future__ import annotations

import os
import re
import shlex
from pathlib import Path
from typing import Optional

from svcctl.service.base import ServiceConfig, ServiceManager, StatusKind

INIT_DIR = Path("/etc/init.d")


class SysVInitManager(ServiceManager):
    """
    Drives ``/etc/init.d`` scripts through ``service``.

    SysV has no native is-enabled/is-active queries, so both are synthesized
    with small shell snippets that print a single word.
    """

    name = "sysvinit"
    tool = "service"

    active_pattern = re.compile(r"\b(running|active)\b", re.IGNORECASE)
    enabled_pattern = re.compile(r"\benabled\b", re.IGNORECASE)

    NOT_FOUND_MARKERS = ServiceManager.NOT_FOUND_MARKERS + ("not found", "unrecognized service")
    STOPPED_MARKERS = ("not running", "is stopped", "dead", "inactive")

    def __init__(self, *args, init_dir: Optional[Path] = None, rc_root: str = "/etc", **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.init_dir = Path(init_dir) if init_dir else INIT_DIR
        self.rc_root = rc_root

    @property
    def unit_dirs(self) -> tuple[Path, ...]:
        return (self.init_dir,)

    def _exists(self, name: str) -> bool:
        return (self.init_dir / name).exists()

    def build_command(self, action: str, config: ServiceConfig) -> list[str]:
        service = shlex.quote(config.name_for(self.name))
        if action == "is-enabled":
            return [
                "sh",
                "-c",
                f"if ls {self.rc_root}/rc*.d/S*{service} >/dev/null 2>&1; "
                "then echo 'enabled'; else echo 'disabled'; fi",
            ]
        if action == "is-active":
            return [
                "sh",
                "-c",
                f"if service {service} status >/dev/null 2>&1; "
                "then echo 'active'; else echo 'inactive'; fi",
            ]
        return [*self.base_command(), config.name_for(self.name), action]

    def parse_status(self, output: str, config: ServiceConfig, kind: StatusKind) -> bool:
        if not output or self.is_not_found(output):
            return False
        text = output.strip()
        if StatusKind(kind) is StatusKind.ENABLED:
            return bool(text) and text.lower() != "disabled"
        lowered = text.lower()
        if any(marker in lowered for marker in self.STOPPED_MARKERS):
            return False
        return self.active_pattern.search(text) is not None

    def find_services(self, keyword: str) -> list[str]:
        return [name for name in sorted(os.listdir(self.init_dir)) if keyword in name]
