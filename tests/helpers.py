"""Test doubles shared across the suite."""

import shlex
import threading
import time

from svcctl.core.executor import CommandExecutor
from svcctl.errors import CommandError
from svcctl.service.base import ServiceManager
from svcctl.service.systemd import SystemdManager


def exited(argv, output="", code=1):
    """A CommandError as raised for a process that exited non-zero."""
    return CommandError(shlex.join(argv), output, code)


class FakeExecutor(CommandExecutor):
    """
    Records every argv and answers from a table or a handler.

    A response that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses=None, handler=None):
        super().__init__()
        self.responses = dict(responses or {})
        self.handler = handler
        self.calls = []
        self.timeouts = []
        self._lock = threading.Lock()

    def run(self, argv, timeout=None):
        argv = tuple(argv)
        with self._lock:
            self.calls.append(argv)
            self.timeouts.append(timeout)
        if self.handler is not None:
            result = self.handler(argv)
        else:
            result = self.responses.get(argv, "")
        if isinstance(result, BaseException):
            raise result
        return result

    def count(self, *prefix):
        """Number of recorded calls whose argv starts with ``prefix``."""
        with self._lock:
            return sum(1 for call in self.calls if call[: len(prefix)] == prefix)


class FakeManager(ServiceManager):
    """In-memory manager with a fixed set of installed names."""

    name = "systemd"
    tool = "fakectl"

    def __init__(self, installed=(), listing=None, delay=0.0, name=None, available=True, **kwargs):
        if name:
            self.name = name
        kwargs.setdefault("privileged", True)
        kwargs.setdefault("executor", FakeExecutor())
        super().__init__(**kwargs)
        self.installed = set(installed)
        self.listing = list(listing) if listing is not None else sorted(self.installed)
        self.delay = delay
        self.available = available
        self.exists_calls = []
        self.find_calls = 0
        self._calls_lock = threading.Lock()

    def is_available(self):
        return self.available

    def _exists(self, name):
        with self._calls_lock:
            self.exists_calls.append(name)
        if self.delay:
            time.sleep(self.delay)
        return name in self.installed

    def build_command(self, action, config):
        return [self.tool, action, config.name_for(self.name)]

    def find_services(self, keyword):
        with self._calls_lock:
            self.find_calls += 1
        if self.delay:
            time.sleep(self.delay)
        return [name for name in self.listing if keyword in name]


class StubSystemd(SystemdManager):
    """systemd manager that is always available and never elevates."""

    def __init__(self, executor, unit_dirs=None):
        super().__init__(executor=executor, privileged=True)
        if unit_dirs is not None:
            self.unit_dirs = tuple(unit_dirs)

    def is_available(self):
        return True


class FakeHost:
    """
    Simulates systemctl against a table of units.

    ``units`` maps a unit name to a dict with ``active`` and ``enabled``
    flags; a unit with ``crashes`` set reports inactive after every start.
    Commands other than systemctl are answered from ``commands``.
    """

    def __init__(self, units=None, commands=None):
        self.units = {name: dict(state) for name, state in (units or {}).items()}
        self.commands = dict(commands or {})

    def __call__(self, argv):
        if argv[0] != "systemctl":
            return self.commands.get(argv, exited(argv, f"{argv[0]}: command not found", 127))

        action = argv[1]
        if action == "list-unit-files":
            if "--type=service" in argv:
                return "".join(f"{name} enabled enabled\n" for name in self.units)
            name = argv[2]
            if name not in self.units:
                return exited(argv, "0 unit files listed.")
            return f"UNIT FILE STATE PRESET\n{name} enabled enabled\n\n1 unit files listed.\n"

        name = argv[2]
        unit = self.units.get(name)
        if unit is None:
            if action == "status":
                return exited(argv, f"Unit {name} could not be found.", 4)
            return exited(argv, f"Failed to {action} {name}: Unit {name} not found.", 5)

        if action in ("start", "restart"):
            unit["active"] = not unit.get("crashes", False)
        elif action == "stop":
            unit["active"] = False
        elif action in ("enable", "disable"):
            unit["enabled"] = action == "enable"
        elif action == "status":
            if unit.get("active"):
                return f"* {name}\n   Active: active (running) since Mon 2024-01-01\n"
            return exited(argv, f"* {name}\n   Active: inactive (dead)\n", 3)
        elif action == "is-enabled":
            if unit.get("enabled"):
                return "enabled\n"
            return exited(argv, "disabled\n")
        return ""
