"""Configuration management with fluent builder interface."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from svcctl.utils.fluent import FluentBuilder
from svcctl.utils.paths import expand_path, get_alias_file, get_config_file, get_log_file


@dataclass
class TimeoutConfig:
    """Deadlines for external commands, in seconds."""

    control: float = 10.0
    probe: float = 5.0
    default: float = 30.0
    candidate_window: float = 1.0


@dataclass
class CacheConfig:
    """Lifetimes of cached lookups, in seconds."""

    existence_ttl: float = 30.0
    discovery_ttl: float = 300.0


@dataclass
class AliasConfig:
    """Alias table persistence."""

    file: Path = field(default_factory=get_alias_file)
    flush_delay: float = 20.0
    extra: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class ManagerConfig:
    """Init-system detection and invocation."""

    priority: list[str] = field(default_factory=lambda: ["systemd", "openrc", "sysvinit"])
    max_retries: int = 5
    initial_backoff: float = 1.0
    elevate_with: str = "sudo"
    max_parallel_probes: int = 8


@dataclass
class LoggingConfig:
    """Logging configuration."""

    file: Path = field(default_factory=get_log_file)
    level: str = "INFO"


def _default_self_tests() -> dict[str, list[str]]:
    return {
        "nginx": ["nginx", "-t"],
        "ssh": ["sshd", "-t"],
        "fail2ban": ["fail2ban-client", "-t"],
    }


@dataclass
class ConfigData:
    """Complete configuration data structure."""

    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    aliases: AliasConfig = field(default_factory=AliasConfig)
    managers: ManagerConfig = field(default_factory=ManagerConfig)
    self_tests: dict[str, list[str]] = field(default_factory=_default_self_tests)
    watch_unit_dirs: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class Config(FluentBuilder["Config"]):
    """
    Fluent configuration builder for svcctl.

    Example:
        config = (
            Config()
            .alias_file("/var/lib/svcctl/svcaliases.json")
            .flush_delay(seconds=20)
            .manager_priority("openrc", "sysvinit")
            .save()
        )
    """

    def __init__(self, config_path: Optional[Path] = None, load: bool = True) -> None:
        super().__init__()
        self._config_path = Path(config_path) if config_path else get_config_file()
        self._data = ConfigData()
        if load:
            self._load_existing()

    def _load_existing(self) -> None:
        """Load existing config if present."""
        if self._config_path.exists():
            try:
                with open(self._config_path) as f:
                    data = json.load(f)
                self._from_dict(data)
            except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError):
                self._data = ConfigData()

    def _from_dict(self, data: dict[str, Any]) -> None:
        """Populate config from dictionary (for loading from JSON)."""
        if "timeouts" in data:
            t = data["timeouts"]
            self._data.timeouts.control = float(t.get("control", 10.0))
            self._data.timeouts.probe = float(t.get("probe", 5.0))
            self._data.timeouts.default = float(t.get("default", 30.0))
            self._data.timeouts.candidate_window = float(t.get("candidate_window", 1.0))

        if "cache" in data:
            c = data["cache"]
            self._data.cache.existence_ttl = float(c.get("existence_ttl", 30.0))
            self._data.cache.discovery_ttl = float(c.get("discovery_ttl", 300.0))

        if "aliases" in data:
            a = data["aliases"]
            if a.get("file"):
                self._data.aliases.file = expand_path(a["file"])
            self._data.aliases.flush_delay = float(a.get("flush_delay", 20.0))
            self._data.aliases.extra = {
                str(k): [str(n) for n in v] for k, v in a.get("extra", {}).items()
            }

        if "managers" in data:
            m = data["managers"]
            self._data.managers.priority = list(
                m.get("priority", ["systemd", "openrc", "sysvinit"])
            )
            self._data.managers.max_retries = int(m.get("max_retries", 5))
            self._data.managers.initial_backoff = float(m.get("initial_backoff", 1.0))
            self._data.managers.elevate_with = m.get("elevate_with", "sudo") or ""
            self._data.managers.max_parallel_probes = int(m.get("max_parallel_probes", 8))

        if "self_tests" in data:
            self._data.self_tests = {
                str(k): [str(arg) for arg in v] for k, v in data["self_tests"].items()
            }

        self._data.watch_unit_dirs = bool(data.get("watch_unit_dirs", False))

        if "logging" in data:
            log = data["logging"]
            self._data.logging.file = expand_path(log.get("file", "~/.svcctl/svcctl.log"))
            self._data.logging.level = log.get("level", "INFO")

    def _to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for JSON serialization."""
        return {
            "timeouts": {
                "control": self._data.timeouts.control,
                "probe": self._data.timeouts.probe,
                "default": self._data.timeouts.default,
                "candidate_window": self._data.timeouts.candidate_window,
            },
            "cache": {
                "existence_ttl": self._data.cache.existence_ttl,
                "discovery_ttl": self._data.cache.discovery_ttl,
            },
            "aliases": {
                "file": str(self._data.aliases.file),
                "flush_delay": self._data.aliases.flush_delay,
                "extra": self._data.aliases.extra,
            },
            "managers": {
                "priority": self._data.managers.priority,
                "max_retries": self._data.managers.max_retries,
                "initial_backoff": self._data.managers.initial_backoff,
                "elevate_with": self._data.managers.elevate_with,
                "max_parallel_probes": self._data.managers.max_parallel_probes,
            },
            "self_tests": self._data.self_tests,
            "watch_unit_dirs": self._data.watch_unit_dirs,
            "logging": {
                "file": str(self._data.logging.file),
                "level": self._data.logging.level,
            },
        }

    # Fluent builder methods

    def alias_file(self, path: str) -> Config:
        """Set where the alias table is persisted."""
        self._check_not_built()
        self._data.aliases.file = expand_path(path)
        return self

    def flush_delay(self, seconds: float) -> Config:
        """Set the quiet period before alias changes are written."""
        self._check_not_built()
        self._data.aliases.flush_delay = seconds
        return self

    def alias(self, keyword: str, *names: str) -> Config:
        """Add predefined aliases for a keyword."""
        self._check_not_built()
        current = self._data.aliases.extra.setdefault(keyword, [])
        for name in names:
            if name not in current:
                current.append(name)
        return self

    def timeouts(
        self,
        control: Optional[float] = None,
        probe: Optional[float] = None,
        default: Optional[float] = None,
        candidate_window: Optional[float] = None,
    ) -> Config:
        """Override command deadlines."""
        self._check_not_built()
        t = self._data.timeouts
        t.control = t.control if control is None else control
        t.probe = t.probe if probe is None else probe
        t.default = t.default if default is None else default
        t.candidate_window = t.candidate_window if candidate_window is None else candidate_window
        return self

    def cache_ttl(self, existence: Optional[float] = None, discovery: Optional[float] = None) -> Config:
        """Override cache lifetimes."""
        self._check_not_built()
        if existence is not None:
            self._data.cache.existence_ttl = existence
        if discovery is not None:
            self._data.cache.discovery_ttl = discovery
        return self

    def manager_priority(self, *names: str) -> Config:
        """Set the order in which init systems are probed."""
        self._check_not_built()
        self._data.managers.priority = list(names)
        return self

    def retries(self, max_retries: int, initial_backoff: float = 1.0) -> Config:
        """Configure manager detection retries."""
        self._check_not_built()
        self._data.managers.max_retries = max_retries
        self._data.managers.initial_backoff = initial_backoff
        return self

    def elevate_with(self, tool: str) -> Config:
        """Set the privilege elevation tool ("" disables elevation)."""
        self._check_not_built()
        self._data.managers.elevate_with = tool
        return self

    def self_test(self, keyword: str, *argv: str) -> Config:
        """Register the configuration self-test used by safe restarts."""
        self._check_not_built()
        self._data.self_tests[keyword] = list(argv)
        return self

    def watch_unit_dirs(self, value: bool) -> Config:
        """Configure whether unit directory changes invalidate caches."""
        self._check_not_built()
        self._data.watch_unit_dirs = value
        return self

    def log_file(self, path: str) -> Config:
        """Set the log file path."""
        self._check_not_built()
        self._data.logging.file = expand_path(path)
        return self

    def log_level(self, level: str) -> Config:
        """Set the log level."""
        self._check_not_built()
        self._data.logging.level = level.upper()
        return self

    def save(self) -> Config:
        """Save configuration to file."""
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "w") as f:
            json.dump(self._to_dict(), f, indent=2)
        return self

    def build(self) -> ConfigData:
        """Build and return the configuration data."""
        self._mark_built()
        return self._data

    @property
    def data(self) -> ConfigData:
        """Get the configuration data without marking as built."""
        return self._data

    @property
    def path(self) -> Path:
        return self._config_path

    def __repr__(self) -> str:
        return f"Config(path={self._config_path})"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file."""
    return Config(config_path)
