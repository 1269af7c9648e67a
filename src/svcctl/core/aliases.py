"""Keyword-to-service alias table with debounced persistence."""

from __future__ import annotations

import json
import os
import threading
from pathlib import Path
from typing import Callable, Mapping, Optional, Sequence

from svcctl.utils.logging import get_logger
from svcctl.utils.paths import ensure_parent_exists, get_alias_file

PREDEFINED_ALIASES: dict[str, tuple[str, ...]] = {
    "clam": ("clamav-daemon.service", "clamd@scan.service", "clamd"),
    "freshclam": ("clamav-freshclam.service", "freshclam.service"),
    "fail2ban": ("fail2ban.service", "fail2ban"),
    "supervisor": ("supervisord.service", "supervisor.service", "supervisord", "supervisor"),
    "ssh": ("sshd.service", "ssh.service", "sshd", "ssh"),
    "1panel": ("1panel.service", "1paneld"),
    "docker": ("docker.service", "dockerd"),
}


def merge_unique(*groups: Sequence[str]) -> list[str]:
    merged: list[str] = []
    for group in groups:
        for name in group:
            if name not in merged:
                merged.append(name)
    return merged


class AliasStore:
    """
    Process-wide mapping of keyword to confirmed concrete service names.

    Mutations apply in memory immediately and schedule a debounced flush:
    every mutation restarts the quiet-period timer, so a burst of updates
    produces a single write. Flushes replace the file atomically.

    Example:
        store = AliasStore(Path("/tmp/svcaliases.json"), flush_delay=20)
        store.load(exists=resolver.confirm_exists)
        store.add("docker", "docker.service")  # written ~20s later
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        flush_delay: float = 20.0,
        predefined: Optional[Mapping[str, Sequence[str]]] = None,
    ) -> None:
        self.path = Path(path) if path else get_alias_file()
        self.flush_delay = flush_delay
        self._predefined: dict[str, list[str]] = {
            key: list(values) for key, values in PREDEFINED_ALIASES.items()
        }
        for key, values in (predefined or {}).items():
            self._predefined[key] = merge_unique(self._predefined.get(key, []), values)

        self._aliases: dict[str, list[str]] = {}
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._timer_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._dirty = False
        self._logger = get_logger("svcctl.aliases")

    # Lookup

    def get(self, keyword: str) -> list[str]:
        """Learned aliases for ``keyword``, in the order they were confirmed."""
        with self._lock:
            return list(self._aliases.get(keyword, ()))

    def predefined(self, keyword: str) -> list[str]:
        return list(self._predefined.get(keyword, ()))

    def candidates(self, keyword: str) -> list[str]:
        """Built-in aliases followed by learned ones, without duplicates."""
        return merge_unique(self.predefined(keyword), self.get(keyword))

    def snapshot(self) -> dict[str, list[str]]:
        with self._lock:
            return {key: list(values) for key, values in self._aliases.items()}

    def __contains__(self, keyword: str) -> bool:
        with self._lock:
            return keyword in self._aliases

    def __len__(self) -> int:
        with self._lock:
            return len(self._aliases)

    # Mutation

    def add(self, keyword: str, name: str) -> bool:
        """
        Record that ``keyword`` resolved to ``name``.

        Returns:
            True if the table changed (and a flush was scheduled).
        """
        if keyword == name:
            return False
        with self._lock:
            names = self._aliases.setdefault(keyword, [])
            if name in names:
                return False
            names.append(name)
        self.schedule_flush()
        return True

    def register(self, aliases: Mapping[str, Sequence[str]], persist: bool = False) -> None:
        """Merge a mapping of aliases into the table."""
        changed = False
        with self._lock:
            for keyword, names in aliases.items():
                current = self._aliases.get(keyword, [])
                merged = merge_unique(current, names)
                if merged != current:
                    self._aliases[keyword] = merged
                    changed = True
        if changed and persist:
            self.schedule_flush()

    def prune(self, keyword: str, exists: Callable[[str], bool]) -> list[str]:
        """
        Drop learned aliases of ``keyword`` that no longer exist.

        The existence checks run without holding the lock.

        Returns:
            The names that were removed.
        """
        names = self.get(keyword)
        if not names:
            return []
        stale = [name for name in names if not exists(name)]
        if not stale:
            return []

        with self._lock:
            remaining = [n for n in self._aliases.get(keyword, []) if n not in stale]
            if remaining:
                self._aliases[keyword] = remaining
            else:
                self._aliases.pop(keyword, None)
        self._logger.debug(f"pruned stale aliases for {keyword}: {stale}")
        self.schedule_flush()
        return stale

    def clear(self) -> None:
        with self._lock:
            self._aliases.clear()

    # Persistence

    def load(self, exists: Callable[[str], bool]) -> int:
        """
        Load the persisted table, keeping only aliases that still exist.

        Dropped entries are not written back until the next mutation.

        Returns:
            Number of keywords loaded.
        """
        try:
            with open(self.path) as f:
                raw = json.load(f)
        except FileNotFoundError:
            return 0
        except (OSError, json.JSONDecodeError) as e:
            self._logger.warning(f"Could not read alias file {self.path}: {e}")
            return 0
        if not isinstance(raw, dict):
            self._logger.warning(f"Ignoring malformed alias file {self.path}")
            return 0

        valid: dict[str, list[str]] = {}
        for keyword, names in raw.items():
            if not isinstance(names, list):
                continue
            confirmed = [n for n in names if isinstance(n, str) and exists(n)]
            if confirmed:
                valid[str(keyword)] = confirmed

        self.register(valid)
        self._logger.debug(f"loaded {len(valid)} alias entries from {self.path}")
        return len(valid)

    def schedule_flush(self) -> None:
        """(Re)start the quiet-period timer for writing the table to disk."""
        with self._timer_lock:
            self._dirty = True
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.flush_delay, self._flush_from_timer)
            self._timer.daemon = True
            self._timer.start()

    def _flush_from_timer(self) -> None:
        with self._timer_lock:
            if self._timer is threading.current_thread():
                self._timer = None
        try:
            self.flush()
        except OSError as e:
            self._logger.warning(f"Failed to save aliases to {self.path}: {e}")

    def flush(self) -> None:
        """Write the whole table to a temp file and rename it over the target."""
        with self._write_lock:
            with self._timer_lock:
                self._dirty = False
            data = self.snapshot()
            path = ensure_parent_exists(self.path)
            tmp = path.with_name(path.name + ".tmp")
            with open(tmp, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp, path)
        self._logger.info(f"Saved {len(data)} alias entries to {path}")

    @property
    def pending(self) -> bool:
        """True while a flush is scheduled but not yet written."""
        with self._timer_lock:
            return self._dirty

    def close(self) -> None:
        """Cancel any pending timer and write outstanding changes now."""
        with self._timer_lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
            dirty = self._dirty
        if dirty:
            self.flush()
