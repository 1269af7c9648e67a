"""Watches unit directories and invalidates lookup caches on change."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Iterable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from svcctl.utils.logging import get_logger


class InvalidatingHandler(FileSystemEventHandler):
    """Calls ``on_change`` once unit files stop changing for a quiet period."""

    def __init__(self, on_change: Callable[[], None], debounce_seconds: float = 2.0) -> None:
        super().__init__()
        self.on_change = on_change
        self.debounce_seconds = debounce_seconds
        self.logger = get_logger("svcctl.watcher")
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._changed: set[str] = set()

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        with self._lock:
            self._changed.add(Path(str(event.src_path)).name)
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.debounce_seconds, self._fire)
            self._timer.daemon = True
            self._timer.start()

    def _fire(self) -> None:
        with self._lock:
            changed = sorted(self._changed)
            self._changed.clear()
            self._timer = None
        self.logger.info(f"Unit files changed ({', '.join(changed)}), clearing caches")
        try:
            self.on_change()
        except Exception as e:
            self.logger.error(f"Cache invalidation failed: {e}")

    def cancel(self) -> None:
        """Cancel any pending timer."""
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None


class UnitWatcher:
    """
    Observes init-system unit directories.

    Example:
        watcher = UnitWatcher(resolver.invalidate)
        watcher.watch_all(manager.unit_dirs).start()
        # ... later ...
        watcher.stop()
    """

    def __init__(self, on_change: Callable[[], None], debounce_seconds: float = 2.0) -> None:
        self._observer = Observer()
        self._handler = InvalidatingHandler(on_change, debounce_seconds)
        self._watch_paths: list[Path] = []
        self._running = False
        self.logger = get_logger("svcctl.watcher")

    def watch(self, path: str | Path) -> UnitWatcher:
        """Add a directory to watch; missing directories are skipped."""
        path = Path(path)
        if not path.is_dir():
            self.logger.debug(f"Not watching missing directory: {path}")
            return self
        if path in self._watch_paths:
            return self
        self._watch_paths.append(path)
        if self._running:
            self._observer.schedule(self._handler, str(path), recursive=False)
        return self

    def watch_all(self, paths: Iterable[str | Path]) -> UnitWatcher:
        for path in paths:
            self.watch(path)
        return self

    def start(self) -> UnitWatcher:
        if self._running:
            return self
        for path in self._watch_paths:
            self._observer.schedule(self._handler, str(path), recursive=False)
            self.logger.debug(f"Watching: {path}")
        self._observer.start()
        self._running = True
        return self

    def stop(self) -> None:
        if not self._running:
            return
        self._handler.cancel()
        self._observer.stop()
        self._observer.join(timeout=5)
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def watched_paths(self) -> list[Path]:
        return self._watch_paths.copy()

    def __enter__(self) -> UnitWatcher:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
