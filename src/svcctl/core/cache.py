"""Expiring caches and single-flight request deduplication."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Hashable, Optional, TypeVar

from svcctl.utils.logging import get_logger

T = TypeVar("T")

_MISSING = object()


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the monotonic time it stops being valid."""

    value: T
    expires: float


class TTLCache(Generic[T]):
    """
    Thread-safe mapping whose entries expire after a fixed TTL.

    The lock only guards dictionary access; callers compute values outside it.

    Example:
        cache = TTLCache[bool](ttl=30)
        cache.set("docker.service", True)
        cache.get("docker.service")  # True until 30s have passed
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, CacheEntry[T]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the live value for ``key``, dropping it if it has expired."""
        value = self.lookup(key)
        return default if value is _MISSING else value

    def lookup(self, key: Hashable) -> Any:
        """Like get(), but returns a sentinel on a miss so falsy values are distinguishable."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return _MISSING
            if now >= entry.expires:
                del self._entries[key]
                return _MISSING
            return entry.value

    def contains(self, key: Hashable) -> bool:
        return self.lookup(key) is not _MISSING

    def set(self, key: Hashable, value: T, ttl: Optional[float] = None) -> None:
        expires = self._clock() + (self.ttl if ttl is None else ttl)
        with self._lock:
            self._entries[key] = CacheEntry(value, expires)

    def invalidate(self, key: Hashable) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def is_miss(value: Any) -> bool:
    """True if ``value`` is the sentinel returned by TTLCache.lookup() on a miss."""
    return value is _MISSING


@dataclass
class _Call:
    done: threading.Event = field(default_factory=threading.Event)
    result: Any = None
    error: Optional[BaseException] = None
    waiters: int = 0


class SingleFlight:
    """
    Collapses concurrent calls for the same key into one execution.

    The first caller for a key runs the function; callers arriving while it
    is in flight block and receive the same result (or the same exception).
    Once the call finishes the key is forgotten, so later calls run again.
    """

    def __init__(self) -> None:
        self._calls: dict[Hashable, _Call] = {}
        self._lock = threading.Lock()
        self._logger = get_logger("svcctl.singleflight")

    def do(self, key: Hashable, fn: Callable[[], T]) -> T:
        with self._lock:
            call = self._calls.get(key)
            if call is not None:
                call.waiters += 1
                leader = False
            else:
                call = _Call()
                self._calls[key] = call
                leader = True

        if not leader:
            self._logger.debug(f"joining in-flight call for {key!r}")
            call.done.wait()
            if call.error is not None:
                raise call.error
            return call.result

        try:
            call.result = fn()
        except BaseException as e:
            call.error = e
            raise
        finally:
            with self._lock:
                del self._calls[key]
            call.done.set()
        return call.result

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._calls
