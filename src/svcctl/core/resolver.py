"""Resolution of logical service keywords to installed service names."""

from __future__ import annotations

import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Optional, Sequence

from svcctl.core.aliases import AliasStore, merge_unique
from svcctl.core.cache import SingleFlight, TTLCache, is_miss
from svcctl.errors import (
    CommandTimeoutError,
    DiscoveryError,
    DiscoveryTimeoutError,
    ServiceError,
    ServiceNotFoundError,
)
from svcctl.service.base import ServiceConfig, ServiceManager
from svcctl.service.registry import ManagerRegistry
from svcctl.utils.logging import get_logger

EXISTENCE_TTL = 30.0
DISCOVERY_TTL = 300.0
CANDIDATE_WINDOW = 1.0


def normalize_name(keyword: str, manager: str) -> str:
    """
    Apply the naming convention of ``manager`` to a keyword.

    systemd names get a ``.service`` suffix unless they already name a
    service or socket unit; other managers drop the suffix.
    """
    name = keyword.strip().lower()
    if name.endswith(".service.socket"):
        name = name[: -len(".service.socket")] + ".socket"
    if manager != "systemd":
        if name.endswith(".service"):
            name = name[: -len(".service")]
        return name
    if not name.endswith((".service", ".socket")):
        name += ".service"
    return name


def select_best_match(keyword: str, candidates: Sequence[str]) -> str:
    """
    Pick the discovered name that best matches ``keyword``.

    A case-insensitive exact match wins; otherwise the first candidate, in
    the order given, that contains the keyword.

    Raises:
        ServiceNotFoundError: Nothing matches.
    """
    lowered = keyword.lower()
    for name in candidates:
        if name.lower() == lowered:
            return name
    for name in candidates:
        if lowered in name.lower():
            return name
    raise ServiceNotFoundError(keyword, "no exact or partial match")


class ServiceNameResolver:
    """
    Turns a keyword such as ``"fail2ban"`` into a confirmed service name.

    Steps, stopping at the first success:
        1. Normalize for the active manager and probe that name directly.
        2. Race the built-in and learned aliases against each other.
        3. Enumerate services containing the keyword and pick the best match.

    A successful resolution is learned as an alias. A failed one prunes
    aliases that no longer exist before raising ServiceNotFoundError.
    """

    def __init__(
        self,
        registry: ManagerRegistry,
        aliases: AliasStore,
        existence_cache: Optional[TTLCache] = None,
        discovery_cache: Optional[TTLCache] = None,
        flight: Optional[SingleFlight] = None,
        candidate_window: float = CANDIDATE_WINDOW,
        max_parallel_probes: int = 8,
    ) -> None:
        self.registry = registry
        self.aliases = aliases
        self.existence_cache = existence_cache if existence_cache is not None else TTLCache(EXISTENCE_TTL)
        self.discovery_cache = discovery_cache if discovery_cache is not None else TTLCache(DISCOVERY_TTL)
        self.flight = flight if flight is not None else SingleFlight()
        self.candidate_window = candidate_window
        self.max_parallel_probes = max(1, max_parallel_probes)
        self._logger = get_logger("svcctl.resolver")

    @property
    def manager(self) -> ServiceManager:
        return self.registry.active

    def normalize(self, keyword: str) -> str:
        return normalize_name(keyword, self.manager.name)

    def resolve(self, keyword: str) -> str:
        """
        Resolve ``keyword`` to an installed service name.

        Raises:
            ServiceNotFoundError: No confirmed service matches the keyword.
        """
        key = keyword.strip().lower()
        if not key:
            raise ServiceNotFoundError(keyword, "empty keyword")

        processed = self.normalize(key)
        if self.confirm_exists(processed):
            self.aliases.add(key, processed)
            return processed

        candidates = merge_unique([processed], self.aliases.candidates(key))
        try:
            name = self.race_candidates(key, candidates)
        except (ServiceNotFoundError, DiscoveryTimeoutError) as e:
            self._logger.debug(f"alias race for {key} failed: {e}")
        else:
            self.aliases.add(key, name)
            return name

        try:
            name = self.discover_and_select(key)
        except ServiceError as e:
            self.cleanup(key)
            raise ServiceNotFoundError(keyword, str(e)) from e

        self.aliases.add(key, name)
        return name

    def confirm_exists(self, name: str) -> bool:
        """
        Check that ``name`` is installed, consulting the existence cache.

        Probe failures count as "does not exist" and are not cached.
        """
        cached = self.existence_cache.lookup(name)
        if not is_miss(cached):
            return cached

        manager = self.manager
        try:
            exists = manager.service_exists(ServiceConfig.for_manager(manager.name, name))
        except (ServiceError, OSError) as e:
            self._logger.debug(f"existence probe for {name} failed: {e}")
            return False
        self.existence_cache.set(name, exists)
        return exists

    def race_candidates(self, keyword: str, candidates: Sequence[str]) -> str:
        """
        Probe all candidates in parallel; the first confirmed one wins.

        Probes still running when a winner is found, or when the window
        closes, are left to finish in the background; queued ones are cancelled.

        Raises:
            DiscoveryTimeoutError: Nothing was confirmed within the window.
            ServiceNotFoundError: Every probe came back negative.
        """
        if not candidates:
            raise ServiceNotFoundError(keyword, "no candidates")

        pool = ThreadPoolExecutor(
            max_workers=min(self.max_parallel_probes, len(candidates)),
            thread_name_prefix="svcctl-probe",
        )
        deadline = time.monotonic() + self.candidate_window
        try:
            pending = {pool.submit(self.confirm_exists, name): name for name in candidates}
            waiting = set(pending)
            while waiting:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise DiscoveryTimeoutError(keyword, self.candidate_window)
                done, waiting = wait(waiting, timeout=remaining, return_when=FIRST_COMPLETED)
                for future in done:
                    if future.exception() is None and future.result():
                        name = pending[future]
                        self._logger.debug(f"candidate {name} confirmed for {keyword}")
                        return name
            raise ServiceNotFoundError(keyword, f"none of {list(candidates)} exist")
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

    def discover(self, keyword: str) -> list[str]:
        """
        Enumerate services containing ``keyword``.

        Concurrent calls for the same keyword share one enumeration; only
        successful results are cached.
        """
        return list(self.flight.do(keyword, lambda: self._discover(keyword)))

    def _discover(self, keyword: str) -> tuple[str, ...]:
        cached = self.discovery_cache.lookup(keyword)
        if not is_miss(cached):
            self._logger.debug(f"discovery cache hit for {keyword}")
            return cached

        manager = self.manager
        try:
            found = tuple(manager.find_services(keyword))
        except CommandTimeoutError as e:
            raise DiscoveryTimeoutError(keyword, e.timeout) from e
        except (ServiceError, OSError) as e:
            self._logger.error(f"Find services failed for {keyword}: {e}")
            raise DiscoveryError(keyword, str(e)) from e

        self._logger.debug(f"[{manager.name}] discovered for {keyword}: {list(found)}")
        self.discovery_cache.set(keyword, found)
        return found

    def discover_and_select(self, keyword: str) -> str:
        discovered = self.discover(keyword)
        if not discovered:
            raise ServiceNotFoundError(keyword, "no installed service matches")

        selected = select_best_match(keyword, discovered)
        self._logger.debug(f"[{self.manager.name}] [keyword: {keyword}] selected {selected}")
        if not self.confirm_exists(selected):
            raise ServiceNotFoundError(keyword, f"{selected} is listed but not installed")
        return selected

    def cleanup(self, keyword: str) -> list[str]:
        """Prune stale aliases of ``keyword`` and forget their cached existence."""
        removed = self.aliases.prune(keyword, self.confirm_exists)
        for name in removed:
            self.existence_cache.invalidate(name)
        self.existence_cache.invalidate(self.normalize(keyword))
        return removed

    def invalidate(self) -> None:
        """Drop every cached existence and discovery result."""
        self.existence_cache.clear()
        self.discovery_cache.clear()
