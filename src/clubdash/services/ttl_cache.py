"""Namespaced TTL cache for dashboard datasets."""

import asyncio
import copy
import logging
import re
import threading
import time
from typing import Any, Awaitable, Callable, Mapping, Optional, Pattern, TypeVar, Union

from pydantic_core import to_json

from clubdash.core.exceptions import ConfigurationError
from clubdash.domain.models import CacheEntry, CacheKeyStat, CacheStats, MISS

logger = logging.getLogger(__name__)

V = TypeVar("V")

KeyPattern = Union[str, Pattern[str], Callable[[str], bool]]

# Default freshness per dataset namespace, in seconds
DEFAULT_NAMESPACE_TTLS: dict[str, float] = {
    "stats": 5 * 60,
    "members": 3 * 60,
    "events": 2 * 60,
    "birthdays": 24 * 60 * 60,
    "financial": 5 * 60,
    "industries": 10 * 60,
    "interests": 10 * 60,
    "user": 5 * 60,
}

# Used when a namespace has no table entry and no override was given
DEFAULT_TTL_FLOOR_SECONDS = 5 * 60


def namespace_of(key: str) -> str:
    """Return the dataset namespace of a key ("members:full" -> "members")."""
    return key.split(":", 1)[0]


def approximate_size(value: Any) -> int:
    """Length in bytes of the value serialized as JSON."""
    return len(to_json(value, serialize_unknown=True))


class TTLCacheStore:
    """
    In-memory key/value store with per-namespace expiry.

    Entries are stamped with the injected clock on `set` and judged on
    `get`; stale entries are evicted by the read that finds them. Values
    are deep-copied on the way in and on the way out, so callers never
    share mutable state with the store. All public methods are safe to
    call from several threads.
    """

    def __init__(
        self,
        namespace_ttls: Optional[Mapping[str, float]] = None,
        default_ttl: float = DEFAULT_TTL_FLOOR_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        single_flight: bool = True,
    ):
        ttls = dict(DEFAULT_NAMESPACE_TTLS)
        if namespace_ttls:
            ttls.update(namespace_ttls)
        for name, ttl in ttls.items():
            if not 0 < ttl < float("inf"):
                raise ConfigurationError(f"TTL for namespace '{name}' must be finite and > 0")
        if not 0 < default_ttl < float("inf"):
            raise ConfigurationError("Default TTL must be finite and > 0")

        self._ttls = ttls
        self._default_ttl = float(default_ttl)
        self._clock = clock
        self._single_flight = single_flight
        self._store: dict[str, CacheEntry[Any]] = {}
        self._lock = threading.RLock()
        self._inflight: dict[str, asyncio.Future] = {}
        self._warned_namespaces: set[str] = set()
        self._hits = 0
        self._misses = 0

    def effective_ttl(self, key: str, ttl: Optional[float] = None) -> float:
        """Resolve the TTL for a key: override, then namespace table, then floor."""
        if ttl is not None:
            return ttl
        namespace = namespace_of(key)
        table_ttl = self._ttls.get(namespace)
        if table_ttl is not None:
            return table_ttl
        if namespace not in self._warned_namespaces:
            self._warned_namespaces.add(namespace)
            logger.warning(
                "No TTL configured for cache namespace '%s'; using default %.0fs",
                namespace,
                self._default_ttl,
            )
        return self._default_ttl

    def get(self, key: str, ttl: Optional[float] = None) -> Any:
        """
        Return the cached value for key, or MISS.

        MISS is returned when the key was never set or when its entry is
        no longer younger than the effective TTL; in the latter case the entry is removed.
        """
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                logger.debug("Cache miss: %s", key)
                return MISS

            max_age = self.effective_ttl(key, ttl)
            age = entry.age(self._clock())
            if age >= max_age:
                del self._store[key]
                self._misses += 1
                logger.debug("Cache expired: %s (age: %.1fs)", key, age)
                return MISS

            self._hits += 1
            logger.debug("Cache hit: %s (age: %.1fs)", key, age)
            return copy.deepcopy(entry.value)

    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous entry."""
        with self._lock:
            self._store[key] = CacheEntry(
                value=copy.deepcopy(value),
                inserted_at=self._clock(),
                size_bytes=approximate_size(value),
            )
        logger.debug("Cached: %s", key)

    def delete(self, key: str) -> None:
        """Remove one entry; no-op if absent."""
        with self._lock:
            self._store.pop(key, None)

    def clear(self) -> None:
        """Remove every entry (session end)."""
        with self._lock:
            self._store.clear()
        logger.info("Cleared all cache entries")

    def invalidate_matching(self, pattern: KeyPattern) -> int:
        """
        Remove every key matched by pattern.

        pattern may be a regex string (searched, like `re.search`), a
        compiled regex, or a predicate. Returns the number of removed keys.
        """
        matches = self._compile(pattern)
        with self._lock:
            doomed = sorted(key for key in self._store if matches(key))
            for key in doomed:
                del self._store[key]
        if doomed:
            logger.info("Invalidated %d cache entries: %s", len(doomed), ", ".join(doomed))
        return len(doomed)

    async def fetch_with_cache(
        self,
        key: str,
        producer: Callable[[], Awaitable[V]],
        ttl: Optional[float] = None,
    ) -> V:
        """
        Return the cached value for key, calling producer on a miss.

        The produced value is cached; an exception from producer is
        propagated and nothing is cached. With single-flight enabled,
        concurrent misses on one key await the same producer call.
        """
        cached = self.get(key, ttl)
        if cached is not MISS:
            return cached

        if not self._single_flight:
            return await self._produce_and_store(key, producer)

        pending = self._inflight.get(key)
        if pending is not None:
            return copy.deepcopy(await asyncio.shield(pending))

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await self._produce_and_store(key, producer)
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Retrieve so an unshared failure is not reported as unhandled
            future.exception()
            raise
        else:
            future.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)

    def keys(self) -> list[str]:
        """Return all keys whose entries are still fresh."""
        with self._lock:
            now = self._clock()
            return sorted(
                key
                for key, entry in self._store.items()
                if entry.age(now) < self.effective_ttl(key)
            )

    def stats(self) -> CacheStats:
        """Return entry ages and approximate sizes with hit/miss counters."""
        with self._lock:
            now = self._clock()
            entries = tuple(
                CacheKeyStat(
                    key=key,
                    age_seconds=round(entry.age(now), 3),
                    size_bytes=entry.size_bytes,
                )
                for key, entry in sorted(self._store.items())
            )
            return CacheStats(
                total=len(entries),
                hits=self._hits,
                misses=self._misses,
                entries=entries,
                total_size_bytes=sum(e.size_bytes for e in entries),
            )

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not MISS

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    async def _produce_and_store(self, key: str, producer: Callable[[], Awaitable[V]]) -> V:
        logger.debug("Fetching fresh data: %s", key)
        value = await producer()
        self.set(key, value)
        return value

    @staticmethod
    def _compile(pattern: KeyPattern) -> Callable[[str], bool]:
        if callable(pattern) and not isinstance(pattern, re.Pattern):
            return pattern
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        return lambda key: regex.search(key) is not None
