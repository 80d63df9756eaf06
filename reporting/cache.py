"""
In-process cache for assembled report payloads.

Provides:
- Per-family staleness windows (sales refresh fastest, financial slowest)
- Bounded size with oldest-entry eviction
- Pattern-based invalidation
- Statistics tracking

The cache is owned by whoever builds the ReportEngine and is passed in
explicitly; there is no module-level instance.

Usage:
    from reporting.cache import ReportCache

    cache = ReportCache()
    engine = ReportEngine(source, cache=cache)

    # After a data load
    await cache.invalidate_pattern("sales:*")
"""
import asyncio
import copy
import fnmatch
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from reporting.config import CacheConfig, config
from reporting.observability import get_logger

logger = get_logger(__name__)


@dataclass
class CacheStats:
    """Cache statistics for monitoring."""

    hits: int = 0
    misses: int = 0
    expirations: int = 0
    evictions: int = 0
    sets: int = 0
    invalidations: int = 0

    @property
    def hit_rate(self) -> float:
        """Calculate cache hit rate."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0

    def to_dict(self) -> dict:
        """Convert to dictionary for API response."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "expirations": self.expirations,
            "evictions": self.evictions,
            "sets": self.sets,
            "invalidations": self.invalidations,
            "hit_rate_percent": round(self.hit_rate, 2),
        }

    def reset(self) -> None:
        """Reset all counters."""
        self.hits = 0
        self.misses = 0
        self.expirations = 0
        self.evictions = 0
        self.sets = 0
        self.invalidations = 0


class ReportCache:
    """
    TTL cache keyed by (family, filter key).

    Stored payloads are deep-copied in and out so callers can never mutate
    a cached report.
    """

    def __init__(
        self,
        cache_config: Optional[CacheConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._config = cache_config or config.cache
        self.enabled = self._config.enabled
        self.max_entries = self._config.max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, Any]]" = OrderedDict()
        self._stats = CacheStats()
        self._lock = asyncio.Lock()

    @staticmethod
    def build_key(family: str, filter_key: str) -> str:
        return f"{family}:{filter_key}"

    def ttl_for(self, family: str) -> int:
        return self._config.ttl_for(family)

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, family: str, filter_key: str) -> Optional[Any]:
        """
        Get a cached payload.

        Returns:
            A copy of the payload, or None if missing, expired or disabled
        """
        if not self.enabled:
            return None

        key = self.build_key(family, filter_key)
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats.misses += 1
                return None

            expires_at, payload = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                self._stats.expirations += 1
                self._stats.misses += 1
                logger.debug(f"Cache EXPIRED: {key}")
                return None

            self._stats.hits += 1
            logger.debug(f"Cache HIT: {key}")
            return copy.deepcopy(payload)

    async def set(self, family: str, filter_key: str, payload: Any, ttl: Optional[int] = None) -> None:
        """Store a payload with the family's staleness window unless `ttl` is given."""
        if not self.enabled:
            return

        key = self.build_key(family, filter_key)
        ttl = ttl if ttl is not None else self.ttl_for(family)
        async with self._lock:
            self._entries[key] = (self._clock() + ttl, copy.deepcopy(payload))
            self._entries.move_to_end(key)
            self._stats.sets += 1

            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self._stats.evictions += 1
                logger.debug(f"Cache EVICT: {evicted}")

    async def get_or_compute(
        self,
        family: str,
        filter_key: str,
        factory: Callable[[], Awaitable[Any]],
    ) -> Any:
        """
        Return the cached payload or compute, store and return it.

        Failures from `factory` propagate and nothing is stored.
        """
        cached = await self.get(family, filter_key)
        if cached is not None:
            return cached

        payload = await factory()
        await self.set(family, filter_key, payload)
        return payload

    async def invalidate_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a glob pattern.

        Args:
            pattern: Glob pattern (e.g. "sales:*")

        Returns:
            Number of keys deleted
        """
        async with self._lock:
            keys = [k for k in self._entries if fnmatch.fnmatchcase(k, pattern)]
            for key in keys:
                del self._entries[key]
            if keys:
                self._stats.invalidations += len(keys)
                logger.info(f"Cache invalidated {len(keys)} keys matching: {pattern}")
            return len(keys)

    async def clear(self) -> int:
        return await self.invalidate_pattern("*")

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {
            "enabled": self.enabled,
            "entries": len(self._entries),
            "max_entries": self.max_entries,
            **self._stats.to_dict(),
        }

    def reset_stats(self) -> None:
        """Reset cache statistics."""
        self._stats.reset()
