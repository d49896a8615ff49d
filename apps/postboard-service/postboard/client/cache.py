"""
Client-side query cache.

Results are stored under tuple query keys in an LRU cache. Concurrent
fetches of the same key share one loader call, invalidation is by key
prefix, and an invalidation that lands while a fetch is in flight marks
the arriving result stale so the next read refetches.
"""
import logging
import threading
import time
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, Set, Tuple

from cachetools import LRUCache  # type: ignore[import-untyped]

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]

DEFAULT_MAX_ENTRIES = 500
DEFAULT_STALE_SECONDS = 30.0


@dataclass
class CacheEntry:
    value: Any
    fetched_at: float
    invalidated: bool = False


def key_matches(key: QueryKey, prefix: QueryKey) -> bool:
    return key[: len(prefix)] == tuple(prefix)


class QueryCache:
    """
    LRU cache of procedure results keyed by query key.

    Attributes:
        max_entries: Maximum number of cached results
        stale_seconds: Age after which an entry is refetched on read;
            ``None`` keeps entries fresh until invalidated
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        stale_seconds: Optional[float] = DEFAULT_STALE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_entries = max_entries
        self.stale_seconds = stale_seconds
        self._clock = clock
        self._entries: LRUCache = LRUCache(maxsize=max_entries)
        self._inflight: Dict[QueryKey, Future] = {}
        self._invalidated_inflight: Set[QueryKey] = set()
        self._lock = threading.Lock()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.deduplicated = 0
        self.invalidations = 0

    def _is_stale_locked(self, entry: CacheEntry) -> bool:
        if entry.invalidated:
            return True
        if self.stale_seconds is None:
            return False
        return self._clock() - entry.fetched_at > self.stale_seconds

    def is_stale(self, key: QueryKey) -> bool:
        """True when the key has no entry or its entry needs a refetch."""
        with self._lock:
            entry = self._entries.get(tuple(key))
            return entry is None or self._is_stale_locked(entry)

    def get_cached(self, key: QueryKey) -> Optional[Any]:
        """Return the cached value, stale or not, without fetching."""
        with self._lock:
            entry = self._entries.get(tuple(key))
            return entry.value if entry is not None else None

    def set(self, key: QueryKey, value: Any) -> None:
        with self._lock:
            self._entries[tuple(key)] = CacheEntry(value=value, fetched_at=self._clock())

    def fetch(self, key: QueryKey, loader: Callable[[], Any]) -> Any:
        """
        Return the fresh cached value for ``key`` or load it.

        Concurrent callers for the same key wait on the first caller's load.
        Loader errors propagate to every waiter and nothing is cached.
        """
        key = tuple(key)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and not self._is_stale_locked(entry):
                self.hits += 1
                logger.debug("Cache HIT: %s", key)
                return entry.value
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
                self.misses += 1
                logger.debug("Cache MISS: %s", key)
            else:
                self.deduplicated += 1

        if not owner:
            return future.result()

        try:
            value = loader()
        except BaseException as exc:
            # waiters must never be left on an unresolved future
            with self._lock:
                self._inflight.pop(key, None)
                self._invalidated_inflight.discard(key)
            future.set_exception(exc)
            raise

        with self._lock:
            invalidated = key in self._invalidated_inflight
            self._invalidated_inflight.discard(key)
            self._entries[key] = CacheEntry(value=value, fetched_at=self._clock(), invalidated=invalidated)
            self._inflight.pop(key, None)
        future.set_result(value)
        return value

    def prefetch(self, key: QueryKey, loader: Callable[[], Any]) -> bool:
        """Warm the cache for ``key``. Failures are logged and reported as False."""
        try:
            self.fetch(key, loader)
        except Exception as exc:
            logger.warning("prefetch_failed: key=%s error=%s", key, exc)
            return False
        return True

    def invalidate(self, prefix: QueryKey) -> int:
        """Mark every entry whose key starts with ``prefix`` stale. Returns the count."""
        prefix = tuple(prefix)
        with self._lock:
            count = 0
            for key in list(self._entries.keys()):
                if key_matches(key, prefix):
                    self._entries[key].invalidated = True
                    count += 1
            for key in self._inflight:
                if key_matches(key, prefix):
                    self._invalidated_inflight.add(key)
                    count += 1
            self.invalidations += count
        logger.debug("Invalidated %d queries under %s", count, prefix)
        return count

    def remove(self, prefix: QueryKey) -> int:
        """Drop every entry whose key starts with ``prefix``."""
        prefix = tuple(prefix)
        with self._lock:
            keys = [key for key in list(self._entries.keys()) if key_matches(key, prefix)]
            for key in keys:
                del self._entries[key]
        return len(keys)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Cleared %d cached queries", count)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            total_requests = self.hits + self.misses
            return {
                "size": len(self._entries),
                "max_size": self.max_entries,
                "in_flight": len(self._inflight),
                "hits": self.hits,
                "misses": self.misses,
                "deduplicated": self.deduplicated,
                "invalidations": self.invalidations,
                "total_requests": total_requests,
            }
