"""
TTL Cache - Bounded in-memory cache with per-entry expiry.

Owned by the service instance that uses it (catalog rows, query
embeddings). Values are replaced whole, so no locking is needed; a stale
read inside the TTL window is acceptable.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

__all__ = ["TTLCache"]

V = TypeVar("V")


@dataclass
class _Entry(Generic[V]):
    value: V
    created_at: float
    expires_at: float
    hit_count: int = 0


class TTLCache(Generic[V]):
    """
    Bounded cache with TTL expiration and oldest-first eviction.

    Example:
        >>> cache: TTLCache[list[float]] = TTLCache(max_size=256, ttl_seconds=300)
        >>> cache.set(("jina-embeddings-v4", 2048, "seo"), vector)
        >>> cache.get(("jina-embeddings-v4", 2048, "seo"))
    """

    def __init__(
        self,
        max_size: int = 256,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize cache.

        Args:
            max_size: Maximum number of entries
            ttl_seconds: Entry lifetime in seconds
            clock: Monotonic time source (injectable for tests)
        """
        if max_size < 1:
            raise ValueError("max_size must be >= 1")
        self._entries: dict[Hashable, _Entry[V]] = {}
        self._max_size = max_size
        self._ttl = ttl_seconds
        self._clock = clock

    def get(self, key: Hashable) -> V | None:
        """Return the cached value, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug("Cache entry expired: %s", key)
            return None

        entry.hit_count += 1
        return entry.value

    def set(self, key: Hashable, value: V, ttl_seconds: float | None = None) -> None:
        """Store a value, evicting the oldest entry if the cache is full."""
        if key not in self._entries and len(self._entries) >= self._max_size:
            self._evict_oldest()

        now = self._clock()
        ttl = self._ttl if ttl_seconds is None else ttl_seconds
        self._entries[key] = _Entry(value=value, created_at=now, expires_at=now + ttl)

    def invalidate(self, key: Hashable) -> bool:
        """Drop one entry. Returns True if it was present."""
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        """Clear all cache entries."""
        count = len(self._entries)
        self._entries.clear()
        logger.debug("Cleared %d cache entries", count)

    def _evict_oldest(self) -> None:
        oldest = min(self._entries, key=lambda k: self._entries[k].created_at)
        del self._entries[oldest]
        logger.debug("Evicted oldest cache entry: %s", oldest)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        return {
            "size": len(self._entries),
            "max_size": self._max_size,
            "ttl_seconds": self._ttl,
            "total_hits": sum(e.hit_count for e in self._entries.values()),
        }
