"""
Cached Source - Whole-value TTL cache in front of another catalog source.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from teamsearch.adapters.memory import TTLCache
from teamsearch.domains.catalog import CatalogRecord, CatalogSource

logger = logging.getLogger(__name__)

__all__ = ["CachedCatalogSource"]

_KEY = "records"


class CachedCatalogSource:
    """
    Serve ``list_records`` from memory for ``ttl_seconds``.

    Failures are not cached; the next call goes back to the source.

    Example:
        >>> source = CachedCatalogSource(SheetsCatalogSource(...), ttl_seconds=15)
        >>> records = await source.list_records()  # fetched
        >>> records = await source.list_records()  # cached
    """

    def __init__(
        self,
        inner: CatalogSource,
        ttl_seconds: float = 15.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.inner = inner
        self._cache: TTLCache[list[CatalogRecord]] = TTLCache(
            max_size=1, ttl_seconds=ttl_seconds, clock=clock
        )

    async def list_records(self) -> list[CatalogRecord]:
        cached = self._cache.get(_KEY)
        if cached is not None:
            return list(cached)

        records = await self.inner.list_records()
        self._cache.set(_KEY, records)
        logger.debug("Catalog cache refreshed (%d records)", len(records))
        return list(records)

    def invalidate(self) -> None:
        """Drop the cached rows."""
        self._cache.clear()

    async def close(self) -> None:
        await self.inner.close()
