"""
Hybrid Search Engine - Vector retrieval re-ranked with lexical and tag signals.

Pipeline per query:
- Normalize the query and extract exact phrases
- Embed the query (cached, hedged) and fetch nearest neighbors
- Deduplicate by display name
- Fuse semantic and lexical/intent signals
- Diversify a crowded head with MMR
- Slice a page

Search is best-effort: an empty query, missing provider configuration, or
a provider failure all produce an empty result instead of an error.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from teamsearch.config import TeamSearchError
from teamsearch.domains.catalog import CatalogRecord, stable_identity

from .dedup import dedupe_by_name
from .diversify import diversify
from .fusion import fuse_scores
from .models import PagedSearchQuery, RankedItem, SearchPage, SearchQuery, VectorMatch
from .normalizer import extract_exact_phrases, normalize_query
from .pagination import candidate_pool_size, decode_cursor, paginate

if TYPE_CHECKING:
    from teamsearch.config import Settings

    from .contracts import Embedder, VectorStore

logger = logging.getLogger(__name__)

__all__ = ["RankingOptions", "TeamSearchEngine"]


class RankingOptions(BaseModel):
    """Ranking and paging knobs."""

    page_size_max: int = Field(default=50, ge=1)
    pool_factor: int = Field(default=2, ge=1)
    pool_cap: int = Field(default=1000, ge=1)
    diversify_top_n: int = Field(default=8, ge=2)
    diversify_threshold: float = Field(default=0.55, ge=0.0, le=1.0)
    mmr_lambda: float = Field(default=0.7, ge=0.0, le=1.0)
    mmr_k: int = Field(default=20, ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings: Settings) -> RankingOptions:
        return cls(
            page_size_max=settings.page_size_max,
            pool_factor=settings.pool_factor,
            pool_cap=settings.pool_cap,
            diversify_top_n=settings.diversify_top_n,
            diversify_threshold=settings.diversify_threshold,
            mmr_lambda=settings.mmr_lambda,
            mmr_k=settings.mmr_k,
        )


class TeamSearchEngine:
    """
    Ranked team search over a vector store.

    Example:
        >>> engine = TeamSearchEngine(embedder, store)
        >>> items = await engine.search(SearchQuery(q="seo for saas", limit=10))
        >>> page = await engine.search_page(PagedSearchQuery(q="seo", limit=20))
    """

    def __init__(
        self,
        embedder: Embedder | None,
        vector_store: VectorStore | None,
        options: RankingOptions | None = None,
    ) -> None:
        """
        Initialize search engine.

        Args:
            embedder: Query embedder, or None when the provider is not configured
            vector_store: Nearest-neighbor store, or None when not configured
            options: Ranking knobs (defaults match production)
        """
        self._embedder = embedder
        self._store = vector_store
        self._options = options or RankingOptions()
        self._index_ready = False

    @property
    def configured(self) -> bool:
        return self._embedder is not None and self._store is not None

    @property
    def options(self) -> RankingOptions:
        return self._options

    async def search(self, query: SearchQuery) -> list[dict]:
        """
        Ranked results for ``query``, at most ``query.limit`` items.

        Returns:
            Column-keyed payloads with ``id`` and ``score``
        """
        ranked = await self._rank(query.q, pool_size=query.limit)
        return [item.to_item() for item in ranked[: query.limit]]

    async def search_page(self, query: PagedSearchQuery) -> SearchPage:
        """
        One page of ranked results.

        The candidate pool grows with the requested page, so shallow pages
        are exact and deep pages best-effort. ``total_estimate`` is the size
        of the deduplicated pool, not a corpus count.
        """
        page = decode_cursor(query.cursor)
        page_size = min(query.limit, self._options.page_size_max)
        pool_size = candidate_pool_size(
            page,
            page_size,
            factor=self._options.pool_factor,
            cap=self._options.pool_cap,
        )

        ranked = await self._rank(query.q, pool_size=pool_size)
        chunk, next_cursor = paginate(ranked, page, page_size)
        return SearchPage(
            items=[item.to_item() for item in chunk],
            next_cursor=next_cursor,
            total_estimate=len(ranked),
        )

    async def rank(self, raw_query: str, pool_size: int) -> list[RankedItem]:
        """Full ranked pool for a query (diagnostics and CLI)."""
        return await self._rank(raw_query, pool_size=pool_size)

    async def warmup(self) -> bool:
        """Prime the index and the provider connection. Never raises."""
        if not self.configured:
            logger.info("Warmup skipped: vector search is not configured")
            return False
        try:
            await self._ensure_index()
            await self._embedder.embed_query("ping")  # type: ignore[union-attr]
        except TeamSearchError as exc:
            logger.warning("Warmup failed (%s): %s", exc.code.value, exc.message)
            return False
        return True

    async def _ensure_index(self) -> None:
        if self._index_ready:
            return
        await self._store.ensure_index(self._embedder.dimensions)  # type: ignore[union-attr]
        self._index_ready = True

    async def _rank(self, raw_query: str, pool_size: int) -> list[RankedItem]:
        raw = (raw_query or "").strip()
        normalized = normalize_query(raw)
        if not normalized:
            return []

        if not self.configured:
            logger.warning("Vector search is not configured; returning empty result")
            return []

        start = time.perf_counter()
        try:
            await self._ensure_index()
            vector = await self._embedder.embed_query(normalized)  # type: ignore[union-attr]
            matches = await self._store.search(vector, k=pool_size)  # type: ignore[union-attr]
        except TeamSearchError as exc:
            logger.warning(
                "Search failed for query='%s' (%s): %s",
                raw[:50],
                exc.code.value,
                exc.message,
            )
            return []

        items = dedupe_by_name([self._to_ranked(m) for m in matches if m.payload])
        ranked = fuse_scores(items, normalized, extract_exact_phrases(raw))
        ranked = diversify(
            ranked,
            top_n=self._options.diversify_top_n,
            threshold=self._options.diversify_threshold,
            k=self._options.mmr_k,
            lam=self._options.mmr_lambda,
        )

        logger.info(
            "Hybrid search: query='%s' -> %d results (hits=%d, pool=%d, %.1fms)",
            raw[:50],
            len(ranked),
            len(matches),
            pool_size,
            (time.perf_counter() - start) * 1000,
        )
        return ranked

    @staticmethod
    def _to_ranked(match: VectorMatch) -> RankedItem:
        record = CatalogRecord.from_payload(match.payload)
        return RankedItem(
            record=record,
            identity=match.id or stable_identity(record),
            semantic_score=match.score,
        )
