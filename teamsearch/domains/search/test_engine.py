"""
Tests for the search engine pipeline and the catalog indexer.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from unittest.mock import AsyncMock, MagicMock

import pytest

from teamsearch.config import (
    ConfigurationError,
    EmbeddingError,
    IndexingError,
    VectorStoreError,
)
from teamsearch.domains.catalog import CatalogRecord, stable_identity

from .hybrid_search import TeamSearchEngine
from .indexer import CatalogIndexer
from .models import PagedSearchQuery, SearchQuery, VectorMatch, VectorPoint


class FakeStore:
    """Returns a fixed ranked hit list, truncated to ``k``."""

    def __init__(self, records: Sequence[CatalogRecord], scores: Sequence[float] | None = None) -> None:
        scores = scores or [0.9 - i * 0.01 for i in range(len(records))]
        self.matches = [
            VectorMatch(id=stable_identity(r), score=s, payload=r.to_payload())
            for r, s in zip(records, scores)
        ]
        self.ensure_calls = 0
        self.requested_k: list[int] = []

    async def ensure_index(self, dimension: int, metric: str = "cosine") -> None:
        self.ensure_calls += 1

    async def search(self, vector: Sequence[float], k: int) -> list[VectorMatch]:
        self.requested_k.append(k)
        return self.matches[:k]


def make_embedder() -> MagicMock:
    embedder = MagicMock()
    embedder.dimensions = 4
    embedder.embed_query = AsyncMock(return_value=[0.1, 0.2, 0.3, 0.4])
    return embedder


def corpus(n: int) -> list[CatalogRecord]:
    return [CatalogRecord(team_name=f"Team {i}", type="Design", timestamp=str(i)) for i in range(n)]


# --- Engine tests ---


async def test_search_ranks_by_fused_score() -> None:
    records = [
        CatalogRecord(team_name="PR House", type="PR"),
        CatalogRecord(team_name="Rank Co", type="SEO, Content"),
    ]
    engine = TeamSearchEngine(make_embedder(), FakeStore(records, scores=[0.6, 0.5]))

    items = await engine.search(SearchQuery(q="SEO", limit=10))

    assert [it["TeamName"] for it in items] == ["Rank Co", "PR House"]
    assert items[0]["score"] == pytest.approx(0.92)
    assert items[0]["id"] == stable_identity(records[1])


async def test_search_deduplicates_names() -> None:
    records = [
        CatalogRecord(team_name="Acme", type="SEO"),
        CatalogRecord(team_name="Acme", type="PR"),
        CatalogRecord(team_name="Beta", type="Design"),
    ]
    engine = TeamSearchEngine(make_embedder(), FakeStore(records, scores=[0.7, 0.6, 0.5]))

    items = await engine.search(SearchQuery(q="branding"))

    names = [it["TeamName"] for it in items]
    assert sorted(names) == ["Acme", "Beta"]
    acme = next(it for it in items if it["TeamName"] == "Acme")
    assert acme["Type"] == "SEO"


async def test_search_embeds_normalized_query_and_respects_limit() -> None:
    embedder = make_embedder()
    store = FakeStore(corpus(10))
    engine = TeamSearchEngine(embedder, store)

    items = await engine.search(SearchQuery(q="Looking for a CI/CD team", limit=3))

    embedder.embed_query.assert_awaited_once_with("ci cd")
    assert store.requested_k == [3]
    assert len(items) == 3


async def test_empty_query_returns_empty_without_io() -> None:
    embedder = make_embedder()
    engine = TeamSearchEngine(embedder, FakeStore(corpus(3)))

    assert await engine.search(SearchQuery(q="   ")) == []
    page = await engine.search_page(PagedSearchQuery(q=""))

    assert page.items == [] and page.next_cursor is None and page.total_estimate == 0
    embedder.embed_query.assert_not_awaited()


async def test_unconfigured_engine_returns_empty() -> None:
    engine = TeamSearchEngine(None, None)
    assert engine.configured is False
    assert await engine.search(SearchQuery(q="seo")) == []
    assert await engine.warmup() is False


async def test_provider_failure_is_fail_soft() -> None:
    embedder = make_embedder()
    embedder.embed_query.side_effect = EmbeddingError("provider down", retryable=True)
    engine = TeamSearchEngine(embedder, FakeStore(corpus(3)))

    assert await engine.search(SearchQuery(q="seo")) == []


async def test_store_failure_is_fail_soft() -> None:
    store = MagicMock()
    store.ensure_index = AsyncMock()
    store.search = AsyncMock(side_effect=VectorStoreError("boom"))
    engine = TeamSearchEngine(make_embedder(), store)

    page = await engine.search_page(PagedSearchQuery(q="seo"))

    assert page.total_estimate == 0


async def test_index_is_ensured_once() -> None:
    store = FakeStore(corpus(2))
    engine = TeamSearchEngine(make_embedder(), store)

    await engine.search(SearchQuery(q="design"))
    await engine.search(SearchQuery(q="design"))

    assert store.ensure_calls == 1


async def test_pages_concatenate_to_total_estimate() -> None:
    store = FakeStore(corpus(5))
    engine = TeamSearchEngine(make_embedder(), store)

    seen: list[str] = []
    cursor = None
    totals = []
    while True:
        page = await engine.search_page(PagedSearchQuery(q="design", limit=3, cursor=cursor))
        seen.extend(it["id"] for it in page.items)
        totals.append(page.total_estimate)
        cursor = page.next_cursor
        if cursor is None:
            break

    assert len(seen) == totals[-1] == 5
    assert len(set(seen)) == len(seen)
    assert store.requested_k == [6, 12]


async def test_invalid_cursor_serves_first_page() -> None:
    engine = TeamSearchEngine(make_embedder(), FakeStore(corpus(5)))

    first = await engine.search_page(PagedSearchQuery(q="design", limit=2))
    bogus = await engine.search_page(PagedSearchQuery(q="design", limit=2, cursor="not-a-cursor"))

    assert bogus.items == first.items


async def test_warmup_ensures_index_and_swallows_errors() -> None:
    store = FakeStore(corpus(1))
    embedder = make_embedder()
    engine = TeamSearchEngine(embedder, store)
    assert await engine.warmup() is True
    assert store.ensure_calls == 1

    embedder.embed_query.side_effect = EmbeddingError("down")
    assert await engine.warmup() is False


# --- Indexer tests ---


class RecordingStore:
    def __init__(self, fail_upsert: bool = False) -> None:
        self.points: dict[str, VectorPoint] = {}
        self.dimension: int | None = None
        self.flushed = False
        self.fail_upsert = fail_upsert

    async def ensure_index(self, dimension: int, metric: str = "cosine") -> None:
        self.dimension = dimension

    async def upsert(self, points: Sequence[VectorPoint]) -> int:
        if self.fail_upsert:
            raise VectorStoreError("write rejected")
        for point in points:
            self.points[point.id] = point
        return len(points)

    async def flush(self) -> None:
        self.flushed = True


def make_source(records: list[CatalogRecord]) -> MagicMock:
    source = MagicMock()
    source.list_records = AsyncMock(return_value=records)
    return source


def make_passage_embedder(bad_text: str | None = None) -> MagicMock:
    async def embed_passages(texts: Sequence[str]) -> list[list[float] | None]:
        return [None if bad_text and bad_text in t else [1.0, 0.0, 0.0, 0.0] for t in texts]

    embedder = MagicMock()
    embedder.dimensions = 4
    embedder.embed_passages = AsyncMock(side_effect=embed_passages)
    return embedder


async def test_indexer_upserts_every_record_by_identity() -> None:
    records = corpus(5)
    store = RecordingStore()
    indexer = CatalogIndexer(make_source(records), make_passage_embedder(), store, batch_size=2)

    report = await indexer.run()

    assert report.total == 5
    assert report.upserted == 5
    assert report.batches == 3
    assert report.ok
    assert store.dimension == 4
    assert store.flushed
    assert set(store.points) == {stable_identity(r) for r in records}
    assert store.points[stable_identity(records[0])].payload["TeamName"] == "Team 0"


async def test_reindexing_is_idempotent() -> None:
    records = corpus(3)
    store = RecordingStore()
    indexer = CatalogIndexer(make_source(records), make_passage_embedder(), store)

    await indexer.run()
    await indexer.run()

    assert len(store.points) == 3


async def test_duplicate_identities_collapse() -> None:
    record = CatalogRecord(team_name="Acme", type="SEO")
    report = await CatalogIndexer(
        make_source([record, record]), make_passage_embedder(), RecordingStore()
    ).run()
    assert report.total == 1


async def test_bad_record_is_isolated_and_reported() -> None:
    records = corpus(3) + [CatalogRecord(team_name="Broken", type="Design")]
    store = RecordingStore()
    indexer = CatalogIndexer(make_source(records), make_passage_embedder("Broken"), store, batch_size=2)

    report = await indexer.run(strict=False)

    assert report.upserted == 3
    assert report.failed == [stable_identity(records[3])]
    assert store.flushed


async def test_strict_run_raises_after_writing_the_rest() -> None:
    records = corpus(2) + [CatalogRecord(team_name="Broken")]
    store = RecordingStore()
    indexer = CatalogIndexer(make_source(records), make_passage_embedder("Broken"), store)

    with pytest.raises(IndexingError) as exc_info:
        await indexer.run()

    assert len(store.points) == 2
    assert exc_info.value.details["failed"] == [stable_identity(records[2])]


async def test_upsert_failure_marks_batch_failed() -> None:
    indexer = CatalogIndexer(
        make_source(corpus(2)), make_passage_embedder(), RecordingStore(fail_upsert=True)
    )
    report = await indexer.run(strict=False)
    assert report.upserted == 0
    assert len(report.failed) == 2


async def test_embedding_error_marks_batch_failed() -> None:
    embedder = make_passage_embedder()
    embedder.embed_passages.side_effect = EmbeddingError("unauthorized", status_code=401)
    indexer = CatalogIndexer(make_source(corpus(3)), embedder, RecordingStore(), batch_size=2)

    report = await indexer.run(strict=False)

    assert report.upserted == 0
    assert len(report.failed) == 3


async def test_indexer_requires_configuration() -> None:
    with pytest.raises(ConfigurationError):
        await CatalogIndexer(make_source([]), None, None).run()


async def test_unexpected_batch_error_cancels_siblings_and_still_flushes() -> None:
    cancelled: list[str] = []

    async def embed_passages(texts: Sequence[str]) -> list[list[float] | None]:
        if texts[0].startswith("Team 0"):
            raise RuntimeError("provider client crashed")
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            cancelled.append(texts[0])
            raise
        return []

    embedder = make_passage_embedder()
    embedder.embed_passages.side_effect = embed_passages
    store = RecordingStore()
    indexer = CatalogIndexer(make_source(corpus(3)), embedder, store, batch_size=1, concurrency=3)

    with pytest.raises(RuntimeError):
        await indexer.run()

    assert store.flushed
    assert len(cancelled) == 2
