"""
Catalog Indexer - Batch job that embeds every record and upserts it by stable identity.

Batches run concurrently. A failing batch never aborts the run: failures
are collected per identity and reported at the end. With ``strict`` the
run raises once everything else has been written.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING

from teamsearch.config import ConfigurationError, IndexingError, TeamSearchError
from teamsearch.domains.catalog import CatalogRecord, build_search_text, stable_identity

from .models import IndexReport, VectorPoint

if TYPE_CHECKING:
    from teamsearch.domains.catalog import CatalogSource

    from .contracts import Embedder, VectorStore

logger = logging.getLogger(__name__)

__all__ = ["CatalogIndexer"]


class CatalogIndexer:
    """
    Pulls the catalog and writes passage embeddings to the vector store.

    Example:
        >>> indexer = CatalogIndexer(source, embedder, store, batch_size=64)
        >>> report = await indexer.run()
        >>> print(report.upserted, report.failed)
    """

    def __init__(
        self,
        source: CatalogSource,
        embedder: Embedder | None,
        vector_store: VectorStore | None,
        batch_size: int = 64,
        concurrency: int = 4,
    ) -> None:
        self._source = source
        self._embedder = embedder
        self._store = vector_store
        self._batch_size = max(1, batch_size)
        self._concurrency = max(1, concurrency)

    async def run(self, strict: bool = True) -> IndexReport:
        """
        Index the whole catalog.

        Args:
            strict: Raise IndexingError if any record was not written

        Returns:
            Report with counts and failed identities

        Raises:
            ConfigurationError: Embedder or vector store not configured
            CatalogError: Catalog could not be read
            IndexingError: Some records failed and ``strict`` is set
        """
        if self._embedder is None or self._store is None:
            raise ConfigurationError(
                "Vector indexing requires an embedding provider and a vector store"
            )

        start = time.perf_counter()
        records = await self._source.list_records()

        # Same identity twice means the same point; the later row wins.
        unique: dict[str, CatalogRecord] = {}
        for record in records:
            unique[stable_identity(record)] = record
        entries = list(unique.items())

        await self._store.ensure_index(self._embedder.dimensions)

        batches = [
            entries[i : i + self._batch_size] for i in range(0, len(entries), self._batch_size)
        ]
        semaphore = asyncio.Semaphore(self._concurrency)

        async def guarded(number: int, batch: list[tuple[str, CatalogRecord]]) -> tuple[int, list[str]]:
            async with semaphore:
                return await self._index_batch(number, batch)

        tasks = [asyncio.create_task(guarded(n, b)) for n, b in enumerate(batches, 1)]
        try:
            results = await asyncio.gather(*tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await self._store.flush()

        failed = [identity for _, batch_failed in results for identity in batch_failed]
        report = IndexReport(
            total=len(entries),
            upserted=sum(written for written, _ in results),
            failed=failed,
            batches=len(batches),
            duration_seconds=round(time.perf_counter() - start, 3),
        )
        logger.info(
            "Indexed %d/%d records in %d batches (%.1fs, %d failed)",
            report.upserted,
            report.total,
            report.batches,
            report.duration_seconds,
            len(report.failed),
        )

        if strict and report.failed:
            raise IndexingError(
                f"{len(report.failed)} of {report.total} records were not indexed",
                details=report.model_dump(),
            )
        return report

    async def _index_batch(
        self,
        number: int,
        batch: Sequence[tuple[str, CatalogRecord]],
    ) -> tuple[int, list[str]]:
        """Embed and upsert one batch. Returns (written, failed identities)."""
        texts = [build_search_text(record) for _, record in batch]
        try:
            vectors = await self._embedder.embed_passages(texts)  # type: ignore[union-attr]
        except TeamSearchError as exc:
            logger.error("Batch %d: embedding failed (%s): %s", number, exc.code.value, exc.message)
            return 0, [identity for identity, _ in batch]

        points: list[VectorPoint] = []
        failed: list[str] = []
        for (identity, record), vector in zip(batch, vectors):
            if vector is None:
                failed.append(identity)
                continue
            points.append(VectorPoint(id=identity, vector=vector, payload=record.to_payload()))

        if not points:
            return 0, failed

        try:
            written = await self._store.upsert(points)  # type: ignore[union-attr]
        except TeamSearchError as exc:
            logger.error("Batch %d: upsert failed (%s): %s", number, exc.code.value, exc.message)
            return 0, failed + [p.id for p in points]

        logger.debug("Batch %d: upserted %d points (%d failed)", number, written, len(failed))
        return written, failed
