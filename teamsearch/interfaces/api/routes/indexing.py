"""
Indexing Routes - Rebuild the vector index from the catalog.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from teamsearch.domains.search import CatalogIndexer, IndexReport
from teamsearch.interfaces.api.deps import get_indexer

router = APIRouter()


@router.post("", response_model=IndexReport)
async def index_catalog(
    strict: bool = Query(default=True, description="Fail if any record is not indexed"),
    indexer: CatalogIndexer = Depends(get_indexer),
) -> IndexReport:
    """
    Embed every catalog record and upsert it into the vector store.

    Re-running is safe: points are keyed by stable identity. With
    ``strict`` a partial run answers with an ``INDEXING_FAILED`` error that
    carries the report.
    """
    return await indexer.run(strict=strict)
