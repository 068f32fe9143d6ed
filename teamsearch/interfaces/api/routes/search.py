"""
Search Routes - Ranked team search, plain and paged.

Search is fail-soft: an empty query or an unavailable provider returns an
empty result with status 200.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query

from teamsearch.domains.search import DEFAULT_LIMIT, PagedSearchQuery, SearchPage, SearchQuery, TeamSearchEngine
from teamsearch.interfaces.api.deps import get_search_engine

router = APIRouter()


@router.post("", response_model=list[dict[str, Any]])
async def search(
    request: SearchQuery,
    engine: TeamSearchEngine = Depends(get_search_engine),
) -> list[dict[str, Any]]:
    """
    Ranked teams for a free-text query.

    - **q**: Query text (quote a phrase to boost exact matches)
    - **limit**: Maximum results, clamped to 1-100
    """
    return await engine.search(request)


@router.get("", response_model=list[dict[str, Any]])
async def search_get(
    q: str = Query(default="", description="Query text"),
    limit: int = Query(default=DEFAULT_LIMIT, description="Maximum results (clamped to 1-100)"),
    engine: TeamSearchEngine = Depends(get_search_engine),
) -> list[dict[str, Any]]:
    """Same as ``POST /api/search`` with query parameters."""
    return await engine.search(SearchQuery(q=q, limit=limit))


@router.post("/paged", response_model=SearchPage)
async def search_paged(
    request: PagedSearchQuery,
    engine: TeamSearchEngine = Depends(get_search_engine),
) -> SearchPage:
    """
    One page of ranked teams.

    - **q**: Query text
    - **limit**: Page size, clamped to 1-50
    - **cursor**: ``next_cursor`` from the previous page; omit for page 1
    """
    return await engine.search_page(request)
