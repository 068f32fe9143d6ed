"""
Catalog Routes - Filtered team listing and tag keywords.

Listing endpoints are lenient: if the catalog cannot be read they log the
error and answer with an empty result.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query

from teamsearch.config import Settings, TeamSearchError, get_settings
from teamsearch.domains.catalog import CatalogFilter, CatalogRecord, CatalogSource, collect_keywords
from teamsearch.domains.search import SearchPage, browse_page, browse_records, record_item
from teamsearch.interfaces.api.deps import get_catalog_source

logger = logging.getLogger(__name__)

router = APIRouter()


def catalog_filter(
    email: str | None = Query(default=None, description="Email substring"),
    type: str | None = Query(default=None, description="CSV of wanted tags (Type or Type2)"),
    type2: str | None = Query(default=None, description="Wanted Type2 tag"),
    confirmed: bool = Query(default=False, description="Only confirmed teams"),
) -> CatalogFilter:
    return CatalogFilter(email=email, type=type, type2=type2, confirmed=confirmed)


async def _load(source: CatalogSource, endpoint: str) -> list[CatalogRecord] | None:
    try:
        return await source.list_records()
    except TeamSearchError as exc:
        logger.error("Catalog unavailable for %s (%s): %s", endpoint, exc.code.value, exc.message)
        return None


@router.get("", response_model=list[dict[str, Any]])
async def list_teams(
    criteria: CatalogFilter = Depends(catalog_filter),
    source: CatalogSource = Depends(get_catalog_source),
) -> list[dict[str, Any]]:
    """Teams matching the filters, one per display name."""
    records = await _load(source, "/api/teams")
    if records is None:
        return []
    return [record_item(record) for record in browse_records(records, criteria)]


@router.get("/paged", response_model=SearchPage)
async def list_teams_paged(
    criteria: CatalogFilter = Depends(catalog_filter),
    limit: int = Query(default=50, ge=1, description="Page size (capped)"),
    cursor: str | None = Query(default=None),
    source: CatalogSource = Depends(get_catalog_source),
    settings: Settings = Depends(get_settings),
) -> SearchPage:
    """
    Filtered teams in stable identity order, one page at a time.

    - **limit**: Page size, capped at the configured maximum
    - **cursor**: ``next_cursor`` from the previous page
    """
    records = await _load(source, "/api/teams/paged")
    if records is None:
        return SearchPage()
    return browse_page(records, criteria, cursor=cursor, page_size=min(limit, settings.page_size_max))


@router.get("/keywords")
async def keywords(source: CatalogSource = Depends(get_catalog_source)) -> dict[str, list[str]]:
    """Distinct Type and Type2 tags, first-seen order."""
    records = await _load(source, "/api/teams/keywords")
    if records is None:
        return {"type": [], "type2": []}
    return collect_keywords(records)
