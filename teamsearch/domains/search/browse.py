"""
Catalog Browse - Filtered listing of catalog records, plain or paged.

Paged listing orders records by stable identity so page boundaries stay
put between requests while the sheet is unchanged.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from teamsearch.domains.catalog import CatalogFilter, CatalogRecord, filter_records, stable_identity

from .dedup import dedupe_by_name
from .models import SearchPage
from .pagination import decode_cursor, paginate

__all__ = ["browse_records", "browse_page", "record_item"]


def record_item(record: CatalogRecord) -> dict[str, Any]:
    """Column-keyed payload plus ``id``."""
    return {**record.to_payload(), "id": stable_identity(record)}


def browse_records(
    records: Iterable[CatalogRecord],
    criteria: CatalogFilter | None = None,
) -> list[CatalogRecord]:
    """Filter, then keep the first record seen per display name."""
    return dedupe_by_name(filter_records(records, criteria))


def browse_page(
    records: Iterable[CatalogRecord],
    criteria: CatalogFilter | None = None,
    cursor: str | None = None,
    page_size: int = 50,
) -> SearchPage:
    """
    One page of filtered, deduplicated records sorted by stable identity.

    Example:
        >>> page = browse_page(records, CatalogFilter(type="SEO"), page_size=20)
        >>> page.next_cursor  # None on the last page
    """
    listed = browse_records(records, criteria)
    listed.sort(key=stable_identity)
    chunk, next_cursor = paginate(listed, decode_cursor(cursor), max(1, page_size))
    return SearchPage(
        items=[record_item(record) for record in chunk],
        next_cursor=next_cursor,
        total_estimate=len(listed),
    )
