"""
Deduplication - Collapse entries that share a display name.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from teamsearch.domains.catalog import CatalogRecord, stable_identity

from .models import RankedItem

__all__ = ["name_key", "dedupe_by_name"]

T = TypeVar("T", CatalogRecord, RankedItem)


def name_key(record: CatalogRecord) -> str:
    """Lowercased trimmed name, or the stable identity when the name is blank."""
    return record.team_name.strip().lower() or stable_identity(record)


def dedupe_by_name(items: Sequence[T]) -> list[T]:
    """
    Keep one entry per display name.

    Ranked items keep the highest ``semantic_score`` (a strictly greater
    score replaces, so ties keep the first seen); plain records keep the
    first seen. Output order is the order in which each name first appears.

    Example:
        >>> a = CatalogRecord(team_name="Acme", type="SEO")
        >>> b = CatalogRecord(team_name="acme ", type="PR")
        >>> dedupe_by_name([a, b]) == [a]
        True
    """
    winners: dict[str, T] = {}
    for item in items:
        if isinstance(item, RankedItem):
            key = name_key(item.record)
            current = winners.get(key)
            if current is None or item.semantic_score > current.semantic_score:
                winners[key] = item
        else:
            winners.setdefault(name_key(item), item)
    return list(winners.values())
