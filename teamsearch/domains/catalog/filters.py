"""
Catalog Filters - Simple per-field filters and keyword listing for browse endpoints.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel

from .models import CatalogRecord
from .tags import csv_has_acronym, csv_has_tag, csv_parts

__all__ = ["CatalogFilter", "filter_records", "collect_keywords"]


class CatalogFilter(BaseModel):
    """
    Browse filter.

    ``type`` is a CSV of wanted tags; a record matches if any wanted tag
    equals (or is the acronym of) a tag in Type or Type2. ``type2`` is
    checked against Type2 only.
    """

    email: str | None = None
    type: str | None = None
    type2: str | None = None
    confirmed: bool = False

    model_config = {"frozen": True}

    @property
    def is_empty(self) -> bool:
        return not (
            (self.email or "").strip()
            or (self.type or "").strip()
            or (self.type2 or "").strip()
            or self.confirmed
        )

    def matches(self, record: CatalogRecord) -> bool:
        email = (self.email or "").strip().lower()
        if email and email not in record.email.lower():
            return False

        wanted = csv_parts(self.type)
        if wanted and not any(
            csv_has_tag(record.type, tag)
            or csv_has_acronym(record.type, tag)
            or csv_has_tag(record.type2, tag)
            or csv_has_acronym(record.type2, tag)
            for tag in wanted
        ):
            return False

        type2 = (self.type2 or "").strip()
        if type2 and not (csv_has_tag(record.type2, type2) or csv_has_acronym(record.type2, type2)):
            return False

        if self.confirmed and "confirmed" not in record.textarea.lower():
            return False

        return True


def filter_records(
    records: Iterable[CatalogRecord],
    criteria: CatalogFilter | None = None,
) -> list[CatalogRecord]:
    """Records matching ``criteria``, source order kept."""
    if criteria is None or criteria.is_empty:
        return list(records)
    return [r for r in records if criteria.matches(r)]


def collect_keywords(records: Iterable[CatalogRecord]) -> dict[str, list[str]]:
    """
    Unique Type / Type2 tags in first-seen order.

    Example:
        >>> collect_keywords([CatalogRecord(type="SEO, PR"), CatalogRecord(type="PR")])
        {'type': ['SEO', 'PR'], 'type2': []}
    """
    types: dict[str, None] = {}
    types2: dict[str, None] = {}
    for record in records:
        for tag in csv_parts(record.type):
            types.setdefault(tag, None)
        for tag in csv_parts(record.type2):
            types2.setdefault(tag, None)
    return {"type": list(types), "type2": list(types2)}
