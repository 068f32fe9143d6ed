"""
Search Models - Data types for search domain.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from teamsearch.domains.catalog import CatalogRecord

DEFAULT_LIMIT = 50
MAX_LIMIT = 100
MAX_PAGE_LIMIT = 50


def clamp_limit(value: int | None, cap: int) -> int:
    """
    Coerce a requested result count into ``1..cap``.

    A missing or zero limit means the default.

    Example:
        >>> clamp_limit(500, MAX_LIMIT)
        100
        >>> clamp_limit(0, MAX_PAGE_LIMIT)
        50
    """
    if not value:
        value = DEFAULT_LIMIT
    return max(1, min(value, cap))


class SearchQuery(BaseModel):
    """Ranked search request. An empty ``q`` yields an empty result."""

    q: str = ""
    limit: int | None = Field(default=DEFAULT_LIMIT)

    model_config = {"frozen": True}

    @field_validator("limit")
    @classmethod
    def cap_limit(cls, value: int | None) -> int:
        """Out-of-range limits are clamped, not rejected."""
        return clamp_limit(value, MAX_LIMIT)


class PagedSearchQuery(BaseModel):
    """Paged search request; ``cursor`` comes from a previous page."""

    q: str = ""
    limit: int | None = Field(default=DEFAULT_LIMIT)
    cursor: str | None = None

    model_config = {"frozen": True}

    @field_validator("limit")
    @classmethod
    def cap_limit(cls, value: int | None) -> int:
        """Page size is clamped to ``1..50``."""
        return clamp_limit(value, MAX_PAGE_LIMIT)

class VectorPoint(BaseModel):
    """Point written to the vector store, keyed by stable identity."""

    id: str
    vector: list[float]
    payload: dict[str, Any] = Field(default_factory=dict)


class VectorMatch(BaseModel):
    """Nearest-neighbor hit."""

    id: str
    score: float
    payload: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class RankedItem(BaseModel):
    """Search hit being re-ranked; lives for one request."""

    record: CatalogRecord
    identity: str
    semantic_score: float = 0.0
    fused_score: float = 0.0
    signals: dict[str, float] = Field(default_factory=dict)

    def add(self, signal: str, amount: float) -> None:
        """Apply one additive adjustment and remember it."""
        if amount:
            self.fused_score += amount
            self.signals[signal] = self.signals.get(signal, 0.0) + amount

    def to_item(self) -> dict[str, Any]:
        """Column-keyed payload plus ``id`` and ``score``, as returned to callers."""
        return {**self.record.to_payload(), "id": self.identity, "score": round(self.fused_score, 6)}


class SearchPage(BaseModel):
    """One page of results. ``total_estimate`` counts the retrieved pool only."""

    items: list[dict[str, Any]] = Field(default_factory=list)
    next_cursor: str | None = None
    total_estimate: int = 0


class IndexReport(BaseModel):
    """Outcome of one indexing run."""

    total: int = 0
    upserted: int = 0
    failed: list[str] = Field(default_factory=list)
    batches: int = 0
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed
