"""
Search Contracts - Interfaces for search domain.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import VectorMatch, VectorPoint


@runtime_checkable
class Embedder(Protocol):
    """Contract for embedding providers."""

    @property
    def model(self) -> str: ...

    @property
    def dimensions(self) -> int: ...

    async def embed_query(self, text: str) -> list[float]:
        """Embed one search query."""
        ...

    async def embed_passages(self, texts: Sequence[str]) -> list[list[float] | None]:
        """Embed documents; a slot is None if that text could not be embedded."""
        ...

    async def close(self) -> None: ...


@runtime_checkable
class VectorStore(Protocol):
    """Contract for nearest-neighbor stores keyed by stable identity."""

    async def ensure_index(self, dimension: int, metric: str = "cosine") -> None:
        """Create the index if absent; no-op otherwise."""
        ...

    async def upsert(self, points: Sequence[VectorPoint]) -> int:
        """Insert or overwrite points. Returns the number written."""
        ...

    async def search(self, vector: Sequence[float], k: int) -> list[VectorMatch]:
        """Cosine nearest neighbors, best first."""
        ...

    async def flush(self) -> None:
        """Persist pending writes (no-op for remote stores)."""
        ...

    async def close(self) -> None: ...
