"""
Catalog Contracts - Interface for record sources.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import CatalogRecord


@runtime_checkable
class CatalogSource(Protocol):
    """Contract for catalog sources (spreadsheet, CSV, cached wrappers)."""

    async def list_records(self) -> list[CatalogRecord]:
        """Return all records in source order."""
        ...

    async def close(self) -> None:
        """Release any held connections."""
        ...
