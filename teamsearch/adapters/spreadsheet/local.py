"""
CSV Source - Catalog rows from a local header-row CSV export.
"""

from __future__ import annotations

import asyncio
import csv
import logging
from pathlib import Path

from teamsearch.config import CatalogError
from teamsearch.domains.catalog import CatalogRecord, records_from_rows

logger = logging.getLogger(__name__)

__all__ = ["CsvCatalogSource"]


class CsvCatalogSource:
    """Read the catalog from a CSV file exported from the sheet."""

    def __init__(self, path: str | Path, encoding: str = "utf-8-sig") -> None:
        self.path = Path(path)
        self.encoding = encoding

    def _read_rows(self) -> list[list[str]]:
        """Read CSV rows (sync helper for to_thread)."""
        with open(self.path, newline="", encoding=self.encoding) as f:
            return list(csv.reader(f))

    async def list_records(self) -> list[CatalogRecord]:
        """
        Parse all rows.

        Raises:
            CatalogError: File missing or unreadable
        """
        try:
            rows = await asyncio.to_thread(self._read_rows)
        except (OSError, csv.Error, UnicodeDecodeError) as exc:
            raise CatalogError(f"Cannot read catalog CSV {self.path}: {exc}") from exc
        records = records_from_rows(rows)
        logger.debug("Loaded %d records from %s", len(records), self.path)
        return records

    async def close(self) -> None:
        pass
