"""
Spreadsheet Adapter - Catalog sources (Google Sheets, CSV, cached).
"""

from .cached import CachedCatalogSource
from .local import CsvCatalogSource
from .sheets import SHEETS_API_URL, SheetsCatalogSource

__all__ = ["SheetsCatalogSource", "CsvCatalogSource", "CachedCatalogSource", "SHEETS_API_URL"]
