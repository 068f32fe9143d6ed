"""
Catalog Domain - Team records, identity, tag matching, and search documents.
"""

from .contracts import CatalogSource
from .documents import build_search_text, tag_acronyms
from .filters import CatalogFilter, collect_keywords, filter_records
from .identity import identity_key, stable_identity
from .models import (
    COLUMN_NAMES,
    CatalogRecord,
    Specialist,
    records_from_mappings,
    records_from_rows,
)
from .tags import acronym, csv_has_acronym, csv_has_tag, csv_parts, normalize_tag, tokenize

__all__ = [
    # Models
    "CatalogRecord",
    "Specialist",
    "COLUMN_NAMES",
    "records_from_rows",
    "records_from_mappings",
    # Contracts
    "CatalogSource",
    # Identity
    "stable_identity",
    "identity_key",
    # Documents
    "build_search_text",
    "tag_acronyms",
    # Filters
    "CatalogFilter",
    "filter_records",
    "collect_keywords",
    # Tags
    "tokenize",
    "csv_parts",
    "normalize_tag",
    "acronym",
    "csv_has_tag",
    "csv_has_acronym",
]
