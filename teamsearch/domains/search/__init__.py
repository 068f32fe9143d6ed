"""
Search Domain - Hybrid ranked team search and catalog indexing.
"""

from .browse import browse_page, browse_records, record_item
from .contracts import Embedder, VectorStore
from .dedup import dedupe_by_name, name_key
from .diversify import diversify, jaccard, mmr_reorder, should_diversify, similarity_tokens
from .fusion import INTENT_RULES, PREFERENCE_FAMILIES, IntentRule, PreferenceFamily, fuse_scores, rank_items
from .hybrid_search import RankingOptions, TeamSearchEngine
from .indexer import CatalogIndexer
from .models import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_PAGE_LIMIT,
    IndexReport,
    PagedSearchQuery,
    RankedItem,
    SearchPage,
    SearchQuery,
    VectorMatch,
    VectorPoint,
    clamp_limit,
)
from .normalizer import STOPWORDS, extract_exact_phrases, normalize_query
from .pagination import candidate_pool_size, decode_cursor, encode_cursor, paginate

__all__ = [
    # Models
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "MAX_PAGE_LIMIT",
    "clamp_limit",
    "SearchQuery",
    "PagedSearchQuery",
    "VectorPoint",
    "VectorMatch",
    "RankedItem",
    "SearchPage",
    "IndexReport",
    # Contracts
    "Embedder",
    "VectorStore",
    # Normalizer
    "STOPWORDS",
    "normalize_query",
    "extract_exact_phrases",
    # Ranking
    "dedupe_by_name",
    "name_key",
    "IntentRule",
    "PreferenceFamily",
    "INTENT_RULES",
    "PREFERENCE_FAMILIES",
    "fuse_scores",
    "rank_items",
    "similarity_tokens",
    "jaccard",
    "should_diversify",
    "mmr_reorder",
    "diversify",
    # Paging
    "encode_cursor",
    "decode_cursor",
    "candidate_pool_size",
    "paginate",
    # Browse
    "browse_records",
    "browse_page",
    "record_item",
    # Services
    "RankingOptions",
    "TeamSearchEngine",
    "CatalogIndexer",
]
