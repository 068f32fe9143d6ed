"""
API Dependencies - Dependency injection for FastAPI routes.

Provides singleton instances of the catalog source, embedder, vector store
and the services built on them. Missing provider configuration yields
``None`` collaborators, which disables vector search instead of failing.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from teamsearch.adapters.faiss import FAISSVectorStore
from teamsearch.adapters.jina import JinaConfig, JinaEmbeddingClient
from teamsearch.adapters.qdrant import QdrantVectorStore
from teamsearch.adapters.spreadsheet import (
    CachedCatalogSource,
    CsvCatalogSource,
    SheetsCatalogSource,
)
from teamsearch.config import ConfigurationError, Settings, get_settings
from teamsearch.domains.catalog import CatalogSource
from teamsearch.domains.search import (
    CatalogIndexer,
    Embedder,
    RankingOptions,
    TeamSearchEngine,
    VectorStore,
)

logger = logging.getLogger(__name__)


def build_catalog_source(settings: Settings) -> CatalogSource:
    """Sheets or CSV source behind the TTL cache."""
    inner: CatalogSource
    if settings.catalog_source == "csv":
        inner = CsvCatalogSource(settings.catalog_csv_path)
    elif settings.catalog_source == "sheets":
        inner = SheetsCatalogSource(
            settings.sheets_spreadsheet_id,
            range_=settings.sheets_range,
            api_key=settings.sheets_api_key,
            access_token=settings.sheets_access_token,
        )
    else:
        raise ConfigurationError(f"Unknown catalog_source: {settings.catalog_source}")
    return CachedCatalogSource(inner, ttl_seconds=settings.catalog_cache_ttl)


def build_embedder(settings: Settings) -> Embedder | None:
    if not settings.vectors_enabled:
        return None
    return JinaEmbeddingClient(JinaConfig.from_settings(settings))


def build_vector_store(settings: Settings) -> VectorStore | None:
    if not settings.vectors_enabled:
        return None
    if settings.vector_backend == "qdrant":
        return QdrantVectorStore(
            settings.qdrant_url or "",
            api_key=settings.qdrant_api_key,
            collection=settings.qdrant_collection,
        )
    if settings.vector_backend == "faiss":
        return FAISSVectorStore(settings.faiss_index_path, model=settings.embedding_model)
    raise ConfigurationError(f"Unknown vector_backend: {settings.vector_backend}")


@lru_cache
def get_catalog_source() -> CatalogSource:
    """Get catalog source singleton."""
    return build_catalog_source(get_settings())


@lru_cache
def get_embedder() -> Embedder | None:
    """Get embedding client singleton (None when not configured)."""
    return build_embedder(get_settings())


@lru_cache
def get_vector_store() -> VectorStore | None:
    """Get vector store singleton (None when not configured)."""
    return build_vector_store(get_settings())


@lru_cache
def get_search_engine() -> TeamSearchEngine:
    """Get search engine singleton."""
    return TeamSearchEngine(
        get_embedder(),
        get_vector_store(),
        RankingOptions.from_settings(get_settings()),
    )


@lru_cache
def get_indexer() -> CatalogIndexer:
    """Get catalog indexer singleton."""
    settings = get_settings()
    return CatalogIndexer(
        get_catalog_source(),
        get_embedder(),
        get_vector_store(),
        batch_size=settings.embedding_batch_size,
        concurrency=settings.index_concurrency,
    )


async def init_services() -> None:
    """
    Initialize services on startup.

    This should be called from the FastAPI lifespan handler.
    """
    settings = get_settings()
    if not settings.vectors_enabled:
        logger.warning("Vector search disabled: embedding provider or vector store not configured")
    get_catalog_source()
    get_search_engine()


async def cleanup_services() -> None:
    """Cleanup services on shutdown (only those that were created)."""
    if get_embedder.cache_info().currsize:
        embedder = get_embedder()
        if embedder is not None:
            await embedder.close()
    if get_vector_store.cache_info().currsize:
        store = get_vector_store()
        if store is not None:
            await store.close()
    if get_catalog_source.cache_info().currsize:
        await get_catalog_source().close()
