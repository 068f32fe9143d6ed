"""
Settings - Application configuration using Pydantic Settings.

Loads from environment variables and .env files.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    # Embeddings (Jina). Without an API key, vector search is disabled.
    jina_api_key: str | None = None
    jina_base_url: str = "https://api.jina.ai"
    embedding_model: str = "jina-embeddings-v4"
    embedding_dimension: int = 2048
    embedding_batch_size: int = 64
    embedding_timeout: float = 30.0
    embedding_max_retries: int = 5
    embedding_backoff_base: float = 0.6
    embedding_backoff_max: float = 30.0
    embedding_hedge_delay: float = 0.9
    embedding_cache_ttl: int = 300
    embedding_cache_size: int = 256

    # Vector store: "faiss" (local file) or "qdrant" (remote)
    vector_backend: str = "faiss"
    faiss_index_path: Path = Path("data/indices/faiss")
    qdrant_url: str | None = None
    qdrant_api_key: str | None = None
    qdrant_collection: str = "orders"

    # Catalog source: "sheets" (Google Sheets) or "csv" (local file)
    catalog_source: str = "sheets"
    sheets_spreadsheet_id: str | None = None
    sheets_range: str = "Teams!A1:ZZ1000"
    sheets_api_key: str | None = None
    sheets_access_token: str | None = None
    catalog_csv_path: Path = Path("data/teams.csv")
    catalog_cache_ttl: int = 15

    # Ranking
    page_size_max: int = 50
    pool_factor: int = 2
    pool_cap: int = 1000
    diversify_top_n: int = 8
    diversify_threshold: float = 0.55
    mmr_lambda: float = 0.7
    mmr_k: int = 20

    # Indexing
    index_concurrency: int = 4

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_debug: bool = False
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def vectors_enabled(self) -> bool:
        """True when both the embedding provider and vector store are configured."""
        if not self.jina_api_key:
            return False
        if self.vector_backend == "qdrant":
            return bool(self.qdrant_url and self.qdrant_api_key)
        return True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
