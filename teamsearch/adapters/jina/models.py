"""
Jina Models - Configuration and task types for the embeddings API.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from teamsearch.config import Settings


class EmbeddingTask(str, Enum):
    """Jina task adapters: queries and passages are embedded differently."""

    QUERY = "retrieval.query"
    PASSAGE = "retrieval.passage"


class JinaConfig(BaseModel):
    """Configuration for the Jina embeddings client."""

    api_key: str | None = None
    base_url: str = Field(default="https://api.jina.ai")
    model: str = Field(default="jina-embeddings-v4")
    dimensions: int = Field(default=2048, ge=1)
    batch_size: int = Field(default=64, ge=1)
    timeout_seconds: float = Field(default=30.0, gt=0)
    max_retries: int = Field(default=5, ge=1)
    backoff_base: float = Field(default=0.6, ge=0)
    backoff_max: float = Field(default=30.0, ge=0)
    hedge_delay: float = Field(default=0.9, ge=0)
    cache_ttl: float = Field(default=300.0, gt=0)
    cache_size: int = Field(default=256, ge=1)

    model_config = {"frozen": True}

    @classmethod
    def from_settings(cls, settings: Settings) -> JinaConfig:
        return cls(
            api_key=settings.jina_api_key,
            base_url=settings.jina_base_url,
            model=settings.embedding_model,
            dimensions=settings.embedding_dimension,
            batch_size=settings.embedding_batch_size,
            timeout_seconds=settings.embedding_timeout,
            max_retries=settings.embedding_max_retries,
            backoff_base=settings.embedding_backoff_base,
            backoff_max=settings.embedding_backoff_max,
            hedge_delay=settings.embedding_hedge_delay,
            cache_ttl=settings.embedding_cache_ttl,
            cache_size=settings.embedding_cache_size,
        )
