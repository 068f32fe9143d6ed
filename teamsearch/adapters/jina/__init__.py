"""
Jina Adapter - Remote text embeddings (query and passage modes).
"""

from .client import RETRYABLE_STATUS, JinaEmbeddingClient
from .models import EmbeddingTask, JinaConfig

__all__ = ["JinaEmbeddingClient", "JinaConfig", "EmbeddingTask", "RETRYABLE_STATUS"]
