"""
Qdrant Adapter - Remote vector store over REST.
"""

from .client import QdrantVectorStore, from_point_id, to_point_id

__all__ = ["QdrantVectorStore", "to_point_id", "from_point_id"]
