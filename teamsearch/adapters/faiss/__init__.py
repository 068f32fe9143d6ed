"""
FAISS Adapter - Local vector similarity store.
"""

from .index import FAISSVectorStore

__all__ = ["FAISSVectorStore"]
