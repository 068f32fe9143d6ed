"""
API Routes.
"""

from . import catalog, health, indexing, search

__all__ = ["health", "search", "catalog", "indexing"]
