"""
CLI Interface - Command-line tools for TeamSearch.

Provides commands for:
- Ranked search queries
- Catalog indexing
- Tag keywords
- Running the API server
"""

from .main import app, main

__all__ = ["app", "main"]
