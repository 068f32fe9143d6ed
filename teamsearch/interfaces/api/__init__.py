"""
API Interface - FastAPI REST API for team search, catalog browsing and indexing.
"""

from .main import app, create_app

__all__ = ["app", "create_app"]
