"""
Configuration - Application settings, error taxonomy, and index manifests.
"""

from .errors import (
    CatalogError,
    ConfigurationError,
    EmbeddingError,
    ErrorCode,
    IndexingError,
    TeamSearchError,
    VectorStoreError,
)
from .manifest import IndexManifest, compute_file_checksum
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "TeamSearchError",
    "EmbeddingError",
    "VectorStoreError",
    "CatalogError",
    "IndexingError",
    "ConfigurationError",
    # Manifests
    "IndexManifest",
    "compute_file_checksum",
]
