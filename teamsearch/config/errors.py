"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from teamsearch.config.errors import ErrorCode, TeamSearchError

    raise TeamSearchError(ErrorCode.INDEXING_FAILED, "3 records were not indexed")
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Embedding provider errors
    EMBEDDING_UNAVAILABLE = "EMBEDDING_UNAVAILABLE"
    EMBEDDING_RATE_LIMITED = "EMBEDDING_RATE_LIMITED"
    EMBEDDING_REJECTED = "EMBEDDING_REJECTED"
    EMBEDDING_INVALID_RESPONSE = "EMBEDDING_INVALID_RESPONSE"

    # Vector store errors
    VECTOR_STORE_UNAVAILABLE = "VECTOR_STORE_UNAVAILABLE"
    VECTOR_STORE_FAILED = "VECTOR_STORE_FAILED"
    VECTOR_STORE_DIMENSION_MISMATCH = "VECTOR_STORE_DIMENSION_MISMATCH"

    # Catalog errors
    CATALOG_UNAVAILABLE = "CATALOG_UNAVAILABLE"
    CATALOG_INVALID = "CATALOG_INVALID"

    # Indexing errors
    INDEXING_FAILED = "INDEXING_FAILED"

    # Configuration errors
    CONFIG_MISSING = "CONFIG_MISSING"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class TeamSearchError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class EmbeddingError(TeamSearchError):
    """
    Embedding provider errors.

    ``retryable`` is True for throttling, 5xx and transport failures; such
    errors are retried with backoff before they surface.
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.EMBEDDING_UNAVAILABLE,
        retryable: bool = False,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retryable = retryable
        self.status_code = status_code
        super().__init__(code, message, details)


class VectorStoreError(TeamSearchError):
    """Vector store errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.VECTOR_STORE_FAILED,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retryable = retryable
        super().__init__(code, message, details)


class CatalogError(TeamSearchError):
    """Catalog source errors."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CATALOG_UNAVAILABLE,
        retryable: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.retryable = retryable
        super().__init__(code, message, details)


class IndexingError(TeamSearchError):
    """Indexing run finished with failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.INDEXING_FAILED, message, details)


class ConfigurationError(TeamSearchError):
    """Required configuration is missing."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(ErrorCode.CONFIG_MISSING, message, details)
