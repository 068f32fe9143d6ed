"""
Stable Identity - Content-derived ids for catalog records.

The id is the vector-store point key, so re-indexing a record overwrites its
point instead of duplicating it.
"""

from __future__ import annotations

import hashlib

from .models import CatalogRecord

__all__ = ["IDENTITY_LENGTH", "identity_key", "stable_identity"]

IDENTITY_LENGTH = 32


def identity_key(record: CatalogRecord) -> str:
    """Normalized (timestamp, name, type, type2, partner) tuple joined by ``|``."""
    parts = (
        record.timestamp,
        record.team_name,
        record.type,
        record.type2,
        record.partner,
    )
    return "|".join(part.strip().lower() for part in parts)


def stable_identity(record: CatalogRecord) -> str:
    """
    32 hex chars of SHA-256 over ``identity_key``.

    Example:
        >>> len(stable_identity(CatalogRecord(team_name="Acme")))
        32
    """
    digest = hashlib.sha256(identity_key(record).encode("utf-8")).hexdigest()
    return digest[:IDENTITY_LENGTH]
