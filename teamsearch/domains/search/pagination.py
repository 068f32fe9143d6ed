"""
Paginator - Opaque page cursors over an ordered result list.

A cursor carries only a page index, never offsets into data that may
shift between requests. Deep pages are best-effort.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Sequence
from typing import TypeVar

logger = logging.getLogger(__name__)

__all__ = ["encode_cursor", "decode_cursor", "candidate_pool_size", "paginate"]

T = TypeVar("T")


def encode_cursor(page: int) -> str:
    """URL-safe token for ``page``."""
    raw = json.dumps({"page": page}, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: str | None) -> int:
    """
    Page index from a cursor; missing or unreadable cursors mean page 1.

    Example:
        >>> decode_cursor(encode_cursor(3))
        3
        >>> decode_cursor("garbage")
        1
    """
    if not cursor:
        return 1
    try:
        padded = cursor + "=" * (-len(cursor) % 4)
        data = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
        page = int(data["page"])
    except (ValueError, TypeError, KeyError, OverflowError, binascii.Error):
        logger.debug("Ignoring unreadable cursor: %r", cursor)
        return 1
    return max(1, page)


def candidate_pool_size(page: int, page_size: int, factor: int = 2, cap: int = 1000) -> int:
    """Neighbors to retrieve so that ``page`` can be served: ``min(cap, page * size * factor)``."""
    return max(1, min(cap, page * page_size * factor))


def paginate(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], str | None]:
    """
    Slice one page.

    Returns:
        (page items, next cursor or None when this is the last page)
    """
    page = max(1, page)
    total = len(items)
    start = (page - 1) * page_size
    end = min(page * page_size, total)
    chunk = list(items[start:end]) if start < end else []
    next_cursor = encode_cursor(page + 1) if end < total else None
    return chunk, next_cursor
