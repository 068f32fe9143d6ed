"""
Tag helpers - Tokenizing and matching the comma-separated tag columns.

Type / Type2 hold CSV tag lists ("SEO, Content Marketing"). Matching is
exact per tag after case and whitespace normalization; acronyms are the
upper-cased first letters of each word ("Public Relations" -> "PR").
"""

from __future__ import annotations

import re

__all__ = [
    "tokenize",
    "csv_parts",
    "normalize_tag",
    "acronym",
    "csv_has_tag",
    "csv_has_acronym",
]

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_WORD_SPLIT = re.compile(r"[^a-z0-9]+", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def tokenize(text: str | None) -> list[str]:
    """Lowercase alphanumeric tokens, in order, duplicates kept."""
    return [t for t in _NON_ALNUM.split(str(text or "").lower()) if t]


def csv_parts(csv: str | None) -> list[str]:
    """Split a CSV tag field into trimmed, non-empty tags."""
    return [part.strip() for part in str(csv or "").split(",") if part.strip()]


def normalize_tag(tag: str | None) -> str:
    return _WHITESPACE.sub(" ", str(tag or "").lower()).strip()


def acronym(text: str | None) -> str:
    """First letter of each alphanumeric word, upper-cased."""
    return "".join(w[0] for w in _WORD_SPLIT.split(str(text or "")) if w).upper()


def csv_has_tag(csv: str | None, wanted: str | None) -> bool:
    """True if any tag in ``csv`` equals ``wanted`` after normalization."""
    target = normalize_tag(wanted)
    if not target:
        return False
    return any(normalize_tag(tag) == target for tag in csv_parts(csv))


def csv_has_acronym(csv: str | None, wanted: str | None) -> bool:
    """True if any tag's acronym equals ``wanted`` (case-insensitive)."""
    target = str(wanted or "").strip().upper()
    if not target:
        return False
    return any(acronym(tag) == target for tag in csv_parts(csv))
