"""
Query Normalizer - Canonical query tokens and exact-phrase extraction.

Normalization never empties a non-empty query: if every token is a
stopword the unfiltered tokens are used instead, so "i need a team" is
still searchable.
"""

from __future__ import annotations

import re

__all__ = ["STOPWORDS", "normalize_query", "query_tokens", "extract_exact_phrases"]

STOPWORDS = frozenset(
    {
        "i", "me", "my", "we", "our", "need", "want", "a", "an", "the",
        "team", "for", "to", "please", "looking", "search", "find", "build", "hire",
    }
)

_COMPOUNDS = (
    (re.compile(r"\bci/cd\b"), "ci cd"),
    (re.compile(r"\bcicd\b"), "ci cd"),
)
_SEPARATORS = re.compile(r"[-_]+")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_QUOTED = re.compile(r'"([^"]+)"')


def _split(text: str) -> list[str]:
    return [t for t in _NON_ALNUM.split(text) if t]


def normalize_query(raw: str | None) -> str:
    """
    Canonical form of a free-text query.

    Args:
        raw: User query

    Returns:
        Lowercase, stopword-free tokens joined by single spaces

    Example:
        >>> normalize_query("Looking for a CI/CD team")
        'ci cd'
        >>> normalize_query("i need a team")
        'i need a team'
    """
    text = str(raw or "")
    base = _SEPARATORS.sub(" ", text.lower())
    for pattern, replacement in _COMPOUNDS:
        base = pattern.sub(replacement, base)

    tokens = _split(base)
    kept = [t for t in tokens if t not in STOPWORDS]
    return " ".join(kept) or " ".join(tokens) or base.strip() or text.strip()


def query_tokens(normalized: str) -> list[str]:
    """Alphanumeric tokens of an already-normalized query."""
    return _split(normalized.lower())


def extract_exact_phrases(raw: str | None) -> list[str]:
    """
    Multi-word phrases from the raw query, used only as a ranking signal.

    Contiguous bigrams and trigrams of the stopword-free tokens, plus any
    quoted substring of two or more words. Order is first-seen.

    Example:
        >>> extract_exact_phrases("i need business strategy")
        ['business strategy']
    """
    text = str(raw or "").lower()
    tokens = [t for t in _split(text) if t not in STOPWORDS]

    phrases: dict[str, None] = {}
    for i in range(len(tokens) - 1):
        phrases.setdefault(f"{tokens[i]} {tokens[i + 1]}", None)
        if i + 2 < len(tokens):
            phrases.setdefault(f"{tokens[i]} {tokens[i + 1]} {tokens[i + 2]}", None)

    for match in _QUOTED.finditer(text):
        inner = " ".join(match.group(1).split())
        if len(inner.split(" ")) >= 2:
            phrases.setdefault(inner, None)

    return list(phrases)
