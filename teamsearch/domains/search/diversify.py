"""
Diversifier - Conditional MMR reordering of near-duplicate top results.

Diversification only kicks in when the head of the list is crowded with
look-alikes (most top-N pairs above a Jaccard threshold). The top-1 item
is never moved.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from itertools import combinations

from teamsearch.domains.catalog import CatalogRecord, tag_acronyms, tokenize

from .fusion import rank_items
from .models import RankedItem

logger = logging.getLogger(__name__)

__all__ = ["similarity_tokens", "jaccard", "should_diversify", "mmr_reorder", "diversify"]

FREE_TEXT_PREFIX = 200


def similarity_tokens(record: CatalogRecord) -> set[str]:
    """Tag tokens, name tokens, a keyword prefix, and tag acronyms."""
    tokens = set(tokenize(record.type)) | set(tokenize(record.type2))
    tokens |= set(tokenize(record.team_name))
    tokens |= set(tokenize(record.textarea[:FREE_TEXT_PREFIX]))
    tokens |= {a.lower() for a in tag_acronyms(record)}
    return tokens


def jaccard(a: set[str], b: set[str]) -> float:
    if not a or not b:
        return 0.0
    inter = a & b
    if not inter:
        return 0.0
    return len(inter) / len(a | b)


def should_diversify(
    items: Sequence[RankedItem],
    top_n: int = 8,
    threshold: float = 0.55,
) -> bool:
    """True if more than half of all top-N pairs exceed ``threshold``."""
    head = [similarity_tokens(it.record) for it in items[:top_n]]
    pairs = list(combinations(head, 2))
    if not pairs:
        return False
    similar = sum(1 for a, b in pairs if jaccard(a, b) > threshold)
    return similar * 2 > len(pairs)


def mmr_reorder(
    items: Sequence[RankedItem],
    k: int = 20,
    lam: float = 0.7,
) -> list[RankedItem]:
    """
    Maximal Marginal Relevance over fused scores.

    Seeds with the most relevant item, then greedily picks the candidate
    maximizing ``lam * relevance - (1 - lam) * max_similarity_to_selected``
    until ``k`` items are chosen. The rest follow in relevance order.

    Args:
        items: Ranked items
        k: Number of positions to diversify
        lam: Relevance weight in [0, 1]

    Returns:
        Reordered items (same members)
    """
    ordered = rank_items(items)
    if len(ordered) <= 1 or k <= 1:
        return ordered

    tokens = {it.identity: similarity_tokens(it.record) for it in ordered}
    selected = [ordered[0]]
    remaining = ordered[1:]

    while remaining and len(selected) < k:
        best_index = 0
        best_score = float("-inf")
        for index, candidate in enumerate(remaining):
            max_sim = max(jaccard(tokens[candidate.identity], tokens[s.identity]) for s in selected)
            score = lam * candidate.fused_score - (1 - lam) * max_sim
            if score > best_score:
                best_score = score
                best_index = index
        selected.append(remaining.pop(best_index))

    return selected + remaining


def diversify(
    items: Sequence[RankedItem],
    top_n: int = 8,
    threshold: float = 0.55,
    k: int = 20,
    lam: float = 0.7,
) -> list[RankedItem]:
    """Apply ``mmr_reorder`` only when the head is crowded with near-duplicates."""
    if not should_diversify(items, top_n=top_n, threshold=threshold):
        return list(items)
    logger.debug("Diversifying top %d of %d results", min(k, len(items)), len(items))
    return mmr_reorder(items, k=k, lam=lam)
