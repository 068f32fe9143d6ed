"""
Hybrid Score Fusion - Semantic similarity plus lexical, tag, phrase and intent signals.

Every adjustment is additive on top of the vector similarity. Anchor
intents (SEO, PR, CI/CD) are strict: when the query names one, records
carrying the canonical tag are lifted and records without it are pushed
down, so naming a category outranks embedding-only proximity.

Fused scores are not clamped; a strong penalty can make them negative.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from teamsearch.domains.catalog import CatalogRecord, acronym, csv_has_tag, csv_parts, normalize_tag, tokenize

from .models import RankedItem
from .normalizer import query_tokens

__all__ = [
    "TYPE_HIT_BONUS",
    "TYPE2_HIT_BONUS",
    "OVERLAP_BONUS",
    "OVERLAP_CAP",
    "ACRONYM_BONUS",
    "GUARDRAIL_PENALTY",
    "PARTNER_CONFIRMATION_BONUS",
    "PREFERENCE_BONUS",
    "IntentRule",
    "PreferenceFamily",
    "INTENT_RULES",
    "PREFERENCE_FAMILIES",
    "QueryFeatures",
    "fuse_scores",
    "score_item",
    "rank_items",
]

TYPE_HIT_BONUS = 0.30
TYPE2_HIT_BONUS = 0.15
OVERLAP_BONUS = 0.06
OVERLAP_CAP = 3
ACRONYM_BONUS = 0.08
GUARDRAIL_PENALTY = -0.10
PARTNER_CONFIRMATION_BONUS = 0.03
PREFERENCE_BONUS = 0.15

PHRASE_TAG_BONUS = 0.35
PHRASE_NAME_BONUS = 0.20
PHRASE_KEYWORD_BONUS = 0.10
PHRASE_CAP = 0.60

MIN_QUERY_ACRONYM = 2


@dataclass(frozen=True)
class IntentRule:
    """
    Anchor intent: a canonical category with strict tag-presence guardrails.

    Detected when any of ``tokens`` is a query token, any of ``phrases`` is a
    substring of the normalized query, or every one of ``all_tokens`` is a
    query token.
    """

    name: str
    synonyms: frozenset[str]
    bonus: float
    penalty: float
    tokens: frozenset[str] = frozenset()
    phrases: tuple[str, ...] = ()
    all_tokens: tuple[str, ...] = ()

    def detected(self, normalized: str, tokens: set[str]) -> bool:
        return (
            bool(self.tokens & tokens)
            or any(p in normalized for p in self.phrases)
            or (bool(self.all_tokens) and all(t in tokens for t in self.all_tokens))
        )

    def matches(self, record: CatalogRecord) -> bool:
        tags = {normalize_tag(t) for t in csv_parts(record.type) + csv_parts(record.type2)}
        return bool(tags & self.synonyms)


@dataclass(frozen=True)
class PreferenceFamily:
    """Soft synonym family: a gentle nudge, separate from the anchor rules."""

    name: str
    keywords: tuple[str, ...]
    tokens: frozenset[str] = frozenset()
    phrases: tuple[str, ...] = ()

    def detected(self, normalized: str, tokens: set[str]) -> bool:
        return bool(self.tokens & tokens) or any(p in normalized for p in self.phrases)


INTENT_RULES: tuple[IntentRule, ...] = (
    IntentRule(
        name="seo",
        synonyms=frozenset({"seo", "technical seo", "on-page seo", "link building", "content seo"}),
        bonus=0.12,
        penalty=-0.22,
        tokens=frozenset({"seo"}),
    ),
    IntentRule(
        name="pr",
        synonyms=frozenset({"pr", "public relations", "media relations"}),
        bonus=0.10,
        penalty=-0.18,
        tokens=frozenset({"pr"}),
        phrases=("public relations",),
    ),
    IntentRule(
        name="ci_cd",
        synonyms=frozenset({"ci/cd", "ci cd", "cicd", "ci", "cd"}),
        bonus=0.10,
        penalty=-0.18,
        phrases=("ci/cd", "ci cd", "cicd"),
        all_tokens=("ci", "cd"),
    ),
)

PREFERENCE_FAMILIES: tuple[PreferenceFamily, ...] = (
    PreferenceFamily(
        name="ci_cd",
        keywords=(
            "ci", "cicd", "ci/cd", "pipeline", "monorepo",
            "github actions", "gitlab", "jenkins", "circleci",
        ),
        tokens=frozenset({"ci"}),
        phrases=("ci/cd", "ci cd", "cicd", "pipeline"),
    ),
    PreferenceFamily(
        name="pr",
        keywords=("pr", "public relations", "media relations"),
        tokens=frozenset({"pr"}),
        phrases=("public relations",),
    ),
    PreferenceFamily(
        name="marketing",
        keywords=(
            "marketing", "digital strategy", "content", "seo",
            "brand strategy", "go-to-market",
        ),
        tokens=frozenset({"marketing"}),
        phrases=("strategy",),
    ),
)


@dataclass
class QueryFeatures:
    """Query-side inputs to fusion, computed once per request."""

    normalized: str
    tokens: list[str]
    token_set: set[str]
    acronym: str
    intents: list[IntentRule]
    preferences: tuple[str, ...]
    phrases: list[tuple[str, re.Pattern[str]]] = field(default_factory=list)

    @classmethod
    def build(
        cls,
        normalized: str,
        phrases: Sequence[str] = (),
        intent_rules: Sequence[IntentRule] = INTENT_RULES,
        families: Sequence[PreferenceFamily] = PREFERENCE_FAMILIES,
    ) -> QueryFeatures:
        normalized = normalized.lower()
        ordered = list(dict.fromkeys(query_tokens(normalized)))
        token_set = set(ordered)

        preferences: list[str] = []
        for family in families:
            if family.detected(normalized, token_set):
                preferences.extend(family.keywords)

        return cls(
            normalized=normalized,
            tokens=ordered,
            token_set=token_set,
            acronym=acronym(" ".join(ordered)),
            intents=[r for r in intent_rules if r.detected(normalized, token_set)],
            preferences=tuple(dict.fromkeys(preferences)),
            phrases=[
                (p.lower(), re.compile(rf"\b{re.escape(p.lower())}\b"))
                for p in phrases
            ],
        )


def _free_text_tokens(record: CatalogRecord) -> set[str]:
    parts = [record.textarea, record.overview, record.industry_expertise]
    parts.extend(s.experience for s in record.specialists)
    return set(tokenize(" ".join(parts)))


def _phrase_boost(record: CatalogRecord, features: QueryFeatures) -> float:
    if not features.phrases:
        return 0.0
    name = record.team_name.lower()
    keywords = record.textarea.lower()
    boost = 0.0
    for phrase, pattern in features.phrases:
        if csv_has_tag(record.type, phrase) or csv_has_tag(record.type2, phrase):
            boost += PHRASE_TAG_BONUS
        if pattern.search(name):
            boost += PHRASE_NAME_BONUS
        if pattern.search(keywords):
            boost += PHRASE_KEYWORD_BONUS
    return min(boost, PHRASE_CAP)


def score_item(item: RankedItem, features: QueryFeatures) -> RankedItem:
    """Recompute ``fused_score`` for one item from its semantic score."""
    record = item.record
    item.fused_score = item.semantic_score
    item.signals = {}

    type_tags = [normalize_tag(t) for t in csv_parts(record.type)]
    type2_tags = [normalize_tag(t) for t in csv_parts(record.type2)]
    type_hit = any(t in features.token_set for t in type_tags)
    type2_hit = any(t in features.token_set for t in type2_tags)
    overlap = len(features.token_set & _free_text_tokens(record))

    if type_hit:
        item.add("type_hit", TYPE_HIT_BONUS)
    if type2_hit:
        item.add("type2_hit", TYPE2_HIT_BONUS)
    item.add("overlap", min(overlap, OVERLAP_CAP) * OVERLAP_BONUS)

    if len(features.acronym) >= MIN_QUERY_ACRONYM and any(
        acronym(t) == features.acronym for t in csv_parts(record.type) + csv_parts(record.type2)
    ):
        item.add("acronym", ACRONYM_BONUS)

    if not type_hit and not type2_hit and overlap == 0:
        item.add("guardrail", GUARDRAIL_PENALTY)

    if record.partner_confirmation.strip():
        item.add("partner_confirmation", PARTNER_CONFIRMATION_BONUS)

    for rule in features.intents:
        item.add(f"intent:{rule.name}", rule.bonus if rule.matches(record) else rule.penalty)

    item.add("phrases", _phrase_boost(record, features))

    if features.preferences:
        haystacks = (record.type.lower(), record.type2.lower(), record.textarea.lower())
        if any(p in h for p in features.preferences for h in haystacks):
            item.add("preference", PREFERENCE_BONUS)

    return item


def rank_items(items: Iterable[RankedItem]) -> list[RankedItem]:
    """Fused score descending, ties by stable identity ascending."""
    return sorted(items, key=lambda it: (-it.fused_score, it.identity))


def fuse_scores(
    items: Iterable[RankedItem],
    normalized: str,
    phrases: Sequence[str] = (),
) -> list[RankedItem]:
    """
    Score and order retrieved items for a query.

    Args:
        items: Deduplicated hits carrying ``semantic_score``
        normalized: Output of ``normalize_query``
        phrases: Output of ``extract_exact_phrases`` on the raw query

    Returns:
        Items ordered by fused score (deterministic for identical inputs)
    """
    features = QueryFeatures.build(normalized, phrases)
    return rank_items(score_item(item, features) for item in items)
