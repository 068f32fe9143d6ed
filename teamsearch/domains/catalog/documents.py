"""
Search-Document Builder - One weighted text blob per record for passage embeddings.

Tag content is repeated so the embedding leans toward categorical intent
over incidental prose. Administrative fields go last.
"""

from __future__ import annotations

from .models import CatalogRecord
from .tags import acronym, csv_parts

__all__ = ["TAG_REPEAT", "build_search_text", "tag_acronyms"]

TAG_REPEAT = 3
_SEPARATOR = " | "


def tag_acronyms(record: CatalogRecord) -> list[str]:
    """Unique 2-5 char acronyms of the record's tags, slashes removed."""
    seen: list[str] = []
    for tag in csv_parts(record.type) + csv_parts(record.type2):
        value = acronym(tag.replace("/", ""))
        if 2 <= len(value) <= 5 and value not in seen:
            seen.append(value)
    return seen


def build_search_text(record: CatalogRecord) -> str:
    """
    Assemble the passage text for a record.

    Example:
        >>> build_search_text(CatalogRecord(team_name="Acme", type="Public Relations"))
        'Acme | Public Relations | Public Relations | Public Relations | PR'
    """
    tags = _SEPARATOR.join(p for p in (record.type.strip(), record.type2.strip()) if p)

    parts: list[str] = [record.team_name]
    if tags:
        parts.extend([tags] * TAG_REPEAT)
    parts.extend(tag_acronyms(record))
    parts.extend(
        [
            record.textarea,
            record.industry_expertise,
            record.overview,
            record.status1,
            record.status2,
            record.partner_confirmation,
        ]
    )
    for specialist in record.specialists:
        parts.append(" ".join(p for p in (specialist.role, specialist.experience) if p.strip()))
    parts.extend([record.project_id, record.brief, record.documents, record.nda])

    return _SEPARATOR.join(p.strip() for p in parts if p and p.strip())
