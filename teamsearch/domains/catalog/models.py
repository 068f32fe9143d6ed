"""
Catalog Models - Typed team records parsed from header-keyed rows.

Spreadsheet columns become named fields; anything unrecognized lands in
``extra`` and survives a round trip through ``to_payload``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, Field

__all__ = [
    "COLUMN_NAMES",
    "MAX_SPECIALISTS",
    "Specialist",
    "CatalogRecord",
    "records_from_rows",
    "records_from_mappings",
]

MAX_SPECIALISTS = 10

# field name -> spreadsheet column
COLUMN_NAMES: dict[str, str] = {
    "timestamp": "timestamp",
    "team_name": "TeamName",
    "type": "Type",
    "type2": "Type2",
    "textarea": "Textarea",
    "overview": "X1Q",
    "industry_expertise": "industrymarket_expertise",
    "partner": "partner",
    "partner_confirmation": "Partner_confirmation",
    "status1": "Status1",
    "status2": "Status2",
    "project_id": "projectid",
    "brief": "Brief",
    "documents": "Documents",
    "nda": "nda",
    "email": "Email",
}

_FIELD_BY_COLUMN = {column.lower(): field for field, column in COLUMN_NAMES.items()}


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _specialist_slot(column: str) -> tuple[str, int] | None:
    """Map ``sp3`` -> ("role", 3), ``spcv3`` -> ("experience", 3)."""
    key = column.lower()
    for prefix, part in (("spcv", "experience"), ("sp", "role")):
        if key.startswith(prefix) and key[len(prefix):].isdigit():
            slot = int(key[len(prefix):])
            if 1 <= slot <= MAX_SPECIALISTS:
                return part, slot
            return None
    return None


class Specialist(BaseModel):
    """One roster entry: a role and its experience blurb."""

    slot: int = Field(..., ge=1, le=MAX_SPECIALISTS)
    role: str = ""
    experience: str = ""

    model_config = {"frozen": True}


class CatalogRecord(BaseModel):
    """A directory entry ("team")."""

    timestamp: str = ""
    team_name: str = ""
    type: str = ""
    type2: str = ""
    textarea: str = ""
    overview: str = ""
    industry_expertise: str = ""
    partner: str = ""
    partner_confirmation: str = ""
    status1: str = ""
    status2: str = ""
    project_id: str = ""
    brief: str = ""
    documents: str = ""
    nda: str = ""
    email: str = ""
    specialists: list[Specialist] = Field(default_factory=list)
    extra: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> CatalogRecord:
        """
        Build a record from a column-keyed mapping.

        Column lookup is case-insensitive after trimming. ``sp1..sp10`` and
        ``spcv1..spcv10`` become the specialist roster; other unknown
        columns are kept in ``extra``.

        Example:
            >>> CatalogRecord.from_row({"TeamName": "Acme", "Type": "SEO"}).type
            'SEO'
        """
        fields: dict[str, str] = {}
        roster: dict[int, dict[str, str]] = {}
        extra: dict[str, str] = {}

        for raw_column, value in row.items():
            column = _cell(raw_column).strip()
            if not column:
                continue
            text = _cell(value)

            field = _FIELD_BY_COLUMN.get(column.lower())
            if field is not None:
                fields[field] = text
                continue

            slot = _specialist_slot(column)
            if slot is not None:
                part, index = slot
                roster.setdefault(index, {})[part] = text
                continue

            extra[column] = text

        specialists = [
            Specialist(slot=index, **parts)
            for index, parts in sorted(roster.items())
            if any(v.strip() for v in parts.values())
        ]
        return cls(**fields, specialists=specialists, extra=extra)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> CatalogRecord:
        """Inverse of ``to_payload``; ignores ``id``/``score`` decorations."""
        return cls.from_row({k: v for k, v in payload.items() if k not in ("id", "score")})

    def to_payload(self) -> dict[str, str]:
        """Column-keyed form, as stored in the vector index and returned by the API."""
        payload = {column: getattr(self, field) for field, column in COLUMN_NAMES.items()}
        for specialist in self.specialists:
            payload[f"sp{specialist.slot}"] = specialist.role
            payload[f"spcv{specialist.slot}"] = specialist.experience
        payload.update(self.extra)
        return payload

    @property
    def display_name(self) -> str:
        return self.team_name.strip()


def records_from_rows(rows: Sequence[Sequence[Any]]) -> list[CatalogRecord]:
    """
    Parse a header row plus value rows into records.

    Short rows are padded with empty strings; fully blank rows are skipped.

    Args:
        rows: First row is the header, the rest are values

    Returns:
        Records in source order
    """
    if not rows:
        return []

    headers = [_cell(h).strip() for h in rows[0]]
    records: list[CatalogRecord] = []
    for values in rows[1:]:
        cells = [_cell(v) for v in values]
        if not any(c.strip() for c in cells):
            continue
        cells += [""] * (len(headers) - len(cells))
        records.append(CatalogRecord.from_row(dict(zip(headers, cells))))
    return records


def records_from_mappings(rows: Iterable[Mapping[str, Any]]) -> list[CatalogRecord]:
    """Parse already header-keyed rows (e.g. ``csv.DictReader``)."""
    return [
        CatalogRecord.from_row(row)
        for row in rows
        if any(_cell(v).strip() for v in row.values())
    ]
