"""
Tests for catalog sources.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest

from teamsearch.config import CatalogError, ConfigurationError, ErrorCode
from teamsearch.domains.catalog import CatalogRecord

from .cached import CachedCatalogSource
from .local import CsvCatalogSource
from .sheets import SheetsCatalogSource

ROWS = [
    ["timestamp", "TeamName", "Type", "Type2", "Email", "sp1", "spcv1"],
    ["2024-01-01", "Acme", "SEO, Content", "SaaS", "a@acme.test", "Lead", "10 years"],
    ["", "", "", ""],
    ["2024-01-02", "Beta", "PR"],
]


def make_sheets(handler: Callable, **kwargs: object) -> SheetsCatalogSource:
    http = httpx.AsyncClient(
        base_url="https://sheets.test", transport=httpx.MockTransport(handler)
    )
    options: dict[str, object] = {"api_key": "k", "backoff_base": 0.0}
    options.update(kwargs)
    return SheetsCatalogSource("sheet-1", range_="Teams!A1:ZZ1000", http_client=http, **options)


# --- Sheets Tests ---


async def test_sheets_parses_rows() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"range": "Teams!A1:ZZ1000", "values": ROWS})

    records = await make_sheets(handler).list_records()

    assert [r.team_name for r in records] == ["Acme", "Beta"]
    assert records[0].specialists[0].role == "Lead"
    assert records[1].type2 == ""
    assert seen[0].url.params["key"] == "k"
    assert seen[0].url.path.startswith("/v4/spreadsheets/sheet-1/values/")


async def test_sheets_bearer_token_takes_precedence() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer tok"
        assert "key" not in request.url.params
        return httpx.Response(200, json={"values": ROWS[:1]})

    assert await make_sheets(handler, access_token="tok").list_records() == []


async def test_sheets_missing_values_is_empty() -> None:
    assert await make_sheets(lambda r: httpx.Response(200, json={})).list_records() == []


@pytest.mark.parametrize("status", [429, 503])
async def test_sheets_retries_throttling(status: int) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls < 3:
            return httpx.Response(status)
        return httpx.Response(200, json={"values": ROWS})

    records = await make_sheets(handler).list_records()
    assert len(records) == 2
    assert calls == 3


async def test_sheets_retries_are_bounded() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(503)

    with pytest.raises(CatalogError):
        await make_sheets(handler, max_retries=3).list_records()
    assert calls == 3


async def test_sheets_permanent_error_is_not_retried() -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        return httpx.Response(403, text="forbidden")

    with pytest.raises(CatalogError) as exc_info:
        await make_sheets(handler).list_records()
    assert calls == 1
    assert exc_info.value.details["status"] == 403


async def test_sheets_malformed_json() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(CatalogError) as exc_info:
        await make_sheets(handler).list_records()
    assert exc_info.value.code == ErrorCode.CATALOG_INVALID


async def test_sheets_requires_configuration() -> None:
    with pytest.raises(ConfigurationError):
        await make_sheets(lambda r: httpx.Response(200), api_key=None).list_records()

    source = SheetsCatalogSource(None, api_key="k")
    with pytest.raises(ConfigurationError):
        await source.list_records()


# --- CSV Tests ---


async def test_csv_source(tmp_path: Path) -> None:
    path = tmp_path / "teams.csv"
    path.write_text(
        "timestamp,TeamName,Type,Type2\n"
        '2024-01-01,Acme,"SEO, Content",SaaS\n'
        "2024-01-02,Beta,PR\n",
        encoding="utf-8",
    )

    records = await CsvCatalogSource(path).list_records()

    assert [r.team_name for r in records] == ["Acme", "Beta"]
    assert records[0].type == "SEO, Content"
    assert records[1].type2 == ""


async def test_csv_missing_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogError):
        await CsvCatalogSource(tmp_path / "missing.csv").list_records()


# --- Cache Tests ---


async def test_cached_source_respects_ttl() -> None:
    now = [0.0]
    inner = AsyncMock()
    inner.list_records.return_value = [CatalogRecord(team_name="Acme")]
    source = CachedCatalogSource(inner, ttl_seconds=15, clock=lambda: now[0])

    await source.list_records()
    await source.list_records()
    assert inner.list_records.await_count == 1

    now[0] = 15.0
    await source.list_records()
    assert inner.list_records.await_count == 2


async def test_cached_source_invalidate() -> None:
    inner = AsyncMock()
    inner.list_records.return_value = []
    source = CachedCatalogSource(inner)

    await source.list_records()
    source.invalidate()
    await source.list_records()
    assert inner.list_records.await_count == 2


async def test_cached_source_does_not_cache_failures() -> None:
    inner = AsyncMock()
    inner.list_records.side_effect = [CatalogError("down"), [CatalogRecord(team_name="Acme")]]
    source = CachedCatalogSource(inner)

    with pytest.raises(CatalogError):
        await source.list_records()
    assert len(await source.list_records()) == 1


async def test_cached_source_close_delegates() -> None:
    inner = AsyncMock()
    await CachedCatalogSource(inner).close()
    inner.close.assert_awaited_once()
