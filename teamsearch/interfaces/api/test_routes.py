"""Tests for API Routes."""

from collections.abc import Generator
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from teamsearch.config import CatalogError, EmbeddingError, ErrorCode, IndexingError, Settings, get_settings
from teamsearch.domains.catalog import CatalogRecord, stable_identity
from teamsearch.domains.search import IndexReport, PagedSearchQuery, SearchPage, SearchQuery

from .deps import get_catalog_source, get_indexer, get_search_engine
from .main import create_app
from .middleware import error_code_to_status

RECORDS = [
    CatalogRecord(timestamp="1", team_name="Acme", type="SEO, Content", email="a@acme.test"),
    CatalogRecord(timestamp="2", team_name="Acme", type="PR"),
    CatalogRecord(timestamp="3", team_name="Beta", type="Public Relations", type2="SaaS"),
    CatalogRecord(timestamp="4", team_name="Gamma", type="Ads", textarea="confirmed"),
]


@pytest.fixture
def mock_engine() -> AsyncMock:
    """Create a mock search engine."""
    mock = AsyncMock()
    mock.configured = True
    mock.search.return_value = []
    mock.search_page.return_value = SearchPage()
    mock.warmup.return_value = True
    return mock


@pytest.fixture
def mock_source() -> AsyncMock:
    """Create a mock catalog source."""
    mock = AsyncMock()
    mock.list_records.return_value = list(RECORDS)
    return mock


@pytest.fixture
def mock_indexer() -> AsyncMock:
    """Create a mock indexer."""
    mock = AsyncMock()
    mock.run.return_value = IndexReport(total=4, upserted=4, batches=1, duration_seconds=0.5)
    return mock


@pytest.fixture
def client(
    mock_engine: AsyncMock, mock_source: AsyncMock, mock_indexer: AsyncMock
) -> Generator[TestClient, None, None]:
    """Create a test client with mocked dependencies."""
    app = create_app()

    # Override dependencies with mocks
    app.dependency_overrides[get_search_engine] = lambda: mock_engine
    app.dependency_overrides[get_catalog_source] = lambda: mock_source
    app.dependency_overrides[get_indexer] = lambda: mock_indexer
    app.dependency_overrides[get_settings] = lambda: Settings(page_size_max=2)

    yield TestClient(app)

    # Cleanup
    app.dependency_overrides.clear()


# --- Health ---


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "teamsearch"}


def test_api_info(client: TestClient) -> None:
    data = client.get("/api").json()
    assert data["name"] == "TeamSearch API"
    assert data["vectors_enabled"] is True


def test_warmup_never_fails(client: TestClient, mock_engine: AsyncMock) -> None:
    mock_engine.warmup.return_value = False
    response = client.get("/warmup")
    assert response.status_code == 200
    assert response.json() == {"ok": True, "warm": False}


# --- Search ---


def test_search_post(client: TestClient, mock_engine: AsyncMock) -> None:
    mock_engine.search.return_value = [{"TeamName": "Acme", "id": "abc", "score": 0.92}]

    response = client.post("/api/search", json={"q": "seo agency", "limit": 10})

    assert response.status_code == 200
    assert response.json() == [{"TeamName": "Acme", "id": "abc", "score": 0.92}]
    mock_engine.search.assert_awaited_once_with(SearchQuery(q="seo agency", limit=10))


def test_search_get(client: TestClient, mock_engine: AsyncMock) -> None:
    response = client.get("/api/search", params={"q": "pr", "limit": 5})

    assert response.status_code == 200
    mock_engine.search.assert_awaited_once_with(SearchQuery(q="pr", limit=5))


def test_search_empty_body_uses_defaults(client: TestClient, mock_engine: AsyncMock) -> None:
    response = client.post("/api/search", json={})

    assert response.status_code == 200
    assert response.json() == []
    mock_engine.search.assert_awaited_once_with(SearchQuery(q="", limit=50))


@pytest.mark.parametrize(("limit", "expected"), [(0, 50), (101, 100), (500, 100), (-4, 1)])
def test_search_limit_is_clamped(client: TestClient, mock_engine: AsyncMock, limit: int, expected: int) -> None:
    assert client.post("/api/search", json={"q": "seo", "limit": limit}).status_code == 200
    mock_engine.search.assert_awaited_once_with(SearchQuery(q="seo", limit=expected))

    mock_engine.search.reset_mock()
    assert client.get("/api/search", params={"q": "seo", "limit": limit}).status_code == 200
    mock_engine.search.assert_awaited_once_with(SearchQuery(q="seo", limit=expected))


def test_search_limit_must_be_a_number(client: TestClient) -> None:
    assert client.get("/api/search", params={"q": "seo", "limit": "many"}).status_code == 422


def test_search_paged(client: TestClient, mock_engine: AsyncMock) -> None:
    mock_engine.search_page.return_value = SearchPage(
        items=[{"TeamName": "Acme", "id": "abc", "score": 0.5}],
        next_cursor="eyJwYWdlIjoyfQ",
        total_estimate=7,
    )

    response = client.post("/api/search/paged", json={"q": "seo", "limit": 1, "cursor": None})

    assert response.status_code == 200
    assert response.json() == {
        "items": [{"TeamName": "Acme", "id": "abc", "score": 0.5}],
        "next_cursor": "eyJwYWdlIjoyfQ",
        "total_estimate": 7,
    }
    mock_engine.search_page.assert_awaited_once_with(PagedSearchQuery(q="seo", limit=1))


@pytest.mark.parametrize(("limit", "expected"), [(51, 50), (100, 50), (0, 50)])
def test_search_paged_limit_is_clamped(
    client: TestClient, mock_engine: AsyncMock, limit: int, expected: int
) -> None:
    response = client.post("/api/search/paged", json={"q": "seo", "limit": limit})

    assert response.status_code == 200
    mock_engine.search_page.assert_awaited_once_with(PagedSearchQuery(q="seo", limit=expected))


def test_provider_error_maps_to_status(client: TestClient, mock_engine: AsyncMock) -> None:
    mock_engine.search.side_effect = EmbeddingError("down", code=ErrorCode.EMBEDDING_UNAVAILABLE)

    response = client.post("/api/search", json={"q": "seo"})

    assert response.status_code == 503
    body = response.json()
    assert body["error"]["code"] == "EMBEDDING_UNAVAILABLE"
    assert body["request_id"] == response.headers["x-request-id"]


def test_unhandled_error_is_internal(client: TestClient, mock_engine: AsyncMock) -> None:
    mock_engine.search.side_effect = RuntimeError("boom")

    response = client.post("/api/search", json={"q": "seo"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"


# --- Catalog ---


def test_teams_dedupes_by_name(client: TestClient) -> None:
    data = client.get("/api/teams").json()

    assert [item["TeamName"] for item in data] == ["Acme", "Beta", "Gamma"]
    assert data[0]["Type"] == "SEO, Content"
    assert data[0]["id"] == stable_identity(RECORDS[0])


@pytest.mark.parametrize(
    ("params", "expected"),
    [
        ({"type": "PR"}, ["Acme", "Beta"]),
        ({"type": "seo"}, ["Acme"]),
        ({"type2": "SaaS"}, ["Beta"]),
        ({"email": "ACME.test"}, ["Acme"]),
        ({"confirmed": "true"}, ["Gamma"]),
    ],
)
def test_teams_filters(client: TestClient, params: dict, expected: list[str]) -> None:
    data = client.get("/api/teams", params=params).json()
    assert [item["TeamName"] for item in data] == expected


def test_teams_is_lenient_when_catalog_fails(client: TestClient, mock_source: AsyncMock) -> None:
    mock_source.list_records.side_effect = CatalogError("sheet down")

    assert client.get("/api/teams").json() == []
    assert client.get("/api/teams/keywords").json() == {"type": [], "type2": []}
    assert client.get("/api/teams/paged").json() == {
        "items": [],
        "next_cursor": None,
        "total_estimate": 0,
    }


def test_teams_paged_walks_pages(client: TestClient) -> None:
    ids: list[str] = []
    cursor = None
    for _ in range(5):
        params = {"limit": 50}
        if cursor:
            params["cursor"] = cursor
        body = client.get("/api/teams/paged", params=params).json()
        assert len(body["items"]) <= 2
        assert body["total_estimate"] == 3
        ids.extend(item["id"] for item in body["items"])
        cursor = body["next_cursor"]
        if cursor is None:
            break

    assert len(ids) == 3
    assert ids == sorted(ids)


def test_keywords(client: TestClient) -> None:
    assert client.get("/api/teams/keywords").json() == {
        "type": ["SEO", "Content", "PR", "Public Relations", "Ads"],
        "type2": ["SaaS"],
    }


def test_api_responses_are_not_cached(client: TestClient) -> None:
    assert client.get("/api/teams").headers["cache-control"] == "no-store"


# --- Indexing ---


def test_index_returns_report(client: TestClient, mock_indexer: AsyncMock) -> None:
    response = client.post("/api/index")

    assert response.status_code == 200
    assert response.json()["upserted"] == 4
    mock_indexer.run.assert_awaited_once_with(strict=True)


def test_index_non_strict(client: TestClient, mock_indexer: AsyncMock) -> None:
    client.post("/api/index", params={"strict": "false"})
    mock_indexer.run.assert_awaited_once_with(strict=False)


def test_index_failure_carries_report(client: TestClient, mock_indexer: AsyncMock) -> None:
    report = IndexReport(total=2, upserted=1, failed=["abc"], batches=1)
    mock_indexer.run.side_effect = IndexingError("1 of 2 records were not indexed", details=report.model_dump())

    response = client.post("/api/index")

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "INDEXING_FAILED"
    assert error["details"]["failed"] == ["abc"]


# --- Middleware ---


def test_request_id_header(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Request-ID": "req-1"})
    assert response.headers["x-request-id"] == "req-1"
    assert "x-response-time-ms" in response.headers


def test_404_for_unknown_routes(client: TestClient) -> None:
    assert client.get("/api/nonexistent").status_code == 404


def test_malformed_request_id_is_replaced(client: TestClient) -> None:
    response = client.get("/health", headers={"X-Request-ID": "bad id with spaces"})
    assert response.headers["x-request-id"] != "bad id with spaces"
    assert len(response.headers["x-request-id"]) == 32


@pytest.mark.parametrize(
    ("code", "status"),
    [
        (ErrorCode.VALIDATION_ERROR, 400),
        (ErrorCode.EMBEDDING_RATE_LIMITED, 429),
        (ErrorCode.EMBEDDING_REJECTED, 502),
        (ErrorCode.CATALOG_INVALID, 502),
        (ErrorCode.VECTOR_STORE_UNAVAILABLE, 503),
        (ErrorCode.CONFIG_MISSING, 503),
        (ErrorCode.INDEXING_FAILED, 500),
        (ErrorCode.INTERNAL_ERROR, 500),
    ],
)
def test_error_code_to_status(code: ErrorCode, status: int) -> None:
    assert error_code_to_status(code) == status
