"""
Google Sheets Source - Catalog rows from the Sheets values API.

Authenticates with either an API key (public/shared sheets) or an OAuth
bearer token. Throttling and 503s are retried with exponential backoff.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from teamsearch.config import CatalogError, ConfigurationError, ErrorCode
from teamsearch.domains.catalog import CatalogRecord, records_from_rows

logger = logging.getLogger(__name__)

__all__ = ["SheetsCatalogSource", "SHEETS_API_URL"]

SHEETS_API_URL = "https://sheets.googleapis.com"
RETRYABLE_STATUS = frozenset({429, 503})


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, CatalogError) and exc.retryable


class SheetsCatalogSource:
    """
    Read the catalog sheet as rows.

    Example:
        >>> source = SheetsCatalogSource("1AbC...", range_="Teams!A1:ZZ1000", api_key="...")
        >>> records = await source.list_records()
    """

    def __init__(
        self,
        spreadsheet_id: str | None,
        range_: str = "Teams!A1:ZZ1000",
        api_key: str | None = None,
        access_token: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_retries: int = 5,
        backoff_base: float = 2.0,
    ) -> None:
        self.spreadsheet_id = spreadsheet_id
        self.range = range_
        self._api_key = api_key
        self._access_token = access_token
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_base = backoff_base

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=SHEETS_API_URL, timeout=self._timeout)
        return self._client

    def _request_args(self) -> tuple[dict[str, str], dict[str, str]]:
        if not self.spreadsheet_id:
            raise ConfigurationError("sheets_spreadsheet_id is not configured")
        if self._access_token:
            return {}, {"Authorization": f"Bearer {self._access_token}"}
        if self._api_key:
            return {"key": self._api_key}, {}
        raise ConfigurationError("Either sheets_api_key or sheets_access_token is required")

    async def _fetch_once(self) -> list[list[Any]]:
        params, headers = self._request_args()
        client = await self._get_client()
        path = f"/v4/spreadsheets/{self.spreadsheet_id}/values/{quote(self.range, safe='')}"

        try:
            response = await client.get(path, params=params, headers=headers)
        except httpx.TransportError as exc:
            raise CatalogError(
                f"Sheets request failed: {exc.__class__.__name__}", retryable=True
            ) from exc

        if response.status_code >= 400:
            status = response.status_code
            raise CatalogError(
                f"Sheets API error {status}: {response.text[:200]}",
                retryable=status in RETRYABLE_STATUS,
                details={"status": status, "range": self.range},
            )

        try:
            values = response.json().get("values") or []
        except (ValueError, AttributeError) as exc:
            raise CatalogError(
                "Sheets API returned malformed JSON", code=ErrorCode.CATALOG_INVALID
            ) from exc
        if not isinstance(values, list):
            raise CatalogError("Sheets values must be a list of rows", code=ErrorCode.CATALOG_INVALID)
        return values

    async def fetch_rows(self) -> list[list[Any]]:
        """
        Fetch raw rows (header first).

        Raises:
            ConfigurationError: Missing spreadsheet id or credentials
            CatalogError: API failure after retries
        """
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._max_retries),
            wait=wait_exponential(multiplier=self._backoff_base),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                rows = await self._fetch_once()
        logger.debug("Fetched %d rows from %s", len(rows), self.range)
        return rows

    async def list_records(self) -> list[CatalogRecord]:
        return records_from_rows(await self.fetch_rows())

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
