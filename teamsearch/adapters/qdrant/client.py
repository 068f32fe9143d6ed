"""
Qdrant Client - Remote vector store over the Qdrant REST API.

Point ids are the 32-hex stable identities sent as UUIDs, so re-indexing
a record overwrites its point.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from teamsearch.config import ErrorCode, VectorStoreError
from teamsearch.domains.search.models import VectorMatch, VectorPoint

logger = logging.getLogger(__name__)

__all__ = ["QdrantVectorStore", "to_point_id", "from_point_id"]

RETRYABLE_STATUS = frozenset({429, 500, 502, 503})


def to_point_id(identity: str) -> str:
    """32-hex identity -> dashed UUID string."""
    try:
        return str(uuid.UUID(hex=identity))
    except ValueError as exc:
        raise VectorStoreError(
            f"Identity is not a 32-hex id: {identity!r}",
            code=ErrorCode.VALIDATION_ERROR,
        ) from exc


def from_point_id(point_id: Any) -> str:
    """Dashed UUID (or int id) from Qdrant -> 32-hex identity."""
    try:
        return uuid.UUID(str(point_id)).hex
    except ValueError:
        return str(point_id)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, VectorStoreError) and exc.retryable


class QdrantVectorStore:
    """
    Qdrant REST vector store.

    Example:
        >>> store = QdrantVectorStore("https://xyz.qdrant.io", api_key="...", collection="orders")
        >>> await store.ensure_index(2048)
        >>> matches = await store.search(query_vec, k=100)
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        collection: str = "orders",
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        max_retries: int = 4,
        backoff_base: float = 0.5,
        backoff_max: float = 10.0,
    ) -> None:
        """
        Initialize Qdrant store.

        Args:
            url: Qdrant base URL
            api_key: API key (sent in the ``api-key`` header)
            collection: Collection name
            http_client: Pre-built HTTP client (tests inject a MockTransport)
            timeout: Request timeout in seconds
            max_retries: Attempts for retryable failures
            backoff_base: Jittered exponential backoff multiplier
            backoff_max: Cap on a single backoff wait
        """
        self.url = url.rstrip("/")
        self.collection = collection
        self._api_key = api_key
        self._client = http_client
        self._owns_client = http_client is None
        self._timeout = timeout
        self._max_retries = max_retries
        self._backoff_base = backoff_base
        self._backoff_max = backoff_max

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self.url, timeout=self._timeout)
        return self._client

    async def _send(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        allow: frozenset[int] = frozenset(),
    ) -> httpx.Response:
        """One request; non-2xx statuses not in ``allow`` become VectorStoreError."""
        client = await self._get_client()
        headers = {"api-key": self._api_key} if self._api_key else {}
        try:
            response = await client.request(method, path, json=json, headers=headers)
        except httpx.TransportError as exc:
            raise VectorStoreError(
                f"Qdrant request failed: {exc.__class__.__name__}",
                code=ErrorCode.VECTOR_STORE_UNAVAILABLE,
                retryable=True,
            ) from exc

        if response.status_code >= 400 and response.status_code not in allow:
            status = response.status_code
            raise VectorStoreError(
                f"Qdrant {method} {path} failed {status}: {response.text[:200]}",
                code=ErrorCode.VECTOR_STORE_UNAVAILABLE
                if status in RETRYABLE_STATUS
                else ErrorCode.VECTOR_STORE_FAILED,
                retryable=status in RETRYABLE_STATUS,
                details={"status": status},
            )
        return response

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        allow: frozenset[int] = frozenset(),
    ) -> httpx.Response:
        """``_send`` retried on throttling, 5xx and transport failures."""
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._max_retries),
            wait=wait_random_exponential(multiplier=self._backoff_base, max=self._backoff_max),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self._send(method, path, json=json, allow=allow)
        return response

    @property
    def _collection_path(self) -> str:
        return f"/collections/{self.collection}"

    async def ensure_index(self, dimension: int, metric: str = "cosine") -> None:
        """
        Create the collection if absent.

        Raises:
            VectorStoreError: Unsupported metric, or an existing collection
                with a different vector size
        """
        if metric != "cosine":
            raise VectorStoreError(f"Unsupported metric: {metric}")

        info = await self._request("GET", self._collection_path, allow=frozenset({404}))
        if info.status_code == 200:
            size = self._vector_size(info)
            if size is not None and size != dimension:
                raise VectorStoreError(
                    f"Collection {self.collection} has size {size}, expected {dimension}",
                    code=ErrorCode.VECTOR_STORE_DIMENSION_MISMATCH,
                )
            return

        await self._request(
            "PUT",
            self._collection_path,
            json={"vectors": {"size": dimension, "distance": "Cosine"}},
        )
        logger.info("Created Qdrant collection %s (size=%d)", self.collection, dimension)

    @staticmethod
    def _vector_size(response: httpx.Response) -> int | None:
        try:
            size = response.json()["result"]["config"]["params"]["vectors"]["size"]
        except (ValueError, KeyError, TypeError):
            return None
        return int(size)

    async def upsert(self, points: Sequence[VectorPoint]) -> int:
        """Overwrite points keyed by identity; waits for the write to apply."""
        if not points:
            return 0
        body = {
            "points": [
                {"id": to_point_id(p.id), "vector": list(p.vector), "payload": p.payload}
                for p in points
            ]
        }
        await self._request("PUT", f"{self._collection_path}/points?wait=true", json=body)
        logger.debug("Upserted %d points into %s", len(points), self.collection)
        return len(points)

    async def search(self, vector: Sequence[float], k: int) -> list[VectorMatch]:
        """Cosine nearest neighbors with payloads."""
        if k <= 0:
            return []
        response = await self._request(
            "POST",
            f"{self._collection_path}/points/search",
            json={"vector": list(vector), "limit": k, "with_payload": True},
        )
        try:
            hits = response.json().get("result") or []
            return [
                VectorMatch(
                    id=from_point_id(hit["id"]),
                    score=float(hit.get("score") or 0.0),
                    payload=hit.get("payload") or {},
                )
                for hit in hits
            ]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise VectorStoreError("Malformed Qdrant search response") from exc

    async def flush(self) -> None:
        """Writes are applied with ``wait=true``; nothing to flush."""

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
