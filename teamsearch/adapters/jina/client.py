"""
Jina Client - Embeddings over the Jina HTTP API.

Features:
- Async HTTP client with keep-alive pooling
- Query path: TTL cache plus a hedged second request for tail latency
- Passage path: retries with jittered exponential backoff, then recursive
  batch splitting so one bad input cannot sink a whole batch
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_random_exponential,
)

from teamsearch.adapters.memory import TTLCache
from teamsearch.config import ConfigurationError, EmbeddingError, ErrorCode

from .models import EmbeddingTask, JinaConfig

logger = logging.getLogger(__name__)

__all__ = ["JinaEmbeddingClient", "RETRYABLE_STATUS"]

RETRYABLE_STATUS = frozenset({429, 500, 503})
AUTH_STATUS = frozenset({401, 403})

EMBEDDINGS_PATH = "/v1/embeddings"


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, EmbeddingError) and exc.retryable


class JinaEmbeddingClient:
    """
    Jina embeddings client.

    Example:
        >>> client = JinaEmbeddingClient(JinaConfig(api_key="jina_..."))
        >>> vector = await client.embed_query("seo saas")
        >>> vectors = await client.embed_passages(["Acme | SEO", "Beta | PR"])
    """

    def __init__(
        self,
        config: JinaConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize Jina client.

        Args:
            config: Client configuration. Uses defaults if None.
            http_client: Pre-built HTTP client (tests inject a MockTransport)
            clock: Time source for the query cache
        """
        self.config = config or JinaConfig()
        self._client = http_client
        self._owns_client = http_client is None
        self._cache: TTLCache[list[float]] = TTLCache(
            max_size=self.config.cache_size,
            ttl_seconds=self.config.cache_ttl,
            clock=clock,
        )

    @property
    def model(self) -> str:
        return self.config.model

    @property
    def dimensions(self) -> int:
        return self.config.dimensions

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.timeout_seconds,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20),
            )
        return self._client

    async def _post(self, texts: Sequence[str], task: EmbeddingTask) -> list[list[float]]:
        """
        One embeddings call, no retries.

        Raises:
            ConfigurationError: No API key
            EmbeddingError: HTTP, transport or payload failure
        """
        if not self.config.api_key:
            raise ConfigurationError("JINA_API_KEY is not configured")

        client = await self._get_client()
        payload: dict[str, Any] = {
            "input": list(texts),
            "model": self.config.model,
            "task": task.value,
            "dimensions": self.config.dimensions,
        }
        try:
            response = await client.post(
                EMBEDDINGS_PATH,
                json=payload,
                headers={"Authorization": f"Bearer {self.config.api_key}"},
            )
        except httpx.TransportError as exc:
            raise EmbeddingError(
                f"Jina request failed: {exc.__class__.__name__}",
                retryable=True,
            ) from exc

        if response.status_code >= 400:
            status = response.status_code
            if status == 429:
                code = ErrorCode.EMBEDDING_RATE_LIMITED
            elif status in RETRYABLE_STATUS:
                code = ErrorCode.EMBEDDING_UNAVAILABLE
            else:
                code = ErrorCode.EMBEDDING_REJECTED
            raise EmbeddingError(
                f"Jina error {status}: {response.text[:200]}",
                code=code,
                retryable=status in RETRYABLE_STATUS,
                status_code=status,
            )

        return self._parse(response, expected=len(texts))

    def _parse(self, response: httpx.Response, expected: int) -> list[list[float]]:
        try:
            items = response.json()["data"]
            items = sorted(items, key=lambda item: item.get("index", 0))
            vectors = [[float(x) for x in item["embedding"]] for item in items]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise EmbeddingError(
                "Malformed embeddings payload",
                code=ErrorCode.EMBEDDING_INVALID_RESPONSE,
            ) from exc

        if len(vectors) != expected or any(len(v) != self.config.dimensions for v in vectors):
            raise EmbeddingError(
                f"Expected {expected} vectors of dim {self.config.dimensions}",
                code=ErrorCode.EMBEDDING_INVALID_RESPONSE,
                details={"received": len(vectors)},
            )
        return vectors

    async def _request(self, texts: Sequence[str], task: EmbeddingTask) -> list[list[float]]:
        """Embeddings call retried on retryable failures."""
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_random_exponential(
                multiplier=self.config.backoff_base,
                max=self.config.backoff_max,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                vectors = await self._post(texts, task)
        return vectors

    async def embed(
        self,
        text: str | Sequence[str],
        task: EmbeddingTask = EmbeddingTask.QUERY,
    ) -> list[float] | list[list[float]]:
        """
        Embed one text or a list of texts.

        Args:
            text: A string (returns one vector) or a sequence (returns a list)
            task: Query or passage mode

        Returns:
            Vector or list of vectors
        """
        if isinstance(text, str):
            return (await self._request([text], task))[0]
        if not text:
            return []
        return await self._request(list(text), task)

    async def embed_query(self, text: str) -> list[float]:
        """
        Embed a search query: cached, then hedged.

        Raises:
            EmbeddingError: Both hedged attempts (or the retry) failed
        """
        key = (self.config.model, self.config.dimensions, " ".join(text.lower().split()))
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Query embedding cache hit")
            return cached

        vector = await self._hedged_query(text)
        self._cache.set(key, vector)
        return vector

    async def _query_once(self, text: str) -> list[float]:
        return (await self._post([text], EmbeddingTask.QUERY))[0]

    async def _hedged_query(self, text: str) -> list[float]:
        """
        Primary request; a second one if the first is still pending after
        ``hedge_delay``. The first success wins and the other is cancelled.
        If the primary fails before the hedge fires, one fresh attempt is made.
        """
        primary = asyncio.create_task(self._query_once(text))
        tasks = {primary}
        try:
            done, _ = await asyncio.wait(tasks, timeout=self.config.hedge_delay)
            if done:
                try:
                    return primary.result()
                except EmbeddingError as exc:
                    logger.info("Primary embed failed before hedge (%s); retrying once", exc.code.value)
                    return await self._query_once(text)

            logger.debug("Hedging query embedding after %.2fs", self.config.hedge_delay)
            tasks.add(asyncio.create_task(self._query_once(text)))

            error: BaseException = EmbeddingError("Hedged embedding attempts failed")
            pending = set(tasks)
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                winner: asyncio.Task | None = None
                # Both attempts can land in one wait; every exception must be retrieved.
                for task in done:
                    exc = task.exception()
                    if exc is None:
                        winner = winner or task
                    else:
                        error = exc
                if winner is not None:
                    return winner.result()
            raise error
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

    async def embed_passages(self, texts: Sequence[str]) -> list[list[float] | None]:
        """
        Embed documents for indexing.

        Texts are sent in ``batch_size`` chunks. A chunk that still fails after
        retries is split in half recursively; a single text that still fails
        gets ``None`` in its slot.

        Raises:
            EmbeddingError: Authentication was rejected (401/403)
        """
        results: list[list[float] | None] = []
        size = self.config.batch_size
        for start in range(0, len(texts), size):
            results.extend(await self._embed_isolated(list(texts[start : start + size])))
        return results

    async def _embed_isolated(self, texts: list[str]) -> list[list[float] | None]:
        try:
            return list(await self._request(texts, EmbeddingTask.PASSAGE))
        except EmbeddingError as exc:
            if exc.status_code in AUTH_STATUS:
                raise
            if len(texts) == 1:
                logger.warning("Dropping passage after %s: %s", exc.code.value, exc.message)
                return [None]
            middle = len(texts) // 2
            logger.warning(
                "Batch of %d failed (%s); splitting into %d + %d",
                len(texts),
                exc.code.value,
                middle,
                len(texts) - middle,
            )
            left = await self._embed_isolated(texts[:middle])
            right = await self._embed_isolated(texts[middle:])
            return left + right

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
