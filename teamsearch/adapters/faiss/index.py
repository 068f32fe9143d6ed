"""
FAISS Vector Store - Local cosine-similarity store keyed by stable identity.

Features:
- Async-compatible operations (blocking FAISS calls run in a thread)
- Overwrite-on-upsert through an identity -> label map
- Payloads stored alongside vectors
- Persistence with a JSON sidecar and an index manifest
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import faiss
import numpy as np

from teamsearch.config import ErrorCode, IndexManifest, VectorStoreError
from teamsearch.domains.search.models import VectorMatch, VectorPoint

logger = logging.getLogger(__name__)

__all__ = ["FAISSVectorStore"]

INDEX_FILE = "faiss_index.bin"
POINTS_FILE = "points.json"
MANIFEST_FILE = "manifest.json"


class FAISSVectorStore:
    """
    FAISS-backed vector store.

    Vectors are L2-normalized so inner product equals cosine similarity.

    Example:
        >>> store = FAISSVectorStore("data/indices/faiss", model="jina-embeddings-v4")
        >>> await store.ensure_index(2048)
        >>> await store.upsert([VectorPoint(id=identity, vector=vec, payload=row)])
        >>> matches = await store.search(query_vec, k=20)
        >>> await store.flush()
    """

    def __init__(self, path: str | Path | None = None, model: str = "") -> None:
        """
        Initialize FAISS store.

        Args:
            path: Directory for persistence (None keeps the index in memory)
            model: Embedding model name recorded in the manifest
        """
        self.path = Path(path) if path is not None else None
        self.model = model
        self.dimension: int | None = None

        self._index: faiss.IndexIDMap2 | None = None
        self._labels: dict[str, int] = {}
        self._identities: dict[int, str] = {}
        self._payloads: dict[int, dict[str, Any]] = {}
        self._next_label = 0
        self._dirty = False
        self._lock = asyncio.Lock()

    @property
    def size(self) -> int:
        """Get number of vectors in index."""
        return self._index.ntotal if self._index is not None else 0

    async def ensure_index(self, dimension: int, metric: str = "cosine") -> None:
        """
        Load the persisted index or create an empty one.

        Raises:
            VectorStoreError: Unsupported metric, or a dimension/model that
                conflicts with the existing index
        """
        if metric != "cosine":
            raise VectorStoreError(f"Unsupported metric: {metric}")

        async with self._lock:
            if self._index is None:
                if self.path is not None and (self.path / INDEX_FILE).exists():
                    await self._load()
                else:
                    self._index = faiss.IndexIDMap2(faiss.IndexFlatIP(dimension))
                    self.dimension = dimension
                    logger.info("FAISS index initialized: dimension=%d", dimension)

            if self.dimension != dimension:
                raise VectorStoreError(
                    f"Index dimension {self.dimension} does not match {dimension}",
                    code=ErrorCode.VECTOR_STORE_DIMENSION_MISMATCH,
                )

    async def upsert(self, points: Sequence[VectorPoint]) -> int:
        """
        Insert or overwrite points by identity.

        Returns:
            Number of points written
        """
        if not points:
            return 0
        if self._index is None or self.dimension is None:
            raise VectorStoreError(
                "Index not initialized; call ensure_index first",
                code=ErrorCode.VECTOR_STORE_UNAVAILABLE,
            )

        # Last occurrence of an identity within the batch wins.
        latest = {p.id: p for p in points}
        batch = list(latest.values())

        vectors = np.ascontiguousarray(np.asarray([p.vector for p in batch], dtype="float32"))
        if vectors.ndim != 2 or vectors.shape[1] != self.dimension:
            raise VectorStoreError(
                f"Vectors must have dimension {self.dimension}",
                code=ErrorCode.VECTOR_STORE_DIMENSION_MISMATCH,
            )
        faiss.normalize_L2(vectors)

        async with self._lock:
            stale = [self._labels[p.id] for p in batch if p.id in self._labels]
            if stale:
                await asyncio.to_thread(self._index.remove_ids, np.asarray(stale, dtype="int64"))

            labels = []
            for point in batch:
                label = self._labels.get(point.id)
                if label is None:
                    label = self._next_label
                    self._next_label += 1
                    self._labels[point.id] = label
                    self._identities[label] = point.id
                self._payloads[label] = dict(point.payload)
                labels.append(label)

            await asyncio.to_thread(
                self._index.add_with_ids, vectors, np.asarray(labels, dtype="int64")
            )
            self._dirty = True

        logger.debug("Upserted %d vectors (%d replaced)", len(batch), len(stale))
        return len(batch)

    async def search(self, vector: Sequence[float], k: int) -> list[VectorMatch]:
        """
        Cosine nearest neighbors.

        Args:
            vector: Query vector of the index dimension
            k: Number of results

        Returns:
            Matches, best first
        """
        if self._index is None or self._index.ntotal == 0 or k <= 0:
            return []

        query = np.ascontiguousarray(np.asarray(vector, dtype="float32").reshape(1, -1))
        if query.shape[1] != self.dimension:
            raise VectorStoreError(
                f"Query dimension {query.shape[1]} does not match {self.dimension}",
                code=ErrorCode.VECTOR_STORE_DIMENSION_MISMATCH,
            )
        faiss.normalize_L2(query)

        async with self._lock:
            scores, labels = await asyncio.to_thread(
                self._index.search, query, min(k, self._index.ntotal)
            )

        results = []
        for score, label in zip(scores[0], labels[0]):
            identity = self._identities.get(int(label))
            if identity is None:
                continue
            results.append(
                VectorMatch(id=identity, score=float(score), payload=self._payloads.get(int(label), {}))
            )
        return results

    async def flush(self) -> None:
        """Write index, sidecar and manifest if anything changed."""
        if self.path is None or not self._dirty or self._index is None:
            return

        async with self._lock:
            self.path.mkdir(parents=True, exist_ok=True)
            index_path = self.path / INDEX_FILE
            await asyncio.to_thread(faiss.write_index, self._index, str(index_path))

            sidecar = {
                "dimension": self.dimension,
                "next_label": self._next_label,
                "points": [
                    {"label": label, "id": identity, "payload": self._payloads.get(label, {})}
                    for label, identity in self._identities.items()
                ],
            }
            await asyncio.to_thread(self._write_json, self.path / POINTS_FILE, sidecar)

            manifest = IndexManifest.for_index(
                index_path,
                model=self.model,
                dim=self.dimension or 0,
                point_count=self._index.ntotal,
            )
            await asyncio.to_thread(manifest.save, self.path / MANIFEST_FILE)
            self._dirty = False

        logger.info("Index saved to %s (%d vectors)", self.path, self.size)

    async def _load(self) -> None:
        if self.path is None:
            raise VectorStoreError("No index path configured to load from")
        manifest_path = self.path / MANIFEST_FILE
        if manifest_path.exists():
            manifest = await asyncio.to_thread(IndexManifest.load, manifest_path)
            if self.model and manifest.model and manifest.model != self.model:
                raise VectorStoreError(
                    f"Index was built with {manifest.model}, not {self.model}",
                    code=ErrorCode.VECTOR_STORE_DIMENSION_MISMATCH,
                )
            for problem in manifest.verify():
                logger.warning("Index manifest: %s", problem)

        self._index = await asyncio.to_thread(faiss.read_index, str(self.path / INDEX_FILE))
        data = await asyncio.to_thread(self._read_json, self.path / POINTS_FILE)
        self.dimension = int(data["dimension"])
        self._next_label = int(data["next_label"])
        for entry in data["points"]:
            label = int(entry["label"])
            self._labels[entry["id"]] = label
            self._identities[label] = entry["id"]
            self._payloads[label] = entry.get("payload", {})

        logger.info("Index loaded from %s (%d vectors)", self.path, self.size)

    @staticmethod
    def _write_json(path: Path, data: dict[str, Any]) -> None:
        """Write JSON file (sync helper for to_thread)."""
        with open(path, "w") as f:
            json.dump(data, f)

    @staticmethod
    def _read_json(path: Path) -> dict[str, Any]:
        """Read JSON file (sync helper for to_thread)."""
        with open(path) as f:
            result: dict[str, Any] = json.load(f)
            return result

    async def close(self) -> None:
        await self.flush()
