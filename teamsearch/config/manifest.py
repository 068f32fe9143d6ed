"""
Index Manifest - Record what a persisted vector index was built from.

Written next to the FAISS index on every flush so that an index built with
one embedding model/dimension is never silently queried with another.

Usage:
    from teamsearch.config.manifest import IndexManifest

    manifest = IndexManifest.for_index(index_file, model="jina-embeddings-v4", dim=2048, point_count=412)
    manifest.save(index_dir / "manifest.json")
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class IndexManifest:
    """Provenance of a persisted vector index."""

    model: str
    dim: int
    point_count: int
    metric: str = "cosine"
    index_file: str = ""
    checksum: str = ""
    schema_version: str = "1.0.0"
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def for_index(
        cls,
        index_file: str | Path,
        model: str,
        dim: int,
        point_count: int,
        metric: str = "cosine",
        **metadata: Any,
    ) -> IndexManifest:
        """Build a manifest for an index file already written to disk."""
        path = Path(index_file)
        return cls(
            model=model,
            dim=dim,
            point_count=point_count,
            metric=metric,
            index_file=str(path),
            checksum=compute_file_checksum(path) if path.exists() else "",
            metadata=dict(metadata),
        )

    def verify(self) -> list[str]:
        """
        Check the index file still matches the recorded checksum.

        Returns:
            List of problems (empty if the file is intact)
        """
        path = Path(self.index_file)
        if not path.exists():
            return [f"Index file not found: {self.index_file}"]
        if self.checksum and compute_file_checksum(path) != self.checksum:
            return [f"Checksum mismatch for {self.index_file}"]
        return []

    def save(self, path: str | Path) -> None:
        """Save manifest to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(asdict(self), f, indent=2)

    @classmethod
    def load(cls, path: str | Path) -> IndexManifest:
        """Load manifest from JSON file."""
        with open(path) as f:
            data = json.load(f)
        return cls(**data)


def compute_file_checksum(path: Path, algorithm: str = "sha256") -> str:
    """Hex digest of a file, read in 64 KiB chunks."""
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            hasher.update(chunk)
    return hasher.hexdigest()
