"""Vector store interface and in-memory adapter."""

from __future__ import annotations

import json
from dataclasses import dataclass
from math import sqrt
from pathlib import Path
from typing import Protocol

from rag_router.retrieval.embedder import Embedder
from rag_router.types import SearchResult


class VectorStore(Protocol):
    """Minimal vector store contract for retrieval."""

    def upsert(self, entries: list[tuple[str, str]], embeddings: list[list[float]]) -> None:
        """Insert `(source, text)` entries with their vectors."""

    def search(self, query_embedding: list[float], k: int) -> list[SearchResult]:
        """Return the `k` nearest entries by vector similarity."""

    def __len__(self) -> int:
        """Number of stored entries."""


@dataclass(slots=True)
class _StoredVector:
    source: str
    text: str
    embedding: list[float]


class InMemoryVectorStore:
    """Cosine-similarity store over pre-embedded knowledge chunks."""

    def __init__(self) -> None:
        self._records: list[_StoredVector] = []

    def upsert(self, entries: list[tuple[str, str]], embeddings: list[list[float]]) -> None:
        if len(entries) != len(embeddings):
            raise ValueError("entries and embeddings must have the same length")
        for (source, text), embedding in zip(entries, embeddings, strict=True):
            self._records.append(_StoredVector(source=source, text=text, embedding=embedding))

    def search(self, query_embedding: list[float], k: int) -> list[SearchResult]:
        ranked = sorted(
            (
                SearchResult(
                    source=record.source,
                    text=record.text,
                    score=_cosine_similarity(query_embedding, record.embedding),
                )
                for record in self._records
            ),
            key=lambda item: item.score,
            reverse=True,
        )
        return ranked[:k]

    def __len__(self) -> int:
        return len(self._records)

    def load_jsonl(self, path: str | Path, embedder: Embedder) -> int:
        """Load `{source, text, vector?}` rows; rows without a vector are embedded.

        Every vector must have the same dimension. Returns the number of rows
        loaded.
        """

        entries: list[tuple[str, str]] = []
        vectors: list[list[float] | None] = []
        with Path(path).open(encoding="utf-8") as handle:
            for line_no, line in enumerate(handle, start=1):
                line = line.strip()
                if not line:
                    continue
                row = json.loads(line)
                if not isinstance(row, dict):
                    raise ValueError(f"{path}:{line_no}: row is not a JSON object")
                if "text" not in row:
                    raise ValueError(f"{path}:{line_no}: row has no 'text' field")
                vector = row.get("vector")
                if vector is not None and (not isinstance(vector, list) or not vector):
                    raise ValueError(f"{path}:{line_no}: 'vector' must be a non-empty list")
                entries.append((str(row.get("source", f"row-{line_no}")), str(row["text"])))
                vectors.append(vector)

        missing = [i for i, vector in enumerate(vectors) if vector is None]
        if missing:
            computed = embedder.embed_documents([entries[i][1] for i in missing])
            for i, vector in zip(missing, computed, strict=True):
                vectors[i] = vector

        loaded = [list(vector or []) for vector in vectors]
        dimensions = {len(vector) for vector in loaded}
        if len(dimensions) > 1:
            raise ValueError(f"{path}: mixed vector dimensions {sorted(dimensions)}")

        self.upsert(entries, loaded)
        return len(entries)

    @property
    def dimension(self) -> int | None:
        if not self._records:
            return None
        return len(self._records[0].embedding)


def _cosine_similarity(a: list[float], b: list[float]) -> float:
    if len(a) != len(b):
        raise ValueError(f"vector dimension mismatch: {len(a)} != {len(b)}")
    if not a:
        return 0.0
    numerator = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = sqrt(sum(x * x for x in a))
    norm_b = sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return numerator / (norm_a * norm_b)
