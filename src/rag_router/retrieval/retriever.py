"""Knowledge-base retriever used by the KNOWLEDGE route."""

from __future__ import annotations

import logging
from pathlib import Path

from rag_router.errors import RetrievalError, RetrieverNotInitializedError, StartupError
from rag_router.retrieval.embedder import Embedder
from rag_router.retrieval.vector_store import InMemoryVectorStore, VectorStore
from rag_router.types import SearchResult

logger = logging.getLogger(__name__)

DIMENSION_CHECK_TEXT = "dimension check"


class KnowledgeRetriever:
    """Top-K nearest-neighbour search over a pre-built knowledge index.

    The index must be loaded with `initialize()` (or the retriever must be
    given an already populated store) before `search()` is called; searching
    an unloaded retriever raises `RetrieverNotInitializedError`.
    """

    def __init__(
        self,
        embedder: Embedder,
        *,
        index_path: str | Path | None = None,
        vector_store: VectorStore | None = None,
    ) -> None:
        self.embedder = embedder
        self.index_path = Path(index_path) if index_path is not None else None
        self.vector_store: VectorStore = vector_store or InMemoryVectorStore()
        self._ready = vector_store is not None and len(vector_store) > 0

    @property
    def ready(self) -> bool:
        return self._ready

    def initialize(self) -> None:
        if self._ready:
            return
        if self.index_path is None:
            raise StartupError("No knowledge index configured (set RAG_ROUTER_INDEX_PATH).")
        if not self.index_path.exists():
            raise StartupError(
                f"Knowledge index not found at {self.index_path}. Build it first and "
                "write one JSON object per line with 'source', 'text' and optional 'vector'."
            )
        if not isinstance(self.vector_store, InMemoryVectorStore):
            raise StartupError("Only the in-memory vector store can load a JSONL index.")

        try:
            count = self.vector_store.load_jsonl(self.index_path, self.embedder)
        except (OSError, ValueError) as exc:
            raise StartupError(f"Failed to load knowledge index {self.index_path}: {exc}") from exc

        query_dimension = len(self.embedder.embed_query(DIMENSION_CHECK_TEXT))
        if self.vector_store.dimension not in (None, query_dimension):
            raise StartupError(
                f"Knowledge index {self.index_path} has {self.vector_store.dimension}-dimensional "
                f"vectors but the embedder produces {query_dimension}; rebuild the index "
                "with the configured embedder."
            )
        logger.info("Loaded %d knowledge chunks from %s", count, self.index_path)
        self._ready = True

    def search(self, query: str, top_k: int = 3) -> list[SearchResult]:
        if not self._ready:
            raise RetrieverNotInitializedError("Knowledge index is not initialized")
        try:
            query_embedding = self.embedder.embed_query(query)
            return self.vector_store.search(query_embedding, top_k)
        except Exception as exc:
            raise RetrievalError(f"Knowledge search failed: {exc}") from exc
