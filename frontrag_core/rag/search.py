"""
FrontRAG RAG - Search Service

One similarity query against one collection, distance converted to a
bounded similarity score, threshold filtering, ranked results.

Score conversion (L2-style distances in [0, 2] -> similarity in [0, 1]):

    score = max(0, 2 - distance) / 2

Query failures are logged and yield an empty result list; they are never
raised to the caller.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .embeddings import EmbeddingService

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 5
DEFAULT_THRESHOLD = 0.0


@dataclass
class SearchResult:
    """A ranked hit from one collection."""
    content: str
    score: float
    metadata: Dict[str, Any] = field(default_factory=dict)
    source: str = ""  # "project" | "default", set by the engine

    @property
    def title(self) -> str:
        return str(self.metadata.get("title") or "Guideline")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "content": self.content,
            "score": self.score,
            "metadata": dict(self.metadata),
            "source": self.source,
        }


def distance_to_score(distance: Optional[float]) -> float:
    """Map a vector distance to a similarity in [0, 1]."""
    d = float(distance or 0.0)
    return min(1.0, max(0.0, 2.0 - d) / 2.0)


def _first_row(results: Dict[str, Any], key: str) -> List[Any]:
    rows = results.get(key) or []
    if not rows:
        return []
    return list(rows[0] or [])


class SearchService:
    """
    Similarity search over a single collection handle.

    ``search`` queries by text (the collection's embedding function embeds
    the query); ``search_by_embedding`` queries with a pre-computed vector.
    """

    def __init__(self, embedding_service: Optional[EmbeddingService] = None):
        self.embedding_service = embedding_service

    async def search(
        self,
        collection: Any,
        query: str,
        max_results: Optional[int] = None,
        threshold: Optional[float] = None,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[SearchResult]:
        """
        Query a collection by text.

        Args:
            collection: Collection handle (async query API)
            query: Query text
            max_results: Number of neighbours requested (default 5)
            threshold: Minimum score kept (default 0.0)
            filter: Metadata ``where`` clause

        Returns:
            Results ordered by descending score, at most max_results
        """
        return await self._query(
            collection,
            max_results=max_results,
            threshold=threshold,
            filter=filter,
            query_texts=[query],
        )

    async def search_by_embedding(
        self,
        collection: Any,
        query: str,
        max_results: Optional[int] = None,
        threshold: Optional[float] = None,
        filter: Optional[Dict[str, Any]] = None,
    ) -> List[SearchResult]:
        """Query a collection with a vector computed by the embedding service."""
        if self.embedding_service is None:
            raise RuntimeError("search_by_embedding requires an EmbeddingService")
        try:
            vector = self.embedding_service.generate_embedding(query)
        except Exception as e:
            logger.error(f"Search failed: {e}")
            return []
        return await self._query(
            collection,
            max_results=max_results,
            threshold=threshold,
            filter=filter,
            query_embeddings=[vector],
        )

    async def semantic_search(
        self,
        collection: Any,
        query: str,
        context: Optional[str] = None,
    ) -> List[SearchResult]:
        """Context-prefixed query with a wider, looser result window."""
        enhanced = f"{context} {query}" if context else query
        return await self.search(collection, enhanced, max_results=10, threshold=0.6)

    async def _query(
        self,
        collection: Any,
        max_results: Optional[int],
        threshold: Optional[float],
        filter: Optional[Dict[str, Any]],
        **query_kwargs: Sequence[Any],
    ) -> List[SearchResult]:
        n_results = DEFAULT_MAX_RESULTS if max_results is None else max_results
        min_score = DEFAULT_THRESHOLD if threshold is None else threshold
        if n_results <= 0:
            return []

        try:
            results = await collection.query(
                n_results=n_results,
                where=filter or None,
                include=["documents", "metadatas", "distances"],
                **query_kwargs,
            )
        except Exception as e:
            logger.error(f"Search failed: {e}")
            return []

        documents = _first_row(results, "documents")
        metadatas = _first_row(results, "metadatas")
        distances = _first_row(results, "distances")

        hits: List[SearchResult] = []
        for i, document in enumerate(documents):
            distance = distances[i] if i < len(distances) else 0.0
            score = distance_to_score(distance)
            if score < min_score:
                continue
            hits.append(SearchResult(
                content=document or "",
                score=score,
                metadata=dict(metadatas[i] or {}) if i < len(metadatas) else {},
            ))

        hits.sort(key=lambda r: r.score, reverse=True)
        return hits[:n_results]
