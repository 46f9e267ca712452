"""
FrontRAG RAG - Retrieval over the external vector store

    - embeddings: EmbeddingService (ChromaDB embedding functions)
    - search:     SearchService, one collection, distance -> score
    - engine:     RAGEngine, default + project collections

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from .embeddings import EmbeddingService
from .engine import (
    COMPONENT_EXPORT_RE,
    IndexResult,
    RAGEngine,
    RAGEngineError,
    StyleValidation,
    exported_component_name,
)
from .search import SearchResult, SearchService, distance_to_score

__all__ = [
    "EmbeddingService",
    "COMPONENT_EXPORT_RE",
    "IndexResult",
    "RAGEngine",
    "RAGEngineError",
    "StyleValidation",
    "exported_component_name",
    "SearchResult",
    "SearchService",
    "distance_to_score",
]
