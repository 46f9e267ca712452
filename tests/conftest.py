"""
Pytest configuration and shared fixtures for FrontRAG tests.

The ChromaDB server is replaced by an in-memory async fake implementing the
client/collection calls the engine uses. Distances are deterministic: a
collection can pin a distance per document id, otherwise the distance is
derived from word overlap between query and document.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

from frontrag_core.config import EmbeddingConfig, FrontRAGConfig, PathsConfig
from frontrag_core.rag.embeddings import EmbeddingService
from frontrag_core.rag.engine import RAGEngine

_WORD = re.compile(r"[a-z0-9]+")


def _words(text: str) -> set:
    return set(_WORD.findall(text.lower()))


# =============================================================================
# Fake vector store
# =============================================================================

class FakeCollection:
    """In-memory collection with the async query API."""

    def __init__(self, name: str):
        self.name = name
        self.ids: List[str] = []
        self.documents: List[str] = []
        self.metadatas: List[Dict[str, Any]] = []
        self.pinned_distances: Dict[str, float] = {}
        self.fail_queries = False
        self.add_calls = 0
        self.last_query: Dict[str, Any] = {}

    async def add(self, ids, documents=None, metadatas=None, embeddings=None):
        self.add_calls += 1
        self.ids.extend(ids)
        self.documents.extend(documents or [""] * len(ids))
        self.metadatas.extend(metadatas or [{} for _ in ids])

    async def count(self) -> int:
        return len(self.ids)

    async def peek(self, limit: int = 10):
        return {
            "ids": self.ids[:limit],
            "documents": self.documents[:limit],
            "metadatas": self.metadatas[:limit],
        }

    def _distance(self, doc_id: str, query: str, document: str) -> float:
        if doc_id in self.pinned_distances:
            return self.pinned_distances[doc_id]
        q = _words(query)
        if not q:
            return 2.0
        overlap = len(q & _words(document)) / len(q)
        return round(2.0 * (1.0 - overlap), 6)

    async def query(self, query_texts=None, query_embeddings=None, n_results=10, where=None, include=None):
        self.last_query = {
            "query_texts": query_texts,
            "query_embeddings": query_embeddings,
            "n_results": n_results,
            "where": where,
            "include": include,
        }
        if self.fail_queries:
            raise RuntimeError("query failed")

        query = (query_texts or [""])[0]
        rows = []
        for doc_id, document, metadata in zip(self.ids, self.documents, self.metadatas):
            if where and any(metadata.get(k) != v for k, v in where.items()):
                continue
            rows.append((self._distance(doc_id, query, document), doc_id, document, metadata))
        rows.sort(key=lambda r: r[0])
        rows = rows[:n_results]

        return {
            "ids": [[r[1] for r in rows]],
            "documents": [[r[2] for r in rows]],
            "metadatas": [[r[3] for r in rows]],
            "distances": [[r[0] for r in rows]],
        }


class FakeClient:
    """In-memory stand-in for chromadb.AsyncHttpClient."""

    def __init__(self, alive: bool = True):
        self.alive = alive
        self.collections: Dict[str, FakeCollection] = {}
        self.deleted: List[str] = []

    async def heartbeat(self) -> int:
        if not self.alive:
            raise ConnectionError("Could not connect to tenant default_tenant")
        return 1

    async def get_collection(self, name: str, embedding_function=None) -> FakeCollection:
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        return self.collections[name]

    async def create_collection(self, name: str, embedding_function=None) -> FakeCollection:
        if name in self.collections:
            raise ValueError(f"Collection {name} already exists.")
        self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def delete_collection(self, name: str) -> None:
        if name not in self.collections:
            raise ValueError(f"Collection {name} does not exist.")
        del self.collections[name]
        self.deleted.append(name)

    async def list_collections(self) -> List[str]:
        return list(self.collections)


class FakeEmbeddingFunction:
    """Deterministic 3-d embedding, enough for the embedding service contract."""

    def __call__(self, input: List[str]) -> List[List[float]]:
        return [[float(len(text)), float(len(_words(text))), 1.0] for text in input]


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def temp_dir(tmp_path) -> Path:
    return tmp_path


@pytest.fixture
def config(tmp_path) -> FrontRAGConfig:
    """Config rooted in tmp_path, default embedding backend, no threshold."""
    cfg = FrontRAGConfig()
    cfg.embedding = EmbeddingConfig(backend="default")
    cfg.paths = PathsConfig(
        data_dir=str(tmp_path / "data"),
        default_guidelines_dir=str(tmp_path / "default-guidelines"),
    )
    cfg.search.threshold = 0.0
    return cfg


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def embedding_service() -> EmbeddingService:
    return EmbeddingService(EmbeddingConfig(backend="default"), embedding_function=FakeEmbeddingFunction())


@pytest.fixture
def engine(config, fake_client, embedding_service) -> RAGEngine:
    """Engine wired to the fake store, not yet initialized."""
    return RAGEngine(config, client=fake_client, embedding_service=embedding_service)


@pytest_asyncio.fixture
async def ready_engine(engine) -> RAGEngine:
    await engine.initialize()
    return engine


def _write_file(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def write_file():
    return _write_file


@pytest.fixture
def sample_project(tmp_path) -> Path:
    """Frontend project with three guideline files under .mcp-guidelines."""
    root = tmp_path / "My App"
    guidelines = root / ".mcp-guidelines"
    _write_file(
        guidelines / "styles" / "buttons.md",
        "---\ntitle: Buttons\ntype: style\ntags: [ui, spacing]\n---\nUse 8px spacing around buttons.\n",
    )
    _write_file(
        guidelines / "components" / "modal.md",
        "---\ntitle: Modal\n---\nModals trap focus and close on escape.\n",
    )
    _write_file(guidelines / "notes.txt", "Prefer composition over inheritance.\n")
    return root


def _seed(collection: FakeCollection, docs: List[Dict[str, Any]], distances: Optional[Dict[str, float]] = None):
    """Populate a fake collection synchronously."""
    for i, doc in enumerate(docs):
        doc_id = doc.get("id", f"{collection.name}-{i}")
        collection.ids.append(doc_id)
        collection.documents.append(doc["content"])
        collection.metadatas.append(doc.get("metadata", {}))
    collection.pinned_distances.update(distances or {})


@pytest.fixture
def seed():
    return _seed


@pytest.fixture
def make_collection():
    return FakeCollection
