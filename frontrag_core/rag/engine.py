"""
FrontRAG RAG - Engine

Owns the "default" collection (shared guidelines) and, once a project is
loaded, the "project" collection. Orchestrates indexing (loader -> store)
and fan-out search over both collections with per-source weighting.

States:
    NoProject      only the default collection is searched
    ProjectLoaded  project collection searched first, then default

``load_project`` moves to ProjectLoaded and can be called any number of
times; there is no way back to NoProject other than a new engine.

All store calls are awaited one after another; the two collections are
never queried concurrently.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..config import FrontRAGConfig
from ..project.config import ProjectConfig
from ..project.loader import Document, DocumentLoader
from .embeddings import EmbeddingService
from .search import SearchResult, SearchService

logger = logging.getLogger(__name__)

DEFAULT_KEY = "default"
PROJECT_KEY = "project"

# First exported function/const of a module, e.g. ``export default function Button``
COMPONENT_EXPORT_RE = re.compile(r"export\s+(?:default\s+)?(?:function|const)\s+(\w+)")


class RAGEngineError(RuntimeError):
    """The vector store is unreachable or refused a mandatory operation."""


@dataclass
class IndexResult:
    documents_indexed: int
    collection_name: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentsIndexed": self.documents_indexed,
            "collectionName": self.collection_name,
        }


@dataclass
class StyleValidation:
    is_valid: bool
    violations: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)


def exported_component_name(code: str) -> Optional[str]:
    match = COMPONENT_EXPORT_RE.search(code)
    return match.group(1) if match else None


class RAGEngine:
    """
    Multi-collection retrieval over the external vector store.

    Usage:
        engine = RAGEngine(config)
        await engine.initialize()
        await engine.load_project(project)
        results = await engine.search("button spacing", context="style")
    """

    def __init__(
        self,
        config: Optional[FrontRAGConfig] = None,
        client: Optional[Any] = None,
        embedding_service: Optional[EmbeddingService] = None,
        search_service: Optional[SearchService] = None,
        loader: Optional[DocumentLoader] = None,
    ):
        """
        Args:
            config: FrontRAG configuration
            client: Async ChromaDB client (created in initialize() if None)
            embedding_service: Embedding service shared with all collections
            search_service: Per-collection search (built on embedding_service)
            loader: Guideline document loader
        """
        self.config = config or FrontRAGConfig()
        self._client = client
        self.embedding_service = embedding_service or EmbeddingService(self.config.embedding)
        self.search_service = search_service or SearchService(self.embedding_service)
        self.loader = loader or DocumentLoader()

        self._collections: Dict[str, Any] = {}
        self._project_collection_name: Optional[str] = None
        self._current_project: Optional[ProjectConfig] = None
        self.default_collection_name = self.config.chroma.default_collection

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def _ensure_client(self) -> Any:
        if self._client is None:
            import chromadb

            self._client = await chromadb.AsyncHttpClient(
                host=self.config.chroma.host,
                port=self.config.chroma.port,
            )
        return self._client

    async def initialize(self) -> None:
        """
        Check the store is reachable and open the default collection.

        Raises:
            RAGEngineError: store unreachable (fatal at startup)
        """
        try:
            client = await self._ensure_client()
            await client.heartbeat()
            logger.info(
                f"Connected to ChromaDB at {self.config.chroma.host}:{self.config.chroma.port}"
            )
            self._collections[DEFAULT_KEY] = await self._get_or_create_collection(
                self.default_collection_name
            )
        except Exception as e:
            logger.error(f"Failed to initialize RAG Engine: {e}")
            raise RAGEngineError("RAG Engine initialization failed. Is ChromaDB running?") from e

        logger.info("RAG Engine initialized successfully")

    @property
    def client(self) -> Any:
        if self._client is None:
            raise RAGEngineError("RAG Engine is not initialized")
        return self._client

    # -------------------------------------------------------------------------
    # Collections
    # -------------------------------------------------------------------------

    def collection_name_for(self, project: ProjectConfig) -> str:
        """Explicit ``vector_db_collection`` or ``<prefix>_<project.id>``."""
        return project.vector_db_collection or f"{self.config.chroma.collection_prefix}_{project.id}"

    async def _get_or_create_collection(self, name: str) -> Any:
        embedding_fn = self.embedding_service.get_embedding_function()
        try:
            return await self.client.get_collection(name=name, embedding_function=embedding_fn)
        except Exception:
            logger.info(f"Creating new collection: {name}")
            return await self.client.create_collection(name=name, embedding_function=embedding_fn)

    async def _open_collection(self, name: str) -> Any:
        """Reuse a live handle when ``name`` is already open."""
        if name == self._project_collection_name and PROJECT_KEY in self._collections:
            return self._collections[PROJECT_KEY]
        if name == self.default_collection_name and DEFAULT_KEY in self._collections:
            return self._collections[DEFAULT_KEY]
        return await self._get_or_create_collection(name)

    async def _recreate_collection(self, name: str) -> Any:
        try:
            await self.client.delete_collection(name=name)
            logger.info(f"Deleted existing collection: {name}")
        except Exception as e:
            logger.debug(f"Collection {name} not deleted (absent?): {e}")

        collection = await self.client.create_collection(
            name=name,
            embedding_function=self.embedding_service.get_embedding_function(),
        )
        # Live handles must point at the new collection
        if name == self._project_collection_name:
            self._collections[PROJECT_KEY] = collection
        if name == self.default_collection_name:
            self._collections[DEFAULT_KEY] = collection
        return collection

    async def list_all_collections(self) -> List[Dict[str, Any]]:
        """All collections in the store with their document counts."""
        collections = []
        for item in await self.client.list_collections():
            name = item if isinstance(item, str) else item.name
            try:
                handle = await self.client.get_collection(
                    name=name,
                    embedding_function=self.embedding_service.get_embedding_function(),
                )
                count = await handle.count()
            except Exception as e:
                logger.warning(f"Cannot count collection {name}: {e}")
                count = 0
            collections.append({"name": name, "count": count})
        return collections

    async def get_collection_info(self) -> Dict[str, Any]:
        """Name and size of the active project collection."""
        collection = self._collections.get(PROJECT_KEY)
        if collection is None:
            return {"name": None, "count": 0}
        return {"name": self._project_collection_name, "count": await collection.count()}

    # -------------------------------------------------------------------------
    # Projects & indexing
    # -------------------------------------------------------------------------

    async def load_project(self, project: ProjectConfig) -> None:
        """Open (or create) the project's collection and make it current."""
        name = self.collection_name_for(project)
        collection = await self._open_collection(name)

        self._collections[PROJECT_KEY] = collection
        self._project_collection_name = name
        self._current_project = project
        logger.info(f"Loaded project: {project.name} with collection: {name}")

    def get_current_project(self) -> Optional[ProjectConfig]:
        return self._current_project

    async def _write_documents(self, collection: Any, documents: List[Document]) -> None:
        await collection.add(
            ids=[doc.id for doc in documents],
            documents=[doc.content for doc in documents],
            metadatas=[doc.metadata for doc in documents],
        )

    async def index_guidelines(self, project: ProjectConfig, force: bool = False) -> IndexResult:
        """
        Index a project's guideline directory into its collection.

        With ``force`` the collection is dropped and recreated first. Without
        it, a collection that already holds documents is left untouched and
        its current count is reported (file changes are not detected).
        """
        name = self.collection_name_for(project)

        if force:
            collection = await self._recreate_collection(name)
        else:
            collection = await self._open_collection(name)
            count = await collection.count()
            if count > 0:
                logger.info(f"Collection {name} already has {count} documents")
                return IndexResult(documents_indexed=count, collection_name=name)

        documents = self.loader.load_project_guidelines(project)
        if not documents:
            logger.warning(f"No documents found for project: {project.name}")
            return IndexResult(documents_indexed=0, collection_name=name)

        await self._write_documents(collection, documents)
        logger.info(f"Indexed {len(documents)} documents for project: {project.name}")
        return IndexResult(documents_indexed=len(documents), collection_name=name)

    async def index_default_guidelines(
        self,
        guidelines_dir: Optional[Union[str, Path]] = None,
        force: bool = False,
        sections: bool = False,
    ) -> IndexResult:
        """
        Populate the default collection from the shared guideline directory.

        Args:
            guidelines_dir: Directory (defaults to paths.default_guidelines_dir)
            force: Drop and rebuild the collection
            sections: One document per level-2 markdown section
        """
        name = self.default_collection_name
        root = Path(guidelines_dir or self.config.paths.default_guidelines_dir)

        if force:
            collection = await self._recreate_collection(name)
        else:
            collection = await self._open_collection(name)
            count = await collection.count()
            if count > 0:
                logger.info(f"Collection {name} already has {count} documents")
                return IndexResult(documents_indexed=count, collection_name=name)

        if sections:
            documents = self.loader.load_sections(root)
        else:
            documents = self.loader.load_default_guidelines(root)
        if not documents:
            logger.warning(f"No default guidelines found in {root}")
            return IndexResult(documents_indexed=0, collection_name=name)

        await self._write_documents(collection, documents)
        self._collections[DEFAULT_KEY] = collection
        logger.info(f"Indexed {len(documents)} default documents into {name}")
        return IndexResult(documents_indexed=len(documents), collection_name=name)

    # -------------------------------------------------------------------------
    # Retrieval
    # -------------------------------------------------------------------------

    async def search(
        self,
        query: str,
        context: Optional[str] = None,
        max_results: Optional[int] = None,
        threshold: Optional[float] = None,
    ) -> List[SearchResult]:
        """
        Search the project collection (if loaded) then the default one.

        Project scores are multiplied by the project's priority after the
        threshold filter; ``max_results`` bounds the merged output.
        """
        if max_results is None:
            max_results = self.config.search.max_results
        if threshold is None:
            threshold = self.config.search.threshold
        where = {"type": context} if context else None

        results: List[SearchResult] = []

        project_collection = self._collections.get(PROJECT_KEY)
        if self._current_project is not None and project_collection is not None:
            priority = self._current_project.priority
            for hit in await self.search_service.search(
                project_collection, query,
                max_results=max_results, threshold=threshold, filter=where,
            ):
                hit.score *= priority
                hit.source = "project"
                results.append(hit)

        default_collection = self._collections.get(DEFAULT_KEY)
        if default_collection is not None:
            for hit in await self.search_service.search(
                default_collection, query,
                max_results=max_results, threshold=threshold, filter=where,
            ):
                hit.source = "default"
                results.append(hit)

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:max_results]

    async def get_template(self, template_type: str) -> Optional[str]:
        """Body of the best matching template document, or None."""
        results = await self.search(f"{template_type} template", context="template", max_results=1)
        if not results:
            return None

        top = results[0]
        if top.metadata.get("componentType") == template_type or top.metadata.get("type") == "template":
            return top.content
        return None

    async def validate_style(self, code: str, file_type: str) -> StyleValidation:
        """
        Check code against indexed style rules.

        Only naming rules for tsx are enforced here (exported component must
        start with an uppercase letter); every rule's ``suggestion`` metadata
        is passed through.
        """
        rules = await self.search(f"{file_type} style rules validation", context="style", max_results=10)

        violations: List[str] = []
        suggestions: List[str] = []
        for rule in rules:
            if rule.metadata.get("ruleType") == "naming" and file_type == "tsx":
                name = exported_component_name(code) or ""
                if not name[:1].isupper():
                    violations.append("Component names should start with uppercase letter")

            suggestion = rule.metadata.get("suggestion")
            if suggestion:
                suggestions.append(str(suggestion))

        return StyleValidation(
            is_valid=not violations,
            violations=violations,
            suggestions=suggestions,
        )
