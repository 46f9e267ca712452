"""
FrontRAG Core - Frontend guideline retrieval for MCP clients

Project-scoped styling guidelines, component templates and style
validation, retrieved from ChromaDB collections and exposed as MCP tools.

Modules:
    - config:        FrontRAGConfig (frontrag.yaml + environment)
    - logging_utils: logging setup with secret masking
    - project:       ProjectConfig, ProjectDetector, ProjectRegistry, DocumentLoader
    - rag:           EmbeddingService, SearchService, RAGEngine
    - tools:         tool handlers (uniform text envelope)
    - mcp:           FastMCP server

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

from .version import __version__, get_version

from .config import (
    ChromaConfig,
    EmbeddingConfig,
    FrontRAGConfig,
    LoggingConfig,
    PathsConfig,
    SearchConfig,
    ServerConfig,
    load_config,
)
from .logging_utils import setup_logging
from .project import (
    Document,
    DocumentLoader,
    ProjectConfig,
    ProjectConfigError,
    ProjectDetector,
    ProjectRegistry,
    RegistryEntry,
    RegistryError,
)
from .rag import (
    EmbeddingService,
    IndexResult,
    RAGEngine,
    RAGEngineError,
    SearchResult,
    SearchService,
)

__all__ = [
    "__version__",
    "get_version",
    # config
    "ChromaConfig",
    "EmbeddingConfig",
    "FrontRAGConfig",
    "LoggingConfig",
    "PathsConfig",
    "SearchConfig",
    "ServerConfig",
    "load_config",
    "setup_logging",
    # project
    "Document",
    "DocumentLoader",
    "ProjectConfig",
    "ProjectConfigError",
    "ProjectDetector",
    "ProjectRegistry",
    "RegistryEntry",
    "RegistryError",
    # rag
    "EmbeddingService",
    "IndexResult",
    "RAGEngine",
    "RAGEngineError",
    "SearchResult",
    "SearchService",
]
