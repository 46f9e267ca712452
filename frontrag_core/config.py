"""
FrontRAG Unified Configuration System
=====================================

Loads and manages configuration from frontrag.yaml with environment variable
overrides. A ``.env`` file in the working directory is honoured before the
overrides are applied.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "frontrag.yaml"


# =============================================================================
# Configuration Data Classes
# =============================================================================

@dataclass
class ChromaConfig:
    """ChromaDB server connection."""
    host: str = "localhost"
    port: int = 8000
    default_collection: str = "mcp_frontend_default"
    collection_prefix: str = "mcp_frontend"


@dataclass
class EmbeddingConfig:
    """Embedding function configuration."""
    backend: str = "openai"  # "openai", "sentence-transformers", "default"
    model: str = "text-embedding-3-small"
    api_key: Optional[str] = None
    device: str = "cpu"


@dataclass
class SearchConfig:
    """Search defaults applied when a caller does not specify them."""
    max_results: int = 5
    threshold: float = 0.7


@dataclass
class PathsConfig:
    """On-disk locations for registry, project guidelines and local data."""
    data_dir: str = str(Path.home() / ".frontend-rag")
    chroma_data_dir: Optional[str] = None  # defaults to <data_dir>/chroma_data
    default_guidelines_dir: str = "guidelines/default"

    @property
    def projects_dir(self) -> Path:
        return Path(self.data_dir) / "projects"

    @property
    def registry_path(self) -> Path:
        return self.projects_dir / "registry.json"

    @property
    def chroma_dir(self) -> Path:
        if self.chroma_data_dir:
            return Path(self.chroma_data_dir)
        return Path(self.data_dir) / "chroma_data"

    def ensure_dirs(self) -> None:
        """Create the data, projects and chroma directories if missing."""
        for path in (Path(self.data_dir), self.projects_dir, self.chroma_dir):
            path.mkdir(parents=True, exist_ok=True)

    def to_dict(self) -> Dict[str, str]:
        return {
            "data_dir": str(Path(self.data_dir)),
            "projects_dir": str(self.projects_dir),
            "chroma_data_dir": str(self.chroma_dir),
            "registry_path": str(self.registry_path),
            "default_guidelines_dir": str(self.default_guidelines_dir),
        }


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_dir: Optional[str] = None
    mask_secrets: bool = True


@dataclass
class ServerConfig:
    """MCP server behaviour."""
    name: str = "mcp-frontend-rag"
    auto_detect: bool = False


@dataclass
class FrontRAGConfig:
    """Root configuration container."""
    chroma: ChromaConfig = field(default_factory=ChromaConfig)
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Serializable view of the configuration (secrets masked)."""
        return {
            "chroma": {
                "host": self.chroma.host,
                "port": self.chroma.port,
                "default_collection": self.chroma.default_collection,
                "collection_prefix": self.chroma.collection_prefix,
            },
            "embedding": {
                "backend": self.embedding.backend,
                "model": self.embedding.model,
                "api_key": "***" if self.embedding.api_key else None,
                "device": self.embedding.device,
            },
            "search": {
                "max_results": self.search.max_results,
                "threshold": self.search.threshold,
            },
            "paths": self.paths.to_dict(),
            "logging": {
                "level": self.logging.level,
                "log_dir": self.logging.log_dir,
                "mask_secrets": self.logging.mask_secrets,
            },
            "server": {
                "name": self.server.name,
                "auto_detect": self.server.auto_detect,
            },
        }


# =============================================================================
# Configuration Loader
# =============================================================================

def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find frontrag.yaml by searching upward from start_path.

    Search order:
    1. start_path / frontrag.yaml
    2. start_path / .frontrag / frontrag.yaml
    3. Parent directories (recursive)
    4. ~/.config/frontrag/frontrag.yaml

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = Path(start_path).resolve()
    for _ in range(10):  # Max 10 levels up
        for candidate in (current / CONFIG_FILE_NAME, current / ".frontrag" / CONFIG_FILE_NAME):
            if candidate.exists():
                return candidate

        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = Path.home() / ".config" / "frontrag" / CONFIG_FILE_NAME
    if user_config.exists():
        return user_config

    return None


def load_config(config_path: Optional[Path] = None, use_dotenv: bool = True) -> FrontRAGConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Environment variables override config file values:
    - CHROMA_DB_HOST / CHROMA_DB_PORT -> chroma.host / chroma.port
    - DEFAULT_COLLECTION / COLLECTION_PREFIX -> chroma.*
    - EMBEDDING_BACKEND / EMBEDDING_MODEL / OPENAI_API_KEY -> embedding.*
    - MAX_SEARCH_RESULTS / SIMILARITY_THRESHOLD -> search.*
    - FRONTEND_RAG_DATA_DIR / CHROMA_DB_DATA / DEFAULT_GUIDELINES_DIR -> paths.*
    - LOG_LEVEL / LOG_DIR -> logging.*
    - AUTO_DETECT -> server.auto_detect

    Args:
        config_path: Path to config file (auto-detected if None)
        use_dotenv: Load a .env file from the working directory first

    Returns:
        FrontRAGConfig instance

    Raises:
        ValueError: if the resulting configuration is invalid
    """
    if use_dotenv:
        dotenv_path = find_dotenv(usecwd=True)
        if dotenv_path:
            load_dotenv(dotenv_path)

    config = FrontRAGConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
            config = _parse_config_dict(data)
        except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
    else:
        logger.debug("No config file found, using defaults")

    config = _apply_env_overrides(config)
    _validate_config(config)
    return config


def _parse_config_dict(data: Dict[str, Any]) -> FrontRAGConfig:
    """Parse configuration dictionary into FrontRAGConfig."""
    config = FrontRAGConfig()

    if "chroma" in data:
        chroma = data["chroma"]
        config.chroma = ChromaConfig(
            host=chroma.get("host", config.chroma.host),
            port=int(chroma.get("port", config.chroma.port)),
            default_collection=chroma.get("default_collection", config.chroma.default_collection),
            collection_prefix=chroma.get("collection_prefix", config.chroma.collection_prefix),
        )

    if "embedding" in data:
        emb = data["embedding"]
        config.embedding = EmbeddingConfig(
            backend=emb.get("backend", config.embedding.backend),
            model=emb.get("model", config.embedding.model),
            api_key=emb.get("api_key"),
            device=emb.get("device", config.embedding.device),
        )

    if "search" in data:
        search = data["search"]
        config.search = SearchConfig(
            max_results=int(search.get("max_results", config.search.max_results)),
            threshold=float(search.get("threshold", config.search.threshold)),
        )

    if "paths" in data:
        paths = data["paths"]
        config.paths = PathsConfig(
            data_dir=str(Path(paths.get("data_dir", config.paths.data_dir)).expanduser()),
            chroma_data_dir=paths.get("chroma_data_dir"),
            default_guidelines_dir=paths.get(
                "default_guidelines_dir", config.paths.default_guidelines_dir
            ),
        )

    if "logging" in data:
        log = data["logging"]
        config.logging = LoggingConfig(
            level=str(log.get("level", config.logging.level)).upper(),
            log_dir=log.get("log_dir"),
            mask_secrets=log.get("mask_secrets", config.logging.mask_secrets),
        )

    if "server" in data:
        server = data["server"]
        config.server = ServerConfig(
            name=server.get("name", config.server.name),
            auto_detect=server.get("auto_detect", config.server.auto_detect),
        )

    return config


def _env_flag(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


def _apply_env_overrides(config: FrontRAGConfig) -> FrontRAGConfig:
    """Apply environment variable overrides to config."""
    env = os.environ

    if env.get("CHROMA_DB_HOST"):
        config.chroma.host = env["CHROMA_DB_HOST"]
    if env.get("CHROMA_DB_PORT"):
        config.chroma.port = int(env["CHROMA_DB_PORT"])
    if env.get("DEFAULT_COLLECTION"):
        config.chroma.default_collection = env["DEFAULT_COLLECTION"]
    if env.get("COLLECTION_PREFIX"):
        config.chroma.collection_prefix = env["COLLECTION_PREFIX"]

    if env.get("EMBEDDING_BACKEND"):
        config.embedding.backend = env["EMBEDDING_BACKEND"]
    if env.get("EMBEDDING_MODEL"):
        config.embedding.model = env["EMBEDDING_MODEL"]
    if env.get("OPENAI_API_KEY"):
        config.embedding.api_key = env["OPENAI_API_KEY"]

    if env.get("MAX_SEARCH_RESULTS"):
        config.search.max_results = int(env["MAX_SEARCH_RESULTS"])
    if env.get("SIMILARITY_THRESHOLD"):
        config.search.threshold = float(env["SIMILARITY_THRESHOLD"])

    if env.get("FRONTEND_RAG_DATA_DIR"):
        config.paths.data_dir = str(Path(env["FRONTEND_RAG_DATA_DIR"]).expanduser())
    if env.get("CHROMA_DB_DATA"):
        config.paths.chroma_data_dir = str(Path(env["CHROMA_DB_DATA"]).expanduser())
    if env.get("DEFAULT_GUIDELINES_DIR"):
        config.paths.default_guidelines_dir = str(Path(env["DEFAULT_GUIDELINES_DIR"]).expanduser())

    if env.get("LOG_LEVEL"):
        config.logging.level = env["LOG_LEVEL"].upper()
    if env.get("LOG_DIR"):
        config.logging.log_dir = str(Path(env["LOG_DIR"]).expanduser())

    if env.get("AUTO_DETECT"):
        config.server.auto_detect = _env_flag(env["AUTO_DETECT"])

    return config


def _validate_config(config: FrontRAGConfig) -> None:
    """Validate configuration values."""
    if not 0.0 <= config.search.threshold <= 1.0:
        raise ValueError(
            f"search.threshold must be within [0, 1], got {config.search.threshold}"
        )
    if config.search.max_results < 1:
        raise ValueError(
            f"search.max_results must be >= 1, got {config.search.max_results}"
        )
    if not 0 < config.chroma.port < 65536:
        raise ValueError(f"chroma.port out of range: {config.chroma.port}")

    valid_backends = {"openai", "sentence-transformers", "default"}
    if config.embedding.backend not in valid_backends:
        logger.warning(
            f"Unknown embedding backend '{config.embedding.backend}', "
            f"expected one of {sorted(valid_backends)}"
        )

    valid_levels = {"DEBUG", "INFO", "WARNING", "WARN", "ERROR"}
    if config.logging.level not in valid_levels:
        logger.warning(f"Unknown log level '{config.logging.level}', using INFO")
        config.logging.level = "INFO"

