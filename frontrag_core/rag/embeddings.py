"""
FrontRAG RAG - Embedding Service

Wraps a ChromaDB embedding function (OpenAI, sentence-transformers or the
ChromaDB default ONNX model). Collections use it to embed documents and
query texts; ``generate*`` expose it for pre-computed query vectors.

Author: Olivier Vitrac, PhD, HDR | olivier.vitrac@adservio.fr | Adservio | 2026-10-19
"""

import logging
from typing import Any, List, Optional, Sequence

from ..config import EmbeddingConfig

logger = logging.getLogger(__name__)


class EmbeddingService:
    """
    Text -> vector, one vector per input text.

    The underlying embedding function is built lazily on first use so that
    constructing the service never touches the network or loads a model.
    """

    def __init__(
        self,
        config: Optional[EmbeddingConfig] = None,
        embedding_function: Optional[Any] = None,
    ):
        """
        Args:
            config: Embedding configuration
            embedding_function: Pre-built ChromaDB-compatible embedding function

        Raises:
            ValueError: OpenAI backend selected without an API key
        """
        self.config = config or EmbeddingConfig()
        self._embedding_fn = embedding_function

        if self._embedding_fn is None and self.config.backend == "openai" and not self.config.api_key:
            raise ValueError("OPENAI_API_KEY is required for embeddings")

    @property
    def model(self) -> str:
        return self.config.model

    def _ensure_embedding_fn(self) -> None:
        """Lazily initialize the embedding function."""
        if self._embedding_fn is not None:
            return

        from chromadb.utils import embedding_functions

        backend = self.config.backend
        if backend == "openai":
            self._embedding_fn = embedding_functions.OpenAIEmbeddingFunction(
                api_key=self.config.api_key,
                model_name=self.config.model,
            )
        elif backend == "sentence-transformers":
            self._embedding_fn = embedding_functions.SentenceTransformerEmbeddingFunction(
                model_name=self.config.model,
                device=self.config.device,
            )
        else:
            self._embedding_fn = embedding_functions.DefaultEmbeddingFunction()

        logger.info(f"Embeddings: backend={backend} model={self.config.model}")

    def get_embedding_function(self) -> Any:
        """The function handed to collections for server-side-style embedding."""
        self._ensure_embedding_fn()
        return self._embedding_fn

    def generate_batch_embeddings(self, texts: Sequence[str]) -> List[List[float]]:
        """
        Embed a batch of texts.

        Raises:
            RuntimeError: the embedding backend failed
        """
        if not texts:
            return []
        self._ensure_embedding_fn()
        try:
            vectors = self._embedding_fn(list(texts))
        except Exception as e:
            logger.error(f"Failed to generate batch embeddings: {e}")
            raise RuntimeError("Batch embedding generation failed") from e
        return [[float(x) for x in vector] for vector in vectors]

    def generate_embedding(self, text: str) -> List[float]:
        """Embed a single text."""
        return self.generate_batch_embeddings([text])[0]

    def generate(self, texts: Sequence[str]) -> List[List[float]]:
        """Embedding function contract: ``generate(texts) -> vectors``."""
        return self.generate_batch_embeddings(texts)
