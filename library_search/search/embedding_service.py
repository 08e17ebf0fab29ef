"""
Embedding service for turning text into vectors.

Wraps an OpenAI-compatible embeddings endpoint with a fixed model. Any
provider failure surfaces as EmbeddingProviderError so the search path
can fall back instead of failing the request.
"""

from typing import Dict, List, Optional

import numpy as np
from openai import OpenAI, APIError, APIStatusError

from ..core import get_config, get_logger, ConfigurationError, EmbeddingProviderError
from .models import EmbeddingOutcome

logger = get_logger(__name__)

_embedding_service: Optional["EmbeddingService"] = None


class EmbeddingService:
    """
    Service for generating text embeddings using an OpenAI-compatible API.

    The client is created lazily on first use. Retries are left to the
    SDK (max_retries from config) so a search request waits at most a
    bounded time for the provider.
    """

    def __init__(self, config=None):
        """
        Initialize the embedding service.

        Args:
            config: Optional EmbeddingConfig; defaults to the global config.
        """
        self.config = config or get_config().embedding
        self._client: Optional[OpenAI] = None
        self._initialized = False

    def _ensure_client(self) -> None:
        """Lazily initialize the OpenAI client."""
        if self._client is not None:
            return

        if not self.config.api_key:
            raise ConfigurationError(
                "Embedding API key not configured",
                {"hint": "set embedding.api_key or OPENAI_API_KEY"}
            )

        self._client = OpenAI(
            base_url=self.config.endpoint,
            api_key=self.config.api_key,
            timeout=self.config.timeout_seconds,
            max_retries=self.config.max_retries
        )
        self._initialized = True
        logger.info(f"Embedding service initialized with model: {self.config.model}")

    def embed_query(self, query: str) -> np.ndarray:
        """
        Generate the embedding for a search query.

        Args:
            query: Text to embed (usually the enhanced query).

        Returns:
            numpy array of shape (dimensions,).

        Raises:
            EmbeddingProviderError: If the provider fails or returns no vector.
        """
        if not query:
            return np.array([])

        self._ensure_client()

        embeddings = self._embed_batch([query])
        return np.array(embeddings[0], dtype=np.float32)

    def try_embed_query(self, query: str) -> EmbeddingOutcome:
        """
        Embed a query, capturing provider failures instead of raising.

        Configuration errors still raise; they are not transient.

        Args:
            query: Text to embed.

        Returns:
            EmbeddingOutcome holding either the vector or the error.
        """
        try:
            return EmbeddingOutcome(vector=self.embed_query(query))
        except EmbeddingProviderError as e:
            logger.warning(f"Embedding provider failed: {e.message}")
            return EmbeddingOutcome(error=e)

    def embed_passages(self, texts: List[str]) -> np.ndarray:
        """
        Generate embeddings for catalog texts.

        Args:
            texts: Texts to embed.

        Returns:
            numpy array of shape (n, dimensions).

        Raises:
            EmbeddingProviderError: If any batch fails.
        """
        if not texts:
            return np.array([])

        self._ensure_client()

        batch_size = self.config.batch_size
        all_embeddings = []

        for i in range(0, len(texts), batch_size):
            batch = texts[i:i + batch_size]
            all_embeddings.extend(self._embed_batch(batch))

            if len(texts) > batch_size:
                logger.debug(f"Embedded batch {i // batch_size + 1}/{(len(texts) + batch_size - 1) // batch_size}")

        return np.array(all_embeddings, dtype=np.float32)

    def _embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Call the provider once for a batch of texts.

        Args:
            texts: Texts to embed, at most one batch.

        Returns:
            One vector per input text, in input order.

        Raises:
            EmbeddingProviderError: On API errors or a malformed response.
        """
        try:
            response = self._client.embeddings.create(
                model=self.config.model,
                input=texts
            )
        except APIStatusError as e:
            raise EmbeddingProviderError(
                f"Embedding provider error: {e.status_code} {e.message}",
                status_code=e.status_code
            )
        except APIError as e:
            raise EmbeddingProviderError(f"Embedding provider unreachable: {e}")

        data = getattr(response, "data", None) or []
        vectors = [getattr(item, "embedding", None) for item in data]

        if len(vectors) != len(texts) or any(not v for v in vectors):
            raise EmbeddingProviderError(
                "Invalid embedding format from provider",
                details={"expected": len(texts), "received": len(vectors)}
            )

        return vectors

    def get_model_info(self) -> Dict:
        """
        Get information about the embedding model.

        Returns:
            Dictionary with model metadata.
        """
        return {
            "model": self.config.model,
            "dimensions": self.config.dimensions,
            "endpoint": self.config.endpoint,
            "initialized": self._initialized
        }


def get_embedding_service() -> EmbeddingService:
    """
    Get the singleton EmbeddingService instance.

    Returns:
        Global EmbeddingService instance.
    """
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = EmbeddingService()
    return _embedding_service
