"""
Semantic search engine using vector similarity.

Embeds the (enhanced) query and asks the catalog for the nearest books
above a similarity threshold that depends on the query length.
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from ..core import get_config, get_logger, EmbeddingProviderError
from ..database.vector_repository import VectorMatch, VectorRepository
from .embedding_service import EmbeddingService, get_embedding_service
from .query_parser import QueryParser

logger = get_logger(__name__)


@dataclass
class SemanticSearchOutcome:
    """
    Result of the vector branch.

    Attributes:
        matches: Books above the threshold, most similar first.
        threshold: Similarity threshold that was applied.
        error: Provider error if the query could not be embedded;
            matches is then empty and no catalog query was made.
        embedding_time_ms: Time spent obtaining the query embedding.
        search_time_ms: Time spent in the nearest-neighbor query.
    """
    threshold: float
    matches: List[VectorMatch] = field(default_factory=list)
    error: Optional[EmbeddingProviderError] = None
    embedding_time_ms: float = 0.0
    search_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None


class SemanticEngine:
    """
    Vector search over catalog embeddings.

    Short queries get a lower threshold than longer ones, since a one- or
    two-word query yields a less confident embedding.
    """

    def __init__(
        self,
        embedding_service: EmbeddingService = None,
        vector_repo: VectorRepository = None,
        search_config=None
    ):
        """
        Initialize the semantic search engine.

        Args:
            embedding_service: Embedding client; defaults to the singleton.
            vector_repo: Catalog vector access; defaults to a new repository.
            search_config: SearchConfig; defaults to the global config.
        """
        self.search_config = search_config or get_config().search
        self.embedding_service = embedding_service or get_embedding_service()
        self.vector_repo = vector_repo or VectorRepository()

    def threshold_for(self, query: str) -> float:
        """
        Return the similarity threshold for a query.

        Args:
            query: The user's original query.

        Returns:
            The short-query threshold for queries of at most
            short_query_max_tokens tokens, otherwise the long-query one.
        """
        if QueryParser.count_tokens(query) <= self.search_config.short_query_max_tokens:
            return self.search_config.short_query_threshold
        return self.search_config.long_query_threshold

    def search(
        self,
        embedding_text: str,
        threshold: float,
        limit: int = None
    ) -> SemanticSearchOutcome:
        """
        Embed a query and run the nearest-neighbor query.

        Args:
            embedding_text: Text to embed (the enhanced query).
            threshold: Minimum similarity for returned books.
            limit: Maximum number of books; defaults to config.

        Returns:
            SemanticSearchOutcome. Provider failures are captured in it.

        Raises:
            SearchBackendError: If the catalog query fails.
        """
        limit = limit or self.search_config.vector_limit

        embed_start = time.time()
        embedding = self.embedding_service.try_embed_query(embedding_text)
        embedding_time = round((time.time() - embed_start) * 1000, 2)

        if not embedding.ok:
            return SemanticSearchOutcome(
                threshold=threshold,
                error=embedding.error,
                embedding_time_ms=embedding_time
            )

        logger.debug(f"Embedding created, length: {len(embedding.vector)}")

        search_start = time.time()
        matches = self.vector_repo.nearest_neighbors(embedding.vector, threshold, limit)
        search_time = round((time.time() - search_start) * 1000, 2)

        logger.debug(
            f"Vector search: {len(matches)} books above {threshold} "
            f"(embed: {embedding_time:.1f}ms, search: {search_time:.1f}ms)"
        )

        return SemanticSearchOutcome(
            threshold=threshold,
            matches=matches,
            embedding_time_ms=embedding_time,
            search_time_ms=search_time
        )
