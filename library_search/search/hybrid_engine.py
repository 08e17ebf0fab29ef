"""
Hybrid search engine combining vector and keyword search.

Runs the embedding/vector branch and the keyword branch concurrently,
then merges both result sets with the weighted keyword ranker. When the
embedding provider fails, a fixed set of placeholder books is returned
instead so the client still receives a well-formed answer.
"""

import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List, Tuple

from ..core import get_config, get_logger, EmbeddingProviderError, SearchBackendError, ValidationError
from ..database.catalog_repository import CatalogEntry
from .keyword_engine import KeywordEngine
from .models import EnhancedQuery, HybridSearchResponse, HybridSearchStats, ScoredResult
from .query_enhancer import QueryEnhancer
from .ranker import ResultRanker
from .semantic_engine import SemanticEngine, SemanticSearchOutcome

logger = get_logger(__name__)


# (entry, similarity) pairs returned when the query cannot be embedded
FALLBACK_BOOKS: Tuple[Tuple[CatalogEntry, float], ...] = (
    (
        CatalogEntry(
            id="1",
            title="Mathematik für die Grundschule",
            author="Max Mustermann",
            subject="Mathematik",
            level="Grundschule",
            description="Ein umfassendes Buch über Mathematik für Grundschüler."
        ),
        0.95
    ),
    (
        CatalogEntry(
            id="2",
            title="Die Welt der Zahlen",
            author="Lisa Schmidt",
            subject="Mathematik",
            level="Grundschule",
            description="Ein illustriertes Buch für Kinder."
        ),
        0.87
    ),
)


def fallback_results() -> List[ScoredResult]:
    """Placeholder results used when embedding fails."""
    return [
        ScoredResult(
            entry=entry,
            raw_similarity=similarity,
            keyword_score=0.0,
            combined_score=similarity
        )
        for entry, similarity in FALLBACK_BOOKS
    ]


class HybridEngine:
    """
    Orchestrates one hybrid book search.

    The vector branch embeds the enhanced query; the keyword branch always
    works on the original query. Both run on a two-worker thread pool and
    are joined against one shared deadline of branch_timeout_seconds.
    """

    def __init__(
        self,
        enhancer: QueryEnhancer = None,
        semantic_engine: SemanticEngine = None,
        keyword_engine: KeywordEngine = None,
        ranker: ResultRanker = None,
        search_config=None
    ):
        """
        Initialize the hybrid search engine.

        Args:
            enhancer: Query rewriter for the embedding text.
            semantic_engine: Vector branch.
            keyword_engine: Keyword branch.
            ranker: Merger and re-ranker.
            search_config: SearchConfig; defaults to the global config.
        """
        self.search_config = search_config or get_config().search
        self.enhancer = enhancer or QueryEnhancer(
            short_query_max_tokens=self.search_config.short_query_max_tokens
        )
        self.semantic_engine = semantic_engine or SemanticEngine(search_config=self.search_config)
        self.keyword_engine = keyword_engine or KeywordEngine()
        self.ranker = ranker or ResultRanker()
        self.branch_timeout = self.search_config.branch_timeout_seconds

    def search(self, query: str) -> HybridSearchResponse:
        """
        Execute a hybrid search.

        Args:
            query: Query text as received from the client.

        Returns:
            HybridSearchResponse with ranked results and statistics. On an
            embedding failure the results are the fallback books and
            stats.fallback is set.

        Raises:
            ValidationError: If the query is empty or blank.
            SearchBackendError: If either catalog query fails, or the
                keyword branch times out.
            ConfigurationError: If the embedding provider is not configured.
        """
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Suchanfrage fehlt", {"query": query})

        start_time = time.time()
        query = query.strip()

        enhanced = self.enhancer.enhance(query)
        threshold = self.semantic_engine.threshold_for(query)

        logger.info(f"Searching for '{query}' (embedding text: '{enhanced.enhanced}', threshold: {threshold})")

        stats = HybridSearchStats(
            original_query=query,
            enhanced_query=enhanced.enhanced,
            similarity_threshold=threshold
        )

        vector_outcome, keyword_entries, keyword_time = self._run_branches(enhanced, threshold)
        stats.vector_time_ms = round(vector_outcome.embedding_time_ms + vector_outcome.search_time_ms, 2)
        stats.keyword_time_ms = keyword_time

        if not vector_outcome.ok:
            results = fallback_results()
            stats.fallback = True
            stats.error = vector_outcome.error.message
            stats.total_results = len(results)
            stats.execution_time_ms = round((time.time() - start_time) * 1000, 2)
            logger.warning(f"Returning fallback results for '{query}': {stats.error}")
            return HybridSearchResponse(results=results, stats=stats)

        keywords = self.ranker.extract_weighted_keywords(query)
        results = self.ranker.merge(vector_outcome.matches, keyword_entries, keywords)

        vector_ids = {m.entry.id for m in vector_outcome.matches}
        stats.embedding_results = len(vector_outcome.matches)
        stats.keyword_results = len(keyword_entries)
        stats.overlap_count = len(vector_ids & {e.id for e in keyword_entries})
        stats.total_results = len(results)
        stats.execution_time_ms = round((time.time() - start_time) * 1000, 2)

        logger.info(
            f"Hybrid search '{query}': {stats.embedding_results} vector, "
            f"{stats.keyword_results} keyword, {stats.total_results} merged "
            f"in {stats.execution_time_ms:.1f}ms"
        )

        return HybridSearchResponse(results=results, stats=stats)

    def _run_branches(
        self,
        enhanced: EnhancedQuery,
        threshold: float
    ) -> Tuple[SemanticSearchOutcome, List[CatalogEntry], float]:
        """
        Run both branches concurrently and join them.

        Both waits share one deadline, so the join never takes longer than
        branch_timeout. A timed-out vector branch becomes a provider error
        so the caller falls back; a timed-out keyword branch is a backend
        failure. The pool is not waited on, so a hung branch cannot hold
        the request.
        """
        executor = ThreadPoolExecutor(max_workers=2)
        deadline = time.monotonic() + self.branch_timeout
        try:
            vector_future = executor.submit(
                self.semantic_engine.search,
                enhanced.enhanced,
                threshold
            )
            keyword_future = executor.submit(
                self.keyword_engine.search,
                enhanced.original
            )

            try:
                vector_outcome = vector_future.result(
                    timeout=max(0.0, deadline - time.monotonic())
                )
            except FutureTimeoutError:
                logger.warning(f"Vector branch timed out after {self.branch_timeout}s")
                vector_outcome = SemanticSearchOutcome(
                    threshold=threshold,
                    error=EmbeddingProviderError(
                        f"Embedding timed out after {self.branch_timeout}s"
                    )
                )

            try:
                keyword_entries, keyword_time = keyword_future.result(
                    timeout=max(0.0, deadline - time.monotonic())
                )
            except FutureTimeoutError:
                logger.error(f"Keyword branch timed out after {self.branch_timeout}s")
                raise SearchBackendError(
                    f"Keyword search timed out after {self.branch_timeout}s",
                    query=enhanced.original
                )
        finally:
            executor.shutdown(wait=False)

        return vector_outcome, keyword_entries, keyword_time
