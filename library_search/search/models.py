"""
Data models for book search.

Defines the weighted keyword, enhanced query, embedding outcome and
scored result types shared by the search components.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from ..core import EmbeddingProviderError
from ..database.catalog_repository import CatalogEntry, TEXT_FIELDS


@dataclass(frozen=True)
class WeightedKeyword:
    """
    A significant token from the user's query.

    Attributes:
        word: Lower-cased token.
        weight: Ranking multiplier (1.0 unless the token is domain-significant).
    """
    word: str
    weight: float = 1.0


@dataclass(frozen=True)
class EnhancedQuery:
    """
    Result of query enhancement.

    Attributes:
        original: The trimmed query as the user typed it.
        enhanced: The text sent to the embedding provider.
        reason: Which rule produced the rewrite.
    """
    original: str
    enhanced: str
    reason: str = "unchanged"


@dataclass
class EmbeddingOutcome:
    """
    Either a query vector or the provider error that prevented it.

    Exactly one of vector and error is set.
    """
    vector: Optional[np.ndarray] = None
    error: Optional[EmbeddingProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.vector is not None


@dataclass
class ScoredResult:
    """
    A ranked book returned to the caller.

    Attributes:
        entry: The catalog entry.
        raw_similarity: Cosine similarity from vector search, None when the
            book was only found by keyword search.
        keyword_score: Weighted keyword-match score in [0, keyword cap].
        combined_score: Final ranking score.
    """
    entry: CatalogEntry
    raw_similarity: Optional[float]
    keyword_score: float
    combined_score: float

    @property
    def id(self) -> str:
        return self.entry.id

    def to_dict(self) -> dict:
        """
        Serialize for the HTTP response.

        The combined score goes out as "similarity" and the raw cosine value
        as "originalSimilarity", the field names existing clients read.
        """
        data = {"id": self.entry.id}
        for name in TEXT_FIELDS:
            data[name] = getattr(self.entry, name)
        data["year"] = self.entry.year
        data["originalSimilarity"] = self.raw_similarity
        data["keywordScore"] = self.keyword_score
        data["similarity"] = self.combined_score
        return data


@dataclass
class HybridSearchStats:
    """
    Statistics from one hybrid search execution.

    Attributes:
        original_query: Query as received.
        enhanced_query: Text that was embedded.
        similarity_threshold: Vector threshold used for this query.
        embedding_results: Books returned by vector search.
        keyword_results: Books returned by keyword search.
        total_results: Books in the merged list.
        overlap_count: Books found by both branches.
        fallback: True when placeholder results were returned.
        error: Provider error message when falling back.
        vector_time_ms: Time for embedding plus vector query.
        keyword_time_ms: Time for keyword query.
        execution_time_ms: Total time.
    """
    original_query: str
    enhanced_query: str
    similarity_threshold: float
    embedding_results: int = 0
    keyword_results: int = 0
    total_results: int = 0
    overlap_count: int = 0
    fallback: bool = False
    error: Optional[str] = None
    vector_time_ms: float = 0.0
    keyword_time_ms: float = 0.0
    execution_time_ms: float = 0.0


@dataclass
class HybridSearchResponse:
    """Ranked books plus the statistics describing how they were found."""
    results: List[ScoredResult] = field(default_factory=list)
    stats: Optional[HybridSearchStats] = None
