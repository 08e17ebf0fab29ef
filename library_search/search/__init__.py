"""
Search module for hybrid book search.

Provides query enhancement, embedding, vector and keyword search, and
the ranker that merges both into one list.
"""

from .models import (
    WeightedKeyword,
    EnhancedQuery,
    EmbeddingOutcome,
    ScoredResult,
    HybridSearchStats,
    HybridSearchResponse,
)
from .keyword_table import KeywordTables, DEFAULT_TABLES
from .query_parser import QueryParser
from .query_enhancer import QueryEnhancer
from .embedding_service import EmbeddingService, get_embedding_service
from .semantic_engine import SemanticEngine, SemanticSearchOutcome
from .keyword_engine import KeywordEngine
from .ranker import ResultRanker
from .hybrid_engine import HybridEngine, FALLBACK_BOOKS, fallback_results

__all__ = [
    "WeightedKeyword",
    "EnhancedQuery",
    "EmbeddingOutcome",
    "ScoredResult",
    "HybridSearchStats",
    "HybridSearchResponse",
    "KeywordTables",
    "DEFAULT_TABLES",
    "QueryParser",
    "QueryEnhancer",
    "EmbeddingService",
    "get_embedding_service",
    "SemanticEngine",
    "SemanticSearchOutcome",
    "KeywordEngine",
    "ResultRanker",
    "HybridEngine",
    "FALLBACK_BOOKS",
    "fallback_results",
]
