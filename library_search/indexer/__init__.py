"""
Indexer module for computing catalog embeddings.

Prepares the text each book is embedded from and stores the vectors
used by vector search.
"""

from .embedding_indexer import EmbeddingIndexer, EmbeddingIndexingStats, prepare_vector_source

__all__ = [
    "EmbeddingIndexer",
    "EmbeddingIndexingStats",
    "prepare_vector_source"
]
