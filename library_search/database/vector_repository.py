"""
Vector repository for book embeddings.

Stores one float32 embedding per book and answers nearest-neighbor
queries inside SQLite using sqlite-vec's cosine distance.
"""

import sqlite3
import struct
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from ..core import get_config, get_logger, DatabaseError, SearchBackendError
from .catalog_repository import CATALOG_COLUMNS, CatalogEntry, row_to_entry
from .connection import get_connection, get_cursor
from .schema import _load_vec_extension

logger = get_logger(__name__)


@dataclass
class VectorMatch:
    """
    A book returned by vector search.

    Attributes:
        entry: The matched catalog entry.
        similarity: Cosine similarity to the query vector (higher is better).
    """
    entry: CatalogEntry
    similarity: float


class VectorRepository:
    """
    Repository for embedding storage and similarity search.

    Embeddings must have the configured dimensionality; anything else is
    rejected on write so the vector column stays uniform.
    """

    def __init__(self, dimensions: int = None):
        """
        Initialize the vector repository.

        Args:
            dimensions: Expected embedding length. Defaults to config value.
        """
        if dimensions is None:
            dimensions = get_config().embedding.dimensions
        self.dimensions = dimensions

    def store_embedding(self, book_id: str, embedding: np.ndarray) -> None:
        """
        Store the embedding for a single book.

        Args:
            book_id: Book identifier.
            embedding: Vector of the configured dimensionality.
        """
        self.store_embeddings_batch([(book_id, embedding)])

    def store_embeddings_batch(self, items: Sequence[Tuple[str, np.ndarray]]) -> int:
        """
        Store embeddings for multiple books in one transaction.

        Args:
            items: (book_id, embedding) pairs.

        Returns:
            Number of books updated.

        Raises:
            DatabaseError: If an embedding has the wrong dimensionality.
        """
        if not items:
            return 0

        rows = []
        for book_id, embedding in items:
            vector = np.asarray(embedding, dtype=np.float32)
            if vector.shape != (self.dimensions,):
                raise DatabaseError(
                    f"Embedding for book {book_id} has shape {vector.shape}, "
                    f"expected ({self.dimensions},)",
                    {"book_id": book_id}
                )
            rows.append((self._array_to_blob(vector), book_id))

        with get_cursor() as cur:
            cur.executemany(
                "UPDATE books SET embedding = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                rows
            )
            updated = cur.rowcount

        logger.debug(f"Stored {updated} embeddings")
        return updated

    def get_embedding(self, book_id: str):
        """
        Load the stored embedding of a book.

        Returns:
            numpy array, or None if the book has no embedding.
        """
        with get_connection() as conn:
            row = conn.execute(
                "SELECT embedding FROM books WHERE id = ?",
                (book_id,)
            ).fetchone()

        if not row or row["embedding"] is None:
            return None
        return self._blob_to_array(row["embedding"])

    def count_embedded(self) -> int:
        """Get number of books that have an embedding."""
        with get_connection() as conn:
            row = conn.execute(
                "SELECT COUNT(*) as count FROM books WHERE embedding IS NOT NULL"
            ).fetchone()
            return row["count"] if row else 0

    def nearest_neighbors(
        self,
        query_embedding: np.ndarray,
        threshold: float,
        limit: int
    ) -> List[VectorMatch]:
        """
        Find books whose embedding is more similar than threshold.

        Similarity is 1 - cosine distance, computed in SQLite. Books without
        an embedding are never returned.

        Args:
            query_embedding: Query vector.
            threshold: Minimum similarity (exclusive).
            limit: Maximum number of results.

        Returns:
            VectorMatch list ordered by similarity, descending.

        Raises:
            SearchBackendError: If the extension is missing or the query fails.
        """
        query_blob = self._array_to_blob(np.asarray(query_embedding, dtype=np.float32))
        columns = ", ".join(CATALOG_COLUMNS)

        sql = f"""
            SELECT * FROM (
                SELECT {columns},
                       1.0 - vec_distance_cosine(embedding, ?) AS similarity
                FROM books
                WHERE embedding IS NOT NULL AND length(embedding) = ?
            )
            WHERE similarity > ?
            ORDER BY similarity DESC
            LIMIT ?
        """

        try:
            with get_connection() as conn:
                if not _load_vec_extension(conn):
                    raise SearchBackendError("Vector search unavailable: sqlite-vec could not be loaded")

                rows = conn.execute(
                    sql,
                    (query_blob, len(query_blob), threshold, limit)
                ).fetchall()
        except (sqlite3.Error, DatabaseError) as e:
            logger.error(f"Vector search failed: {e}")
            raise SearchBackendError(f"Vector search failed: {e}")

        return [
            VectorMatch(entry=row_to_entry(row), similarity=float(row["similarity"]))
            for row in rows
        ]

    @staticmethod
    def _array_to_blob(arr: np.ndarray) -> bytes:
        """
        Convert numpy array to bytes for SQLite storage.

        Args:
            arr: numpy array of floats.

        Returns:
            Packed float32 bytes.
        """
        return struct.pack(f"{len(arr)}f", *np.asarray(arr).astype(np.float32))

    @staticmethod
    def _blob_to_array(blob: bytes) -> np.ndarray:
        """
        Convert bytes back to numpy array.

        Args:
            blob: Packed bytes from database.

        Returns:
            numpy array of float32.
        """
        count = len(blob) // 4
        return np.array(struct.unpack(f"{count}f", blob), dtype=np.float32)
