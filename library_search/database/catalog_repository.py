"""
Catalog repository for the books table.

Provides the write path used by imports and the embedding indexer, and the
disjunctive keyword filter consumed by the keyword search branch.
"""

import sqlite3
import uuid
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ..core import get_logger, DatabaseError, SearchBackendError
from .connection import get_connection, get_cursor

logger = get_logger(__name__)


TEXT_FIELDS = ("title", "author", "subject", "level", "type", "publisher", "description")

CATALOG_COLUMNS = ("id",) + TEXT_FIELDS + ("year", "vector_source")


@dataclass
class CatalogEntry:
    """
    One book record in the catalog.

    Text fields default to empty strings. The embedding is only loaded
    when explicitly requested; search reads never carry it.
    """
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    title: str = ""
    author: str = ""
    subject: str = ""
    level: str = ""
    type: str = ""
    publisher: str = ""
    description: str = ""
    year: Optional[int] = None
    vector_source: Optional[str] = None
    embedding: Optional[np.ndarray] = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "CatalogEntry":
        """Build an entry from a loosely typed dict, e.g. an import file row."""
        kwargs = {name: (data.get(name) or "") for name in TEXT_FIELDS}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        year = data.get("year")
        kwargs["year"] = int(year) if year not in (None, "") else None
        kwargs["vector_source"] = data.get("vector_source") or None
        return cls(**kwargs)

    def text_values(self) -> List[str]:
        """Return the free-text fields in catalog order."""
        return [getattr(self, name) or "" for name in TEXT_FIELDS]


def row_to_entry(row: sqlite3.Row) -> CatalogEntry:
    """Convert a books row (without the embedding column) to a CatalogEntry."""
    return CatalogEntry(
        id=row["id"],
        title=row["title"] or "",
        author=row["author"] or "",
        subject=row["subject"] or "",
        level=row["level"] or "",
        type=row["type"] or "",
        publisher=row["publisher"] or "",
        description=row["description"] or "",
        year=row["year"],
        vector_source=row["vector_source"]
    )


def _lower(value: Optional[str]) -> Optional[str]:
    """Unicode-aware lower() for SQL; SQLite's built-in only folds ASCII."""
    return value.lower() if value is not None else None


class CatalogRepository:
    """
    Repository for book CRUD and keyword filtering.

    Each method opens its own connection so calls are safe from worker
    threads.
    """

    def insert(self, entry: CatalogEntry) -> str:
        """
        Insert or replace a single book.

        Args:
            entry: Book to store. Its embedding, if set, is not written here.

        Returns:
            The book id.
        """
        self.insert_batch([entry])
        return entry.id

    def insert_batch(self, entries: Sequence[CatalogEntry]) -> int:
        """
        Insert or replace multiple books in a single transaction.

        Args:
            entries: Books to store.

        Returns:
            Number of rows written.
        """
        if not entries:
            return 0

        rows = [
            (e.id, *e.text_values(), e.year, e.vector_source)
            for e in entries
        ]
        placeholders = ", ".join("?" * len(CATALOG_COLUMNS))

        try:
            with get_cursor() as cur:
                cur.executemany(f"""
                    INSERT OR REPLACE INTO books
                    ({", ".join(CATALOG_COLUMNS)})
                    VALUES ({placeholders})
                """, rows)
                written = cur.rowcount
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to insert books: {e}")

        logger.debug(f"Stored {written} books")
        return written

    def get_by_id(self, book_id: str) -> Optional[CatalogEntry]:
        """
        Fetch a book by its id.

        Args:
            book_id: Book identifier.

        Returns:
            CatalogEntry or None.
        """
        entries = self.get_by_ids([book_id])
        return entries[0] if entries else None

    def get_by_ids(self, book_ids: Iterable[str]) -> List[CatalogEntry]:
        """Fetch the books with the given ids, in table order."""
        ids = list(book_ids)
        if not ids:
            return []

        placeholders = ",".join("?" * len(ids))
        with get_connection() as conn:
            rows = conn.execute(
                f"SELECT {', '.join(CATALOG_COLUMNS)} FROM books WHERE id IN ({placeholders}) ORDER BY rowid",
                ids
            ).fetchall()

        return [row_to_entry(row) for row in rows]

    def get_missing_embeddings(self) -> List[CatalogEntry]:
        """Fetch every book that has no embedding yet."""
        with get_connection() as conn:
            rows = conn.execute(
                f"SELECT {', '.join(CATALOG_COLUMNS)} FROM books WHERE embedding IS NULL ORDER BY rowid"
            ).fetchall()

        return [row_to_entry(row) for row in rows]

    def update_vector_source(self, book_id: str, vector_source: str) -> None:
        """Store the text an embedding will be computed from."""
        with get_cursor() as cur:
            cur.execute(
                "UPDATE books SET vector_source = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
                (vector_source, book_id)
            )

    def record_embedding_error(self, book_id: str, error: str) -> None:
        """Log a failed embedding attempt for a book."""
        with get_cursor() as cur:
            cur.execute(
                "INSERT INTO embedding_errors (book_id, error) VALUES (?, ?)",
                (book_id, error)
            )

    def get_embedding_errors(self, book_id: str = None) -> List[dict]:
        """
        List recorded embedding errors, newest last.

        Args:
            book_id: Restrict to one book if given.
        """
        sql = "SELECT book_id, error, created_at FROM embedding_errors"
        params: tuple = ()
        if book_id is not None:
            sql += " WHERE book_id = ?"
            params = (book_id,)
        sql += " ORDER BY id"

        with get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()

        return [dict(row) for row in rows]

    def count(self) -> int:
        """Get total number of books."""
        with get_connection() as conn:
            row = conn.execute("SELECT COUNT(*) as count FROM books").fetchone()
            return row["count"]

    def filter_keywords(self, tokens: Sequence[str], limit: int) -> List[CatalogEntry]:
        """
        Find books where any token occurs in any text field.

        Matching is a case-insensitive substring test against all text
        fields at once. Repeated tokens are matched once. No ordering is
        guaranteed; ranking happens later.

        Args:
            tokens: Lower-cased search tokens.
            limit: Maximum number of books to return.

        Returns:
            Matching books.

        Raises:
            SearchBackendError: If the query fails.
        """
        if not tokens:
            return []

        needles = list(dict.fromkeys(token.lower() for token in tokens))

        # Tokens never contain whitespace, so joining fields with a space
        # cannot create matches across field boundaries
        haystack = " || ' ' || ".join(f"coalesce({name}, '')" for name in TEXT_FIELDS)

        def contains_any(text):
            lowered = _lower(text) or ""
            return any(needle in lowered for needle in needles)

        sql = f"""
            SELECT {', '.join(CATALOG_COLUMNS)}
            FROM books
            WHERE contains_any({haystack})
            LIMIT ?
        """

        try:
            with get_connection() as conn:
                conn.create_function("contains_any", 1, contains_any, deterministic=True)
                rows = conn.execute(sql, (limit,)).fetchall()
        except (sqlite3.Error, DatabaseError) as e:
            logger.error(f"Keyword filter failed: {e}")
            raise SearchBackendError(
                f"Keyword search failed: {e}",
                query=" ".join(tokens)
            )

        return [row_to_entry(row) for row in rows]
