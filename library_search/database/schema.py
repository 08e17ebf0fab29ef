"""
Database schema definitions for the book catalog.

Defines the books table (with the embedding stored as a float32 BLOB),
the embedding_errors log, and loading of the sqlite-vec extension that
provides server-side cosine distance for vector search.
"""

import sqlite3

from ..core import get_logger
from .connection import get_cursor, get_connection

logger = get_logger(__name__)

_vec_extension_available = None


def _load_vec_extension(conn: sqlite3.Connection) -> bool:
    """
    Load sqlite-vec extension into the connection.

    Args:
        conn: SQLite connection to load extension into.

    Returns:
        True if extension loaded successfully, False otherwise.
    """
    global _vec_extension_available

    if _vec_extension_available is False:
        return False

    try:
        import sqlite_vec
    except ImportError:
        logger.warning("sqlite-vec package not installed. Vector search disabled.")
        _vec_extension_available = False
        return False

    try:
        conn.enable_load_extension(True)
        sqlite_vec.load(conn)
        conn.enable_load_extension(False)
    except (AttributeError, sqlite3.Error) as e:
        # Connection-specific error - don't disable globally
        logger.warning(f"Failed to load sqlite-vec extension on connection: {e}")
        return False

    _vec_extension_available = True
    return True


def is_vec_extension_available() -> bool:
    """Check if sqlite-vec extension can be loaded."""
    global _vec_extension_available

    if _vec_extension_available is not None:
        return _vec_extension_available

    with get_connection() as conn:
        _vec_extension_available = _load_vec_extension(conn)
    return _vec_extension_available


def reset_vec_extension_cache() -> None:
    """Reset the vec extension availability cache.

    Call this when switching database connections to ensure
    fresh extension loading attempt.
    """
    global _vec_extension_available
    _vec_extension_available = None


BOOKS_TABLE = """
CREATE TABLE IF NOT EXISTS books (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL DEFAULT '',
    author TEXT NOT NULL DEFAULT '',
    subject TEXT NOT NULL DEFAULT '',
    level TEXT NOT NULL DEFAULT '',
    type TEXT NOT NULL DEFAULT '',
    publisher TEXT NOT NULL DEFAULT '',
    description TEXT NOT NULL DEFAULT '',
    year INTEGER,
    vector_source TEXT,
    embedding BLOB,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
)
"""

BOOKS_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_books_publisher ON books(publisher)",
    "CREATE INDEX IF NOT EXISTS idx_books_subject ON books(subject)",
    "CREATE INDEX IF NOT EXISTS idx_books_missing_embedding ON books(id) WHERE embedding IS NULL"
]

EMBEDDING_ERRORS_TABLE = """
CREATE TABLE IF NOT EXISTS embedding_errors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    book_id TEXT NOT NULL,
    error TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (book_id) REFERENCES books(id) ON DELETE CASCADE
)
"""


def init_schema() -> None:
    """Create the catalog tables and indexes if they do not exist."""
    logger.info("Initializing catalog schema")

    with get_cursor() as cur:
        cur.execute(BOOKS_TABLE)

        for index_sql in BOOKS_INDEXES:
            cur.execute(index_sql)

        cur.execute(EMBEDDING_ERRORS_TABLE)

    logger.info("Schema initialization complete")


def reset_schema() -> None:
    """
    Drop and recreate all tables.

    Warning: This deletes the whole catalog.
    """
    logger.warning("Resetting catalog schema - all books will be deleted")

    with get_cursor() as cur:
        cur.execute("DROP TABLE IF EXISTS embedding_errors")
        cur.execute("DROP TABLE IF EXISTS books")

    init_schema()


def get_statistics() -> dict:
    """
    Get catalog statistics for the health endpoint.

    Returns:
        Dictionary with book, embedding and error counts.
    """
    with get_connection() as conn:
        stats = {}

        row = conn.execute("SELECT COUNT(*) as count FROM books").fetchone()
        stats["total_books"] = row["count"]

        row = conn.execute(
            "SELECT COUNT(*) as count FROM books WHERE embedding IS NOT NULL"
        ).fetchone()
        stats["embedded_books"] = row["count"]
        stats["missing_embeddings"] = stats["total_books"] - stats["embedded_books"]

        row = conn.execute("SELECT COUNT(*) as count FROM embedding_errors").fetchone()
        stats["embedding_errors"] = row["count"]

    return stats
