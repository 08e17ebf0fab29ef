"""
Database module for the SQLite book catalog.

Provides connection management, the schema, the catalog repository used
for imports and keyword filtering, and the vector repository used for
embedding storage and nearest-neighbor search.
"""

from .connection import get_connection, get_cursor, DatabaseManager
from .schema import init_schema, reset_schema, get_statistics, is_vec_extension_available, reset_vec_extension_cache
from .catalog_repository import CatalogEntry, CatalogRepository, TEXT_FIELDS
from .vector_repository import VectorRepository, VectorMatch

__all__ = [
    "get_connection",
    "get_cursor",
    "DatabaseManager",
    "init_schema",
    "reset_schema",
    "get_statistics",
    "is_vec_extension_available",
    "reset_vec_extension_cache",
    "CatalogEntry",
    "CatalogRepository",
    "TEXT_FIELDS",
    "VectorRepository",
    "VectorMatch"
]
