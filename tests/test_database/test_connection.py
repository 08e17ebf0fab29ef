"""
Tests for database connection management.

Tests connection creation, context managers, SQLite pragmas and the
config-driven singleton.
"""

import sqlite3
from pathlib import Path

from library_search.database.connection import DatabaseManager, get_connection, get_db_manager


class TestDatabaseManager:
    """Tests for DatabaseManager class."""

    def test_manager_creation(self, temp_database: Path):
        """Test creating a database manager."""
        manager = DatabaseManager(temp_database)

        assert manager.db_path == temp_database

    def test_manager_creates_parent_directory(self, temp_dir: Path):
        """Test that manager creates parent directories."""
        db_path = temp_dir / "subdir" / "nested" / "test.db"

        _manager = DatabaseManager(db_path)  # noqa: F841

        assert db_path.parent.exists()

    def test_connection_context_manager(self, temp_database: Path):
        """Test connection context manager."""
        manager = DatabaseManager(temp_database)

        with manager.connection() as conn:
            assert conn is not None
            assert isinstance(conn, sqlite3.Connection)

            # Connection should be usable
            cursor = conn.execute("SELECT 1")
            result = cursor.fetchone()
            assert result[0] == 1

    def test_cursor_context_manager(self, temp_database: Path):
        """Test cursor context manager."""
        manager = DatabaseManager(temp_database)

        with manager.cursor() as cursor:
            assert cursor is not None
            cursor.execute("CREATE TABLE test (id INTEGER PRIMARY KEY)")
            cursor.execute("INSERT INTO test (id) VALUES (1)")

        # Verify data was committed
        with manager.connection() as conn:
            result = conn.execute("SELECT id FROM test").fetchone()
            assert result[0] == 1

    def test_cursor_rollback_on_error(self, temp_database: Path):
        """Test that errors cause rollback."""
        manager = DatabaseManager(temp_database)

        # First, create table
        with manager.cursor() as cursor:
            cursor.execute("CREATE TABLE test (id INTEGER PRIMARY KEY)")

        # Try to insert with error
        try:
            with manager.cursor() as cursor:
                cursor.execute("INSERT INTO test (id) VALUES (1)")
                cursor.execute("INSERT INTO test (id) VALUES (1)")  # Duplicate
        except sqlite3.IntegrityError:
            pass

        # Table should exist but be empty (rollback)
        with manager.connection() as conn:
            result = conn.execute("SELECT COUNT(*) FROM test").fetchone()
            assert result[0] == 0

    def test_row_factory_enabled(self, temp_database: Path):
        """Test that row factory is enabled for dict-like access."""
        manager = DatabaseManager(temp_database)

        with manager.connection() as conn:
            conn.execute("CREATE TABLE test (id INTEGER, name TEXT)")
            conn.execute("INSERT INTO test VALUES (1, 'Alice')")
            conn.commit()

            row = conn.execute("SELECT * FROM test").fetchone()

            # Should be accessible by column name
            assert row["id"] == 1
            assert row["name"] == "Alice"

    def test_wal_mode_enabled(self, temp_database: Path):
        """Test that WAL journal mode is enabled."""
        manager = DatabaseManager(temp_database)

        with manager.connection() as conn:
            result = conn.execute("PRAGMA journal_mode").fetchone()
            # WAL mode should be enabled
            assert result[0].lower() == "wal"

    def test_foreign_keys_enabled(self, temp_database: Path):
        """Test that foreign key enforcement is switched on."""
        manager = DatabaseManager(temp_database)

        with manager.connection() as conn:
            result = conn.execute("PRAGMA foreign_keys").fetchone()
            assert result[0] == 1

    def test_separate_connections_per_call(self, temp_database: Path):
        """Test that each context opens its own connection."""
        manager = DatabaseManager(temp_database)

        with manager.connection() as conn1:
            with manager.connection() as conn2:
                assert conn1 is not conn2


class TestDatabaseSingleton:
    """Tests for the module-level connection helpers."""

    def test_manager_uses_config_path(self, configured_db):
        """Test that the singleton opens the configured database."""
        from library_search.core import get_config

        assert get_db_manager().db_path == get_config().paths.database_path

    def test_get_connection_sees_schema(self, configured_db):
        """Test that get_connection reaches the initialized catalog."""
        with get_connection() as conn:
            tables = {
                row["name"]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }

        assert "books" in tables
