"""
Pytest fixtures and configuration for the test suite.

Provides temporary directories, a temporary config and catalog database,
sample books and mocked embedding clients so tests are isolated and never
reach a real provider.
"""

import json
import pytest
import tempfile
import shutil
from pathlib import Path
from typing import Generator, List
from unittest.mock import MagicMock

import numpy as np

import sys
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))


TEST_DIMENSIONS = 8


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """
    Create a temporary directory for test files.

    Yields:
        Path to temporary directory, cleaned up after test.
    """
    tmp = tempfile.mkdtemp(prefix="library_search_test_")
    yield Path(tmp)
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_config(temp_dir: Path) -> Generator[Path, None, None]:
    """
    Create a temporary config.json for testing.

    Embeddings use a small dimensionality so test vectors stay readable.

    Args:
        temp_dir: Temporary directory fixture.

    Yields:
        Path to temporary config file.
    """
    config_dir = temp_dir / "config"
    config_dir.mkdir()

    output_dir = temp_dir / "output"
    output_dir.mkdir()

    logs_dir = output_dir / "logs"
    logs_dir.mkdir()

    config_data = {
        "paths": {
            "database_path": str(output_dir / "test.db"),
            "logs_directory": str(logs_dir)
        },
        "logging": {
            "level": "DEBUG",
            "format": "%(levelname)s - %(message)s",
            "max_file_size_mb": 1,
            "backup_count": 1
        },
        "embedding": {
            "endpoint": "http://localhost:9999/v1",
            "api_key": "test-key",
            "model": "text-embedding-3-small",
            "dimensions": TEST_DIMENSIONS,
            "batch_size": 3,
            "timeout_seconds": 1.0,
            "max_retries": 0
        },
        "search": {
            "short_query_threshold": 0.4,
            "long_query_threshold": 0.5,
            "short_query_max_tokens": 2,
            "vector_limit": 10,
            "keyword_limit": 20,
            "keyword_only_baseline": 0.5,
            "keyword_score_cap": 0.8,
            "branch_timeout_seconds": 5.0
        },
        "auth": {
            "enabled": True,
            "url": "http://auth.test",
            "anon_key": "anon-test-key",
            "timeout_seconds": 1.0
        },
        "api": {
            "host": "127.0.0.1",
            "port": 8000,
            "allowed_origins": ["http://localhost:5173"]
        }
    }

    config_path = config_dir / "config.json"
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config_data, f)

    yield config_path


@pytest.fixture
def temp_database(temp_dir: Path) -> Path:
    """
    Create path for a temporary database.

    Args:
        temp_dir: Temporary directory fixture.

    Returns:
        Path where test database should be created.
    """
    return temp_dir / "test.db"


@pytest.fixture
def reset_config_singleton():
    """
    Reset the config singleton between tests.

    This ensures each test gets a fresh config instance.
    """
    from library_search.core import config_loader
    config_loader._config_instance = None
    yield
    config_loader._config_instance = None


@pytest.fixture
def reset_logger_singleton():
    """
    Reset the logger initialization flag between tests.
    """
    from library_search.core import logger
    logger._logger_initialized = False
    yield
    logger._logger_initialized = False


@pytest.fixture
def reset_db_singleton():
    """
    Reset the database manager singleton between tests.
    """
    from library_search.database import connection
    connection._db_manager = None
    yield
    connection._db_manager = None


@pytest.fixture
def reset_embedding_singleton():
    """
    Reset the embedding service singleton between tests.
    """
    from library_search.search import embedding_service
    embedding_service._embedding_service = None
    yield
    embedding_service._embedding_service = None


@pytest.fixture
def reset_vec_extension_cache():
    """
    Reset the sqlite-vec availability cache between tests.
    """
    from library_search.database import schema
    schema.reset_vec_extension_cache()
    yield
    schema.reset_vec_extension_cache()


@pytest.fixture
def configured_db(temp_config, reset_config_singleton, reset_db_singleton):
    """
    Set up a fully configured database using temp config.

    This fixture initializes config with temp paths, resets both config
    and db singletons, and creates the catalog schema.
    """
    from library_search.core.config_loader import get_config
    from library_search.database.schema import init_schema
    get_config(temp_config)
    init_schema()
    yield
    # Cleanup happens via reset fixtures


@pytest.fixture
def vec_available(configured_db, reset_vec_extension_cache):
    """Skip the test when the sqlite-vec extension cannot be loaded."""
    from library_search.database.schema import is_vec_extension_available
    if not is_vec_extension_available():
        pytest.skip("sqlite-vec extension not available")


@pytest.fixture
def sample_books():
    """
    A small catalog covering publishers, subjects and book types.

    Returns:
        List of CatalogEntry objects with fixed ids.
    """
    from library_search.database.catalog_repository import CatalogEntry

    return [
        CatalogEntry(
            id="book-math",
            title="Mathematik 5",
            author="Anna Berger",
            subject="Mathematik",
            level="Sekundarstufe I",
            type="Schulbuch",
            publisher="Cornelsen",
            description="Lehrwerk für die fünfte Klasse",
            year=2019
        ),
        CatalogEntry(
            id="book-physics",
            title="Physik entdecken",
            author="Jonas Keller",
            subject="Physik",
            level="Sekundarstufe I",
            type="Schulbuch",
            publisher="Klett",
            description="Experimente und Grundlagen der Mechanik",
            year=2021
        ),
        CatalogEntry(
            id="book-atlas",
            title="Diercke Weltatlas",
            author="",
            subject="Geographie",
            level="Sekundarstufe II",
            type="Atlas",
            publisher="Westermann",
            description="Karten zu Klima und Bevölkerung",
            year=2015
        ),
        CatalogEntry(
            id="book-novel",
            title="Der Vorleser",
            author="Bernhard Schlink",
            subject="Deutsch",
            level="Sekundarstufe II",
            type="Lektüre",
            publisher="Diogenes",
            description="Roman über Schuld und Verantwortung"
        ),
    ]


@pytest.fixture
def populated_db(configured_db, sample_books):
    """Catalog database holding sample_books, none of them embedded."""
    from library_search.database.catalog_repository import CatalogRepository
    CatalogRepository().insert_batch(sample_books)
    return sample_books


def unit_vector(*components: float) -> np.ndarray:
    """Build a normalized TEST_DIMENSIONS-long vector from leading components."""
    vec = np.zeros(TEST_DIMENSIONS, dtype=np.float32)
    vec[:len(components)] = components
    return vec / np.linalg.norm(vec)


def make_embedding_response(vectors: List[List[float]]) -> MagicMock:
    """Build an object shaped like the OpenAI embeddings response."""
    response = MagicMock()
    response.data = [MagicMock(embedding=list(v)) for v in vectors]
    return response


@pytest.fixture
def mock_openai_client():
    """
    A mock OpenAI client returning one constant vector per input text.

    Tests can replace embeddings.create.side_effect for custom behavior.
    """
    client = MagicMock()

    def create(model, input):
        return make_embedding_response([[0.1] * TEST_DIMENSIONS for _ in input])

    client.embeddings.create.side_effect = create
    return client


@pytest.fixture
def make_vector():
    """Factory fixture for unit_vector."""
    return unit_vector


@pytest.fixture
def embedding_response():
    """Factory fixture for make_embedding_response."""
    return make_embedding_response
