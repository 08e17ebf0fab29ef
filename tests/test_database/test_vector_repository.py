"""
Tests for the vector repository module.

Tests embedding storage, retrieval, and nearest-neighbor search.
Uses temporary database to ensure isolation.

SAFETY NOTE: All tests use the `configured_db` fixture which:
- Creates a temporary directory via tempfile.mkdtemp()
- Configures the database singleton to use a temp path
- Cleans up all temp files after the test
- Never touches real data directories
"""

from unittest.mock import patch

import pytest
import numpy as np

from library_search.core.exceptions import DatabaseError, SearchBackendError
from library_search.database.vector_repository import VectorRepository, VectorMatch


@pytest.fixture
def vector_repo(populated_db, reset_vec_extension_cache):
    """
    Create a VectorRepository over the sample catalog.

    Args:
        populated_db: Sample catalog fixture.
        reset_vec_extension_cache: Vec extension cache reset fixture.

    Returns:
        VectorRepository instance.
    """
    return VectorRepository()


@pytest.fixture
def embedded_repo(vector_repo, vec_available, make_vector):
    """
    Repository where three of the four sample books are embedded.

    Against the query (1, 0): math ~1.0, physics ~0.8, atlas ~0.0; the
    novel has no embedding.
    """
    vector_repo.store_embeddings_batch([
        ("book-math", make_vector(1.0, 0.0)),
        ("book-physics", make_vector(0.8, 0.6)),
        ("book-atlas", make_vector(0.0, 1.0)),
    ])
    return vector_repo


class TestVectorMatch:
    """Tests for VectorMatch dataclass."""

    def test_match_creation(self, sample_books):
        """Test creating a VectorMatch instance."""
        match = VectorMatch(entry=sample_books[0], similarity=0.93)

        assert match.entry.id == "book-math"
        assert match.similarity == 0.93


class TestVectorRepositoryStorage:
    """Tests for storing and loading embeddings."""

    def test_repository_uses_config_dimensions(self, vector_repo):
        """Test that dimensions default to the configured value."""
        assert vector_repo.dimensions == 8

    def test_count_embedded_empty(self, vector_repo):
        """Test count on a catalog without embeddings."""
        assert vector_repo.count_embedded() == 0

    def test_store_single_embedding(self, vector_repo, make_vector):
        """Test storing one embedding."""
        vector_repo.store_embedding("book-math", make_vector(1.0))

        assert vector_repo.count_embedded() == 1

    def test_store_embeddings_batch(self, vector_repo, make_vector):
        """Test storing several embeddings at once."""
        updated = vector_repo.store_embeddings_batch([
            ("book-math", make_vector(1.0)),
            ("book-atlas", make_vector(0.0, 1.0)),
        ])

        assert updated == 2
        assert vector_repo.count_embedded() == 2

    def test_store_empty_batch(self, vector_repo):
        """Test storing an empty batch."""
        assert vector_repo.store_embeddings_batch([]) == 0

    def test_get_embedding_roundtrip(self, vector_repo, make_vector):
        """Test that a stored vector reads back unchanged."""
        vector = make_vector(0.3, 0.4, 0.5)
        vector_repo.store_embedding("book-physics", vector)

        loaded = vector_repo.get_embedding("book-physics")

        np.testing.assert_array_almost_equal(loaded, vector)

    def test_get_embedding_missing(self, vector_repo):
        """Test that an unembedded book returns None."""
        assert vector_repo.get_embedding("book-novel") is None

    def test_wrong_dimensions_rejected(self, vector_repo):
        """Test that a vector of the wrong length is refused."""
        with pytest.raises(DatabaseError) as exc_info:
            vector_repo.store_embedding("book-math", np.ones(3, dtype=np.float32))

        assert exc_info.value.details["book_id"] == "book-math"
        assert vector_repo.count_embedded() == 0

    def test_blob_size(self, vector_repo):
        """Test that blobs hold four bytes per component."""
        blob = VectorRepository._array_to_blob(np.ones(8))

        assert len(blob) == 32


class TestNearestNeighbors:
    """Tests for similarity search.

    If sqlite-vec is not available, search tests are skipped.
    """

    def test_returns_matches_above_threshold(self, embedded_repo, make_vector):
        """Test that only books above the threshold are returned."""
        matches = embedded_repo.nearest_neighbors(make_vector(1.0, 0.0), threshold=0.5, limit=10)

        assert [m.entry.id for m in matches] == ["book-math", "book-physics"]

    def test_ordered_by_similarity(self, embedded_repo, make_vector):
        """Test descending similarity order."""
        matches = embedded_repo.nearest_neighbors(make_vector(1.0, 0.0), threshold=-1.0, limit=10)

        similarities = [m.similarity for m in matches]
        assert similarities == sorted(similarities, reverse=True)
        assert matches[0].similarity == pytest.approx(1.0, abs=1e-5)
        assert matches[1].similarity == pytest.approx(0.8, abs=1e-5)

    def test_books_without_embedding_never_returned(self, embedded_repo, make_vector):
        """Test that a NULL embedding is skipped even at the lowest threshold."""
        matches = embedded_repo.nearest_neighbors(make_vector(1.0, 0.0), threshold=-1.0, limit=10)

        assert "book-novel" not in {m.entry.id for m in matches}
        assert len(matches) == 3

    def test_respects_limit(self, embedded_repo, make_vector):
        """Test that limit caps the result count."""
        matches = embedded_repo.nearest_neighbors(make_vector(1.0, 0.0), threshold=-1.0, limit=1)

        assert [m.entry.id for m in matches] == ["book-math"]

    def test_higher_threshold_returns_subset(self, embedded_repo, make_vector):
        """Test that raising the threshold only removes books."""
        query = make_vector(1.0, 0.0)
        low = {m.entry.id for m in embedded_repo.nearest_neighbors(query, threshold=0.4, limit=10)}
        high = {m.entry.id for m in embedded_repo.nearest_neighbors(query, threshold=0.9, limit=10)}

        assert high <= low
        assert high == {"book-math"}

    def test_matches_carry_catalog_fields(self, embedded_repo, make_vector):
        """Test that matches hold the full catalog entry."""
        matches = embedded_repo.nearest_neighbors(make_vector(1.0, 0.0), threshold=0.5, limit=1)

        entry = matches[0].entry
        assert entry.title == "Mathematik 5"
        assert entry.publisher == "Cornelsen"
        assert entry.year == 2019

    def test_extension_unavailable_raises(self, vector_repo, make_vector):
        """Test that missing sqlite-vec is a backend error."""
        with patch("library_search.database.vector_repository._load_vec_extension", return_value=False):
            with pytest.raises(SearchBackendError):
                vector_repo.nearest_neighbors(make_vector(1.0), threshold=0.5, limit=10)
