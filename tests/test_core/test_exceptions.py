"""
Tests for custom exception classes.

Tests exception creation, message formatting, and details handling.
"""

import pytest

from library_search.core.exceptions import (
    LibrarySearchError,
    ConfigurationError,
    DatabaseError,
    ValidationError,
    AuthError,
    EmbeddingProviderError,
    SearchBackendError
)


class TestLibrarySearchError:
    """Tests for base LibrarySearchError."""

    def test_basic_creation(self):
        """Test creating exception with just a message."""
        error = LibrarySearchError("Something went wrong")

        assert error.message == "Something went wrong"
        assert error.details == {}
        assert str(error) == "Something went wrong"

    def test_creation_with_details(self):
        """Test creating exception with details dict."""
        error = LibrarySearchError(
            "Lookup failed",
            {"book_id": "abc", "attempt": 2}
        )

        assert error.message == "Lookup failed"
        assert error.details["book_id"] == "abc"
        assert error.details["attempt"] == 2


class TestSubclasses:
    """Tests for the hierarchy."""

    @pytest.mark.parametrize("error_class", [
        ConfigurationError,
        DatabaseError,
        ValidationError,
        AuthError,
        EmbeddingProviderError,
        SearchBackendError
    ])
    def test_can_be_caught_as_base(self, error_class):
        """Test that every error can be caught as LibrarySearchError."""
        with pytest.raises(LibrarySearchError):
            raise error_class("Test error")


class TestEmbeddingProviderError:
    """Tests for EmbeddingProviderError."""

    def test_with_status_code(self):
        """Test EmbeddingProviderError keeps the provider status."""
        error = EmbeddingProviderError("Rate limited", status_code=429)

        assert error.status_code == 429
        assert error.message == "Rate limited"
        assert error.details == {}

    def test_without_status_code(self):
        """Test EmbeddingProviderError for connection failures."""
        error = EmbeddingProviderError("Unreachable", details={"host": "api"})

        assert error.status_code is None
        assert error.details["host"] == "api"


class TestSearchBackendError:
    """Tests for SearchBackendError."""

    def test_search_error_with_query(self):
        """Test SearchBackendError with query parameter."""
        error = SearchBackendError(
            "Keyword search failed",
            query="mathematik klett"
        )

        assert error.query == "mathematik klett"
        assert error.message == "Keyword search failed"

    def test_search_error_with_details(self):
        """Test SearchBackendError with query and details."""
        error = SearchBackendError(
            "Vector search failed",
            query="atlas",
            details={"threshold": 0.4}
        )

        assert error.query == "atlas"
        assert error.details["threshold"] == 0.4
