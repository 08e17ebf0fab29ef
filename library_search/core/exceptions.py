"""
Custom exception hierarchy for the library search service.

Provides specific exception types for different failure modes:
configuration errors, database issues, request validation, authentication,
the embedding provider and the search backend.
"""


class LibrarySearchError(Exception):
    """Base exception for all library search errors."""

    def __init__(self, message: str, details: dict = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(LibrarySearchError):
    """Raised when configuration is invalid or missing."""
    pass


class DatabaseError(LibrarySearchError):
    """Raised when SQLite operations fail."""
    pass


class ValidationError(LibrarySearchError):
    """Raised when a request body or query parameter is missing or invalid."""
    pass


class AuthError(LibrarySearchError):
    """Raised when the bearer token is missing or rejected."""
    pass


class EmbeddingProviderError(LibrarySearchError):
    """Raised when the embedding provider fails or returns no vector."""

    def __init__(self, message: str, status_code: int = None, details: dict = None):
        """
        Initialize embedding provider error.

        Args:
            message: Error description.
            status_code: HTTP status returned by the provider, if any.
            details: Additional context.
        """
        super().__init__(message, details)
        self.status_code = status_code


class SearchBackendError(LibrarySearchError):
    """Raised when a catalog query (vector or keyword) fails."""

    def __init__(self, message: str, query: str = None, details: dict = None):
        """
        Initialize search backend error.

        Args:
            message: Error description.
            query: The search query being executed.
            details: Additional context.
        """
        super().__init__(message, details)
        self.query = query
