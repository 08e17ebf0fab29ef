"""
Core module providing foundational components.

This module contains the configuration loader, centralized logging setup,
and custom exception hierarchy. It has no internal dependencies.
"""

from .config_loader import get_config, reload_config, Config, SearchConfig, EmbeddingConfig, AuthConfig, APIConfig
from .logger import get_logger
from .exceptions import (
    LibrarySearchError,
    ConfigurationError,
    DatabaseError,
    ValidationError,
    AuthError,
    EmbeddingProviderError,
    SearchBackendError
)

__all__ = [
    "get_config",
    "reload_config",
    "Config",
    "SearchConfig",
    "EmbeddingConfig",
    "AuthConfig",
    "APIConfig",
    "get_logger",
    "LibrarySearchError",
    "ConfigurationError",
    "DatabaseError",
    "ValidationError",
    "AuthError",
    "EmbeddingProviderError",
    "SearchBackendError"
]
