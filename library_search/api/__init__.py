"""
HTTP API module.

Provides the FastAPI application serving the book search, the request
and response models, and bearer-token validation.
"""

from .app import create_app, build_search_response
from .auth import TokenValidator, SupabaseTokenValidator, NoAuthValidator, get_token_validator
from .schemas import SearchRequest, SearchResponse, SearchDebug, FallbackDebug, ErrorResponse

__all__ = [
    "create_app",
    "build_search_response",
    "TokenValidator",
    "SupabaseTokenValidator",
    "NoAuthValidator",
    "get_token_validator",
    "SearchRequest",
    "SearchResponse",
    "SearchDebug",
    "FallbackDebug",
    "ErrorResponse"
]
