"""
FastAPI application for the book search service.

Exposes the hybrid search as POST /search-books and a health check.
Maps the exception hierarchy to HTTP status codes: missing or rejected
tokens give 401, bad bodies 400, and backend failures 500. An embedding
failure is not an error here; the engine already answered with fallback
books.
"""

import traceback
from datetime import datetime, timezone
from typing import Optional

import pydantic
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, PlainTextResponse

from .. import __version__
from ..core import get_config, get_logger, LibrarySearchError, ValidationError
from ..database import get_statistics, init_schema
from ..search import HybridEngine, HybridSearchResponse
from .auth import TokenValidator, extract_bearer_token, get_token_validator
from .cors import SEARCH_CORS_HEADERS, allowlist_headers
from .schemas import (
    BookResult,
    ErrorResponse,
    FallbackDebug,
    HealthResponse,
    SearchDebug,
    SearchRequest,
    SearchResponse,
)

logger = get_logger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _error(status_code: int, error: str, headers: dict, **fields) -> JSONResponse:
    body = ErrorResponse(error=error, **fields).model_dump(exclude_none=True)
    return JSONResponse(body, status_code=status_code, headers=headers)


def build_search_response(response: HybridSearchResponse) -> SearchResponse:
    """Convert an engine response to the wire model."""
    stats = response.stats
    books = [BookResult.model_validate(r.to_dict()) for r in response.results]

    if stats.fallback:
        debug = FallbackDebug(
            original_query=stats.original_query,
            enhanced_query=stats.enhanced_query,
            timestamp=_timestamp(),
            error=stats.error or ""
        )
    else:
        debug = SearchDebug(
            original_query=stats.original_query,
            enhanced_query=stats.enhanced_query,
            embedding_results=stats.embedding_results,
            keyword_results=stats.keyword_results,
            total_results=stats.total_results,
            similarity_threshold=stats.similarity_threshold,
            timestamp=_timestamp()
        )

    return SearchResponse(books=books, debug=debug)


def create_app(engine: Optional[HybridEngine] = None, validator: Optional[TokenValidator] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        engine: Search engine; built from config on first request if None.
        validator: Token validator; built from config on first request if None.

    Returns:
        Configured FastAPI instance.
    """
    app = FastAPI(title="Library Search", description="Hybrid school-library book search", version=__version__)
    app.state.engine = engine
    app.state.validator = validator

    def get_engine() -> HybridEngine:
        if app.state.engine is None:
            init_schema()
            app.state.engine = HybridEngine()
        return app.state.engine

    def get_validator() -> TokenValidator:
        if app.state.validator is None:
            app.state.validator = get_token_validator()
        return app.state.validator

    @app.options("/search-books")
    def search_books_preflight():
        """Answer the CORS preflight for the search endpoint."""
        return PlainTextResponse("ok", headers=SEARCH_CORS_HEADERS)

    @app.post("/search-books")
    async def search_books(request: Request):
        """Run a hybrid search for the authenticated user."""
        headers = SEARCH_CORS_HEADERS

        try:
            token_validator = get_validator()

            if token_validator.requires_token:
                auth_header = request.headers.get("authorization")
                if not auth_header:
                    logger.info("Search rejected: missing Authorization header")
                    return _error(401, "Authorization Header fehlt", headers)

                token = extract_bearer_token(auth_header)
                if token is None:
                    return _error(401, "Ungültiges Token", headers, details="Bearer token expected")

                user_id, auth_error = await run_in_threadpool(token_validator.validate, token)
                if auth_error:
                    return _error(401, "Ungültiges Token", headers, details=auth_error)

                logger.debug(f"Authenticated user {user_id}")

            try:
                payload = await request.json()
            except ValueError:
                return _error(400, "Ungültiger Request-Body", headers)

            try:
                search_request = SearchRequest.model_validate(payload)
            except pydantic.ValidationError:
                return _error(400, "Suchanfrage fehlt", headers)

            if not search_request.query.strip():
                return _error(400, "Suchanfrage fehlt", headers)

            result = await run_in_threadpool(get_engine().search, search_request.query)
            body = build_search_response(result).model_dump(by_alias=True)
            return JSONResponse(body, status_code=200, headers=headers)

        except ValidationError as e:
            return _error(400, e.message, headers)
        except LibrarySearchError as e:
            logger.error(f"Search failed: {e.message}")
            return _error(
                500,
                "Interner Serverfehler",
                headers,
                details=e.message,
                stack=traceback.format_exc(),
                timestamp=_timestamp()
            )
        except Exception as e:
            logger.exception(f"Unexpected error during search: {e}")
            return _error(
                500,
                "Interner Serverfehler",
                headers,
                details=str(e),
                stack=traceback.format_exc(),
                timestamp=_timestamp()
            )

    @app.options("/health")
    def health_preflight(request: Request):
        origins = get_config().api.allowed_origins
        return PlainTextResponse("ok", headers=allowlist_headers(request.headers.get("origin"), origins))

    @app.get("/health")
    def health(request: Request):
        """Report catalog counts and the embedding model in use."""
        headers = allowlist_headers(request.headers.get("origin"), get_config().api.allowed_origins)

        try:
            embedding = get_engine().semantic_engine.embedding_service.get_model_info()
            catalog = get_statistics()
        except LibrarySearchError as e:
            logger.error(f"Health check failed: {e.message}")
            return _error(500, "Interner Serverfehler", headers, details=e.message, timestamp=_timestamp())

        body = HealthResponse(status="ok", catalog=catalog, embedding=embedding)
        return JSONResponse(body.model_dump(), headers=headers)

    return app


app = create_app()
