"""
Request and response models for the search API.

Field names on the wire are camelCase, the names existing clients read;
the Python attributes are snake_case and mapped through aliases.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    """Request body for POST /search-books."""

    query: str


class BookResult(BaseModel):
    """One ranked book."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    author: str = ""
    subject: str = ""
    level: str = ""
    type: str = ""
    publisher: str = ""
    description: str = ""
    year: Optional[int] = None
    original_similarity: Optional[float] = Field(default=None, alias="originalSimilarity")
    keyword_score: float = Field(default=0.0, alias="keywordScore")
    similarity: float


class SearchDebug(BaseModel):
    """Diagnostics attached to a successful search."""

    model_config = ConfigDict(populate_by_name=True)

    original_query: str = Field(alias="originalQuery")
    enhanced_query: str = Field(alias="enhancedQuery")
    embedding_results: int = Field(alias="embeddingResults")
    keyword_results: int = Field(alias="keywordResults")
    total_results: int = Field(alias="totalResults")
    similarity_threshold: float = Field(alias="similarityThreshold")
    timestamp: str


class FallbackDebug(BaseModel):
    """Diagnostics attached when placeholder books were returned."""

    model_config = ConfigDict(populate_by_name=True)

    original_query: str = Field(alias="originalQuery")
    enhanced_query: str = Field(alias="enhancedQuery")
    timestamp: str
    error: str
    fallback: bool = True


class SearchResponse(BaseModel):
    """Response body for POST /search-books."""

    books: List[BookResult]
    debug: Union[SearchDebug, FallbackDebug]


class ErrorResponse(BaseModel):
    """Error body for 4xx and 5xx responses."""

    error: str
    details: Optional[Any] = None
    stack: Optional[str] = None
    timestamp: Optional[str] = None


class HealthResponse(BaseModel):
    """Response body for GET /health."""

    status: str
    catalog: dict
    embedding: dict
