"""
Query enhancement before embedding.

Short or publisher-oriented queries embed poorly on their own, so they
are wrapped in a phrase that gives the embedding model book context.
Only the embedded text changes; keyword search keeps the original query.
"""

import random
from typing import Callable, Sequence

from ..core import get_logger
from .keyword_table import DEFAULT_TABLES, KeywordTables
from .models import EnhancedQuery

logger = get_logger(__name__)


PUBLISHER_SEARCH_TEMPLATE = "Bücher vom Verlag {query}"
PUBLISHER_NAME_SUFFIX = "{query} Verlag Schulbücher"

BOOK_CONTEXT_TEMPLATES = (
    "Buch über {query}",
    "Literatur zum Thema {query}",
    "Schulbuch zu {query}",
)

SHORT_QUERY_MAX_TOKENS = 2


class QueryEnhancer:
    """
    Rewrites queries into the text sent to the embedding provider.

    Rules, first match wins:
    1. the query contains a publisher keyword -> publisher search phrase;
    2. the query names a known publisher -> publisher phrase appended;
    3. the query has at most two tokens -> a book-context template;
    4. otherwise the query is passed through.
    """

    def __init__(
        self,
        tables: KeywordTables = DEFAULT_TABLES,
        chooser: Callable[[Sequence[str]], str] = random.choice,
        templates: Sequence[str] = BOOK_CONTEXT_TEMPLATES,
        short_query_max_tokens: int = SHORT_QUERY_MAX_TOKENS
    ):
        """
        Initialize the enhancer.

        Args:
            tables: Publisher names and keywords to recognize.
            chooser: Picks one template for short queries. Any template is
                acceptable; pass a deterministic function in tests.
            templates: Book-context templates with a {query} placeholder.
            short_query_max_tokens: Token count up to which a query is short.
        """
        self.tables = tables
        self.chooser = chooser
        self.templates = tuple(templates)
        self.short_query_max_tokens = short_query_max_tokens

    def enhance(self, query: str) -> EnhancedQuery:
        """
        Build the embedding text for a query.

        Args:
            query: Trimmed, non-empty user query.

        Returns:
            EnhancedQuery with the original and rewritten text.
        """
        lowered = query.lower()

        keyword = self.tables.find_publisher_keyword(lowered)
        if keyword:
            enhanced = PUBLISHER_SEARCH_TEMPLATE.format(query=query)
            return self._log(EnhancedQuery(query, enhanced, f"publisher_keyword:{keyword}"))

        name = self.tables.find_publisher_name(lowered)
        if name:
            enhanced = PUBLISHER_NAME_SUFFIX.format(query=query)
            return self._log(EnhancedQuery(query, enhanced, f"publisher_name:{name}"))

        if len(query.split()) <= self.short_query_max_tokens:
            template = self.chooser(self.templates)
            return self._log(EnhancedQuery(query, template.format(query=query), "short_query"))

        return EnhancedQuery(query, query)

    @staticmethod
    def _log(result: EnhancedQuery) -> EnhancedQuery:
        logger.debug(f"Enhanced query '{result.original}' -> '{result.enhanced}' ({result.reason})")
        return result
