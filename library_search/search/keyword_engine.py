"""
Keyword search over catalog text fields.

Finds books where any significant token of the original query appears in
any text field. Ranking is left to the ResultRanker.
"""

import time
from typing import List, Tuple

from ..core import get_config, get_logger
from ..database.catalog_repository import CatalogEntry, CatalogRepository
from .query_parser import QueryParser

logger = get_logger(__name__)


class KeywordEngine:
    """Disjunctive substring search backed by the catalog repository."""

    def __init__(
        self,
        parser: QueryParser = None,
        catalog_repo: CatalogRepository = None,
        limit: int = None
    ):
        self.parser = parser or QueryParser()
        self.catalog_repo = catalog_repo or CatalogRepository()
        self.limit = limit or get_config().search.keyword_limit

    def search(self, query: str) -> Tuple[List[CatalogEntry], float]:
        """
        Run the keyword query for the user's original query.

        Args:
            query: Raw query; never the enhanced embedding text.

        Returns:
            Tuple of (matching books, execution time in ms). When no token
            survives filtering the list is empty and the catalog is not
            queried.

        Raises:
            SearchBackendError: If the catalog query fails.
        """
        start_time = time.time()

        tokens = self.parser.tokenize(query)
        if not tokens:
            logger.debug(f"No significant tokens in '{query}', skipping keyword search")
            return [], 0.0

        entries = self.catalog_repo.filter_keywords(tokens, self.limit)
        elapsed = round((time.time() - start_time) * 1000, 2)

        logger.debug(f"Keyword search {tokens}: {len(entries)} books in {elapsed:.1f}ms")
        return entries, elapsed
