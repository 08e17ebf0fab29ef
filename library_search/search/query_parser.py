"""
Query tokenization for keyword search and ranking.

Splits the user's original query into significant lower-cased tokens and
assigns each one a ranking weight from the keyword tables.
"""

from typing import List

from ..core import get_logger
from .keyword_table import DEFAULT_TABLES, KeywordTables
from .models import WeightedKeyword

logger = get_logger(__name__)


class QueryParser:
    """
    Extracts keyword-search tokens from raw queries.

    Always works on the query as the user typed it, never on the
    enhanced embedding text.
    """

    def __init__(self, tables: KeywordTables = DEFAULT_TABLES):
        """
        Initialize the parser.

        Args:
            tables: Stop words, minimum length and term weights to apply.
        """
        self.tables = tables

    @staticmethod
    def count_tokens(query: str) -> int:
        """Count whitespace-separated tokens in the raw query."""
        return len(query.split()) if query else 0

    def tokenize(self, query: str) -> List[str]:
        """
        Return significant tokens of a query.

        Tokens are split on whitespace and lower-cased; tokens of length
        min_token_length or less and stop words are dropped. Order and
        repeated tokens are kept.

        Args:
            query: Raw user input.

        Returns:
            List of significant tokens, possibly empty.
        """
        if not query or not query.strip():
            return []

        tokens = []
        for raw in query.lower().split():
            if len(raw) <= self.tables.min_token_length:
                continue
            if raw in self.tables.stop_words:
                continue
            tokens.append(raw)

        return tokens

    def extract_weighted_keywords(self, query: str) -> List[WeightedKeyword]:
        """
        Tokenize a query and weight each token.

        Args:
            query: Raw user input.

        Returns:
            WeightedKeyword per significant token.
        """
        keywords = [
            WeightedKeyword(word=token, weight=self.tables.weight_for(token))
            for token in self.tokenize(query)
        ]

        if keywords:
            logger.debug(
                "Weighted keywords: " + ", ".join(f"{k.word}={k.weight}" for k in keywords)
            )

        return keywords
