"""
Tests for the query parser.

Tests tokenization, stop-word and length filtering, and keyword weights.
"""

from library_search.search.keyword_table import DEFAULT_TABLES
from library_search.search.models import WeightedKeyword
from library_search.search.query_parser import QueryParser


class TestCountTokens:
    """Tests for QueryParser.count_tokens."""

    def test_counts_whitespace_tokens(self):
        """Test counting raw tokens including short ones."""
        assert QueryParser.count_tokens("Mathe 5 ab") == 3

    def test_empty(self):
        """Test that an empty query has no tokens."""
        assert QueryParser.count_tokens("") == 0
        assert QueryParser.count_tokens("   ") == 0


class TestTokenize:
    """Tests for QueryParser.tokenize."""

    def test_lowercases(self):
        """Test that tokens are lower-cased."""
        parser = QueryParser()

        assert parser.tokenize("Physik Klett") == ["physik", "klett"]

    def test_drops_short_tokens(self):
        """Test that tokens of two characters or fewer are dropped."""
        parser = QueryParser()

        assert parser.tokenize("ab 5 physik") == ["physik"]

    def test_only_short_tokens(self):
        """Test that a query of short tokens yields nothing."""
        assert QueryParser().tokenize("ab") == []

    def test_drops_stop_words(self):
        """Test that German and English stop words are dropped."""
        parser = QueryParser()

        assert parser.tokenize("Bücher über die Geschichte and the Romans") == [
            "bücher", "geschichte", "romans"
        ]

    def test_collapses_whitespace(self):
        """Test that extra whitespace does not produce empty tokens."""
        assert QueryParser().tokenize("  atlas \t  europa ") == ["atlas", "europa"]

    def test_keeps_repeated_tokens(self):
        """Test that duplicates and order are preserved."""
        assert QueryParser().tokenize("atlas europa atlas") == ["atlas", "europa", "atlas"]

    def test_empty_query(self):
        """Test that empty input returns no tokens."""
        parser = QueryParser()

        assert parser.tokenize("") == []
        assert parser.tokenize("   ") == []

    def test_custom_min_length(self):
        """Test a table with a different minimum length."""
        parser = QueryParser(DEFAULT_TABLES.with_overrides(min_token_length=4))

        assert parser.tokenize("bio chemie") == ["chemie"]


class TestExtractWeightedKeywords:
    """Tests for QueryParser.extract_weighted_keywords."""

    def test_weights(self):
        """Test default, publisher and category weights."""
        keywords = QueryParser().extract_weighted_keywords("Chemie Schulbuch Cornelsen")

        assert keywords == [
            WeightedKeyword("chemie", 1.0),
            WeightedKeyword("schulbuch", 1.5),
            WeightedKeyword("cornelsen", 2.0),
        ]

    def test_no_keywords(self):
        """Test that a query of stop words yields nothing."""
        assert QueryParser().extract_weighted_keywords("der die das") == []
