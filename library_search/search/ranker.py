"""
Result merging and re-ranking for hybrid search.

Scores every book against the weighted keywords of the original query,
adds that score to the vector similarity (or to a fixed baseline for
keyword-only hits), removes duplicates and sorts the result.
"""

import re
from typing import Dict, List, Sequence

from ..core import get_config, get_logger
from ..database.catalog_repository import CatalogEntry
from ..database.vector_repository import VectorMatch
from .keyword_table import DEFAULT_TABLES, KeywordTables
from .models import ScoredResult, WeightedKeyword
from .query_parser import QueryParser

logger = get_logger(__name__)


# Per-keyword contributions, multiplied by the keyword weight
WHOLE_WORD_BONUS = 0.4
SUBSTRING_BONUS = 0.2
TITLE_BONUS = 0.3
SUBJECT_BONUS = 0.2
PUBLISHER_WHOLE_WORD_BONUS = 1.0
PUBLISHER_SUBSTRING_BONUS = 0.6
TYPE_BONUS = 0.2


def _whole_word(word: str, text: str) -> bool:
    return re.search(r"\b" + re.escape(word) + r"\b", text) is not None


class ResultRanker:
    """
    Merges vector and keyword hits into one ranked list.

    Publisher matches carry the largest bonus so a query naming a
    publisher puts that publisher's books first.
    """

    def __init__(
        self,
        tables: KeywordTables = DEFAULT_TABLES,
        keyword_only_baseline: float = None,
        keyword_score_cap: float = None
    ):
        """
        Initialize the ranker.

        Args:
            tables: Keyword tables used to weight query tokens.
            keyword_only_baseline: Score standing in for similarity when a
                book was found by keyword search only. Defaults to config.
            keyword_score_cap: Upper bound of the keyword score. Defaults
                to config.
        """
        search_config = None
        if keyword_only_baseline is None or keyword_score_cap is None:
            search_config = get_config().search

        self.tables = tables
        self.parser = QueryParser(tables)
        self.keyword_only_baseline = (
            keyword_only_baseline if keyword_only_baseline is not None
            else search_config.keyword_only_baseline
        )
        self.keyword_score_cap = (
            keyword_score_cap if keyword_score_cap is not None
            else search_config.keyword_score_cap
        )

    def extract_weighted_keywords(self, query: str) -> List[WeightedKeyword]:
        """Weighted keywords of the original query."""
        return self.parser.extract_weighted_keywords(query)

    def keyword_score(self, entry: CatalogEntry, keywords: Sequence[WeightedKeyword]) -> float:
        """
        Compute how well a book matches the weighted keywords.

        Args:
            entry: Book to score.
            keywords: Weighted keywords of the original query.

        Returns:
            Normalized score times keyword_score_cap; 0 when there are no
            keywords. A book matching every keyword in every field can
            exceed the cap, since the per-keyword bonuses sum past 1.
        """
        haystack = " ".join(entry.text_values()).lower()
        title = (entry.title or "").lower()
        subject = (entry.subject or "").lower()
        publisher = (entry.publisher or "").lower()
        book_type = (entry.type or "").lower()

        total_score = 0.0
        total_weight = 0.0

        for keyword in keywords:
            word = keyword.word
            weight = keyword.weight

            if _whole_word(word, haystack):
                total_score += weight * WHOLE_WORD_BONUS
            elif word in haystack:
                total_score += weight * SUBSTRING_BONUS

            if word in title:
                total_score += weight * TITLE_BONUS

            if word in subject:
                total_score += weight * SUBJECT_BONUS

            if _whole_word(word, publisher):
                total_score += weight * PUBLISHER_WHOLE_WORD_BONUS
            elif word in publisher:
                total_score += weight * PUBLISHER_SUBSTRING_BONUS

            if word in book_type:
                total_score += weight * TYPE_BONUS

            total_weight += weight

        if total_weight == 0:
            return 0.0

        normalized = total_score / total_weight
        return normalized * self.keyword_score_cap

    def merge(
        self,
        vector_matches: Sequence[VectorMatch],
        keyword_entries: Sequence[CatalogEntry],
        keywords: Sequence[WeightedKeyword]
    ) -> List[ScoredResult]:
        """
        Merge both result sets into a single ranked list.

        Vector hits score similarity + keyword score. Keyword-only hits
        score baseline + keyword score and have no raw similarity. A book
        found by both keeps its vector-derived record. Sorting is stable,
        so equal scores keep encounter order: vector hits first, then
        keyword hits.

        Args:
            vector_matches: Vector search results, most similar first.
            keyword_entries: Keyword search results, unordered.
            keywords: Weighted keywords of the original query.

        Returns:
            ScoredResult list ordered by combined score, descending.
        """
        merged: Dict[str, ScoredResult] = {}

        for match in vector_matches:
            if match.entry.id in merged:
                continue
            score = self.keyword_score(match.entry, keywords)
            merged[match.entry.id] = ScoredResult(
                entry=match.entry,
                raw_similarity=match.similarity,
                keyword_score=score,
                combined_score=match.similarity + score
            )

        for entry in keyword_entries:
            if entry.id in merged:
                continue
            score = self.keyword_score(entry, keywords)
            merged[entry.id] = ScoredResult(
                entry=entry,
                raw_similarity=None,
                keyword_score=score,
                combined_score=self.keyword_only_baseline + score
            )

        results = sorted(merged.values(), key=lambda r: r.combined_score, reverse=True)

        logger.debug(
            f"Merged {len(vector_matches)} vector and {len(keyword_entries)} keyword hits "
            f"into {len(results)} results"
        )

        return results
