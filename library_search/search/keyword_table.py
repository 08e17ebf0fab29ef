"""
Static keyword tables for query enhancement and ranking.

Stop words, known school-book publishers, publisher-indicating words and
book-category terms, bundled in an immutable KeywordTables value that is
passed to the enhancer, the tokenizer and the ranker.
"""

from dataclasses import dataclass, replace
from typing import FrozenSet, Optional, Tuple


STOP_WORDS = frozenset({
    # German
    "der", "die", "das", "den", "dem", "des", "ein", "eine", "einer", "eines",
    "einem", "einen", "und", "oder", "aber", "für", "mit", "von", "vom", "zum",
    "zur", "bei", "aus", "auf", "über", "unter", "nach", "ist", "sind", "wie",
    "was", "wer", "ich", "sie", "wir", "ihr", "nicht", "auch", "noch", "nur",
    # English
    "the", "and", "for", "with", "from", "about", "are", "was", "were", "this",
    "that", "into", "onto", "what", "which", "who", "how", "not", "but", "all",
})

PUBLISHER_NAMES = (
    "westermann",
    "cornelsen",
    "klett",
    "diesterweg",
    "duden",
    "carlsen",
    "beltz",
    "raabe",
)

PUBLISHER_KEYWORDS = (
    "verlag",
    "verlagshaus",
    "publisher",
    "edition",
    "press",
)

CATEGORY_TERMS = (
    "schulbuch",
    "lehrbuch",
    "arbeitsheft",
    "arbeitsbuch",
    "textbook",
    "workbook",
    "lektüre",
    "wörterbuch",
    "dictionary",
    "atlas",
    "lexikon",
    "übungsheft",
)


@dataclass(frozen=True)
class KeywordTables:
    """
    Domain vocabulary used to interpret queries.

    Attributes:
        stop_words: Tokens never used for keyword matching.
        publisher_names: Known publisher names (lower-case).
        publisher_keywords: Words that signal a publisher search.
        category_terms: Recognized book-category words.
        publisher_weight: Weight for publisher names.
        publisher_keyword_weight: Weight for publisher keywords.
        category_weight: Weight for category terms.
        default_weight: Weight for every other token.
        min_token_length: Tokens of this length or shorter are dropped.
    """
    stop_words: FrozenSet[str] = STOP_WORDS
    publisher_names: Tuple[str, ...] = PUBLISHER_NAMES
    publisher_keywords: Tuple[str, ...] = PUBLISHER_KEYWORDS
    category_terms: Tuple[str, ...] = CATEGORY_TERMS
    publisher_weight: float = 2.0
    publisher_keyword_weight: float = 2.0
    category_weight: float = 1.5
    default_weight: float = 1.0
    min_token_length: int = 2

    def weight_for(self, token: str) -> float:
        """
        Return the ranking weight of a lower-cased token.

        A token matches a table term when either contains the other, so
        "cornelsen-verlag" and "klett" both hit their entries. Publisher
        names win over publisher keywords, which win over categories.
        """
        for terms, weight in (
            (self.publisher_names, self.publisher_weight),
            (self.publisher_keywords, self.publisher_keyword_weight),
            (self.category_terms, self.category_weight),
        ):
            if _matches_any(token, terms):
                return weight
        return self.default_weight

    def find_publisher_keyword(self, lowered_query: str) -> Optional[str]:
        """Return the first publisher keyword contained in the query."""
        for keyword in self.publisher_keywords:
            if keyword in lowered_query:
                return keyword
        return None

    def find_publisher_name(self, lowered_query: str) -> Optional[str]:
        """Return the first known publisher name contained in the query."""
        for name in self.publisher_names:
            if name in lowered_query:
                return name
        return None

    def with_overrides(self, **changes) -> "KeywordTables":
        """Return a copy with some tables or weights replaced."""
        return replace(self, **changes)


def _matches_any(token: str, terms: Tuple[str, ...]) -> bool:
    return any(term in token or token in term for term in terms)


DEFAULT_TABLES = KeywordTables()
