"""
Similarity Scoring - Pattern and keyword scores for a query
===========================================================

Scores are floats in [0, 1]. ``similarity_score`` applies three rules in
strict priority order (exact, wildcard, word overlap) and the first one
that applies decides the score; nothing is blended across rules.
"""

from typing import Iterable, Optional, Pattern

from .normalizer import WILDCARD, compile_pattern, normalize, tokenize

EXACT_MATCH_SCORE = 1.0
WILDCARD_MATCH_SCORE = 0.95
DEFAULT_KEYWORD_WEIGHT = 0.8


def similarity_score(query: str, pattern: str, regex: Optional[Pattern] = None) -> float:
    """
    Calculate similarity between a query and a pattern.

    Args:
        query: Raw user query
        pattern: Stored pattern text, may contain ``*`` wildcards
        regex: Precompiled ``compile_pattern(pattern)`` result, if cached

    Returns:
        1.0 for an exact match, 0.95 for a wildcard match, otherwise the
        fraction of pattern words found in the query.
    """
    normalized_query = normalize(query)
    normalized_pattern = normalize(pattern)

    if normalized_query == normalized_pattern:
        return EXACT_MATCH_SCORE

    if regex is None:
        regex = compile_pattern(pattern)
    if regex.match(normalized_query):
        return WILDCARD_MATCH_SCORE

    return overlap_score(normalized_query, normalized_pattern)


def overlap_score(normalized_query: str, normalized_pattern: str) -> float:
    """
    Fraction of pattern words that overlap some query word.

    A pattern word counts when it contains a query word or is contained
    in one, so partial words and simple plurals still line up.
    """
    query_words = tokenize(normalized_query)
    pattern_words = tokenize(normalized_pattern.replace(WILDCARD, ""))

    if not pattern_words:
        return 0.0

    matched = 0
    for pattern_word in pattern_words:
        if any(
            pattern_word in query_word or query_word in pattern_word
            for query_word in query_words
        ):
            matched += 1

    return matched / len(pattern_words)


def keyword_score(query: str, keywords: Optional[Iterable[str]]) -> float:
    """
    Fraction of keywords contained in the normalized query.

    Returns 0.0 when there are no keywords.
    """
    keywords = list(keywords or [])
    if not keywords:
        return 0.0

    normalized_query = normalize(query)
    matched = sum(1 for keyword in keywords if normalize(keyword) in normalized_query)

    return matched / len(keywords)


def combined_score(
    pattern_score: float,
    keyword_match: float,
    keyword_weight: float = DEFAULT_KEYWORD_WEIGHT,
) -> float:
    """Best of the structural score and the discounted keyword score."""
    return max(pattern_score, keyword_match * keyword_weight)
