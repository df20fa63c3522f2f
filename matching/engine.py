"""
Pattern Matcher - Trained-response lookup for free-text questions
=================================================================

This module implements the engine that maps a user question onto the
best pre-authored answer template. Every stored pattern is scored
against the query, the highest combined score above the acceptance
threshold wins, and its template is rendered into a MatchResult.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.config import MatcherConfig
from core.exceptions import PatternSourceError
from core.logging import get_logger

from .scoring import combined_score, keyword_score, similarity_score
from .store import FilePatternSource, PatternOptions, PatternRecord, PatternStore
from .templates import render_template

logger = get_logger("matching.engine")


@dataclass
class BestMatch:
    """A stored record together with the score that selected it."""
    record: PatternRecord
    match_score: float


@dataclass
class MatchResult:
    """
    Answer produced for a query.

    Attributes:
        answer (str): Rendered template
        confidence (float): record confidence * match score
        category (str): Category of the matched record
        pattern (str): Pattern of the matched record
        match_score (float): Combined score used to pick the record
        sources (tuple): Provenance tags for display
        is_trained_response (bool): Always True for a match
    """
    answer: str
    confidence: float
    category: str
    pattern: str
    match_score: float
    sources: Tuple[str, ...] = field(default_factory=tuple)
    is_trained_response: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON shape consumed by clients."""
        return {
            "answer": self.answer,
            "confidence": self.confidence,
            "category": self.category,
            "pattern": self.pattern,
            "matchScore": self.match_score,
            "sources": list(self.sources),
            "isTrainedResponse": self.is_trained_response,
        }


class PatternMatcher:
    """
    Matches questions against trained patterns.

    Example:
        matcher = PatternMatcher("data/patterns.json")

        result = matcher.get_response("How do I apply for asylum?")
        if result:
            print(result.answer)

        matcher.add_pattern("TEST QUERY", "Test answer")
    """

    def __init__(self, source=None, config: Optional[MatcherConfig] = None):
        """
        Initialize the matcher and load patterns.

        Args:
            source: Pattern source (anything with ``load()``) or a file path
            config: Matcher tuning; defaults are used if omitted
        """
        if isinstance(source, (str, Path)):
            source = FilePatternSource(str(source))

        self.source = source
        self.config = config or MatcherConfig()
        self.store = PatternStore()

        self._load()

    @property
    def min_threshold(self) -> float:
        return self.config.min_threshold

    @property
    def keyword_weight(self) -> float:
        return self.config.keyword_weight

    def _load(self) -> int:
        """Load the source into the store, falling back to an empty collection."""
        if self.source is None:
            self.store.clear()
            return 0

        try:
            count = self.store.load(self.source)
        except PatternSourceError as e:
            logger.error(f"Error loading training patterns: {e}")
            self.store.clear()
            return 0

        logger.info(f"Loaded {count} training patterns")
        return count

    def score(self, query: str, record: PatternRecord, regex=None) -> float:
        """Combined score of one record for a query."""
        return combined_score(
            similarity_score(query, record.pattern, regex),
            keyword_score(query, record.keywords),
            self.keyword_weight,
        )

    def find_best_match(self, query: Optional[str]) -> Optional[BestMatch]:
        """
        Find the best matching pattern for a query.

        Records are scored in stored order; a record only replaces the
        current best when its score is strictly higher than both the
        best so far and the threshold, so the earliest record wins ties.

        Args:
            query: Raw user question

        Returns:
            BestMatch if a record clears the threshold, None otherwise
        """
        entries = self.store.entries()
        if not query or not entries:
            return None

        best = None
        best_score = 0.0

        for record, regex in entries:
            score = self.score(query, record, regex)
            if score > best_score and score > self.min_threshold:
                best_score = score
                best = record

        if best is None:
            logger.debug(f"No trained pattern matched query: {query[:50]!r}")
            return None

        logger.debug(f"Matched pattern {best.pattern!r} with score {best_score:.2f}")
        return BestMatch(record=best, match_score=best_score)

    def rank(self, query: Optional[str], limit: int = 5) -> List[BestMatch]:
        """
        Score every record for a query, highest first.

        No threshold is applied; useful for explaining why a question
        did or did not match.
        """
        if not query:
            return []

        scored = [
            BestMatch(record=record, match_score=self.score(query, record, regex))
            for record, regex in self.store.entries()
        ]
        scored.sort(key=lambda match: match.match_score, reverse=True)
        return scored[:limit]

    def get_response(self, query: Optional[str]) -> Optional[MatchResult]:
        """
        Get the trained response for a query.

        Returns:
            MatchResult, or None when no pattern clears the threshold
        """
        match = self.find_best_match(query)
        if match is None:
            return None

        record = match.record
        return MatchResult(
            answer=render_template(record.template, query),
            confidence=record.confidence * match.match_score,
            category=record.category,
            pattern=record.pattern,
            match_score=match.match_score,
            sources=tuple(self.config.sources),
        )

    def add_pattern(
        self,
        pattern: str,
        template: str,
        options: Optional[PatternOptions] = None
    ) -> PatternRecord:
        """
        Add a new pattern at the end of the collection.

        The pattern is uppercased but otherwise kept as written. Added
        patterns live in memory only and are dropped by a reload.

        Raises:
            PatternValidationError: If pattern, template or confidence is invalid
        """
        options = options or PatternOptions()

        record = PatternRecord(
            pattern=pattern.upper() if isinstance(pattern, str) else pattern,
            template=template,
            confidence=options.confidence,
            category=options.category,
            keywords=options.keywords,
        )

        self.store.append(record)
        logger.info(f"Added pattern {record.pattern!r} in category {record.category!r}")

        return record

    def reload_patterns(self) -> int:
        """
        Discard the current collection and reload it from the source.

        Returns:
            Number of patterns loaded
        """
        count = self._load()
        logger.info(f"Reloaded training patterns ({count} total)")
        return count

    def get_all_patterns(self) -> Tuple[PatternRecord, ...]:
        """Get the current pattern collection."""
        return self.store.records()

    def __len__(self) -> int:
        return len(self.store)
