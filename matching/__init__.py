"""
Matching Module - Trained-response pattern matching
===================================================

This module maps free-text questions onto pre-authored answers:
- Text normalization and wildcard patterns
- Exact, wildcard and word-overlap similarity
- Keyword scoring
- Best-match selection with a tunable threshold
- Template rendering and pattern management
"""

from .engine import PatternMatcher, MatchResult, BestMatch
from .normalizer import normalize, compile_pattern
from .scoring import similarity_score, keyword_score, combined_score
from .store import (
    PatternRecord,
    PatternOptions,
    PatternStore,
    FilePatternSource,
    InMemoryPatternSource,
)
from .templates import render_template

__version__ = "1.0.0"

__all__ = [
    "PatternMatcher",
    "MatchResult",
    "BestMatch",
    "normalize",
    "compile_pattern",
    "similarity_score",
    "keyword_score",
    "combined_score",
    "PatternRecord",
    "PatternOptions",
    "PatternStore",
    "FilePatternSource",
    "InMemoryPatternSource",
    "render_template",
]
