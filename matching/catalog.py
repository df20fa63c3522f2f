"""
Pattern Catalog - Read-only views over the pattern collection
=============================================================

Turns stored patterns into example questions and per-category counts
for browsing interfaces.
"""

from typing import Any, Dict, Iterable, List, Optional

from .normalizer import WILDCARD
from .store import PatternRecord

WILDCARD_PHRASE = "my application"


def pattern_to_question(pattern: str) -> str:
    """
    Turn a stored pattern into a readable example question.

    Example:
        >>> pattern_to_question("HOW LONG DOES * TAKE")
        'How Long Does My Application Take?'
    """
    text = pattern.lower().replace(WILDCARD, WILDCARD_PHRASE)
    words = [word[:1].upper() + word[1:] for word in text.split(" ")]
    return " ".join(" ".join(words).split()) + "?"


def display_name(category: str) -> str:
    """``processing_times`` -> ``Processing Times``."""
    words = category.replace("_", " ").split(" ")
    return " ".join(word[:1].upper() + word[1:] for word in words)


def sample_questions(
    records: Iterable[PatternRecord],
    category: Optional[str] = None,
    limit: int = 10
) -> List[Dict[str, Any]]:
    """
    Example questions, optionally for one category.

    Args:
        records: Pattern records in stored order
        category: Category to filter on; None or "all" keeps everything
        limit: Maximum number of questions

    Returns:
        List of ``{question, category, confidence}`` dictionaries
    """
    if category and category != "all":
        records = [r for r in records if r.category == category]

    return [
        {
            "question": pattern_to_question(record.pattern),
            "category": record.category,
            "confidence": record.confidence,
        }
        for record in list(records)[:max(limit, 0)]
    ]


def list_categories(records: Iterable[PatternRecord]) -> List[str]:
    """Sorted unique category names."""
    return sorted({record.category for record in records})


def category_stats(records: Iterable[PatternRecord]) -> List[Dict[str, Any]]:
    """
    Pattern counts per category, largest first.

    Categories with equal counts keep the order in which they first
    appear in the collection.
    """
    stats: Dict[str, Dict[str, Any]] = {}
    for record in records:
        if record.category not in stats:
            stats[record.category] = {
                "name": record.category,
                "count": 0,
                "displayName": display_name(record.category),
            }
        stats[record.category]["count"] += 1

    return sorted(stats.values(), key=lambda item: item["count"], reverse=True)
