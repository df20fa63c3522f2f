"""
Text Normalizer - Canonical form for queries and patterns
=========================================================

Queries and stored patterns go through the same ``normalize`` function so
that case and punctuation never influence matching. ``compile_pattern``
turns a normalized pattern with ``*`` wildcards into an anchored regex.
"""

import re
from typing import Optional, Pattern

WILDCARD = "*"

# Anything that is not an ASCII word character, whitespace or a wildcard
_STRIP_RE = re.compile(r"[^\w\s*]", re.ASCII)
_SPACE_RE = re.compile(r"\s+")


def normalize(text: Optional[str]) -> str:
    """
    Normalize text for pattern matching.

    Uppercases, replaces punctuation with spaces (keeping ``*``), collapses
    whitespace and trims.

    Example:
        >>> normalize("  How do I, apply?? ")
        'HOW DO I APPLY'
    """
    if not text:
        return ""
    text = _STRIP_RE.sub(" ", text.upper())
    return _SPACE_RE.sub(" ", text).strip()


def compile_pattern(pattern: str) -> Pattern:
    """
    Convert a pattern to a regex, handling wildcards.

    Each ``*`` matches any run of characters (non-greedy) and each space
    matches one or more whitespace characters. The regex is anchored to
    the whole query and case-insensitive.
    """
    normalized = normalize(pattern)
    parts = [part.replace(WILDCARD, ".*?") for part in normalized.split(" ")]
    return re.compile("^" + r"\s+".join(parts) + "$", re.IGNORECASE)


def tokenize(normalized: str):
    """Split already-normalized text into words."""
    return normalized.split()
