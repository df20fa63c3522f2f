"""
Template Renderer - Placeholder substitution for answer templates
=================================================================

Answer templates may contain two placeholders:
- {timestamp} - Current local date and time
- {query} - The user's original question

Only the first occurrence of each placeholder is substituted. Any other
``{...}`` text is left untouched.
"""

import re
from datetime import datetime
from typing import List, Optional

TIMESTAMP_TOKEN = "{timestamp}"
QUERY_TOKEN = "{query}"

PLACEHOLDERS = (TIMESTAMP_TOKEN, QUERY_TOKEN)

_PLACEHOLDER_RE = re.compile(r"\{\w+\}")


def format_timestamp(now: Optional[datetime] = None) -> str:
    """Locale-aware date and time string."""
    return (now or datetime.now()).strftime("%c")


def render_template(template: str, query: str, now: Optional[datetime] = None) -> str:
    """
    Render an answer template for a query.

    Args:
        template: Template text
        query: Raw (unnormalized) query text
        now: Time to render for ``{timestamp}``; defaults to now

    Returns:
        Rendered string

    Example:
        >>> render_template("You asked: {query}", "hi")
        'You asked: hi'
    """
    result = template

    if TIMESTAMP_TOKEN in result:
        result = result.replace(TIMESTAMP_TOKEN, format_timestamp(now), 1)

    if QUERY_TOKEN in result:
        result = result.replace(QUERY_TOKEN, query, 1)

    return result


def find_placeholders(template: str) -> List[str]:
    """
    List the recognized placeholders a template uses.

    Unknown ``{name}`` tokens are ignored since they render verbatim.
    """
    found = []
    for match in _PLACEHOLDER_RE.finditer(template):
        token = match.group(0)
        if token in PLACEHOLDERS and token not in found:
            found.append(token)
    return found
