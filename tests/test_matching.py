"""
Test Matching Primitives
========================

Unit tests for normalization, wildcard compilation, scoring and
template rendering.
"""

import pytest
from datetime import datetime
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from matching.normalizer import normalize, compile_pattern
from matching.scoring import (
    similarity_score, keyword_score, combined_score,
    EXACT_MATCH_SCORE, WILDCARD_MATCH_SCORE,
)
from matching.templates import render_template, find_placeholders, format_timestamp


class TestNormalize:
    """Tests for normalize()."""

    def test_uppercases_and_strips_punctuation(self):
        """Test case folding and punctuation removal."""
        assert normalize("  How do I, apply?? ") == "HOW DO I APPLY"

    def test_keeps_wildcards(self):
        """Test that * survives normalization."""
        assert normalize("how do i *") == "HOW DO I *"
        assert normalize("what's *this*") == "WHAT S *THIS*"

    def test_collapses_whitespace(self):
        """Test whitespace runs become one space."""
        assert normalize("a\t\tb\n\nc   d") == "A B C D"

    def test_keeps_digits_and_underscores(self):
        """Test word characters are preserved."""
        assert normalize("form i-485 snake_case") == "FORM I 485 SNAKE_CASE"

    def test_empty_input(self):
        """Test empty and missing text."""
        assert normalize("") == ""
        assert normalize(None) == ""
        assert normalize("?!.,") == ""

    @pytest.mark.parametrize("text", [
        "How do I apply?",
        "  --weird***spacing--  ",
        "Tabs\tand\nnewlines",
        "",
        "mixed CASE, punctuation; and * wildcards",
    ])
    def test_idempotent(self, text):
        """Test normalizing twice changes nothing."""
        once = normalize(text)
        assert normalize(once) == once


class TestCompilePattern:
    """Tests for compile_pattern()."""

    def test_wildcard_regex_shape(self):
        """Test the generated regex."""
        regex = compile_pattern("How do I *")
        assert regex.pattern == r"^HOW\s+DO\s+I\s+.*?$"

    def test_wildcard_matches_whole_query(self):
        """Test wildcard matching against normalized queries."""
        regex = compile_pattern("HOW DO I *")
        assert regex.match(normalize("how do i apply for asylum"))
        assert regex.match("how do i apply")  # case-insensitive
        assert not regex.match(normalize("why do i apply"))
        assert not regex.match(normalize("so how do i apply"))

    def test_pattern_without_wildcard_is_exact(self):
        """Test a plain pattern only matches its own text."""
        regex = compile_pattern("hello there")
        assert regex.match("HELLO THERE")
        assert not regex.match("HELLO THERE FRIEND")

    def test_empty_pattern(self):
        """Test an empty pattern only matches empty text."""
        regex = compile_pattern("")
        assert regex.pattern == "^$"
        assert not regex.match("ANYTHING")


class TestSimilarityScore:
    """Tests for similarity_score()."""

    def test_exact_match(self):
        """Test exact normalized equality scores 1.0."""
        assert similarity_score("How do I apply?", "HOW DO I APPLY") == EXACT_MATCH_SCORE

    def test_wildcard_match(self):
        """Test wildcard match scores 0.95."""
        assert similarity_score("how do i apply for asylum", "HOW DO I *") == WILDCARD_MATCH_SCORE
        assert similarity_score("HOW   DO I  x", "how do i *") == 0.95

    def test_wildcard_mismatch_falls_back_to_overlap(self):
        """Test a failed wildcard uses word overlap instead."""
        score = similarity_score("why do i apply", "HOW DO I *")
        assert score < WILDCARD_MATCH_SCORE
        assert score == pytest.approx(2 / 3)

    def test_overlap_is_bidirectional(self):
        """Test partial words count in both directions."""
        # FORM is inside FORMS; REQUIRED has no counterpart
        assert similarity_score("form", "FORMS REQUIRED") == 0.5
        assert similarity_score("processing", "PROC TIME") == 0.5

    def test_uses_precompiled_regex(self):
        """Test a cached regex gives the same result."""
        regex = compile_pattern("HOW DO I *")
        assert similarity_score("how do i file", "HOW DO I *", regex) == 0.95

    def test_pattern_without_words(self):
        """Test a pattern that normalizes to nothing scores 0."""
        assert similarity_score("hello", "?!") == 0.0

    def test_lone_wildcard_matches_anything(self):
        """Test '*' alone matches any query via the regex."""
        assert similarity_score("anything at all", "*") == 0.95

    def test_no_overlap(self):
        """Test unrelated text scores 0."""
        assert similarity_score("bananas are yellow", "WHAT DOCUMENTS DO WE NEED") == 0.0


class TestKeywordScore:
    """Tests for keyword_score()."""

    def test_fraction_of_keywords(self):
        """Test the fraction of contained keywords."""
        score = keyword_score("How long is the processing time?", ["processing time", "wait"])
        assert score == 0.5

    def test_no_keywords(self):
        """Test empty keyword lists score 0."""
        assert keyword_score("anything", []) == 0.0
        assert keyword_score("anything", None) == 0.0

    def test_containment_is_one_directional(self):
        """Test the keyword must be inside the query, not the reverse."""
        assert keyword_score("time", ["processing time"]) == 0.0

    def test_keywords_are_normalized(self):
        """Test keyword punctuation and case are ignored."""
        assert keyword_score("green card fee", ["Green-Card"]) == 1.0


class TestCombinedScore:
    """Tests for combined_score()."""

    def test_keyword_score_is_discounted(self):
        """Test keyword-only evidence is weighted by 0.8."""
        assert combined_score(0.5, 1.0) == pytest.approx(0.8)

    def test_pattern_score_wins_when_higher(self):
        """Test the structural score is used when larger."""
        assert combined_score(0.9, 1.0) == 0.9

    def test_custom_weight(self):
        """Test a tuned keyword weight."""
        assert combined_score(0.0, 1.0, keyword_weight=0.5) == 0.5


class TestRenderTemplate:
    """Tests for render_template()."""

    def test_query_and_timestamp(self):
        """Test both placeholders are substituted."""
        result = render_template("Hello {query}, time {timestamp}", "hi")
        assert result.startswith("Hello hi, time ")
        assert len(result) > len("Hello hi, time ")
        assert "{query}" not in result
        assert "{timestamp}" not in result

    def test_injected_time(self):
        """Test the timestamp uses the locale date-time format."""
        now = datetime(2024, 1, 2, 3, 4, 5)
        result = render_template("At {timestamp}", "q", now=now)
        assert result == "At " + now.strftime("%c")
        assert format_timestamp(now) == now.strftime("%c")

    def test_only_first_occurrence_replaced(self):
        """Test repeated placeholders keep their later occurrences."""
        assert render_template("{query} and {query}", "x") == "x and {query}"

    def test_unknown_placeholders_pass_through(self):
        """Test unknown tokens are left alone."""
        assert render_template("{name} asked {query}", "x") == "{name} asked x"

    def test_query_is_not_normalized(self):
        """Test the raw query text is inserted."""
        assert render_template("You asked: {query}", "How do I apply?") == "You asked: How do I apply?"

    def test_no_placeholders(self):
        """Test plain templates are returned unchanged."""
        assert render_template("Plain answer.", "x") == "Plain answer."


class TestFindPlaceholders:
    """Tests for find_placeholders()."""

    def test_lists_known_tokens_once(self):
        """Test recognized tokens are reported in order."""
        template = "{query} {foo} {timestamp} {query}"
        assert find_placeholders(template) == ["{query}", "{timestamp}"]

    def test_none_found(self):
        """Test templates without placeholders."""
        assert find_placeholders("No tokens {here there}") == []


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
