"""Tests for wildcard pattern matching."""

from __future__ import annotations

import pytest

from src.http_logging.masking.wildcard import is_mask_match, matches, wildcard_to_regex


class TestWildcardToRegex:
    """Test pattern translation."""

    def test_star_becomes_any_run(self) -> None:
        """Test that * translates to .* and the result is anchored."""
        assert wildcard_to_regex("*token*") == "^.*token.*$"

    def test_other_characters_are_literal(self) -> None:
        """Test that regex metacharacters are escaped."""
        assert matches("a.b", "a.b")
        assert not matches("axb", "a.b")
        assert matches("items[0].id", "items[0].id")
        assert matches("a+b", "a+b")


class TestMatches:
    """Test single-pattern matching."""

    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("password", "*password*"),
            ("user.Password", "*password*"),
            ("PASSWORD_HASH", "*password*"),
            ("access_token", "*token*"),
            ("client-secret", "*client-secret*"),
            ("otp", "*otp"),
            ("user.otp", "*otp"),
            ("anything", "*"),
            ("", "*"),
        ],
    )
    def test_matching_paths(self, path: str, pattern: str) -> None:
        """Test paths that must match."""
        assert matches(path, pattern)

    @pytest.mark.parametrize(
        ("path", "pattern"),
        [
            ("otp_sent", "*otp"),
            ("username", "*password*"),
            ("user.name", "name"),
            ("", "token"),
        ],
    )
    def test_non_matching_paths(self, path: str, pattern: str) -> None:
        """Test that patterns must match the whole path."""
        assert not matches(path, pattern)

    def test_empty_pattern_matches_only_empty_path(self) -> None:
        """Test the empty pattern."""
        assert matches("", "")
        assert not matches("a", "")

    def test_star_spans_newlines(self) -> None:
        """Test that * also matches line breaks inside quoted property names."""
        assert matches("a\nb", "a*b")


class TestIsMaskMatch:
    """Test matching against a pattern collection."""

    def test_any_pattern_matches(self) -> None:
        """Test that one matching pattern is enough."""
        assert is_mask_match("Authorization", ["*token*", "*authorization*"])

    def test_no_patterns_never_match(self) -> None:
        """Test that an empty collection never matches."""
        assert not is_mask_match("password", [])

    def test_no_pattern_matches(self) -> None:
        """Test a path that no pattern selects."""
        assert not is_mask_match("username", ["*password*", "*token*"])
