"""Tests for JSON string escaping and field extraction."""

from __future__ import annotations

import pytest

from memory_summarizer.text_generators.json_codec import (
    escape_json_string,
    extract_json_field,
    extract_json_string,
    unescape_json_string,
)


class TestEscape:
    """Tests for escape_json_string."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('"', '\\"'),
            ("\\", "\\\\"),
            ("\n", "\\n"),
            ("\r", "\\r"),
            ("\t", "\\t"),
            ("\b", "\\b"),
            ("\f", "\\f"),
            ("\x01", "\\u0001"),
            ("\x1f", "\\u001f"),
        ],
    )
    def test_escapes(self, raw, expected):
        assert escape_json_string(raw) == expected

    def test_other_characters_pass_through(self):
        """Non-ASCII, slash and DEL are left alone."""
        text = "café / 记忆 \x7f \U0001f600"
        assert escape_json_string(text) == text

    def test_empty(self):
        assert escape_json_string("") == ""

    def test_mixed(self):
        assert escape_json_string('a"b\\c\nd\te') == 'a\\"b\\\\c\\nd\\te'


class TestRoundTrip:
    """Escaping then unescaping returns the original text."""

    def test_quotes_backslashes_and_whitespace(self):
        original = 'a"b\\c\nd\te'
        assert unescape_json_string(escape_json_string(original)) == original

    def test_control_character(self):
        original = "x\x01y"
        escaped = escape_json_string(original)
        assert "\\u0001" in escaped
        assert unescape_json_string(escaped) == original


class TestExtractString:
    """Tests for extract_json_string."""

    def test_stops_at_closing_quote(self):
        assert extract_json_string('hello" trailing', 0) == "hello"

    def test_unclosed_returns_none(self):
        assert extract_json_string("never closed", 0) is None

    def test_trailing_backslash_is_unclosed(self):
        assert extract_json_string("abc\\", 0) is None

    def test_solidus(self):
        assert extract_json_string('a\\/b"', 0) == "a/b"

    def test_unicode_escape(self):
        assert extract_json_string('\\u00e9t\\u00e9"', 0) == "été"

    def test_invalid_unicode_escape_kept_literally(self):
        assert extract_json_string('\\uZZZZ"', 0) == "\\uZZZZ"

    def test_truncated_unicode_escape_kept_literally(self):
        assert extract_json_string('\\u12', 0) is None
        assert extract_json_string('\\u12"', 0) == '\\u12'

    def test_unknown_escape_passes_through(self):
        assert extract_json_string('a\\qb"', 0) == "a\\qb"

    def test_surrogate_pair_combined(self):
        assert extract_json_string('\\ud83d\\ude00"', 0) == "\U0001f600"


class TestExtractField:
    """Tests for extract_json_field."""

    def test_chat_content(self):
        body = '{"choices":[{"message":{"content":"hello \\"world\\""}}]}'
        assert extract_json_field(body, "content") == 'hello "world"'

    def test_first_occurrence_wins(self):
        body = '{"a":{"text":"first"},"b":{"text":"second"}}'
        assert extract_json_field(body, "text") == "first"

    def test_whitespace_after_colon(self):
        assert extract_json_field('{"text" :  \n "ok"}', "text") == "ok"

    def test_missing_field(self):
        assert extract_json_field('{"other":"x"}', "content") is None

    def test_non_string_value(self):
        assert extract_json_field('{"content":null}', "content") is None

    def test_unterminated_value(self):
        assert extract_json_field('{"content":"cut off', "content") is None

    def test_empty_inputs(self):
        assert extract_json_field("", "content") is None
        assert extract_json_field('{"content":"x"}', "") is None
