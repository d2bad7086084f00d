"""Tests for JSON parsing helpers."""

import pytest

from sashi.core.json_utils import strip_code_fences, try_parse_json


class TestTryParseJson:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [('{"a": 1}', {"a": 1}), ("[1, 2]", [1, 2]), ("null", None), ("  42 ", 42), ('"x"', "x")],
    )
    def test_parses_json(self, text, expected):
        assert try_parse_json(text) == (True, expected)

    @pytest.mark.parametrize("text", ["not json", "", "   ", "{broken", "hello"])
    def test_returns_original_on_failure(self, text):
        assert try_parse_json(text) == (False, text)

    def test_non_strings_pass_through(self):
        assert try_parse_json({"a": 1}) == (False, {"a": 1})

    def test_size_limit(self):
        assert try_parse_json("[1, 2, 3]", max_size=3) == (False, "[1, 2, 3]")


class TestStripCodeFences:
    def test_strips_language_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strips_bare_fence(self):
        assert strip_code_fences("```\nSELECT 1\n```") == "SELECT 1"

    def test_leaves_plain_text(self):
        assert strip_code_fences("  SELECT 1  ") == "SELECT 1"
