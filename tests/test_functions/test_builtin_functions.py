"""Tests for the built-in arithmetic, text and data functions."""

import pytest

from sashi.core.exceptions import ImplementationError, InvalidEnumValueError, TypeMismatchError
from sashi.functions import register_builtin_functions
from sashi.functions.arithmetic import round_number
from sashi.functions.data import aggregate, group_by, parse_csv, prepare_chart_data, summarize_data, to_csv
from sashi.functions.text import base64_decode, base64_encode, validate_format
from sashi.registry import FunctionRegistry


@pytest.fixture
def builtins() -> FunctionRegistry:
    reg = FunctionRegistry()
    register_builtin_functions(reg)
    return reg


class TestRegistration:
    def test_builtins_are_hidden_from_metadata_but_in_feed(self, builtins):
        assert builtins.metadata() == []
        assert "parseCSV" in [entry["name"] for entry in builtins.describe_all()]

    def test_visible_registration(self):
        reg = FunctionRegistry()
        register_builtin_functions(reg, hidden=False)

        assert "add" in [entry["name"] for entry in reg.metadata()]

    def test_format_enum_in_tool_feed(self, builtins):
        schema = builtins.describe("validateFormat")["parameters"]["format"]

        assert schema["type"] == "enum"
        assert schema["enum"] == ["email", "phone", "url", "number", "date"]


class TestArithmetic:
    def test_add_coerces_numeric_strings(self, builtins):
        assert builtins.invoke_sync("add", {"numbers": ["1", 2, 3.5]}) == {"result": 6.5, "operation": "add(1, 2, 3.5)"}

    def test_subtract_and_divide_left_to_right(self, builtins):
        assert builtins.invoke_sync("subtract", {"numbers": [10, 3, 2]})["result"] == 5
        assert builtins.invoke_sync("divide", {"numbers": [100, 5, 2]})["result"] == 10

    def test_multiply(self, builtins):
        assert builtins.invoke_sync("multiply", {"numbers": [2, 3, 4]})["result"] == 24

    def test_divide_by_zero(self, builtins):
        with pytest.raises(ImplementationError, match="ZeroDivisionError: Cannot divide by zero"):
            builtins.invoke_sync("divide", {"numbers": [1, 0]})

    def test_subtract_needs_two_numbers(self, builtins):
        with pytest.raises(ImplementationError, match="At least 2 numbers"):
            builtins.invoke_sync("subtract", {"numbers": [1]})

    def test_non_numeric_item(self, builtins):
        with pytest.raises(TypeMismatchError) as exc_info:
            builtins.invoke_sync("add", {"numbers": [1, "two"]})

        assert exc_info.value.parameter == "numbers[1]"

    @pytest.mark.parametrize(("number", "decimals", "expected"), [(2.5, None, 3), (-2.5, None, -2), (3.14159, 2, 3.14)])
    def test_round_half_up(self, number, decimals, expected):
        assert round_number(number, decimals)["result"] == expected

    def test_round_through_registry(self, builtins):
        assert builtins.invoke_sync("round", {"number": "7.6"}) == {"result": 8, "operation": "round(7.6, 0)"}


class TestText:
    def test_extract(self, builtins):
        assert builtins.invoke_sync("extract", {"text": "hello world", "start": 6})["result"] == "world"
        assert builtins.invoke_sync("extract", {"text": "hello world", "start": 0, "end": 5})["result"] == "hello"

    def test_replace_is_regex(self, builtins):
        result = builtins.invoke_sync("replace", {"text": "a1b22c", "search": r"\d+", "replace": "#"})

        assert result["result"] == "a#b#c"

    def test_replace_bad_pattern(self, builtins):
        with pytest.raises(ImplementationError, match="Invalid search pattern"):
            builtins.invoke_sync("replace", {"text": "x", "search": "(", "replace": ""})

    def test_base64(self):
        assert base64_encode("hi there") == "aGkgdGhlcmU="
        assert base64_decode("aGkgdGhlcmU=") == "hi there"

    def test_base64_decode_rejects_garbage(self):
        with pytest.raises(ValueError, match="Not valid base64"):
            base64_decode("***")

    @pytest.mark.parametrize(
        ("data", "fmt", "valid"),
        [
            ("a@x.com", "email", True),
            ("not-an-email", "email", False),
            ("+1 (555) 123-4567", "phone", True),
            ("https://example.com", "url", True),
            ("12.5", "number", True),
            ("2024-01-31", "date", True),
        ],
    )
    def test_validate_format(self, data, fmt, valid):
        assert validate_format(data, fmt)["isValid"] is valid

    def test_validate_format_rejects_unknown_format(self, builtins):
        with pytest.raises(InvalidEnumValueError):
            builtins.invoke_sync("validateFormat", {"data": "x", "format": "zip"})


class TestData:
    CSV = "name, team, score\nana, red, 10\nbo, blue, 7\ncy, red, x\n"

    def test_parse_csv(self):
        rows = parse_csv(self.CSV)

        assert rows[0] == {"name": "ana", "team": "red", "score": "10", "_index": 0}
        assert len(rows) == 3

    def test_parse_csv_custom_delimiter_and_short_rows(self):
        assert parse_csv("a;b\n1") == [{"a;b": "1", "_index": 0}]
        assert parse_csv("a;b\n1", ";") == [{"a": "1", "b": "", "_index": 0}]

    def test_parse_empty(self):
        assert parse_csv("   ") == []

    def test_to_csv(self):
        assert to_csv([{"a": 1, "b": None}, {"a": "x,y", "b": 2}]) == 'a,b\n1,\n"x,y",2'
        assert to_csv([]) == ""

    def test_to_csv_selected_columns(self):
        assert to_csv([{"a": 1, "b": 2}], ["b"]) == "b\n2"

    def test_map_data_through_registry(self, builtins):
        result = builtins.invoke_sync("mapData", {"data": [{"n": "ana", "x": 1}], "mapping": {"n": "name"}})

        assert result == [{"name": "ana"}]

    def test_group_by(self):
        groups = group_by([{"t": "red"}, {"t": "blue"}, {"t": "red"}, {}], "t")

        assert {key: len(items) for key, items in groups.items()} == {"red": 2, "blue": 1, "undefined": 1}

    def test_aggregate_skips_non_numeric(self):
        result = aggregate(parse_csv(self.CSV), "score")

        assert result == {"count": 2, "sum": 17.0, "avg": 8.5, "min": 7.0, "max": 10.0, "field": "score"}

    def test_aggregate_count_only(self):
        assert aggregate([{}, {}]) == {"count": 2, "operation": "count"}

    def test_prepare_chart_data(self):
        chart = prepare_chart_data([{"m": "jan", "v": "3"}, {"v": 1}, {"m": "feb", "v": None}], "m", "v")

        assert [(point["label"], point["value"]) for point in chart] == [("jan", 3.0), ("feb", 0)]

    def test_summarize_data(self):
        summary = summarize_data([{"a": 1, "b": "x"}, {"a": 2, "b": None}])

        assert summary["totalRecords"] == 2
        assert summary["fieldTypes"]["a"] == {"type": "numeric", "uniqueValues": 2, "nullCount": 0}
        assert summary["fieldTypes"]["b"]["type"] == "text"
        assert summary["fieldTypes"]["b"]["nullCount"] == 1

    def test_summarize_empty(self):
        assert summarize_data([])["summary"] == "No data provided"
