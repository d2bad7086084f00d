"""Tests for function listing and detail formatting."""

from sashi.execution.formatters import format_function_details, format_function_list, format_search_results
from sashi.functions import register_builtin_functions


def test_list_hides_hidden_functions_by_default(registry):
    register_builtin_functions(registry)

    listing = format_function_list(registry)

    assert "get_user" in listing
    assert "parseCSV" not in listing
    assert listing.endswith("Total: 3 functions")  # builtin add replaced the fixture one


def test_list_flags(registry):
    register_builtin_functions(registry)
    registry.set_active("add", False)

    listing = format_function_list(registry, include_hidden=True)

    assert "[inactive, hidden]" in listing
    assert "Total: 20 functions" in listing


def test_empty_registry():
    from sashi.registry import FunctionRegistry

    assert format_function_list(FunctionRegistry()) == "No functions registered."


def test_details(registry):
    text = format_function_details("scale", registry.lookup("scale"), registry.describe("scale"))

    assert text.splitlines()[:3] == ["scale", "─────", "Multiply a value by a factor (default 2)."]
    assert "  - value: number" in text
    assert "  - factor: number (optional)" in text
    assert "Returns: number" in text
    assert "Calling convention: positional" in text


def test_search_results(registry):
    assert format_search_results(registry.search("user"), "user").splitlines() == [
        "Functions matching 'user':",
        "",
        "  get_user  Look up a user record by id.",
    ]
    assert format_search_results([], "zzz") == "No functions match 'zzz'."
