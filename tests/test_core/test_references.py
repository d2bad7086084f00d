"""Tests for reference expression parsing and path extraction."""

from dataclasses import dataclass

import pytest

from sashi.core.references import (
    MISSING,
    ActionRef,
    IndexedActionRef,
    LiteralValue,
    MappedActionRef,
    UserInputRef,
    extract_path,
    format_path,
    is_literal_escape,
    iter_references,
    parse_reference,
)


class TestParseReference:
    def test_action_field(self):
        assert parse_reference("stepA.email") == ActionRef("stepA", ("email",))

    def test_nested_path_with_indices(self):
        assert parse_reference("fetch.rows[2].id") == ActionRef("fetch", ("rows", 2, "id"))

    def test_user_input(self):
        assert parse_reference("userInput.email") == UserInputRef(("email",))

    def test_mapped(self):
        assert parse_reference("list-users[*].email") == MappedActionRef("list-users", ("email",))

    def test_mapped_without_path(self):
        assert parse_reference("fetch[*]") == MappedActionRef("fetch", ())

    def test_undeclared_head_still_parses_as_reference(self):
        assert parse_reference("report.csv") == ActionRef("report", ("csv",))

    @pytest.mark.parametrize(("text", "index"), [("fetch[0].id", 0), ("fetch[first].id", "first"), ("fetch[last]", "last")])
    def test_indexed(self, text, index):
        result = parse_reference(text)

        assert isinstance(result, IndexedActionRef)
        assert result.index == index

    @pytest.mark.parametrize(
        "text",
        [
            "a@x.com",
            "v1.2",
            "hello world",
            "stepA",  # bare id
            "userInput",  # bare userInput
            "userInput[0].x",  # selectors only apply to actions
            "stepA.",
            "",
        ],
    )
    def test_literals(self, text):
        assert parse_reference(text) == LiteralValue(text)


class TestIterReferences:
    def test_finds_nested_references_but_not_escaped_ones(self):
        value = {
            "to": "stepA.email",
            "cc": ["fetch[*].email", "someone@example.com"],
            "raw": {"_literal": "stepA.email"},
            "body": {"_generate": "stepA.email"},
        }

        refs = list(iter_references(value))

        assert refs == [ActionRef("stepA", ("email",)), MappedActionRef("fetch", ("email",))]

    def test_literal_escape_must_be_sole_key(self):
        assert is_literal_escape({"_literal": "x"})
        assert not is_literal_escape({"_literal": "x", "other": 1})


@dataclass
class User:
    email: str
    _secret: str = "hidden"


class TestExtractPath:
    def test_mapping_and_index(self):
        data = {"rows": [{"id": 1}, {"id": 2}]}

        assert extract_path(data, ("rows", 1, "id")) == 2

    def test_missing_key_returns_missing(self):
        assert extract_path({"a": 1}, ("b",)) is MISSING

    def test_out_of_range_returns_missing(self):
        assert extract_path([1], (3,)) is MISSING

    def test_attribute_access_on_objects(self):
        assert extract_path(User("a@x.com"), ("email",)) == "a@x.com"

    def test_private_attributes_not_followed(self):
        assert extract_path(User("a@x.com"), ("_secret",)) is MISSING

    def test_no_attribute_access_on_scalars(self):
        assert extract_path("text", ("upper",)) is MISSING

    def test_none_value_is_kept(self):
        assert extract_path({"a": None}, ("a",)) is None

    def test_missing_is_falsy(self):
        assert not MISSING


def test_format_path():
    assert format_path(("user", "items", 0, "id")) == "user.items[0].id"
