"""Reference expressions used in workflow action parameters.

A parameter string can name a user-input field or another action's result
instead of carrying a literal value:

- ``userInput.email``          -> field of the caller-supplied input
- ``fetch.user.name``          -> nested field of action ``fetch``'s result
- ``fetch[*].email``           -> ``email`` of every element of ``fetch``'s result
- ``fetch[0].email``           -> element selection (``[n]``, ``[first]``, ``[last]``)
- ``fetch.rows[2].id``         -> list indices inside a path

A string is a reference when the whole string matches this grammar and
carries a path or a selector. Parsing does not look at which actions exist:
``usr.name`` parses as a reference to action ``usr``, and the validator and
resolver reject it as unresolved when no such action is declared. Strings
outside the grammar ("a@x.com", "v1.2", "hello world") and bare identifiers
("stepA", "userInput") are literals. Dotted text that must stay literal,
such as a file name, is written ``{"_literal": "report.csv"}``.
"""

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Union

USER_INPUT = "userInput"
GENERATE_KEY = "_generate"
TRANSFORM_KEY = "_transform"
CONTEXT_KEY = "_context"
LITERAL_KEY = "_literal"

PathSegment = Union[str, int]

_REFERENCE_PATTERN = re.compile(
    r"^(?P<head>[A-Za-z_][A-Za-z0-9_-]*)"
    r"(?:\[(?P<selector>\*|\d+|first|last)\])?"
    r"(?P<path>(?:\.[A-Za-z_][A-Za-z0-9_-]*(?:\[\d+\])*)*)$"
)
_SEGMENT_PATTERN = re.compile(r"([A-Za-z_][A-Za-z0-9_-]*)((?:\[\d+\])*)")
_SCALAR_TYPES = (str, bytes, int, float, bool, list, tuple)


class _Missing:
    """Marker for a value that could not be found."""

    _instance = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


@dataclass(frozen=True)
class LiteralValue:
    value: Any


@dataclass(frozen=True)
class UserInputRef:
    path: tuple[PathSegment, ...]


@dataclass(frozen=True)
class ActionRef:
    action_id: str
    path: tuple[PathSegment, ...]


@dataclass(frozen=True)
class MappedActionRef:
    action_id: str
    path: tuple[PathSegment, ...]


@dataclass(frozen=True)
class IndexedActionRef:
    action_id: str
    index: Union[int, str]
    path: tuple[PathSegment, ...]


Reference = Union[UserInputRef, ActionRef, MappedActionRef, IndexedActionRef]
Expression = Union[LiteralValue, Reference]


def _parse_path(text: str) -> tuple[PathSegment, ...]:
    segments: list[PathSegment] = []
    for part in text.split(".")[1:]:
        match = _SEGMENT_PATTERN.fullmatch(part)
        if match is None:  # pragma: no cover - guarded by _REFERENCE_PATTERN
            raise ValueError(f"Invalid path segment '{part}'")
        segments.append(match.group(1))
        segments.extend(int(index) for index in re.findall(r"\[(\d+)\]", match.group(2)))
    return tuple(segments)


def parse_reference(text: str) -> Expression:
    """Parse a parameter string into a typed expression.

    Args:
        text: The raw parameter string

    Returns:
        A reference node, or ``LiteralValue(text)`` when the string is not a reference

    Examples:
        >>> parse_reference("stepA.email")
        ActionRef(action_id='stepA', path=('email',))
        >>> parse_reference("a@x.com")
        LiteralValue(value='a@x.com')
    """
    match = _REFERENCE_PATTERN.match(text)
    if match is None:
        return LiteralValue(text)

    head = match.group("head")
    selector = match.group("selector")
    path = _parse_path(match.group("path"))

    if head == USER_INPUT:
        if selector is None and path:
            return UserInputRef(path)
        return LiteralValue(text)

    if selector is None:
        if not path:
            return LiteralValue(text)
        return ActionRef(head, path)
    if selector == "*":
        return MappedActionRef(head, path)
    if selector.isdigit():
        return IndexedActionRef(head, int(selector), path)
    return IndexedActionRef(head, selector, path)


def is_generate_directive(value: Any) -> bool:
    return isinstance(value, Mapping) and GENERATE_KEY in value


def is_literal_escape(value: Any) -> bool:
    return isinstance(value, Mapping) and set(value) == {LITERAL_KEY}


def iter_references(value: Any) -> Iterator[Reference]:
    """Yield every reference found in a (possibly nested) parameter value."""
    if isinstance(value, str):
        expression = parse_reference(value)
        if not isinstance(expression, LiteralValue):
            yield expression
    elif is_literal_escape(value) or is_generate_directive(value):
        return
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from iter_references(item)
    elif isinstance(value, list):
        for item in value:
            yield from iter_references(item)


def extract_path(value: Any, path: tuple[PathSegment, ...]) -> Any:
    """Walk ``path`` into ``value``.

    Mapping keys, sequence indices and public attributes of plain objects
    (dataclasses, pydantic models) are followed.

    Returns:
        The value at the end of the path, or ``MISSING`` when any step is absent
    """
    current = value
    for segment in path:
        if isinstance(segment, int):
            if isinstance(current, (list, tuple)) and 0 <= segment < len(current):
                current = current[segment]
            else:
                return MISSING
        elif isinstance(current, Mapping):
            if segment not in current:
                return MISSING
            current = current[segment]
        elif current is None or isinstance(current, _SCALAR_TYPES) or segment.startswith("_"):
            return MISSING
        else:
            current = getattr(current, segment, MISSING)
            if current is MISSING:
                return MISSING
    return current


def format_path(path: tuple[PathSegment, ...]) -> str:
    """Render a path as written in an expression, e.g. ``user.items[0].id``."""
    formatted = ""
    for segment in path:
        if isinstance(segment, int):
            formatted += f"[{segment}]"
        else:
            formatted += f".{segment}" if formatted else segment
    return formatted
