"""Parameter type coercion utilities.

Converts untyped input (strings from forms, values decoded from earlier
action results) into the types a function declares, or fails with a typed
error.

Two entry points:
1. ``coerce_value`` for arguments: lenient where a string representation is
   unambiguous ("42" -> 42, "true" -> True, '[1, 2]' -> [1, 2])
2. ``check_return_value`` for results: strict, no string coercion
"""

import logging
import math
import re
from collections.abc import Callable
from typing import Any, Optional

from sashi.core.exceptions import (
    InvalidEnumValueError,
    MissingRequiredParameterError,
    ReturnTypeMismatchError,
    TypeMismatchError,
)
from sashi.core.json_utils import try_parse_json
from sashi.core.param_spec import ParamSpec, ParamType

logger = logging.getLogger(__name__)

_INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")
_NUMBER_PATTERN = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


def _describe_value(value: Any) -> str:
    text = repr(value)
    if len(text) > 60:
        text = text[:57] + "..."
    return f"{text} ({type(value).__name__})"


def _mismatch(value: Any, spec: ParamSpec, path: str) -> TypeMismatchError:
    return TypeMismatchError(
        f"Parameter '{path}' expects {spec.type.value}, got {_describe_value(value)}",
        parameter=path,
    )


def _coerce_string(value: Any, spec: ParamSpec, path: str) -> Any:
    if isinstance(value, str):
        return value
    raise _mismatch(value, spec, path)


def _coerce_number(value: Any, spec: ParamSpec, path: str) -> Any:
    # bool is an int subclass but never a number here
    if isinstance(value, bool):
        raise _mismatch(value, spec, path)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise _mismatch(value, spec, path)
        return value
    if isinstance(value, str):
        text = value.strip()
        if _INTEGER_PATTERN.match(text):
            return int(text)
        if _NUMBER_PATTERN.match(text):
            number = float(text)
            if math.isfinite(number):
                return number
    raise _mismatch(value, spec, path)


def _coerce_boolean(value: Any, spec: ParamSpec, path: str) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise _mismatch(value, spec, path)


def _coerce_enum(value: Any, spec: ParamSpec, path: str) -> Any:
    allowed = spec.enum_values or ()
    if isinstance(value, str) and value in allowed:
        return value
    raise InvalidEnumValueError(
        f"Parameter '{path}' must be one of {list(allowed)}, got {_describe_value(value)}",
        parameter=path,
    )


def _coerce_array(value: Any, spec: ParamSpec, path: str) -> Any:
    if isinstance(value, str):
        success, parsed = try_parse_json(value)
        if success and isinstance(parsed, list):
            logger.debug(f"Decoded JSON string into array for '{path}'")
            value = parsed
    if isinstance(value, tuple):
        value = list(value)
    if not isinstance(value, list):
        raise _mismatch(value, spec, path)
    if spec.items is None:
        return value
    return [coerce_value(item, spec.items, f"{path}[{index}]") for index, item in enumerate(value)]


def _coerce_object(value: Any, spec: ParamSpec, path: str) -> Any:
    if isinstance(value, str):
        success, parsed = try_parse_json(value)
        if success and isinstance(parsed, dict):
            logger.debug(f"Decoded JSON string into object for '{path}'")
            value = parsed
    if not isinstance(value, dict):
        raise _mismatch(value, spec, path)
    if not spec.object_schema:
        return value

    coerced = dict(value)
    for field_spec in spec.object_schema:
        field_path = f"{path}.{field_spec.name}"
        field_value = value.get(field_spec.name)
        if field_value is None:
            if field_spec.required:
                raise MissingRequiredParameterError(
                    f"Missing required field '{field_path}'",
                    parameter=field_path,
                )
            continue
        coerced[field_spec.name] = coerce_value(field_value, field_spec, field_path)
    return coerced


_COERCION_DISPATCH: dict[ParamType, Callable[[Any, ParamSpec, str], Any]] = {
    ParamType.STRING: _coerce_string,
    ParamType.NUMBER: _coerce_number,
    ParamType.BOOLEAN: _coerce_boolean,
    ParamType.ENUM: _coerce_enum,
    ParamType.ARRAY: _coerce_array,
    ParamType.OBJECT: _coerce_object,
}


def coerce_value(value: Any, spec: ParamSpec, path: Optional[str] = None) -> Any:
    """Coerce a raw value to the type declared by ``spec``.

    Args:
        value: The supplied value (must not be None; callers handle absence)
        spec: Declared parameter schema
        path: Dotted name used in error messages (defaults to ``spec.name``)

    Returns:
        The coerced value

    Raises:
        TypeMismatchError: Value cannot represent the declared type
        InvalidEnumValueError: Value is not an exact enum member
        MissingRequiredParameterError: A required nested object field is absent

    Examples:
        >>> coerce_value("42", ParamSpec(name="n", type="number"))
        42
        >>> coerce_value("TRUE", ParamSpec(name="flag", type="boolean"))
        True
    """
    return _COERCION_DISPATCH[spec.type](value, spec, path or spec.name)


def _matches_declared_type(value: Any, spec: ParamSpec) -> bool:
    if spec.type == ParamType.STRING:
        return isinstance(value, str)
    if spec.type == ParamType.NUMBER:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if spec.type == ParamType.BOOLEAN:
        return isinstance(value, bool)
    if spec.type == ParamType.ENUM:
        return isinstance(value, str) and value in (spec.enum_values or ())
    if spec.type == ParamType.ARRAY:
        if not isinstance(value, list):
            return False
        return spec.items is None or all(_matches_declared_type(item, spec.items) for item in value)
    if spec.type == ParamType.OBJECT:
        if not isinstance(value, dict):
            return False
        for field_spec in spec.object_schema or ():
            field_value = value.get(field_spec.name)
            if field_value is None:
                if field_spec.required:
                    return False
                continue
            if not _matches_declared_type(field_value, field_spec):
                return False
        return True
    return False


def check_return_value(value: Any, spec: ParamSpec, function_name: str) -> None:
    """Validate a function result against its declared return spec.

    Raises:
        ReturnTypeMismatchError: If the result does not match
    """
    if value is None and not spec.required:
        return
    if not _matches_declared_type(value, spec):
        raise ReturnTypeMismatchError(
            f"Function '{function_name}' declared return type {spec.type.value}, got {_describe_value(value)}"
        )
