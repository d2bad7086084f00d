"""Text helpers: substring extraction, regex replacement, encoding, format checks."""

import base64
import binascii
import json
import re
from typing import Any, Optional

from sashi.core.param_spec import ParamSpec, ParamType
from sashi.registry.types import FunctionDescriptor

_FORMAT_PATTERNS: dict[str, re.Pattern] = {
    "email": re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$"),
    "phone": re.compile(r"^\+?[\d\s\-()]{10,}$"),
    "url": re.compile(r"^https?://.+"),
    "number": re.compile(r"^\d+(\.\d+)?$"),
    "date": re.compile(r"^\d{4}-\d{2}-\d{2}"),
}

DATA_RESULT = ParamSpec(
    name="DataResult",
    type=ParamType.OBJECT,
    description="result of a data operation",
    object_schema=(
        ParamSpec(name="result", type=ParamType.STRING, description="the operation result"),
        ParamSpec(name="operation", type=ParamType.STRING, description="the operation that was performed"),
    ),
)


def extract(text: str, start: float, end: Optional[float] = None) -> dict[str, Any]:
    begin = int(start)
    stop = int(end) if end is not None else None
    return {"result": text[begin:stop], "operation": f'extract("{text}", {begin}, {stop if stop is not None else "end"})'}


def replace(text: str, search: str, replacement: str) -> dict[str, Any]:
    try:
        result = re.sub(search, replacement, text)
    except re.error as e:
        raise ValueError(f"Invalid search pattern '{search}': {e}") from e
    return {"result": result, "operation": f'replace("{text}", "{search}", "{replacement}")'}


def base64_encode(data: Any) -> str:
    text = data if isinstance(data, str) else json.dumps(data)
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def base64_decode(encoded: str) -> str:
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"Not valid base64 text: {e}") from e


def validate_format(data: str, format: str) -> dict[str, Any]:
    pattern = _FORMAT_PATTERNS.get(format.lower())
    return {
        "data": data,
        "format": format,
        "isValid": bool(pattern.match(data)) if pattern else False,
        "checked": pattern is not None,
    }


def descriptors() -> list[FunctionDescriptor]:
    return [
        FunctionDescriptor(
            name="extract",
            description="extract a substring from text using start and end positions",
            implementation=extract,
            parameters=[
                ParamSpec(name="text", type=ParamType.STRING, description="the text to extract from"),
                ParamSpec(name="start", type=ParamType.NUMBER, description="starting position (0-based)"),
                ParamSpec(
                    name="end",
                    type=ParamType.NUMBER,
                    description="ending position (optional, defaults to end of string)",
                    required=False,
                ),
            ],
            returns=DATA_RESULT,
        ),
        FunctionDescriptor(
            name="replace",
            description="replace every match of a regular expression in a string",
            implementation=replace,
            parameters=[
                ParamSpec(name="text", type=ParamType.STRING, description="the original text"),
                ParamSpec(name="search", type=ParamType.STRING, description="pattern to search for"),
                ParamSpec(name="replace", type=ParamType.STRING, description="text to replace with"),
            ],
            returns=DATA_RESULT,
        ),
        FunctionDescriptor(
            name="base64Encode",
            description="Encode text as base64",
            implementation=base64_encode,
            parameters=[ParamSpec(name="data", type=ParamType.STRING, description="Text to encode")],
            returns=ParamSpec(name="encoded", type=ParamType.STRING),
        ),
        FunctionDescriptor(
            name="base64Decode",
            description="Decode base64 text back to original",
            implementation=base64_decode,
            parameters=[ParamSpec(name="encoded", type=ParamType.STRING, description="Base64 encoded text")],
            returns=ParamSpec(name="decoded", type=ParamType.STRING),
        ),
        FunctionDescriptor(
            name="validateFormat",
            description="Validate if data matches expected format (email, phone, url, number, date)",
            implementation=validate_format,
            parameters=[
                ParamSpec(name="data", type=ParamType.STRING, description="Data to validate"),
                ParamSpec(
                    name="format",
                    type=ParamType.ENUM,
                    description="Format type",
                    enum_values=tuple(_FORMAT_PATTERNS),
                ),
            ],
        ),
    ]
