"""Arithmetic helpers: add, subtract, multiply, divide, round.

Each returns ``{"result": number, "operation": str}`` so a workflow can show
what was computed.
"""

import math
from functools import reduce
from typing import Any, Optional

from sashi.core.param_spec import ParamSpec, ParamType
from sashi.registry.types import FunctionDescriptor

_NUMBERS = ParamSpec(
    name="numbers",
    type=ParamType.ARRAY,
    description="array of numbers",
    items=ParamSpec(name="number", type=ParamType.NUMBER),
)

MATH_RESULT = ParamSpec(
    name="MathResult",
    type=ParamType.OBJECT,
    description="result of a mathematical operation",
    object_schema=(
        ParamSpec(name="result", type=ParamType.NUMBER, description="the calculated result"),
        ParamSpec(name="operation", type=ParamType.STRING, description="the operation that was performed"),
    ),
)


def _describe(name: str, numbers: list[Any]) -> str:
    return f"{name}({', '.join(str(n) for n in numbers)})"


def _require_two(numbers: list[float], verb: str) -> None:
    if len(numbers) < 2:
        raise ValueError(f"At least 2 numbers are required for {verb}")


def add(numbers: list[float]) -> dict[str, Any]:
    return {"result": sum(numbers), "operation": _describe("add", numbers)}


def subtract(numbers: list[float]) -> dict[str, Any]:
    _require_two(numbers, "subtraction")
    return {"result": reduce(lambda a, b: a - b, numbers), "operation": _describe("subtract", numbers)}


def multiply(numbers: list[float]) -> dict[str, Any]:
    return {"result": reduce(lambda a, b: a * b, numbers, 1), "operation": _describe("multiply", numbers)}


def divide(numbers: list[float]) -> dict[str, Any]:
    _require_two(numbers, "division")
    if any(n == 0 for n in numbers[1:]):
        raise ZeroDivisionError("Cannot divide by zero")
    return {"result": reduce(lambda a, b: a / b, numbers), "operation": _describe("divide", numbers)}


def round_number(number: float, decimals: Optional[int] = None) -> dict[str, Any]:
    places = int(decimals or 0)
    factor = 10**places
    # half-up, not Python's round-half-even
    result = math.floor(number * factor + 0.5) / factor
    if places <= 0:
        result = int(result)
    return {"result": result, "operation": f"round({number}, {places})"}


def descriptors() -> list[FunctionDescriptor]:
    return [
        FunctionDescriptor(
            name="add",
            description="add two or more numbers together",
            implementation=add,
            parameters=[_NUMBERS],
            returns=MATH_RESULT,
        ),
        FunctionDescriptor(
            name="subtract",
            description="subtract numbers from left to right",
            implementation=subtract,
            parameters=[_NUMBERS],
            returns=MATH_RESULT,
        ),
        FunctionDescriptor(
            name="multiply",
            description="multiply two or more numbers together",
            implementation=multiply,
            parameters=[_NUMBERS],
            returns=MATH_RESULT,
        ),
        FunctionDescriptor(
            name="divide",
            description="divide numbers from left to right",
            implementation=divide,
            parameters=[_NUMBERS],
            returns=MATH_RESULT,
        ),
        FunctionDescriptor(
            name="round",
            description="round a number to the nearest integer or specified decimal places",
            implementation=round_number,
            parameters=[
                ParamSpec(name="number", type=ParamType.NUMBER, description="the number to round"),
                ParamSpec(
                    name="decimals",
                    type=ParamType.NUMBER,
                    description="number of decimal places (default: 0)",
                    required=False,
                ),
            ],
            returns=MATH_RESULT,
        ),
    ]
