"""Resolve an action's raw parameters into concrete values.

Precedence for each raw value:
1. ``{"_generate": ...}`` -> generation hook
2. ``{"_literal": v}`` -> ``v`` untouched
3. reference strings -> user input or an earlier action's result
4. dicts and lists -> resolved element by element
5. anything else -> passed through
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from sashi.core.exceptions import (
    GenerationFailedError,
    UnresolvedReferenceError,
    WorkflowRuntimeError,
)
from sashi.core.references import (
    LITERAL_KEY,
    MISSING,
    ActionRef,
    IndexedActionRef,
    LiteralValue,
    MappedActionRef,
    UserInputRef,
    extract_path,
    format_path,
    is_generate_directive,
    is_literal_escape,
    parse_reference,
)
from sashi.core.workflow_models import GenerateDirective
from sashi.runtime.context import ExecutionContext
from sashi.runtime.generation import Generator, parse_generated_output

logger = logging.getLogger(__name__)


class ParameterResolver:
    """Evaluates parameter expressions against an ``ExecutionContext``."""

    def __init__(self, context: ExecutionContext, generator: Optional[Generator] = None):
        self.context = context
        self.generator = generator

    async def resolve_parameters(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        """Resolve every parameter of an action.

        Parameters whose expression resolves to nothing (a missing user input
        field, an absent result field) are left out, so the registry can
        report them as missing if they are required.

        Raises:
            UnresolvedReferenceError: A referenced action has no stored result
            GenerationFailedError: The generation hook failed
            GenerationOutputInvalidError: Generated output could not be parsed
        """
        resolved: dict[str, Any] = {}
        for name, raw in parameters.items():
            try:
                value = await self.resolve(raw)
            except WorkflowRuntimeError as e:
                if e.parameter is None:
                    e.parameter = name
                raise
            if value is MISSING:
                logger.debug(f"Parameter '{name}' resolved to nothing; omitting it")
                continue
            resolved[name] = value
        return resolved

    async def resolve(self, raw: Any) -> Any:
        """Resolve a single raw value (may return ``MISSING``)."""
        if is_generate_directive(raw):
            return await self._generate(raw)
        if is_literal_escape(raw):
            return raw[LITERAL_KEY]
        if isinstance(raw, str):
            expression = parse_reference(raw)
            if isinstance(expression, LiteralValue):
                return raw
            logger.debug(f"Resolving reference {describe_expression(expression)}")
            return self.evaluate(expression)
        if isinstance(raw, Mapping):
            resolved_dict = {}
            for key, item in raw.items():
                value = await self.resolve(item)
                if value is not MISSING:
                    resolved_dict[key] = value
            return resolved_dict
        if isinstance(raw, list):
            items = []
            for item in raw:
                value = await self.resolve(item)
                items.append(None if value is MISSING else value)
            return items
        return raw

    def evaluate(self, expression: Any) -> Any:
        """Evaluate a parsed expression against the current context."""
        if isinstance(expression, LiteralValue):
            return expression.value
        if isinstance(expression, UserInputRef):
            return extract_path(self.context.user_input, expression.path)

        stored = self._stored_result(expression.action_id)

        if isinstance(expression, ActionRef):
            return extract_path(stored, expression.path)

        if isinstance(expression, MappedActionRef):
            if not isinstance(stored, (list, tuple)):
                raise UnresolvedReferenceError(
                    f"'{expression.action_id}[*]' needs an array result, got {type(stored).__name__}"
                )
            values = []
            for element in stored:
                value = extract_path(element, expression.path)
                values.append(None if value is MISSING else value)
            return values

        if isinstance(expression, IndexedActionRef):
            element = self._select(expression, stored)
            return extract_path(element, expression.path)

        raise TypeError(f"Unsupported expression: {expression!r}")

    def _stored_result(self, action_id: str) -> Any:
        if action_id not in self.context.action_ids:
            raise UnresolvedReferenceError(f"Action '{action_id}' is not declared in this workflow")
        if not self.context.has_result(action_id):
            raise UnresolvedReferenceError(f"Action '{action_id}' has no result (it failed or has not run)")
        return self.context.results[action_id]

    def _select(self, expression: IndexedActionRef, stored: Any) -> Any:
        label = f"{expression.action_id}[{expression.index}]"
        if not isinstance(stored, (list, tuple)):
            raise UnresolvedReferenceError(f"'{label}' needs an array result, got {type(stored).__name__}")
        if not stored:
            raise UnresolvedReferenceError(f"'{label}' refers into an empty array")
        if expression.index == "first":
            return stored[0]
        if expression.index == "last":
            return stored[-1]
        index = int(expression.index)
        if index >= len(stored):
            raise UnresolvedReferenceError(f"'{label}' is out of range (array has {len(stored)} elements)")
        return stored[index]

    async def _generate(self, raw: Mapping[str, Any]) -> Any:
        try:
            directive = GenerateDirective.model_validate(raw)
        except PydanticValidationError as e:
            raise GenerationFailedError(f"Invalid generation directive: {e.errors()[0]['msg']}") from e

        if self.generator is None:
            raise GenerationFailedError("No generator is configured for _generate parameters")

        logger.debug(f"Generating parameter value ({directive.context.value})")
        try:
            output = await self.generator.generate(directive.prompt, directive.context)
        except WorkflowRuntimeError:
            raise
        except Exception as e:
            raise GenerationFailedError(f"{type(e).__name__}: {e}") from e
        return parse_generated_output(output, directive.context)


def describe_expression(expression: Any) -> str:
    """Human-readable form of a parsed expression, for logs and error messages."""
    if isinstance(expression, LiteralValue):
        return repr(expression.value)
    if isinstance(expression, UserInputRef):
        return f"userInput.{format_path(expression.path)}"
    path = format_path(expression.path)
    suffix = f".{path}" if path and not path.startswith("[") else path
    if isinstance(expression, MappedActionRef):
        return f"{expression.action_id}[*]{suffix}"
    if isinstance(expression, IndexedActionRef):
        return f"{expression.action_id}[{expression.index}]{suffix}"
    return f"{expression.action_id}{suffix}"

