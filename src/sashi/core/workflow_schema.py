"""JSON Schema for workflow documents.

Structural validation runs before the document is parsed into models so that
planner mistakes come back with a path and a hint instead of a pydantic
traceback.

Example:
    >>> validate_workflow_structure({
    ...     "type": "workflow",
    ...     "actions": [{"id": "sum", "tool": "add", "parameters": {"a": 1, "b": 2}}],
    ... })
"""

import json
from typing import Any, Union

import jsonschema
from jsonschema import Draft7Validator
from jsonschema import ValidationError as JsonSchemaValidationError
from jsonschema.exceptions import best_match

from sashi.core.exceptions import WorkflowSchemaError
from sashi.core.workflow_models import ACTION_ID_PATTERN, GenerationContext

_CONTEXTS = [context.value for context in GenerationContext]

WORKFLOW_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Sashi workflow",
    "type": "object",
    "required": ["type", "actions"],
    "properties": {
        "type": {"const": "workflow"},
        "description": {"type": ["string", "null"]},
        "actions": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["id", "tool"],
                "properties": {
                    "id": {"type": "string", "pattern": ACTION_ID_PATTERN},
                    "tool": {"type": "string", "minLength": 1},
                    "description": {"type": "string"},
                    "parameters": {"type": "object"},
                    "parameterMetadata": {
                        "type": "object",
                        "additionalProperties": {"type": "object"},
                    },
                    "map": {"type": "boolean"},
                    "_transform": {
                        "type": "object",
                        "required": ["_transform"],
                        "properties": {
                            "_transform": {"type": "string"},
                            "_context": {"enum": _CONTEXTS},
                        },
                    },
                },
            },
        },
        "ui": {"type": ["object", "null"]},
    },
}


def _format_path(path: list) -> str:
    """Format a jsonschema path into a readable string like ``actions[0].tool``."""
    formatted = ""
    for component in path:
        if isinstance(component, int):
            formatted += f"[{component}]"
        else:
            formatted += f".{component}" if formatted else str(component)
    return formatted or "root"


def _get_suggestion(error: JsonSchemaValidationError) -> str:
    path_str = _format_path(list(error.absolute_path))

    if error.validator == "required":
        match = error.message.split("'")
        if len(match) >= 2:
            return f"Add the required field '{match[1]}'"
        return "Add the missing required field"
    elif error.validator == "const" and path_str == "type":
        return 'Set "type" to "workflow"'
    elif error.validator == "type":
        return f"Change type from '{type(error.instance).__name__}' to '{error.validator_value}'"
    elif error.validator == "pattern" and path_str.endswith(".id"):
        return "Action ids start with a letter or underscore and contain only letters, digits, '_' or '-'"
    elif error.validator == "minItems":
        return "Add at least one action to the workflow"
    elif error.validator == "enum" and "_context" in path_str:
        return f"Use one of: {', '.join(_CONTEXTS)}"
    return ""


def validate_workflow_structure(data: Union[dict[str, Any], str]) -> dict[str, Any]:
    """Validate a workflow document against ``WORKFLOW_SCHEMA``.

    Args:
        data: The document (dict or JSON string)

    Returns:
        The document as a dict

    Raises:
        WorkflowSchemaError: Most relevant structural error, with path and suggestion
    """
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise WorkflowSchemaError(f"Invalid JSON: {e}") from e

    validator = Draft7Validator(WORKFLOW_SCHEMA)
    try:
        validator.check_schema(WORKFLOW_SCHEMA)
    except jsonschema.SchemaError as e:
        raise RuntimeError(f"Schema definition error: {e}") from e

    error = best_match(validator.iter_errors(data))
    if error is not None:
        raise WorkflowSchemaError(
            message=error.message,
            path=_format_path(list(error.absolute_path)),
            suggestion=_get_suggestion(error),
        )
    return data
