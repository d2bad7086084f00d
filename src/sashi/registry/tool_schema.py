"""Tool-description generation for planners.

The shape produced here is the contract an external planner consumes to
decide what to call, so it must follow the coercion rules exactly: enum
parameters surface as ``enum``, arrays carry their item schema and objects
their nested fields.
"""

from typing import Any

from sashi.core.param_spec import ParamSpec, ParamType
from sashi.registry.types import FunctionDescriptor


def describe_param(spec: ParamSpec) -> dict[str, Any]:
    """Describe a single parameter as a JSON-serialisable dict."""
    schema: dict[str, Any] = {"type": spec.type.value}
    if spec.description:
        schema["description"] = spec.description

    if spec.type == ParamType.ENUM:
        schema["enum"] = list(spec.enum_values or ())
    elif spec.type == ParamType.ARRAY and spec.items is not None:
        schema["items"] = describe_param(spec.items)
    elif spec.type == ParamType.OBJECT and spec.object_schema:
        schema["properties"] = {field.name: describe_param(field) for field in spec.object_schema}
        schema["required"] = [field.name for field in spec.object_schema if field.required]

    return schema


def describe_function(name: str, descriptor: FunctionDescriptor) -> dict[str, Any]:
    """Describe a function in the tool feed shape.

    Returns:
        ``{name, description, parameters: {param: schema}, required: [...]}``,
        plus ``returns`` when the function declares one
    """
    description: dict[str, Any] = {
        "name": name,
        "description": descriptor.description,
        "parameters": {spec.name: describe_param(spec) for spec in descriptor.parameters},
        "required": [spec.name for spec in descriptor.parameters if spec.required],
    }
    if descriptor.returns is not None:
        description["returns"] = describe_param(descriptor.returns)
    return description
