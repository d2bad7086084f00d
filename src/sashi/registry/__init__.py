"""Function registry: typed descriptors, invocation and tool descriptions."""

from sashi.registry.registry import FunctionRegistry
from sashi.registry.tool_schema import describe_function, describe_param
from sashi.registry.types import CallingConvention, FunctionDescriptor

__all__ = [
    "CallingConvention",
    "FunctionDescriptor",
    "FunctionRegistry",
    "describe_function",
    "describe_param",
]
