"""Function descriptor types."""

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from sashi.core.param_spec import ParamSpec


class CallingConvention(str, Enum):
    """How an implementation receives its arguments.

    POSITIONAL calls ``fn(*args)`` in declared parameter order, KEYWORD calls
    ``fn(**kwargs)`` with only the supplied parameters.
    """

    POSITIONAL = "positional"
    KEYWORD = "keyword"


@dataclass
class FunctionDescriptor:
    """A registered function: schema plus implementation.

    Attributes:
        name: Unique identifier within a registry
        description: Text shown to the planner
        implementation: Sync or async callable
        parameters: Ordered parameter specs
        returns: Optional declared result shape
        calling_convention: Argument passing style
        hidden: Excluded from UI metadata (still callable, still in the tool feed)
        needs_confirmation: Surfaced to the UI before running
    """

    name: str
    description: str
    implementation: Callable[..., Any]
    parameters: list[ParamSpec] = field(default_factory=list)
    returns: Optional[ParamSpec] = None
    calling_convention: CallingConvention = CallingConvention.POSITIONAL
    hidden: bool = False
    needs_confirmation: bool = False

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.implementation)

    def get_parameter(self, name: str) -> Optional[ParamSpec]:
        for spec in self.parameters:
            if spec.name == name:
                return spec
        return None
