"""sashi: typed function registry and workflow execution engine for admin tooling."""

__version__ = "0.1.0"

from sashi.core.param_spec import ParamSpec, ParamType  # noqa: E402
from sashi.execution.report import ExecutionReport  # noqa: E402
from sashi.registry import CallingConvention, FunctionDescriptor, FunctionRegistry  # noqa: E402
from sashi.runtime import Generator, LLMGenerator, WorkflowExecutor, execute_workflow  # noqa: E402

__all__ = [
    "CallingConvention",
    "ExecutionReport",
    "FunctionDescriptor",
    "FunctionRegistry",
    "Generator",
    "LLMGenerator",
    "ParamSpec",
    "ParamType",
    "WorkflowExecutor",
    "__version__",
    "execute_workflow",
]
