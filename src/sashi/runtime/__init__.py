"""Runtime: compiles workflow documents to pocketflow flows and executes them."""

from sashi.runtime.compiler import compile_workflow
from sashi.runtime.context import ExecutionContext
from sashi.runtime.generation import Generator, LLMGenerator, parse_generated_output
from sashi.runtime.map_node import expand_map_arguments
from sashi.runtime.parameter_resolver import ParameterResolver
from sashi.runtime.workflow_executor import WorkflowExecutor, execute_workflow

__all__ = [
    "ExecutionContext",
    "Generator",
    "LLMGenerator",
    "ParameterResolver",
    "WorkflowExecutor",
    "compile_workflow",
    "execute_workflow",
    "expand_map_arguments",
    "parse_generated_output",
]
