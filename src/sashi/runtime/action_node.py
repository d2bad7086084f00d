"""pocketflow node executing one workflow action.

Lifecycle per action:
- prep: fetch the execution context from the shared store
- exec: resolve parameters -> invoke the function -> apply ``_transform``
- exec_fallback: turn any failure into an ``ActionFailure`` record
- post: store the result in the context and record the outcome

Failures never escape the node, so the flow always moves on to the next
action. Nodes are built with ``max_retries=1``: the engine does not retry.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pocketflow import AsyncNode

from sashi.core.exceptions import (
    GenerationFailedError,
    ImplementationError,
    WorkflowRuntimeError,
)
from sashi.core.workflow_models import WorkflowAction
from sashi.registry import FunctionRegistry
from sashi.runtime.context import ExecutionContext
from sashi.runtime.generation import Generator, parse_generated_output
from sashi.runtime.parameter_resolver import ParameterResolver

logger = logging.getLogger(__name__)

CONTEXT_KEY = "__context__"
REPORT_KEY = "__report__"
CURRENT_ACTION_KEY = "__current_action__"


@dataclass
class ActionFailure:
    """Marker returned by ``exec_fallback_async`` in place of a result."""

    error: WorkflowRuntimeError


class ActionNode(AsyncNode):
    """Runs a single action against the registry.

    The action and its collaborators are node attributes rather than
    ``params``: pocketflow overwrites ``params`` with flow params on every run.
    """

    def __init__(self, action: WorkflowAction, registry: FunctionRegistry, generator: Optional[Generator] = None):
        super().__init__(max_retries=1)
        self.action = action
        self.registry = registry
        self.generator = generator

    async def prep_async(self, shared: dict[str, Any]) -> ExecutionContext:
        shared[CURRENT_ACTION_KEY] = self.action.id
        return shared[CONTEXT_KEY]

    async def exec_async(self, prep_res: ExecutionContext) -> Any:
        resolver = ParameterResolver(prep_res, self.generator)
        arguments = await resolver.resolve_parameters(self.action.parameters)
        raw_result = await self._invoke(arguments)
        return await self._apply_transform(raw_result)

    async def _invoke(self, arguments: dict[str, Any]) -> Any:
        return await self.registry.invoke(self.action.tool, arguments)

    async def _apply_transform(self, raw_result: Any) -> Any:
        directive = self.action.transform
        if directive is None:
            return raw_result
        if self.generator is None:
            raise GenerationFailedError("No generator is configured for _transform")

        logger.debug(f"Transforming result of '{self.action.id}'", extra={"action_id": self.action.id})
        try:
            output = await self.generator.transform(raw_result, directive.prompt, directive.context)
        except WorkflowRuntimeError:
            raise
        except Exception as e:
            raise GenerationFailedError(f"{type(e).__name__}: {e}") from e
        return parse_generated_output(output, directive.context)

    async def exec_fallback_async(self, prep_res: ExecutionContext, exc: Exception) -> ActionFailure:
        error = exc if isinstance(exc, WorkflowRuntimeError) else ImplementationError.wrap(exc)
        error.action_id = self.action.id
        return ActionFailure(error)

    async def post_async(self, shared: dict[str, Any], prep_res: ExecutionContext, exec_res: Any) -> str:
        report = shared[REPORT_KEY]
        if isinstance(exec_res, ActionFailure):
            logger.warning(
                f"Action '{self.action.id}' failed: {exec_res.error.describe()}",
                extra={"action_id": self.action.id, "tool": self.action.tool, "kind": exec_res.error.kind},
            )
            report.record_failure(self.action.id, exec_res.error)
        else:
            prep_res.results[self.action.id] = exec_res
            report.record_success(self.action.id, exec_res)
            logger.debug(f"Action '{self.action.id}' completed", extra={"action_id": self.action.id})
        shared.pop(CURRENT_ACTION_KEY, None)
        return "default"
