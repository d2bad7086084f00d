"""Workflow execution entry points.

``WorkflowExecutor`` ties the pieces together for one ``execute`` call:

1. Pre-flight: structural, model and semantic validation. Any problem raises
   ``WorkflowValidationError`` before a single function runs.
2. A fresh ``ExecutionContext`` and ``ReportBuilder``.
3. Compile to a sequential pocketflow flow and run it, optionally under a
   deadline.
4. Return the ``ExecutionReport``.

Per-action failures never propagate out of the flow; they are recorded in
the report and later actions keep running.
"""

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any, Optional

from sashi.core.workflow_validator import VerificationResult, WorkflowInput, WorkflowValidator, load_workflow
from sashi.execution.report import ExecutionReport, ReportBuilder
from sashi.registry import FunctionRegistry
from sashi.runtime.action_node import CONTEXT_KEY, CURRENT_ACTION_KEY, REPORT_KEY
from sashi.runtime.compiler import compile_workflow
from sashi.runtime.context import ExecutionContext
from sashi.runtime.generation import Generator

logger = logging.getLogger(__name__)


class WorkflowExecutor:
    """Executes workflow documents against a function registry."""

    def __init__(
        self,
        registry: FunctionRegistry,
        generator: Optional[Generator] = None,
        *,
        default_timeout: Optional[float] = None,
    ):
        """Initialize the executor.

        Args:
            registry: Registry shared read-only by every execution
            generator: Hook for ``_generate``/``_transform`` directives
            default_timeout: Deadline in seconds applied when ``execute`` gets none
        """
        self.registry = registry
        self.generator = generator
        self.default_timeout = default_timeout

    def verify(self, document: WorkflowInput) -> VerificationResult:
        """Run the pre-flight checks without executing anything."""
        return WorkflowValidator.verify(document, self.registry)

    async def execute(
        self,
        document: WorkflowInput,
        user_input: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> ExecutionReport:
        """Execute a workflow and report every action's outcome.

        Args:
            document: Workflow as a model, dict or JSON string
            user_input: Values available to ``userInput.<field>`` references
            timeout: Deadline in seconds for the whole run

        Returns:
            ExecutionReport with one entry per action

        Raises:
            WorkflowValidationError: Pre-flight validation failed
        """
        workflow = load_workflow(document, self.registry)
        deadline = timeout if timeout is not None else self.default_timeout

        context = ExecutionContext(
            user_input=dict(user_input or {}),
            action_ids=frozenset(workflow.action_ids),
        )
        report = ReportBuilder()
        shared: dict[str, Any] = {CONTEXT_KEY: context, REPORT_KEY: report}
        flow = compile_workflow(workflow, self.registry, self.generator)

        logger.info(
            f"Executing workflow with {len(workflow.actions)} actions",
            extra={"phase": "execution", "action_count": len(workflow.actions)},
        )
        start = time.perf_counter()
        try:
            if deadline is None:
                await flow.run_async(shared)
            else:
                await asyncio.wait_for(flow.run_async(shared), timeout=deadline)
        except asyncio.TimeoutError:
            in_flight = shared.get(CURRENT_ACTION_KEY)
            logger.warning(
                f"Workflow exceeded timeout of {deadline}s",
                extra={"phase": "execution", "action_id": in_flight},
            )
            if in_flight is not None:
                report.abort_remaining([in_flight], f"Timed out after {deadline}s while running")
            report.abort_remaining(workflow.action_ids, f"Not started: workflow timed out after {deadline}s")

        result = report.build()
        logger.info(
            f"Workflow finished: {len(result.results)} succeeded, {len(result.errors)} failed",
            extra={"phase": "complete", "duration": round(time.perf_counter() - start, 3)},
        )
        return result

    def execute_sync(
        self,
        document: WorkflowInput,
        user_input: Optional[Mapping[str, Any]] = None,
        *,
        timeout: Optional[float] = None,
    ) -> ExecutionReport:
        """Blocking wrapper around ``execute`` for code without an event loop."""
        return asyncio.run(self.execute(document, user_input, timeout=timeout))


def execute_workflow(
    document: WorkflowInput,
    registry: FunctionRegistry,
    user_input: Optional[Mapping[str, Any]] = None,
    *,
    generator: Optional[Generator] = None,
    timeout: Optional[float] = None,
) -> ExecutionReport:
    """Execute a workflow synchronously with a one-off executor.

    Example:
        >>> report = execute_workflow(
        ...     {"type": "workflow", "actions": [{"id": "sum", "tool": "add", "parameters": {"a": 1, "b": 2}}]},
        ...     registry,
        ... )
        >>> report.to_dict()
        {'success': True, 'results': [{'actionId': 'sum', 'result': 3}], 'errors': []}
    """
    executor = WorkflowExecutor(registry, generator)
    return executor.execute_sync(document, user_input, timeout=timeout)
