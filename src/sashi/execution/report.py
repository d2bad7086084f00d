"""Execution report models.

The report is the only thing a caller gets back from ``execute``: one entry
per action, either in ``results`` or in ``errors``, in execution order.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sashi.core.exceptions import ExecutionAbortedError, WorkflowRuntimeError

logger = logging.getLogger(__name__)


class ActionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action_id: str = Field(..., alias="actionId")
    result: Any = None


class ActionError(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action_id: str = Field(..., alias="actionId")
    error: str
    kind: str


class ExecutionReport(BaseModel):
    """Outcome of one workflow execution.

    Attributes:
        success: True only when every action completed without error
        results: Successful actions, in execution order
        errors: Failed actions, in execution order
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    results: list[ActionResult] = Field(default_factory=list)
    errors: list[ActionError] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serialise with camelCase keys (``actionId``)."""
        return self.model_dump(by_alias=True)

    def result_for(self, action_id: str) -> Any:
        for entry in self.results:
            if entry.action_id == action_id:
                return entry.result
        raise KeyError(action_id)

    def error_for(self, action_id: str) -> ActionError:
        for entry in self.errors:
            if entry.action_id == action_id:
                return entry
        raise KeyError(action_id)


class ReportBuilder:
    """Accumulates per-action outcomes while a workflow runs."""

    def __init__(self) -> None:
        self._results: list[ActionResult] = []
        self._errors: list[ActionError] = []
        self._recorded: set[str] = set()

    def has_outcome(self, action_id: str) -> bool:
        return action_id in self._recorded

    def record_success(self, action_id: str, result: Any) -> None:
        self._recorded.add(action_id)
        self._results.append(ActionResult(action_id=action_id, result=result))

    def record_failure(self, action_id: str, error: WorkflowRuntimeError) -> None:
        self._recorded.add(action_id)
        self._errors.append(ActionError(action_id=action_id, error=error.describe(), kind=error.kind))

    def abort_remaining(self, action_ids: list[str], reason: str) -> None:
        """Mark every action without an outcome as aborted."""
        for action_id in action_ids:
            if self.has_outcome(action_id):
                continue
            self.record_failure(action_id, ExecutionAbortedError(reason, action_id=action_id))

    def build(self) -> ExecutionReport:
        return ExecutionReport(success=not self._errors, results=list(self._results), errors=list(self._errors))
