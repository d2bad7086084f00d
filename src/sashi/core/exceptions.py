"""Custom exceptions for sashi.

Two families live here:

- Pre-flight errors (``WorkflowValidationError``) block a whole workflow
  before any action runs.
- Runtime errors (``WorkflowRuntimeError`` subclasses) are scoped to a single
  action and recorded in the execution report. Each carries a ``kind`` that
  shows up verbatim in the report's error string.
"""

from dataclasses import dataclass
from typing import Optional


class SashiError(Exception):
    """Base exception for all sashi errors."""

    pass


@dataclass
class ValidationIssue:
    """One problem found while validating a workflow document."""

    kind: str
    message: str
    path: str = ""
    action_id: Optional[str] = None

    def to_dict(self) -> dict[str, Optional[str]]:
        return {
            "kind": self.kind,
            "message": self.message,
            "path": self.path,
            "actionId": self.action_id,
        }


class WorkflowValidationError(SashiError):
    """Raised when a workflow document fails pre-flight validation."""

    def __init__(self, message: str, issues: Optional[list[ValidationIssue]] = None, kind: Optional[str] = None):
        self.issues = issues or []
        if kind is None:
            kinds = {issue.kind for issue in self.issues}
            kind = "UnknownTool" if kinds == {"UnknownTool"} else "InvalidWorkflow"
        self.kind = kind
        self.message = message
        super().__init__(message)

    def describe(self) -> str:
        return f"{self.kind}: {self.message}"


class WorkflowSchemaError(SashiError):
    """Structural error in a workflow document, with the offending path.

    Attributes:
        message: The validation error message
        path: Path to the invalid field (e.g., "actions[0].tool")
        suggestion: Optional hint for fixing the error
    """

    def __init__(self, message: str, path: str = "", suggestion: str = ""):
        self.message = message
        self.path = path
        self.suggestion = suggestion

        full_message = f"Validation error at {path}: {message}" if path else message
        if suggestion:
            full_message += f"\n  Suggestion: {suggestion}"
        super().__init__(full_message)


class CompilationError(SashiError):
    """Raised when a validated workflow cannot be turned into a flow."""

    def __init__(self, message: str, phase: str = "unknown", action_id: Optional[str] = None):
        self.phase = phase
        self.action_id = action_id

        parts = [f"compiler: {message}"]
        if action_id:
            parts.append(f"Action: '{action_id}'")
        parts.append(f"Phase: {phase}")
        super().__init__("\n".join(parts))


class SettingsError(SashiError):
    """Raised when settings cannot be loaded or persisted."""

    pass


class WorkflowRuntimeError(SashiError):
    """Base class for failures scoped to a single action.

    Attributes:
        kind: Error kind reported to callers
        action_id: Action the error belongs to, filled in by the executor
        parameter: Parameter name (or dotted path) involved, when known
    """

    kind = "RuntimeError"

    def __init__(self, message: str, *, action_id: Optional[str] = None, parameter: Optional[str] = None):
        self.message = message
        self.action_id = action_id
        self.parameter = parameter
        super().__init__(message)

    def describe(self) -> str:
        """Format the error the way it appears in an execution report."""
        return f"{self.kind}: {self.message}"


class UnknownToolError(WorkflowRuntimeError):
    kind = "UnknownTool"


class MissingRequiredParameterError(WorkflowRuntimeError):
    kind = "MissingRequiredParameter"


class TypeMismatchError(WorkflowRuntimeError):
    kind = "TypeMismatch"


class InvalidEnumValueError(WorkflowRuntimeError):
    kind = "InvalidEnumValue"


class ReturnTypeMismatchError(WorkflowRuntimeError):
    kind = "ReturnTypeMismatch"


class UnresolvedReferenceError(WorkflowRuntimeError):
    kind = "UnresolvedReference"


class MapLengthMismatchError(WorkflowRuntimeError):
    kind = "MapLengthMismatch"


class GenerationFailedError(WorkflowRuntimeError):
    kind = "GenerationFailed"


class GenerationOutputInvalidError(WorkflowRuntimeError):
    kind = "GenerationOutputInvalid"


class ExecutionAbortedError(WorkflowRuntimeError):
    kind = "ExecutionAborted"


class ImplementationError(WorkflowRuntimeError):
    """An exception raised by a registered function's own implementation."""

    kind = "ImplementationError"

    def __init__(
        self,
        message: str,
        *,
        original_error: Optional[BaseException] = None,
        action_id: Optional[str] = None,
    ):
        self.original_error = original_error
        super().__init__(message, action_id=action_id)

    @classmethod
    def wrap(cls, error: BaseException) -> "ImplementationError":
        return cls(f"{type(error).__name__}: {error}", original_error=error)
