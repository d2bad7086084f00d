"""Core types for sashi: exceptions, parameter schemas and workflow documents.

``sashi.core.workflow_validator`` depends on the registry and is imported
directly rather than re-exported here.
"""

from sashi.core.exceptions import (
    CompilationError,
    ExecutionAbortedError,
    GenerationFailedError,
    GenerationOutputInvalidError,
    ImplementationError,
    InvalidEnumValueError,
    MapLengthMismatchError,
    MissingRequiredParameterError,
    ReturnTypeMismatchError,
    SashiError,
    SettingsError,
    TypeMismatchError,
    UnknownToolError,
    UnresolvedReferenceError,
    ValidationIssue,
    WorkflowRuntimeError,
    WorkflowSchemaError,
    WorkflowValidationError,
)
from sashi.core.param_coercion import check_return_value, coerce_value
from sashi.core.param_spec import ParamSpec, ParamType
from sashi.core.workflow_models import (
    GenerateDirective,
    GenerationContext,
    TransformDirective,
    WorkflowAction,
    WorkflowDocument,
)
from sashi.core.workflow_schema import WORKFLOW_SCHEMA, validate_workflow_structure
from sashi.core.workflow_status import WorkflowStatus

__all__ = [
    "WORKFLOW_SCHEMA",
    "CompilationError",
    "ExecutionAbortedError",
    "GenerateDirective",
    "GenerationContext",
    "GenerationFailedError",
    "GenerationOutputInvalidError",
    "ImplementationError",
    "InvalidEnumValueError",
    "MapLengthMismatchError",
    "MissingRequiredParameterError",
    "ParamSpec",
    "ParamType",
    "ReturnTypeMismatchError",
    "SashiError",
    "SettingsError",
    "TransformDirective",
    "TypeMismatchError",
    "UnknownToolError",
    "UnresolvedReferenceError",
    "ValidationIssue",
    "WorkflowAction",
    "WorkflowDocument",
    "WorkflowRuntimeError",
    "WorkflowSchemaError",
    "WorkflowStatus",
    "WorkflowValidationError",
    "check_return_value",
    "coerce_value",
    "validate_workflow_structure",
]
