"""Unified workflow validation.

Single source of truth for the pre-flight gate: the executor, the HTTP verify
endpoint and ``sashi validate`` all go through ``WorkflowValidator``.
"""

import difflib
import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from sashi.core.exceptions import ValidationIssue, WorkflowSchemaError, WorkflowValidationError
from sashi.core.references import (
    USER_INPUT,
    UserInputRef,
    is_generate_directive,
    iter_references,
)
from sashi.core.workflow_models import GenerateDirective, WorkflowDocument
from sashi.core.workflow_schema import validate_workflow_structure
from sashi.core.workflow_status import WorkflowStatus
from sashi.registry import FunctionRegistry

logger = logging.getLogger(__name__)

WorkflowInput = Union[WorkflowDocument, dict[str, Any], str]


@dataclass
class VerificationResult:
    """Outcome of validating a workflow without executing it."""

    document: Optional[WorkflowDocument]
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def status(self) -> WorkflowStatus:
        if not self.errors:
            return WorkflowStatus.READY
        if all(issue.kind == "UnknownTool" for issue in self.errors):
            return WorkflowStatus.DISABLED
        return WorkflowStatus.INVALID

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "status": self.status.value,
            "errors": [issue.to_dict() for issue in self.errors],
            "warnings": [issue.to_dict() for issue in self.warnings],
        }


class WorkflowValidator:
    """Orchestrates all workflow validation checks."""

    @staticmethod
    def verify(data: WorkflowInput, registry: FunctionRegistry) -> VerificationResult:
        """Run every check and collect the findings without raising.

        Checks, in order:
        1. Structure - JSON Schema compliance
        2. Model parsing - directive shapes, field types
        3. Semantics - unique ids, registered tools, reference ordering,
           parameter hints
        """
        if isinstance(data, WorkflowDocument):
            document = data
        else:
            try:
                raw = validate_workflow_structure(data)
                document = WorkflowDocument.model_validate(raw)
            except WorkflowSchemaError as e:
                issue = ValidationIssue(kind="InvalidWorkflow", message=str(e), path=e.path)
                return VerificationResult(document=None, errors=[issue])
            except PydanticValidationError as e:
                issues = [
                    ValidationIssue(
                        kind="InvalidWorkflow",
                        message=err["msg"],
                        path=".".join(str(part) for part in err["loc"]),
                    )
                    for err in e.errors()
                ]
                return VerificationResult(document=None, errors=issues)

        errors, warnings = WorkflowValidator.validate(document, registry)
        return VerificationResult(document=document, errors=errors, warnings=warnings)

    @staticmethod
    def validate(
        document: WorkflowDocument, registry: FunctionRegistry
    ) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
        """Run the semantic checks on a parsed document.

        Returns:
            Tuple of (errors, warnings). Errors block execution; warnings are
            advisory (for example parameter hints that disagree with the
            function's declared schema).
        """
        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []

        errors.extend(WorkflowValidator._validate_ids(document))
        errors.extend(WorkflowValidator._validate_tools(document, registry))
        errors.extend(WorkflowValidator._validate_references(document))
        errors.extend(WorkflowValidator._validate_directives(document))
        warnings.extend(WorkflowValidator._validate_parameters(document, registry))

        return errors, warnings

    @staticmethod
    def _validate_ids(document: WorkflowDocument) -> list[ValidationIssue]:
        issues = []
        seen: set[str] = set()
        for index, action in enumerate(document.actions):
            path = f"actions[{index}].id"
            if action.id == USER_INPUT:
                issues.append(
                    ValidationIssue(
                        kind="ReservedActionId",
                        message=f"Action id '{USER_INPUT}' is reserved for caller input",
                        path=path,
                        action_id=action.id,
                    )
                )
            if action.id in seen:
                issues.append(
                    ValidationIssue(
                        kind="DuplicateActionId",
                        message=f"Duplicate action id '{action.id}'",
                        path=path,
                        action_id=action.id,
                    )
                )
            seen.add(action.id)
        return issues

    @staticmethod
    def _validate_tools(document: WorkflowDocument, registry: FunctionRegistry) -> list[ValidationIssue]:
        issues = []
        for index, action in enumerate(document.actions):
            if action.tool in registry:
                continue
            message = f"Action '{action.id}' uses unknown function '{action.tool}'"
            similar = difflib.get_close_matches(action.tool, registry.names(), n=3, cutoff=0.6)
            if similar:
                message += f". Did you mean: {', '.join(similar)}?"
            issues.append(
                ValidationIssue(kind="UnknownTool", message=message, path=f"actions[{index}].tool", action_id=action.id)
            )
        return issues

    @staticmethod
    def _validate_references(document: WorkflowDocument) -> list[ValidationIssue]:
        """Actions may only reference actions declared strictly before them."""
        issues = []
        positions: dict[str, int] = {}
        for index, action in enumerate(document.actions):
            positions.setdefault(action.id, index)

        for index, action in enumerate(document.actions):
            for name, value in action.parameters.items():
                for reference in iter_references(value):
                    if isinstance(reference, UserInputRef):
                        continue
                    if reference.action_id not in positions:
                        issues.append(
                            ValidationIssue(
                                kind="UnresolvedReference",
                                message=(
                                    f"Parameter '{name}' of action '{action.id}' references unknown action "
                                    f"'{reference.action_id}' (use _literal for dotted text that is not a reference)"
                                ),
                                path=f"actions[{index}].parameters.{name}",
                                action_id=action.id,
                            )
                        )
                        continue
                    if positions[reference.action_id] >= index:
                        where = "itself" if reference.action_id == action.id else "a later action"
                        issues.append(
                            ValidationIssue(
                                kind="ForwardReference",
                                message=(
                                    f"Parameter '{name}' of action '{action.id}' references "
                                    f"{where} ('{reference.action_id}'); actions may only use earlier results"
                                ),
                                path=f"actions[{index}].parameters.{name}",
                                action_id=action.id,
                            )
                        )
        return issues

    @staticmethod
    def _validate_directives(document: WorkflowDocument) -> list[ValidationIssue]:
        issues = []
        for index, action in enumerate(document.actions):
            for name, value in action.parameters.items():
                if not is_generate_directive(value):
                    continue
                try:
                    GenerateDirective.model_validate(value)
                except PydanticValidationError as e:
                    issues.append(
                        ValidationIssue(
                            kind="InvalidDirective",
                            message=f"Invalid generation directive for '{name}': {e.errors()[0]['msg']}",
                            path=f"actions[{index}].parameters.{name}",
                            action_id=action.id,
                        )
                    )
        return issues

    @staticmethod
    def _validate_parameters(document: WorkflowDocument, registry: FunctionRegistry) -> list[ValidationIssue]:
        """Advisory checks against the declared schema.

        Missing required parameters are only warnings here: a value may still
        arrive from user input at run time, and a missing one fails just that
        action.
        """
        warnings = []
        for index, action in enumerate(document.actions):
            descriptor = registry.lookup(action.tool)
            if descriptor is None:
                continue
            base = f"actions[{index}]"

            for spec in descriptor.parameters:
                if spec.required and action.parameters.get(spec.name) is None:
                    warnings.append(
                        ValidationIssue(
                            kind="MissingRequiredParameter",
                            message=f"Action '{action.id}' does not supply required parameter '{spec.name}'",
                            path=f"{base}.parameters",
                            action_id=action.id,
                        )
                    )

            declared = {spec.name for spec in descriptor.parameters}
            for name in action.parameters:
                if name not in declared:
                    warnings.append(
                        ValidationIssue(
                            kind="UnknownParameter",
                            message=f"Function '{action.tool}' has no parameter '{name}'",
                            path=f"{base}.parameters.{name}",
                            action_id=action.id,
                        )
                    )

            for name, hint in action.parameter_metadata.items():
                spec = descriptor.get_parameter(name)
                hinted_type = hint.get("type")
                if spec is None or hinted_type is None or hinted_type == spec.type.value:
                    continue
                warnings.append(
                    ValidationIssue(
                        kind="ParameterMetadataMismatch",
                        message=(
                            f"parameterMetadata for '{name}' says {hinted_type}, "
                            f"but '{action.tool}' declares {spec.type.value}"
                        ),
                        path=f"{base}.parameterMetadata.{name}",
                        action_id=action.id,
                    )
                )
        return warnings


def load_workflow(data: WorkflowInput, registry: FunctionRegistry) -> WorkflowDocument:
    """Validate and parse a workflow, raising on any blocking problem.

    Raises:
        WorkflowValidationError: With every blocking issue attached
    """
    result = WorkflowValidator.verify(data, registry)
    for warning in result.warnings:
        logger.warning(f"Workflow warning: {warning.message}", extra={"path": warning.path})

    if result.errors or result.document is None:
        summary = "; ".join(issue.message for issue in result.errors) or "document could not be parsed"
        raise WorkflowValidationError(f"Workflow failed validation: {summary}", issues=result.errors)

    return result.document

