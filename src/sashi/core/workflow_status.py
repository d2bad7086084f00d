"""Workflow readiness status types."""

from enum import Enum


class WorkflowStatus(str, Enum):
    """Whether a workflow document can be executed against a registry.

    - READY: Every check passed
    - DISABLED: The document is well-formed but names functions the registry lacks
    - INVALID: The document itself is malformed
    """

    READY = "ready"
    DISABLED = "disabled"
    INVALID = "invalid"
