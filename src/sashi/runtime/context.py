"""Per-execution state."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ExecutionContext:
    """Mutable state of one ``execute`` call.

    Attributes:
        user_input: Caller-supplied key/value bag
        action_ids: Every action id declared by the workflow
        results: Stored results by action id, filled in execution order
    """

    user_input: dict[str, Any]
    action_ids: frozenset[str]
    results: dict[str, Any] = field(default_factory=dict)

    def has_result(self, action_id: str) -> bool:
        return action_id in self.results
