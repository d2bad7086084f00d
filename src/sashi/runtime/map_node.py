"""Element-wise ("map") execution of an action.

When an action has ``"map": true``, every resolved parameter whose value is a
list is iterated in lockstep and the function is invoked once per index;
scalar parameters are repeated unchanged. The action's result is the list of
per-element results, aligned with the input.

Design decisions:
- **Lengths checked up front**: all list-valued parameters must share one
  length; a disagreement fails the action before any element runs
- **Sequential**: elements run one after another in index order
- **Fail fast**: the first element error fails the whole action; later
  elements are not run. The error message names the failing index.
"""

import logging
from typing import Any

from sashi.core.exceptions import MapLengthMismatchError, WorkflowRuntimeError
from sashi.runtime.action_node import ActionNode

logger = logging.getLogger(__name__)


def expand_map_arguments(arguments: dict[str, Any]) -> list[dict[str, Any]]:
    """Split resolved arguments into one argument set per element.

    Args:
        arguments: Resolved parameters of a mapped action

    Returns:
        Per-element argument dicts, in index order

    Raises:
        MapLengthMismatchError: List-valued parameters disagree in length, or
            there is no list-valued parameter to map over

    Example:
        >>> expand_map_arguments({"to": ["a", "b"], "subject": "Hi"})
        [{'to': 'a', 'subject': 'Hi'}, {'to': 'b', 'subject': 'Hi'}]
    """
    lengths = {name: len(value) for name, value in arguments.items() if isinstance(value, list)}
    if not lengths:
        raise MapLengthMismatchError("Mapped action has no array-valued parameter to iterate over")

    distinct = set(lengths.values())
    if len(distinct) > 1:
        detail = ", ".join(f"{name}={length}" for name, length in lengths.items())
        raise MapLengthMismatchError(f"Array parameters of a mapped action must have equal lengths ({detail})")

    count = distinct.pop()
    return [
        {name: (value[index] if name in lengths else value) for name, value in arguments.items()}
        for index in range(count)
    ]


class MappedActionNode(ActionNode):
    """``ActionNode`` that invokes its function once per array element."""

    async def _invoke(self, arguments: dict[str, Any]) -> list[Any]:
        iterations = expand_map_arguments(arguments)
        logger.debug(
            f"Mapping '{self.action.tool}' over {len(iterations)} elements",
            extra={"action_id": self.action.id, "tool": self.action.tool},
        )

        results = []
        for index, element_arguments in enumerate(iterations):
            try:
                results.append(await self.registry.invoke(self.action.tool, element_arguments))
            except WorkflowRuntimeError as e:
                e.message = f"element {index}: {e.message}"
                e.args = (e.message,)
                raise
        return results
