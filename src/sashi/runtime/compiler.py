"""Compile a validated workflow document into a pocketflow flow.

Actions become nodes wired in document order with ``>>``. The engine never
reorders: the validator has already checked that every reference points at
an earlier action.
"""

import logging
from typing import Optional

from pocketflow import AsyncFlow

from sashi.core.exceptions import CompilationError
from sashi.core.workflow_models import WorkflowAction, WorkflowDocument
from sashi.registry import FunctionRegistry
from sashi.runtime.action_node import ActionNode
from sashi.runtime.generation import Generator
from sashi.runtime.map_node import MappedActionNode

logger = logging.getLogger(__name__)


def _create_node(action: WorkflowAction, registry: FunctionRegistry, generator: Optional[Generator]) -> ActionNode:
    node_class = MappedActionNode if action.map else ActionNode
    logger.debug(
        f"Creating {node_class.__name__} for '{action.id}'",
        extra={"phase": "node_instantiation", "action_id": action.id, "tool": action.tool},
    )
    return node_class(action, registry, generator)


def _wire_nodes(nodes: list[ActionNode]) -> None:
    logger.debug("Starting node wiring", extra={"phase": "flow_wiring", "node_count": len(nodes)})
    for source, target in zip(nodes, nodes[1:]):
        source >> target


def compile_workflow(
    document: WorkflowDocument,
    registry: FunctionRegistry,
    generator: Optional[Generator] = None,
) -> AsyncFlow:
    """Build a sequential ``AsyncFlow`` for ``document``.

    Args:
        document: A document that passed ``WorkflowValidator``
        registry: Registry the nodes invoke
        generator: Optional hook for ``_generate``/``_transform``

    Returns:
        Flow whose start node is the first action

    Raises:
        CompilationError: If the document has no actions
    """
    if not document.actions:
        raise CompilationError("Workflow has no actions", phase="node_instantiation")

    nodes = [_create_node(action, registry, generator) for action in document.actions]
    _wire_nodes(nodes)

    logger.debug(
        "Compilation complete",
        extra={"phase": "complete", "node_count": len(nodes), "start_action": document.actions[0].id},
    )
    return AsyncFlow(start=nodes[0])
