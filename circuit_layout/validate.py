from __future__ import annotations

from typing import List, Sequence

from .model import Branch, BranchType, CircuitTopology


class InvalidGraphError(ValueError):
    pass


class LayoutInvariantError(RuntimeError):
    """Raised when the layout pipeline reaches a state validation should have ruled out."""


def validate_topology(topology: CircuitTopology) -> None:
    if not topology.nodes:
        raise InvalidGraphError("Graph has no nodes")
    if not topology.branches:
        raise InvalidGraphError("Graph has no branches")
    node_ids = {node.id for node in topology.nodes}
    for branch in topology.branches:
        for node_id in (branch.from_node_id, branch.to_node_id):
            if node_id not in node_ids:
                raise InvalidGraphError(f"Branch {branch.id} references missing node {node_id}")


def topological_branches(branches: Sequence[Branch]) -> List[Branch]:
    """Drop current sources, which are open circuits for layout purposes."""
    return [branch for branch in branches if branch.type is not BranchType.CURRENT_SOURCE]


__all__ = ["InvalidGraphError", "LayoutInvariantError", "topological_branches", "validate_topology"]
