"""Heuristic symmetry detection for circuit graphs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

import numpy as np

from .model import Branch, BranchId, ElectricalNode, NodeId

VERTICAL = "vertical"
HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class IsomorphicSubgraph:
    nodes: Tuple[NodeId, ...]
    branches: Tuple[BranchId, ...]


@dataclass(frozen=True)
class SymmetryAxis:
    orientation: str
    position: float


def node_pair_key(a: NodeId, b: NodeId) -> Tuple[NodeId, NodeId]:
    return (a, b) if a <= b else (b, a)


def group_parallel_branches(branches: Sequence[Branch]) -> Dict[Tuple[NodeId, NodeId], List[Branch]]:
    """Group branches by unordered endpoint pair, preserving first-seen order."""
    groups: Dict[Tuple[NodeId, NodeId], List[Branch]] = {}
    for branch in branches:
        groups.setdefault(node_pair_key(branch.from_node_id, branch.to_node_id), []).append(branch)
    return groups


def find_isomorphic_subgraphs(
    nodes: Sequence[ElectricalNode], branches: Sequence[Branch]
) -> List[IsomorphicSubgraph]:
    subgraphs: List[IsomorphicSubgraph] = []

    for members in group_parallel_branches(branches).values():
        if len(members) < 2:
            continue
        for branch in members:
            subgraphs.append(
                IsomorphicSubgraph(nodes=(branch.from_node_id, branch.to_node_id), branches=(branch.id,))
            )

    # greedy: the first later node with the same degree is the partner
    paired = set()
    for i, first in enumerate(nodes):
        if first.id in paired or first.degree == 0:
            continue
        for second in nodes[i + 1:]:
            if second.id in paired or second.degree != first.degree:
                continue
            paired.update((first.id, second.id))
            subgraphs.append(
                IsomorphicSubgraph(
                    nodes=(first.id, second.id),
                    branches=first.connected_branch_ids + second.connected_branch_ids,
                )
            )
            break

    return subgraphs


def calculate_central_axis(coords: np.ndarray) -> SymmetryAxis:
    if len(coords) == 0:
        return SymmetryAxis(VERTICAL, 0.0)
    lo = coords.min(axis=0)
    hi = coords.max(axis=0)
    if hi[0] - lo[0] >= hi[1] - lo[1]:
        return SymmetryAxis(VERTICAL, float((lo[0] + hi[0]) / 2))
    return SymmetryAxis(HORIZONTAL, float((lo[1] + hi[1]) / 2))


def mirror_positions(coords: np.ndarray, axis: SymmetryAxis) -> np.ndarray:
    mirrored = np.array(coords, dtype=float, copy=True)
    column = 0 if axis.orientation == VERTICAL else 1
    mirrored[:, column] = 2.0 * axis.position - mirrored[:, column]
    return mirrored


__all__ = [
    "HORIZONTAL",
    "IsomorphicSubgraph",
    "SymmetryAxis",
    "VERTICAL",
    "calculate_central_axis",
    "find_isomorphic_subgraphs",
    "group_parallel_branches",
    "mirror_positions",
    "node_pair_key",
]
