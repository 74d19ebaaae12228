from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Tuple

import numpy as np

from ..model import Branch, ElectricalNode, NodeId, Point
from ..validate import LayoutInvariantError


@dataclass(frozen=True, eq=False)
class NodeArena:
    """Dense integer indices for nodes and branches.

    Node ``k`` owns row ``k`` of every ``(n, 2)`` coordinate array; branch
    ``e`` is the segment ``endpoints[e]``.
    """

    node_ids: Tuple[NodeId, ...]
    index: Dict[NodeId, int]
    branch_ids: Tuple[str, ...]
    endpoints: np.ndarray

    @classmethod
    def build(cls, nodes: Sequence[ElectricalNode], branches: Sequence[Branch]) -> "NodeArena":
        node_ids = tuple(node.id for node in nodes)
        index = {node_id: k for k, node_id in enumerate(node_ids)}
        rows = []
        for branch in branches:
            try:
                rows.append((index[branch.from_node_id], index[branch.to_node_id]))
            except KeyError as exc:
                raise LayoutInvariantError(
                    f"branch {branch.id} touches node {exc.args[0]} outside the placed node set"
                ) from exc
        endpoints = np.array(rows, dtype=np.intp).reshape(-1, 2)
        return cls(
            node_ids=node_ids,
            index=index,
            branch_ids=tuple(branch.id for branch in branches),
            endpoints=endpoints,
        )

    def __len__(self) -> int:
        return len(self.node_ids)

    def coords_from(self, positions: Mapping[NodeId, Point]) -> np.ndarray:
        coords = np.zeros((len(self.node_ids), 2), dtype=float)
        for k, node_id in enumerate(self.node_ids):
            try:
                point = positions[node_id]
            except KeyError as exc:
                raise LayoutInvariantError(f"no position for node {node_id}") from exc
            coords[k] = (point.x, point.y)
        return coords

    def positions_from(self, coords: np.ndarray) -> Dict[NodeId, Point]:
        return {
            node_id: Point(float(coords[k, 0]), float(coords[k, 1]))
            for k, node_id in enumerate(self.node_ids)
        }


__all__ = ["NodeArena"]
