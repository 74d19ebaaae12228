"""Records exchanged with the topology and rendering collaborators."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Tuple

NodeId = str
BranchId = str


class TopologyFormatError(ValueError):
    """Raised when a serialized topology record is malformed."""


class BranchType(str, enum.Enum):
    RESISTOR = "resistor"
    VOLTAGE_SOURCE = "voltageSource"
    CURRENT_SOURCE = "currentSource"


@dataclass(frozen=True)
class ElectricalNode:
    id: NodeId
    connected_branch_ids: Tuple[BranchId, ...] = ()

    @property
    def degree(self) -> int:
        return len(self.connected_branch_ids)


@dataclass(frozen=True)
class Branch:
    id: BranchId
    type: BranchType
    value: float
    from_node_id: NodeId
    to_node_id: NodeId

    @property
    def endpoints(self) -> Tuple[NodeId, NodeId]:
        return self.from_node_id, self.to_node_id


@dataclass(frozen=True)
class CircuitTopology:
    nodes: Tuple[ElectricalNode, ...]
    branches: Tuple[Branch, ...]

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CircuitTopology":
        """Build a topology from the camelCase JSON shape used by the editor."""

        try:
            raw_nodes = payload["nodes"]
            raw_branches = payload["branches"]
        except KeyError as exc:
            raise TopologyFormatError(f"topology is missing '{exc.args[0]}'") from exc

        nodes = []
        for idx, raw in enumerate(raw_nodes):
            if "id" not in raw:
                raise TopologyFormatError(f"node #{idx} has no id")
            nodes.append(
                ElectricalNode(
                    id=str(raw["id"]),
                    connected_branch_ids=tuple(str(b) for b in raw.get("connectedBranchIds", ())),
                )
            )

        branches = []
        for idx, raw in enumerate(raw_branches):
            missing = [key for key in ("id", "type", "fromNodeId", "toNodeId") if key not in raw]
            if missing:
                raise TopologyFormatError(f"branch #{idx} is missing {', '.join(missing)}")
            try:
                kind = BranchType(raw["type"])
            except ValueError as exc:
                raise TopologyFormatError(
                    f"branch {raw['id']} has unknown type {raw['type']!r}"
                ) from exc
            branches.append(
                Branch(
                    id=str(raw["id"]),
                    type=kind,
                    value=float(raw.get("value", 0.0)),
                    from_node_id=str(raw["fromNodeId"]),
                    to_node_id=str(raw["toNodeId"]),
                )
            )
        return cls(nodes=tuple(nodes), branches=tuple(branches))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [
                {"id": node.id, "connectedBranchIds": list(node.connected_branch_ids)}
                for node in self.nodes
            ],
            "branches": [
                {
                    "id": branch.id,
                    "type": branch.type.value,
                    "value": branch.value,
                    "fromNodeId": branch.from_node_id,
                    "toNodeId": branch.to_node_id,
                }
                for branch in self.branches
            ],
        }


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class ArrowPoint:
    x: float
    y: float
    angle: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "angle": self.angle}


@dataclass(frozen=True)
class BoundingBox:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @classmethod
    def centered(cls, cx: float, cy: float, width: float, height: float) -> "BoundingBox":
        return cls(cx - width / 2, cy - height / 2, width, height)


@dataclass(frozen=True)
class NodePlacementResult:
    positions: Dict[NodeId, Point]
    bounds: BoundingBox


@dataclass
class LayoutNode:
    id: NodeId
    x: float
    y: float
    label: str
    label_pos: Point

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "x": self.x,
            "y": self.y,
            "label": self.label,
            "labelPos": self.label_pos.to_dict(),
        }


@dataclass
class LayoutEdge:
    id: BranchId
    source_id: NodeId
    target_id: NodeId
    path: str
    arrow_point: ArrowPoint
    label: str
    label_pos: Point
    is_curved: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sourceId": self.source_id,
            "targetId": self.target_id,
            "path": self.path,
            "arrowPoint": self.arrow_point.to_dict(),
            "label": self.label,
            "labelPos": self.label_pos.to_dict(),
            "isCurved": self.is_curved,
        }


@dataclass
class LayoutGraph:
    width: float
    height: float
    nodes: List[LayoutNode] = field(default_factory=list)
    edges: List[LayoutEdge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


__all__ = [
    "ArrowPoint",
    "BoundingBox",
    "Branch",
    "BranchId",
    "BranchType",
    "CircuitTopology",
    "ElectricalNode",
    "LayoutEdge",
    "LayoutGraph",
    "LayoutNode",
    "NodeId",
    "NodePlacementResult",
    "Point",
    "TopologyFormatError",
]
