from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from ..geometry import box_overlap_area, boxes_intersect
from ..logging_utils import apply_debug_logging
from ..model import BoundingBox, LayoutEdge, LayoutNode, Point
from ..paths import parse_path
from .config import LabelConfig

logger = logging.getLogger(__name__)

Owner = Tuple[str, str]


@dataclass(frozen=True)
class LabelPlacement:
    node_labels: Dict[str, Point]
    edge_labels: Dict[str, Point]


@dataclass(frozen=True)
class _Obstacle:
    owner: Owner
    box: BoundingBox


def label_box(text: str, at: Point, config: LabelConfig) -> BoundingBox:
    return BoundingBox.centered(at.x, at.y, len(text) * config.char_width, config.line_height)


def _geometry_obstacles(
    nodes: Sequence[LayoutNode], edges: Sequence[LayoutEdge], config: LabelConfig
) -> List[_Obstacle]:
    obstacles = [
        _Obstacle(("node", node.id), BoundingBox.centered(node.x, node.y, config.node_extent, config.node_extent))
        for node in nodes
    ]
    for edge in edges:
        for x, y in parse_path(edge.path).sample(config.edge_samples):
            obstacles.append(
                _Obstacle(
                    ("edge", edge.id),
                    BoundingBox.centered(float(x), float(y), config.edge_extent, config.edge_extent),
                )
            )
    return obstacles


def _node_candidates(node: LayoutNode, config: LabelConfig) -> List[Point]:
    side = config.offset + len(node.label) * config.char_width / 2.0
    return [
        Point(node.x, node.y - config.offset),
        Point(node.x, node.y + config.offset),
        Point(node.x - side, node.y),
        Point(node.x + side, node.y),
    ]


def _edge_candidates(edge: LayoutEdge, config: LabelConfig) -> List[Point]:
    path = parse_path(edge.path)
    arrow = edge.arrow_point
    first_third = path.point_at(1.0 / 3.0)
    second_third = path.point_at(2.0 / 3.0)
    return [
        Point(arrow.x, arrow.y),
        Point(arrow.x, arrow.y + config.offset),
        Point(*first_third),
        Point(*second_third),
    ]


def _place(
    owner: Owner,
    text: str,
    candidates: Sequence[Point],
    obstacles: Sequence[_Obstacle],
    config: LabelConfig,
) -> Point:
    others = [obstacle.box for obstacle in obstacles if obstacle.owner != owner]
    overlaps: List[float] = []
    for candidate in candidates:
        box = label_box(text, candidate, config)
        if not any(boxes_intersect(box, other) for other in others):
            return candidate
        overlaps.append(sum(box_overlap_area(box, other) for other in others))

    best = min(range(len(candidates)), key=overlaps.__getitem__)
    logger.warning(
        "No collision-free position for %s label %r; using overlap %.1f",
        owner[0],
        owner[1],
        overlaps[best],
    )
    return candidates[best]


def optimize_labels(
    nodes: Sequence[LayoutNode],
    edges: Sequence[LayoutEdge],
    config: Optional[LabelConfig] = None,
) -> LabelPlacement:
    """Place node labels, then edge labels, each avoiding geometry and earlier labels."""

    config = config or LabelConfig()
    obstacles = _geometry_obstacles(nodes, edges, config)

    node_labels: Dict[str, Point] = {}
    for node in nodes:
        owner = ("node", node.id)
        spot = _place(owner, node.label, _node_candidates(node, config), obstacles, config)
        node_labels[node.id] = spot
        obstacles.append(_Obstacle(("node-label", node.id), label_box(node.label, spot, config)))

    edge_labels: Dict[str, Point] = {}
    for edge in edges:
        owner = ("edge", edge.id)
        spot = _place(owner, edge.label, _edge_candidates(edge, config), obstacles, config)
        edge_labels[edge.id] = spot
        obstacles.append(_Obstacle(("edge-label", edge.id), label_box(edge.label, spot, config)))

    return LabelPlacement(node_labels=node_labels, edge_labels=edge_labels)


__all__ = ["LabelPlacement", "label_box", "optimize_labels"]


apply_debug_logging(globals(), logger=logger, skip={"label_box"})
