"""Candidate generation, scoring and selection of edge paths."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import cdist

from ..geometry import offset_control_point, point_to_segment_distance, polylines_cross, segment_circle_intersections
from ..logging_utils import apply_debug_logging
from ..model import ArrowPoint, Branch, BranchId, NodeId, Point
from ..paths import EdgePath, format_path
from ..symmetry import group_parallel_branches, node_pair_key
from ..validate import LayoutInvariantError
from .config import RouterConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeRoute:
    path: EdgePath
    arrow_point: ArrowPoint
    is_curved: bool
    score: float

    @property
    def descriptor(self) -> str:
        return format_path(self.path)


@dataclass(frozen=True)
class _RoutedEdge:
    endpoints: Tuple[NodeId, NodeId]
    polyline: np.ndarray


def _candidate_paths(
    start: Tuple[float, float],
    end: Tuple[float, float],
    parallel_slot: Optional[Tuple[int, int]],
    config: RouterConfig,
) -> List[EdgePath]:
    straight = EdgePath(start=start, end=end)
    if parallel_slot is not None:
        index, total = parallel_slot
        offsets: Sequence[float] = ((index - (total - 1) / 2.0) * config.parallel_offset,)
        candidates: List[EdgePath] = []
    else:
        offsets = config.curve_offsets
        candidates = [straight]

    for offset in offsets:
        control = offset_control_point(start, end, offset)
        if control is None:
            return [straight]
        candidates.append(EdgePath(start=start, end=end, control=control))
    return candidates


def _crosses_node(polyline: np.ndarray, center: Tuple[float, float], radius: float) -> bool:
    for a, b in zip(polyline[:-1], polyline[1:]):
        a_t = (float(a[0]), float(a[1]))
        b_t = (float(b[0]), float(b[1]))
        if segment_circle_intersections(a_t, b_t, center, radius):
            return True
        if point_to_segment_distance(center, a_t, b_t) < radius:
            return True
    return False


def _symmetry_bonus(path: EdgePath) -> float:
    # no symmetry reward is defined yet
    return 0.0


def score_path(
    path: EdgePath,
    endpoints: Tuple[NodeId, NodeId],
    node_ids: Sequence[NodeId],
    node_coords: np.ndarray,
    routed: Sequence[_RoutedEdge],
    config: RouterConfig,
) -> float:
    """Lower is better.

    Nodes at the branch's own endpoints and edges sharing an endpoint are not
    obstacles for it.
    """

    own = set(endpoints)
    keep = np.array([node_id not in own for node_id in node_ids], dtype=bool)
    obstacles = node_coords[keep] if len(node_coords) else node_coords

    polyline = path.polyline(config.curve_segments)
    crossings = 0
    for center in obstacles:
        if _crosses_node(polyline, (float(center[0]), float(center[1])), config.node_radius):
            crossings += 1
    for edge in routed:
        if own.intersection(edge.endpoints):
            continue
        if polylines_cross(polyline, edge.polyline):
            crossings += 1

    proximity = 0.0
    if len(obstacles):
        samples = path.sample(config.proximity_samples)
        nearest = cdist(samples, obstacles).min(axis=1)
        proximity = float(np.clip(config.node_radius - nearest, 0.0, None).sum())

    curvature = config.curvature_penalty if path.is_curved else 0.0
    return (
        curvature
        + config.intersection_penalty * crossings
        + config.proximity_weight * proximity
        - _symmetry_bonus(path)
    )


def _select(candidates: List[EdgePath], scores: List[float]) -> int:
    best: Optional[int] = None
    for idx, score in enumerate(scores):
        if not math.isfinite(score):
            continue
        if best is None or score < scores[best]:
            best = idx
        elif score == scores[best] and not candidates[idx].is_curved and candidates[best].is_curved:
            best = idx
    if best is None:
        raise LayoutInvariantError("no routing candidate has a finite score")
    return best


def arrow_for(path: EdgePath) -> ArrowPoint:
    x, y = path.point_at(0.5)
    dx, dy = path.derivative_at(0.5)
    return ArrowPoint(x=x, y=y, angle=math.atan2(dy, dx))


def route_edges(
    branches: Sequence[Branch],
    positions: Mapping[NodeId, Point],
    config: Optional[RouterConfig] = None,
) -> Dict[BranchId, EdgeRoute]:
    """Route every branch in order, each against the nodes and earlier edges."""

    config = config or RouterConfig()
    node_ids = list(positions)
    node_coords = np.array([positions[node_id].as_tuple() for node_id in node_ids], dtype=float).reshape(-1, 2)

    slots: Dict[BranchId, Tuple[int, int]] = {}
    for members in group_parallel_branches(branches).values():
        if len(members) > 1:
            for index, member in enumerate(members):
                slots[member.id] = (index, len(members))

    routed: List[_RoutedEdge] = []
    routes: Dict[BranchId, EdgeRoute] = {}
    for branch in branches:
        try:
            start = positions[branch.from_node_id].as_tuple()
            end = positions[branch.to_node_id].as_tuple()
        except KeyError as exc:
            raise LayoutInvariantError(f"branch {branch.id} has no position for node {exc.args[0]}") from exc

        endpoints = (branch.from_node_id, branch.to_node_id)
        candidates = _candidate_paths(start, end, slots.get(branch.id), config)
        scores = [score_path(path, endpoints, node_ids, node_coords, routed, config) for path in candidates]
        choice = _select(candidates, scores)
        path = candidates[choice]

        routes[branch.id] = EdgeRoute(path=path, arrow_point=arrow_for(path), is_curved=path.is_curved, score=scores[choice])
        routed.append(_RoutedEdge(endpoints=node_pair_key(*endpoints), polyline=path.polyline(config.curve_segments)))
        logger.debug("Routed %s: %d candidate(s), score %.2f, curved=%s", branch.id, len(candidates), scores[choice], path.is_curved)

    return routes


__all__ = ["EdgeRoute", "arrow_for", "route_edges", "score_path"]


apply_debug_logging(globals(), logger=logger, skip={"score_path", "arrow_for"})
