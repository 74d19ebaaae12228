"""Legacy whole-layout search over a handful of placement variants."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial.distance import pdist

from ..geometry import count_crossings
from ..logging_utils import apply_debug_logging
from ..model import Branch, BranchId, ElectricalNode, NodeId, Point
from .arena import NodeArena
from .config import PlacementConfig, RouterConfig
from .edge_router import EdgeRoute, route_edges
from .node_placer import place_nodes

logger = logging.getLogger(__name__)

MIRROR_TOLERANCE = 10.0
DEFAULT_SPACING = 100.0


@dataclass(frozen=True)
class LayoutVariant:
    name: str
    seed: int
    grid_size: float


VARIANTS: Tuple[LayoutVariant, ...] = (
    LayoutVariant("default", 42, 50.0),
    LayoutVariant("fine-grid", 42, 25.0),
    LayoutVariant("coarse-grid", 42, 100.0),
    LayoutVariant("alt-seed-1", 123, 50.0),
    LayoutVariant("alt-seed-2", 456, 50.0),
)


@dataclass(frozen=True)
class OptimizedLayout:
    variant: str
    positions: Dict[NodeId, Point]
    routing: Dict[BranchId, EdgeRoute]
    score: float


def average_edge_spacing(routing: Mapping[BranchId, EdgeRoute]) -> float:
    if len(routing) < 2:
        return DEFAULT_SPACING
    arrows = np.array([(route.arrow_point.x, route.arrow_point.y) for route in routing.values()])
    return float(pdist(arrows).mean())


def symmetry_quality(coords: np.ndarray) -> float:
    """Share of nodes whose mirror across the vertical centroid axis lands on a node."""

    if len(coords) < 2:
        return 0.0
    axis_x = coords[:, 0].mean()
    mirrored = np.column_stack((2.0 * axis_x - coords[:, 0], coords[:, 1]))
    gaps = np.abs(mirrored[:, None, :] - coords[None, :, :])
    partnered = ((gaps[:, :, 0] < MIRROR_TOLERANCE) & (gaps[:, :, 1] < MIRROR_TOLERANCE)).any(axis=1)
    return float(partnered.mean())


def score_layout(
    positions: Mapping[NodeId, Point],
    routing: Mapping[BranchId, EdgeRoute],
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
) -> float:
    arena = NodeArena.build(nodes, branches)
    coords = arena.coords_from(positions)
    crossings = count_crossings(coords, arena.endpoints)
    score = 1000.0 * crossings
    score -= 10.0 * average_edge_spacing(routing)
    score -= 100.0 * symmetry_quality(coords)
    if crossings == 0:
        score -= 500.0
    return score


def find_optimal_layout(
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    config: Optional[PlacementConfig] = None,
    router: Optional[RouterConfig] = None,
) -> OptimizedLayout:
    """Lay out every variant and keep the lowest score; earlier variants win ties.

    Placement does not consume a variant's seed or grid size yet, so every
    candidate shares the same positions and ``default`` is kept.
    """

    config = config or PlacementConfig()
    candidates = []
    for variant in VARIANTS:
        placement = place_nodes(nodes, branches, config)
        routing = route_edges(branches, placement.positions, router)
        score = score_layout(placement.positions, routing, nodes, branches)
        logger.debug("Variant %s scored %.2f", variant.name, score)
        candidates.append(OptimizedLayout(variant.name, placement.positions, routing, score))

    best = min(candidates, key=lambda candidate: candidate.score)
    logger.info("Selected layout variant %s (score %.2f)", best.variant, best.score)
    return best


__all__ = [
    "LayoutVariant",
    "OptimizedLayout",
    "VARIANTS",
    "average_edge_spacing",
    "find_optimal_layout",
    "score_layout",
    "symmetry_quality",
]


apply_debug_logging(globals(), logger=logger)
