"""Layout engine façade: validation, pipeline selection and output assembly."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from ..geometry import bounding_box_of
from ..model import (
    BoundingBox,
    Branch,
    BranchId,
    CircuitTopology,
    ElectricalNode,
    LayoutEdge,
    LayoutGraph,
    LayoutNode,
    NodeId,
    Point,
)
from ..validate import LayoutInvariantError, topological_branches, validate_topology
from .config import AnnealingConfig, ForceConfig, LabelConfig, LayoutOptions, PlacementConfig, RouterConfig
from .edge_router import EdgeRoute, route_edges
from .label_optimizer import LabelPlacement, optimize_labels
from .layout_optimizer import OptimizedLayout, find_optimal_layout
from .node_placer import place_nodes, place_nodes_for_planarity, planarity_cost, refine_layout
from .pattern_matcher import (
    CircuitPattern,
    PatternKind,
    SimplifiedGraph,
    SuperNode,
    collapse_patterns,
    expand_patterns,
    find_patterns,
)

logger = logging.getLogger(__name__)

Placement = Tuple[Dict[NodeId, Point], BoundingBox, Dict[BranchId, EdgeRoute]]


def _center_positions(positions: Mapping[NodeId, Point]) -> Dict[NodeId, Point]:
    ids = list(positions)
    coords = np.array([positions[node_id].as_tuple() for node_id in ids], dtype=float).reshape(-1, 2)
    box = bounding_box_of(coords)
    cx = box.x + box.width / 2.0
    cy = box.y + box.height / 2.0
    return {node_id: Point(positions[node_id].x - cx, positions[node_id].y - cy) for node_id in ids}


def _pattern_pipeline(
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    options: LayoutOptions,
    rng: np.random.Generator,
) -> Placement:
    patterns = find_patterns(nodes, branches)
    simplified = collapse_patterns(nodes, branches, patterns)
    reduced_nodes = simplified.placement_nodes()
    logger.info(
        "Collapsed %d pattern(s): placing %d node(s) and %d branch(es)",
        len(patterns),
        len(reduced_nodes),
        len(simplified.branches),
    )

    if options.prioritize_planarity:
        reduced = place_nodes_for_planarity(
            reduced_nodes,
            simplified.branches,
            iterations=options.annealing_iterations,
            rng=rng,
            config=options.placement,
            annealing=options.annealing,
        )
    else:
        reduced = place_nodes(reduced_nodes, simplified.branches, options.placement).positions

    expanded = expand_patterns(simplified, reduced, scale=1.0)
    refined = refine_layout(
        expanded, nodes, branches, iterations=options.placement.refine_iterations, config=options.placement
    )
    positions = _center_positions(refined)
    routing = route_edges(branches, positions, options.router)
    # bounds are reported from a standard placement of the full graph
    bounds = place_nodes(nodes, branches, options.placement).bounds
    return positions, bounds, routing


def _optimization_pipeline(
    nodes: Sequence[ElectricalNode], branches: Sequence[Branch], options: LayoutOptions
) -> Placement:
    best = find_optimal_layout(nodes, branches, options.placement, options.router)
    bounds = place_nodes(nodes, branches, options.placement).bounds
    return best.positions, bounds, best.routing


def _standard_pipeline(
    nodes: Sequence[ElectricalNode], branches: Sequence[Branch], options: LayoutOptions
) -> Placement:
    placement = place_nodes(nodes, branches, options.placement)
    routing = route_edges(branches, placement.positions, options.router)
    return placement.positions, placement.bounds, routing


def _assemble(
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    positions: Mapping[NodeId, Point],
    routing: Mapping[BranchId, EdgeRoute],
    labels: LabelConfig,
) -> Tuple[List[LayoutNode], List[LayoutEdge]]:
    layout_nodes: List[LayoutNode] = []
    for node in nodes:
        point = positions.get(node.id)
        if point is None:
            raise LayoutInvariantError(f"Position not found for node {node.id}")
        layout_nodes.append(
            LayoutNode(
                id=node.id,
                x=point.x,
                y=point.y,
                label=node.id,
                label_pos=Point(point.x, point.y - labels.offset),
            )
        )

    layout_edges: List[LayoutEdge] = []
    for branch in branches:
        route = routing.get(branch.id)
        if route is None:
            raise LayoutInvariantError(f"Routing not found for branch {branch.id}")
        layout_edges.append(
            LayoutEdge(
                id=branch.id,
                source_id=branch.from_node_id,
                target_id=branch.to_node_id,
                path=route.descriptor,
                arrow_point=route.arrow_point,
                label=branch.id,
                label_pos=Point(route.arrow_point.x, route.arrow_point.y),
                is_curved=route.is_curved,
            )
        )
    return layout_nodes, layout_edges


def calculate_layout(
    topology: CircuitTopology,
    options: Optional[LayoutOptions] = None,
    rng: Optional[np.random.Generator] = None,
) -> LayoutGraph:
    """Compute the full layout for ``topology``.

    Raises InvalidGraphError for an empty graph or a dangling branch
    endpoint. ``rng`` takes precedence over ``options.random_seed``.
    """

    options = options or LayoutOptions()
    validate_topology(topology)
    rng = rng if rng is not None else np.random.default_rng(options.random_seed)

    nodes = list(topology.nodes)
    branches = topological_branches(topology.branches)
    skipped = len(topology.branches) - len(branches)
    if skipped:
        logger.info("Ignoring %d current source branch(es)", skipped)

    if options.use_pattern_recognition:
        pipeline = "pattern-recognition"
        positions, bounds, routing = _pattern_pipeline(nodes, branches, options, rng)
    elif options.use_optimization:
        pipeline = "optimization"
        positions, bounds, routing = _optimization_pipeline(nodes, branches, options)
    else:
        pipeline = "standard"
        positions, bounds, routing = _standard_pipeline(nodes, branches, options)
    logger.info("Placed %d node(s) and routed %d edge(s) with the %s pipeline", len(nodes), len(routing), pipeline)

    layout_nodes, layout_edges = _assemble(nodes, branches, positions, routing, options.labels)
    placement = optimize_labels(layout_nodes, layout_edges, options.labels)
    for layout_node in layout_nodes:
        layout_node.label_pos = placement.node_labels[layout_node.id]
    for layout_edge in layout_edges:
        layout_edge.label_pos = placement.edge_labels[layout_edge.id]

    return LayoutGraph(width=bounds.width, height=bounds.height, nodes=layout_nodes, edges=layout_edges)


__all__ = [
    "AnnealingConfig",
    "CircuitPattern",
    "EdgeRoute",
    "ForceConfig",
    "LabelConfig",
    "LabelPlacement",
    "LayoutOptions",
    "OptimizedLayout",
    "PatternKind",
    "PlacementConfig",
    "RouterConfig",
    "SimplifiedGraph",
    "SuperNode",
    "calculate_layout",
    "collapse_patterns",
    "expand_patterns",
    "find_optimal_layout",
    "find_patterns",
    "optimize_labels",
    "place_nodes",
    "place_nodes_for_planarity",
    "planarity_cost",
    "refine_layout",
    "route_edges",
]
