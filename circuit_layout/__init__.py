from .model import (
    ArrowPoint,
    BoundingBox,
    Branch,
    BranchType,
    CircuitTopology,
    ElectricalNode,
    LayoutEdge,
    LayoutGraph,
    LayoutNode,
    NodePlacementResult,
    Point,
    TopologyFormatError,
)
from .validate import InvalidGraphError, LayoutInvariantError, validate_topology
from .paths import EdgePath, format_path, parse_path
from .engine import (
    LayoutOptions,
    calculate_layout,
    find_optimal_layout,
    find_patterns,
    collapse_patterns,
    expand_patterns,
    optimize_labels,
    place_nodes,
    place_nodes_for_planarity,
    refine_layout,
    route_edges,
)

__all__ = [
    'ArrowPoint',
    'BoundingBox',
    'Branch',
    'BranchType',
    'CircuitTopology',
    'EdgePath',
    'ElectricalNode',
    'InvalidGraphError',
    'LayoutEdge',
    'LayoutGraph',
    'LayoutInvariantError',
    'LayoutNode',
    'LayoutOptions',
    'NodePlacementResult',
    'Point',
    'TopologyFormatError',
    'calculate_layout',
    'collapse_patterns',
    'expand_patterns',
    'find_optimal_layout',
    'find_patterns',
    'format_path',
    'optimize_labels',
    'parse_path',
    'place_nodes',
    'place_nodes_for_planarity',
    'refine_layout',
    'route_edges',
    'validate_topology',
]
