"""Motif detection and super-node collapsing for the pattern-recognition pipeline.

Detected motifs (bridge, pi, T, series chain) are each replaced by one
super node for placement. After the reduced graph is placed every member node
is put back at ``super-node position + template offset * scale``.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Set, Tuple

from ..graph_theory import (
    Adjacency,
    PatternStructure,
    branches_within,
    build_adjacency,
    find_disjoint_paths,
    has_cycle,
    matches_pattern,
)
from ..logging_utils import apply_debug_logging
from ..model import Branch, BranchId, ElectricalNode, NodeId, Point
from ..validate import LayoutInvariantError

logger = logging.getLogger(__name__)

Template = Tuple[Tuple[float, float], ...]


class PatternKind(str, enum.Enum):
    BRIDGE = "bridge"
    PI = "pi"
    T = "t"
    SERIES = "series"


BRIDGE_TEMPLATE: Template = ((0.0, 50.0), (50.0, 0.0), (50.0, 100.0), (100.0, 50.0))
PI_TEMPLATE: Template = ((50.0, 0.0), (0.0, 86.6), (100.0, 86.6))
T_TEMPLATE: Template = ((50.0, 50.0), (0.0, 50.0), (100.0, 50.0), (50.0, 0.0))

_TRIANGLE = PatternStructure(node_count=3, branch_count=3, degrees=(2, 2, 2))
_STAR = PatternStructure(node_count=4, branch_count=3, degrees=(3, 1, 1, 1))


@dataclass(frozen=True)
class CircuitPattern:
    kind: PatternKind
    nodes: Tuple[NodeId, ...]
    branches: Tuple[BranchId, ...]
    template: Template


@dataclass(frozen=True)
class ExternalConnection:
    external_node_id: NodeId
    internal_node_id: NodeId
    branch_id: BranchId


@dataclass(frozen=True)
class SuperNode:
    id: NodeId
    pattern: CircuitPattern
    external_connections: Tuple[ExternalConnection, ...]

    @property
    def external_branch_ids(self) -> Tuple[BranchId, ...]:
        return tuple(conn.branch_id for conn in self.external_connections)


@dataclass(frozen=True)
class SimplifiedGraph:
    nodes: Tuple[ElectricalNode, ...]
    super_nodes: Tuple[SuperNode, ...]
    branches: Tuple[Branch, ...]

    def placement_nodes(self) -> List[ElectricalNode]:
        """Plain nodes followed by one stand-in node per super node."""
        stand_ins = [ElectricalNode(s.id, s.external_branch_ids) for s in self.super_nodes]
        return list(self.nodes) + stand_ins


class _Claims:
    def __init__(self, nodes: Sequence[ElectricalNode], branches: Sequence[Branch]):
        self._nodes = nodes
        self._branches = branches
        self.nodes: Set[NodeId] = set()
        self.branches: Set[BranchId] = set()

    def free_graph(self) -> Tuple[List[ElectricalNode], List[Branch], Adjacency]:
        nodes = [node for node in self._nodes if node.id not in self.nodes]
        branches = [branch for branch in self._branches if branch.id not in self.branches]
        return nodes, branches, build_adjacency(nodes, branches)

    def claim(self, pattern: CircuitPattern) -> None:
        self.nodes.update(pattern.nodes)
        self.branches.update(pattern.branches)


def _find_bridges(claims: _Claims) -> List[CircuitPattern]:
    found: List[CircuitPattern] = []
    nodes, _, adjacency = claims.free_graph()
    order = [node.id for node in nodes]
    for i, start in enumerate(order):
        for end in order[i + 1:]:
            if start in claims.nodes or end in claims.nodes or adjacency.are_adjacent(start, end):
                continue
            pair = find_disjoint_paths(start, end, adjacency, max_length=3)
            if pair is None:
                continue
            upper, lower = pair
            members = (start, upper.nodes[1], lower.nodes[1], end)
            branch_ids = upper.branches + lower.branches
            if len(set(members)) != 4 or len(set(branch_ids)) != 4:
                continue
            pattern = CircuitPattern(PatternKind.BRIDGE, members, branch_ids, BRIDGE_TEMPLATE)
            found.append(pattern)
            claims.claim(pattern)
            nodes, _, adjacency = claims.free_graph()
    return found


def _find_pis(claims: _Claims) -> List[CircuitPattern]:
    found: List[CircuitPattern] = []
    nodes, branches, adjacency = claims.free_graph()
    rank = {node.id: k for k, node in enumerate(nodes)}
    for a in rank:
        for b in adjacency.distinct_neighbors(a):
            if rank[b] <= rank[a]:
                continue
            for c in adjacency.distinct_neighbors(b):
                if rank[c] <= rank[b] or not adjacency.are_adjacent(a, c):
                    continue
                if {a, b, c} & claims.nodes:
                    continue
                members = (a, b, c)
                within = branches_within(members, branches)
                if not matches_pattern(members, within, _TRIANGLE):
                    continue
                if not has_cycle([ElectricalNode(m) for m in members], within):
                    continue
                pattern = CircuitPattern(PatternKind.PI, members, tuple(edge.id for edge in within), PI_TEMPLATE)
                found.append(pattern)
                claims.claim(pattern)
    return found


def _find_tees(claims: _Claims) -> List[CircuitPattern]:
    found: List[CircuitPattern] = []
    nodes, branches, adjacency = claims.free_graph()
    for center in (node.id for node in nodes):
        if center in claims.nodes or adjacency.degree(center) != 3:
            continue
        leaves = adjacency.distinct_neighbors(center)
        if len(leaves) != 3 or set(leaves) & claims.nodes:
            continue
        members = (center, *leaves)
        within = [b for b in branches_within(members, branches) if b.id not in claims.branches]
        if not matches_pattern(members, within, _STAR):
            continue
        pattern = CircuitPattern(PatternKind.T, members, tuple(b.id for b in within), T_TEMPLATE)
        found.append(pattern)
        claims.claim(pattern)
    return found


def _trace_chain(start: NodeId, adjacency: Adjacency) -> Tuple[List[NodeId], List[BranchId]]:
    chain = [start]
    chain_branches: List[BranchId] = []
    current = start
    while True:
        step = next(
            (
                (neighbor, branch)
                for neighbor, branch in zip(adjacency.neighbors[current], adjacency.branches[current])
                if neighbor not in chain and branch.id not in chain_branches
            ),
            None,
        )
        if step is None:
            break
        neighbor, branch = step
        if adjacency.degree(neighbor) > 2:
            break
        chain.append(neighbor)
        chain_branches.append(branch.id)
        current = neighbor
        if adjacency.degree(neighbor) == 1:
            break
    return chain, chain_branches


def _find_series(claims: _Claims) -> List[CircuitPattern]:
    found: List[CircuitPattern] = []
    nodes, _, adjacency = claims.free_graph()
    for start in (node.id for node in nodes):
        if start in claims.nodes or adjacency.degree(start) != 1:
            continue
        chain, chain_branches = _trace_chain(start, adjacency)
        if len(chain) < 3 or len(chain_branches) < 2 or set(chain[1:]) & claims.nodes:
            continue
        last = len(chain) - 1
        template = tuple((100.0 * i / last, 50.0) for i in range(len(chain)))
        pattern = CircuitPattern(PatternKind.SERIES, tuple(chain), tuple(chain_branches), template)
        found.append(pattern)
        claims.claim(pattern)
    return found


def find_patterns(nodes: Sequence[ElectricalNode], branches: Sequence[Branch]) -> List[CircuitPattern]:
    """Detect bridges, then pi sections, T junctions and series chains.

    A node or branch is claimed by at most one pattern.
    """

    claims = _Claims(nodes, branches)
    patterns: List[CircuitPattern] = []
    for detector in (_find_bridges, _find_pis, _find_tees, _find_series):
        patterns.extend(detector(claims))
    if patterns:
        logger.debug("Detected patterns: %s", ", ".join(p.kind.value for p in patterns))
    return patterns


def _super_node_ids(count: int, taken: Set[NodeId]) -> List[NodeId]:
    ids = []
    for i in range(count):
        candidate = f"super_{i}"
        while candidate in taken:
            candidate += "_"
        taken.add(candidate)
        ids.append(candidate)
    return ids


def collapse_patterns(
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    patterns: Sequence[CircuitPattern],
) -> SimplifiedGraph:
    owner: Dict[NodeId, int] = {}
    for k, pattern in enumerate(patterns):
        for node_id in pattern.nodes:
            owner[node_id] = k
    inside = {branch_id for pattern in patterns for branch_id in pattern.branches}
    ids = _super_node_ids(len(patterns), {node.id for node in nodes})

    connections: List[List[ExternalConnection]] = [[] for _ in patterns]
    remaining: List[Branch] = []
    for branch in branches:
        if branch.id in inside:
            continue
        a_owner = owner.get(branch.from_node_id)
        b_owner = owner.get(branch.to_node_id)
        if a_owner is not None and a_owner == b_owner:
            # leftover branch between two members of one pattern
            continue
        if a_owner is not None:
            connections[a_owner].append(ExternalConnection(branch.to_node_id, branch.from_node_id, branch.id))
        if b_owner is not None:
            connections[b_owner].append(ExternalConnection(branch.from_node_id, branch.to_node_id, branch.id))
        remaining.append(
            Branch(
                id=branch.id,
                type=branch.type,
                value=branch.value,
                from_node_id=ids[a_owner] if a_owner is not None else branch.from_node_id,
                to_node_id=ids[b_owner] if b_owner is not None else branch.to_node_id,
            )
        )

    supers = tuple(
        SuperNode(id=ids[k], pattern=pattern, external_connections=tuple(connections[k]))
        for k, pattern in enumerate(patterns)
    )
    plain = tuple(node for node in nodes if node.id not in owner)
    return SimplifiedGraph(nodes=plain, super_nodes=supers, branches=tuple(remaining))


def expand_patterns(
    simplified: SimplifiedGraph,
    positions: Mapping[NodeId, Point],
    scale: float = 1.0,
) -> Dict[NodeId, Point]:
    expanded: Dict[NodeId, Point] = {}
    for node in simplified.nodes:
        if node.id not in positions:
            raise LayoutInvariantError(f"no position for node {node.id}")
        expanded[node.id] = positions[node.id]
    for super_node in simplified.super_nodes:
        if super_node.id not in positions:
            raise LayoutInvariantError(f"no position for super node {super_node.id}")
        origin = positions[super_node.id]
        for node_id, (dx, dy) in zip(super_node.pattern.nodes, super_node.pattern.template):
            expanded[node_id] = Point(origin.x + dx * scale, origin.y + dy * scale)
    return expanded


__all__ = [
    "BRIDGE_TEMPLATE",
    "CircuitPattern",
    "ExternalConnection",
    "PI_TEMPLATE",
    "PatternKind",
    "SimplifiedGraph",
    "SuperNode",
    "T_TEMPLATE",
    "collapse_patterns",
    "expand_patterns",
    "find_patterns",
]


apply_debug_logging(globals(), logger=logger)
