"""Traversal and structural queries over circuit multigraphs."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .model import Branch, BranchId, ElectricalNode, NodeId


@dataclass
class Adjacency:
    """Parallel neighbour and branch lists per node.

    ``neighbors[n][k]`` is reached from ``n`` through ``branches[n][k]``.
    Parallel branches appear once each.
    """

    neighbors: Dict[NodeId, List[NodeId]] = field(default_factory=dict)
    branches: Dict[NodeId, List[Branch]] = field(default_factory=dict)

    def degree(self, node_id: NodeId) -> int:
        return len(self.neighbors.get(node_id, ()))

    def distinct_neighbors(self, node_id: NodeId) -> List[NodeId]:
        return list(dict.fromkeys(self.neighbors.get(node_id, ())))

    def are_adjacent(self, a: NodeId, b: NodeId) -> bool:
        return b in self.neighbors.get(a, ())


@dataclass
class TraversalResult:
    visited: List[NodeId]
    parent: Dict[NodeId, Optional[NodeId]]
    distance: Dict[NodeId, int]


@dataclass(frozen=True)
class GraphPath:
    nodes: Tuple[NodeId, ...]
    branches: Tuple[BranchId, ...]


@dataclass(frozen=True)
class PatternStructure:
    node_count: int
    branch_count: int
    degrees: Tuple[int, ...]


def build_adjacency(nodes: Sequence[ElectricalNode], branches: Sequence[Branch]) -> Adjacency:
    """Branches touching a node outside ``nodes`` are ignored."""
    adjacency = Adjacency()
    for node in nodes:
        adjacency.neighbors[node.id] = []
        adjacency.branches[node.id] = []
    for branch in branches:
        a, b = branch.from_node_id, branch.to_node_id
        if a not in adjacency.neighbors or b not in adjacency.neighbors:
            continue
        adjacency.neighbors[a].append(b)
        adjacency.branches[a].append(branch)
        adjacency.neighbors[b].append(a)
        adjacency.branches[b].append(branch)
    return adjacency


def breadth_first_search(start: NodeId, adjacency: Adjacency) -> TraversalResult:
    parent: Dict[NodeId, Optional[NodeId]] = {start: None}
    dist: Dict[NodeId, int] = {start: 0}
    visited: List[NodeId] = []
    queue = deque([start])
    while queue:
        current = queue.popleft()
        visited.append(current)
        for neighbor in adjacency.neighbors.get(current, ()):
            if neighbor in parent:
                continue
            parent[neighbor] = current
            dist[neighbor] = dist[current] + 1
            queue.append(neighbor)
    return TraversalResult(visited=visited, parent=parent, distance=dist)


def depth_first_search(start: NodeId, adjacency: Adjacency) -> TraversalResult:
    """Pre-order DFS; visit order matches the recursive formulation."""

    parent: Dict[NodeId, Optional[NodeId]] = {start: None}
    dist: Dict[NodeId, int] = {start: 0}
    visited: List[NodeId] = [start]
    stack = [(start, iter(adjacency.neighbors.get(start, ())))]
    while stack:
        current, pending = stack[-1]
        for neighbor in pending:
            if neighbor in parent:
                continue
            parent[neighbor] = current
            dist[neighbor] = dist[current] + 1
            visited.append(neighbor)
            stack.append((neighbor, iter(adjacency.neighbors.get(neighbor, ()))))
            break
        else:
            stack.pop()
    return TraversalResult(visited=visited, parent=parent, distance=dist)


def has_cycle(nodes: Sequence[ElectricalNode], branches: Iterable[Branch]) -> bool:
    """True when the branches close a loop; parallel branches and self-loops count."""

    root: Dict[NodeId, NodeId] = {node.id: node.id for node in nodes}

    def find(node_id: NodeId) -> NodeId:
        while root[node_id] != node_id:
            root[node_id] = root[root[node_id]]
            node_id = root[node_id]
        return node_id

    for branch in branches:
        if branch.from_node_id not in root or branch.to_node_id not in root:
            continue
        a = find(branch.from_node_id)
        b = find(branch.to_node_id)
        if a == b:
            return True
        root[a] = b
    return False


def find_all_paths(
    start: NodeId, end: NodeId, adjacency: Adjacency, max_length: int = 10
) -> List[GraphPath]:
    """All simple paths from ``start`` to ``end`` with at most ``max_length`` nodes."""

    paths: List[GraphPath] = []
    on_path = {start}

    def walk(current: NodeId, node_path: List[NodeId], branch_path: List[BranchId]) -> None:
        if current == end and len(node_path) > 1:
            paths.append(GraphPath(tuple(node_path), tuple(branch_path)))
            return
        if len(node_path) >= max_length:
            return
        for neighbor, branch in zip(adjacency.neighbors.get(current, ()), adjacency.branches.get(current, ())):
            if neighbor in on_path:
                continue
            on_path.add(neighbor)
            node_path.append(neighbor)
            branch_path.append(branch.id)
            walk(neighbor, node_path, branch_path)
            branch_path.pop()
            node_path.pop()
            on_path.discard(neighbor)

    walk(start, [start], [])
    return paths


def find_disjoint_paths(
    start: NodeId, end: NodeId, adjacency: Adjacency, max_length: int = 10
) -> Optional[Tuple[GraphPath, GraphPath]]:
    """First pair of paths sharing no intermediate node and no branch."""

    paths = find_all_paths(start, end, adjacency, max_length=max_length)
    for i, first in enumerate(paths):
        inner_first = set(first.nodes[1:-1])
        for second in paths[i + 1:]:
            if inner_first.intersection(second.nodes[1:-1]):
                continue
            if set(first.branches).intersection(second.branches):
                continue
            return first, second
    return None


def subgraph_degrees(node_ids: Sequence[NodeId], branches: Iterable[Branch]) -> Dict[NodeId, int]:
    degrees = {node_id: 0 for node_id in node_ids}
    for branch in branches:
        for endpoint in branch.endpoints:
            if endpoint in degrees:
                degrees[endpoint] += 1
    return degrees


def branches_within(node_ids: Iterable[NodeId], branches: Iterable[Branch]) -> List[Branch]:
    members = set(node_ids)
    return [b for b in branches if b.from_node_id in members and b.to_node_id in members]


def matches_pattern(
    node_ids: Sequence[NodeId], branches: Sequence[Branch], pattern: PatternStructure
) -> bool:
    """Compare node/branch counts and the sorted in-subgraph degree sequence."""
    if len(node_ids) != pattern.node_count or len(branches) != pattern.branch_count:
        return False
    degrees = sorted(subgraph_degrees(node_ids, branches).values())
    return degrees == sorted(pattern.degrees)


__all__ = [
    "Adjacency",
    "GraphPath",
    "PatternStructure",
    "TraversalResult",
    "branches_within",
    "breadth_first_search",
    "build_adjacency",
    "depth_first_search",
    "find_all_paths",
    "find_disjoint_paths",
    "has_cycle",
    "matches_pattern",
    "subgraph_degrees",
]
