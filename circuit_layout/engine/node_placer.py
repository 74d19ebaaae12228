"""Node coordinate computation.

``place_nodes`` runs the full hybrid pipeline: force-directed relaxation,
grid snapping, axis alignment, symmetry enforcement, density-driven spacing
and centering. ``place_nodes_for_planarity`` replaces everything after the
relaxation with simulated annealing on crossings plus wire length, and
``refine_layout`` is a short smoothing pass over existing positions.

All heavy lifting happens on ``(n, 2)`` numpy arrays indexed through a
``NodeArena``; id-keyed ``Point`` maps appear only at the function
boundaries.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np
from scipy.spatial import cKDTree

from ..geometry import bounding_box_of, count_crossings, total_segment_length
from ..logging_utils import apply_debug_logging
from ..model import BoundingBox, Branch, ElectricalNode, NodeId, NodePlacementResult, Point
from ..symmetry import calculate_central_axis, find_isomorphic_subgraphs, mirror_positions
from .arena import NodeArena
from .config import AnnealingConfig, ForceConfig, PlacementConfig

logger = logging.getLogger(__name__)

_MIN_LINK_DISTANCE = 1e-6
_MIN_REPULSION_DISTANCE_SQ = 1e-6


def _initial_circle(count: int, radius: float) -> np.ndarray:
    angles = 2.0 * np.pi * np.arange(count) / max(count, 1)
    return np.column_stack((radius * np.cos(angles), radius * np.sin(angles)))


def _accumulate_forces(
    coords: np.ndarray, endpoints: np.ndarray, forces: ForceConfig, *, centering: bool
) -> np.ndarray:
    total = np.zeros_like(coords)
    if centering:
        total -= forces.centering_strength * coords

    if len(endpoints):
        src = endpoints[:, 0]
        dst = endpoints[:, 1]
        delta = coords[dst] - coords[src]
        dist = np.hypot(delta[:, 0], delta[:, 1])
        active = dist >= _MIN_LINK_DISTANCE
        safe = np.where(active, dist, 1.0)
        magnitude = np.where(active, (dist - forces.link_distance) * forces.link_strength, 0.0)
        pull = delta * (magnitude / safe)[:, None]
        np.add.at(total, src, pull)
        np.add.at(total, dst, -pull)

    if len(coords) > 1:
        # diff[i, j] points from node i to node j
        diff = coords[None, :, :] - coords[:, None, :]
        dist_sq = np.einsum("ijk,ijk->ij", diff, diff)
        active = dist_sq >= _MIN_REPULSION_DISTANCE_SQ
        np.fill_diagonal(active, False)
        safe_sq = np.where(active, dist_sq, 1.0)
        scale = np.where(active, forces.repulsion_strength / (safe_sq * np.sqrt(safe_sq)), 0.0)
        total -= np.einsum("ij,ijk->ik", scale, diff)

    return total


def _relax(coords: np.ndarray, endpoints: np.ndarray, forces: ForceConfig) -> np.ndarray:
    velocity = np.zeros_like(coords)
    previous_energy = math.inf
    for iteration in range(forces.max_iterations):
        force = _accumulate_forces(coords, endpoints, forces, centering=True)
        cooling = 1.0 - iteration / forces.max_iterations
        velocity = velocity * forces.damping + force * cooling
        coords = coords + velocity

        energy = float(np.hypot(force[:, 0], force[:, 1]).sum())
        if abs(energy - previous_energy) < forces.energy_threshold:
            logger.debug("Force relaxation settled after %d iteration(s)", iteration + 1)
            break
        previous_energy = energy
    else:
        logger.debug("Force relaxation hit the %d iteration cap", forces.max_iterations)
    return coords


def _snap_to_grid(coords: np.ndarray, grid_size: float) -> np.ndarray:
    # halves round up, not to even
    return np.floor(coords / grid_size + 0.5) * grid_size


def _align(coords: np.ndarray, threshold: float) -> np.ndarray:
    aligned = coords.copy()
    count = len(aligned)
    for axis in (0, 1):
        column = aligned[:, axis]
        for i in range(count):
            for j in range(i + 1, count):
                if abs(column[i] - column[j]) < threshold:
                    mean = (column[i] + column[j]) / 2.0
                    column[i] = mean
                    column[j] = mean
    return aligned


def _enforce_symmetry(
    coords: np.ndarray, arena: NodeArena, nodes: Sequence[ElectricalNode], branches: Sequence[Branch]
) -> np.ndarray:
    subgraphs = find_isomorphic_subgraphs(nodes, branches)
    if not subgraphs:
        return coords
    members = sorted({arena.index[node_id] for sub in subgraphs for node_id in sub.nodes if node_id in arena.index})
    axis = calculate_central_axis(coords)
    mirrored = mirror_positions(coords, axis)
    result = coords.copy()
    result[members] = mirrored[members]
    logger.debug(
        "Mirrored %d node(s) across %s axis at %.1f (%d sub-structure(s))",
        len(members),
        axis.orientation,
        axis.position,
        len(subgraphs),
    )
    return result


def _proximity_regions(coords: np.ndarray, radius: float) -> List[np.ndarray]:
    """Greedy single pass: each unclaimed node claims all unclaimed nodes within ``radius``."""

    tree = cKDTree(coords)
    claimed = np.zeros(len(coords), dtype=bool)
    regions: List[np.ndarray] = []
    for seed in range(len(coords)):
        if claimed[seed]:
            continue
        nearby = np.array(sorted(tree.query_ball_point(coords[seed], r=radius)), dtype=np.intp)
        members = nearby[~claimed[nearby]]
        claimed[members] = True
        regions.append(members)
    return regions


def _region_density(coords: np.ndarray, members: np.ndarray, endpoints: np.ndarray) -> float:
    inside = np.zeros(len(coords), dtype=bool)
    inside[members] = True
    internal = 0
    if len(endpoints):
        internal = int(np.count_nonzero(inside[endpoints[:, 0]] & inside[endpoints[:, 1]]))
    box = bounding_box_of(coords[members])
    area = max(box.width * box.height, 1.0)
    return internal / area * 1000.0


def _apply_dynamic_spacing(coords: np.ndarray, endpoints: np.ndarray, config: PlacementConfig) -> np.ndarray:
    result = coords.copy()
    for members in _proximity_regions(coords, config.region_size):
        if len(members) < 2:
            continue
        density = _region_density(coords, members, endpoints)
        if density <= config.crowding_threshold:
            continue
        factor = 1.2 + 0.3 * min(density / config.crowding_threshold, config.max_density_ratio)
        centroid = result[members].mean(axis=0)
        result[members] = centroid + (result[members] - centroid) * factor
        logger.debug("Spread crowded region of %d node(s) by %.2f (density %.3f)", len(members), factor, density)
    return result


def _center(coords: np.ndarray):
    box = bounding_box_of(coords)
    center = np.array([box.x + box.width / 2.0, box.y + box.height / 2.0])
    return coords - center, BoundingBox.centered(0.0, 0.0, box.width, box.height)


def place_nodes(
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    config: Optional[PlacementConfig] = None,
) -> NodePlacementResult:
    config = config or PlacementConfig()
    if not nodes:
        return NodePlacementResult(positions={}, bounds=BoundingBox(0.0, 0.0, 0.0, 0.0))

    arena = NodeArena.build(nodes, branches)
    coords = _relax(_initial_circle(len(arena), config.forces.initial_radius), arena.endpoints, config.forces)
    coords = _snap_to_grid(coords, config.grid_size)
    coords = _align(coords, config.alignment_threshold)
    coords = _enforce_symmetry(coords, arena, nodes, branches)
    coords = _apply_dynamic_spacing(coords, arena.endpoints, config)
    coords, bounds = _center(coords)

    return NodePlacementResult(positions=arena.positions_from(coords), bounds=bounds)


def _cost(coords: np.ndarray, endpoints: np.ndarray, crossing_penalty: float) -> float:
    return crossing_penalty * count_crossings(coords, endpoints) + total_segment_length(coords, endpoints)


def planarity_cost(
    positions: Mapping[NodeId, Point],
    branches: Sequence[Branch],
    annealing: Optional[AnnealingConfig] = None,
) -> float:
    """Crossing penalty plus total straight-line wire length for ``positions``."""

    annealing = annealing or AnnealingConfig()
    arena = NodeArena.build([ElectricalNode(node_id) for node_id in positions], branches)
    return _cost(arena.coords_from(positions), arena.endpoints, annealing.crossing_penalty)


def place_nodes_for_planarity(
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    iterations: int = 1000,
    rng: Optional[np.random.Generator] = None,
    config: Optional[PlacementConfig] = None,
    annealing: Optional[AnnealingConfig] = None,
) -> Dict[NodeId, Point]:
    """Anneal the relaxed layout towards fewer crossings and shorter wires.

    Returns the lowest-cost configuration seen, which is never worse than the
    relaxed starting layout.
    """

    config = config or PlacementConfig()
    annealing = annealing or AnnealingConfig()
    rng = rng if rng is not None else np.random.default_rng()
    if not nodes:
        return {}

    arena = NodeArena.build(nodes, branches)
    endpoints = arena.endpoints
    coords = _relax(_initial_circle(len(arena), config.forces.initial_radius), endpoints, config.forces)
    current_cost = _cost(coords, endpoints, annealing.crossing_penalty)
    best, best_cost = coords.copy(), current_cost
    initial_cost = current_cost

    temperature = annealing.initial_temperature
    accepted = 0
    for _ in range(iterations):
        k = int(rng.integers(len(arena)))
        candidate = coords.copy()
        candidate[k] += (rng.random(2) - 0.5) * 2.0 * temperature
        cost = _cost(candidate, endpoints, annealing.crossing_penalty)
        delta = cost - current_cost
        if delta < 0 or (temperature > 0 and rng.random() < math.exp(-delta / temperature)):
            coords, current_cost = candidate, cost
            accepted += 1
            if cost < best_cost:
                best, best_cost = candidate.copy(), cost
        temperature *= annealing.cooling_rate

    logger.debug(
        "Annealing: %d/%d move(s) accepted, cost %.2f -> %.2f",
        accepted,
        iterations,
        initial_cost,
        best_cost,
    )
    return arena.positions_from(best)


def refine_layout(
    positions: Mapping[NodeId, Point],
    nodes: Sequence[ElectricalNode],
    branches: Sequence[Branch],
    iterations: int = 50,
    config: Optional[PlacementConfig] = None,
) -> Dict[NodeId, Point]:
    config = config or PlacementConfig()
    if not nodes:
        return {}
    arena = NodeArena.build(nodes, branches)
    coords = arena.coords_from(positions)
    velocity = np.zeros_like(coords)
    for _ in range(iterations):
        force = _accumulate_forces(coords, arena.endpoints, config.forces, centering=False)
        velocity = velocity * config.forces.damping + force
        coords = coords + velocity
    return arena.positions_from(coords)


__all__ = ["place_nodes", "place_nodes_for_planarity", "planarity_cost", "refine_layout"]


apply_debug_logging(globals(), logger=logger)
