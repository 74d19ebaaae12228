"""Planar geometry helpers shared by placement, routing and labelling.

Points are plain ``(x, y)`` tuples. The vectorized helpers operate on
``(m, 2)`` float arrays.
"""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import numpy as np

from .model import BoundingBox

Vec = Tuple[float, float]

_PARALLEL_EPS = 1e-10


def _vec2(a: Vec, b: Vec) -> Vec:
    return b[0] - a[0], b[1] - a[1]


def _dot2(a: Vec, b: Vec) -> float:
    return a[0] * b[0] + a[1] * b[1]


def _midpoint2(a: Vec, b: Vec) -> Vec:
    return (a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5


def _rotate90(v: Vec) -> Vec:
    return -v[1], v[0]


def distance(a: Vec, b: Vec) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def segment_intersection(p1: Vec, p2: Vec, p3: Vec, p4: Vec) -> Optional[Vec]:
    """Return the crossing point of segments p1-p2 and p3-p4, if any.

    Parallel and collinear segments never intersect. Touching at an endpoint
    counts as an intersection.
    """

    den = (p4[1] - p3[1]) * (p2[0] - p1[0]) - (p4[0] - p3[0]) * (p2[1] - p1[1])
    if abs(den) < _PARALLEL_EPS:
        return None
    ua = ((p4[0] - p3[0]) * (p1[1] - p3[1]) - (p4[1] - p3[1]) * (p1[0] - p3[0])) / den
    ub = ((p2[0] - p1[0]) * (p1[1] - p3[1]) - (p2[1] - p1[1]) * (p1[0] - p3[0])) / den
    if not (0.0 <= ua <= 1.0 and 0.0 <= ub <= 1.0):
        return None
    return p1[0] + ua * (p2[0] - p1[0]), p1[1] + ua * (p2[1] - p1[1])


def segment_circle_intersections(p1: Vec, p2: Vec, center: Vec, radius: float) -> List[Vec]:
    d = _vec2(p1, p2)
    f = _vec2(center, p1)
    a = _dot2(d, d)
    if a < _PARALLEL_EPS:
        return []
    b = 2.0 * _dot2(f, d)
    c = _dot2(f, f) - radius * radius
    disc = b * b - 4.0 * a * c
    if disc < 0:
        return []

    root = math.sqrt(disc)
    t1 = (-b - root) / (2.0 * a)
    t2 = (-b + root) / (2.0 * a)
    hits: List[Vec] = []
    if 0.0 <= t1 <= 1.0:
        hits.append((p1[0] + t1 * d[0], p1[1] + t1 * d[1]))
    if 0.0 <= t2 <= 1.0 and abs(t2 - t1) > _PARALLEL_EPS:
        hits.append((p1[0] + t2 * d[0], p1[1] + t2 * d[1]))
    return hits


def quadratic_point(p0: Vec, p1: Vec, p2: Vec, t: float) -> Vec:
    u = 1.0 - t
    return (
        u * u * p0[0] + 2.0 * u * t * p1[0] + t * t * p2[0],
        u * u * p0[1] + 2.0 * u * t * p1[1] + t * t * p2[1],
    )


def quadratic_tangent(p0: Vec, p1: Vec, p2: Vec, t: float) -> Vec:
    u = 1.0 - t
    return (
        2.0 * u * (p1[0] - p0[0]) + 2.0 * t * (p2[0] - p1[0]),
        2.0 * u * (p1[1] - p0[1]) + 2.0 * t * (p2[1] - p1[1]),
    )


def point_to_segment_distance(point: Vec, a: Vec, b: Vec) -> float:
    ab = _vec2(a, b)
    length_sq = _dot2(ab, ab)
    if length_sq < _PARALLEL_EPS:
        return distance(point, a)
    t = _dot2(_vec2(a, point), ab) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(point, (a[0] + t * ab[0], a[1] + t * ab[1]))


def offset_control_point(start: Vec, end: Vec, offset: float) -> Optional[Vec]:
    """Midpoint of start-end pushed ``offset`` along its unit normal.

    Returns None for a zero-length segment.
    """

    dx, dy = _vec2(start, end)
    length = math.hypot(dx, dy)
    if length < 1e-6:
        return None
    nx, ny = _rotate90((dx / length, dy / length))
    mx, my = _midpoint2(start, end)
    return mx + nx * offset, my + ny * offset


def boxes_intersect(a: BoundingBox, b: BoundingBox) -> bool:
    return a.x < b.right and a.right > b.x and a.y < b.bottom and a.bottom > b.y


def box_overlap_area(a: BoundingBox, b: BoundingBox) -> float:
    overlap_w = min(a.right, b.right) - max(a.x, b.x)
    overlap_h = min(a.bottom, b.bottom) - max(a.y, b.y)
    if overlap_w <= 0 or overlap_h <= 0:
        return 0.0
    return overlap_w * overlap_h


def bounding_box_of(points: np.ndarray) -> BoundingBox:
    if len(points) == 0:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)
    lo = points.min(axis=0)
    hi = points.max(axis=0)
    return BoundingBox(float(lo[0]), float(lo[1]), float(hi[0] - lo[0]), float(hi[1] - lo[1]))


def _pairs_not_sharing(endpoints: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    i, j = np.triu_indices(len(endpoints), k=1)
    a = endpoints[i]
    b = endpoints[j]
    shared = (
        (a[:, 0] == b[:, 0]) | (a[:, 0] == b[:, 1]) | (a[:, 1] == b[:, 0]) | (a[:, 1] == b[:, 1])
    )
    return i[~shared], j[~shared]


def crossing_mask(
    starts: np.ndarray, ends: np.ndarray, other_starts: np.ndarray, other_ends: np.ndarray
) -> np.ndarray:
    """Element-wise ``segment_intersection`` test over aligned segment arrays."""

    p1, p2, p3, p4 = starts, ends, other_starts, other_ends
    den = (p4[:, 1] - p3[:, 1]) * (p2[:, 0] - p1[:, 0]) - (p4[:, 0] - p3[:, 0]) * (p2[:, 1] - p1[:, 1])
    valid = np.abs(den) >= _PARALLEL_EPS
    safe = np.where(valid, den, 1.0)
    ua = ((p4[:, 0] - p3[:, 0]) * (p1[:, 1] - p3[:, 1]) - (p4[:, 1] - p3[:, 1]) * (p1[:, 0] - p3[:, 0])) / safe
    ub = ((p2[:, 0] - p1[:, 0]) * (p1[:, 1] - p3[:, 1]) - (p2[:, 1] - p1[:, 1]) * (p1[:, 0] - p3[:, 0])) / safe
    return valid & (ua >= 0.0) & (ua <= 1.0) & (ub >= 0.0) & (ub <= 1.0)


def count_crossings(coords: np.ndarray, endpoints: np.ndarray) -> int:
    """Count crossing segment pairs that do not share an endpoint.

    ``coords`` is an ``(n, 2)`` position array and ``endpoints`` an ``(m, 2)``
    integer array of node indices, one row per segment.
    """

    if len(endpoints) < 2:
        return 0
    i, j = _pairs_not_sharing(endpoints)
    if len(i) == 0:
        return 0
    starts = coords[endpoints[:, 0]]
    ends = coords[endpoints[:, 1]]
    hits = crossing_mask(starts[i], ends[i], starts[j], ends[j])
    return int(np.count_nonzero(hits))


def total_segment_length(coords: np.ndarray, endpoints: np.ndarray) -> float:
    if len(endpoints) == 0:
        return 0.0
    deltas = coords[endpoints[:, 1]] - coords[endpoints[:, 0]]
    return float(np.hypot(deltas[:, 0], deltas[:, 1]).sum())


def polylines_cross(first: np.ndarray, second: np.ndarray) -> bool:
    """Whether two polylines given as ``(k, 2)`` vertex arrays intersect."""

    if len(first) < 2 or len(second) < 2:
        return False
    a_start, a_end = first[:-1], first[1:]
    b_start, b_end = second[:-1], second[1:]
    ia, ib = np.meshgrid(np.arange(len(a_start)), np.arange(len(b_start)), indexing="ij")
    ia = ia.ravel()
    ib = ib.ravel()
    return bool(crossing_mask(a_start[ia], a_end[ia], b_start[ib], b_end[ib]).any())


__all__ = [
    "Vec",
    "box_overlap_area",
    "bounding_box_of",
    "boxes_intersect",
    "count_crossings",
    "crossing_mask",
    "distance",
    "offset_control_point",
    "point_to_segment_distance",
    "polylines_cross",
    "quadratic_point",
    "quadratic_tangent",
    "segment_circle_intersections",
    "segment_intersection",
    "total_segment_length",
]
