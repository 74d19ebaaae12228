"""Edge path records and the ``M``/``L``/``Q`` path descriptor mini-language."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .geometry import Vec, quadratic_point, quadratic_tangent

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


@dataclass(frozen=True)
class EdgePath:
    """A straight segment, or a single quadratic curve when ``control`` is set."""

    start: Vec
    end: Vec
    control: Optional[Vec] = None

    @property
    def is_curved(self) -> bool:
        return self.control is not None

    def point_at(self, t: float) -> Vec:
        if self.control is None:
            return (
                self.start[0] + (self.end[0] - self.start[0]) * t,
                self.start[1] + (self.end[1] - self.start[1]) * t,
            )
        return quadratic_point(self.start, self.control, self.end, t)

    def derivative_at(self, t: float) -> Vec:
        if self.control is None:
            return self.end[0] - self.start[0], self.end[1] - self.start[1]
        return quadratic_tangent(self.start, self.control, self.end, t)

    def sample(self, count: int) -> np.ndarray:
        """``count`` evenly spaced points from start to end as an ``(count, 2)`` array."""
        ts = np.linspace(0.0, 1.0, count)
        if self.control is None:
            start = np.asarray(self.start, dtype=float)
            end = np.asarray(self.end, dtype=float)
            return start + np.outer(ts, end - start)
        p0, p1, p2 = (np.asarray(p, dtype=float) for p in (self.start, self.control, self.end))
        u = 1.0 - ts
        return np.outer(u * u, p0) + np.outer(2.0 * u * ts, p1) + np.outer(ts * ts, p2)

    def polyline(self, segments: int = 10) -> np.ndarray:
        if self.control is None:
            return np.array([self.start, self.end], dtype=float)
        return self.sample(segments + 1)


def _format_number(value: float) -> str:
    if not math.isfinite(value):
        raise ValueError(f"cannot encode non-finite coordinate {value!r} in a path")
    text = f"{value:.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def format_path(path: EdgePath) -> str:
    x1, y1 = (_format_number(v) for v in path.start)
    x2, y2 = (_format_number(v) for v in path.end)
    if path.control is None:
        return f"M {x1} {y1} L {x2} {y2}"
    cx, cy = (_format_number(v) for v in path.control)
    return f"M {x1} {y1} Q {cx} {cy} {x2} {y2}"


def extract_numbers(descriptor: str) -> List[float]:
    return [float(token) for token in _NUMBER_RE.findall(descriptor)]


def parse_path(descriptor: str) -> EdgePath:
    """Parse a descriptor produced by ``format_path``.

    Raises ValueError for anything other than one straight or one quadratic
    segment.
    """

    numbers = extract_numbers(descriptor)
    if "Q" in descriptor:
        if len(numbers) != 6:
            raise ValueError(f"quadratic path needs 6 numbers, got {len(numbers)}: {descriptor!r}")
        return EdgePath(
            start=(numbers[0], numbers[1]),
            control=(numbers[2], numbers[3]),
            end=(numbers[4], numbers[5]),
        )
    if "L" in descriptor:
        if len(numbers) != 4:
            raise ValueError(f"straight path needs 4 numbers, got {len(numbers)}: {descriptor!r}")
        return EdgePath(start=(numbers[0], numbers[1]), end=(numbers[2], numbers[3]))
    raise ValueError(f"unsupported path descriptor: {descriptor!r}")


__all__ = ["EdgePath", "extract_numbers", "format_path", "parse_path"]
