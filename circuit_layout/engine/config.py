"""Immutable configuration records for the layout engine."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Mapping, Optional, Tuple


@dataclass(frozen=True)
class ForceConfig:
    link_distance: float = 150.0
    link_strength: float = 0.1
    repulsion_strength: float = 5000.0
    centering_strength: float = 0.1
    damping: float = 0.9
    max_iterations: int = 300
    energy_threshold: float = 0.1
    initial_radius: float = 200.0


@dataclass(frozen=True)
class PlacementConfig:
    forces: ForceConfig = field(default_factory=ForceConfig)
    grid_size: float = 50.0
    alignment_threshold: float = 20.0
    region_size: float = 100.0
    crowding_threshold: float = 0.5
    max_density_ratio: float = 3.0
    refine_iterations: int = 50


@dataclass(frozen=True)
class AnnealingConfig:
    initial_temperature: float = 100.0
    cooling_rate: float = 0.995
    crossing_penalty: float = 1000.0


@dataclass(frozen=True)
class RouterConfig:
    node_radius: float = 5.0
    curve_offsets: Tuple[float, ...] = (30.0, -30.0, 60.0)
    parallel_offset: float = 40.0
    curvature_penalty: float = 10.0
    intersection_penalty: float = 1000.0
    proximity_weight: float = 100.0
    proximity_samples: int = 11
    curve_segments: int = 10


@dataclass(frozen=True)
class LabelConfig:
    offset: float = 10.0
    char_width: float = 8.0
    line_height: float = 14.0
    node_extent: float = 6.0
    edge_extent: float = 6.0
    edge_samples: int = 11


@dataclass(frozen=True)
class LayoutOptions:
    """Options recognised by ``calculate_layout``."""

    use_pattern_recognition: bool = True
    prioritize_planarity: bool = True
    annealing_iterations: int = 1000
    use_optimization: bool = False
    random_seed: Optional[int] = None
    placement: PlacementConfig = field(default_factory=PlacementConfig)
    annealing: AnnealingConfig = field(default_factory=AnnealingConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    labels: LabelConfig = field(default_factory=LabelConfig)

    _CAMEL_KEYS = {
        "usePatternRecognition": "use_pattern_recognition",
        "prioritizePlanarity": "prioritize_planarity",
        "annealingIterations": "annealing_iterations",
        "useOptimization": "use_optimization",
        "randomSeed": "random_seed",
    }

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "LayoutOptions":
        """Accept both the editor's camelCase keys and snake_case field names."""

        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in values.items():
            name = cls._CAMEL_KEYS.get(key, key)
            if name not in known:
                raise ValueError(f"unknown layout option {key!r}")
            kwargs[name] = value
        if "annealing_iterations" in kwargs:
            kwargs["annealing_iterations"] = int(kwargs["annealing_iterations"])
            if kwargs["annealing_iterations"] < 0:
                raise ValueError("annealingIterations must be non-negative")
        return cls(**kwargs)


__all__ = [
    "AnnealingConfig",
    "ForceConfig",
    "LabelConfig",
    "LayoutOptions",
    "PlacementConfig",
    "RouterConfig",
]
