"""Tolerance configuration shared by the inference components."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass
class ToleranceConfig:
    """Epsilons and snap tolerances used across projection, resolution and inference.

    Lengths are in sketch units unless the name says otherwise.
    """

    # Two coordinates closer than this are treated as equal.
    point_epsilon: float = 1e-6
    # Smallest value a driving dimension may take.
    zero_distance_epsilon: float = 1e-6
    # How far outside the points' bounding box the placement must be before
    # a point-point dimension locks onto an axis.
    axis_lock_offset: float = 1.0
    parallel_angle_tolerance_deg: float = 0.1
    intersection_denom_epsilon: float = 1e-4
    projection_parallel_epsilon: float = 1e-6
    hv_snap_tolerance_deg: float = 3.0
    parallel_snap_tolerance_deg: float = 3.0
    snap_radius_px: float = 10.0
    min_direction_length: float = 0.01
    max_parallel_candidates: int = 10
    angular_inference_tools: Tuple[str, ...] = field(default_factory=lambda: ("line", "polyline"))


_TOLERANCE_CONFIG = ToleranceConfig()


def get_tolerance_config() -> ToleranceConfig:
    return copy.deepcopy(_TOLERANCE_CONFIG)


def set_tolerance_config(config: ToleranceConfig) -> None:
    global _TOLERANCE_CONFIG
    _TOLERANCE_CONFIG = copy.deepcopy(config)


def resolve_config(config: Optional[ToleranceConfig]) -> ToleranceConfig:
    """Return ``config`` or the current module default."""

    if config is not None:
        return config
    return _TOLERANCE_CONFIG


__all__ = [
    "ToleranceConfig",
    "get_tolerance_config",
    "set_tolerance_config",
    "resolve_config",
]
