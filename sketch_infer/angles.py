"""Angle between two sketch lines with orientation-independent arm directions."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .config import ToleranceConfig, resolve_config
from .entities import Line
from .geometry import Point2, cross, distance_sq, line_intersection, midpoint, wrap_angle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AngleResult:
    """Vertex, non-reflex angle and the arm directions measured from the vertex."""

    vertex: Point2
    angle_deg: float
    dir1: Point2
    dir2: Point2
    parallel: bool = False

    def is_parallel(self, tolerance_deg: float) -> bool:
        """``True`` for an angle within ``tolerance_deg`` of 0/180."""

        return self.angle_deg <= tolerance_deg or self.angle_deg >= 180.0 - tolerance_deg

    def oriented(self, sign1: float, sign2: float) -> "AngleResult":
        """Flip the arms by ``sign1``/``sign2`` and recompute the angle between them."""

        dir1 = self.dir1 * (1.0 if sign1 >= 0.0 else -1.0)
        dir2 = self.dir2 * (1.0 if sign2 >= 0.0 else -1.0)
        angle = self.angle_deg if (sign1 >= 0.0) == (sign2 >= 0.0) else 180.0 - self.angle_deg
        return replace(self, dir1=dir1, dir2=dir2, angle_deg=angle)


def _arm(line: Line, vertex: Point2) -> Point2:
    # Point toward whichever endpoint is farther from the vertex; line.end is
    # not a reliable arm when the two lines are drawn head-to-head.
    if distance_sq(vertex, line.end) > distance_sq(vertex, line.start):
        return line.end - vertex
    return line.start - vertex


def angle_between(line1: Line, line2: Line, *, config: Optional[ToleranceConfig] = None) -> AngleResult:
    """Compute the intersection vertex, arm directions and angle in [0, 180] degrees.

    When ``|denom| <= intersection_denom_epsilon`` there is no usable
    intersection: the vertex falls back to the midpoint of ``line1.end`` and
    ``line2.start``, the arms are the lines' own directions and the result is
    flagged ``parallel``. Very short lines can hit this branch at any angle,
    so callers route on :meth:`AngleResult.is_parallel`, not on the flag.
    """

    cfg = resolve_config(config)
    vertex = line_intersection(
        line1.start, line1.end, line2.start, line2.end, denom_eps=cfg.intersection_denom_epsilon
    )
    parallel = vertex is None
    if vertex is None:
        vertex = midpoint(line1.end, line2.start)
        # No real vertex: measure the line directions themselves so the
        # result stays at 0 or 180 degrees.
        dir1 = line1.end - line1.start
        dir2 = line2.end - line2.start
    else:
        dir1 = _arm(line1, vertex)
        dir2 = _arm(line2, vertex)

    angle1 = math.atan2(dir1.y, dir1.x)
    angle2 = math.atan2(dir2.y, dir2.x)
    diff = wrap_angle(angle2 - angle1)
    angle_deg = abs(diff) * 180.0 / math.pi

    logger.debug(
        "angle %s/%s: vertex=%s angle=%.4f parallel=%s", line1.id, line2.id, vertex, angle_deg, parallel
    )
    return AngleResult(vertex=vertex, angle_deg=angle_deg, dir1=dir1, dir2=dir2, parallel=parallel)


def sector_signs(result: AngleResult, placement: Point2) -> Tuple[float, float]:
    """Signs ``(a, b)`` with ``placement - vertex = a*dir1 + b*dir2``.

    Equal signs mean the placement sits in the measured sector (or its
    vertical opposite); mixed signs mean the supplementary one.
    """

    offset = placement - result.vertex
    det = cross(result.dir1, result.dir2)
    if abs(det) <= 1e-12:
        return 1.0, 1.0
    a = cross(offset, result.dir2) / det
    b = cross(result.dir1, offset) / det
    return (1.0 if a >= 0.0 else -1.0), (1.0 if b >= 0.0 else -1.0)


__all__ = ["AngleResult", "angle_between", "sector_signs"]
