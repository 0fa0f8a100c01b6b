"""Planar value types and the 2D math shared by the resolver, measurement and inference."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


@dataclass(frozen=True)
class Point2:
    """Sketch-local coordinate (plane relative, never world or screen space)."""

    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    def __add__(self, other: "Point2") -> "Point2":
        return Point2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Point2") -> "Point2":
        return Point2(self.x - other.x, self.y - other.y)

    def __mul__(self, scale: float) -> "Point2":
        return Point2(self.x * scale, self.y * scale)

    __rmul__ = __mul__

    def __neg__(self) -> "Point2":
        return Point2(-self.x, -self.y)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


# Directions share the representation of points.
Vec2 = Point2

ORIGIN = Point2(0.0, 0.0)


def dot(a: Point2, b: Point2) -> float:
    return a.x * b.x + a.y * b.y


def cross(a: Point2, b: Point2) -> float:
    return a.x * b.y - a.y * b.x


def norm_sq(v: Point2) -> float:
    return dot(v, v)


def norm(v: Point2) -> float:
    return math.sqrt(max(norm_sq(v), 0.0))


def distance(a: Point2, b: Point2) -> float:
    return norm(b - a)


def distance_sq(a: Point2, b: Point2) -> float:
    return norm_sq(b - a)


def midpoint(a: Point2, b: Point2) -> Point2:
    return Point2((a.x + b.x) * 0.5, (a.y + b.y) * 0.5)


def rotate90(v: Point2) -> Point2:
    return Point2(-v.y, v.x)


def normalized(v: Point2) -> Optional[Point2]:
    length = norm(v)
    if length <= 1e-12:
        return None
    return Point2(v.x / length, v.y / length)


def direction_angle(v: Point2) -> float:
    """Polar angle of ``v`` in radians, in (-pi, pi]."""

    return math.atan2(v.y, v.x)


def wrap_angle(angle: float) -> float:
    """Normalise ``angle`` (radians) into (-pi, pi]."""

    while angle > math.pi:
        angle -= 2.0 * math.pi
    while angle <= -math.pi:
        angle += 2.0 * math.pi
    return angle


def point_line_distance(point: Point2, start: Point2, end: Point2) -> float:
    """Perpendicular distance from ``point`` to the infinite line through ``start``/``end``.

    A degenerate line collapses to the distance to ``start``.
    """

    direction = end - start
    length = norm(direction)
    if length <= 1e-12:
        return distance(point, start)
    return abs(cross(point - start, direction)) / length


def project_point_to_line(point: Point2, anchor: Point2, direction: Point2) -> Point2:
    """Project ``point`` onto the parametric line ``anchor + t * direction``."""

    denom = norm_sq(direction)
    if denom <= 1e-12:
        return point
    t = dot(point - anchor, direction) / denom
    return anchor + direction * t


def line_intersection(
    a_start: Point2, a_end: Point2, b_start: Point2, b_end: Point2, *, denom_eps: float = 1e-12
) -> Optional[Point2]:
    """Intersect the infinite lines through two segments with the 2x2 determinant formula."""

    x1, y1 = a_start
    x2, y2 = a_end
    x3, y3 = b_start
    x4, y4 = b_end
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) <= denom_eps:
        return None
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    return Point2(x1 + t * (x2 - x1), y1 + t * (y2 - y1))


def segment_intersection(
    a_start: Point2, a_end: Point2, b_start: Point2, b_end: Point2, *, denom_eps: float = 1e-10
) -> Optional[Point2]:
    """Crossing point of two segments; ``None`` when parallel or outside either segment."""

    d1 = a_end - a_start
    d2 = b_end - b_start
    denom = cross(d1, d2)
    if abs(denom) < denom_eps:
        return None
    offset = b_start - a_start
    t = cross(offset, d2) / denom
    s = cross(offset, d1) / denom
    if 0.0 <= t <= 1.0 and 0.0 <= s <= 1.0:
        return a_start + d1 * t
    return None


def arc_point(center: Point2, radius: float, angle: float) -> Point2:
    return Point2(center.x + radius * math.cos(angle), center.y + radius * math.sin(angle))


def arc_sweep(start_angle: float, end_angle: float) -> float:
    """Counter-clockwise sweep from ``start_angle`` to ``end_angle`` in [0, 2pi)."""

    sweep = end_angle - start_angle
    while sweep < 0.0:
        sweep += 2.0 * math.pi
    while sweep >= 2.0 * math.pi:
        sweep -= 2.0 * math.pi
    return sweep


def as_point(value: object) -> Point2:
    """Coerce a ``Point2`` or an ``(x, y)`` pair."""

    if isinstance(value, Point2):
        return value
    if isinstance(value, (list, tuple)) and len(value) == 2:
        return Point2(float(value[0]), float(value[1]))
    try:
        x, y = value  # type: ignore[misc]
    except (TypeError, ValueError) as exc:
        raise TypeError(f"expected a 2D point, got {value!r}") from exc
    return Point2(float(x), float(y))


__all__ = [
    "Point2",
    "Vec2",
    "ORIGIN",
    "arc_point",
    "arc_sweep",
    "as_point",
    "cross",
    "direction_angle",
    "distance",
    "distance_sq",
    "dot",
    "line_intersection",
    "midpoint",
    "norm",
    "norm_sq",
    "normalized",
    "point_line_distance",
    "project_point_to_line",
    "rotate90",
    "segment_intersection",
    "wrap_angle",
]
