"""Sketch primitives and the selection items that refer to them."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

from .errors import GeometryError
from .geometry import ORIGIN, Point2, arc_point, as_point, distance, midpoint

EntityRef = str

ORIGIN_REF: EntityRef = "origin"

_DEGENERATE_LINE_EPS = 1e-9


class SnapKind(str, Enum):
    ENDPOINT = "endpoint"
    CENTER = "center"
    MIDPOINT = "midpoint"
    INTERSECTION = "intersection"
    ORIGIN = "origin"
    GRID = "grid"


# Lower wins when several snap targets are in range.
SNAP_PRIORITY = {
    SnapKind.ENDPOINT: 1,
    SnapKind.CENTER: 2,
    SnapKind.INTERSECTION: 3,
    SnapKind.MIDPOINT: 4,
    SnapKind.ORIGIN: 5,
    SnapKind.GRID: 10,
}


@dataclass(frozen=True)
class SnapTarget:
    """A point the cursor may snap onto.

    ``entity_ref`` is ``None`` for line crossings and grid points, which belong
    to no single entity.
    """

    entity_ref: Optional[EntityRef]
    kind: SnapKind
    position: Point2
    index: int = 0


def _check_ref(ref: object) -> None:
    if not isinstance(ref, str) or not ref:
        raise GeometryError(f"entity id must be a non-empty string, got {ref!r}")


def _check_radius(ref: EntityRef, radius: float) -> None:
    if not (radius > 0.0) or math.isinf(radius):
        raise GeometryError(f"{ref}: radius must be positive, got {radius!r}")


@dataclass(frozen=True)
class PointEntity:
    id: EntityRef
    position: Point2

    def __post_init__(self) -> None:
        _check_ref(self.id)
        object.__setattr__(self, "position", as_point(self.position))

    def snap_points(self) -> List[SnapTarget]:
        return [SnapTarget(self.id, SnapKind.ENDPOINT, self.position)]


@dataclass(frozen=True)
class Line:
    """Segment between two endpoints; neither endpoint is the anchor."""

    id: EntityRef
    start: Point2
    end: Point2

    def __post_init__(self) -> None:
        _check_ref(self.id)
        object.__setattr__(self, "start", as_point(self.start))
        object.__setattr__(self, "end", as_point(self.end))
        if distance(self.start, self.end) <= _DEGENERATE_LINE_EPS:
            raise GeometryError(f"{self.id}: line endpoints coincide at {self.start}")

    @property
    def endpoints(self) -> Tuple[Point2, Point2]:
        return self.start, self.end

    @property
    def midpoint(self) -> Point2:
        return midpoint(self.start, self.end)

    @property
    def length(self) -> float:
        return distance(self.start, self.end)

    def snap_points(self) -> List[SnapTarget]:
        return [
            SnapTarget(self.id, SnapKind.ENDPOINT, self.start, 0),
            SnapTarget(self.id, SnapKind.ENDPOINT, self.end, 1),
            SnapTarget(self.id, SnapKind.MIDPOINT, self.midpoint),
        ]


@dataclass(frozen=True)
class Circle:
    id: EntityRef
    center: Point2
    radius: float

    def __post_init__(self) -> None:
        _check_ref(self.id)
        object.__setattr__(self, "center", as_point(self.center))
        object.__setattr__(self, "radius", float(self.radius))
        _check_radius(self.id, self.radius)

    def snap_points(self) -> List[SnapTarget]:
        return [SnapTarget(self.id, SnapKind.CENTER, self.center)]


@dataclass(frozen=True)
class Arc:
    """Counter-clockwise arc from ``start_angle`` to ``end_angle`` (radians)."""

    id: EntityRef
    center: Point2
    radius: float
    start_angle: float
    end_angle: float

    def __post_init__(self) -> None:
        _check_ref(self.id)
        object.__setattr__(self, "center", as_point(self.center))
        object.__setattr__(self, "radius", float(self.radius))
        _check_radius(self.id, self.radius)

    @property
    def start(self) -> Point2:
        return arc_point(self.center, self.radius, self.start_angle)

    @property
    def end(self) -> Point2:
        return arc_point(self.center, self.radius, self.end_angle)

    def snap_points(self) -> List[SnapTarget]:
        return [
            SnapTarget(self.id, SnapKind.CENTER, self.center),
            SnapTarget(self.id, SnapKind.ENDPOINT, self.start, 0),
            SnapTarget(self.id, SnapKind.ENDPOINT, self.end, 1),
        ]


Entity = Union[PointEntity, Line, Circle, Arc]
CircleLike = Union[Circle, Arc]


class SelectionRole(str, Enum):
    ENDPOINT = "endpoint"
    MIDPOINT = "midpoint"
    CENTER = "center"
    EDGE_CURVE = "edge"
    ORIGIN = "origin"


POINT_ROLES = frozenset(
    {SelectionRole.ENDPOINT, SelectionRole.MIDPOINT, SelectionRole.CENTER, SelectionRole.ORIGIN}
)


@dataclass(frozen=True)
class SelectionItem:
    """One picked item: an entity plus the geometric role it was picked in."""

    entity_ref: EntityRef
    role: SelectionRole
    index: int = 0

    @classmethod
    def endpoint(cls, ref: EntityRef, index: int) -> "SelectionItem":
        return cls(ref, SelectionRole.ENDPOINT, index)

    @classmethod
    def midpoint(cls, ref: EntityRef) -> "SelectionItem":
        return cls(ref, SelectionRole.MIDPOINT)

    @classmethod
    def center(cls, ref: EntityRef) -> "SelectionItem":
        return cls(ref, SelectionRole.CENTER)

    @classmethod
    def edge(cls, ref: EntityRef) -> "SelectionItem":
        return cls(ref, SelectionRole.EDGE_CURVE)

    @classmethod
    def origin(cls) -> "SelectionItem":
        return cls(ORIGIN_REF, SelectionRole.ORIGIN)


def point_for(entity: Optional[Entity], item: SelectionItem) -> Optional[Point2]:
    """Return the location ``item`` designates on ``entity``.

    ``None`` means the role does not describe a point on that entity (an edge
    pick on a line, a centre pick on a line, an endpoint index out of range).
    """

    if item.role is SelectionRole.ORIGIN:
        return ORIGIN
    if entity is None:
        return None
    if isinstance(entity, PointEntity):
        return entity.position
    if isinstance(entity, Line):
        if item.role is SelectionRole.ENDPOINT and item.index in (0, 1):
            return entity.endpoints[item.index]
        if item.role is SelectionRole.MIDPOINT:
            return entity.midpoint
        return None
    if isinstance(entity, Arc):
        if item.role is SelectionRole.CENTER:
            return entity.center
        if item.role is SelectionRole.ENDPOINT and item.index in (0, 1):
            return entity.start if item.index == 0 else entity.end
        return None
    if isinstance(entity, Circle):
        if item.role is SelectionRole.CENTER:
            return entity.center
        return None
    return None


__all__ = [
    "Arc",
    "Circle",
    "CircleLike",
    "Entity",
    "EntityRef",
    "Line",
    "ORIGIN_REF",
    "POINT_ROLES",
    "PointEntity",
    "SNAP_PRIORITY",
    "SelectionItem",
    "SelectionRole",
    "SnapKind",
    "SnapTarget",
    "point_for",
]
