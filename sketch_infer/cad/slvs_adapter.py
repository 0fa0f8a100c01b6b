"""SolveSpace adapter for committed dimensions and promoted hints."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from python_solvespace import slvs

from ..dimensions import DimensionKind, DimensionProposal
from ..entities import (
    ORIGIN_REF,
    Arc,
    Circle,
    Entity,
    EntityRef,
    Line,
    PointEntity,
    SelectionItem,
    SelectionRole,
)
from ..geometry import Point2, distance
from ..inference import ConstraintHint, HintKind
from ..store import EntityStore

logger = logging.getLogger(__name__)

PointName = str
Point2D = Tuple[float, float]
PromotedHint = Tuple[EntityRef, ConstraintHint]

# Mapping table documenting how proposals and hints are emitted.
CAD_MAPPING_TABLE: Mapping[str, Mapping[str, str]] = {
    "entities": {
        "point": "point P → add_point_2d(P)",
        "line": "line L → add_line_2d(L.start, L.end)",
        "circle": "circle C → add_circle(C.center, add_distance(r))",
        "arc": "arc A → add_arc(A.center, A.start, A.end)",
        "midpoint": "midpoint of L → add_point_2d + midpoint(pt, L)",
    },
    "dimensions": {
        "distance": "point-point / line length → distance(P, Q, d)",
        "parallel_distance": "parallel lines → distance(L2.start, L1, d)",
        "horizontal_distance": "helper H; horizontal(P-H), vertical(H-Q), distance(P, H, d)",
        "vertical_distance": "helper H; vertical(P-H), horizontal(H-Q), distance(P, H, d)",
        "point_line": "point P to line L → distance(P, L, d)",
        "angle": "line-line → angle(L1, L2, θ, inverse for the supplement)",
        "radius": "circle/arc → diameter(C, 2r)",
        "diameter": "circle/arc → diameter(C, d)",
    },
    "hints": {
        "horizontal": "horizontal(L)",
        "vertical": "vertical(L)",
        "parallel": "parallel(L, target)",
        "perpendicular": "perpendicular(L, target)",
        "coincident": "coincident(nearest endpoint of L, target snap point)",
    },
}


@dataclass
class SlvsAdapterOptions:
    """Options controlling the SolveSpace adapter."""

    dragged: Tuple[EntityRef, ...] = ()
    fix_origin: bool = True


@dataclass
class AdapterOK:
    """Successful SolveSpace solve."""

    coords: Dict[PointName, Point2D]
    dof: int
    system: slvs.SolverSystem


@dataclass
class AdapterFail:
    """Failure information when SolveSpace cannot satisfy the constraints."""

    failures: List[int]
    dof: int


AdapterResult = Union[AdapterOK, AdapterFail]
CadFailure = AdapterFail


def _point_names(entity: Entity) -> List[Tuple[PointName, Point2]]:
    if isinstance(entity, PointEntity):
        return [(entity.id, entity.position)]
    if isinstance(entity, Line):
        return [(f"{entity.id}.start", entity.start), (f"{entity.id}.end", entity.end)]
    if isinstance(entity, Arc):
        return [
            (f"{entity.id}.center", entity.center),
            (f"{entity.id}.start", entity.start),
            (f"{entity.id}.end", entity.end),
        ]
    return [(f"{entity.id}.center", entity.center)]


def _supplement_wanted(line1: Line, line2: Line, value: float) -> bool:
    d1 = line1.end - line1.start
    d2 = line2.end - line2.start
    cos_raw = (d1.x * d2.x + d1.y * d2.y) / (math.hypot(*d1) * math.hypot(*d2))
    raw = math.degrees(math.acos(max(-1.0, min(1.0, cos_raw))))
    return abs((180.0 - raw) - value) < abs(raw - value)


class _SketchRegistry:
    """Lazily mirrors store entities into one SolveSpace system."""

    def __init__(self, system: slvs.SolverSystem, wp: slvs.Entity, store: EntityStore):
        self._system = system
        self._wp = wp
        self._store = store
        self.points: Dict[PointName, slvs.Entity] = {}
        self._lines: Dict[EntityRef, slvs.Entity] = {}
        self._curves: Dict[EntityRef, slvs.Entity] = {}
        self._midpoints: Dict[EntityRef, slvs.Entity] = {}

    def entity(self, ref: EntityRef) -> Entity:
        entity = self._store.get(ref)
        if entity is None:
            raise KeyError(f"unknown entity '{ref}'")
        return entity

    def _add_point(self, name: PointName, at: Point2) -> slvs.Entity:
        if name not in self.points:
            self.points[name] = self._system.add_point_2d(wp=self._wp, u=at.x, v=at.y)
        return self.points[name]

    def origin(self) -> slvs.Entity:
        return self._add_point(ORIGIN_REF, Point2(0.0, 0.0))

    def helper(self, at: Point2) -> slvs.Entity:
        return self._system.add_point_2d(wp=self._wp, u=at.x, v=at.y)

    def entity_points(self, ref: EntityRef) -> List[slvs.Entity]:
        if ref == ORIGIN_REF:
            return [self.origin()]
        return [self._add_point(name, at) for name, at in _point_names(self.entity(ref))]

    def line(self, ref: EntityRef) -> slvs.Entity:
        if ref in self._lines:
            return self._lines[ref]
        entity = self.entity(ref)
        if not isinstance(entity, Line):
            raise TypeError(f"'{ref}' is not a line")
        start, end = self.entity_points(ref)
        line = self._system.add_line_2d(wp=self._wp, p1=start, p2=end)
        self._lines[ref] = line
        return line

    def segment(self, a: slvs.Entity, b: slvs.Entity) -> slvs.Entity:
        return self._system.add_line_2d(wp=self._wp, p1=a, p2=b)

    def curve(self, ref: EntityRef) -> slvs.Entity:
        if ref in self._curves:
            return self._curves[ref]
        entity = self.entity(ref)
        normal = self._system.add_normal_2d(wp=self._wp)
        points = self.entity_points(ref)
        if isinstance(entity, Circle):
            radius = self._system.add_distance(entity.radius, self._wp)
            curve = self._system.add_circle(wp=self._wp, nm=normal, ct=points[0], radius=radius)
        elif isinstance(entity, Arc):
            center, start, end = points
            curve = self._system.add_arc(wp=self._wp, nm=normal, ct=center, start=start, end=end)
        else:
            raise TypeError(f"'{ref}' is not a circle or arc")
        self._curves[ref] = curve
        return curve

    def point(self, item: SelectionItem) -> slvs.Entity:
        """SolveSpace point for a point-like selection item."""

        if item.role is SelectionRole.ORIGIN:
            return self.origin()
        entity = self.entity(item.entity_ref)
        if isinstance(entity, PointEntity):
            return self.entity_points(entity.id)[0]
        if item.role is SelectionRole.MIDPOINT and isinstance(entity, Line):
            if entity.id not in self._midpoints:
                mid = self.helper(entity.midpoint)
                self._system.midpoint(mid, self.line(entity.id), self._wp)
                self._midpoints[entity.id] = mid
            return self._midpoints[entity.id]
        points = self.entity_points(entity.id)
        if item.role is SelectionRole.CENTER and isinstance(entity, (Circle, Arc)):
            return points[0]
        if item.role is SelectionRole.ENDPOINT and isinstance(entity, Line) and item.index in (0, 1):
            return points[item.index]
        if item.role is SelectionRole.ENDPOINT and isinstance(entity, Arc) and item.index in (0, 1):
            return points[1 + item.index]
        raise KeyError(f"{item.role.value} #{item.index} of '{entity.id}' is not a point")

    def nearest_point(self, ref: EntityRef, at: Point2) -> slvs.Entity:
        if ref == ORIGIN_REF:
            return self.origin()
        named = _point_names(self.entity(ref))
        name, _ = min(named, key=lambda pair: distance(pair[1], at))
        self.entity_points(ref)
        return self.points[name]


class SlvsAdapter:
    """Adapter bridging committed sketch gestures with SolveSpace.

    Every call builds a fresh system seeded with the store's current
    geometry; only driving proposals are accepted.
    """

    def apply(
        self,
        store: EntityStore,
        proposals: Sequence[DimensionProposal],
        hints: Iterable[PromotedHint] = (),
        options: Optional[SlvsAdapterOptions] = None,
    ) -> AdapterResult:
        options = options or SlvsAdapterOptions()
        for proposal in proposals:
            if not getattr(proposal, "driving", False):
                raise ValueError("measurements are not driving and cannot be sent to the solver")

        system = slvs.SolverSystem()
        wp = system.create_2d_base()
        registry = _SketchRegistry(system, wp, store)

        if options.fix_origin:
            system.dragged(registry.origin(), wp)
        for ref in options.dragged:
            for point in registry.entity_points(ref):
                system.dragged(point, wp)

        for proposal in proposals:
            self._emit_dimension(system, wp, registry, proposal)
        for subject, hint in hints:
            self._emit_hint(system, wp, registry, subject, hint)

        result = system.solve()
        failures = list(system.failures())
        if failures or result == slvs.ResultFlag.TOO_MANY_UNKNOWNS:
            if not failures and result == slvs.ResultFlag.TOO_MANY_UNKNOWNS:
                failures = [-1]
            logger.warning("solve failed: result=%s failures=%s", result, failures)
            return AdapterFail(failures, system.dof())

        coords: Dict[PointName, Point2D] = {}
        for name, entity in registry.points.items():
            params = system.params(entity.params)
            coords[name] = (float(params[0]), float(params[1]))
        logger.info("solved %d dimension(s), dof=%d", len(proposals), system.dof())
        return AdapterOK(coords=coords, dof=system.dof(), system=system)

    def _emit_dimension(
        self,
        system: slvs.SolverSystem,
        wp: slvs.Entity,
        registry: _SketchRegistry,
        proposal: DimensionProposal,
    ) -> None:
        kind = proposal.kind
        items = proposal.items
        value = proposal.value
        if not items:
            raise ValueError(f"{kind.value} proposal carries no selection items")

        if kind in (DimensionKind.RADIUS, DimensionKind.DIAMETER):
            edge = next(i for i in items if i.role is SelectionRole.EDGE_CURVE)
            diameter = value if kind is DimensionKind.DIAMETER else 2.0 * value
            system.diameter(registry.curve(edge.entity_ref), diameter)
            return

        if kind is DimensionKind.ANGLE:
            first, second = (registry.entity(i.entity_ref) for i in items)
            if not (isinstance(first, Line) and isinstance(second, Line)):
                raise TypeError(f"angle dimension needs two lines, got {proposal.subjects}")
            inverse = _supplement_wanted(first, second, value)
            system.angle(registry.line(first.id), registry.line(second.id), value, wp, inverse)
            return

        if kind is DimensionKind.DISTANCE_POINT_LINE:
            point_item = next(i for i in items if not self._is_line_edge(registry, i))
            line_item = next(i for i in items if self._is_line_edge(registry, i))
            system.distance(registry.point(point_item), registry.line(line_item.entity_ref), value, wp)
            return

        if len(items) == 1:
            # Single edge: line length.
            start, end = registry.entity_points(items[0].entity_ref)
            system.distance(start, end, value, wp)
            return

        if all(self._is_line_edge(registry, i) for i in items):
            line1, line2 = (i.entity_ref for i in items)
            anchor = registry.entity_points(line2)[0]
            system.distance(anchor, registry.line(line1), value, wp)
            return

        p1, p2 = (self._point_or_center(registry, i) for i in items)
        if kind is DimensionKind.DISTANCE:
            system.distance(p1, p2, value, wp)
            return

        a, b = (_point_coords(system, p) for p in (p1, p2))
        if kind is DimensionKind.HORIZONTAL_DISTANCE:
            helper = registry.helper(Point2(b.x, a.y))
            system.horizontal(registry.segment(p1, helper), wp)
            system.vertical(registry.segment(helper, p2), wp)
        elif kind is DimensionKind.VERTICAL_DISTANCE:
            helper = registry.helper(Point2(a.x, b.y))
            system.vertical(registry.segment(p1, helper), wp)
            system.horizontal(registry.segment(helper, p2), wp)
        else:
            raise ValueError(f"unsupported dimension kind {kind!r}")
        system.distance(p1, helper, value, wp)

    def _emit_hint(
        self,
        system: slvs.SolverSystem,
        wp: slvs.Entity,
        registry: _SketchRegistry,
        subject: EntityRef,
        hint: ConstraintHint,
    ) -> None:
        if hint.kind is HintKind.HORIZONTAL:
            system.horizontal(registry.line(subject), wp)
        elif hint.kind is HintKind.VERTICAL:
            system.vertical(registry.line(subject), wp)
        elif hint.kind is HintKind.PARALLEL:
            system.parallel(registry.line(subject), registry.line(str(hint.target_entity)), wp)
        elif hint.kind is HintKind.PERPENDICULAR:
            system.perpendicular(registry.line(subject), registry.line(str(hint.target_entity)), wp)
        elif hint.kind is HintKind.COINCIDENT:
            if hint.display_position is None or hint.target_entity is None:
                raise ValueError("coincident hint needs a target and a position")
            mine = registry.nearest_point(subject, hint.display_position)
            theirs = registry.nearest_point(hint.target_entity, hint.display_position)
            system.coincident(mine, theirs, wp)
        else:
            raise ValueError(f"unsupported hint kind {hint.kind!r}")

    @staticmethod
    def _is_line_edge(registry: _SketchRegistry, item: SelectionItem) -> bool:
        if item.role is not SelectionRole.EDGE_CURVE or item.entity_ref == ORIGIN_REF:
            return False
        return isinstance(registry.entity(item.entity_ref), Line)

    @staticmethod
    def _point_or_center(registry: _SketchRegistry, item: SelectionItem) -> slvs.Entity:
        if item.role is SelectionRole.EDGE_CURVE:
            entity = registry.entity(item.entity_ref)
            if isinstance(entity, (Circle, Arc)):
                return registry.entity_points(entity.id)[0]
        return registry.point(item)


def _point_coords(system: slvs.SolverSystem, point: slvs.Entity) -> Point2:
    params = system.params(point.params)
    return Point2(float(params[0]), float(params[1]))


def solve_dimensions_safe(
    store: EntityStore,
    proposals: Sequence[DimensionProposal],
    hints: Iterable[PromotedHint] = (),
    options: Optional[SlvsAdapterOptions] = None,
) -> AdapterResult:
    """Run :meth:`SlvsAdapter.apply`, turning lookup errors into :class:`AdapterFail`."""

    try:
        return SlvsAdapter().apply(store, proposals, hints, options)
    except (KeyError, TypeError) as exc:
        logger.warning("solver translation failed: %s", exc)
        return AdapterFail(failures=[-1], dof=0)
