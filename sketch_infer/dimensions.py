"""Dimension type resolution for the dimension tool.

A classified selection plus the cursor placement decides which dimension the
user means and its value. The evaluation core (:func:`evaluate_subjects`) is
shared with the measure tool; only :class:`DimensionProposal` objects are ever
handed to the solver.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .angles import AngleResult, angle_between, sector_signs
from .classify import Subject, SubjectKind, SubjectPair, classify
from .config import ToleranceConfig, resolve_config
from .entities import Line, PointEntity, SelectionItem, SelectionRole
from .errors import ClassificationError, ResolveError, ResolveErrorKind
from .geometry import Point2, distance, midpoint, point_line_distance, project_point_to_line
from .logging_utils import debug_log_call
from .store import EntityStore

logger = logging.getLogger(__name__)


class DimensionKind(str, Enum):
    DISTANCE = "Distance"
    HORIZONTAL_DISTANCE = "HorizontalDistance"
    VERTICAL_DISTANCE = "VerticalDistance"
    ANGLE = "Angle"
    RADIUS = "Radius"
    DIAMETER = "Diameter"
    DISTANCE_POINT_LINE = "DistancePointLine"
    # Measure tool only; never proposed as a dimension.
    ARC_LENGTH = "ArcLength"


class DimensionMode(str, Enum):
    """Caller toggle; diameter is never inferred from the selection alone."""

    AUTO = "auto"
    DIAMETER = "diameter"


@dataclass(frozen=True)
class Evaluation:
    """Kind, value and attachment point computed for a subject pair."""

    kind: DimensionKind
    value: float
    anchor_point: Point2
    angle: Optional[AngleResult] = None
    extras: Tuple[Tuple[str, float], ...] = ()


@dataclass(frozen=True)
class DimensionProposal:
    """A driving dimension waiting for the command layer to commit it.

    ``angle`` carries the arm directions oriented toward the sector the user
    placed the dimension in, for drawing the arc.
    """

    kind: DimensionKind
    subjects: Tuple[str, ...]
    value: float
    anchor_point: Point2
    placement_point: Optional[Point2]
    items: Tuple[SelectionItem, ...] = ()
    angle: Optional[AngleResult] = None
    label: str = ""
    driving: bool = True


ResolveResult = Union[DimensionProposal, ResolveError]


def format_label(kind: DimensionKind, value: float) -> str:
    if kind is DimensionKind.ANGLE:
        return f"Angle ({value:.1f}°)"
    if kind is DimensionKind.RADIUS:
        return f"R{value:.2f}"
    if kind is DimensionKind.DIAMETER:
        return f"Ø{value:.2f}"
    if kind is DimensionKind.HORIZONTAL_DISTANCE:
        return f"Horizontal ({value:.2f})"
    if kind is DimensionKind.VERTICAL_DISTANCE:
        return f"Vertical ({value:.2f})"
    if kind is DimensionKind.DISTANCE_POINT_LINE:
        return f"Distance (Point to Line) ({value:.2f})"
    if kind is DimensionKind.ARC_LENGTH:
        return f"Arc Length ({value:.2f})"
    return f"Distance ({value:.2f})"


def _same_point_or_entity(a: Subject, b: Subject) -> bool:
    if a.item == b.item:
        return True
    if a.ref != b.ref:
        return False
    if a.is_point and b.is_point:
        # Distinct endpoints of one line are fine; one point entity is not.
        return isinstance(a.entity, PointEntity) or a.entity is None
    if not a.is_point and not b.is_point:
        return True
    point, edge = (a, b) if a.is_point else (b, a)
    if isinstance(edge.entity, Line):
        # A line's own endpoint or midpoint lies on it: zero distance.
        return False
    # A circle's own centre against its edge is the radius gesture.
    return point.item.role is not SelectionRole.CENTER


def axis_mode(
    p1: Point2, p2: Point2, placement: Optional[Point2], cfg: ToleranceConfig
) -> DimensionKind:
    """Pick distance vs axis-locked distance from where the dimension is placed.

    Placement beside the points' bounding box (beyond ``axis_lock_offset``)
    locks to a horizontal distance, above or below locks to vertical.
    """

    if placement is None:
        return DimensionKind.DISTANCE
    min_x, max_x = min(p1.x, p2.x), max(p1.x, p2.x)
    min_y, max_y = min(p1.y, p2.y), max(p1.y, p2.y)
    margin = cfg.axis_lock_offset
    px, py = placement
    outside_x = px < min_x - margin or px > max_x + margin
    outside_y = py < min_y - margin or py > max_y + margin

    if outside_x and not outside_y:
        return DimensionKind.HORIZONTAL_DISTANCE
    if outside_y and not outside_x:
        return DimensionKind.VERTICAL_DISTANCE
    if outside_x and outside_y:
        to_vertical_edge = min(abs(px - min_x), abs(px - max_x))
        to_horizontal_edge = min(abs(py - min_y), abs(py - max_y))
        if to_vertical_edge < to_horizontal_edge:
            return DimensionKind.HORIZONTAL_DISTANCE
        if to_horizontal_edge < to_vertical_edge:
            return DimensionKind.VERTICAL_DISTANCE
        mid = midpoint(p1, p2)
        if abs(px - mid.x) >= abs(py - mid.y):
            return DimensionKind.HORIZONTAL_DISTANCE
        return DimensionKind.VERTICAL_DISTANCE
    return DimensionKind.DISTANCE


def _zero(message: str) -> ResolveError:
    return ResolveError(ResolveErrorKind.DEGENERATE_ZERO_DISTANCE, message)


def _point_point(a: Point2, b: Point2, placement: Optional[Point2], cfg: ToleranceConfig):
    dx = abs(b.x - a.x)
    dy = abs(b.y - a.y)
    eps = cfg.point_epsilon
    if dx <= eps and dy <= eps:
        return _zero("the two points coincide")
    if dx <= eps:
        kind = DimensionKind.VERTICAL_DISTANCE
    elif dy <= eps:
        kind = DimensionKind.HORIZONTAL_DISTANCE
    else:
        kind = axis_mode(a, b, placement, cfg)
    if kind is DimensionKind.HORIZONTAL_DISTANCE:
        value = dx
    elif kind is DimensionKind.VERTICAL_DISTANCE:
        value = dy
    else:
        value = distance(a, b)
    return Evaluation(kind, value, midpoint(a, b), extras=(("dx", dx), ("dy", dy)))


def _point_line(point: Point2, line: Line, cfg: ToleranceConfig):
    value = point_line_distance(point, line.start, line.end)
    if value <= cfg.zero_distance_epsilon:
        return _zero(f"point lies on line '{line.id}'")
    foot = project_point_to_line(point, line.start, line.end - line.start)
    return Evaluation(DimensionKind.DISTANCE_POINT_LINE, value, midpoint(point, foot))


def _line_line(
    line1: Line,
    line2: Line,
    placement: Optional[Point2],
    store: Optional[EntityStore],
    cfg: ToleranceConfig,
):
    angle = angle_between(line1, line2, config=cfg)
    held_parallel = store is not None and store.are_parallel(line1.id, line2.id)
    if held_parallel or angle.is_parallel(cfg.parallel_angle_tolerance_deg):
        mid = line2.midpoint
        value = point_line_distance(mid, line1.start, line1.end)
        if value <= cfg.zero_distance_epsilon:
            return _zero(f"lines '{line1.id}' and '{line2.id}' are collinear")
        foot = project_point_to_line(mid, line1.start, line1.end - line1.start)
        return Evaluation(DimensionKind.DISTANCE, value, midpoint(mid, foot), angle=angle)

    if placement is not None:
        angle = angle.oriented(*sector_signs(angle, placement))
    return Evaluation(
        DimensionKind.ANGLE,
        angle.angle_deg,
        angle.vertex,
        angle=angle,
        extras=(("supplement", 180.0 - angle.angle_deg),),
    )


def _radius(circle, mode: DimensionMode) -> Evaluation:
    if mode is DimensionMode.DIAMETER:
        return Evaluation(DimensionKind.DIAMETER, 2.0 * circle.radius, circle.center)
    return Evaluation(DimensionKind.RADIUS, circle.radius, circle.center)


def _point_circle(point: Subject, edge: Subject, mode: DimensionMode, cfg: ToleranceConfig):
    circle = edge.circle
    if point.ref == edge.ref and point.item.role is SelectionRole.CENTER:
        return _radius(circle, mode)
    position = point.point
    value = distance(position, circle.center)
    if value <= cfg.zero_distance_epsilon:
        return _zero(f"point sits on the centre of '{circle.id}'")
    return Evaluation(DimensionKind.DISTANCE, value, midpoint(position, circle.center))


def evaluate_subjects(
    pair: SubjectPair,
    placement: Optional[Point2] = None,
    *,
    mode: DimensionMode = DimensionMode.AUTO,
    store: Optional[EntityStore] = None,
    config: Optional[ToleranceConfig] = None,
) -> Union[Evaluation, ResolveError]:
    """Compute kind and value for ``pair``; shared by dimensions and measurements."""

    cfg = resolve_config(config)
    if pair.second is not None and _same_point_or_entity(pair.first, pair.second):
        return ResolveError(
            ResolveErrorKind.SAME_POINT_OR_ENTITY,
            f"'{pair.first.ref}' was picked twice",
        )

    kind = pair.kind
    first = pair.first
    if kind is SubjectKind.POINT_POINT:
        return _point_point(first.point, pair.other.point, placement, cfg)
    if kind is SubjectKind.POINT_LINE:
        return _point_line(first.point, pair.other.line, cfg)
    if kind is SubjectKind.LINE_LINE:
        return _line_line(first.line, pair.other.line, placement, store, cfg)
    if kind is SubjectKind.SINGLE_LINE:
        line = first.line
        return Evaluation(DimensionKind.DISTANCE, line.length, line.midpoint)
    if kind is SubjectKind.POINT_CIRCLE:
        return _point_circle(first, pair.other, mode, cfg)
    if kind is SubjectKind.SINGLE_CIRCLE:
        return _radius(first.circle, mode)
    if kind is SubjectKind.CIRCLE_CIRCLE:
        c1, c2 = first.circle, pair.other.circle
        value = distance(c1.center, c2.center)
        if value <= cfg.zero_distance_epsilon:
            return _zero(f"'{c1.id}' and '{c2.id}' are concentric")
        return Evaluation(DimensionKind.DISTANCE, value, midpoint(c1.center, c2.center))
    raise ValueError(f"unhandled subject kind {kind!r}")


@debug_log_call(logger)
def resolve(
    subjects: SubjectPair,
    placement: Optional[Point2] = None,
    *,
    mode: DimensionMode = DimensionMode.AUTO,
    store: Optional[EntityStore] = None,
    config: Optional[ToleranceConfig] = None,
) -> ResolveResult:
    """Decide the dimension kind for ``subjects`` and build the proposal."""

    result = evaluate_subjects(subjects, placement, mode=mode, store=store, config=config)
    if isinstance(result, ResolveError):
        logger.warning("dimension rejected: %s (%s)", result.kind.value, result.message)
        return result
    return DimensionProposal(
        kind=result.kind,
        subjects=tuple(subjects.refs),
        value=result.value,
        anchor_point=result.anchor_point,
        placement_point=placement,
        items=tuple(s.item for s in subjects.subjects),
        angle=result.angle,
        label=format_label(result.kind, result.value),
    )


def propose_dimension(
    items: Sequence[SelectionItem],
    placement: Optional[Point2],
    store: EntityStore,
    *,
    mode: DimensionMode = DimensionMode.AUTO,
    config: Optional[ToleranceConfig] = None,
) -> Union[DimensionProposal, ResolveError, ClassificationError]:
    """Run one dimension gesture: size check, classification, resolution."""

    if len(items) > 2:
        return ResolveError(
            ResolveErrorKind.TOO_MANY_SELECTION_ITEMS,
            f"dimensions take at most 2 items, got {len(items)}",
        )
    pair = classify(items, store)
    if isinstance(pair, ClassificationError):
        return pair
    return resolve(pair, placement, mode=mode, store=store, config=config)


def _is_point_pick(item: SelectionItem, store: EntityStore) -> bool:
    if item.role is not SelectionRole.EDGE_CURVE:
        return True
    return isinstance(store.get(item.entity_ref), PointEntity)


@dataclass
class DimensionSession:
    """Selection state of the dimension tool.

    Any error aborts the gesture: the selection is cleared and the error is
    returned so the tool controller can show a notice.
    """

    store: EntityStore
    mode: DimensionMode = DimensionMode.AUTO
    config: Optional[ToleranceConfig] = None
    items: List[SelectionItem] = field(default_factory=list)
    proposal: Optional[DimensionProposal] = None
    placement: Optional[Point2] = None

    def pick(self, item: SelectionItem):
        """Add ``item`` (or drop it when already picked) and refresh the proposal."""

        if item in self.items:
            self.items.remove(item)
        else:
            self.items.append(item)
        return self._refresh()

    def hover(self, placement: Point2):
        self.placement = placement
        return self._refresh()

    def commit(self, placement: Optional[Point2] = None):
        """Hand out the proposal for ``placement`` and return to an empty selection."""

        if placement is not None:
            self.placement = placement
        result = self._refresh()
        if isinstance(result, DimensionProposal):
            logger.info("dimension committed: %s %.6g on %s", result.kind.value, result.value, result.subjects)
            self.cancel()
        return result

    def cancel(self) -> None:
        self.items = []
        self.proposal = None
        self.placement = None

    def _refresh(self):
        self.proposal = None
        if not self.items:
            return None
        if len(self.items) == 1 and _is_point_pick(self.items[0], self.store):
            return None
        result = propose_dimension(
            self.items, self.placement, self.store, mode=self.mode, config=self.config
        )
        if isinstance(result, DimensionProposal):
            self.proposal = result
            return result
        self.cancel()
        return result


__all__ = [
    "DimensionKind",
    "DimensionMode",
    "DimensionProposal",
    "DimensionSession",
    "Evaluation",
    "ResolveResult",
    "axis_mode",
    "evaluate_subjects",
    "format_label",
    "propose_dimension",
    "resolve",
]
