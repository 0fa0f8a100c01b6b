"""Non-driving measurements for the measure tool."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .angles import AngleResult
from .classify import SubjectKind, SubjectPair, classify
from .config import ToleranceConfig
from .dimensions import DimensionKind, Evaluation, evaluate_subjects, format_label
from .entities import Arc, Circle, SelectionItem, SelectionRole
from .errors import ClassificationError, ResolveError, ResolveErrorKind
from .geometry import Point2, arc_sweep, direction_angle
from .store import EntityStore

logger = logging.getLogger(__name__)

MeasurementKind = DimensionKind


@dataclass(frozen=True)
class Measurement:
    """Same shape as a dimension proposal, but never handed to the solver."""

    kind: MeasurementKind
    subjects: Tuple[str, ...]
    value: float
    anchor_point: Point2
    placement_point: Optional[Point2] = None
    angle: Optional[AngleResult] = None
    label: str = ""
    driving: bool = False
    extras: Dict[str, float] = field(default_factory=dict)


MeasureResult = Union[Measurement, ResolveError, ClassificationError]


def _curve_extras(curve: Union[Circle, Arc]) -> Dict[str, float]:
    extras = {"radius": curve.radius, "diameter": 2.0 * curve.radius}
    if isinstance(curve, Arc):
        sweep = arc_sweep(curve.start_angle, curve.end_angle)
        extras["sweep_deg"] = math.degrees(sweep)
        extras["arc_length"] = curve.radius * sweep
    else:
        extras["circumference"] = 2.0 * math.pi * curve.radius
    return extras


def _extras(pair: SubjectPair, evaluation: Evaluation) -> Dict[str, float]:
    extras = dict(evaluation.extras)
    if pair.kind is SubjectKind.SINGLE_CIRCLE:
        extras.update(_curve_extras(pair.first.circle))
    elif pair.kind is SubjectKind.POINT_CIRCLE and pair.second is not None:
        if evaluation.kind in (DimensionKind.RADIUS, DimensionKind.DIAMETER):
            extras.update(_curve_extras(pair.second.circle))
    elif pair.kind is SubjectKind.SINGLE_LINE:
        line = pair.first.line
        extras["dx"] = abs(line.end.x - line.start.x)
        extras["dy"] = abs(line.end.y - line.start.y)
        extras["direction_deg"] = math.degrees(direction_angle(line.end - line.start))
    return extras


def _same_curve(curve: Union[Circle, Arc], placement: Optional[Point2]) -> Measurement:
    """One circle picked twice reads as its radius, one arc as its length."""

    extras = _curve_extras(curve)
    if isinstance(curve, Arc):
        kind, value = DimensionKind.ARC_LENGTH, extras["arc_length"]
    else:
        kind, value = DimensionKind.RADIUS, curve.radius
    return Measurement(
        kind=kind,
        subjects=(curve.id, curve.id),
        value=value,
        anchor_point=curve.center,
        placement_point=placement,
        label=format_label(kind, value),
        extras=extras,
    )


def measure(
    items: Sequence[SelectionItem],
    store: EntityStore,
    placement: Optional[Point2] = None,
    *,
    config: Optional[ToleranceConfig] = None,
) -> MeasureResult:
    """Measure 1-2 picked items.

    Uses the dimension rules, plus centre-to-centre distance for two
    circle/arc edges. The same circle edge twice gives its radius, the same
    arc edge twice its arc length.
    """

    if len(items) > 2:
        return ResolveError(
            ResolveErrorKind.TOO_MANY_SELECTION_ITEMS,
            f"measurements take at most 2 items, got {len(items)}",
        )
    if len(items) == 2 and items[0] == items[1] and items[0].role is SelectionRole.EDGE_CURVE:
        curve = store.get(items[0].entity_ref)
        if isinstance(curve, (Circle, Arc)):
            return _same_curve(curve, placement)
    pair = classify(items, store, allow_circle_pairs=True)
    if isinstance(pair, ClassificationError):
        return pair
    evaluation = evaluate_subjects(pair, placement, store=store, config=config)
    if isinstance(evaluation, ResolveError):
        return evaluation
    return Measurement(
        kind=evaluation.kind,
        subjects=tuple(pair.refs),
        value=evaluation.value,
        anchor_point=evaluation.anchor_point,
        placement_point=placement,
        angle=evaluation.angle,
        label=format_label(evaluation.kind, evaluation.value),
        extras=_extras(pair, evaluation),
    )


class MeasurementSession:
    """State of the measure tool.

    Two picks produce a measurement, which becomes the active one; the
    pending selection is then cleared for the next pair.
    """

    def __init__(self, store: EntityStore, *, config: Optional[ToleranceConfig] = None):
        self.store = store
        self.config = config
        self.pending: List[SelectionItem] = []
        self.active: Optional[Measurement] = None
        self.is_active = False

    def activate(self) -> None:
        self.pending = []
        self.active = None
        self.is_active = True

    def deactivate(self) -> None:
        self.pending = []
        self.active = None
        self.is_active = False

    def pick(self, item: SelectionItem) -> Optional[MeasureResult]:
        if not self.is_active:
            raise RuntimeError("measure tool is not active")
        if item in self.pending:
            self.pending.remove(item)
            return None
        if not self.pending:
            # A new selection replaces the shown measurement.
            self.active = None
        self.pending.append(item)
        if len(self.pending) < 2:
            return None
        return self._measure_pending()

    def measure_pending(self) -> Optional[MeasureResult]:
        """Measure a single pending edge (line length, circle radius)."""

        if not self.is_active:
            raise RuntimeError("measure tool is not active")
        if not self.pending:
            return None
        return self._measure_pending()

    def _measure_pending(self) -> MeasureResult:
        result = measure(self.pending, self.store, config=self.config)
        self.pending = []
        if isinstance(result, Measurement):
            self.active = result
            logger.info("measured %s %.6g on %s", result.kind.value, result.value, result.subjects)
        else:
            self.active = None
            logger.warning("measurement rejected: %s", result.message)
        return result


__all__ = ["Measurement", "MeasurementKind", "MeasurementSession", "MeasureResult", "measure"]
