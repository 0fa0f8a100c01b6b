"""Live constraint inference while a drawing tool follows the cursor.

The engine is an explicit state machine (:class:`Idle`, :class:`Drawing`,
:class:`Committed`, :class:`Cancelled`). Every :meth:`ConstraintInferenceEngine.tick`
builds a fresh :class:`InferenceFrame`; hints are never carried over from the
previous pointer event.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .config import ToleranceConfig, resolve_config
from .entities import EntityRef, Line, SnapKind
from .geometry import (
    Point2,
    as_point,
    direction_angle,
    distance,
    midpoint,
    norm,
    project_point_to_line,
    rotate90,
    wrap_angle,
)
from .store import EntityStore

logger = logging.getLogger(__name__)


class HintKind(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    COINCIDENT = "coincident"
    PARALLEL = "parallel"
    PERPENDICULAR = "perpendicular"


class HintCategory(str, Enum):
    """Which inference step produced a hint."""

    SNAP = "snap"
    AXIS = "axis"
    RELATION = "relation"


@dataclass(frozen=True)
class ConstraintHint:
    kind: HintKind
    target_entity: Optional[EntityRef]
    strength: float
    display_position: Optional[Point2] = None
    category: HintCategory = HintCategory.SNAP


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Drawing:
    tool: str
    points: Tuple[Point2, ...]


@dataclass(frozen=True)
class Committed:
    """A finished gesture; ``hints`` are the ones live at commit time."""

    tool: str
    points: Tuple[Point2, ...]
    hints: Tuple[ConstraintHint, ...] = ()


@dataclass(frozen=True)
class Cancelled:
    tool: Optional[str] = None


InferenceState = Union[Idle, Drawing, Committed, Cancelled]


@dataclass(frozen=True)
class InferenceFrame:
    """Result of one pointer tick.

    ``raw`` is the cursor exactly as projected; ``preview`` is where the
    preview geometry should be drawn after snapping.
    """

    raw: Point2
    preview: Point2
    hints: Tuple[ConstraintHint, ...] = ()

    def hint(self, kind: HintKind) -> Optional[ConstraintHint]:
        for hint in self.hints:
            if hint.kind is kind:
                return hint
        return None


def _strength(deviation: float, tolerance: float) -> float:
    if tolerance <= 0.0:
        return 1.0
    return min(1.0, max(0.0, 1.0 - deviation / tolerance))


def _axis_hint(anchor: Point2, cursor: Point2, cfg: ToleranceConfig) -> Optional[Tuple[ConstraintHint, Point2]]:
    angle = abs(math.degrees(direction_angle(cursor - anchor)))
    h_dev = min(angle, 180.0 - angle)
    v_dev = abs(90.0 - angle)
    tol = cfg.hv_snap_tolerance_deg
    if h_dev <= tol and h_dev <= v_dev:
        preview = Point2(cursor.x, anchor.y)
        hint = ConstraintHint(
            HintKind.HORIZONTAL, None, _strength(h_dev, tol), midpoint(anchor, preview), HintCategory.AXIS
        )
        return hint, preview
    if v_dev <= tol:
        preview = Point2(anchor.x, cursor.y)
        hint = ConstraintHint(
            HintKind.VERTICAL, None, _strength(v_dev, tol), midpoint(anchor, preview), HintCategory.AXIS
        )
        return hint, preview
    return None


def _relation_hint(
    anchor: Point2, cursor: Point2, lines: Sequence[Line], cfg: ToleranceConfig
) -> Optional[Tuple[ConstraintHint, Point2]]:
    heading = direction_angle(cursor - anchor)
    tol = cfg.parallel_snap_tolerance_deg
    best: Optional[Tuple[float, HintKind, Line]] = None
    for line in lines[: cfg.max_parallel_candidates]:
        line_dir = line.end - line.start
        between = abs(math.degrees(wrap_angle(heading - direction_angle(line_dir))))
        for kind, deviation in (
            (HintKind.PARALLEL, min(between, 180.0 - between)),
            (HintKind.PERPENDICULAR, abs(90.0 - between)),
        ):
            if deviation <= tol and (best is None or deviation < best[0]):
                best = (deviation, kind, line)
    if best is None:
        return None

    deviation, kind, line = best
    line_dir = line.end - line.start
    constrained = line_dir if kind is HintKind.PARALLEL else rotate90(line_dir)
    preview = project_point_to_line(cursor, anchor, constrained)
    hint = ConstraintHint(
        kind, line.id, _strength(deviation, tol), midpoint(anchor, preview), HintCategory.RELATION
    )
    return hint, preview


class ConstraintInferenceEngine:
    """Drawing-gesture state plus per-tick hint inference against a store.

    The store is only read. Coincident snapping runs for every tool; axis and
    parallel/perpendicular inference only for ``angular_inference_tools``, and
    only when no snap target or just a grid point matched.
    """

    def __init__(self, store: EntityStore, *, config: Optional[ToleranceConfig] = None):
        self.store = store
        self.config = config
        self.state: InferenceState = Idle()
        self.frame: Optional[InferenceFrame] = None

    @property
    def hints(self) -> Tuple[ConstraintHint, ...]:
        return self.frame.hints if self.frame is not None else ()

    @property
    def is_drawing(self) -> bool:
        return isinstance(self.state, Drawing)

    def begin(self, tool: str, point) -> Drawing:
        """Start a gesture at ``point``; any gesture in progress is dropped."""

        if isinstance(self.state, Drawing):
            logger.debug("begin(%s): dropping unfinished %s gesture", tool, self.state.tool)
        self.state = Drawing(tool, (as_point(point),))
        self.frame = None
        logger.debug("begin %s at %s", tool, self.state.points[0])
        return self.state

    def place(self, point) -> Drawing:
        """Fix an intermediate point (polyline vertex, arc mid point, ...)."""

        state = self._drawing("place")
        self.state = Drawing(state.tool, state.points + (as_point(point),))
        self.frame = None
        return self.state

    def commit(self, point=None) -> Committed:
        """Finish the gesture at ``point`` (default: the live preview)."""

        state = self._drawing("commit")
        if point is None:
            final = self.frame.preview if self.frame is not None else state.points[-1]
        else:
            final = as_point(point)
        committed = Committed(state.tool, state.points + (final,), self.hints)
        logger.info(
            "%s committed with %d point(s), hints=%s",
            state.tool,
            len(committed.points),
            [h.kind.value for h in committed.hints],
        )
        self.state = committed
        self.frame = None
        return committed

    def cancel(self) -> Cancelled:
        tool = self.state.tool if isinstance(self.state, (Drawing, Committed)) else None
        self.state = Cancelled(tool)
        self.frame = None
        logger.debug("gesture cancelled (%s)", tool)
        return self.state

    def switch_tool(self) -> Cancelled:
        return self.cancel()

    def tick(self, cursor, *, pixel_size: float = 1.0, suppress: bool = False) -> Optional[InferenceFrame]:
        """Infer hints for ``cursor`` and replace the live frame.

        Returns ``None`` outside a drawing gesture. ``pixel_size`` converts the
        pixel snap radius into sketch units; ``suppress`` (modifier key held)
        returns the raw cursor without hints.
        """

        if not isinstance(self.state, Drawing):
            return None
        cfg = resolve_config(self.config)
        raw = as_point(cursor)
        if suppress:
            self.frame = InferenceFrame(raw, raw)
            return self.frame

        anchor = self.state.points[-1]
        hints: List[ConstraintHint] = []
        preview = raw

        radius = cfg.snap_radius_px * pixel_size
        hit = self.store.nearest_point_within(raw, radius)
        # Only a grid snap leaves the direction free for angular hints.
        angular = hit is None or hit[0].kind is SnapKind.GRID
        if hit is not None:
            target, position = hit
            if target.entity_ref is not None:
                hints.append(
                    ConstraintHint(
                        HintKind.COINCIDENT,
                        target.entity_ref,
                        _strength(distance(raw, position), radius),
                        position,
                        HintCategory.SNAP,
                    )
                )
            preview = position
        if (
            angular
            and self.state.tool in cfg.angular_inference_tools
            and norm(preview - anchor) >= cfg.min_direction_length
        ):
            found = _axis_hint(anchor, preview, cfg)
            if found is None:
                found = _relation_hint(anchor, preview, self.store.recent_lines(), cfg)
            if found is not None:
                hint, preview = found
                hints.append(hint)

        self.frame = InferenceFrame(raw, preview, tuple(hints))
        if hints:
            logger.debug("tick %s -> %s %s", raw, preview, [h.kind.value for h in hints])
        return self.frame

    def _drawing(self, action: str) -> Drawing:
        if not isinstance(self.state, Drawing):
            raise RuntimeError(f"{action}() needs a drawing gesture, state is {type(self.state).__name__}")
        return self.state


__all__ = [
    "Cancelled",
    "Committed",
    "ConstraintHint",
    "ConstraintInferenceEngine",
    "Drawing",
    "HintCategory",
    "HintKind",
    "Idle",
    "InferenceFrame",
    "InferenceState",
]
