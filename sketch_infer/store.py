"""Entity store consumed (read-only) by the inference components."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Set, Tuple

import numpy as np
from scipy.spatial import cKDTree

from .entities import (
    ORIGIN_REF,
    SNAP_PRIORITY,
    Entity,
    EntityRef,
    Line,
    SnapKind,
    SnapTarget,
)
from .geometry import ORIGIN, Point2, distance, segment_intersection

logger = logging.getLogger(__name__)


class EntityStore(Protocol):
    """Read-only view of the sketch the engine works against."""

    def get(self, ref: EntityRef) -> Optional[Entity]:
        ...

    def nearest_point_within(self, point: Point2, radius: float) -> Optional[Tuple[SnapTarget, Point2]]:
        ...

    def recent_lines(self) -> Sequence[Line]:
        ...

    def are_parallel(self, a: EntityRef, b: EntityRef) -> bool:
        ...


class SketchEntities:
    """In-memory entity store with a KD-tree over snap targets.

    Mutation belongs to the command layer; the inference code only calls the
    :class:`EntityStore` methods.
    """

    def __init__(
        self,
        entities: Iterable[Entity] = (),
        *,
        include_origin: bool = True,
        grid_spacing: Optional[float] = None,
    ):
        if grid_spacing is not None and not grid_spacing > 0.0:
            raise ValueError(f"grid_spacing must be positive, got {grid_spacing!r}")
        self._entities: Dict[EntityRef, Entity] = {}
        self._recent: List[EntityRef] = []
        self._parallel: Set[frozenset] = set()
        self._include_origin = include_origin
        self.grid_spacing = grid_spacing
        self._tree: Optional[cKDTree] = None
        self._targets: List[SnapTarget] = []
        for entity in entities:
            self.add(entity)

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self):
        return iter(self._entities.values())

    def __contains__(self, ref: object) -> bool:
        return ref in self._entities

    def add(self, entity: Entity, *, recent: bool = True) -> None:
        if entity.id == ORIGIN_REF:
            raise KeyError(f"'{ORIGIN_REF}' is reserved for the sketch origin")
        self._entities[entity.id] = entity
        if recent and isinstance(entity, Line):
            self.mark_recent(entity.id)
        self._tree = None

    def remove(self, ref: EntityRef) -> None:
        self._entities.pop(ref, None)
        if ref in self._recent:
            self._recent.remove(ref)
        self._parallel = {pair for pair in self._parallel if ref not in pair}
        self._tree = None

    def mark_recent(self, ref: EntityRef) -> None:
        """Move ``ref`` to the front of the recently drawn/selected lines."""

        if ref in self._recent:
            self._recent.remove(ref)
        self._recent.insert(0, ref)

    def mark_parallel(self, a: EntityRef, b: EntityRef) -> None:
        """Record that the solver already holds ``a`` and ``b`` parallel."""

        self._parallel.add(frozenset((a, b)))

    # -- EntityStore -------------------------------------------------------

    def get(self, ref: EntityRef) -> Optional[Entity]:
        return self._entities.get(ref)

    def recent_lines(self) -> Sequence[Line]:
        lines: List[Line] = []
        for ref in self._recent:
            entity = self._entities.get(ref)
            if isinstance(entity, Line):
                lines.append(entity)
        return lines

    def are_parallel(self, a: EntityRef, b: EntityRef) -> bool:
        return frozenset((a, b)) in self._parallel

    def snap_targets(self) -> List[SnapTarget]:
        self._ensure_index()
        return list(self._targets)

    def nearest_point_within(self, point: Point2, radius: float) -> Optional[Tuple[SnapTarget, Point2]]:
        """Best snap target within ``radius`` of ``point``.

        Candidates are ranked by snap priority (see ``SNAP_PRIORITY``), then
        by distance. The grid, when enabled, only wins when nothing else is
        in range.
        """

        if radius <= 0.0:
            return None
        self._ensure_index()
        hits = [] if self._tree is None else self._tree.query_ball_point([point.x, point.y], r=radius)
        if not hits:
            return self._grid_target(point, radius)
        best = min(
            (self._targets[i] for i in hits),
            key=lambda target: (SNAP_PRIORITY[target.kind], distance(point, target.position)),
        )
        logger.debug(
            "snap: %s %s of %s within r=%.4g", best.kind.value, best.position, best.entity_ref, radius
        )
        return best, best.position

    def _grid_target(self, point: Point2, radius: float) -> Optional[Tuple[SnapTarget, Point2]]:
        if self.grid_spacing is None:
            return None
        step = self.grid_spacing
        node = Point2(round(point.x / step) * step, round(point.y / step) * step)
        if distance(point, node) > radius:
            return None
        return SnapTarget(None, SnapKind.GRID, node), node

    def _crossings(self) -> List[SnapTarget]:
        lines = [e for e in self._entities.values() if isinstance(e, Line)]
        crossings: List[SnapTarget] = []
        for i, first in enumerate(lines):
            for second in lines[i + 1:]:
                position = segment_intersection(first.start, first.end, second.start, second.end)
                if position is not None:
                    crossings.append(SnapTarget(None, SnapKind.INTERSECTION, position))
        return crossings

    def _ensure_index(self) -> None:
        if self._tree is not None:
            return
        targets: List[SnapTarget] = []
        for entity in self._entities.values():
            targets.extend(entity.snap_points())
        targets.extend(self._crossings())
        if self._include_origin:
            targets.append(SnapTarget(ORIGIN_REF, SnapKind.ORIGIN, ORIGIN))
        self._targets = targets
        if not targets:
            return
        coords = np.array([[t.position.x, t.position.y] for t in targets], dtype=float)
        self._tree = cKDTree(coords)


__all__ = ["EntityStore", "SketchEntities"]
