"""Reduce a dimension/measure selection to a canonical pair of subjects."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Union

from .entities import (
    POINT_ROLES,
    Arc,
    Circle,
    Entity,
    Line,
    PointEntity,
    SelectionItem,
    SelectionRole,
    point_for,
)
from .errors import ClassificationError
from .geometry import Point2
from .logging_utils import debug_log_call
from .store import EntityStore

logger = logging.getLogger(__name__)


class SubjectKind(str, Enum):
    POINT_POINT = "point-point"
    POINT_LINE = "point-line"
    LINE_LINE = "line-line"
    POINT_CIRCLE = "point-circle"
    SINGLE_LINE = "single-line"
    SINGLE_CIRCLE = "single-circle"
    CIRCLE_CIRCLE = "circle-circle"


@dataclass(frozen=True)
class Subject:
    """A selection item resolved against the store.

    ``position`` is set for point-like subjects, ``entity`` for everything
    except the sketch origin.
    """

    item: SelectionItem
    entity: Optional[Entity]
    position: Optional[Point2] = None

    @property
    def ref(self) -> str:
        return self.item.entity_ref

    @property
    def is_point(self) -> bool:
        return self.position is not None

    @property
    def point(self) -> Point2:
        if self.position is None:
            raise ValueError(f"'{self.ref}' was not picked as a point")
        return self.position

    @property
    def line(self) -> Line:
        if not isinstance(self.entity, Line):
            raise TypeError(f"'{self.ref}' is not a line")
        return self.entity

    @property
    def circle(self) -> Union[Circle, Arc]:
        if not isinstance(self.entity, (Circle, Arc)):
            raise TypeError(f"'{self.ref}' is not a circle or arc")
        return self.entity


@dataclass(frozen=True)
class SubjectPair:
    kind: SubjectKind
    first: Subject
    second: Optional[Subject] = None

    @property
    def subjects(self) -> List[Subject]:
        return [s for s in (self.first, self.second) if s is not None]

    @property
    def other(self) -> Subject:
        """The second subject of a two-item pair."""

        if self.second is None:
            raise ValueError(f"{self.kind.value} pair has no second subject")
        return self.second

    @property
    def refs(self) -> List[str]:
        return [s.ref for s in self.subjects]


def _resolve(item: SelectionItem, store: EntityStore) -> Union[Subject, ClassificationError]:
    if item.role is SelectionRole.ORIGIN:
        return Subject(item=item, entity=None, position=point_for(None, item))
    entity = store.get(item.entity_ref)
    if entity is None:
        return ClassificationError(f"unknown entity '{item.entity_ref}'")
    if isinstance(entity, PointEntity):
        return Subject(item=item, entity=entity, position=entity.position)
    if item.role is SelectionRole.EDGE_CURVE:
        return Subject(item=item, entity=entity)
    if item.role in POINT_ROLES:
        position = point_for(entity, item)
        if position is None:
            return ClassificationError(
                f"{type(entity).__name__} '{entity.id}' has no {item.role.value} #{item.index}"
            )
        return Subject(item=item, entity=entity, position=position)
    return ClassificationError(f"unsupported selection role {item.role!r}")


def _is_line_edge(subject: Subject) -> bool:
    return not subject.is_point and isinstance(subject.entity, Line)


def _is_circle_edge(subject: Subject) -> bool:
    return not subject.is_point and isinstance(subject.entity, (Circle, Arc))


@debug_log_call(logger)
def classify(
    items: Sequence[SelectionItem],
    store: EntityStore,
    *,
    allow_circle_pairs: bool = False,
) -> Union[SubjectPair, ClassificationError]:
    """Classify 1-2 selection items; the order of the two items does not matter.

    Rules, first match wins: point+point, point+line, line+line,
    point+circle, single line, single circle. Anything else is unsupported.
    """

    if not items:
        return ClassificationError("empty selection")
    if len(items) > 2:
        return ClassificationError(f"selections of {len(items)} items are not supported")

    subjects: List[Subject] = []
    for item in items:
        resolved = _resolve(item, store)
        if isinstance(resolved, ClassificationError):
            logger.debug("classify: %s", resolved.message)
            return resolved
        subjects.append(resolved)

    if len(subjects) == 1:
        only = subjects[0]
        if _is_line_edge(only):
            return SubjectPair(SubjectKind.SINGLE_LINE, only)
        if _is_circle_edge(only):
            return SubjectPair(SubjectKind.SINGLE_CIRCLE, only)
        return ClassificationError("a single point cannot be dimensioned")

    a, b = subjects
    if a.is_point and b.is_point:
        return SubjectPair(SubjectKind.POINT_POINT, a, b)
    if a.is_point and _is_line_edge(b):
        return SubjectPair(SubjectKind.POINT_LINE, a, b)
    if b.is_point and _is_line_edge(a):
        return SubjectPair(SubjectKind.POINT_LINE, b, a)
    if _is_line_edge(a) and _is_line_edge(b):
        return SubjectPair(SubjectKind.LINE_LINE, a, b)
    if a.is_point and _is_circle_edge(b):
        return SubjectPair(SubjectKind.POINT_CIRCLE, a, b)
    if b.is_point and _is_circle_edge(a):
        return SubjectPair(SubjectKind.POINT_CIRCLE, b, a)
    if allow_circle_pairs and _is_circle_edge(a) and _is_circle_edge(b):
        return SubjectPair(SubjectKind.CIRCLE_CIRCLE, a, b)
    return ClassificationError(
        f"no dimension rule for {type(a.entity).__name__} edge + {type(b.entity).__name__} edge"
    )


__all__ = ["Subject", "SubjectKind", "SubjectPair", "classify"]
