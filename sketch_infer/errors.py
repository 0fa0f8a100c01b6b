"""Typed error results returned by the inference pipeline.

None of these are raised: projection, classification and resolution hand them
back to the tool controller, which aborts the current gesture. Only
construction-time invariant violations raise :class:`GeometryError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class GeometryError(ValueError):
    """Raised when an entity, plane or camera violates its invariants."""


@dataclass(frozen=True)
class ProjectionMiss:
    """The pointer ray does not hit the sketch plane."""

    reason: str
    message: str = ""


class ClassificationErrorKind(str, Enum):
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class ClassificationError:
    """The selection has a shape no dimension rule covers."""

    message: str
    kind: ClassificationErrorKind = ClassificationErrorKind.UNSUPPORTED


class ResolveErrorKind(str, Enum):
    DEGENERATE_ZERO_DISTANCE = "degenerate-zero-distance"
    SAME_POINT_OR_ENTITY = "same-point-or-entity"
    TOO_MANY_SELECTION_ITEMS = "too-many-selection-items"


@dataclass(frozen=True)
class ResolveError:
    """A classified selection that would produce an invalid dimension."""

    kind: ResolveErrorKind
    message: str = ""


InferenceError = Union[ProjectionMiss, ClassificationError, ResolveError]


def is_error(result: object) -> bool:
    """Return ``True`` when *result* is one of the typed pipeline errors."""

    return isinstance(result, (ProjectionMiss, ClassificationError, ResolveError))


__all__ = [
    "GeometryError",
    "ProjectionMiss",
    "ClassificationErrorKind",
    "ClassificationError",
    "ResolveErrorKind",
    "ResolveError",
    "InferenceError",
    "is_error",
]
