"""Screen pointer to sketch-plane projection.

The camera is passed explicitly on every call; nothing here caches viewport
state between pointer events.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .config import ToleranceConfig, resolve_config
from .errors import GeometryError, ProjectionMiss
from .geometry import Point2, as_point
from .logging_utils import debug_log_call

logger = logging.getLogger(__name__)

Vec3 = np.ndarray

_AXIS_EPS = 1e-9


def _vec3(value: Sequence[float], name: str) -> Vec3:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (3,):
        raise GeometryError(f"{name} must be a length-3 vector")
    return arr


@dataclass(frozen=True, eq=False)
class SketchPlane:
    """Orthonormal sketch frame in world space.

    Axes are normalised on construction and ``y_axis`` is made orthogonal to
    ``x_axis``; callers can pass any two independent in-plane directions.
    """

    origin: Vec3
    x_axis: Vec3
    y_axis: Vec3

    def __post_init__(self) -> None:
        origin = _vec3(self.origin, "origin")
        x_axis = _vec3(self.x_axis, "x_axis")
        y_axis = _vec3(self.y_axis, "y_axis")
        x_len = float(np.linalg.norm(x_axis))
        if x_len <= _AXIS_EPS:
            raise GeometryError("sketch plane x_axis has zero length")
        x_axis = x_axis / x_len
        y_axis = y_axis - float(np.dot(y_axis, x_axis)) * x_axis
        y_len = float(np.linalg.norm(y_axis))
        if y_len <= _AXIS_EPS:
            raise GeometryError("sketch plane axes are collinear")
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "x_axis", x_axis)
        object.__setattr__(self, "y_axis", y_axis / y_len)

    @property
    def normal(self) -> Vec3:
        n = np.cross(self.x_axis, self.y_axis)
        return n / float(np.linalg.norm(n))

    @property
    def offset(self) -> float:
        """``d`` in the plane equation ``normal . P + d = 0``."""

        return -float(np.dot(self.normal, self.origin))

    @classmethod
    def xy(cls, origin: Sequence[float] = (0.0, 0.0, 0.0)) -> "SketchPlane":
        return cls(np.asarray(origin, dtype=float), np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))

    @classmethod
    def xz(cls, origin: Sequence[float] = (0.0, 0.0, 0.0)) -> "SketchPlane":
        return cls(np.asarray(origin, dtype=float), np.array([1.0, 0.0, 0.0]), np.array([0.0, 0.0, 1.0]))

    @classmethod
    def yz(cls, origin: Sequence[float] = (0.0, 0.0, 0.0)) -> "SketchPlane":
        return cls(np.asarray(origin, dtype=float), np.array([0.0, 1.0, 0.0]), np.array([0.0, 0.0, 1.0]))


@dataclass(frozen=True, eq=False)
class CameraState:
    """View and projection matrices (column-vector convention, OpenGL NDC)."""

    view: np.ndarray
    projection: np.ndarray

    def __post_init__(self) -> None:
        view = np.asarray(self.view, dtype=float)
        projection = np.asarray(self.projection, dtype=float)
        if view.shape != (4, 4) or projection.shape != (4, 4):
            raise GeometryError("camera matrices must be 4x4")
        object.__setattr__(self, "view", view)
        object.__setattr__(self, "projection", projection)

    @property
    def view_projection(self) -> np.ndarray:
        return self.projection @ self.view

    def inverse_view_projection(self) -> np.ndarray:
        try:
            return np.linalg.inv(self.view_projection)
        except np.linalg.LinAlgError as exc:
            raise GeometryError("camera view-projection matrix is singular") from exc


def look_at(eye: Sequence[float], target: Sequence[float], up: Sequence[float] = (0.0, 1.0, 0.0)) -> np.ndarray:
    """Right-handed view matrix looking from ``eye`` toward ``target``."""

    eye_v = _vec3(eye, "eye")
    forward = _vec3(target, "target") - eye_v
    f_len = float(np.linalg.norm(forward))
    if f_len <= _AXIS_EPS:
        raise GeometryError("camera eye and target coincide")
    forward = forward / f_len
    side = np.cross(forward, _vec3(up, "up"))
    s_len = float(np.linalg.norm(side))
    if s_len <= _AXIS_EPS:
        raise GeometryError("camera up vector is parallel to the view direction")
    side = side / s_len
    true_up = np.cross(side, forward)
    view = np.eye(4)
    view[0, :3] = side
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[0, 3] = -float(np.dot(side, eye_v))
    view[1, 3] = -float(np.dot(true_up, eye_v))
    view[2, 3] = float(np.dot(forward, eye_v))
    return view


def perspective(fov_y_deg: float, aspect: float, near: float, far: float) -> np.ndarray:
    if near <= 0.0 or far <= near or aspect <= 0.0:
        raise GeometryError("invalid perspective frustum")
    f = 1.0 / math.tan(math.radians(fov_y_deg) * 0.5)
    proj = np.zeros((4, 4))
    proj[0, 0] = f / aspect
    proj[1, 1] = f
    proj[2, 2] = (far + near) / (near - far)
    proj[2, 3] = 2.0 * far * near / (near - far)
    proj[3, 2] = -1.0
    return proj


def orthographic(left: float, right: float, bottom: float, top: float, near: float, far: float) -> np.ndarray:
    if right == left or top == bottom or far == near:
        raise GeometryError("invalid orthographic volume")
    proj = np.eye(4)
    proj[0, 0] = 2.0 / (right - left)
    proj[1, 1] = 2.0 / (top - bottom)
    proj[2, 2] = -2.0 / (far - near)
    proj[0, 3] = -(right + left) / (right - left)
    proj[1, 3] = -(top + bottom) / (top - bottom)
    proj[2, 3] = -(far + near) / (far - near)
    return proj


def screen_to_ndc(px: float, py: float, width: float, height: float) -> Tuple[float, float]:
    """Convert a pixel position (origin top-left, y down) to normalised device coordinates."""

    if width <= 0 or height <= 0:
        raise GeometryError("viewport size must be positive")
    return (px / width) * 2.0 - 1.0, -(py / height) * 2.0 + 1.0


def to_world(local: Union[Point2, Sequence[float]], plane: SketchPlane) -> Vec3:
    p = as_point(local)
    return plane.origin + p.x * plane.x_axis + p.y * plane.y_axis


def to_ndc(world: Sequence[float], camera: CameraState) -> Tuple[float, float]:
    clip = camera.view_projection @ np.append(_vec3(world, "world"), 1.0)
    if abs(clip[3]) <= 1e-12:
        raise GeometryError("point projects to infinity")
    return float(clip[0] / clip[3]), float(clip[1] / clip[3])


def _unproject(ndc: Tuple[float, float, float], inverse: np.ndarray) -> Vec3:
    world = inverse @ np.array([ndc[0], ndc[1], ndc[2], 1.0])
    return world[:3] / world[3]


def pointer_ray(screen_ndc: Sequence[float], camera: CameraState) -> Tuple[Vec3, Vec3]:
    """Return ``(origin, unit_direction)`` of the ray through ``screen_ndc``."""

    x, y = float(screen_ndc[0]), float(screen_ndc[1])
    inverse = camera.inverse_view_projection()
    near = _unproject((x, y, -1.0), inverse)
    far = _unproject((x, y, 1.0), inverse)
    direction = far - near
    length = float(np.linalg.norm(direction))
    if length <= 1e-12:
        raise GeometryError("degenerate pointer ray")
    return near, direction / length


@debug_log_call(logger)
def project(
    screen_ndc: Sequence[float],
    camera: CameraState,
    plane: SketchPlane,
    *,
    config: Optional[ToleranceConfig] = None,
) -> Union[Point2, ProjectionMiss]:
    """Intersect the pointer ray with the infinite sketch plane and return local coordinates."""

    cfg = resolve_config(config)
    origin, direction = pointer_ray(screen_ndc, camera)
    normal = plane.normal
    denom = float(np.dot(direction, normal))
    if abs(denom) < cfg.projection_parallel_epsilon:
        return ProjectionMiss("parallel", "pointer ray is parallel to the sketch plane")
    t = -(float(np.dot(normal, origin)) + plane.offset) / denom
    if t < 0.0:
        return ProjectionMiss("behind", "sketch plane lies behind the pointer ray")
    hit = origin + t * direction
    rel = hit - plane.origin
    return Point2(float(np.dot(rel, plane.x_axis)), float(np.dot(rel, plane.y_axis)))


def pixel_size(
    camera: CameraState,
    plane: SketchPlane,
    local: Union[Point2, Sequence[float]],
    viewport_height: float,
) -> float:
    """Sketch units covered by one screen pixel around ``local``.

    Used to turn pixel snap radii into sketch distances. Falls back to
    ``1.0`` when the neighbouring pixel misses the plane.
    """

    if viewport_height <= 0:
        raise GeometryError("viewport height must be positive")
    anchor = as_point(local)
    ndc_x, ndc_y = to_ndc(to_world(anchor, plane), camera)
    neighbour = project((ndc_x, ndc_y + 2.0 / viewport_height), camera, plane)
    if isinstance(neighbour, ProjectionMiss):
        logger.debug("pixel-size: neighbour pixel missed plane (%s)", neighbour.reason)
        return 1.0
    dx = neighbour.x - anchor.x
    dy = neighbour.y - anchor.y
    size = math.hypot(dx, dy)
    return size if size > 0.0 else 1.0


__all__ = [
    "CameraState",
    "SketchPlane",
    "look_at",
    "orthographic",
    "perspective",
    "pixel_size",
    "pointer_ray",
    "project",
    "screen_to_ndc",
    "to_ndc",
    "to_world",
]
