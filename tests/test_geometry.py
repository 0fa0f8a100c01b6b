import math

import pytest

from sketch_infer.geometry import (
    Point2,
    arc_sweep,
    as_point,
    line_intersection,
    point_line_distance,
    project_point_to_line,
    wrap_angle,
)


def test_point_arithmetic_and_unpacking():
    a = Point2(1, 2)
    b = Point2(3.5, -1)
    assert a + b == Point2(4.5, 1.0)
    assert b - a == Point2(2.5, -3.0)
    assert 2 * a == Point2(2.0, 4.0)
    x, y = a
    assert (x, y) == (1.0, 2.0)


def test_line_intersection_and_parallel_lines():
    hit = line_intersection(Point2(0, 0), Point2(2, 0), Point2(1, -1), Point2(1, 1))
    assert hit == Point2(1.0, 0.0)
    assert line_intersection(Point2(0, 0), Point2(1, 0), Point2(0, 1), Point2(1, 1)) is None


def test_point_line_distance_uses_infinite_line():
    assert math.isclose(point_line_distance(Point2(30, 5), Point2(-1, 0), Point2(1, 0)), 5.0)
    # Degenerate line collapses to point distance.
    assert math.isclose(point_line_distance(Point2(3, 4), Point2(0, 0), Point2(0, 0)), 5.0)


def test_project_point_to_line():
    assert project_point_to_line(Point2(3, 4), Point2(0, 0), Point2(2, 0)) == Point2(3.0, 0.0)


def test_wrap_angle_range():
    assert math.isclose(wrap_angle(1.5 * math.pi), -0.5 * math.pi)
    assert math.isclose(wrap_angle(-math.pi), math.pi)


def test_arc_sweep_is_counter_clockwise():
    assert math.isclose(arc_sweep(1.5 * math.pi, 0.5 * math.pi), math.pi)
    assert math.isclose(arc_sweep(0.0, 0.5 * math.pi), 0.5 * math.pi)


def test_as_point_rejects_garbage():
    assert as_point((1, 2)) == Point2(1.0, 2.0)
    with pytest.raises(TypeError):
        as_point(None)
