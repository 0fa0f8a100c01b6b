import math

import pytest

from sketch_infer import Line, Point2, angle_between
from sketch_infer.angles import sector_signs


def _reversed(line: Line) -> Line:
    return Line(line.id, line.end, line.start)


def _all_orderings(line1: Line, line2: Line):
    for a in (line1, _reversed(line1)):
        for b in (line2, _reversed(line2)):
            yield a, b
            yield b, a


@pytest.mark.parametrize(
    "line1, line2, expected",
    [
        (Line("A", (0, 0), (10, 0)), Line("B", (0, 0), (0, 10)), 90.0),
        (Line("A", (0, 0), (10, 0)), Line("B", (0, 0), (10, 10)), 45.0),
        (Line("A", (0, 0), (10, 0)), Line("B", (0, 0), (-5, 5 * math.sqrt(3))), 120.0),
        (Line("A", (-10, 0), (20, 0)), Line("B", (-5, -5), (10, 10)), 45.0),
        (Line("A", (10, 10), (0, 0)), Line("B", (0, 0), (0, 10)), 45.0),
    ],
)
def test_angle_does_not_depend_on_line_orientation(line1, line2, expected):
    for a, b in _all_orderings(line1, line2):
        result = angle_between(a, b)
        assert not result.parallel
        assert result.angle_deg == pytest.approx(expected, abs=1e-9)
        assert result.vertex.x == pytest.approx(0.0, abs=1e-9)
        assert result.vertex.y == pytest.approx(0.0, abs=1e-9)


def test_parallel_lines_fall_back_to_midpoint_vertex():
    line1 = Line("A", (0, 0), (10, 0))
    line2 = Line("B", (0, 5), (10, 5))
    result = angle_between(line1, line2)
    assert result.parallel
    assert result.vertex == Point2(5.0, 2.5)
    assert result.angle_deg == pytest.approx(0.0)
    assert result.is_parallel(0.1)

    opposite = angle_between(line1, _reversed(line2))
    assert opposite.angle_deg == pytest.approx(180.0)
    assert opposite.is_parallel(0.1)


def test_nearly_parallel_lines_use_fallback():
    result = angle_between(Line("A", (0, 0), (10, 0)), Line("B", (0, 5), (10, 5 + 1e-6)))
    assert result.parallel


def test_sector_signs_pick_supplement():
    result = angle_between(Line("A", (0, 0), (10, 0)), Line("B", (0, 0), (10, 10)))
    assert sector_signs(result, Point2(10, 2)) == (1.0, 1.0)

    signs = sector_signs(result, Point2(-5, 2))
    assert signs == (-1.0, 1.0)
    flipped = result.oriented(*signs)
    assert flipped.angle_deg == pytest.approx(135.0)
    assert flipped.dir1.x < 0.0


def test_short_lines_route_on_angle_not_fallback_flag():
    # The raw determinant of these lines is below the intersection epsilon.
    result = angle_between(Line("A", (0, 0), (0.008, 0)), Line("B", (0, 0), (0, 0.008)))
    assert result.parallel
    assert result.angle_deg == pytest.approx(90.0)
    assert not result.is_parallel(0.1)
