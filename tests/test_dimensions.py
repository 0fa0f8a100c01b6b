import math

import pytest

from sketch_infer import (
    Circle,
    ClassificationError,
    DimensionKind,
    DimensionMode,
    DimensionProposal,
    DimensionSession,
    Line,
    Point2,
    PointEntity,
    ResolveError,
    ResolveErrorKind,
    SelectionItem,
    SketchEntities,
    ToleranceConfig,
    propose_dimension,
)

P1 = SelectionItem.endpoint("P1", 0)
P2 = SelectionItem.endpoint("P2", 0)


def _points_store() -> SketchEntities:
    return SketchEntities([PointEntity("P1", (-50, 0)), PointEntity("P2", (0, -50))])


def test_end_to_end_diagonal_distance():
    result = propose_dimension([P1, P2], Point2(-30, -30), _points_store())
    assert isinstance(result, DimensionProposal)
    assert result.kind is DimensionKind.DISTANCE
    assert result.value == pytest.approx(70.71, abs=0.01)
    assert result.subjects == ("P1", "P2")
    assert result.label == "Distance (70.71)"
    assert result.driving


@pytest.mark.parametrize(
    "placement, kind",
    [
        (Point2(-120, -20), DimensionKind.HORIZONTAL_DISTANCE),
        (Point2(60, -20), DimensionKind.HORIZONTAL_DISTANCE),
        (Point2(-20, 80), DimensionKind.VERTICAL_DISTANCE),
        (Point2(-20, -90), DimensionKind.VERTICAL_DISTANCE),
        # Outside on both axes: the nearer box edge decides.
        (Point2(-60, 40), DimensionKind.HORIZONTAL_DISTANCE),
        (Point2(-90, 5), DimensionKind.VERTICAL_DISTANCE),
        # Inside the lock margin.
        (Point2(-50.5, -20), DimensionKind.DISTANCE),
    ],
)
def test_placement_locks_point_point_axis(placement, kind):
    result = propose_dimension([P1, P2], placement, _points_store())
    assert result.kind is kind
    if kind is not DimensionKind.DISTANCE:
        assert result.value == pytest.approx(50.0)


def test_axis_lock_offset_is_configurable():
    config = ToleranceConfig(axis_lock_offset=100.0)
    result = propose_dimension([P1, P2], Point2(-120, -20), _points_store(), config=config)
    assert result.kind is DimensionKind.DISTANCE


def test_shared_coordinate_forces_axis_dimension():
    store = SketchEntities([PointEntity("A", (5, 0)), PointEntity("B", (5, 20)), Line("L", (0, 0), (10, 0))])
    result = propose_dimension([SelectionItem.edge("A"), SelectionItem.edge("B")], Point2(-100, 10), store)
    assert result.kind is DimensionKind.VERTICAL_DISTANCE
    assert result.value == pytest.approx(20.0)

    result = propose_dimension(
        [SelectionItem.endpoint("L", 0), SelectionItem.endpoint("L", 1)], Point2(5, 40), store
    )
    assert result.kind is DimensionKind.HORIZONTAL_DISTANCE
    assert result.value == pytest.approx(10.0)


def test_zero_distance_is_rejected():
    store = SketchEntities(
        [PointEntity("A", (1, 1)), PointEntity("B", (1, 1)), Line("L", (0, 0), (10, 0)), PointEntity("C", (5, 0))]
    )
    result = propose_dimension([SelectionItem.edge("A"), SelectionItem.edge("B")], None, store)
    assert isinstance(result, ResolveError)
    assert result.kind is ResolveErrorKind.DEGENERATE_ZERO_DISTANCE

    result = propose_dimension([SelectionItem.edge("C"), SelectionItem.edge("L")], None, store)
    assert result.kind is ResolveErrorKind.DEGENERATE_ZERO_DISTANCE


@pytest.mark.parametrize(
    "items",
    [
        [SelectionItem.endpoint("P", 0), SelectionItem.endpoint("P", 0)],
        [SelectionItem.endpoint("P", 0), SelectionItem.edge("P")],
        [SelectionItem.edge("L"), SelectionItem.edge("L")],
        [SelectionItem.origin(), SelectionItem.origin()],
    ],
)
def test_same_point_or_entity_is_rejected(items):
    store = SketchEntities([PointEntity("P", (3, 3)), Line("L", (0, 0), (10, 0))])
    result = propose_dimension(items, None, store)
    assert isinstance(result, ResolveError)
    assert result.kind is ResolveErrorKind.SAME_POINT_OR_ENTITY


@pytest.mark.parametrize(
    "items",
    [
        [SelectionItem.midpoint("L"), SelectionItem.edge("L")],
        [SelectionItem.edge("L"), SelectionItem.midpoint("L")],
        [SelectionItem.endpoint("L", 0), SelectionItem.edge("L")],
        [SelectionItem.endpoint("L", 1), SelectionItem.edge("L")],
    ],
)
def test_point_of_line_against_its_own_edge_is_zero_distance(items):
    store = SketchEntities([Line("L", (0, 0), (10, 0))])
    result = propose_dimension(items, None, store)
    assert isinstance(result, ResolveError)
    assert result.kind is ResolveErrorKind.DEGENERATE_ZERO_DISTANCE


def test_point_to_line_distance():
    store = SketchEntities([PointEntity("P", (3, 4)), Line("L", (0, 0), (10, 0))])
    result = propose_dimension([SelectionItem.edge("L"), SelectionItem.edge("P")], None, store)
    assert result.kind is DimensionKind.DISTANCE_POINT_LINE
    assert result.value == pytest.approx(4.0)
    assert result.subjects == ("P", "L")


def test_line_line_angle_follows_placement_sector():
    store = SketchEntities([Line("A", (0, 0), (10, 0)), Line("B", (0, 0), (10, 10))])
    items = [SelectionItem.edge("A"), SelectionItem.edge("B")]

    inside = propose_dimension(items, Point2(5, 1), store)
    assert inside.kind is DimensionKind.ANGLE
    assert inside.value == pytest.approx(45.0)
    assert inside.label == "Angle (45.0°)"
    assert inside.anchor_point == Point2(0, 0)

    outside = propose_dimension(items, Point2(-5, 2), store)
    assert outside.value == pytest.approx(135.0)
    assert outside.angle is not None
    assert outside.angle.dir1.x < 0.0


def test_parallel_lines_become_distance():
    store = SketchEntities([Line("A", (0, 0), (10, 0)), Line("B", (10, 5), (0, 5)), Line("C", (20, 0), (30, 0))])
    result = propose_dimension([SelectionItem.edge("A"), SelectionItem.edge("B")], Point2(5, 2), store)
    assert result.kind is DimensionKind.DISTANCE
    assert result.value == pytest.approx(5.0)
    assert result.label == "Distance (5.00)"

    collinear = propose_dimension([SelectionItem.edge("A"), SelectionItem.edge("C")], None, store)
    assert collinear.kind is ResolveErrorKind.DEGENERATE_ZERO_DISTANCE


def test_recorded_parallel_constraint_wins_over_angle():
    store = SketchEntities([Line("A", (0, 0), (10, 0)), Line("B", (0, 5), (10, 5.5))])
    items = [SelectionItem.edge("A"), SelectionItem.edge("B")]
    angle = propose_dimension(items, None, store)
    assert angle.kind is DimensionKind.ANGLE
    assert angle.value == pytest.approx(math.degrees(math.atan2(5.5, 110.0)))

    store.mark_parallel("A", "B")
    distance = propose_dimension(items, None, store)
    assert distance.kind is DimensionKind.DISTANCE
    assert distance.value == pytest.approx(5.25)


def test_single_line_length():
    store = SketchEntities([Line("L", (0, 0), (3, 4))])
    result = propose_dimension([SelectionItem.edge("L")], None, store)
    assert result.kind is DimensionKind.DISTANCE
    assert result.value == pytest.approx(5.0)


def test_circle_radius_and_diameter_mode():
    store = SketchEntities([Circle("C", (0, 0), 5.0), PointEntity("P", (3, 4)), Circle("D", (30, 40), 1.0)])
    radius = propose_dimension([SelectionItem.edge("C")], None, store)
    assert radius.kind is DimensionKind.RADIUS
    assert radius.value == pytest.approx(5.0)
    assert radius.label == "R5.00"

    diameter = propose_dimension([SelectionItem.edge("C")], None, store, mode=DimensionMode.DIAMETER)
    assert diameter.kind is DimensionKind.DIAMETER
    assert diameter.value == pytest.approx(10.0)
    assert diameter.label == "Ø10.00"

    own_centre = propose_dimension([SelectionItem.center("C"), SelectionItem.edge("C")], None, store)
    assert own_centre.kind is DimensionKind.RADIUS

    to_centre = propose_dimension([SelectionItem.edge("P"), SelectionItem.edge("D")], None, store)
    assert to_centre.kind is DimensionKind.DISTANCE
    assert to_centre.value == pytest.approx(math.hypot(27, 36))


def test_point_on_other_circle_centre_is_degenerate():
    store = SketchEntities([Circle("C", (0, 0), 5.0)])
    result = propose_dimension([SelectionItem.origin(), SelectionItem.edge("C")], None, store)
    assert result.kind is ResolveErrorKind.DEGENERATE_ZERO_DISTANCE


def test_too_many_items_and_classification_errors():
    store = _points_store()
    result = propose_dimension([P1, P2, SelectionItem.origin()], None, store)
    assert isinstance(result, ResolveError)
    assert result.kind is ResolveErrorKind.TOO_MANY_SELECTION_ITEMS

    assert isinstance(propose_dimension([SelectionItem.edge("nope")], None, store), ClassificationError)


def test_session_hover_and_commit():
    session = DimensionSession(_points_store())
    assert session.pick(P1) is None
    first = session.pick(P2)
    assert first.kind is DimensionKind.DISTANCE

    hovered = session.hover(Point2(-120, -20))
    assert hovered.kind is DimensionKind.HORIZONTAL_DISTANCE
    assert session.proposal is hovered

    committed = session.commit()
    assert committed.kind is DimensionKind.HORIZONTAL_DISTANCE
    assert committed.placement_point == Point2(-120, -20)
    assert session.items == []
    assert session.proposal is None


def test_session_toggle_and_error_abort():
    store = SketchEntities([PointEntity("A", (1, 1)), PointEntity("B", (1, 1))])
    session = DimensionSession(store)
    session.pick(SelectionItem.edge("A"))
    assert session.pick(SelectionItem.edge("A")) is None
    assert session.items == []

    session.pick(SelectionItem.edge("A"))
    error = session.pick(SelectionItem.edge("B"))
    assert error.kind is ResolveErrorKind.DEGENERATE_ZERO_DISTANCE
    assert session.items == []


def test_session_rejects_third_item():
    store = SketchEntities([Line("A", (0, 0), (10, 0)), Line("B", (0, 5), (10, 5)), Line("C", (0, 9), (4, 20))])
    session = DimensionSession(store)
    assert session.pick(SelectionItem.edge("A")).kind is DimensionKind.DISTANCE
    assert session.pick(SelectionItem.edge("B")).value == pytest.approx(5.0)
    error = session.pick(SelectionItem.edge("C"))
    assert error.kind is ResolveErrorKind.TOO_MANY_SELECTION_ITEMS
    assert session.items == []


def test_short_perpendicular_lines_get_an_angle():
    store = SketchEntities([Line("A", (0, 0), (0.008, 0)), Line("B", (0, 0), (0, 0.008))])
    result = propose_dimension([SelectionItem.edge("A"), SelectionItem.edge("B")], None, store)
    assert isinstance(result, DimensionProposal)
    assert result.kind is DimensionKind.ANGLE
    assert result.value == pytest.approx(90.0)
