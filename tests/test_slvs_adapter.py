import math
from dataclasses import replace

import pytest

from sketch_infer import (
    ConstraintHint,
    DimensionKind,
    HintKind,
    Line,
    Point2,
    PointEntity,
    SelectionItem,
    SketchEntities,
    measure,
    propose_dimension,
)
from sketch_infer.cad import AdapterFail, AdapterOK, SlvsAdapter, SlvsAdapterOptions


def _length(coords, a: str, b: str) -> float:
    ax, ay = coords[a]
    bx, by = coords[b]
    return math.hypot(bx - ax, by - ay)


def test_line_length_dimension_drives_solver():
    store = SketchEntities([Line("L", (0, 0), (3, 4))])
    proposal = propose_dimension([SelectionItem.edge("L")], None, store)
    result = SlvsAdapter().apply(store, [replace(proposal, value=10.0)])
    assert isinstance(result, AdapterOK)
    assert math.isclose(_length(result.coords, "L.start", "L.end"), 10.0, rel_tol=1e-6)


def test_horizontal_distance_uses_axis_projection():
    store = SketchEntities([PointEntity("P1", (-50, 0)), PointEntity("P2", (0, -50))])
    proposal = propose_dimension(
        [SelectionItem.edge("P1"), SelectionItem.edge("P2")], Point2(-120, -20), store
    )
    result = SlvsAdapter().apply(
        store, [replace(proposal, value=80.0)], options=SlvsAdapterOptions(dragged=("P1",))
    )
    assert isinstance(result, AdapterOK)
    p1x, p1y = result.coords["P1"]
    p2x, _ = result.coords["P2"]
    assert math.isclose(p1x, -50.0, abs_tol=1e-6)
    assert math.isclose(p1y, 0.0, abs_tol=1e-6)
    assert math.isclose(abs(p2x - p1x), 80.0, rel_tol=1e-6)


def test_angle_dimension():
    store = SketchEntities([Line("A", (0, 0), (10, 0)), Line("B", (0, 0), (10, 10))])
    proposal = propose_dimension([SelectionItem.edge("A"), SelectionItem.edge("B")], Point2(5, 1), store)
    result = SlvsAdapter().apply(
        store, [replace(proposal, value=60.0)], options=SlvsAdapterOptions(dragged=("A",))
    )
    assert isinstance(result, AdapterOK)
    c = result.coords
    ux, uy = c["A.end"][0] - c["A.start"][0], c["A.end"][1] - c["A.start"][1]
    vx, vy = c["B.end"][0] - c["B.start"][0], c["B.end"][1] - c["B.start"][1]
    cos_angle = (ux * vx + uy * vy) / (math.hypot(ux, uy) * math.hypot(vx, vy))
    assert math.isclose(math.degrees(math.acos(cos_angle)), 60.0, abs_tol=1e-3)


def test_horizontal_hint_levels_new_line():
    store = SketchEntities([Line("N", (0, 0), (10, 0.3))])
    hint = ConstraintHint(HintKind.HORIZONTAL, None, 0.9)
    result = SlvsAdapter().apply(store, [], hints=[("N", hint)])
    assert isinstance(result, AdapterOK)
    assert math.isclose(result.coords["N.start"][1], result.coords["N.end"][1], abs_tol=1e-6)


def test_conflicting_dimensions_fail():
    store = SketchEntities([Line("L", (0, 0), (3, 4))])
    proposal = propose_dimension([SelectionItem.edge("L")], None, store)
    result = SlvsAdapter().apply(store, [replace(proposal, value=5.0), replace(proposal, value=10.0)])
    assert isinstance(result, AdapterFail)
    assert result.failures


def test_measurements_are_refused():
    store = SketchEntities([Line("L", (0, 0), (3, 4))])
    measurement = measure([SelectionItem.edge("L")], store)
    with pytest.raises(ValueError):
        SlvsAdapter().apply(store, [measurement])


def test_angle_dimension_on_points_raises_type_error():
    store = SketchEntities([PointEntity("P1", (0, 0)), PointEntity("P2", (3, 4))])
    proposal = propose_dimension([SelectionItem.edge("P1"), SelectionItem.edge("P2")], None, store)
    with pytest.raises(TypeError):
        SlvsAdapter().apply(store, [replace(proposal, kind=DimensionKind.ANGLE, value=30.0)])
