import pytest

from sketch_infer import (
    Circle,
    ClassificationError,
    Line,
    Point2,
    PointEntity,
    SelectionItem,
    SketchEntities,
    SubjectKind,
    classify,
)


def _store() -> SketchEntities:
    return SketchEntities(
        [
            Line("L1", (0, 0), (10, 0)),
            Line("L2", (0, 5), (10, 5)),
            Circle("C1", (20, 0), 3.0),
            Circle("C2", (40, 0), 2.0),
            PointEntity("P", (3, 4)),
        ]
    )


def test_point_point_and_origin():
    store = _store()
    pair = classify([SelectionItem.endpoint("L1", 0), SelectionItem.endpoint("L2", 1)], store)
    assert pair.kind is SubjectKind.POINT_POINT

    pair = classify([SelectionItem.origin(), SelectionItem.endpoint("L2", 1)], store)
    assert pair.kind is SubjectKind.POINT_POINT
    assert pair.first.position == Point2(0, 0)


def test_point_line_puts_point_first_regardless_of_order():
    store = _store()
    pair = classify([SelectionItem.edge("L1"), SelectionItem.endpoint("L2", 0)], store)
    assert pair.kind is SubjectKind.POINT_LINE
    assert pair.first.ref == "L2"
    assert pair.second.ref == "L1"


def test_line_line_and_single_edges():
    store = _store()
    assert classify([SelectionItem.edge("L1"), SelectionItem.edge("L2")], store).kind is SubjectKind.LINE_LINE
    assert classify([SelectionItem.edge("L1")], store).kind is SubjectKind.SINGLE_LINE
    assert classify([SelectionItem.edge("C1")], store).kind is SubjectKind.SINGLE_CIRCLE


def test_point_entity_picked_as_edge_counts_as_point():
    store = _store()
    pair = classify([SelectionItem.edge("C1"), SelectionItem.edge("P")], store)
    assert pair.kind is SubjectKind.POINT_CIRCLE
    assert pair.first.ref == "P"
    assert pair.first.position == Point2(3, 4)


def test_circle_pairs_only_when_allowed():
    store = _store()
    items = [SelectionItem.edge("C1"), SelectionItem.edge("C2")]
    assert isinstance(classify(items, store), ClassificationError)
    assert classify(items, store, allow_circle_pairs=True).kind is SubjectKind.CIRCLE_CIRCLE


def test_unsupported_selections():
    store = _store()
    assert isinstance(classify([], store), ClassificationError)
    assert isinstance(classify([SelectionItem.center("L1")], store), ClassificationError)
    assert isinstance(classify([SelectionItem.edge("missing")], store), ClassificationError)
    assert isinstance(classify([SelectionItem.endpoint("L1", 0)], store), ClassificationError)
    assert isinstance(classify([SelectionItem.edge("L1"), SelectionItem.edge("C1")], store), ClassificationError)


def test_subject_accessors_reject_the_wrong_shape():
    store = _store()
    pair = classify([SelectionItem.edge("L1"), SelectionItem.endpoint("L2", 0)], store)
    with pytest.raises(TypeError):
        pair.first.circle
    with pytest.raises(TypeError):
        pair.other.circle
    with pytest.raises(ValueError):
        pair.other.point

    single = classify([SelectionItem.edge("C1")], store)
    with pytest.raises(ValueError):
        single.other
