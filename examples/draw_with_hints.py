"""Example pipeline: follow a cursor with the line tool and print live hints."""

from sketch_infer import ConstraintInferenceEngine, Line, SketchEntities

CURSOR_PATH = [(40, 3), (60, 1), (55, 40), (31, 31), (20.4, 20.3)]


def main() -> None:
    store = SketchEntities([Line("L1", (0, 0), (20, 20))])
    engine = ConstraintInferenceEngine(store)
    engine.begin("line", (10, 0))
    for cursor in CURSOR_PATH:
        frame = engine.tick(cursor)
        hints = ", ".join(f"{h.kind.value}({h.strength:.2f})" for h in frame.hints) or "none"
        print(f"{cursor} -> preview {frame.preview.as_tuple()} hints: {hints}")
    committed = engine.commit()
    print("Committed:", committed.points, [h.kind.value for h in committed.hints])


if __name__ == "__main__":
    main()
