"""Example pipeline: project pointer clicks, propose a dimension and solve it."""

from dataclasses import replace

from sketch_infer import (
    CameraState,
    Line,
    PointEntity,
    SelectionItem,
    SketchEntities,
    SketchPlane,
    DimensionSession,
    look_at,
    perspective,
    project,
    screen_to_ndc,
)
from sketch_infer.cad import SlvsAdapter, SlvsAdapterOptions

WIDTH, HEIGHT = 1280, 720


def main() -> None:
    store = SketchEntities(
        [
            PointEntity("P1", (-50, 0)),
            PointEntity("P2", (0, -50)),
            Line("L1", (0, 0), (40, 0)),
        ]
    )
    camera = CameraState(
        look_at((0.0, 0.0, 250.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
        perspective(45.0, WIDTH / HEIGHT, 0.1, 1000.0),
    )
    plane = SketchPlane.xy()

    session = DimensionSession(store)
    session.pick(SelectionItem.edge("P1"))
    session.pick(SelectionItem.edge("P2"))

    for px, py in ((560, 400), (300, 390), (590, 200)):
        local = project(screen_to_ndc(px, py, WIDTH, HEIGHT), camera, plane)
        proposal = session.hover(local)
        print(f"cursor ({px}, {py}) -> {local}: {proposal.label}")

    proposal = session.commit()
    print("Committed:", proposal.kind.value, round(proposal.value, 4))

    result = SlvsAdapter().apply(
        store, [replace(proposal, value=60.0)], options=SlvsAdapterOptions(dragged=("P1",))
    )
    print("Solver:", type(result).__name__)
    for name, (x, y) in getattr(result, "coords", {}).items():
        print(f"{name}: ({x:.6f}, {y:.6f})")


if __name__ == "__main__":
    main()
