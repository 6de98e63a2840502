import random

import pytest

from mindmapx.controller import (
    Dragging, Idle, InteractionController, Phase, PointerEvent, Selected
)
from mindmapx.graph import Point


def _client(canvas_point, origin, zoom):
    """Inverse of pointer_to_canvas, to build pointer events from canvas points."""
    return PointerEvent(canvas_point.x * zoom + origin.x, canvas_point.y * zoom + origin.y)


def _assert_tree(ctrl):
    snap = ctrl.graph.snapshot()
    targets = [e.target_id for e in snap.edges]
    assert len(targets) == len(set(targets))
    assert sum(1 for n in snap.nodes if n.is_root) == 1
    ctrl.graph.check_invariants()


def test_initial_state(controller):
    assert controller.state == Idle()
    assert controller.phase == Phase.PLAYING
    assert controller.zoom == 1.0
    assert not controller.show_suggestions


def test_basic_expansion(controller):
    root = controller.graph.root
    controller.select_node(root.id)
    assert controller.state == Selected(root.id)
    assert controller.suggestions == ["Feature 1", "User Benefits", "Technical Stack", "Business Model"]

    child_id = controller.add_child_node("Feature 1")

    snap = controller.graph.snapshot()
    assert len(snap.nodes) == 2
    assert len(snap.edges) == 1
    child = controller.graph.get_node(child_id)
    assert child.position.distance_to(root.position) == pytest.approx(150.0 * controller.zoom)

    # Parent stays selected, suggestions are hidden until the next click
    assert controller.state == Selected(root.id)
    assert not controller.show_suggestions
    assert controller.suggestions == []

    controller.select_node(child_id)
    assert controller.suggestions == ["Drag & Drop", "Real-time Updates", "Export Options"]


def test_expansion_distance_follows_zoom_and_compact_layout(controller):
    root = controller.graph.root
    controller.set_zoom(0.8)
    controller.set_viewport(Point(0, 0), width=500)
    controller.select_node(root.id)
    child_id = controller.add_child_node("Mobile")
    distance = controller.graph.get_node(child_id).position.distance_to(root.position)
    assert distance == pytest.approx(100.0 * 0.8)


def test_reclick_regenerates_suggestions(controller):
    root = controller.graph.root.id
    controller.select_node(root)
    first = list(controller.suggestions)
    controller.select_node(root)
    assert controller.suggestions == first
    assert controller.show_suggestions


def test_clear_selection(controller):
    controller.select_node(controller.graph.root.id)
    controller.clear_selection()
    assert controller.state == Idle()
    assert not controller.show_suggestions


def test_select_unknown_node_is_noop(controller):
    controller.select_node("404")
    assert controller.state == Idle()


def test_add_child_requires_selection(controller):
    assert controller.add_child_node("Orphan") is None
    assert len(controller.graph) == 1


def test_add_child_rejects_blank_label(controller):
    controller.select_node(controller.graph.root.id)
    assert controller.add_child_node("   ") is None
    assert len(controller.graph) == 1

    new_id = controller.add_child_node("  Padded  ")
    assert controller.graph.get_node(new_id).label == "Padded"


def test_add_child_with_color(controller):
    controller.select_node(controller.graph.root.id)
    new_id = controller.add_child_node("Colored", "#38A169")
    assert controller.graph.get_node(new_id).color == "#38A169"


@pytest.mark.parametrize("zoom", [0.5, 0.7, 1.0, 1.3, 1.5])
def test_drag_preserves_grab_point(controller, zoom):
    controller.set_zoom(zoom)
    origin = Point(37.0, 12.5)
    controller.set_viewport(origin)

    root = controller.graph.root
    controller.select_node(root.id)
    start = root.position
    grab = Point(start.x + 13, start.y - 7)

    controller.begin_drag(root.id, _client(grab, origin, zoom))
    state = controller.state
    assert isinstance(state, Dragging)
    assert state.grab_offset.x == pytest.approx(13)
    assert state.grab_offset.y == pytest.approx(-7)

    target = Point(grab.x + 250, grab.y - 90)
    controller.continue_drag(_client(target, origin, zoom))

    moved = controller.graph.get_node(root.id).position
    assert moved.x == pytest.approx(start.x + 250)
    assert moved.y == pytest.approx(start.y - 90)


def test_drag_fires_per_move(controller):
    node_id = controller.graph.root.id
    controller.begin_drag(node_id, PointerEvent(400, 300))
    for step in range(1, 6):
        controller.continue_drag(PointerEvent(400 + step, 300))
        assert controller.graph.get_node(node_id).position == Point(400 + step, 300)


def test_drag_keeps_selection_independent(controller):
    root = controller.graph.root.id
    controller.select_node(root)
    child = controller.add_child_node("Child")

    controller.begin_drag(root, PointerEvent(400, 300))
    assert controller.selected_id == root

    # Clicks are ignored while a drag is in progress
    controller.select_node(child)
    assert isinstance(controller.state, Dragging)
    assert controller.selected_id == root

    controller.end_drag()
    assert controller.state == Selected(root)


def test_end_drag_selects_dragged_node(controller):
    root = controller.graph.root.id
    controller.select_node(root)
    child = controller.add_child_node("Child")
    controller.clear_selection()

    controller.begin_drag(child, PointerEvent(0, 0))
    outcome = controller.end_drag()
    assert outcome.node_id == child
    assert controller.state == Selected(child)


def test_end_drag_without_drag(controller):
    assert controller.end_drag() is None
    controller.continue_drag(PointerEvent(5, 5))
    assert controller.graph.root.position == Point(400.0, 300.0)


def test_click_threshold(controller):
    root = controller.graph.root.id
    controller.begin_drag(root, PointerEvent(400, 300))
    controller.continue_drag(PointerEvent(402, 301))
    outcome = controller.end_drag()
    assert outcome.is_click

    controller.begin_drag(root, PointerEvent(400, 300))
    controller.continue_drag(PointerEvent(440, 300))
    controller.continue_drag(PointerEvent(401, 300))
    outcome = controller.end_drag()
    assert not outcome.is_click
    assert outcome.travel == pytest.approx(40)


def test_capture_scoped_to_drag(controller, capture):
    root = controller.graph.root.id
    assert capture.active == 0

    controller.begin_drag(root, PointerEvent(400, 300))
    assert capture.active == 1
    assert controller.capture_active

    # Window-level listeners drive the drag
    capture.on_move(PointerEvent(410, 300))
    assert controller.graph.root.position == Point(410, 300)
    capture.on_release()
    assert capture.active == 0
    assert not controller.capture_active

    # Release is idempotent
    controller.end_drag()
    assert capture.released == 1


def test_capture_released_on_every_exit(controller, capture):
    root = controller.graph.root.id
    for _ in range(10):
        controller.begin_drag(root, PointerEvent(1, 1))
        controller.end_drag()
    assert capture.active == 0
    assert capture.acquired == capture.released == 10

    # A second pointer-down replaces the first drag's listeners
    controller.begin_drag(root, PointerEvent(1, 1))
    controller.begin_drag(root, PointerEvent(2, 2))
    assert capture.active == 1

    controller.reset_session()
    assert capture.active == 0
    assert controller.state == Idle()


def test_edit_node(controller):
    root = controller.graph.root.id
    assert controller.edit_node(root, "Big Idea", "#7B61FF")
    node = controller.graph.get_node(root)
    assert node.label == "Big Idea"
    assert node.color == "#7B61FF"
    assert node.position == Point(400.0, 300.0)


def test_edit_unknown_node_is_noop(controller):
    assert controller.edit_node("missing", "x") is False


def test_role_colors(controller):
    root = controller.graph.root.id
    controller.select_node(root)
    plain = controller.add_child_node("Plain")
    custom = controller.add_child_node("Custom", "#38A169")

    controller.set_role_color("child", "#123456")
    controller.set_role_color("root", "#654321")
    assert controller.color_of(plain) == "#123456"
    assert controller.color_of(custom) == "#38A169"
    assert controller.color_of(root) == "#654321"

    controller.set_role_color("bogus", "#000000")
    assert "bogus" not in controller.role_colors


def test_reset_is_idempotent(controller):
    controller.select_node(controller.graph.root.id)
    controller.add_child_node("A")
    controller.set_zoom(1.4)

    controller.reset_session()
    once = controller.graph.snapshot()
    controller.reset_session()
    twice = controller.graph.snapshot()

    assert once == twice
    assert len(twice.nodes) == 1
    assert controller.state == Idle()
    assert controller.zoom == 1.0
    assert controller.phase == Phase.START


def test_session_phases_and_summary(controller):
    root = controller.graph.root.id
    controller.select_node(root)
    a = controller.add_child_node("A")
    controller.select_node(a)
    controller.add_child_node("B")

    controller.finish_session()
    assert controller.phase == Phase.FINISHED
    summary = controller.session_summary()
    assert (summary.node_count, summary.edge_count, summary.depth) == (3, 2, 3)


def test_state_change_notifications(controller):
    calls = []
    controller.on_state_changed = lambda: calls.append(1)
    controller.select_node(controller.graph.root.id)
    controller.zoom_in()
    assert len(calls) == 2


def test_invariants_hold_under_random_commands(capture):
    rng = random.Random(1234)
    ctrl = InteractionController(capture=capture, rng=random.Random(99))
    ctrl.start_session()

    for _ in range(500):
        ids = [n.id for n in ctrl.graph.nodes] + ["ghost"]
        op = rng.randrange(9)
        if op == 0:
            ctrl.select_node(rng.choice(ids))
        elif op == 1:
            ctrl.clear_selection()
        elif op == 2:
            ctrl.add_child_node(rng.choice(["A", "B", " ", "Feature 1"]))
        elif op == 3:
            ctrl.begin_drag(rng.choice(ids), PointerEvent(rng.uniform(-500, 500), rng.uniform(-500, 500)))
        elif op == 4:
            ctrl.continue_drag(PointerEvent(rng.uniform(-500, 500), rng.uniform(-500, 500)))
        elif op == 5:
            ctrl.end_drag()
        elif op == 6:
            ctrl.set_zoom(rng.uniform(-3, 3))
        elif op == 7:
            ctrl.edit_node(rng.choice(ids), "edited")
        elif rng.random() < 0.1:
            ctrl.reset_session()
        _assert_tree(ctrl)
        assert 0.5 <= ctrl.zoom <= 1.5
        assert capture.active == (1 if ctrl.is_dragging else 0)


@pytest.mark.parametrize("color", ["red", "#12345", 123, ""])
def test_unsupported_colors_are_ignored(controller, color):
    root = controller.graph.root.id
    controller.select_node(root)
    before = controller.graph.snapshot()
    roles = dict(controller.role_colors)

    assert controller.edit_node(root, "Renamed", color) is False
    assert controller.add_child_node("Kid", color) is None
    controller.set_role_color("child", color)

    assert controller.graph.snapshot() == before
    assert controller.role_colors == roles


def test_edit_node_reset_color(controller):
    root = controller.graph.root.id
    controller.edit_node(root, color="#38A169")
    assert controller.color_of(root) == "#38A169"

    assert controller.edit_node(root, reset_color=True)
    assert controller.graph.get_node(root).color is None
    assert controller.color_of(root) == controller.role_colors["root"]


def test_add_child_after_import_with_foreign_ids(controller):
    doc = {
        "nodes": [
            {"id": "1", "label": "r", "position": {"x": 0, "y": 0}, "isRoot": True},
            {"id": "x", "label": "k", "position": {"x": 10, "y": 0}, "isRoot": False},
        ],
        "edges": [{"id": "1-2", "sourceId": "1", "targetId": "x"}],
    }
    assert controller.import_document(doc)
    controller.select_node("1")
    new_id = controller.add_child_node("new")

    assert new_id is not None
    assert len(controller.graph) == 3
    assert len({e.id for e in controller.graph.edges}) == 2
    controller.graph.check_invariants()
