from types import SimpleNamespace

import pytest

from ui_customizer.capability import DRAG, RESIZE, DirectCapability, Edges
from ui_customizer.containers import ContainerRegistry
from ui_customizer.errors import CustomizerError
from ui_customizer.interaction import ACTIVE_MARKER, CUSTOMIZABLE_MARKER, InteractionController
from ui_customizer.layout_store import LayoutStore
from ui_customizer.storage import MemoryStore


def _controller(dashboard, *, grid=8, pending=False):
    calls = SimpleNamespace(deferred=[], drained=[], saves=0)
    registry = ContainerRegistry(dashboard.tree)
    layout = LayoutStore(MemoryStore())

    def _save():
        calls.saves += 1
        return True

    def _drain(container):
        calls.drained.append(container)
        return 0

    controller = InteractionController(
        dashboard.tree,
        registry,
        layout,
        grid_size_fn=lambda: grid,
        defer_fn=lambda container, node: calls.deferred.append((container, node)),
        has_pending_fn=lambda container: pending,
        drain_fn=_drain,
        save_fn=_save,
    )
    capability = DirectCapability()
    controller.attach_capability(capability)
    return controller, capability, registry, layout, calls


def _geometry(node):
    style = node.style
    return style.left, style.top, style.width, style.height


def test_activate_requires_capability(dashboard):
    _, _, registry, layout, _ = _controller(dashboard)
    bare = InteractionController(
        dashboard.tree,
        registry,
        layout,
        grid_size_fn=lambda: 8,
        defer_fn=lambda container, node: None,
        has_pending_fn=lambda container: False,
        drain_fn=lambda container: 0,
        save_fn=lambda: True,
    )
    with pytest.raises(CustomizerError):
        bare.activate(dashboard.card_a)


def test_activate_writes_container_relative_geometry(dashboard):
    controller, capability, registry, layout, _ = _controller(dashboard)

    assert controller.activate(dashboard.card_a) is True
    assert controller.activate(dashboard.card_a) is False

    style = dashboard.card_a.style
    assert style.position == "absolute"
    assert style.z_index == "1000"
    assert _geometry(dashboard.card_a) == ("0px", "40px", "300px", "200px")
    assert dashboard.card_a.bounding_rect().as_tuple() == (0, 100, 300, 200)
    assert dashboard.card_a.has_marker(CUSTOMIZABLE_MARKER)
    assert dashboard.card_a.has_marker(ACTIVE_MARKER)
    assert dashboard.tree.has_drag_handle(dashboard.card_a)
    assert capability.is_bound(dashboard.card_a)
    assert registry.for_element(dashboard.card_a).elements == [dashboard.card_a]
    assert layout.original_for("card-a").position == ""


def test_activate_defers_hidden_container(dashboard):
    controller, capability, _, _, calls = _controller(dashboard)

    assert controller.activate(dashboard.form_one) is False

    assert calls.deferred == [(dashboard.settings_tab, dashboard.form_one)]
    assert not capability.is_bound(dashboard.form_one)
    assert dashboard.form_one.style.position == ""


def test_drag_snaps_live_and_commits_left_top(dashboard):
    controller, capability, _, _, calls = _controller(dashboard)
    controller.activate(dashboard.card_a)

    capability.press(dashboard.card_a, DRAG)
    capability.move(dashboard.card_a, 10, 2)
    capability.move(dashboard.card_a, 3, 3)
    assert dashboard.card_a.style.transform == "translate(16px, 8px)"
    assert dashboard.card_a.style.left == "0px"
    capability.release(dashboard.card_a)

    assert _geometry(dashboard.card_a) == ("16px", "48px", "300px", "200px")
    assert dashboard.card_a.style.transform == ""
    assert calls.saves == 1
    assert not controller.gesture_in_progress


def test_grid_threshold_boundary_with_wide_cells(dashboard):
    controller, capability, _, _, _ = _controller(dashboard, grid=32)
    controller.activate(dashboard.card_a)
    controller.activate(dashboard.card_b)

    capability.drag(dashboard.card_a, (23, 0))
    capability.drag(dashboard.card_b, (21, 0))

    assert dashboard.card_a.style.left == "32px"
    assert dashboard.card_b.style.left == "341px"


def test_drag_is_clamped_into_container_on_commit(dashboard):
    controller, capability, _, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_a)
    controller.activate(dashboard.card_b)

    capability.press(dashboard.card_a, DRAG)
    capability.move(dashboard.card_a, -500, -500)
    assert dashboard.card_a.style.transform == "translate(-496px, -504px)"
    capability.release(dashboard.card_a)
    capability.drag(dashboard.card_b, (5000, 0))

    assert (dashboard.card_a.style.left, dashboard.card_a.style.top) == ("0px", "0px")
    assert dashboard.card_b.style.left == "700px"


def test_resize_clamps_to_minimum_size(dashboard):
    controller, capability, _, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_a)

    capability.resize(dashboard.card_a, Edges(right=True, bottom=True), (-500, -500))

    assert dashboard.card_a.style.width == "80px"
    assert dashboard.card_a.style.height == "40px"


def test_resize_clamps_to_container_size(dashboard):
    controller, capability, _, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_a)

    capability.resize(dashboard.card_a, Edges(right=True), (2000, 0))

    assert dashboard.card_a.style.width == "1000px"
    assert dashboard.card_a.style.height == "200px"


def test_resize_from_left_edge_moves_origin(dashboard):
    controller, capability, _, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_b)

    capability.press(dashboard.card_b, RESIZE, Edges(left=True))
    capability.move(dashboard.card_b, 100, 0)
    assert dashboard.card_b.style.width == "200px"
    assert dashboard.card_b.style.transform == "translate(100px, 0px)"
    capability.release(dashboard.card_b)

    assert _geometry(dashboard.card_b) == ("420px", "40px", "200px", "200px")


def test_resize_from_left_or_top_edge_stays_inside_container(dashboard):
    controller, capability, _, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_a)

    capability.resize(dashboard.card_a, Edges(left=True), (-400, 0))
    assert _geometry(dashboard.card_a) == ("0px", "40px", "300px", "200px")

    capability.resize(dashboard.card_a, Edges(top=True), (0, -100))
    assert _geometry(dashboard.card_a) == ("0px", "0px", "300px", "240px")
    assert dashboard.card_a.style.transform == ""


def test_guides_are_drawn_against_same_container_siblings(dashboard):
    controller, capability, registry, _, _ = _controller(dashboard)
    for node in (dashboard.card_a, dashboard.card_b, dashboard.grid_item, dashboard.chart):
        controller.activate(node)
    overlay = registry.get(dashboard.dashboard_tab).overlay

    capability.press(dashboard.card_a, DRAG)
    capability.move(dashboard.card_a, 1, 0)

    assert overlay.vertical == [0]
    assert overlay.horizontal == [40, 240, 140]

    capability.release(dashboard.card_a)
    assert overlay.vertical == []
    assert overlay.horizontal == []


def test_commit_drains_pending_container(dashboard):
    controller, capability, _, _, calls = _controller(dashboard, pending=True)
    controller.activate(dashboard.card_a)

    capability.drag(dashboard.card_a, (8, 0))

    assert calls.drained == [dashboard.dashboard_tab]


def test_finish_active_gesture_commits_in_flight_drag(dashboard):
    controller, capability, _, _, calls = _controller(dashboard)
    controller.activate(dashboard.card_a)
    capability.press(dashboard.card_a, DRAG)
    capability.move(dashboard.card_a, 13, 5)

    assert controller.finish_active_gesture() is True
    assert controller.finish_active_gesture() is False

    assert _geometry(dashboard.card_a)[:2] == ("16px", "48px")
    assert dashboard.card_a.style.transform == ""
    assert calls.saves == 1


def test_moves_for_other_nodes_are_ignored(dashboard):
    controller, capability, _, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_a)
    controller.activate(dashboard.card_b)

    capability.press(dashboard.card_a, DRAG)
    controller.move_gesture(dashboard.card_b, 50, 50)
    controller.end_gesture(dashboard.card_b)

    assert controller.gesture_in_progress
    assert dashboard.card_b.style.transform == ""


def test_deactivate_all_keeps_geometry(dashboard):
    controller, capability, registry, _, _ = _controller(dashboard)
    controller.activate(dashboard.card_a)
    capability.drag(dashboard.card_a, (13, 5))

    assert controller.deactivate_all() == 1

    assert _geometry(dashboard.card_a) == ("16px", "48px", "300px", "200px")
    assert not dashboard.card_a.has_marker(CUSTOMIZABLE_MARKER)
    assert not dashboard.tree.has_drag_handle(dashboard.card_a)
    assert capability.bound_count == 0
    assert controller.active_nodes() == []
    assert registry.for_element(dashboard.card_a).elements == []
