from ui_customizer.containers import ContainerRegistry, ensure_positioned, resolve_container
from ui_customizer.memory_tree import MemoryNode, MemoryRenderTree


def test_resolve_container_prefers_panel_region(dashboard):
    assert resolve_container(dashboard.tree, dashboard.card_a) is dashboard.dashboard_tab
    assert resolve_container(dashboard.tree, dashboard.form_one) is dashboard.settings_tab


def test_resolve_container_falls_back_to_positioned_ancestor_then_root():
    item = MemoryNode(roles=["card"])
    positioned = MemoryNode(position="relative", children=[MemoryNode(children=[item])])
    loose = MemoryNode(roles=["card"])
    tree = MemoryRenderTree(MemoryNode("body", children=[positioned, loose]))

    assert resolve_container(tree, item) is positioned
    assert resolve_container(tree, loose) is tree.root


def test_panel_itself_is_not_its_own_container(dashboard):
    assert resolve_container(dashboard.tree, dashboard.dashboard_tab) is dashboard.tree.root


def test_ensure_positioned_only_touches_static_containers():
    static = MemoryNode()
    fixed = MemoryNode(position="fixed")

    assert ensure_positioned(static) is True
    assert static.style.position == "relative"
    assert ensure_positioned(static) is False
    assert ensure_positioned(fixed) is False
    assert fixed.style.position == ""


def test_prepare_is_idempotent(dashboard):
    registry = ContainerRegistry(dashboard.tree)

    first = registry.prepare(dashboard.dashboard_tab)
    second = registry.prepare(dashboard.dashboard_tab)

    assert first is second
    assert first.position_changed is True
    assert len(dashboard.tree.overlays) == 1
    assert len(registry) == 1
    assert registry.for_element(dashboard.card_a) is first


def test_is_visible_rules(dashboard):
    registry = ContainerRegistry(dashboard.tree)

    assert registry.is_visible(dashboard.tree.root)
    assert registry.is_visible(dashboard.dashboard_tab)
    assert not registry.is_visible(dashboard.settings_tab)

    empty = MemoryNode(rect=(0, 0, 0, 120))
    dashboard.root.append(empty)
    assert not registry.is_visible(empty)


def test_teardown_removes_overlays_and_keeps_positioning(dashboard):
    registry = ContainerRegistry(dashboard.tree)
    entry = registry.prepare(dashboard.dashboard_tab)
    entry.register(dashboard.card_a)
    entry.register(dashboard.card_a)
    assert entry.elements == [dashboard.card_a]

    registry.teardown()

    assert len(registry) == 0
    assert dashboard.tree.live_overlays() == []
    assert dashboard.dashboard_tab.style.position == "relative"
