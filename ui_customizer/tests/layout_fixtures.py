"""Shared render-tree fixtures for the customizer tests."""
from types import SimpleNamespace

from ui_customizer.memory_tree import MemoryNode, MemoryRenderTree
from ui_customizer.tree import InlineStyle


def build_dashboard():
    """Two-tab interface: a visible dashboard and a hidden settings tab."""
    card_a = MemoryNode(roles=["card"], node_id="card-a", rect=(0, 0, 300, 200))
    card_b = MemoryNode(roles=["card"], node_id="card-b", rect=(320, 0, 300, 200))
    grid_item = MemoryNode(rect=(640, 0, 300, 200))
    grid = MemoryNode(roles=["dashboard-grid"], node_id="grid", rect=(0, 40, 1000, 400), children=[card_a, card_b, grid_item])
    heading = MemoryNode("h2", rect=(0, 0, 1000, 30))
    chart = MemoryNode(roles=["chart-placeholder"], node_id="chart", rect=(0, 460, 600, 200))
    dashboard_tab = MemoryNode(
        roles=["tab-panel"],
        node_id="dashboard-tab",
        rect=(0, 60, 1000, 740),
        children=[heading, grid, chart],
    )
    form_one = MemoryNode(roles=["form-group"], node_id="fg-1", rect=(0, 0, 400, 80))
    form_two = MemoryNode(roles=["form-group"], node_id="fg-2", rect=(0, 100, 400, 80))
    settings_tab = MemoryNode(
        roles=["tab-panel"],
        node_id="settings-tab",
        rect=(0, 60, 1000, 740),
        style=InlineStyle(display="none"),
        children=[form_one, form_two],
    )
    modal_card = MemoryNode(roles=["card"], node_id="modal-card", rect=(0, 0, 200, 100))
    modal = MemoryNode(roles=["modal"], node_id="modal", rect=(300, 200, 400, 300), children=[modal_card])
    header = MemoryNode("header", rect=(0, 0, 1000, 60))
    root = MemoryNode("body", rect=(0, 0, 1000, 800), children=[header, dashboard_tab, settings_tab, modal])
    return SimpleNamespace(
        tree=MemoryRenderTree(root),
        root=root,
        header=header,
        dashboard_tab=dashboard_tab,
        heading=heading,
        grid=grid,
        card_a=card_a,
        card_b=card_b,
        grid_item=grid_item,
        chart=chart,
        settings_tab=settings_tab,
        form_one=form_one,
        form_two=form_two,
        modal=modal,
        modal_card=modal_card,
    )
