"""QWidget-backed render tree.

Widgets opt in through dynamic properties: ``uiRole`` carries space separated
roles (``"card"``, ``"tab-panel"``...), ``uiTag`` an optional tag name used
for heading exclusion and ``uiPosition`` a stylesheet-level positioning
context. ``objectName`` doubles as the persisted element identifier.

Absolutely positioned widgets are taken out of their parent's layout and
placed with ``setGeometry``; ``left``/``top`` resolve against the nearest
positioned ancestor, like the headless tree.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from PyQt6.QtCore import QEvent, QObject, QPoint, Qt
from PyQt6.QtGui import QColor, QPainter, QPen
from PyQt6.QtWidgets import QBoxLayout, QLabel, QLayout, QWidget

from ..geometry import Rect, parse_px, parse_translate
from ..logging_utils import QT_LOGGER_NAME
from ..tree import InlineStyle, Unsubscribe, iter_ancestors

_LOGGER = logging.getLogger(QT_LOGGER_NAME)

ROLE_PROPERTY = "uiRole"
TAG_PROPERTY = "uiTag"
POSITION_PROPERTY = "uiPosition"
MARKERS_PROPERTY = "uiMarkers"
DECORATION_PROPERTY = "uiDecoration"

DRAG_HANDLE_TEXT = "⋮⋮"
HANDLE_MARGIN_PX = 6
GUIDE_COLOR = QColor(255, 136, 0)

_WATCHED_EVENTS = (QEvent.Type.Show, QEvent.Type.Hide, QEvent.Type.Resize)


def _is_decoration(widget: QWidget) -> bool:
    return bool(widget.property(DECORATION_PROPERTY))


class QtNode:
    """Adapter exposing one QWidget as a render node."""

    def __init__(self, tree: "QtRenderTree", widget: QWidget) -> None:
        self._tree = tree
        self._widget = widget
        self._style = InlineStyle()
        self._markers: set[str] = set()
        self._layout_slot: Optional[Tuple[QLayout, int]] = None

    def __repr__(self) -> str:
        return f"QtNode({self.node_id or type(self._widget).__name__})"

    @property
    def widget(self) -> QWidget:
        return self._widget

    @property
    def node_id(self) -> Optional[str]:
        return self._widget.objectName() or None

    @node_id.setter
    def node_id(self, value: Optional[str]) -> None:
        self._widget.setObjectName(value or "")

    @property
    def tag(self) -> str:
        return str(self._widget.property(TAG_PROPERTY) or type(self._widget).__name__).lower()

    @property
    def roles(self) -> frozenset[str]:
        return frozenset(str(self._widget.property(ROLE_PROPERTY) or "").split())

    @property
    def parent(self) -> Optional["QtNode"]:
        if self._widget is self._tree.root_widget:
            return None
        parent = self._widget.parentWidget()
        if parent is None:
            return None
        return self._tree.node_for(parent)

    @property
    def children(self) -> Sequence["QtNode"]:
        direct = self._widget.findChildren(QWidget, options=Qt.FindChildOption.FindDirectChildrenOnly)
        return tuple(self._tree.node_for(child) for child in direct if not _is_decoration(child))

    # Style ---------------------------------------------------------------

    @property
    def style(self) -> InlineStyle:
        return self._style

    def set_style(self, **changes: str) -> None:
        updated = self._style.with_changes(**changes)
        if updated == self._style:
            return
        previous = self._style
        self._style = updated
        self._apply_style(previous)

    def computed_position(self) -> str:
        return self._style.position or str(self._widget.property(POSITION_PROPERTY) or "static")

    def is_displayed(self) -> bool:
        root = self._tree.root_widget
        if self._widget is root:
            return not self._widget.isHidden()
        return self._widget.isVisibleTo(root)

    def _apply_style(self, previous: InlineStyle) -> None:
        style = self._style
        widget = self._widget
        if style.display == "none":
            widget.hide()
        elif previous.display == "none":
            widget.show()
        if style.position == "absolute" and previous.position != "absolute":
            self._take_from_layout()
        elif previous.position == "absolute" and style.position != "absolute":
            self._return_to_layout()
        if style.position == "absolute":
            self._place()
        if style.z_index and style.z_index != previous.z_index:
            widget.raise_()

    def _take_from_layout(self) -> None:
        parent = self._widget.parentWidget()
        layout = parent.layout() if parent is not None else None
        if layout is None:
            return
        index = layout.indexOf(self._widget)
        if index < 0:
            return
        self._layout_slot = (layout, index)
        layout.removeWidget(self._widget)
        self._widget.show()

    def _return_to_layout(self) -> None:
        slot = self._layout_slot
        self._layout_slot = None
        if slot is None:
            return
        layout, index = slot
        if isinstance(layout, QBoxLayout):
            layout.insertWidget(min(index, layout.count()), self._widget)
        else:
            layout.addWidget(self._widget)

    def _origin_in_parent(self) -> QPoint:
        parent = self._widget.parentWidget()
        if parent is None:
            return QPoint(0, 0)
        origin = self._tree.positioning_origin(self)
        if origin is parent:
            return QPoint(0, 0)
        return parent.mapFrom(origin, QPoint(0, 0))

    def _place(self) -> None:
        style = self._style
        widget = self._widget
        width = parse_px(style.width)
        height = parse_px(style.height)
        left = parse_px(style.left)
        top = parse_px(style.top)
        origin = self._origin_in_parent()
        x = widget.x() if left is None else origin.x() + left
        y = widget.y() if top is None else origin.y() + top
        dx, dy = parse_translate(style.transform)
        widget.setGeometry(
            int(round(x + dx)),
            int(round(y + dy)),
            widget.width() if width is None else max(0, int(round(width))),
            widget.height() if height is None else max(0, int(round(height))),
        )
        self._tree.reposition_handle(self)

    # Markers -------------------------------------------------------------

    def has_marker(self, name: str) -> bool:
        return name in self._markers

    def add_marker(self, name: str) -> None:
        if name in self._markers:
            return
        self._markers.add(name)
        self._publish_markers()

    def remove_marker(self, name: str) -> None:
        if name not in self._markers:
            return
        self._markers.discard(name)
        self._publish_markers()

    def _publish_markers(self) -> None:
        self._widget.setProperty(MARKERS_PROPERTY, " ".join(sorted(self._markers)))
        # re-evaluate [uiMarkers~="..."] stylesheet selectors
        self._widget.style().unpolish(self._widget)
        self._widget.style().polish(self._widget)

    # Geometry ------------------------------------------------------------

    def bounding_rect(self) -> Rect:
        if not self.is_displayed():
            return Rect(0.0, 0.0, 0.0, 0.0)
        root = self._tree.root_widget
        if self._widget is root:
            top_left = QPoint(0, 0)
        else:
            top_left = self._widget.mapTo(root, QPoint(0, 0))
        return Rect(float(top_left.x()), float(top_left.y()), float(self._widget.width()), float(self._widget.height()))

    def client_size(self) -> Tuple[float, float]:
        contents = self._widget.contentsRect()
        return float(contents.width()), float(contents.height())


class QtGuideOverlay(QWidget):
    """Transparent child widget that paints alignment guides over a container."""

    def __init__(self, container: QWidget) -> None:
        super().__init__(container)
        self.setProperty(DECORATION_PROPERTY, True)
        self.setObjectName("uiGuideOverlay")
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setAttribute(Qt.WidgetAttribute.WA_NoSystemBackground, True)
        self._vertical: List[int] = []
        self._horizontal: List[int] = []
        self.setGeometry(container.rect())
        self.show()

    @property
    def vertical(self) -> List[int]:
        return list(self._vertical)

    @property
    def horizontal(self) -> List[int]:
        return list(self._horizontal)

    def draw_vertical(self, x: int) -> None:
        self._vertical.append(int(x))
        self._refresh()

    def draw_horizontal(self, y: int) -> None:
        self._horizontal.append(int(y))
        self._refresh()

    def clear(self) -> None:
        if not self._vertical and not self._horizontal:
            return
        self._vertical.clear()
        self._horizontal.clear()
        self._refresh()

    def remove(self) -> None:
        self._vertical.clear()
        self._horizontal.clear()
        self.hide()
        self.setParent(None)
        self.deleteLater()

    def _refresh(self) -> None:
        parent = self.parentWidget()
        if parent is not None:
            self.setGeometry(parent.rect())
        self.raise_()
        self.update()

    def paintEvent(self, event) -> None:  # type: ignore[override]
        if not self._vertical and not self._horizontal:
            return
        painter = QPainter(self)
        pen = QPen(GUIDE_COLOR)
        pen.setWidth(1)
        pen.setStyle(Qt.PenStyle.DashLine)
        painter.setPen(pen)
        height = self.height()
        width = self.width()
        for x in self._vertical:
            painter.drawLine(x, 0, x, height)
        for y in self._horizontal:
            painter.drawLine(0, y, width, y)
        painter.end()


class _ChangeWatcher(QObject):
    def __init__(self, callback: Callable[[], None], parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._callback = callback

    def eventFilter(self, watched, event) -> bool:  # type: ignore[override]
        if event.type() in _WATCHED_EVENTS:
            self._callback()
        return False


class QtRenderTree:
    def __init__(self, root: QWidget) -> None:
        self._root_widget = root
        self._nodes: Dict[int, QtNode] = {}
        self._handles: Dict[int, QLabel] = {}

    @property
    def root_widget(self) -> QWidget:
        return self._root_widget

    @property
    def root(self) -> QtNode:
        return self.node_for(self._root_widget)

    def node_for(self, widget: QWidget) -> QtNode:
        node = self._nodes.get(id(widget))
        if node is None or node.widget is not widget:
            node = QtNode(self, widget)
            self._nodes[id(widget)] = node
        return node

    def iter_nodes(self) -> Iterator[QtNode]:
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_by_id(self, node_id: str) -> Optional[QtNode]:
        if not node_id:
            return None
        if self._root_widget.objectName() == node_id:
            return self.root
        widget = self._root_widget.findChild(QWidget, node_id)
        if widget is None or _is_decoration(widget):
            return None
        return self.node_for(widget)

    def contains(self, node: QtNode) -> bool:
        widget = node.widget
        return widget is self._root_widget or self._root_widget.isAncestorOf(widget)

    def assign_id(self, node: QtNode, node_id: str) -> None:
        node.node_id = node_id

    def positioning_origin(self, node: QtNode) -> QWidget:
        for parent in iter_ancestors(node):
            if parent.computed_position() != "static" or parent.parent is None:
                return parent.widget  # type: ignore[attr-defined]
        return self._root_widget

    # Decorations ---------------------------------------------------------

    def attach_drag_handle(self, node: QtNode) -> None:
        if id(node.widget) in self._handles:
            return
        handle = QLabel(DRAG_HANDLE_TEXT, node.widget)
        handle.setProperty(DECORATION_PROPERTY, True)
        handle.setObjectName("uiDragHandle")
        handle.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        handle.adjustSize()
        self._handles[id(node.widget)] = handle
        self.reposition_handle(node)
        handle.show()

    def detach_drag_handle(self, node: QtNode) -> None:
        handle = self._handles.pop(id(node.widget), None)
        if handle is None:
            return
        handle.hide()
        handle.setParent(None)
        handle.deleteLater()

    def has_drag_handle(self, node: QtNode) -> bool:
        return id(node.widget) in self._handles

    def reposition_handle(self, node: QtNode) -> None:
        handle = self._handles.get(id(node.widget))
        if handle is None:
            return
        handle.move(max(0, node.widget.width() - handle.width() - HANDLE_MARGIN_PX), HANDLE_MARGIN_PX)
        handle.raise_()

    def create_guide_overlay(self, container: QtNode) -> QtGuideOverlay:
        return QtGuideOverlay(container.widget)

    # Observation ---------------------------------------------------------

    def subscribe(self, node: QtNode, callback: Callable[[], None]) -> Unsubscribe:
        widget = node.widget
        watcher = _ChangeWatcher(callback, widget)
        widget.installEventFilter(watcher)
        _LOGGER.debug("Watching %r for visibility changes", node)

        def _unsubscribe() -> None:
            widget.removeEventFilter(watcher)
            watcher.deleteLater()

        return _unsubscribe
