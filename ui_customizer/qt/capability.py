"""Mouse-driven interaction capability for QWidget trees."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from PyQt6.QtCore import QEvent, QObject, QPointF, Qt
from PyQt6.QtGui import QCursor
from PyQt6.QtWidgets import QWidget

from ..capability import DRAG, NO_EDGES, RESIZE, Edges, GestureListener
from ..logging_utils import QT_LOGGER_NAME
from .tree import QtNode

_LOGGER = logging.getLogger(QT_LOGGER_NAME)

DEFAULT_EDGE_PX = 6


def edges_at(x: float, y: float, width: float, height: float, band: float) -> Edges:
    """Edges of a ``width`` x ``height`` box whose band contains the local point."""
    return Edges(
        left=x <= band,
        right=x >= width - band,
        top=y <= band,
        bottom=y >= height - band,
    )


def cursor_for(edges: Edges) -> Qt.CursorShape:
    if (edges.left and edges.top) or (edges.right and edges.bottom):
        return Qt.CursorShape.SizeFDiagCursor
    if (edges.right and edges.top) or (edges.left and edges.bottom):
        return Qt.CursorShape.SizeBDiagCursor
    if edges.left or edges.right:
        return Qt.CursorShape.SizeHorCursor
    if edges.top or edges.bottom:
        return Qt.CursorShape.SizeVerCursor
    return Qt.CursorShape.OpenHandCursor


@dataclass
class _Binding:
    node: QtNode
    listener: GestureListener
    had_mouse_tracking: bool
    saved_cursor: Optional[QCursor] = None
    last_global: Optional[QPointF] = None


class QtInteractionCapability(QObject):
    """Turns mouse events on bound widgets into gesture callbacks.

    A press inside the edge band starts a resize on the touched edges; any
    other press starts a drag. Deltas are reported in global pixels.
    """

    def __init__(self, *, edge_px: int = DEFAULT_EDGE_PX, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._edge_px = max(1, int(edge_px))
        self._bindings: Dict[int, _Binding] = {}
        self._active_widget: Optional[QWidget] = None

    @property
    def edge_px(self) -> int:
        return self._edge_px

    def is_bound(self, node: QtNode) -> bool:
        return id(node.widget) in self._bindings

    def bind(self, node: QtNode, listener: GestureListener) -> None:
        widget = node.widget
        if id(widget) in self._bindings:
            self._bindings[id(widget)].listener = listener
            return
        self._bindings[id(widget)] = _Binding(
            node=node,
            listener=listener,
            had_mouse_tracking=widget.hasMouseTracking(),
        )
        widget.setMouseTracking(True)
        widget.installEventFilter(self)

    def unbind(self, node: QtNode) -> None:
        widget = node.widget
        binding = self._bindings.pop(id(widget), None)
        if binding is None:
            return
        widget.removeEventFilter(self)
        widget.setMouseTracking(binding.had_mouse_tracking)
        self._restore_cursor(widget, binding)
        if self._active_widget is widget:
            self._active_widget = None

    def eventFilter(self, watched, event) -> bool:  # type: ignore[override]
        binding = self._bindings.get(id(watched))
        if binding is None or binding.node.widget is not watched:
            return False
        kind = event.type()
        if kind == QEvent.Type.MouseButtonPress:
            return self._on_press(watched, binding, event)
        if kind == QEvent.Type.MouseMove:
            return self._on_move(watched, binding, event)
        if kind == QEvent.Type.MouseButtonRelease:
            return self._on_release(watched, binding, event)
        if kind == QEvent.Type.Leave and self._active_widget is not watched:
            self._restore_cursor(watched, binding)
        return False

    def _on_press(self, widget: QWidget, binding: _Binding, event) -> bool:
        if event.button() != Qt.MouseButton.LeftButton:
            return False
        local = event.position()
        edges = edges_at(local.x(), local.y(), widget.width(), widget.height(), self._edge_px)
        binding.last_global = event.globalPosition()
        self._active_widget = widget
        if edges.active:
            binding.listener.begin_gesture(binding.node, RESIZE, edges)
        else:
            self._set_cursor(widget, binding, Qt.CursorShape.ClosedHandCursor)
            binding.listener.begin_gesture(binding.node, DRAG, NO_EDGES)
        event.accept()
        return True

    def _on_move(self, widget: QWidget, binding: _Binding, event) -> bool:
        if self._active_widget is not widget:
            local = event.position()
            edges = edges_at(local.x(), local.y(), widget.width(), widget.height(), self._edge_px)
            self._set_cursor(widget, binding, cursor_for(edges))
            return False
        current = event.globalPosition()
        previous = binding.last_global or current
        binding.last_global = current
        dx = current.x() - previous.x()
        dy = current.y() - previous.y()
        if dx or dy:
            binding.listener.move_gesture(binding.node, dx, dy)
        event.accept()
        return True

    def _on_release(self, widget: QWidget, binding: _Binding, event) -> bool:
        if self._active_widget is not widget or event.button() != Qt.MouseButton.LeftButton:
            return False
        self._active_widget = None
        binding.last_global = None
        self._restore_cursor(widget, binding)
        binding.listener.end_gesture(binding.node)
        event.accept()
        return True

    def _set_cursor(self, widget: QWidget, binding: _Binding, shape: Qt.CursorShape) -> None:
        if binding.saved_cursor is None:
            binding.saved_cursor = widget.cursor()
        widget.setCursor(shape)

    @staticmethod
    def _restore_cursor(widget: QWidget, binding: _Binding) -> None:
        if binding.saved_cursor is None:
            return
        widget.setCursor(binding.saved_cursor)
        binding.saved_cursor = None


def create_capability(**kwargs) -> QtInteractionCapability:
    """Factory for ``ImportCapabilityProvider("ui_customizer.qt.capability:create_capability")``."""
    _LOGGER.debug("Creating Qt interaction capability (%s)", kwargs or "defaults")
    return QtInteractionCapability(**kwargs)
