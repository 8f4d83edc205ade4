"""Drag/resize behaviour for activated elements."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .capability import DRAG, NO_EDGES, RESIZE, Edges, InteractionCapability
from .containers import ContainerRegistry
from .errors import CustomizerError
from .geometry import (
    MIN_ELEMENT_HEIGHT,
    MIN_ELEMENT_WIDTH,
    Rect,
    clamp_into,
    clamp_size,
    format_px,
    format_translate,
    snap_to_grid,
)
from .layout_store import LayoutStore
from .logging_utils import ENGINE_LOGGER_NAME
from .snap_engine import SnapEngine
from .tree import RenderNode, RenderTree

_LOGGER = logging.getLogger(ENGINE_LOGGER_NAME)

CUSTOMIZABLE_MARKER = "ui-customizable"
ACTIVE_MARKER = "ui-customizable-active"
ACTIVE_Z_INDEX = "1000"


@dataclass
class ActiveElement:
    node: RenderNode
    container: RenderNode


@dataclass
class _Gesture:
    element: ActiveElement
    kind: str
    edges: Edges
    start: Rect
    raw_dx: float = 0.0
    raw_dy: float = 0.0
    offset_x: float = 0.0
    offset_y: float = 0.0


class InteractionController:
    """Activates elements and turns raw gesture deltas into committed geometry.

    During a gesture only a ``translate()`` transform (and, for resizes, the
    inline size) changes; left/top are written once when the gesture ends,
    from the element's rendered rectangle.
    """

    def __init__(
        self,
        tree: RenderTree,
        registry: ContainerRegistry,
        layout_store: LayoutStore,
        *,
        grid_size_fn: Callable[[], int],
        defer_fn: Callable[[RenderNode, RenderNode], None],
        has_pending_fn: Callable[[RenderNode], bool],
        drain_fn: Callable[[RenderNode], int],
        save_fn: Callable[[], object],
        snap_range: float = 10,
        min_width: float = MIN_ELEMENT_WIDTH,
        min_height: float = MIN_ELEMENT_HEIGHT,
    ) -> None:
        self._tree = tree
        self._registry = registry
        self._layout_store = layout_store
        self._grid_size = grid_size_fn
        self._defer = defer_fn
        self._has_pending = has_pending_fn
        self._drain = drain_fn
        self._save = save_fn
        self._snap_range = float(snap_range)
        self._min_width = float(min_width)
        self._min_height = float(min_height)
        self._snap_engine = SnapEngine(self._snap_range)
        self._capability: Optional[InteractionCapability] = None
        self._active: Dict[int, ActiveElement] = {}
        self._gesture: Optional[_Gesture] = None

    # Activation ----------------------------------------------------------

    def attach_capability(self, capability: InteractionCapability) -> None:
        self._capability = capability

    @property
    def gesture_in_progress(self) -> bool:
        return self._gesture is not None

    def is_active(self, node: RenderNode) -> bool:
        return id(node) in self._active

    def active_nodes(self) -> List[RenderNode]:
        return [element.node for element in self._active.values()]

    def activate(self, node: RenderNode) -> bool:
        """Bind interaction to ``node``; False when already active or deferred."""
        if id(node) in self._active:
            return False
        if self._capability is None:
            raise CustomizerError("Cannot activate elements before a capability is attached")
        container = self._registry.resolve(node)
        if not self._registry.is_visible(container):
            self._defer(container, node)
            return False

        entry = self._registry.prepare(container)
        entry.register(node)
        node.add_marker(CUSTOMIZABLE_MARKER)
        self._layout_store.capture_original(self._tree, node)

        changes = {"position": "absolute", "z_index": ACTIVE_Z_INDEX}
        if not node.style.has_geometry():
            rect = node.bounding_rect().relative_to(container.bounding_rect())
            changes.update(
                left=format_px(rect.left),
                top=format_px(rect.top),
                width=format_px(rect.width),
                height=format_px(rect.height),
            )
        node.set_style(**changes)
        self._tree.attach_drag_handle(node)
        self._capability.bind(node, self)
        node.add_marker(ACTIVE_MARKER)
        self._active[id(node)] = ActiveElement(node=node, container=container)
        _LOGGER.debug("Activated %r in container %r", node, container)
        return True

    def deactivate_all(self) -> int:
        """Detach interaction from every element; inline geometry is kept."""
        count = 0
        for element in list(self._active.values()):
            node = element.node
            if self._capability is not None:
                try:
                    self._capability.unbind(node)
                except Exception as exc:
                    _LOGGER.debug("Failed to unbind %r: %s", node, exc)
            self._tree.detach_drag_handle(node)
            node.remove_marker(CUSTOMIZABLE_MARKER)
            node.remove_marker(ACTIVE_MARKER)
            entry = self._registry.get(element.container)
            if entry is not None:
                entry.unregister(node)
            count += 1
        self._active.clear()
        self._gesture = None
        return count

    # Gestures ------------------------------------------------------------

    def begin_gesture(self, node: RenderNode, kind: str, edges: Edges = NO_EDGES) -> None:
        element = self._active.get(id(node))
        if element is None:
            _LOGGER.debug("Ignoring %s start for inactive %r", kind, node)
            return
        if kind not in (DRAG, RESIZE):
            raise ValueError(f"Unknown gesture kind {kind!r}")
        if self._gesture is not None:
            self.finish_active_gesture()
        start = node.bounding_rect().relative_to(element.container.bounding_rect())
        self._gesture = _Gesture(element=element, kind=kind, edges=edges, start=start)
        _LOGGER.debug("%s started on %r at %s", kind.capitalize(), node, start.as_tuple())

    def move_gesture(self, node: RenderNode, dx: float, dy: float) -> None:
        gesture = self._gesture
        if gesture is None or gesture.element.node is not node:
            return
        gesture.raw_dx += dx
        gesture.raw_dy += dy
        if gesture.kind == DRAG:
            self._apply_drag(gesture)
        else:
            self._apply_resize(gesture)
        self._update_guides(gesture.element)

    def end_gesture(self, node: RenderNode) -> None:
        gesture = self._gesture
        if gesture is None or gesture.element.node is not node:
            return
        self._commit(gesture)

    def finish_active_gesture(self) -> bool:
        """Commit an in-flight gesture as if the pointer were released."""
        gesture = self._gesture
        if gesture is None:
            return False
        _LOGGER.debug("Forcing end of in-flight %s on %r", gesture.kind, gesture.element.node)
        self._commit(gesture)
        return True

    def _snap(self, value: float) -> float:
        return snap_to_grid(value, self._grid_size(), self._snap_range)

    def _apply_drag(self, gesture: _Gesture) -> None:
        start = gesture.start
        # container clamping is applied only on commit
        left = self._snap(start.left + gesture.raw_dx)
        top = self._snap(start.top + gesture.raw_dy)
        gesture.offset_x = left - start.left
        gesture.offset_y = top - start.top
        gesture.element.node.set_style(transform=format_translate(gesture.offset_x, gesture.offset_y))

    def _apply_resize(self, gesture: _Gesture) -> None:
        start = gesture.start
        edges = gesture.edges
        width, height = start.width, start.height
        if edges.right:
            width = start.width + gesture.raw_dx
        elif edges.left:
            width = start.width - gesture.raw_dx
        if edges.bottom:
            height = start.height + gesture.raw_dy
        elif edges.top:
            height = start.height - gesture.raw_dy
        width = self._snap(width)
        height = self._snap(height)
        max_width, max_height = gesture.element.container.client_size()
        # a left or top edge can grow only as far as the container origin
        if edges.left:
            max_width = min(max_width, start.right)
        if edges.top:
            max_height = min(max_height, start.bottom)
        width, height = clamp_size(
            width,
            height,
            min_width=self._min_width,
            min_height=self._min_height,
            max_width=max_width,
            max_height=max_height,
        )
        gesture.offset_x = (start.width - width) if edges.left else 0.0
        gesture.offset_y = (start.height - height) if edges.top else 0.0
        gesture.element.node.set_style(
            width=format_px(width),
            height=format_px(height),
            transform=format_translate(gesture.offset_x, gesture.offset_y),
        )

    def _commit(self, gesture: _Gesture) -> None:
        element = gesture.element
        node = element.node
        container = element.container
        self._gesture = None
        container_rect = container.bounding_rect()
        rendered = node.bounding_rect()
        rect = Rect(
            round(rendered.left - container_rect.left),
            round(rendered.top - container_rect.top),
            rendered.width,
            rendered.height,
        )
        bounds_width, bounds_height = container.client_size()
        rect = clamp_into(rect, bounds_width, bounds_height)
        node.set_style(
            left=format_px(rect.left),
            top=format_px(rect.top),
            width=format_px(rect.width),
            height=format_px(rect.height),
            transform="",
        )
        entry = self._registry.get(container)
        self._snap_engine.clear(entry.overlay if entry is not None else None)
        _LOGGER.debug("%s finished on %r at %s", gesture.kind.capitalize(), node, rect.as_tuple())
        self._save()
        if self._has_pending(container):
            self._drain(container)

    # Guides --------------------------------------------------------------

    def _update_guides(self, element: ActiveElement) -> None:
        entry = self._registry.get(element.container)
        if entry is None:
            return
        origin = element.container.bounding_rect()
        target = element.node.bounding_rect().relative_to(origin)
        siblings = [
            other.node.bounding_rect().relative_to(origin)
            for other in self._active.values()
            if other.container is element.container and other.node is not element.node
        ]
        self._snap_engine.update(entry.overlay, target, siblings)
