"""Headless render tree with a minimal block layout model.

Used by tests and by hosts that compute layout elsewhere and only need the
engine's bookkeeping. Each node carries a flow rectangle relative to its
parent; inline ``left``/``top`` on an absolutely positioned node are resolved
against its nearest positioned ancestor, and ``translate()`` transforms are
added on top, which is enough to reproduce what the engine reads back from a
real renderer.
"""
from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from .geometry import Rect, parse_px, parse_translate
from .tree import InlineStyle, Unsubscribe, iter_ancestors, iter_descendants


class MemoryNode:
    def __init__(
        self,
        tag: str = "div",
        *,
        roles: Iterable[str] = (),
        node_id: Optional[str] = None,
        rect: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 0.0),
        style: Optional[InlineStyle] = None,
        position: str = "static",
        children: Iterable["MemoryNode"] = (),
    ) -> None:
        self.tag = tag
        self.node_id = node_id
        self._roles = frozenset(roles)
        self._flow = Rect(*rect)
        self._style = style or InlineStyle()
        self._stylesheet_position = position
        self._markers: set[str] = set()
        self._listeners: List[Callable[[], None]] = []
        self._parent: Optional[MemoryNode] = None
        self._children: List[MemoryNode] = []
        for child in children:
            self.append(child)

    def __repr__(self) -> str:
        label = self.node_id or ",".join(sorted(self._roles)) or self.tag
        return f"MemoryNode({label})"

    # Structure -----------------------------------------------------------

    @property
    def roles(self) -> frozenset[str]:
        return self._roles

    @property
    def parent(self) -> Optional["MemoryNode"]:
        return self._parent

    @property
    def children(self) -> Sequence["MemoryNode"]:
        return tuple(self._children)

    def append(self, child: "MemoryNode") -> "MemoryNode":
        if child._parent is not None:
            child._parent.remove(child)
        child._parent = self
        self._children.append(child)
        return child

    def remove(self, child: "MemoryNode") -> None:
        self._children.remove(child)
        child._parent = None

    def detach(self) -> None:
        if self._parent is not None:
            self._parent.remove(self)

    # Style ---------------------------------------------------------------

    @property
    def style(self) -> InlineStyle:
        return self._style

    def set_style(self, **changes: str) -> None:
        updated = self._style.with_changes(**changes)
        if updated == self._style:
            return
        self._style = updated
        self._notify()

    def set_flow_rect(self, left: float, top: float, width: float, height: float) -> None:
        """Simulate the host re-laying out this node (e.g. a tab gaining size)."""
        self._flow = Rect(left, top, width, height)
        self._notify()

    def computed_position(self) -> str:
        return self._style.position or self._stylesheet_position

    def is_displayed(self) -> bool:
        if self._style.display == "none":
            return False
        return all(parent.style.display != "none" for parent in iter_ancestors(self))

    # Markers -------------------------------------------------------------

    def has_marker(self, name: str) -> bool:
        return name in self._markers

    def add_marker(self, name: str) -> None:
        if name in self._markers:
            return
        self._markers.add(name)
        self._notify()

    def remove_marker(self, name: str) -> None:
        if name not in self._markers:
            return
        self._markers.discard(name)
        self._notify()

    # Geometry ------------------------------------------------------------

    def bounding_rect(self) -> Rect:
        if not self.is_displayed():
            return Rect(0.0, 0.0, 0.0, 0.0)
        width = parse_px(self._style.width)
        height = parse_px(self._style.height)
        width = self._flow.width if width is None else max(0.0, width)
        height = self._flow.height if height is None else max(0.0, height)
        parent = self._parent
        if parent is None:
            left, top = self._flow.left, self._flow.top
        else:
            parent_rect = parent.bounding_rect()
            left = parent_rect.left + self._flow.left
            top = parent_rect.top + self._flow.top
            if self.computed_position() == "absolute":
                origin = self._positioning_origin()
                inline_left = parse_px(self._style.left)
                inline_top = parse_px(self._style.top)
                if inline_left is not None:
                    left = origin.left + inline_left
                if inline_top is not None:
                    top = origin.top + inline_top
        dx, dy = parse_translate(self._style.transform)
        return Rect(left + dx, top + dy, width, height)

    def client_size(self) -> Tuple[float, float]:
        rect = self.bounding_rect()
        return rect.width, rect.height

    def _positioning_origin(self) -> Rect:
        for parent in iter_ancestors(self):
            if parent.computed_position() != "static" or parent.parent is None:
                return parent.bounding_rect()
        return Rect(0.0, 0.0, 0.0, 0.0)

    # Observation ---------------------------------------------------------

    def _subscribe(self, callback: Callable[[], None]) -> Unsubscribe:
        self._listeners.append(callback)

        def _unsubscribe() -> None:
            try:
                self._listeners.remove(callback)
            except ValueError:
                pass

        return _unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback()


class MemoryGuideOverlay:
    def __init__(self, container: MemoryNode) -> None:
        self.container = container
        self.vertical: List[int] = []
        self.horizontal: List[int] = []
        self.removed = False

    def draw_vertical(self, x: int) -> None:
        self.vertical.append(int(x))

    def draw_horizontal(self, y: int) -> None:
        self.horizontal.append(int(y))

    def clear(self) -> None:
        self.vertical.clear()
        self.horizontal.clear()

    def remove(self) -> None:
        self.clear()
        self.removed = True


class MemoryRenderTree:
    def __init__(self, root: MemoryNode) -> None:
        self._root = root
        self.handles: set[int] = set()
        self.overlays: List[MemoryGuideOverlay] = []

    @property
    def root(self) -> MemoryNode:
        return self._root

    def iter_nodes(self) -> Iterator[MemoryNode]:
        yield self._root
        yield from iter_descendants(self._root)  # type: ignore[misc]

    def find_by_id(self, node_id: str) -> Optional[MemoryNode]:
        for node in self.iter_nodes():
            if node.node_id == node_id:
                return node
        return None

    def contains(self, node: MemoryNode) -> bool:
        if node is self._root:
            return True
        return any(parent is self._root for parent in iter_ancestors(node))

    def assign_id(self, node: MemoryNode, node_id: str) -> None:
        node.node_id = node_id

    def attach_drag_handle(self, node: MemoryNode) -> None:
        self.handles.add(id(node))

    def detach_drag_handle(self, node: MemoryNode) -> None:
        self.handles.discard(id(node))

    def has_drag_handle(self, node: MemoryNode) -> bool:
        return id(node) in self.handles

    def create_guide_overlay(self, container: MemoryNode) -> MemoryGuideOverlay:
        overlay = MemoryGuideOverlay(container)
        self.overlays.append(overlay)
        return overlay

    def live_overlays(self) -> List[MemoryGuideOverlay]:
        return [overlay for overlay in self.overlays if not overlay.removed]

    def subscribe(self, node: MemoryNode, callback: Callable[[], None]) -> Unsubscribe:
        return node._subscribe(callback)
