"""Render tree contracts consumed by the customization engine.

Any rendering layer (the in-memory tree, the Qt adapter, a web bridge) exposes
its nodes through these protocols. The engine never touches toolkit objects
directly; it reads geometry, writes inline style fields and asks the tree for
decorations (drag handles, guide overlays) and attribute-change subscriptions.
"""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Callable, Iterable, Iterator, Optional, Protocol, Sequence, Tuple

from .geometry import Rect

STYLE_FIELDS: Tuple[str, ...] = ("position", "left", "top", "width", "height", "transform", "z_index", "display")
GEOMETRY_FIELDS: Tuple[str, ...] = ("left", "top", "width", "height")

Unsubscribe = Callable[[], None]


@dataclass(frozen=True)
class InlineStyle:
    """Inline style values as authored strings; ``""`` means unset."""

    position: str = ""
    left: str = ""
    top: str = ""
    width: str = ""
    height: str = ""
    transform: str = ""
    z_index: str = ""
    display: str = ""

    def with_changes(self, **changes: str) -> "InlineStyle":
        unknown = set(changes) - set(STYLE_FIELDS)
        if unknown:
            raise KeyError(f"Unknown style fields: {', '.join(sorted(unknown))}")
        return replace(self, **{key: str(value) for key, value in changes.items()})

    def has_geometry(self) -> bool:
        return any(getattr(self, name) for name in GEOMETRY_FIELDS)

    def as_dict(self) -> dict[str, str]:
        return {item.name: getattr(self, item.name) for item in fields(self)}


class RenderNode(Protocol):
    node_id: Optional[str]
    tag: str

    @property
    def roles(self) -> frozenset[str]: ...

    @property
    def parent(self) -> Optional["RenderNode"]: ...

    @property
    def children(self) -> Sequence["RenderNode"]: ...

    @property
    def style(self) -> InlineStyle: ...

    def set_style(self, **changes: str) -> None: ...

    def bounding_rect(self) -> Rect: ...

    def client_size(self) -> Tuple[float, float]: ...

    def computed_position(self) -> str: ...

    def is_displayed(self) -> bool: ...

    def has_marker(self, name: str) -> bool: ...

    def add_marker(self, name: str) -> None: ...

    def remove_marker(self, name: str) -> None: ...


class GuideOverlay(Protocol):
    def draw_vertical(self, x: int) -> None: ...

    def draw_horizontal(self, y: int) -> None: ...

    def clear(self) -> None: ...

    def remove(self) -> None: ...


class RenderTree(Protocol):
    @property
    def root(self) -> RenderNode: ...

    def iter_nodes(self) -> Iterator[RenderNode]: ...

    def find_by_id(self, node_id: str) -> Optional[RenderNode]: ...

    def contains(self, node: RenderNode) -> bool: ...

    def assign_id(self, node: RenderNode, node_id: str) -> None: ...

    def attach_drag_handle(self, node: RenderNode) -> None: ...

    def detach_drag_handle(self, node: RenderNode) -> None: ...

    def create_guide_overlay(self, container: RenderNode) -> GuideOverlay: ...

    def subscribe(self, node: RenderNode, callback: Callable[[], None]) -> Unsubscribe: ...


def iter_ancestors(node: RenderNode) -> Iterator[RenderNode]:
    parent = node.parent
    while parent is not None:
        yield parent
        parent = parent.parent


def iter_descendants(node: RenderNode) -> Iterator[RenderNode]:
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def is_ancestor(candidate: RenderNode, node: RenderNode) -> bool:
    """True when ``candidate`` strictly encloses ``node``."""
    return any(parent is candidate for parent in iter_ancestors(node))


def closest(node: RenderNode, predicate: Callable[[RenderNode], bool]) -> Optional[RenderNode]:
    """Nearest node (starting with ``node`` itself) matching ``predicate``."""
    current: Optional[RenderNode] = node
    while current is not None:
        if predicate(current):
            return current
        current = current.parent
    return None


def has_any_role(node: RenderNode, roles: Iterable[str]) -> bool:
    node_roles = node.roles
    return any(role in node_roles for role in roles)


def offset_parent(node: RenderNode) -> Optional[RenderNode]:
    """Nearest ancestor that establishes a positioning context."""
    for parent in iter_ancestors(node):
        if parent.computed_position() != "static":
            return parent
    return None
