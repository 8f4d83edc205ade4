"""Container resolution and positioning contexts."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from .logging_utils import ENGINE_LOGGER_NAME
from .selector import PANEL_ROLES
from .tree import GuideOverlay, RenderNode, RenderTree, closest, offset_parent

_LOGGER = logging.getLogger(ENGINE_LOGGER_NAME)


@dataclass
class Container:
    node: RenderNode
    overlay: Optional[GuideOverlay] = None
    position_changed: bool = False
    elements: List[RenderNode] = field(default_factory=list)

    def register(self, node: RenderNode) -> None:
        if not any(existing is node for existing in self.elements):
            self.elements.append(node)

    def unregister(self, node: RenderNode) -> None:
        self.elements = [existing for existing in self.elements if existing is not node]


def resolve_container(tree: RenderTree, node: RenderNode) -> RenderNode:
    """Nearest panel region, else nearest positioned ancestor, else the root."""
    parent = node.parent
    if parent is not None:
        panel = closest(parent, lambda candidate: any(role in candidate.roles for role in PANEL_ROLES))
        if panel is not None:
            return panel
    positioned = offset_parent(node)
    if positioned is not None:
        return positioned
    return tree.root


def ensure_positioned(container: RenderNode) -> bool:
    """Make ``container`` a coordinate origin; True when its style was changed."""
    if container.computed_position() != "static":
        return False
    container.set_style(position="relative")
    return True


class ContainerRegistry:
    """Per-session map of prepared containers; one instance per engine."""

    def __init__(self, tree: RenderTree) -> None:
        self._tree = tree
        self._containers: Dict[int, Container] = {}

    def __len__(self) -> int:
        return len(self._containers)

    def __iter__(self) -> Iterator[Container]:
        return iter(list(self._containers.values()))

    def resolve(self, node: RenderNode) -> RenderNode:
        return resolve_container(self._tree, node)

    def get(self, container: RenderNode) -> Optional[Container]:
        return self._containers.get(id(container))

    def for_element(self, node: RenderNode) -> Optional[Container]:
        return self.get(self.resolve(node))

    def prepare(self, container: RenderNode) -> Container:
        existing = self._containers.get(id(container))
        if existing is not None:
            return existing
        changed = ensure_positioned(container)
        overlay = self._tree.create_guide_overlay(container)
        entry = Container(node=container, overlay=overlay, position_changed=changed)
        self._containers[id(container)] = entry
        _LOGGER.debug("Prepared container %r (position_changed=%s)", container, changed)
        return entry

    def is_visible(self, container: RenderNode) -> bool:
        if container is self._tree.root:
            return True
        if not container.is_displayed():
            return False
        width, height = container.client_size()
        return width > 0 and height > 0

    def teardown(self) -> None:
        """Remove overlays; container positioning is left as-is."""
        for entry in self._containers.values():
            if entry.overlay is not None:
                try:
                    entry.overlay.remove()
                except Exception as exc:
                    _LOGGER.debug("Failed to remove guide overlay for %r: %s", entry.node, exc)
            entry.overlay = None
            entry.elements.clear()
        self._containers.clear()
