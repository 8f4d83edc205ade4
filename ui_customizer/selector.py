"""Discovery of customizable elements in a render tree."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .tree import RenderNode, RenderTree, closest, iter_ancestors, iter_descendants

MODAL_ROLE = "modal"
HEADING_TAGS = frozenset({"h1", "h2", "h3"})
PANEL_ROLES = ("tab-content", "tab-panel")
COMPOSITE_ROLES = ("tab-panel", "tab-content", "dashboard-grid")


@dataclass(frozen=True)
class Pattern:
    """Structural pattern: a node with ``role``, or a child of a node with ``child_of``."""

    role: Optional[str] = None
    child_of: Optional[str] = None
    exclude_tags: frozenset[str] = frozenset()

    def matches(self, node: RenderNode) -> bool:
        if node.tag.lower() in self.exclude_tags:
            return False
        if self.role is not None and self.role not in node.roles:
            return False
        if self.child_of is not None:
            parent = node.parent
            if parent is None or self.child_of not in parent.roles:
                return False
        return self.role is not None or self.child_of is not None

    def describe(self) -> str:
        if self.child_of is not None:
            return f".{self.child_of} > *" if self.role is None else f".{self.child_of} > .{self.role}"
        return f".{self.role}"


# Most specific first.
DEFAULT_PATTERNS: tuple[Pattern, ...] = (
    Pattern(role="card"),
    Pattern(role="form-group"),
    Pattern(child_of="dashboard-grid"),
    Pattern(role="chart-placeholder"),
    Pattern(role="data-table"),
    Pattern(role="notification-list"),
    Pattern(role="timer-display"),
    Pattern(role="stopwatch-display"),
    Pattern(child_of="tab-content", exclude_tags=HEADING_TAGS),
    Pattern(child_of="tab-panel", exclude_tags=HEADING_TAGS),
)

# Items that make a composite region own independently placed children.
COMPOSITE_CHILD_PATTERNS: tuple[Pattern, ...] = (
    Pattern(role="card"),
    Pattern(role="form-group"),
    Pattern(child_of="dashboard-grid"),
)


def in_modal(node: RenderNode) -> bool:
    return closest(node, lambda candidate: MODAL_ROLE in candidate.roles) is not None


def has_customizable_descendant(node: RenderNode) -> bool:
    return any(
        pattern.matches(child) for child in iter_descendants(node) for pattern in COMPOSITE_CHILD_PATTERNS
    )


def is_composite(node: RenderNode) -> bool:
    """Panels and grids whose saved offset would drag their placed children along."""
    if not any(role in node.roles for role in COMPOSITE_ROLES):
        return False
    return has_customizable_descendant(node)


class ElementSelector:
    def __init__(self, patterns: Sequence[Pattern] = DEFAULT_PATTERNS) -> None:
        self._patterns = tuple(patterns)

    @property
    def patterns(self) -> tuple[Pattern, ...]:
        return self._patterns

    def select(self, tree: RenderTree) -> List[RenderNode]:
        """Return the deduplicated working set in pattern, then document, order."""
        selected: List[RenderNode] = []
        selected_ids: set[int] = set()
        # every ancestor of a selected node; a candidate found here would swallow it
        claimed_ancestors: set[int] = set()
        for pattern in self._patterns:
            for node in tree.iter_nodes():
                if not pattern.matches(node):
                    continue
                if in_modal(node):
                    continue
                if id(node) in selected_ids:
                    continue
                ancestors = list(iter_ancestors(node))
                if any(id(parent) in selected_ids for parent in ancestors):
                    continue
                if id(node) in claimed_ancestors:
                    continue
                selected.append(node)
                selected_ids.add(id(node))
                claimed_ancestors.update(id(parent) for parent in ancestors)
        return selected
