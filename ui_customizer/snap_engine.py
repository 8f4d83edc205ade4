"""Alignment guides against sibling elements (visual aid only)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from .geometry import Rect
from .tree import GuideOverlay

VERTICAL = "vertical"
HORIZONTAL = "horizontal"


@dataclass(frozen=True)
class SnapGuide:
    orientation: str
    offset: int


def _x_pairs(target: Rect, other: Rect) -> Tuple[Tuple[float, float], ...]:
    return (
        (target.left, other.left),
        (target.left, other.right),
        (target.right, other.left),
        (target.right, other.right),
        (target.center_x, other.center_x),
    )


def _y_pairs(target: Rect, other: Rect) -> Tuple[Tuple[float, float], ...]:
    return (
        (target.top, other.top),
        (target.top, other.bottom),
        (target.bottom, other.top),
        (target.bottom, other.bottom),
        (target.center_y, other.center_y),
    )


def compute_guides(target: Rect, siblings: Iterable[Rect], threshold: float) -> List[SnapGuide]:
    """Guides at sibling coordinates within ``threshold`` of the target's edges or centers.

    All rectangles must share the container's coordinate origin. Order is
    first-seen; duplicates are dropped.
    """
    guides: List[SnapGuide] = []
    seen: set[SnapGuide] = set()

    def _add(orientation: str, coordinate: float) -> None:
        guide = SnapGuide(orientation, int(round(coordinate)))
        if guide not in seen:
            seen.add(guide)
            guides.append(guide)

    for other in siblings:
        for mine, theirs in _x_pairs(target, other):
            if abs(mine - theirs) <= threshold:
                _add(VERTICAL, theirs)
        for mine, theirs in _y_pairs(target, other):
            if abs(mine - theirs) <= threshold:
                _add(HORIZONTAL, theirs)
    return guides


class SnapEngine:
    def __init__(self, threshold: float) -> None:
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def update(
        self,
        overlay: Optional[GuideOverlay],
        target: Rect,
        siblings: Iterable[Rect],
    ) -> List[SnapGuide]:
        guides = compute_guides(target, siblings, self._threshold)
        if overlay is None:
            return guides
        overlay.clear()
        for guide in guides:
            if guide.orientation == VERTICAL:
                overlay.draw_vertical(guide.offset)
            else:
                overlay.draw_horizontal(guide.offset)
        return guides

    @staticmethod
    def clear(overlay: Optional[GuideOverlay]) -> None:
        if overlay is not None:
            overlay.clear()
