"""Geometry helpers for layout customization (pure, no Qt)."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

DEFAULT_GRID_SIZE = 8
MIN_GRID_SIZE = 4
MAX_GRID_SIZE = 64
DEFAULT_SNAP_RANGE_PX = 10
MIN_ELEMENT_WIDTH = 80
MIN_ELEMENT_HEIGHT = 40


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2.0

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.left + dx, self.top + dy, self.width, self.height)

    def relative_to(self, origin: "Rect") -> "Rect":
        return Rect(self.left - origin.left, self.top - origin.top, self.width, self.height)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.left, self.top, self.width, self.height


def parse_px(value: object) -> Optional[float]:
    """Return the numeric part of an inline length such as ``"12px"``.

    Empty or unparsable values yield None so callers can treat them as unset.
    """
    if value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    token = str(value).strip().lower()
    if not token:
        return None
    if token.endswith("px"):
        token = token[:-2].strip()
    try:
        number = float(token)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def format_px(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return f"{int(number)}px"
    return f"{round(number, 3):g}px"


def clamp_grid_size(raw: object, fallback: int = DEFAULT_GRID_SIZE) -> int:
    """Grid cell from user input; zero or unparsable input takes ``fallback``."""
    number = parse_px(raw)
    if not number:
        number = float(fallback)
    return max(MIN_GRID_SIZE, min(MAX_GRID_SIZE, int(round(number))))


def snap_to_grid(value: float, grid_size: float, threshold: float) -> float:
    """Snap ``value`` to the nearest multiple of ``grid_size`` when within ``threshold``.

    With a cell no larger than twice the threshold every value is in range, so
    the result always lands on a grid line.
    """
    if grid_size <= 0:
        return value
    nearest = round(value / grid_size) * grid_size
    if abs(value - nearest) <= threshold:
        return float(nearest)
    return value


def clamp_size(
    width: float,
    height: float,
    *,
    min_width: float,
    min_height: float,
    max_width: Optional[float],
    max_height: Optional[float],
) -> Tuple[float, float]:
    """Clamp a proposed size; the minimum wins when the maximum is smaller."""
    if max_width is not None:
        width = min(width, max_width)
    if max_height is not None:
        height = min(height, max_height)
    return max(min_width, width), max(min_height, height)


def clamp_into(rect: Rect, bounds_width: float, bounds_height: float) -> Rect:
    """Keep ``rect`` (container-relative) inside a container of the given size.

    An element wider or taller than its container is pinned to the origin on
    that axis so it always overlaps the container.
    """
    max_left = max(0.0, bounds_width - rect.width)
    max_top = max(0.0, bounds_height - rect.height)
    left = min(max(rect.left, 0.0), max_left)
    top = min(max(rect.top, 0.0), max_top)
    return Rect(left, top, rect.width, rect.height)


def format_translate(dx: float, dy: float) -> str:
    if dx == 0 and dy == 0:
        return ""
    return f"translate({dx:g}px, {dy:g}px)"


def parse_translate(value: object) -> Tuple[float, float]:
    token = str(value or "").strip()
    if not token.startswith("translate(") or not token.endswith(")"):
        return 0.0, 0.0
    parts = token[len("translate("):-1].split(",")
    if len(parts) != 2:
        return 0.0, 0.0
    dx = parse_px(parts[0])
    dy = parse_px(parts[1])
    return (dx or 0.0), (dy or 0.0)
