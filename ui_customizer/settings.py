"""Tuning settings and the persisted grid size."""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .geometry import (
    DEFAULT_GRID_SIZE,
    DEFAULT_SNAP_RANGE_PX,
    MIN_ELEMENT_HEIGHT,
    MIN_ELEMENT_WIDTH,
    clamp_grid_size,
)
from .logging_utils import STORE_LOGGER_NAME
from .storage import KeyValueStore

SETTINGS_FILE = "customizer_settings.json"
SETTINGS_PATH_ENV_VAR = "UI_CUSTOMIZER_SETTINGS"
DEBUG_ENV_VAR = "UI_CUSTOMIZER_DEBUG"
GRID_SIZE_KEY = "uiGridSize"

_LOGGER = logging.getLogger(STORE_LOGGER_NAME)


def _coerce_int(raw: object, fallback: int, *, minimum: int, maximum: Optional[int] = None) -> int:
    try:
        value = int(raw)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        value = fallback
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


def _coerce_float(raw: object, fallback: float, *, minimum: float) -> float:
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        value = fallback
    if value != value:
        value = fallback
    return max(minimum, value)


def _coerce_bool(raw: object, fallback: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        token = raw.strip().lower()
        if token in {"1", "true", "yes", "on"}:
            return True
        if token in {"0", "false", "no", "off"}:
            return False
    return fallback


@dataclass
class CustomizerSettings:
    """JSON-backed tuning values for the customization engine."""

    path: Optional[Path] = None
    default_grid_size: int = DEFAULT_GRID_SIZE
    snap_range_px: int = DEFAULT_SNAP_RANGE_PX
    min_width: int = MIN_ELEMENT_WIDTH
    min_height: int = MIN_ELEMENT_HEIGHT
    resize_edge_px: int = 6
    visibility_check_delay_ms: int = 50
    capability_timeout_seconds: float = 10.0
    debug_logging: bool = False
    log_retention: int = 5
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        if self.path is not None:
            self.path = Path(self.path)
            self._load()
        if _coerce_bool(os.getenv(DEBUG_ENV_VAR), False):
            self.debug_logging = True

    def _load(self) -> None:
        assert self.path is not None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Failed to read customizer settings %s: %s", self.path, exc)
            return
        if not isinstance(data, dict):
            return
        self.default_grid_size = clamp_grid_size(data.get("default_grid_size", DEFAULT_GRID_SIZE))
        self.snap_range_px = _coerce_int(data.get("snap_range_px"), DEFAULT_SNAP_RANGE_PX, minimum=0, maximum=64)
        self.min_width = _coerce_int(data.get("min_width"), MIN_ELEMENT_WIDTH, minimum=1)
        self.min_height = _coerce_int(data.get("min_height"), MIN_ELEMENT_HEIGHT, minimum=1)
        self.resize_edge_px = _coerce_int(data.get("resize_edge_px"), 6, minimum=1, maximum=32)
        self.visibility_check_delay_ms = _coerce_int(data.get("visibility_check_delay_ms"), 50, minimum=0)
        self.capability_timeout_seconds = _coerce_float(data.get("capability_timeout_seconds"), 10.0, minimum=0.1)
        self.debug_logging = _coerce_bool(data.get("debug_logging"), False)
        self.log_retention = _coerce_int(data.get("log_retention"), 5, minimum=1, maximum=20)
        known = {
            "default_grid_size",
            "snap_range_px",
            "min_width",
            "min_height",
            "resize_edge_px",
            "visibility_check_delay_ms",
            "capability_timeout_seconds",
            "debug_logging",
            "log_retention",
        }
        self.extra = {key: value for key, value in data.items() if key not in known}

    def save(self) -> None:
        if self.path is None:
            raise ValueError("CustomizerSettings has no path to save to")
        payload: Dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "default_grid_size": int(self.default_grid_size),
                "snap_range_px": int(self.snap_range_px),
                "min_width": int(self.min_width),
                "min_height": int(self.min_height),
                "resize_edge_px": int(self.resize_edge_px),
                "visibility_check_delay_ms": int(self.visibility_check_delay_ms),
                "capability_timeout_seconds": float(self.capability_timeout_seconds),
                "debug_logging": bool(self.debug_logging),
                "log_retention": int(self.log_retention),
            }
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def load_settings(path: Optional[Path] = None) -> CustomizerSettings:
    """Load settings from ``path``, ``$UI_CUSTOMIZER_SETTINGS`` or defaults."""
    if path is None:
        env_path = os.getenv(SETTINGS_PATH_ENV_VAR)
        if env_path:
            path = Path(env_path).expanduser()
    return CustomizerSettings(path=path)


class GridConfig:
    """Grid cell size persisted independently of the layout document."""

    def __init__(self, store: KeyValueStore, *, default: int = DEFAULT_GRID_SIZE) -> None:
        self._store = store
        self._default = clamp_grid_size(default)
        saved = store.get(GRID_SIZE_KEY)
        self._size = clamp_grid_size(saved, self._default) if saved else self._default

    @property
    def size(self) -> int:
        return self._size

    def set_size(self, raw: object) -> int:
        self._size = clamp_grid_size(raw, self._default)
        if not self._store.set(GRID_SIZE_KEY, str(self._size)):
            _LOGGER.warning("Grid size %d could not be persisted", self._size)
        return self._size
