"""Interactive layout customization for rendered interfaces.

The engine is toolkit-agnostic; ``ui_customizer.qt`` adapts it to PyQt6
widgets and ``ui_customizer.memory_tree`` provides a headless tree.
"""
from __future__ import annotations

from .capability import (
    DRAG,
    NO_EDGES,
    RESIZE,
    DirectCapability,
    Edges,
    ImportCapabilityProvider,
    StaticCapabilityProvider,
)
from .errors import CapabilityUnavailableError, CustomizerError, LayoutFormatError
from .layout_store import LayoutDocument, LayoutEntry, LayoutStore
from .logging_utils import configure_logging
from .mode import ACTIVE, LOADING, OFF, Customizer, HostHooks
from .selector import ElementSelector, Pattern
from .settings import CustomizerSettings, GridConfig, load_settings
from .storage import JsonFileStore, MemoryStore

__all__ = [
    "ACTIVE",
    "DRAG",
    "LOADING",
    "NO_EDGES",
    "OFF",
    "RESIZE",
    "CapabilityUnavailableError",
    "Customizer",
    "CustomizerError",
    "CustomizerSettings",
    "DirectCapability",
    "Edges",
    "ElementSelector",
    "GridConfig",
    "HostHooks",
    "ImportCapabilityProvider",
    "JsonFileStore",
    "LayoutDocument",
    "LayoutEntry",
    "LayoutFormatError",
    "LayoutStore",
    "MemoryStore",
    "Pattern",
    "StaticCapabilityProvider",
    "configure_logging",
    "load_settings",
]
