"""PyQt6 adapter for the layout customizer."""
from __future__ import annotations

from .capability import QtInteractionCapability, create_capability
from .toolbar import CustomizationToolbar, HintBanner, build_qt_hooks
from .tree import QtGuideOverlay, QtNode, QtRenderTree

CAPABILITY_TARGET = "ui_customizer.qt.capability:create_capability"

__all__ = [
    "CAPABILITY_TARGET",
    "CustomizationToolbar",
    "HintBanner",
    "QtGuideOverlay",
    "QtInteractionCapability",
    "QtNode",
    "QtRenderTree",
    "build_qt_hooks",
    "create_capability",
]
