"""Settings controls and host hooks for Qt applications."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import (
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QMessageBox,
    QPushButton,
    QSpinBox,
    QWidget,
)

from ..geometry import MAX_GRID_SIZE, MIN_GRID_SIZE
from ..logging_utils import QT_LOGGER_NAME
from ..mode import Customizer, HostHooks
from .tree import DECORATION_PROPERTY

_LOGGER = logging.getLogger(QT_LOGGER_NAME)

NOTICE_TITLE = "Layout customization"


class CustomizationToolbar(QWidget):
    """Toggle, grid size and reset controls wired to a Customizer."""

    def __init__(self, customizer: Customizer, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._customizer = customizer

        self.toggle = QCheckBox("Customize layout", self)
        self.grid_spin = QSpinBox(self)
        self.grid_spin.setRange(MIN_GRID_SIZE, MAX_GRID_SIZE)
        self.grid_spin.setSuffix(" px")
        self.reset_button = QPushButton("Reset layout", self)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.toggle)
        layout.addWidget(QLabel("Grid", self))
        layout.addWidget(self.grid_spin)
        layout.addWidget(self.reset_button)
        layout.addStretch(1)

        self.sync()
        self.toggle.toggled.connect(self._on_toggled)
        self.grid_spin.valueChanged.connect(self._on_grid_changed)
        self.reset_button.clicked.connect(self._on_reset_clicked)

    def sync(self) -> None:
        """Reflect the customizer's mode and grid size without emitting signals."""
        self.toggle.blockSignals(True)
        self.grid_spin.blockSignals(True)
        try:
            self.toggle.setChecked(self._customizer.is_active)
            self.grid_spin.setValue(self._customizer.grid_size)
        finally:
            self.toggle.blockSignals(False)
            self.grid_spin.blockSignals(False)

    def _on_toggled(self, checked: bool) -> None:
        result = self._customizer.on_toggle(checked)
        if isinstance(result, bool):
            self.sync()
        else:
            result.add_done_callback(lambda _task: self.sync())

    def _on_grid_changed(self, value: int) -> None:
        applied = self._customizer.on_grid_change(value)
        if applied != value:
            self.sync()

    def _on_reset_clicked(self) -> None:
        self._customizer.on_reset_click()
        self.sync()


class HintBanner(QLabel):
    """Banner pinned to the top of a window while customization is active."""

    def __init__(self, parent: QWidget) -> None:
        super().__init__(parent)
        self.setProperty(DECORATION_PROPERTY, True)
        self.setObjectName("uiHintBanner")
        self.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.setAttribute(Qt.WidgetAttribute.WA_TransparentForMouseEvents, True)
        self.setStyleSheet(
            "QLabel#uiHintBanner { background: rgba(0, 0, 0, 180); color: white; padding: 8px 16px; border-radius: 6px; }"
        )
        self.hide()

    def show_hint(self, title: str, detail: str) -> None:
        self.setText(f"<b>{title}</b><br><small>{detail}</small>")
        self.adjustSize()
        parent = self.parentWidget()
        if parent is not None:
            self.move(max(0, (parent.width() - self.width()) // 2), 20)
        self.show()
        self.raise_()


def build_qt_hooks(parent: QWidget, *, reload_fn: Optional[Callable[[], None]] = None) -> HostHooks:
    """Host hooks backed by message boxes, a hint banner and QTimer.

    ``reload_fn`` is how a reset rebuilds the interface. Without it ``reload``
    only repaints ``parent``; reset geometry is already written back inline,
    but anything the host derives from the layout is left as it was.
    """
    banner = HintBanner(parent)

    def _notify(message: str) -> None:
        _LOGGER.info("Notice: %s", message)
        QMessageBox.information(parent, NOTICE_TITLE, message)

    def _confirm(prompt: str) -> bool:
        answer = QMessageBox.question(
            parent,
            NOTICE_TITLE,
            prompt,
            QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
            QMessageBox.StandardButton.No,
        )
        return answer == QMessageBox.StandardButton.Yes

    def _reload() -> None:
        if reload_fn is not None:
            reload_fn()
            return
        parent.update()

    def _schedule(delay_ms: int, callback: Callable[[], None]) -> None:
        QTimer.singleShot(max(0, int(delay_ms)), callback)

    return HostHooks(
        notify=_notify,
        confirm=_confirm,
        reload=_reload,
        show_hint=banner.show_hint,
        hide_hint=banner.hide,
        schedule=_schedule,
    )
