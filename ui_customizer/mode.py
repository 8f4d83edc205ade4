"""Customization mode controller: the engine's public surface."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Union

from .capability import CapabilityProvider, InteractionCapability
from .containers import ContainerRegistry
from .interaction import InteractionController
from .layout_store import LayoutStore
from .logging_utils import ENGINE_LOGGER_NAME
from .selector import ElementSelector
from .settings import CustomizerSettings, GridConfig
from .storage import KeyValueStore
from .tree import RenderNode, RenderTree
from .visibility import VisibilityWatcher

_LOGGER = logging.getLogger(ENGINE_LOGGER_NAME)

OFF = "off"
LOADING = "loading"
ACTIVE = "active"

HINT_TITLE = "Customization Mode Active"
HINT_DETAIL = "Drag elements to rearrange • Resize from edges • Grid snap & alignment guides active"
LOAD_FAILURE_MESSAGE = "Failed to load customization library. Check the log for details."
RESET_PROMPT = "Reset layout to default? This will clear all customizations."
RESET_DONE_MESSAGE = "Layout reset to default!"


def _noop(*_args: object) -> None:
    return None


def _decline(_prompt: str) -> bool:
    return False


def _run_now(_delay_ms: int, callback: Callable[[], None]) -> object:
    callback()
    return None


@dataclass
class HostHooks:
    """Callbacks into the hosting interface.

    ``confirm`` declines unless the host wires it. ``schedule`` runs callbacks
    inline unless the host supplies a timer (``QTimer.singleShot``, ``loop.call_later``...).
    """

    notify: Callable[[str], None] = _noop
    confirm: Callable[[str], bool] = _decline
    reload: Callable[[], None] = _noop
    show_hint: Callable[[str, str], None] = _noop
    hide_hint: Callable[[], None] = _noop
    schedule: Callable[[int, Callable[[], None]], object] = _run_now


class Customizer:
    """Owns one customization session per interface instance.

    Containers, pending queues and observers are private to the instance, so
    several interfaces can run independent engines side by side.
    """

    def __init__(
        self,
        tree: RenderTree,
        store: KeyValueStore,
        provider: CapabilityProvider,
        *,
        hooks: Optional[HostHooks] = None,
        settings: Optional[CustomizerSettings] = None,
        selector: Optional[ElementSelector] = None,
        on_state_change: Optional[Callable[[str, str], None]] = None,
        restore_on_start: bool = True,
    ) -> None:
        self._tree = tree
        self._provider = provider
        self._hooks = hooks or HostHooks()
        self._settings = settings or CustomizerSettings()
        self._selector = selector or ElementSelector()
        self._on_state_change = on_state_change
        self._state = OFF
        self._generation = 0

        self._grid = GridConfig(store, default=self._settings.default_grid_size)
        self._layout_store = LayoutStore(store)
        self._registry = ContainerRegistry(tree)
        self._controller = InteractionController(
            tree,
            self._registry,
            self._layout_store,
            grid_size_fn=lambda: self._grid.size,
            defer_fn=self._defer,
            has_pending_fn=self._has_pending,
            drain_fn=self._drain,
            save_fn=self.save_layout,
            snap_range=self._settings.snap_range_px,
            min_width=self._settings.min_width,
            min_height=self._settings.min_height,
        )
        self._watcher = VisibilityWatcher(
            tree,
            is_visible_fn=self._registry.is_visible,
            activate_fn=self._controller.activate,
            schedule_fn=self._hooks.schedule,
            check_delay_ms=self._settings.visibility_check_delay_ms,
        )
        if restore_on_start:
            self.restore_layout()

    # Read access ---------------------------------------------------------

    @property
    def mode(self) -> str:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == ACTIVE

    @property
    def grid_size(self) -> int:
        return self._grid.size

    @property
    def tree(self) -> RenderTree:
        return self._tree

    @property
    def layout_store(self) -> LayoutStore:
        return self._layout_store

    @property
    def registry(self) -> ContainerRegistry:
        return self._registry

    @property
    def controller(self) -> InteractionController:
        return self._controller

    @property
    def watcher(self) -> VisibilityWatcher:
        return self._watcher

    def _set_state(self, state: str) -> None:
        previous = self._state
        if previous == state:
            return
        self._state = state
        _LOGGER.info("Customization mode %s -> %s", previous, state)
        if self._on_state_change is not None:
            try:
                self._on_state_change(previous, state)
            except Exception as exc:
                _LOGGER.debug("State change callback failed: %s", exc, exc_info=exc)

    # Mode toggle ---------------------------------------------------------

    async def set_customization_mode(self, enabled: bool) -> bool:
        """Switch customization on or off; True when the requested mode is in effect."""
        if enabled:
            return await self._enable()
        self._disable()
        return True

    async def _enable(self) -> bool:
        if self._state == ACTIVE:
            return True
        if self._state == LOADING:
            _LOGGER.debug("Customization already loading; ignoring duplicate enable")
            return False
        self._generation += 1
        generation = self._generation
        self._set_state(LOADING)
        try:
            capability = await asyncio.wait_for(
                self._provider.acquire(),
                timeout=self._settings.capability_timeout_seconds,
            )
        except asyncio.CancelledError:
            if generation == self._generation:
                self._set_state(OFF)
            raise
        except Exception as exc:
            if generation != self._generation:
                return False
            _LOGGER.error("Interaction capability unavailable: %s", exc, exc_info=exc)
            self._set_state(OFF)
            self._hooks.notify(LOAD_FAILURE_MESSAGE)
            return False
        if generation != self._generation or self._state != LOADING:
            _LOGGER.debug("Customization was switched off while loading; discarding capability")
            return False
        try:
            self._start_session(capability)
        except Exception as exc:
            _LOGGER.error("Customization session failed to start: %s", exc, exc_info=exc)
            self._end_session()
            self._set_state(OFF)
            return False
        self._set_state(ACTIVE)
        self._hooks.show_hint(HINT_TITLE, HINT_DETAIL)
        return True

    def _start_session(self, capability: InteractionCapability) -> None:
        self._controller.attach_capability(capability)
        elements = self._selector.select(self._tree)
        for node in elements:
            self._registry.prepare(self._registry.resolve(node))
        # saved geometry is in place before any element binds
        self.apply_layout()
        activated = sum(1 for node in elements if self._controller.activate(node))
        _LOGGER.debug(
            "Customization session started: %d element(s), %d active, %d container(s)",
            len(elements),
            activated,
            len(self._registry),
        )

    def _disable(self) -> None:
        if self._state == OFF:
            return
        if self._state == LOADING:
            self._generation += 1
            self._set_state(OFF)
            return
        self._controller.finish_active_gesture()
        self.save_layout()
        self._end_session()
        self._hooks.hide_hint()
        self._set_state(OFF)

    def _end_session(self) -> None:
        self._controller.deactivate_all()
        self._watcher.clear()
        self._registry.teardown()

    # Layout API ----------------------------------------------------------

    def save_layout(self) -> bool:
        if self._state != ACTIVE:
            _LOGGER.debug("Layout save skipped: customization mode is %s", self._state)
            return False
        nodes = self._controller.active_nodes()
        # queued elements keep the geometry restored for them at startup
        nodes.extend(
            node
            for node in self._watcher.pending_nodes()
            if node.style.has_geometry() and self._tree.contains(node) and not self._controller.is_active(node)
        )
        return self._layout_store.save(self._tree, nodes)

    def apply_layout(self) -> List[str]:
        return self._layout_store.apply(self._tree, self._layout_store.load())

    def restore_layout(self) -> List[str]:
        applied = self.apply_layout()
        if applied:
            _LOGGER.debug("Restored %d saved element position(s)", len(applied))
        return applied

    def reset_layout(self) -> bool:
        if not self._hooks.confirm(RESET_PROMPT):
            _LOGGER.debug("Layout reset declined")
            return False
        if self._state == ACTIVE:
            self._controller.finish_active_gesture()
            self._end_session()
            self._hooks.hide_hint()
        self._generation += 1
        self._set_state(OFF)
        restored = self._layout_store.reset(self._tree)
        _LOGGER.info("Layout reset; %d element(s) restored", restored)
        self._hooks.notify(RESET_DONE_MESSAGE)
        self._hooks.reload()
        return True

    # Visibility ----------------------------------------------------------

    def notify_visibility_changed(self, container: RenderNode) -> bool:
        return self._watcher.notify_visibility_changed(container)

    def _defer(self, container: RenderNode, node: RenderNode) -> None:
        self._watcher.defer(container, node)

    def _has_pending(self, container: RenderNode) -> bool:
        return self._watcher.has_pending(container)

    def _drain(self, container: RenderNode) -> int:
        return self._watcher.drain(container)

    # Settings surface hooks ----------------------------------------------

    def on_toggle(self, enabled: bool) -> Union[bool, "asyncio.Task[bool]"]:
        """Toggle from a synchronous UI callback.

        Inside a running event loop the switch is scheduled as a task;
        otherwise it runs to completion before returning.
        """
        coroutine: Awaitable[bool] = self.set_customization_mode(bool(enabled))
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return asyncio.run(coroutine)  # type: ignore[arg-type]
        return loop.create_task(coroutine)  # type: ignore[arg-type]

    def on_grid_change(self, value: object) -> int:
        size = self._grid.set_size(value)
        _LOGGER.debug("Grid size set to %d", size)
        return size

    def on_reset_click(self) -> bool:
        return self.reset_layout()
