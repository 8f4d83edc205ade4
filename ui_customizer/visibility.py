"""Deferred activation for elements living in hidden containers."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List

from .logging_utils import ENGINE_LOGGER_NAME
from .tree import RenderNode, RenderTree, Unsubscribe

_LOGGER = logging.getLogger(ENGINE_LOGGER_NAME)

ScheduleFn = Callable[[int, Callable[[], None]], object]
VisibleFn = Callable[[RenderNode], bool]
ActivateFn = Callable[[RenderNode], None]


class VisibilityWatcher:
    """Queues elements per container and drains them once the container shows.

    At most one subscription exists per container; it is cancelled as soon as
    the queue drains.
    """

    def __init__(
        self,
        tree: RenderTree,
        *,
        is_visible_fn: VisibleFn,
        activate_fn: ActivateFn,
        schedule_fn: ScheduleFn,
        check_delay_ms: int = 50,
    ) -> None:
        self._tree = tree
        self._is_visible = is_visible_fn
        self._activate = activate_fn
        self._schedule = schedule_fn
        self._check_delay_ms = max(0, int(check_delay_ms))
        self._pending: Dict[int, List[RenderNode]] = {}
        self._subscriptions: Dict[int, Unsubscribe] = {}

    def has_pending(self, container: RenderNode) -> bool:
        return id(container) in self._pending

    def pending_for(self, container: RenderNode) -> List[RenderNode]:
        return list(self._pending.get(id(container), ()))

    def pending_nodes(self) -> List[RenderNode]:
        """Queued nodes across all containers, in deferral order."""
        return [node for queue in self._pending.values() for node in queue]

    def is_observing(self, container: RenderNode) -> bool:
        return id(container) in self._subscriptions

    @property
    def observer_count(self) -> int:
        return len(self._subscriptions)

    def defer(self, container: RenderNode, node: RenderNode) -> None:
        key = id(container)
        queue = self._pending.setdefault(key, [])
        if not any(existing is node for existing in queue):
            queue.append(node)
            _LOGGER.debug("Deferred %r until container %r becomes visible", node, container)
        self._observe(container)

    def _observe(self, container: RenderNode) -> None:
        key = id(container)
        if key in self._subscriptions:
            return

        def _check() -> None:
            self.notify_visibility_changed(container)

        self._subscriptions[key] = self._tree.subscribe(container, _check)
        # covers containers that were already visible before the first notification
        self._schedule(self._check_delay_ms, _check)

    def notify_visibility_changed(self, container: RenderNode) -> bool:
        """Entry point for rendering layers; drains when the container is visible."""
        if id(container) not in self._pending:
            return False
        if not self._is_visible(container):
            return False
        self.drain(container)
        return True

    def drain(self, container: RenderNode) -> int:
        key = id(container)
        queue = self._pending.pop(key, None)
        unsubscribe = self._subscriptions.pop(key, None)
        if unsubscribe is not None:
            unsubscribe()
        if not queue:
            return 0
        activated = 0
        for node in queue:
            if not self._tree.contains(node):
                _LOGGER.debug("Dropping deferred %r: no longer in the tree", node)
                continue
            self._activate(node)
            activated += 1
        _LOGGER.debug("Drained %d deferred element(s) for container %r", activated, container)
        return activated

    def clear(self) -> None:
        for unsubscribe in list(self._subscriptions.values()):
            try:
                unsubscribe()
            except Exception as exc:
                _LOGGER.debug("Failed to cancel visibility subscription: %s", exc)
        self._subscriptions.clear()
        self._pending.clear()
