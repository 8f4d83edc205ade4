"""Pointer-interaction capability contracts and providers.

The engine never listens to pointer devices itself. A capability delivers raw
gesture callbacks (start, per-frame pointer deltas, end) for the nodes bound
to it; grid snapping, clamping and commits happen in the interaction
controller. Providers hand a capability to the mode controller, either one
bundled ahead of time or one imported lazily the first time customization is
switched on.
"""
from __future__ import annotations

import asyncio
import importlib
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from .errors import CapabilityUnavailableError
from .logging_utils import ENGINE_LOGGER_NAME
from .tree import RenderNode

_LOGGER = logging.getLogger(ENGINE_LOGGER_NAME)

DRAG = "drag"
RESIZE = "resize"


@dataclass(frozen=True)
class Edges:
    left: bool = False
    right: bool = False
    top: bool = False
    bottom: bool = False

    @property
    def active(self) -> bool:
        return self.left or self.right or self.top or self.bottom


NO_EDGES = Edges()


class GestureListener(Protocol):
    def begin_gesture(self, node: RenderNode, kind: str, edges: Edges = NO_EDGES) -> None: ...

    def move_gesture(self, node: RenderNode, dx: float, dy: float) -> None: ...

    def end_gesture(self, node: RenderNode) -> None: ...


class InteractionCapability(Protocol):
    def bind(self, node: RenderNode, listener: GestureListener) -> None: ...

    def unbind(self, node: RenderNode) -> None: ...


class CapabilityProvider(Protocol):
    async def acquire(self) -> InteractionCapability: ...


class DirectCapability:
    """Capability driven by explicit calls, for hosts that route pointer events themselves."""

    def __init__(self) -> None:
        self._bindings: Dict[int, tuple[RenderNode, GestureListener]] = {}

    def bind(self, node: RenderNode, listener: GestureListener) -> None:
        self._bindings[id(node)] = (node, listener)

    def unbind(self, node: RenderNode) -> None:
        self._bindings.pop(id(node), None)

    def is_bound(self, node: RenderNode) -> bool:
        return id(node) in self._bindings

    @property
    def bound_count(self) -> int:
        return len(self._bindings)

    def _listener(self, node: RenderNode) -> GestureListener:
        try:
            return self._bindings[id(node)][1]
        except KeyError:
            raise KeyError(f"{node!r} is not bound to this capability") from None

    def press(self, node: RenderNode, kind: str = DRAG, edges: Edges = NO_EDGES) -> None:
        self._listener(node).begin_gesture(node, kind, edges)

    def move(self, node: RenderNode, dx: float, dy: float) -> None:
        self._listener(node).move_gesture(node, dx, dy)

    def release(self, node: RenderNode) -> None:
        self._listener(node).end_gesture(node)

    def drag(self, node: RenderNode, *steps: tuple[float, float]) -> None:
        self.press(node, DRAG)
        for dx, dy in steps:
            self.move(node, dx, dy)
        self.release(node)

    def resize(self, node: RenderNode, edges: Edges, *steps: tuple[float, float]) -> None:
        self.press(node, RESIZE, edges)
        for dx, dy in steps:
            self.move(node, dx, dy)
        self.release(node)


class StaticCapabilityProvider:
    """Provider for a capability that is available synchronously."""

    def __init__(self, capability: InteractionCapability) -> None:
        self._capability = capability

    async def acquire(self) -> InteractionCapability:
        return self._capability


class ImportCapabilityProvider:
    """Imports ``"package.module:factory"`` on first use and caches the result.

    The import runs in the default executor; the factory itself is called on
    the loop thread.
    """

    def __init__(
        self,
        target: str,
        *,
        factory_kwargs: Optional[Mapping[str, Any]] = None,
        importer: Callable[[str], Any] = importlib.import_module,
    ) -> None:
        module_name, _, attribute = target.partition(":")
        if not module_name or not attribute:
            raise ValueError(f"Capability target must look like 'module:factory', got {target!r}")
        self._module_name = module_name
        self._attribute = attribute
        self._factory_kwargs = dict(factory_kwargs or {})
        self._importer = importer
        self._capability: Optional[InteractionCapability] = None

    @property
    def loaded(self) -> bool:
        return self._capability is not None

    async def acquire(self) -> InteractionCapability:
        if self._capability is not None:
            return self._capability
        loop = asyncio.get_running_loop()
        try:
            module = await loop.run_in_executor(None, self._importer, self._module_name)
            factory = getattr(module, self._attribute)
            capability = factory(**self._factory_kwargs)
        except Exception as exc:
            raise CapabilityUnavailableError(
                f"Failed to load interaction capability {self._module_name}:{self._attribute}"
            ) from exc
        _LOGGER.debug("Loaded interaction capability %s:%s", self._module_name, self._attribute)
        self._capability = capability
        return capability
