import asyncio
from types import SimpleNamespace

import pytest

from ui_customizer.capability import (
    DRAG,
    NO_EDGES,
    RESIZE,
    DirectCapability,
    Edges,
    ImportCapabilityProvider,
    StaticCapabilityProvider,
)
from ui_customizer.errors import CapabilityUnavailableError, CustomizerError
from ui_customizer.memory_tree import MemoryNode


class _Listener:
    def __init__(self) -> None:
        self.calls = []

    def begin_gesture(self, node, kind, edges=NO_EDGES):
        self.calls.append(("begin", kind, edges))

    def move_gesture(self, node, dx, dy):
        self.calls.append(("move", dx, dy))

    def end_gesture(self, node):
        self.calls.append(("end",))


def test_edges_active():
    assert not NO_EDGES.active
    assert Edges(top=True).active


def test_direct_capability_routes_gestures_to_listener():
    node = MemoryNode()
    listener = _Listener()
    capability = DirectCapability()
    capability.bind(node, listener)

    capability.drag(node, (1, 2), (3, 4))
    capability.resize(node, Edges(right=True), (5, 0))

    assert listener.calls == [
        ("begin", DRAG, NO_EDGES),
        ("move", 1, 2),
        ("move", 3, 4),
        ("end",),
        ("begin", RESIZE, Edges(right=True)),
        ("move", 5, 0),
        ("end",),
    ]


def test_direct_capability_rejects_unbound_nodes():
    node = MemoryNode()
    capability = DirectCapability()
    capability.bind(node, _Listener())
    capability.unbind(node)

    with pytest.raises(KeyError):
        capability.press(node)
    assert capability.bound_count == 0


def test_static_provider_returns_capability():
    capability = DirectCapability()
    assert asyncio.run(StaticCapabilityProvider(capability).acquire()) is capability


def test_import_provider_imports_once_and_caches():
    imported = []
    created = []

    def _importer(name):
        imported.append(name)

        def _factory(**kwargs):
            created.append(kwargs)
            return DirectCapability()

        return SimpleNamespace(create=_factory)

    provider = ImportCapabilityProvider("toolkit.gestures:create", factory_kwargs={"edge_px": 8}, importer=_importer)

    async def scenario():
        return await provider.acquire(), await provider.acquire()

    first, second = asyncio.run(scenario())

    assert first is second
    assert imported == ["toolkit.gestures"]
    assert created == [{"edge_px": 8}]
    assert provider.loaded


def test_import_provider_wraps_failures():
    def _importer(name):
        raise ImportError(f"No module named {name!r}")

    provider = ImportCapabilityProvider("missing.module:create", importer=_importer)

    with pytest.raises(CapabilityUnavailableError) as excinfo:
        asyncio.run(provider.acquire())

    assert isinstance(excinfo.value, CustomizerError)
    assert isinstance(excinfo.value.__cause__, ImportError)
    assert not provider.loaded


def test_import_provider_reports_missing_factory():
    provider = ImportCapabilityProvider("toolkit:absent", importer=lambda name: SimpleNamespace())

    with pytest.raises(CapabilityUnavailableError):
        asyncio.run(provider.acquire())


@pytest.mark.parametrize("target", ["no_colon", ":factory", "module:"])
def test_import_provider_validates_target(target):
    with pytest.raises(ValueError):
        ImportCapabilityProvider(target)
