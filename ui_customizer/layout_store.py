"""Durable layout documents and the original-geometry side table."""
from __future__ import annotations

import json
import logging
import random
import string
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional

from .containers import ensure_positioned, resolve_container
from .errors import LayoutFormatError
from .logging_utils import STORE_LOGGER_NAME
from .selector import is_composite
from .storage import KeyValueStore
from .tree import GEOMETRY_FIELDS, RenderNode, RenderTree

LAYOUT_KEY = "uiLayout"
GENERATED_ID_PREFIX = "custom-"

_LOGGER = logging.getLogger(STORE_LOGGER_NAME)
_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class LayoutEntry:
    id: str
    left: str = ""
    top: str = ""
    width: str = ""
    height: str = ""

    @property
    def is_empty(self) -> bool:
        return not (self.left or self.top or self.width or self.height)

    def geometry(self) -> Dict[str, str]:
        return {name: getattr(self, name) for name in GEOMETRY_FIELDS}

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, **self.geometry()}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "LayoutEntry":
        if not isinstance(raw, Mapping):
            raise LayoutFormatError("layout item must be an object")
        item_id = raw.get("id")
        if not isinstance(item_id, str) or not item_id:
            raise LayoutFormatError("layout item is missing an id")
        values: Dict[str, str] = {}
        for name in GEOMETRY_FIELDS:
            value = raw.get(name, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise LayoutFormatError(f"layout item {item_id!r} has a non-string {name}")
            values[name] = value
        return cls(id=item_id, **values)


class LayoutDocument:
    """Persisted arrangement keyed by element identifier."""

    def __init__(self, entries: Iterable[LayoutEntry] = ()) -> None:
        self._entries: Dict[str, LayoutEntry] = {}
        for entry in entries:
            self._entries[entry.id] = entry

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LayoutEntry]:
        return iter(list(self._entries.values()))

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LayoutDocument):
            return NotImplemented
        return self._entries == other._entries

    def get(self, item_id: str) -> Optional[LayoutEntry]:
        return self._entries.get(item_id)

    def to_payload(self) -> Dict[str, List[Dict[str, str]]]:
        return {"items": [entry.to_dict() for entry in self._entries.values()]}

    def to_json(self) -> str:
        return json.dumps(self.to_payload())

    @classmethod
    def parse(cls, text: str) -> "LayoutDocument":
        """Strict parser; raises LayoutFormatError on any shape problem."""
        try:
            raw = json.loads(text)
        except (TypeError, json.JSONDecodeError) as exc:
            raise LayoutFormatError(f"layout is not valid JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise LayoutFormatError("layout must be a JSON object")
        items = raw.get("items", [])
        if not isinstance(items, list):
            raise LayoutFormatError("layout items must be a list")
        return cls(LayoutEntry.from_dict(item) for item in items)


@dataclass(frozen=True)
class OriginalGeometry:
    position: str = ""
    left: str = ""
    top: str = ""
    width: str = ""
    height: str = ""

    @classmethod
    def capture(cls, node: RenderNode) -> "OriginalGeometry":
        style = node.style
        return cls(
            position=style.position,
            left=style.left,
            top=style.top,
            width=style.width,
            height=style.height,
        )


def entry_for(node: RenderNode) -> LayoutEntry:
    style = node.style
    return LayoutEntry(
        id=str(node.node_id),
        left=style.left,
        top=style.top,
        width=style.width,
        height=style.height,
    )


class LayoutStore:
    """Saves, loads, applies and resets the persisted arrangement."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = LAYOUT_KEY,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._store = store
        self._key = key
        self._rng = rng or random.Random()
        self._originals: Dict[str, OriginalGeometry] = {}

    # Identifiers ---------------------------------------------------------

    def ensure_id(self, tree: RenderTree, node: RenderNode) -> str:
        if node.node_id:
            return node.node_id
        while True:
            candidate = GENERATED_ID_PREFIX + "".join(self._rng.choices(_ID_ALPHABET, k=7))
            if tree.find_by_id(candidate) is None:
                break
        tree.assign_id(node, candidate)
        return candidate

    # Original geometry side table ---------------------------------------

    def capture_original(self, tree: RenderTree, node: RenderNode) -> None:
        node_id = self.ensure_id(tree, node)
        if node_id in self._originals:
            return
        self._originals[node_id] = OriginalGeometry.capture(node)

    def original_for(self, node_id: str) -> Optional[OriginalGeometry]:
        return self._originals.get(node_id)

    @property
    def original_count(self) -> int:
        return len(self._originals)

    # Persistence ---------------------------------------------------------

    def build_document(self, tree: RenderTree, nodes: Iterable[RenderNode]) -> LayoutDocument:
        entries = []
        for node in nodes:
            self.ensure_id(tree, node)
            entry = entry_for(node)
            if entry.is_empty:
                continue
            entries.append(entry)
        return LayoutDocument(entries)

    def save(self, tree: RenderTree, nodes: Iterable[RenderNode]) -> bool:
        document = self.build_document(tree, nodes)
        ok = self._store.set(self._key, document.to_json())
        if ok:
            _LOGGER.debug("Saved layout with %d item(s)", len(document))
        else:
            _LOGGER.warning("Layout with %d item(s) could not be persisted", len(document))
        return ok

    def load(self) -> LayoutDocument:
        raw = self._store.get(self._key)
        if not raw:
            return LayoutDocument()
        try:
            return LayoutDocument.parse(raw)
        except LayoutFormatError as exc:
            _LOGGER.debug("Ignoring malformed layout document: %s", exc)
            return LayoutDocument()

    def apply(self, tree: RenderTree, document: LayoutDocument) -> List[str]:
        """Place elements from ``document``; interaction is never attached here."""
        applied: List[str] = []
        for entry in document:
            node = tree.find_by_id(entry.id)
            if node is None:
                _LOGGER.debug("Layout item %s has no element; skipping", entry.id)
                continue
            if is_composite(node):
                _LOGGER.debug("Layout item %s is a composite with placed children; skipping", entry.id)
                continue
            if entry.is_empty:
                continue
            ensure_positioned(resolve_container(tree, node))
            self.capture_original(tree, node)
            changes = {name: value for name, value in entry.geometry().items() if value}
            node.set_style(position="absolute", **changes)
            applied.append(entry.id)
        return applied

    def clear(self) -> bool:
        return self._store.remove(self._key)

    def reset(self, tree: RenderTree) -> int:
        """Drop the persisted document and restore every captured original."""
        self.clear()
        restored = 0
        for node_id, original in list(self._originals.items()):
            node = tree.find_by_id(node_id)
            if node is None:
                continue
            node.set_style(
                position=original.position,
                left=original.left,
                top=original.top,
                width=original.width,
                height=original.height,
            )
            restored += 1
        self._originals.clear()
        _LOGGER.debug("Reset layout; restored %d element(s)", restored)
        return restored
