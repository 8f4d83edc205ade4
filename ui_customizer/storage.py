"""Key/value persistence backends for small customization records."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Optional, Protocol

from .logging_utils import STORE_LOGGER_NAME

_LOGGER = logging.getLogger(STORE_LOGGER_NAME)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> bool: ...

    def remove(self, key: str) -> bool: ...


class MemoryStore:
    """Dictionary-backed store; contents live as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> bool:
        self._values[key] = str(value)
        return True

    def remove(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def snapshot(self) -> Dict[str, str]:
        return dict(self._values)


class JsonFileStore:
    """Persists string values in one JSON object, rewritten atomically on change."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._values: Dict[str, str] = {}
        self._load_existing()

    @property
    def path(self) -> Path:
        return self._path

    def _load_existing(self) -> None:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError) as exc:
            _LOGGER.debug("Failed to load customizer store %s: %s", self._path, exc)
            return
        if not isinstance(raw, dict):
            _LOGGER.debug("Ignoring customizer store %s: expected a JSON object", self._path)
            return
        self._values = {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> bool:
        previous = self._values.get(key)
        self._values[key] = str(value)
        if self._write_snapshot():
            return True
        if previous is None:
            self._values.pop(key, None)
        else:
            self._values[key] = previous
        return False

    def remove(self, key: str) -> bool:
        if key not in self._values:
            return False
        previous = self._values.pop(key)
        if self._write_snapshot():
            return True
        self._values[key] = previous
        return False

    def _write_snapshot(self) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(self._values, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self._path)
            return True
        except OSError as exc:
            _LOGGER.warning("Failed to write customizer store %s: %s", self._path, exc)
            return False
