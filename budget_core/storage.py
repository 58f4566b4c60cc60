"""Key-value persistence for the budget tracker core services."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .exceptions import PersistenceError

KeyValuePair = Tuple[str, Any]


class KeyValueStore(ABC):
    """Namespaced key-value storage queried by exact key and by key prefix."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or ``None``."""

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite ``key`` with a JSON-native value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key``; missing keys are ignored."""

    @abstractmethod
    def get_by_prefix(self, prefix: str) -> List[KeyValuePair]:
        """Return ``(key, value)`` pairs whose key starts with ``prefix``, ordered by key."""

    def mget(self, keys: Iterable[str]) -> List[Optional[Any]]:
        return [self.get(key) for key in keys]

    def mset(self, entries: Mapping[str, Any]) -> None:
        for key, value in entries.items():
            self.set(key, value)

    def mdel(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.delete(key)


class MemoryKeyValueStore(KeyValueStore):
    """Dict-backed store; values are copied in and out."""

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = deepcopy(dict(initial or {}))

    def get(self, key: str) -> Optional[Any]:
        return deepcopy(self._data.get(key))

    def set(self, key: str, value: Any) -> None:
        self._data[key] = deepcopy(value)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def get_by_prefix(self, prefix: str) -> List[KeyValuePair]:
        return [
            (key, deepcopy(value))
            for key, value in sorted(self._data.items())
            if key.startswith(prefix)
        ]


class JSONKeyValueStore(KeyValueStore):
    """File-backed store keeping every key in one JSON object with crash-safe writes."""

    def __init__(self, base_path: Path, resource: str = "kv_store.json") -> None:
        self._base_path = base_path
        try:
            self._base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PersistenceError(f"Unable to create data directory {self._base_path}") from exc
        self._path = self._base_path / resource

    def get(self, key: str) -> Optional[Any]:
        return self.load().get(key)

    def set(self, key: str, value: Any) -> None:
        self.mset({key: value})

    def delete(self, key: str) -> None:
        self.mdel([key])

    def get_by_prefix(self, prefix: str) -> List[KeyValuePair]:
        data = self.load()
        return [(key, data[key]) for key in sorted(data) if key.startswith(prefix)]

    def mget(self, keys: Iterable[str]) -> List[Optional[Any]]:
        data = self.load()
        return [data.get(key) for key in keys]

    def mset(self, entries: Mapping[str, Any]) -> None:
        data = self.load()
        data.update(entries)
        self.save(data)

    def mdel(self, keys: Iterable[str]) -> None:
        data = self.load()
        removed = [data.pop(key) for key in list(keys) if key in data]
        if removed:
            self.save(data)

    def load(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupted JSON data in {self._path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Unable to read from {self._path}") from exc

        if not isinstance(payload, dict):
            raise PersistenceError(f"Expected object payload in {self._path}")
        return payload

    def save(self, data: Mapping[str, Any]) -> None:
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            with temp_path.open("w", encoding="utf-8") as handle:
                json.dump(dict(data), handle, indent=2, sort_keys=True)
                handle.flush()
            # Atomic on POSIX.
            temp_path.replace(self._path)
        except (OSError, TypeError) as exc:
            temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Unable to write to {temp_path}") from exc

    @property
    def base_path(self) -> Path:
        return self._base_path

    @property
    def path(self) -> Path:
        return self._path
