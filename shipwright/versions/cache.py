"""Persistent version cache.

The cache is a single JSON record ``{"versions": {...}, "last_fetch": <epoch>}``
stored through a :class:`KeyValueStore`.  It is advisory: a missing, stale
or unreadable file degrades to the static table, never to an error.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import BaseModel, Field, ValidationError

from shipwright.utils import load_json, write_json_atomic

CACHE_KEY = "version-cache"


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...


class JsonFileStore:
    """:class:`KeyValueStore` persisted as one JSON document per tool.

    Every ``set`` rewrites the whole file atomically, so concurrent
    invocations resolve to last-writer-wins.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        try:
            return load_json(self.path)
        except (OSError, ValueError):
            return {}

    def get(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        write_json_atomic(data, self.path)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            write_json_atomic(data, self.path)


class MemoryStore:
    """In-process :class:`KeyValueStore` (used with ``--offline`` and in tests)."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(initial or {})

    def get(self, key: str) -> Optional[Any]:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class VersionCache(BaseModel):
    """Snapshot of the cached record."""

    versions: dict[str, str] = Field(default_factory=dict)
    last_fetch: float = Field(default=0.0, description="Epoch seconds of the last successful fetch")

    def age(self, now: float | None = None) -> float:
        """Seconds since the last successful fetch."""
        return (now if now is not None else time.time()) - self.last_fetch

    def is_fresh(self, window_seconds: float, now: float | None = None) -> bool:
        return self.last_fetch > 0 and self.age(now) < window_seconds

    def merged(self, fetched: dict[str, str], fetched_at: float) -> "VersionCache":
        """New snapshot with *fetched* layered over the current versions."""
        return VersionCache(versions={**self.versions, **fetched}, last_fetch=fetched_at)

    @classmethod
    def load(cls, store: KeyValueStore) -> "VersionCache":
        raw = store.get(CACHE_KEY)
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return cls()

    def save(self, store: KeyValueStore) -> None:
        store.set(CACHE_KEY, self.model_dump())
