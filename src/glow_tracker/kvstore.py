from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from threading import RLock
from typing import Any, Dict, List, Optional

from .exceptions import StorageReadError, StorageWriteError
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class KeyValueStore(ABC):
    """Abstract contract for the durable string-keyed store behind the tracker."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text for key, or None if absent. May raise StorageReadError."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Atomically replace the value stored under key. Raises StorageWriteError on rejection."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return all stored keys."""


class InMemoryKeyValueStore(KeyValueStore):
    """
    Thread-safe in-memory store suitable for testing and default runtime.

    An optional quota (total size of all values, in UTF-8 bytes) emulates the
    limit browser storage enforces; a write that would exceed it is rejected
    and the previous value is kept.
    """

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self._lock = RLock()
        self._data: Dict[str, str] = {}
        self._quota_bytes = quota_bytes

    def _size_with(self, key: str, value: str) -> int:
        total = len(value.encode("utf-8"))
        for k, v in self._data.items():
            if k != key:
                total += len(v.encode("utf-8"))
        return total

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            if self._quota_bytes is not None and self._size_with(key, value) > self._quota_bytes:
                raise StorageWriteError(f"quota exceeded while writing '{key}'")
            self._data[key] = value

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data.keys())


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if math.isinf(value) or math.isnan(value):
        raise ValueError(f"{text} is out of range for a JSON number")
    return value


# PUBLIC_INTERFACE
def decode_json(text: str) -> Any:
    """Strict JSON decoding: NaN, Infinity and overflowing numbers are rejected with ValueError."""
    return json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)


# PUBLIC_INTERFACE
def encode_json(value: Any, indent: Optional[int] = None) -> str:
    """Strict JSON encoding: non-finite floats raise ValueError instead of emitting NaN/Infinity."""
    return json.dumps(value, ensure_ascii=False, allow_nan=False, indent=indent)


# PUBLIC_INTERFACE
def load_json(store: KeyValueStore, key: str, default: Any) -> Any:
    """
    Read and decode the JSON document stored under key.

    Never raises: a missing key, an unreadable backend or unparsable text all
    fall back to default.
    """
    try:
        raw = store.get(key)
    except StorageReadError as exc:
        logger.warning("Could not read '%s' from storage, using default: %s", key, exc)
        return default
    if raw is None:
        return default
    try:
        return decode_json(raw)
    except ValueError:
        logger.warning("Stored value for '%s' is not valid JSON, using default", key)
        return default


# PUBLIC_INTERFACE
def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Encode value as a JSON document and write it under key. Propagates StorageWriteError."""
    try:
        text = encode_json(value)
    except ValueError as exc:
        raise StorageWriteError(f"cannot encode '{key}' as JSON: {exc}") from exc
    store.set(key, text)


# PUBLIC_INTERFACE
def get_kv_store(settings: Optional[Settings] = None) -> KeyValueStore:
    """
    Factory to return the configured key-value store based on settings.
    - memory: InMemoryKeyValueStore (honours STORAGE_QUOTA_BYTES)
    - sqlite: SQLiteKeyValueStore
    """
    settings = settings or get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteKeyValueStore

        return SQLiteKeyValueStore(settings.sqlite_db_path)
    return InMemoryKeyValueStore(quota_bytes=settings.storage_quota_bytes)
