"""Error types raised by the storage layer and the snapshot codec."""
from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class StorageReadError(TrackerError):
    """A persisted value could not be read from the key-value store."""


class StorageWriteError(TrackerError):
    """The key-value store rejected a write (e.g. quota exceeded)."""


class SnapshotImportError(TrackerError):
    """An import document could not be parsed; nothing was changed."""
