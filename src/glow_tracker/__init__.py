"""
Daily Glow Tracker backend package.

Per-category habit checklists with per-day completion history, persisted
through a pluggable key-value store. The FastAPI app lives in
``glow_tracker.main``; import it from there so that merely importing the
data layer does not read settings or configure logging.
"""

from .exceptions import SnapshotImportError, StorageReadError, StorageWriteError, TrackerError
from .kvstore import InMemoryKeyValueStore, KeyValueStore
from .repositories import CategoryStore
from .tracker import Tracker

__all__ = [
    "CategoryStore",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "SnapshotImportError",
    "StorageReadError",
    "StorageWriteError",
    "Tracker",
    "TrackerError",
]
