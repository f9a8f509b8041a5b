from __future__ import annotations

import copy
import logging
from datetime import date, datetime
from threading import RLock
from typing import Any, Callable, Iterable, List, Mapping, Optional, Set

from .exceptions import StorageWriteError
from .kvstore import KeyValueStore, load_json, save_json
from .models import CATEGORIES, DEFAULT_ITEMS, ItemId, TrackedItem, storage_key
from .utils import day_key, iso_timestamp, new_item_id

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def _stored_id(item: Any) -> Any:
    return item.get("id") if isinstance(item, Mapping) else None


def _index_of(items: List[Any], item_id: ItemId) -> Optional[int]:
    """
    Position of the item addressed by item_id, or None.

    An exact match (same type and value) wins. Only when there is none does
    the text form count, so a numeric id from an imported document can be
    addressed as '1737800000000'. At most one item is ever selected.
    """
    for index, item in enumerate(items):
        stored = _stored_id(item)
        if stored is not None and type(stored) is type(item_id) and stored == item_id:
            return index
    for index, item in enumerate(items):
        stored = _stored_id(item)
        if stored is not None and str(stored) == str(item_id):
            return index
    return None


# PUBLIC_INTERFACE
def is_completed_on(item: Any, day: date) -> bool:
    """Return True only if the item's completion map holds a true flag for day."""
    if not isinstance(item, Mapping):
        return False
    completed = item.get("completed")
    if not isinstance(completed, Mapping):
        return False
    return completed.get(day_key(day)) is True


# PUBLIC_INTERFACE
class CategoryStore:
    """
    Ordered list of tracked items for one category, persisted as a whole.

    Every operation is total: unknown ids and blank names are silently
    ignored and the unchanged list is returned. Each state change rewrites
    the complete list under '<category>-items'. A rejected write is logged
    and kept in ``last_write_error``; the in-memory list stays authoritative
    for the rest of the session.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        category: str,
        id_factory: Optional[Callable[[], ItemId]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if category not in CATEGORIES:
            raise ValueError(f"Unknown category: {category}")
        self._kv = kv
        self._category = category
        self._key = storage_key(category)
        self._id_factory = id_factory or new_item_id
        self._clock = clock or _local_now
        self._lock = RLock()
        self.last_write_error: Optional[StorageWriteError] = None
        self._items: List[Any] = self._load()

    @property
    def category(self) -> str:
        return self._category

    def _load(self) -> List[Any]:
        data = load_json(self._kv, self._key, [])
        if not isinstance(data, list):
            logger.warning("Stored value for '%s' is not a list, starting empty", self._key)
            return []
        return data

    def _commit(self, items: List[Any]) -> None:
        self._items = items
        try:
            save_json(self._kv, self._key, items)
        except StorageWriteError as exc:
            logger.warning("Keeping '%s' in memory only: %s", self._category, exc)
            self.last_write_error = exc
        else:
            self.last_write_error = None

    def _taken_ids(self) -> Set[str]:
        return {str(i.get("id")) for i in self._items if isinstance(i, Mapping)}

    def _allocate_id(self, taken: Set[str]) -> ItemId:
        candidate = self._id_factory()
        while str(candidate) in taken:
            candidate = self._id_factory()
        taken.add(str(candidate))
        return candidate

    def _new_item(self, name: str, taken: Set[str]) -> TrackedItem:
        return {
            "id": self._allocate_id(taken),
            "name": name,
            "completed": {},
            "createdAt": iso_timestamp(self._clock()),
        }

    def items(self) -> List[Any]:
        """Return a copy of the current items in insertion order."""
        with self._lock:
            return copy.deepcopy(self._items)

    def add(self, name: str) -> List[Any]:
        """Append a new item named name (trimmed). Blank names are ignored."""
        trimmed = (name or "").strip()
        with self._lock:
            if not trimmed:
                return self.items()
            item = self._new_item(trimmed, self._taken_ids())
            self._commit(self._items + [item])
            logger.debug("Added item %s to %s", item["id"], self._category)
            return self.items()

    def bulk_seed(self, names: Iterable[str]) -> List[Any]:
        """Append one new item per name, in input order, each with a distinct id."""
        with self._lock:
            taken = self._taken_ids()
            new_items = [
                self._new_item(n.strip(), taken)
                for n in names
                if isinstance(n, str) and n.strip()
            ]
            if new_items:
                self._commit(self._items + new_items)
                logger.debug("Seeded %d items into %s", len(new_items), self._category)
            return self.items()

    def seed_defaults(self) -> List[Any]:
        """Seed the category's default item set, but only while the category is empty."""
        with self._lock:
            if self._items:
                return self.items()
            return self.bulk_seed(DEFAULT_ITEMS[self._category])

    def rename(self, item_id: ItemId, new_name: str) -> List[Any]:
        """Replace the name of item_id with new_name (trimmed). Unknown ids and blank names are ignored."""
        trimmed = (new_name or "").strip()
        with self._lock:
            index = _index_of(self._items, item_id)
            if not trimmed or index is None:
                return self.items()
            updated = list(self._items)
            updated[index] = {**updated[index], "name": trimmed}
            self._commit(updated)
            return self.items()

    def delete(self, item_id: ItemId) -> List[Any]:
        """Remove item_id permanently. Unknown ids are ignored."""
        with self._lock:
            index = _index_of(self._items, item_id)
            if index is not None:
                self._commit(self._items[:index] + self._items[index + 1:])
                logger.debug("Deleted item %s from %s", item_id, self._category)
            return self.items()

    def toggle_today(self, item_id: ItemId) -> List[Any]:
        """Flip today's completion flag of item_id (absent counts as False)."""
        with self._lock:
            index = _index_of(self._items, item_id)
            if index is None:
                return self.items()
            today = day_key(self._clock())
            item = self._items[index]
            completed = item.get("completed")
            completed = dict(completed) if isinstance(completed, Mapping) else {}
            completed[today] = not bool(completed.get(today, False))
            updated = list(self._items)
            updated[index] = {**item, "completed": completed}
            self._commit(updated)
            return self.items()

    def replace(self, items: Iterable[Any]) -> List[Any]:
        """Overwrite the whole list verbatim (used by import)."""
        with self._lock:
            self._commit(copy.deepcopy(list(items)))
            return self.items()

    def today(self) -> date:
        """Local calendar day according to this store's clock."""
        return self._clock().date()

    def completed_today_count(self) -> int:
        with self._lock:
            today = self.today()
            return sum(1 for i in self._items if is_completed_on(i, today))
