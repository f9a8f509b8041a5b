from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional

from .exceptions import StorageWriteError
from .kvstore import KeyValueStore, get_kv_store, load_json, save_json
from .models import CATEGORIES, CATEGORY_TITLES, THEME_KEY, ItemId
from .repositories import CategoryStore
from .snapshot import export_snapshot, import_snapshot

logger = logging.getLogger(__name__)


class ThemePreference:
    """Dark-mode flag persisted under 'darkMode'. Anything but a stored boolean reads as False."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv
        value = load_json(kv, THEME_KEY, False)
        self._dark = value if isinstance(value, bool) else False
        self.last_write_error: Optional[StorageWriteError] = None

    @property
    def dark(self) -> bool:
        return self._dark

    def set(self, dark: bool) -> bool:
        self._dark = bool(dark)
        try:
            save_json(self._kv, THEME_KEY, self._dark)
        except StorageWriteError as exc:
            logger.warning("Keeping theme preference in memory only: %s", exc)
            self.last_write_error = exc
        else:
            self.last_write_error = None
        return self._dark


# PUBLIC_INTERFACE
class Tracker:
    """
    The six category stores and the theme flag, sharing one key-value store.

    Categories are independent; import overwrites only the categories a
    document carries.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        id_factory: Optional[Callable[[], ItemId]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.kv = kv
        self.stores: Dict[str, CategoryStore] = {
            c: CategoryStore(kv, c, id_factory=id_factory, clock=clock) for c in CATEGORIES
        }
        self.theme = ThemePreference(kv)

    def store(self, category: str) -> CategoryStore:
        try:
            return self.stores[category]
        except KeyError:
            raise ValueError(f"Unknown category: {category}") from None

    def export_all(self, now: Optional[datetime] = None) -> str:
        return export_snapshot(self.stores, now)

    def import_all(self, raw_text: str) -> List[str]:
        return import_snapshot(self.stores, raw_text)

    def summary(self) -> List[Dict[str, Any]]:
        """Per-category title, item count and number of items completed today."""
        return [
            {
                "id": c,
                "title": CATEGORY_TITLES[c],
                "item_count": len(self.stores[c].items()),
                "completed_today": self.stores[c].completed_today_count(),
            }
            for c in CATEGORIES
        ]


# PUBLIC_INTERFACE
@lru_cache(maxsize=1)
def get_tracker() -> Tracker:
    """Return the process-wide tracker built from settings."""
    return Tracker(get_kv_store())
