"""
Export/import of the whole tracker as one JSON snapshot document.

Document shape::

    {
      "skincare": [...], "haircare": [...], "supplements": [...],
      "study": [...], "bodycare": [...], "exercise": [...],
      "exportDate": "2025-01-25T10:15:30.123Z"
    }

Import only checks the top-level shape. Items are stored verbatim; a
category key that is missing or does not hold a list is left alone.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import TypeAdapter, ValidationError

from .exceptions import SnapshotImportError
from .kvstore import decode_json, encode_json
from .models import CATEGORIES
from .repositories import CategoryStore
from .utils import iso_timestamp

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "daily-glow-tracker-backup.json"
IMPORT_ERROR_MESSAGE = "Error importing data. Please check the file format."

_DOCUMENT = TypeAdapter(Dict[str, Any])


# PUBLIC_INTERFACE
def build_snapshot(stores: Mapping[str, CategoryStore], now: Optional[datetime] = None) -> Dict[str, Any]:
    """Assemble the snapshot document from the current contents of every category."""
    document: Dict[str, Any] = {category: stores[category].items() for category in CATEGORIES}
    document["exportDate"] = iso_timestamp(now)
    return document


# PUBLIC_INTERFACE
def export_snapshot(stores: Mapping[str, CategoryStore], now: Optional[datetime] = None) -> str:
    """Serialize all categories plus exportDate to pretty-printed JSON. Read-only."""
    return encode_json(build_snapshot(stores, now), indent=2)


# PUBLIC_INTERFACE
def parse_snapshot(text: str) -> Dict[str, List[Any]]:
    """
    Parse an import document and return the category lists it carries.

    Raises:
        SnapshotImportError: the text is not strict JSON (NaN and Infinity are
            rejected) or its top level is not an object.
    """
    try:
        document = _DOCUMENT.validate_python(decode_json(text))
    except (ValueError, ValidationError) as exc:
        raise SnapshotImportError(IMPORT_ERROR_MESSAGE) from exc
    return {c: document[c] for c in CATEGORIES if isinstance(document.get(c), list)}


# PUBLIC_INTERFACE
def import_snapshot(stores: Mapping[str, CategoryStore], text: str) -> List[str]:
    """
    Overwrite every category present in the document with its list.

    Parsing happens before any store is touched, so a malformed document
    changes nothing. Returns the imported category ids in canonical order.
    """
    parsed = parse_snapshot(text)
    for category, items in parsed.items():
        stores[category].replace(items)
    logger.info("Imported categories: %s", ", ".join(parsed) or "none")
    return list(parsed)
