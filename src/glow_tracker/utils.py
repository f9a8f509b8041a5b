from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union


# PUBLIC_INTERFACE
def day_key(day: Union[date, datetime]) -> str:
    """
    Canonical completion-map key for a calendar day: 'YYYY-MM-DD'.

    Datetimes are reduced to their (local) date; the time of day is ignored.
    """
    if isinstance(day, datetime):
        day = day.date()
    return day.isoformat()


# PUBLIC_INTERFACE
def new_item_id() -> str:
    """Return a fresh random item id, unique regardless of call timing."""
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
def iso_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Render a UTC ISO8601 timestamp with millisecond precision and a 'Z' suffix,
    e.g. '2025-01-25T10:15:30.123Z'. Naive datetimes are taken as UTC.
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


# PUBLIC_INTERFACE
def items_envelope(
    category: str,
    items: Union[Sequence[Any], Iterable[Any]],
    write_error: Optional[Exception] = None,
) -> Dict[str, Any]:
    """
    Build the standard response envelope for category endpoints.

    Args:
        category: Category id the items belong to.
        items: The category's current items, in order.
        write_error: The storage error from the last write, if it failed.

    Returns:
        Dict with keys: category, items, persisted, warning.
    """
    # Ensure items is materialized as a list (in case an iterator is passed)
    materialized: List[Any] = list(items) if not isinstance(items, list) else items
    return {
        "category": category,
        "items": materialized,
        "persisted": write_error is None,
        "warning": str(write_error) if write_error is not None else None,
    }
