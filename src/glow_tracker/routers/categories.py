from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends

from ..repositories import CategoryStore
from ..schemas import CategoryId, CategoryItemsOut, CategorySummaryOut, ItemNameIn, SeedIn, TrackedItemOut
from ..tracker import Tracker, get_tracker
from ..utils import items_envelope

router = APIRouter(
    prefix="/api/v1/categories",
    tags=["categories"],
)


def _get_tracker(tracker: Tracker = Depends(get_tracker)) -> Tracker:
    """
    Dependency wrapper for the tracker to keep signatures clean.
    """
    return tracker


def _envelope(store: CategoryStore, items: list) -> CategoryItemsOut:
    today = store.today()
    envelope = items_envelope(
        category=store.category,
        items=[TrackedItemOut.from_raw(it, today) for it in items],
        write_error=store.last_write_error,
    )
    return CategoryItemsOut(**envelope)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[CategorySummaryOut],
    summary="List Categories",
    description="List the six categories with item counts and today's completion count.",
)
def list_categories(tracker: Tracker = Depends(_get_tracker)) -> List[CategorySummaryOut]:
    """
    Overview of all categories in canonical order.
    """
    return [CategorySummaryOut(**row) for row in tracker.summary()]


# PUBLIC_INTERFACE
@router.get(
    "/{category}/items",
    response_model=CategoryItemsOut,
    summary="List Items",
    description="Return the items of one category in insertion order.",
)
def list_items(category: CategoryId, tracker: Tracker = Depends(_get_tracker)) -> CategoryItemsOut:
    """
    Current items of a category.
    """
    store = tracker.store(category.value)
    return _envelope(store, store.items())


# PUBLIC_INTERFACE
@router.post(
    "/{category}/items",
    response_model=CategoryItemsOut,
    summary="Add Item",
    description="Append a new item. A blank name is ignored and the unchanged list is returned.",
)
def add_item(
    category: CategoryId, payload: ItemNameIn, tracker: Tracker = Depends(_get_tracker)
) -> CategoryItemsOut:
    """
    Add an item to a category.
    """
    store = tracker.store(category.value)
    return _envelope(store, store.add(payload.name))


# PUBLIC_INTERFACE
@router.patch(
    "/{category}/items/{item_id}",
    response_model=CategoryItemsOut,
    summary="Rename Item",
    description="Rename an item. Unknown ids and blank names are ignored.",
)
def rename_item(
    category: CategoryId, item_id: str, payload: ItemNameIn, tracker: Tracker = Depends(_get_tracker)
) -> CategoryItemsOut:
    """
    Commit an edited item name.
    """
    store = tracker.store(category.value)
    return _envelope(store, store.rename(item_id, payload.name))


# PUBLIC_INTERFACE
@router.delete(
    "/{category}/items/{item_id}",
    response_model=CategoryItemsOut,
    summary="Delete Item",
    description="Remove an item permanently. Unknown ids are ignored.",
)
def delete_item(category: CategoryId, item_id: str, tracker: Tracker = Depends(_get_tracker)) -> CategoryItemsOut:
    """
    Delete an item from a category.
    """
    store = tracker.store(category.value)
    return _envelope(store, store.delete(item_id))


# PUBLIC_INTERFACE
@router.post(
    "/{category}/items/{item_id}/toggle",
    response_model=CategoryItemsOut,
    summary="Toggle Today",
    description="Flip today's completion flag of an item. Unknown ids are ignored.",
)
def toggle_item(category: CategoryId, item_id: str, tracker: Tracker = Depends(_get_tracker)) -> CategoryItemsOut:
    """
    Mark an item done (or not done) for today.
    """
    store = tracker.store(category.value)
    return _envelope(store, store.toggle_today(item_id))


# PUBLIC_INTERFACE
@router.post(
    "/{category}/seed",
    response_model=CategoryItemsOut,
    summary="Bulk Seed",
    description=(
        "Append several items at once.\n\n"
        "- With `names`: one item per name, in order.\n"
        "- Without a body or with `names` null: the category's default set, only if the category is empty."
    ),
)
def seed_items(
    category: CategoryId,
    payload: Optional[SeedIn] = Body(default=None),
    tracker: Tracker = Depends(_get_tracker),
) -> CategoryItemsOut:
    """
    Bulk-seed a category.
    """
    store = tracker.store(category.value)
    if payload is None or payload.names is None:
        return _envelope(store, store.seed_defaults())
    return _envelope(store, store.bulk_seed(payload.names))
