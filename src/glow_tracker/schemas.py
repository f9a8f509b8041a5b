from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .repositories import is_completed_on

OutItemId = Optional[Union[str, int, float]]


# PUBLIC_INTERFACE
class CategoryId(str, Enum):
    """The six fixed habit categories."""

    skincare = "skincare"
    haircare = "haircare"
    supplements = "supplements"
    study = "study"
    bodycare = "bodycare"
    exercise = "exercise"


# PUBLIC_INTERFACE
class ItemNameIn(BaseModel):
    """
    Schema for adding or renaming an item.

    A blank name is accepted and ignored by the store (the request is a no-op).
    """

    model_config = ConfigDict(json_schema_extra={"example": {"name": "Vitamin C serum"}})

    name: str = Field(..., description="Item name; surrounding whitespace is trimmed")


# PUBLIC_INTERFACE
class SeedIn(BaseModel):
    """
    Schema for bulk-seeding a category.

    When names is omitted the category's default set is used, and only if the
    category is still empty.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"names": ["Read for 30 minutes", "Review notes"]}}
    )

    names: Optional[List[str]] = Field(default=None, description="Names to append, in order")


# PUBLIC_INTERFACE
class TrackedItemOut(BaseModel):
    """
    Schema returned by the API for a tracked item.

    Stored items may come verbatim from an imported document, so every field
    is read defensively: malformed values are reported as absent.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "3f2c9a4b6d7e4e0f8a1b2c3d4e5f6a7b",
                "name": "Yoga",
                "completed": {"2025-01-25": True},
                "createdAt": "2025-01-20T08:00:00.000Z",
                "completedToday": True,
            }
        },
    )

    id: OutItemId = Field(default=None, description="Item identifier")
    name: str = Field(default="", description="Display name")
    completed: Dict[str, bool] = Field(default_factory=dict, description="Day key -> completion flag")
    created_at: Optional[str] = Field(default=None, alias="createdAt", description="Creation timestamp")
    completed_today: bool = Field(default=False, alias="completedToday", description="Completed on the current day")

    @classmethod
    def from_raw(cls, raw: Any, today: date) -> "TrackedItemOut":
        data: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
        raw_id = data.get("id")
        if isinstance(raw_id, bool) or not isinstance(raw_id, (str, int, float)):
            raw_id = None
        name = data.get("name")
        completed = data.get("completed")
        created = data.get("createdAt")
        return cls(
            id=raw_id,
            name=name if isinstance(name, str) else "",
            completed=(
                {str(k): v for k, v in completed.items() if isinstance(v, bool)}
                if isinstance(completed, Mapping)
                else {}
            ),
            created_at=created if isinstance(created, str) else None,
            completed_today=is_completed_on(data, today),
        )


# PUBLIC_INTERFACE
class CategoryItemsOut(BaseModel):
    """
    Envelope for every category read and mutation.
    """

    category: CategoryId = Field(..., description="Category the items belong to")
    items: List[TrackedItemOut] = Field(..., description="Items in insertion order")
    persisted: bool = Field(..., description="False if the last write to storage failed")
    warning: Optional[str] = Field(default=None, description="Storage failure message, if any")


# PUBLIC_INTERFACE
class CategorySummaryOut(BaseModel):
    """Per-category overview for navigation."""

    id: CategoryId
    title: str
    item_count: int = Field(..., description="Number of items in the category")
    completed_today: int = Field(..., description="Number of items completed today")


# PUBLIC_INTERFACE
class ThemeIn(BaseModel):
    """Schema for setting the theme preference."""

    dark: bool = Field(..., description="True for dark mode")


# PUBLIC_INTERFACE
class ThemeOut(BaseModel):
    """Current theme preference."""

    dark: bool
    persisted: bool = True
    warning: Optional[str] = None


# PUBLIC_INTERFACE
class ImportResultOut(BaseModel):
    """Result of a successful import."""

    model_config = ConfigDict(
        json_schema_extra={"example": {"imported": ["skincare", "study"], "persisted": True, "warning": None}}
    )

    imported: List[CategoryId] = Field(..., description="Categories overwritten by the document")
    persisted: bool = Field(..., description="False if any category failed to write")
    warning: Optional[str] = None
