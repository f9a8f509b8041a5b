from __future__ import annotations

from typing import Dict, List, Tuple, TypedDict, Union

ItemId = Union[str, int, float]


# PUBLIC_INTERFACE
class TrackedItem(TypedDict):
    """
    A single habit entry as persisted and exported.

    Keys use the camelCase names of the export document.

    Fields:
    - id: Opaque identifier, unique within its category. Generated ids are
      hex strings; ids from imported documents are kept as-is.
    - name: Trimmed, non-empty display name
    - completed: Day key ('YYYY-MM-DD') -> completion flag. Absent means not completed.
    - createdAt: ISO8601 creation timestamp (informational)
    """

    id: ItemId
    name: str
    completed: Dict[str, bool]
    createdAt: str


CATEGORIES: Tuple[str, ...] = ("skincare", "haircare", "supplements", "study", "bodycare", "exercise")

CATEGORY_TITLES: Dict[str, str] = {
    "skincare": "Skincare",
    "haircare": "Hair Care",
    "supplements": "Supplements",
    "study": "Study",
    "bodycare": "Body Care",
    "exercise": "Exercise",
}

DEFAULT_ITEMS: Dict[str, List[str]] = {
    "skincare": [
        "Morning cleanser",
        "Vitamin C serum",
        "Moisturizer with SPF",
        "Evening cleanser",
        "Retinol (3x/week)",
        "Night moisturizer",
    ],
    "haircare": [
        "Shampoo",
        "Conditioner",
        "Hair oil treatment",
        "Scalp massage",
        "Protective styling",
        "Heat protectant",
    ],
    "supplements": [
        "Multivitamin",
        "Vitamin D",
        "Omega-3",
        "Probiotics",
        "Vitamin C",
        "B-Complex",
    ],
    "study": [
        "Read for 30 minutes",
        "Review notes",
        "Practice problems",
        "Flashcard review",
        "Journal writing",
        "Research topic",
    ],
    "bodycare": [
        "Body moisturizer",
        "Exfoliate",
        "Nail care",
        "Foot care",
        "Body scrub",
        "Self-massage",
    ],
    "exercise": [
        "Cardio workout",
        "Strength training",
        "Stretching",
        "Walk 10k steps",
        "Yoga",
        "Core exercises",
    ],
}

DEFAULT_CATEGORY = "skincare"
THEME_KEY = "darkMode"


def storage_key(category: str) -> str:
    """Key under which a category's item list is persisted."""
    return f"{category}-items"
