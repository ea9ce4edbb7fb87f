"""
Store-section classification by keyword.

Classification is first-match over SECTION_KEYWORDS, in the order listed.
That order decides ties ("butter roll" is Dairy, not Bread) and existing
lists depend on it, so new keywords go at the end of their group and groups
are never reordered.
"""

from typing import Iterable, List, Optional, Tuple

from ..data.models import PRIORITY_ORDER

# Display order for grouped shopping lists
SECTIONS: Tuple[str, ...] = (
    "Bread",
    "Dairy",
    "Fresh Meat",
    "Fresh Vegetables",
    "Canned Foods",
    "Boxed Goods",
    "Frozen Food",
    "Snacks",
    "Beverages",
    "Household",
    "Personal Care",
    "Other",
)

FALLBACK_SECTION = "Other"

# Evaluation order for classification (first match wins)
SECTION_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("Dairy", ("egg", "milk", "cheese", "yogurt", "butter")),
    ("Bread", ("bread", "bun", "roll")),
    ("Fresh Meat", ("chicken", "beef", "pork", "meat", "turkey")),
    ("Fresh Vegetables", (
        "lettuce", "spinach", "carrot", "potato", "tomato",
        "onion", "pepper", "cucumber", "broccoli", "vegetable",
    )),
    ("Canned Foods", ("beans", "corn", "peas", "soup")),
    ("Boxed Goods", ("cereal", "pasta", "rice", "crackers")),
    ("Frozen Food", ("ice cream", "frozen")),
    ("Snacks", ("chips", "cookie", "snack", "candy")),
    ("Beverages", ("juice", "soda", "water", "coffee", "tea", "beverage")),
    ("Household", ("detergent", "cleaner", "paper towel", "toilet paper", "household")),
    ("Personal Care", ("shampoo", "soap", "toothpaste", "personal care")),
)


def classify_section(name: str) -> str:
    """
    Map an ingredient or item name to a store section.

    Args:
        name: Free-text name, any casing

    Returns:
        One of SECTIONS; "Other" when no keyword matches
    """
    lower = name.lower()
    for section, keywords in SECTION_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return section
    return FALLBACK_SECTION


def is_valid_section(label: Optional[str]) -> bool:
    return label in SECTIONS


def resolve_section(section: Optional[str], name: str) -> str:
    """
    Pick the section for a new item.

    A known label is kept, an empty one becomes "Other", and an unknown
    label is replaced by classifying `name`.
    """
    if not section:
        return FALLBACK_SECTION
    if is_valid_section(section):
        return section
    return classify_section(name)


def sort_by_priority(items: Iterable) -> List:
    """Sort items high -> medium -> low, stable within a priority."""
    return sorted(items, key=lambda item: PRIORITY_ORDER.get(item.priority, 1))
