"""Canonical taxonomy definitions for closet items.

This module centralises the labels used for closet categories, the color
palette, diary moods and planner occasions. Helper functions keep validation
logic consistent across the store, services and data models.
"""

from typing import Dict, List, Tuple

ALL_FILTER = "All"

CATEGORIES: Tuple[str, ...] = ("Tops", "Bottoms", "Dresses", "Shoes", "Accessories")

COLORS: Tuple[str, ...] = (
    "Black",
    "White",
    "Gray",
    "Navy",
    "Blue",
    "Red",
    "Pink",
    "Yellow",
    "Green",
    "Purple",
    "Brown",
    "Orange",
    "Beige",
    "Cream",
    "Gold",
    "Silver",
    "Bright",
)

DIARY_MOODS: List[str] = ["Happy", "Confident", "Casual", "Professional", "Cozy", "Glamorous"]
SUGGESTION_MOODS: List[str] = ["Happy", "Professional", "Casual", "Glamorous", "Cozy"]
OCCASIONS: List[str] = ["Casual", "Work", "Party", "Date", "Special Event", "Other"]

COLOR_MAP: Dict[str, str] = {
    "grey": "Gray",
    "navy blue": "Navy",
    "light blue": "Blue",
    "sky blue": "Blue",
    "off white": "White",
    "ivory": "Cream",
    "tan": "Beige",
    "burgundy": "Red",
    "olive": "Green",
    "violet": "Purple",
}

_CANONICAL_COLORS = {color.lower(): color for color in COLORS}


def normalize_color_name(raw_string: str) -> str:
    """Map a raw color string to its canonical palette spelling.

    Unknown colors are returned stripped but otherwise untouched.
    """

    key = raw_string.strip().lower()
    if key in COLOR_MAP:
        return COLOR_MAP[key]
    return _CANONICAL_COLORS.get(key, raw_string.strip())


def validate_color(value: str) -> str:
    """Validate and normalise a color value.

    Raises a :class:`ValueError` if the color is not part of the palette.
    """

    color = normalize_color_name(value)
    if color not in COLORS:
        raise ValueError(f"Unsupported color '{value}'. Allowed: {list(COLORS)}")
    return color


def validate_category(value: str) -> str:
    """Validate a garment category label.

    Categories are free-form so that finer labels such as ``"T-Shirt"`` can be
    stored, but they may not be blank or the ``All`` filter sentinel.
    """

    category = (value or "").strip()
    if not category:
        raise ValueError("Garment category must not be empty")
    if category == ALL_FILTER:
        raise ValueError(f"'{ALL_FILTER}' is a filter value, not a category")
    return category


def is_filter_wildcard(value: str | None) -> bool:
    """Return ``True`` when a filter selection means "no filter"."""

    return value is None or value.strip() in {"", ALL_FILTER}


__all__ = [
    "ALL_FILTER",
    "CATEGORIES",
    "COLORS",
    "COLOR_MAP",
    "DIARY_MOODS",
    "SUGGESTION_MOODS",
    "OCCASIONS",
    "normalize_color_name",
    "validate_color",
    "validate_category",
    "is_filter_wildcard",
]
