"""Static lookup tables mapping occasions to categories and moods to colors."""
from __future__ import annotations

import logging
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

ESSENTIAL_CATEGORIES: Tuple[str, ...] = ("Tops", "Bottoms", "Shoes", "Accessories")

OCCASION_CATEGORIES: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "work": ("Blazer", "Blouse", "Dress Pants", "Pencil Skirt", "Dress Shoes", "Heels"),
        "casual": ("T-Shirt", "Jeans", "Sneakers", "Casual Dress", "Sandals"),
        "formal": ("Dress", "Suit", "Heels", "Formal Wear"),
        "cozy": ("Sweater", "Hoodie", "Sweatpants", "Lounge Wear"),
    }
)

MOOD_COLORS: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "happy": ("Yellow", "Pink", "Orange", "Bright"),
        "professional": ("Black", "Navy", "Gray", "White"),
        "casual": ("Blue", "Green", "Brown", "Gray"),
        "glamorous": ("Red", "Gold", "Silver", "Purple"),
        "cozy": ("Beige", "Brown", "Gray", "Cream"),
    }
)


def _lookup(table: Mapping[str, Tuple[str, ...]], key: str | None, kind: str) -> Optional[List[str]]:
    normalized = (key or "").strip().lower()
    if not normalized:
        return None
    values = table.get(normalized)
    if values is None:
        logger.info("Unknown %s '%s', no %s filter applied", kind, key, kind)
        return None
    return list(values)


def categories_for_occasion(occasion: str | None) -> Optional[List[str]]:
    """Return the category keywords for an occasion, or ``None`` if unmapped."""

    return _lookup(OCCASION_CATEGORIES, occasion, "occasion")


def colors_for_mood(mood: str | None) -> Optional[List[str]]:
    """Return the palette for a mood, or ``None`` if unmapped."""

    return _lookup(MOOD_COLORS, mood, "mood")


__all__ = [
    "ESSENTIAL_CATEGORIES",
    "OCCASION_CATEGORIES",
    "MOOD_COLORS",
    "categories_for_occasion",
    "colors_for_mood",
]
