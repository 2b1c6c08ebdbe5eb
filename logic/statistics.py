"""Aggregate views over closet and diary snapshots.

Every function here is pure: callers pass the garments and diary entries to
summarise, and nothing is read from or written to the store.
"""
from __future__ import annotations

import calendar
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

from models.garment import Garment, coerce_datetime, utcnow
from models.outfit import OutfitEntry


@dataclass(frozen=True)
class CategoryStatistic:
    category: str
    count: int
    wear_count: int


@dataclass(frozen=True)
class MonthlyWearCount:
    label: str
    year: int
    month: int
    count: int


@dataclass(frozen=True)
class ColorCombination:
    colors: Tuple[str, ...]
    count: int


@dataclass(frozen=True)
class WardrobeSummary:
    item_count: int
    total_wear_count: int
    average_wears_per_item: float
    category_counts: Dict[str, int]
    category_statistics: List[CategoryStatistic]
    favorite_ids: List[str]
    most_worn_ids: List[str]
    least_worn_ids: List[str]
    unworn_ids: List[str]
    wear_frequency_by_month: List[MonthlyWearCount]
    popular_color_combinations: List[ColorCombination]
    mood_distribution: Dict[str, int] = field(default_factory=dict)


def category_counts(items: Sequence[Garment]) -> Dict[str, int]:
    return dict(Counter(item.category for item in items))


def favorite_items(items: Sequence[Garment]) -> List[Garment]:
    return [item for item in items if item.favorite]


def most_worn_items(items: Sequence[Garment], limit: int = 5) -> List[Garment]:
    """Garments by descending wear count; ties keep input order."""

    return sorted(items, key=lambda item: item.times_worn, reverse=True)[:limit]


def least_worn_items(items: Sequence[Garment], limit: int = 5) -> List[Garment]:
    """Garments by ascending wear count; ties keep input order."""

    return sorted(items, key=lambda item: item.times_worn)[:limit]


def category_statistics(items: Sequence[Garment]) -> List[CategoryStatistic]:
    """Per-category item and wear counts, most worn category first."""

    counts: Dict[str, int] = {}
    wears: Dict[str, int] = {}
    for item in items:
        counts[item.category] = counts.get(item.category, 0) + 1
        wears[item.category] = wears.get(item.category, 0) + item.times_worn
    stats = [
        CategoryStatistic(category=category, count=count, wear_count=wears[category])
        for category, count in counts.items()
    ]
    return sorted(stats, key=lambda stat: stat.wear_count, reverse=True)


def total_wear_count(items: Sequence[Garment]) -> int:
    return sum(item.times_worn for item in items)


def average_wears_per_item(items: Sequence[Garment]) -> float:
    if not items:
        return 0.0
    return total_wear_count(items) / len(items)


def unworn_items(items: Sequence[Garment], now: datetime | None = None, days: int = 30) -> List[Garment]:
    """Garments never worn, or last worn more than ``days`` ago.

    A naive ``now`` is read as UTC.
    """

    cutoff = (coerce_datetime(now) or utcnow()) - timedelta(days=days)
    return [item for item in items if item.last_worn is None or item.last_worn < cutoff]


def _month_label(year: int, month: int) -> str:
    return f"{calendar.month_name[month]} {year}"


def wear_frequency_by_month(items: Sequence[Garment], chronological: bool = True) -> List[MonthlyWearCount]:
    """Count last-worn dates per calendar month.

    Months are ordered newest first. With ``chronological=False`` they are
    ordered by descending "Month YYYY" label instead, which groups months by
    name rather than by time.
    """

    counter: Counter = Counter(
        (item.last_worn.year, item.last_worn.month) for item in items if item.last_worn is not None
    )
    rows = [
        MonthlyWearCount(label=_month_label(year, month), year=year, month=month, count=count)
        for (year, month), count in counter.items()
    ]
    if chronological:
        return sorted(rows, key=lambda row: (row.year, row.month), reverse=True)
    return sorted(rows, key=lambda row: row.label, reverse=True)


def popular_color_combinations(entries: Sequence[OutfitEntry], limit: int = 50) -> List[ColorCombination]:
    """Color sets worn together across the most recent diary entries.

    Only entries whose garments span at least two distinct colors count.
    """

    recent = sorted(entries, key=lambda entry: entry.logged_at, reverse=True)[:limit]
    combinations: Dict[Tuple[str, ...], int] = {}
    for entry in recent:
        colors = tuple(sorted({item.color for item in entry.items}))
        if len(colors) >= 2:
            combinations[colors] = combinations.get(colors, 0) + 1
    ranked = [ColorCombination(colors=colors, count=count) for colors, count in combinations.items()]
    return sorted(ranked, key=lambda combination: combination.count, reverse=True)


def mood_distribution(entries: Sequence[OutfitEntry]) -> Dict[str, int]:
    return dict(Counter(entry.mood or "Unknown" for entry in entries))


def entries_by_month(entries: Sequence[OutfitEntry]) -> Dict[date, List[OutfitEntry]]:
    """Group diary entries by the first day of their month."""

    grouped: Dict[date, List[OutfitEntry]] = {}
    for entry in entries:
        key = date(entry.logged_at.year, entry.logged_at.month, 1)
        grouped.setdefault(key, []).append(entry)
    return grouped


def summarize_wardrobe(
    items: Sequence[Garment],
    entries: Sequence[OutfitEntry] = (),
    now: Optional[datetime] = None,
    unworn_days: int = 30,
    top_limit: int = 5,
    color_history_limit: int = 50,
) -> WardrobeSummary:
    """Bundle every closet statistic into one snapshot."""

    return WardrobeSummary(
        item_count=len(items),
        total_wear_count=total_wear_count(items),
        average_wears_per_item=average_wears_per_item(items),
        category_counts=category_counts(items),
        category_statistics=category_statistics(items),
        favorite_ids=[item.garment_id for item in favorite_items(items)],
        most_worn_ids=[item.garment_id for item in most_worn_items(items, top_limit)],
        least_worn_ids=[item.garment_id for item in least_worn_items(items, top_limit)],
        unworn_ids=[item.garment_id for item in unworn_items(items, now=now, days=unworn_days)],
        wear_frequency_by_month=wear_frequency_by_month(items),
        popular_color_combinations=popular_color_combinations(entries, color_history_limit),
        mood_distribution=mood_distribution(entries),
    )


__all__ = [
    "CategoryStatistic",
    "MonthlyWearCount",
    "ColorCombination",
    "WardrobeSummary",
    "category_counts",
    "favorite_items",
    "most_worn_items",
    "least_worn_items",
    "category_statistics",
    "total_wear_count",
    "average_wears_per_item",
    "unworn_items",
    "wear_frequency_by_month",
    "popular_color_combinations",
    "mood_distribution",
    "entries_by_month",
    "summarize_wardrobe",
]
