"""Diary entry and calendar slot schemas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from models.garment import Garment, coerce_datetime, new_identifier, utcnow


def _dedupe(items: List[Garment]) -> List[Garment]:
    """Keep the first reference to each garment id."""

    seen = set()
    unique: List[Garment] = []
    for item in items:
        if item.garment_id in seen:
            continue
        seen.add(item.garment_id)
        unique.append(item)
    return unique


@dataclass
class OutfitEntry:
    """A worn outfit logged in the style diary.

    ``items`` references garments without owning them; deleting the entry
    leaves the garments in the closet.
    """

    mood: str
    notes: str = ""
    entry_id: str = field(default_factory=new_identifier)
    logged_at: datetime = field(default_factory=utcnow)
    image: Optional[bytes] = field(default=None, repr=False)
    items: List[Garment] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.mood = (self.mood or "").strip()
        self.notes = self.notes or ""
        self.logged_at = coerce_datetime(self.logged_at) or utcnow()
        self.items = _dedupe(list(self.items))

    @property
    def garment_ids(self) -> List[str]:
        return [item.garment_id for item in self.items]


@dataclass
class CalendarSlot:
    """An outfit planned for a date and occasion."""

    date: datetime
    occasion: str
    notes: str = ""
    slot_id: str = field(default_factory=new_identifier)
    planned_items: List[Garment] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.date = coerce_datetime(self.date) or utcnow()
        self.occasion = (self.occasion or "").strip()
        self.notes = self.notes or ""
        self.planned_items = _dedupe(list(self.planned_items))

    @property
    def garment_ids(self) -> List[str]:
        return [item.garment_id for item in self.planned_items]


__all__ = ["OutfitEntry", "CalendarSlot"]
