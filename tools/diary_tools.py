"""Style diary service: logging worn outfits and summarising moods."""

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional, Sequence

from closet_app.logging_config import get_logger, log_event
from logic.statistics import entries_by_month, mood_distribution
from models.garment import Garment
from models.outfit import OutfitEntry
from models.taxonomy import ALL_FILTER, is_filter_wildcard
from tools.observability import instrument_operation
from tools.wardrobe_store import StoreReadFailure, StoreWriteFailure, WardrobeStore

LOGGER = get_logger(__name__)


class DiaryService:
    """Diary entries, newest first, optionally filtered by mood.

    Follows the same snapshot contract as the closet service: ``entries`` is
    the last successful read and failed writes leave in-memory objects as they
    were.
    """

    def __init__(self, store: WardrobeStore) -> None:
        self.store = store
        self.selected_mood = ALL_FILTER
        self.entries: List[OutfitEntry] = []
        self.last_error: Optional[Exception] = None

    @instrument_operation("refresh_diary")
    def refresh(self) -> List[OutfitEntry]:
        mood = None if is_filter_wildcard(self.selected_mood) else self.selected_mood
        try:
            entries = self.store.fetch_entries(mood=mood)
        except StoreReadFailure as exc:
            self.last_error = exc
            log_event(LOGGER, logging.ERROR, "diary_refresh_failed", kept_entries=len(self.entries))
            raise
        self.entries = entries
        self.last_error = None
        return entries

    def _refresh_after_write(self) -> None:
        try:
            self.refresh()
        except StoreReadFailure as exc:
            LOGGER.warning("Write committed but diary refresh failed, keeping previous entries: %s", exc)

    def set_mood_filter(self, mood: str) -> List[OutfitEntry]:
        self.selected_mood = mood
        return self.refresh()

    @instrument_operation("add_diary_entry")
    def add_entry(
        self,
        mood: str,
        notes: str = "",
        items: Sequence[Garment] = (),
        image: bytes | None = None,
    ) -> OutfitEntry:
        """Log an outfit and count a wear for each of its garments.

        The entry and the wear increments are committed together; garments in
        memory are updated only once the store has accepted both.
        """

        entry = OutfitEntry(mood=mood, notes=notes, image=image, items=list(items))
        self.store.log_outfit(entry)
        for garment in entry.items:
            garment.mark_worn(entry.logged_at)
        self._refresh_after_write()
        return entry

    @instrument_operation("update_diary_entry")
    def update_entry(self, entry: OutfitEntry, mood: str | None = None, notes: str | None = None) -> OutfitEntry:
        previous = (entry.mood, entry.notes)
        if mood is not None:
            entry.mood = mood.strip()
        if notes is not None:
            entry.notes = notes
        try:
            self.store.save(entry)
        except StoreWriteFailure:
            entry.mood, entry.notes = previous
            raise
        self._refresh_after_write()
        return entry

    @instrument_operation("delete_diary_entry")
    def delete_entry(self, entry: OutfitEntry) -> bool:
        deleted = self.store.delete(entry)
        self._refresh_after_write()
        return deleted

    def find_entry(self, entry_id: str) -> Optional[OutfitEntry]:
        for entry in self.store.fetch_entries():
            if entry.entry_id == entry_id:
                return entry
        return None

    def mood_distribution(self) -> Dict[str, int]:
        return mood_distribution(self.entries)

    def entries_by_month(self) -> Dict[date, List[OutfitEntry]]:
        return entries_by_month(self.entries)


__all__ = ["DiaryService"]
