"""Closet service wrapping store operations with filter state and snapshots."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import List, Optional

from closet_app.logging_config import get_logger, log_event
from logic.statistics import WardrobeSummary, summarize_wardrobe
from models.garment import Garment
from models.outfit import OutfitEntry
from models.taxonomy import ALL_FILTER, is_filter_wildcard, normalize_color_name, validate_category, validate_color
from tools.observability import instrument_operation
from tools.wardrobe_store import GarmentFilter, StoreReadFailure, StoreWriteFailure, WardrobeStore

LOGGER = get_logger(__name__)


class ClosetService:
    """Filterable closet view backed by a :class:`WardrobeStore`.

    ``items`` always holds the last snapshot successfully read from the store.
    A failed read leaves it untouched, records the error in ``last_error`` and
    re-raises. A failed write restores the in-memory garment to its previous
    value before re-raising.
    """

    def __init__(
        self,
        store: WardrobeStore,
        unworn_days: int = 30,
        top_items_limit: int = 5,
        color_history_limit: int = 50,
        recent_outfits_limit: int = 5,
    ) -> None:
        self.store = store
        self.unworn_days = unworn_days
        self.top_items_limit = top_items_limit
        self.color_history_limit = color_history_limit
        self.recent_outfits_limit = recent_outfits_limit
        self.selected_category = ALL_FILTER
        self.selected_color = ALL_FILTER
        self.show_favorites_only = False
        self.items: List[Garment] = []
        self.last_error: Optional[Exception] = None
        self._state_lock = threading.Lock()

    def current_filter(self) -> GarmentFilter:
        return GarmentFilter(
            category=None if is_filter_wildcard(self.selected_category) else self.selected_category,
            color=None if is_filter_wildcard(self.selected_color) else normalize_color_name(self.selected_color),
            favorite=True if self.show_favorites_only else None,
        )

    @instrument_operation("refresh_closet")
    def refresh(self) -> List[Garment]:
        try:
            items = self.store.fetch(self.current_filter())
        except StoreReadFailure as exc:
            with self._state_lock:
                self.last_error = exc
            log_event(LOGGER, logging.ERROR, "closet_refresh_failed", kept_items=len(self.items))
            raise
        with self._state_lock:
            self.items = items
            self.last_error = None
        return items

    def _refresh_after_write(self) -> None:
        """Refresh after a committed write; a failed read keeps the old snapshot."""

        try:
            self.refresh()
        except StoreReadFailure as exc:
            LOGGER.warning("Write committed but closet refresh failed, keeping previous snapshot: %s", exc)

    def set_filters(
        self,
        category: str | None = None,
        color: str | None = None,
        favorites_only: bool | None = None,
    ) -> List[Garment]:
        if category is not None:
            self.selected_category = category
        if color is not None:
            self.selected_color = color
        if favorites_only is not None:
            self.show_favorites_only = favorites_only
        return self.refresh()

    def get_item(self, garment_id: str) -> Optional[Garment]:
        return self.store.get_garment(garment_id)

    def get_items(self, garment_ids: List[str]) -> List[Garment]:
        """Resolve ids to garments, preserving the requested order."""

        found = {garment.garment_id: garment for garment in self.store.fetch(GarmentFilter(garment_ids=garment_ids))}
        missing = [garment_id for garment_id in garment_ids if garment_id not in found]
        if missing:
            raise KeyError(f"Unknown garment ids: {missing}")
        return [found[garment_id] for garment_id in dict.fromkeys(garment_ids)]

    @instrument_operation("add_closet_item")
    def add_item(self, category: str, color: str, image: bytes | None = None) -> Garment:
        garment = Garment(category=category, color=color, image=image)
        self.store.save(garment)
        self._refresh_after_write()
        return garment

    @instrument_operation("update_closet_item")
    def update_item(self, garment: Garment, category: str | None = None, color: str | None = None) -> Garment:
        new_category = validate_category(category) if category is not None else garment.category
        new_color = validate_color(color) if color is not None else garment.color
        previous = (garment.category, garment.color)
        garment.category, garment.color = new_category, new_color
        try:
            self.store.save(garment)
        except StoreWriteFailure:
            garment.category, garment.color = previous
            raise
        self._refresh_after_write()
        return garment

    @instrument_operation("delete_closet_item")
    def delete_item(self, garment: Garment) -> bool:
        deleted = self.store.delete(garment)
        self._refresh_after_write()
        return deleted

    @instrument_operation("toggle_favorite")
    def toggle_favorite(self, garment: Garment) -> bool:
        garment.favorite = not garment.favorite
        try:
            self.store.save(garment)
        except StoreWriteFailure:
            garment.favorite = not garment.favorite
            raise
        self._refresh_after_write()
        return garment.favorite

    def recent_outfits(self, limit: int | None = None) -> List[OutfitEntry]:
        return self.store.fetch_entries(limit=limit or self.recent_outfits_limit)

    def statistics(self, now: datetime | None = None) -> WardrobeSummary:
        """Summarise the current snapshot together with recent diary history."""

        entries = self.store.fetch_entries(limit=self.color_history_limit)
        return summarize_wardrobe(
            list(self.items),
            entries,
            now=now,
            unworn_days=self.unworn_days,
            top_limit=self.top_items_limit,
            color_history_limit=self.color_history_limit,
        )


__all__ = ["ClosetService"]
