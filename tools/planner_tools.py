"""Outfit planner service for calendar slots."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence

from models.garment import Garment
from models.outfit import CalendarSlot
from tools.observability import instrument_operation
from tools.reminder_scheduler import ReminderScheduler, event_reminder_id
from tools.wardrobe_store import StoreWriteFailure, WardrobeStore

LOGGER = logging.getLogger(__name__)


def day_bounds(day: date | datetime) -> tuple[datetime, datetime]:
    """Return the half-open ``[start, end)`` range covering one calendar day."""

    if isinstance(day, datetime):
        tzinfo = day.tzinfo or timezone.utc
        start = datetime.combine(day.date(), time.min, tzinfo=tzinfo)
    else:
        start = datetime.combine(day, time.min, tzinfo=timezone.utc)
    return start, start + timedelta(days=1)


class PlannerService:
    """Plan outfits on dates and keep event reminders in step."""

    def __init__(
        self,
        store: WardrobeStore,
        scheduler: Optional[ReminderScheduler] = None,
        reminder_minutes: int = 60,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.reminder_minutes = reminder_minutes

    @instrument_operation("save_calendar_slot")
    def save_slot(
        self,
        date: datetime,
        occasion: str,
        notes: str = "",
        items: Sequence[Garment] = (),
    ) -> CalendarSlot:
        slot = CalendarSlot(date=date, occasion=occasion, notes=notes, planned_items=list(items))
        self.store.save(slot)
        if self.scheduler is not None:
            self.scheduler.schedule_event_reminder(slot, minutes_before=self.reminder_minutes)
        return slot

    def slots_for_date(self, day: date | datetime) -> List[CalendarSlot]:
        start, end = day_bounds(day)
        return self.store.fetch_slots(start, end)

    def slots_between(self, start: datetime, end: datetime) -> List[CalendarSlot]:
        return self.store.fetch_slots(start, end)

    @instrument_operation("assign_outfit_item")
    def assign_item(self, garment: Garment, slot: CalendarSlot) -> CalendarSlot:
        if garment.garment_id in slot.garment_ids:
            return slot
        slot.planned_items.append(garment)
        try:
            self.store.save(slot)
        except StoreWriteFailure:
            slot.planned_items.pop()
            raise
        return slot

    @instrument_operation("delete_calendar_slot")
    def delete_slot(self, slot: CalendarSlot) -> bool:
        deleted = self.store.delete(slot)
        if self.scheduler is not None and self.scheduler.cancel(event_reminder_id(slot)):
            LOGGER.info("Cancelled event reminder for slot %s", slot.slot_id)
        return deleted


__all__ = ["PlannerService", "day_bounds"]
