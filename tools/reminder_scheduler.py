"""Reminder scheduling abstractions and an in-memory implementation."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from models.outfit import CalendarSlot

LOGGER = logging.getLogger(__name__)

DAILY_OUTFIT_REMINDER_ID = "dailyOutfit"
LAUNDRY_REMINDER_ID = "laundryDay"


@dataclass(frozen=True)
class Reminder:
    """A pending reminder. Recurring reminders carry a schedule, one-off ones a fire time."""

    identifier: str
    title: str
    body: str
    fire_at: Optional[datetime] = None
    hour: Optional[int] = None
    minute: Optional[int] = None
    weekday: Optional[int] = None

    @property
    def repeats(self) -> bool:
        return self.fire_at is None


def event_reminder_id(slot: CalendarSlot) -> str:
    return f"event-{slot.slot_id}"


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


class ReminderScheduler(ABC):
    """Schedules reminders keyed by identifier; delivery is left to the platform."""

    @abstractmethod
    def schedule(self, reminder: Reminder) -> Reminder:
        """Register a reminder, replacing any pending one with the same identifier."""

    @abstractmethod
    def cancel(self, identifier: str) -> bool:
        """Remove a pending reminder. Returns ``True`` if one was removed."""

    @abstractmethod
    def cancel_all(self) -> None:
        """Remove every pending reminder."""

    @abstractmethod
    def pending(self) -> List[Reminder]:
        """Return pending reminders."""

    def schedule_daily_outfit_reminder(self, hour: int, minute: int) -> Reminder:
        _check_range("hour", hour, 0, 23)
        _check_range("minute", minute, 0, 59)
        return self.schedule(
            Reminder(
                identifier=DAILY_OUTFIT_REMINDER_ID,
                title="Time to Plan Your Outfit!",
                body="Check your closet and plan today's outfit.",
                hour=hour,
                minute=minute,
            )
        )

    def schedule_laundry_reminder(self, weekday: int, hour: int) -> Reminder:
        """Weekly laundry reminder; ``weekday`` is 1 (Sunday) through 7 (Saturday)."""

        _check_range("weekday", weekday, 1, 7)
        _check_range("hour", hour, 0, 23)
        return self.schedule(
            Reminder(
                identifier=LAUNDRY_REMINDER_ID,
                title="Laundry Day Reminder",
                body="Time to do laundry so your favorite outfits are ready.",
                hour=hour,
                minute=0,
                weekday=weekday,
            )
        )

    def schedule_event_reminder(self, slot: CalendarSlot, minutes_before: int = 60) -> Reminder:
        if minutes_before < 0:
            raise ValueError("minutes_before must be non-negative")
        return self.schedule(
            Reminder(
                identifier=event_reminder_id(slot),
                title=f"Outfit Ready for {slot.occasion or 'your event'}?",
                body="Your planned outfit is waiting. Time to get dressed!",
                fire_at=slot.date - timedelta(minutes=minutes_before),
            )
        )


class InMemoryReminderScheduler(ReminderScheduler):
    """Process-local scheduler for local runs and tests."""

    def __init__(self) -> None:
        self._reminders: Dict[str, Reminder] = {}
        self._lock = threading.Lock()

    def schedule(self, reminder: Reminder) -> Reminder:
        with self._lock:
            self._reminders[reminder.identifier] = reminder
        LOGGER.info("Scheduled reminder", extra={"reminder_id": reminder.identifier})
        return reminder

    def cancel(self, identifier: str) -> bool:
        with self._lock:
            removed = self._reminders.pop(identifier, None)
        return removed is not None

    def cancel_all(self) -> None:
        with self._lock:
            self._reminders.clear()

    def pending(self) -> List[Reminder]:
        with self._lock:
            return list(self._reminders.values())


__all__ = [
    "Reminder",
    "ReminderScheduler",
    "InMemoryReminderScheduler",
    "event_reminder_id",
    "DAILY_OUTFIT_REMINDER_ID",
    "LAUNDRY_REMINDER_ID",
]
