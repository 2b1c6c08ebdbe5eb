"""Closet, diary and planner service tests."""

from __future__ import annotations

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.recommendation import RecommendationEngine
from models.garment import Garment
from tools.closet_tools import ClosetService
from tools.diary_tools import DiaryService
from tools.planner_tools import PlannerService, day_bounds
from tools.reminder_scheduler import InMemoryReminderScheduler, event_reminder_id
from tools.wardrobe_store import SQLiteWardrobeStore, StoreReadFailure, StoreWriteFailure

EVENT_TIME = datetime(2026, 7, 4, 19, 0, tzinfo=timezone.utc)


@pytest.fixture()
def store(tmp_path: Path) -> SQLiteWardrobeStore:
    return SQLiteWardrobeStore(tmp_path / "services.db")


@pytest.fixture()
def closet(store: SQLiteWardrobeStore) -> ClosetService:
    return ClosetService(store)


def test_add_item_refreshes_snapshot(closet: ClosetService) -> None:
    """New garments appear in the closet snapshot with defaults applied."""

    garment = closet.add_item(category="Tops", color="navy blue", image=b"jpeg")

    assert garment.color == "Navy"
    assert garment.times_worn == 0 and garment.favorite is False
    assert [item.garment_id for item in closet.items] == [garment.garment_id]
    assert closet.last_error is None


def test_filters_narrow_items_and_all_resets(closet: ClosetService) -> None:
    """Category, color and favorites filters combine; "All" clears them."""

    top = closet.add_item(category="Tops", color="Black")
    closet.add_item(category="Bottoms", color="Black")
    closet.add_item(category="Tops", color="White")
    closet.toggle_favorite(top)

    assert len(closet.set_filters(category="Tops")) == 2
    assert [item.garment_id for item in closet.set_filters(color="Black")] == [top.garment_id]
    assert [item.garment_id for item in closet.set_filters(category="All", favorites_only=True)] == [top.garment_id]
    assert len(closet.set_filters(color="All", favorites_only=False)) == 3


def test_toggle_favorite_twice_restores_flag(closet: ClosetService, store: SQLiteWardrobeStore) -> None:
    """Toggling is its own inverse and is persisted each time."""

    garment = closet.add_item(category="Shoes", color="Red")

    assert closet.toggle_favorite(garment) is True
    assert store.get_garment(garment.garment_id).favorite is True
    assert closet.toggle_favorite(garment) is False
    assert store.get_garment(garment.garment_id).favorite is False


def test_failed_write_restores_in_memory_garment(
    closet: ClosetService, store: SQLiteWardrobeStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    """A rejected save leaves the garment exactly as it was."""

    garment = closet.add_item(category="Tops", color="Blue")

    def _failing_save(entity):
        raise StoreWriteFailure("save_Garment", "disk full")

    monkeypatch.setattr(store, "save", _failing_save)

    with pytest.raises(StoreWriteFailure):
        closet.toggle_favorite(garment)
    assert garment.favorite is False

    with pytest.raises(StoreWriteFailure):
        closet.update_item(garment, category="Bottoms", color="Green")
    assert (garment.category, garment.color) == ("Tops", "Blue")


def test_failed_refresh_keeps_last_known_good_items(
    closet: ClosetService, store: SQLiteWardrobeStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Read failures are raised and recorded while the snapshot stays intact."""

    closet.add_item(category="Tops", color="Blue")
    snapshot = list(closet.items)

    def _failing_fetch(garment_filter=None):
        raise StoreReadFailure("fetch_garments", "database is locked")

    monkeypatch.setattr(store, "fetch", _failing_fetch)

    with pytest.raises(StoreReadFailure):
        closet.refresh()
    assert closet.items == snapshot
    assert isinstance(closet.last_error, StoreReadFailure)


def test_update_and_delete_item(closet: ClosetService, store: SQLiteWardrobeStore) -> None:
    """Edits validate colors and deletes remove the garment."""

    garment = closet.add_item(category="Tops", color="Blue")
    closet.update_item(garment, color="grey")
    assert store.get_garment(garment.garment_id).color == "Gray"

    with pytest.raises(ValueError):
        closet.update_item(garment, color="chartreuse")

    assert closet.delete_item(garment) is True
    assert closet.items == []


def test_get_items_resolves_ids_in_order(closet: ClosetService) -> None:
    """Id lookups keep the caller's order and reject unknown ids."""

    first = closet.add_item(category="Tops", color="Blue")
    second = closet.add_item(category="Shoes", color="Black")

    assert [g.garment_id for g in closet.get_items([second.garment_id, first.garment_id])] == [
        second.garment_id,
        first.garment_id,
    ]
    with pytest.raises(KeyError):
        closet.get_items([first.garment_id, "missing"])


def test_closet_statistics_include_diary_history(closet: ClosetService, store: SQLiteWardrobeStore) -> None:
    """Closet statistics combine the snapshot with recent outfits."""

    top = closet.add_item(category="Tops", color="Red")
    bottom = closet.add_item(category="Bottoms", color="Blue")
    DiaryService(store).add_entry(mood="Happy", items=[top, bottom])
    closet.refresh()

    summary = closet.statistics()
    assert summary.total_wear_count == 2
    assert summary.popular_color_combinations[0].colors == ("Blue", "Red")
    assert len(closet.recent_outfits()) == 1


def test_diary_entry_logs_wear_and_refreshes(store: SQLiteWardrobeStore, closet: ClosetService) -> None:
    """Adding an entry counts a wear for each garment and lists the entry."""

    top = closet.add_item(category="Tops", color="Red")
    diary = DiaryService(store)

    entry = diary.add_entry(mood="Confident", notes="Interview", items=[top], image=b"photo")

    assert top.times_worn == 1 and top.last_worn == entry.logged_at
    assert store.get_garment(top.garment_id).times_worn == 1
    assert [e.entry_id for e in diary.entries] == [entry.entry_id]
    assert diary.entries[0].image == b"photo"
    assert diary.mood_distribution() == {"Confident": 1}


def test_diary_entry_with_unsaved_garment_changes_nothing(store: SQLiteWardrobeStore) -> None:
    """A rejected diary write leaves garments and the diary untouched."""

    diary = DiaryService(store)
    ghost = Garment(category="Tops", color="Red")

    with pytest.raises(StoreWriteFailure):
        diary.add_entry(mood="Happy", items=[ghost])

    assert ghost.times_worn == 0
    assert store.fetch_entries() == []


def test_diary_filter_update_and_delete(store: SQLiteWardrobeStore) -> None:
    """Mood filtering, edits and deletes round-trip through the store."""

    diary = DiaryService(store)
    happy = diary.add_entry(mood="Happy", notes="Sunny")
    diary.add_entry(mood="Cozy")

    assert [entry.mood for entry in diary.set_mood_filter("Happy")] == ["Happy"]

    diary.update_entry(happy, notes="Sunny picnic")
    assert diary.find_entry(happy.entry_id).notes == "Sunny picnic"

    assert diary.delete_entry(happy) is True
    assert diary.entries == []
    assert len(diary.set_mood_filter("All")) == 1


def test_planner_saves_slot_and_schedules_reminder(store: SQLiteWardrobeStore, closet: ClosetService) -> None:
    """Planned outfits are queryable by day and get an event reminder."""

    scheduler = InMemoryReminderScheduler()
    planner = PlannerService(store, scheduler=scheduler, reminder_minutes=90)
    dress = closet.add_item(category="Dresses", color="Black")

    slot = planner.save_slot(date=EVENT_TIME, occasion="Party", notes="Rooftop", items=[dress])

    [reminder] = scheduler.pending()
    assert reminder.identifier == event_reminder_id(slot)
    assert reminder.fire_at == EVENT_TIME - timedelta(minutes=90)

    [stored] = planner.slots_for_date(date(2026, 7, 4))
    assert stored.slot_id == slot.slot_id
    assert stored.garment_ids == [dress.garment_id]
    assert planner.slots_for_date(date(2026, 7, 5)) == []


def test_planner_assigns_items_and_cancels_reminder_on_delete(
    store: SQLiteWardrobeStore, closet: ClosetService
) -> None:
    """Assigning is idempotent per garment; deleting clears the reminder."""

    scheduler = InMemoryReminderScheduler()
    planner = PlannerService(store, scheduler=scheduler)
    shoes = closet.add_item(category="Shoes", color="Gold")
    slot = planner.save_slot(date=EVENT_TIME, occasion="Date")

    planner.assign_item(shoes, slot)
    planner.assign_item(shoes, slot)
    [stored] = planner.slots_for_date(EVENT_TIME)
    assert stored.garment_ids == [shoes.garment_id]

    assert planner.delete_slot(slot) is True
    assert scheduler.pending() == []
    assert planner.slots_for_date(EVENT_TIME) == []


def test_day_bounds_cover_a_single_day() -> None:
    """Dates map to midnight-to-midnight UTC ranges."""

    start, end = day_bounds(date(2026, 2, 28))
    assert start == datetime(2026, 2, 28, tzinfo=timezone.utc)
    assert end - start == timedelta(days=1)


def test_stale_garment_edits_keep_committed_wears(closet: ClosetService, store: SQLiteWardrobeStore) -> None:
    """Favorite and field edits from an old snapshot never roll back wear counts."""

    closet.add_item(category="Tops", color="Blue")
    stale = closet.items[0]
    RecommendationEngine(store).wear_outfit([store.get_garment(stale.garment_id)])
    assert store.get_garment(stale.garment_id).times_worn == 1

    closet.toggle_favorite(stale)
    closet.update_item(stale, color="Red")

    saved = store.get_garment(stale.garment_id)
    assert saved.times_worn == 1
    assert saved.last_worn is not None
    assert (saved.favorite, saved.color) == (True, "Red")
    assert closet.items[0].times_worn == 1
