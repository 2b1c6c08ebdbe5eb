"""Closet storage abstractions and SQLite implementation."""
from __future__ import annotations

import contextlib
import sqlite3
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from models.garment import Garment, coerce_datetime
from models.outfit import CalendarSlot, OutfitEntry
from models.taxonomy import normalize_color_name

Entity = Garment | OutfitEntry | CalendarSlot


class StoreError(RuntimeError):
    """Base class for persistence failures surfaced to callers."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class StoreReadFailure(StoreError):
    """A query against the closet store failed."""


class StoreWriteFailure(StoreError):
    """A write against the closet store failed and was rolled back."""


@dataclass
class GarmentFilter:
    """Predicate for :meth:`WardrobeStore.fetch`.

    Unset fields do not constrain the query. ``category`` and ``color`` are
    equality matches; ``categories`` and ``garment_ids`` are set membership;
    ``added_after``/``added_before`` form a half-open range on ``date_added``.
    """

    category: Optional[str] = None
    color: Optional[str] = None
    favorite: Optional[bool] = None
    categories: Optional[Sequence[str]] = None
    garment_ids: Optional[Sequence[str]] = None
    added_after: Optional[datetime] = None
    added_before: Optional[datetime] = None


class WardrobeStore:
    """Persistence interface for closet records."""

    def fetch(self, garment_filter: GarmentFilter | None = None) -> List[Garment]:
        raise NotImplementedError

    def get_garment(self, garment_id: str) -> Optional[Garment]:
        raise NotImplementedError

    def fetch_entries(self, mood: str | None = None, limit: int | None = None) -> List[OutfitEntry]:
        raise NotImplementedError

    def fetch_slots(self, start: datetime, end: datetime) -> List[CalendarSlot]:
        raise NotImplementedError

    def save(self, entity: Entity) -> Entity:
        raise NotImplementedError

    def delete(self, entity: Entity) -> bool:
        raise NotImplementedError

    def record_wear(self, garment_ids: Sequence[str], worn_at: datetime) -> None:
        raise NotImplementedError

    def log_outfit(self, entry: OutfitEntry) -> OutfitEntry:
        raise NotImplementedError


def _to_db_time(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _placeholders(values: Sequence[object]) -> str:
    return ", ".join("?" for _ in values)


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store for garments, diary entries and calendar slots.

    Reads open their own connection and may run concurrently. Writes are
    serialised through a per-instance lock and each runs in one transaction.
    """

    def __init__(self, database_path: str | Path = "data/closet.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._write_lock = threading.Lock()
        self._ensure_tables()

    @contextlib.contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    @contextlib.contextmanager
    def _reading(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            with self._connect() as conn:
                yield conn
        except sqlite3.Error as exc:
            raise StoreReadFailure(operation, str(exc)) from exc

    @contextlib.contextmanager
    def _writing(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._write_lock:
            try:
                with self._connect() as conn:
                    yield conn
            except sqlite3.Error as exc:
                raise StoreWriteFailure(operation, str(exc)) from exc

    def _ensure_tables(self) -> None:
        with self._writing("ensure_tables") as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS garments (
                    garment_id TEXT PRIMARY KEY,
                    category TEXT NOT NULL,
                    color TEXT NOT NULL,
                    image BLOB,
                    favorite INTEGER NOT NULL DEFAULT 0,
                    times_worn INTEGER NOT NULL DEFAULT 0 CHECK (times_worn >= 0),
                    last_worn TEXT,
                    date_added TEXT NOT NULL
                );
                CREATE TABLE IF NOT EXISTS outfit_entries (
                    entry_id TEXT PRIMARY KEY,
                    logged_at TEXT NOT NULL,
                    mood TEXT,
                    notes TEXT,
                    image BLOB
                );
                CREATE TABLE IF NOT EXISTS outfit_entry_items (
                    entry_id TEXT NOT NULL REFERENCES outfit_entries(entry_id) ON DELETE CASCADE,
                    garment_id TEXT NOT NULL REFERENCES garments(garment_id) ON DELETE CASCADE,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (entry_id, garment_id)
                );
                CREATE TABLE IF NOT EXISTS calendar_slots (
                    slot_id TEXT PRIMARY KEY,
                    date TEXT NOT NULL,
                    occasion TEXT,
                    notes TEXT
                );
                CREATE TABLE IF NOT EXISTS calendar_slot_items (
                    slot_id TEXT NOT NULL REFERENCES calendar_slots(slot_id) ON DELETE CASCADE,
                    garment_id TEXT NOT NULL REFERENCES garments(garment_id) ON DELETE CASCADE,
                    position INTEGER NOT NULL,
                    PRIMARY KEY (slot_id, garment_id)
                );
                """
            )

    @staticmethod
    def _row_to_garment(row: sqlite3.Row) -> Garment:
        return Garment(
            garment_id=row["garment_id"],
            category=row["category"],
            color=row["color"],
            image=row["image"],
            favorite=bool(row["favorite"]),
            times_worn=row["times_worn"],
            last_worn=coerce_datetime(row["last_worn"]),
            date_added=coerce_datetime(row["date_added"]),
        )

    # Garments

    def fetch(self, garment_filter: GarmentFilter | None = None) -> List[Garment]:
        garment_filter = garment_filter or GarmentFilter()
        clauses: List[str] = []
        params: List[object] = []
        if garment_filter.category is not None:
            clauses.append("category = ?")
            params.append(garment_filter.category)
        if garment_filter.color is not None:
            clauses.append("color = ?")
            params.append(normalize_color_name(garment_filter.color))
        if garment_filter.favorite is not None:
            clauses.append("favorite = ?")
            params.append(int(garment_filter.favorite))
        if garment_filter.categories is not None:
            categories = list(garment_filter.categories)
            if not categories:
                return []
            clauses.append(f"category IN ({_placeholders(categories)})")
            params.extend(categories)
        if garment_filter.garment_ids is not None:
            garment_ids = list(garment_filter.garment_ids)
            if not garment_ids:
                return []
            clauses.append(f"garment_id IN ({_placeholders(garment_ids)})")
            params.extend(garment_ids)
        if garment_filter.added_after is not None:
            clauses.append("date_added >= ?")
            params.append(_to_db_time(garment_filter.added_after))
        if garment_filter.added_before is not None:
            clauses.append("date_added < ?")
            params.append(_to_db_time(garment_filter.added_before))

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = (
            f"SELECT * FROM garments {where} "
            "ORDER BY last_worn IS NOT NULL, last_worn, date_added, garment_id"
        )
        with self._reading("fetch_garments") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_garment(row) for row in rows]

    def get_garment(self, garment_id: str) -> Optional[Garment]:
        with self._reading("get_garment") as conn:
            row = conn.execute("SELECT * FROM garments WHERE garment_id = ?", (garment_id,)).fetchone()
        return self._row_to_garment(row) if row else None

    def _upsert_garment(self, conn: sqlite3.Connection, garment: Garment) -> None:
        # Wear counters are only written on insert; afterwards _apply_wear owns them.
        conn.execute(
            """
            INSERT INTO garments (
                garment_id, category, color, image, favorite, times_worn, last_worn, date_added
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(garment_id) DO UPDATE SET
                category = excluded.category,
                color = excluded.color,
                image = excluded.image,
                favorite = excluded.favorite
            """,
            (
                garment.garment_id,
                garment.category,
                garment.color,
                garment.image,
                int(garment.favorite),
                garment.times_worn,
                _to_db_time(garment.last_worn),
                _to_db_time(garment.date_added),
            ),
        )

    @staticmethod
    def _apply_wear(conn: sqlite3.Connection, operation: str, garment_ids: Sequence[str], worn_at: datetime) -> None:
        unique_ids = list(dict.fromkeys(garment_ids))
        if not unique_ids:
            return
        cursor = conn.execute(
            f"UPDATE garments SET times_worn = times_worn + 1, last_worn = ? "
            f"WHERE garment_id IN ({_placeholders(unique_ids)})",
            [_to_db_time(worn_at), *unique_ids],
        )
        if cursor.rowcount != len(unique_ids):
            raise StoreWriteFailure(
                operation, f"expected {len(unique_ids)} garments, updated {cursor.rowcount}"
            )

    def record_wear(self, garment_ids: Sequence[str], worn_at: datetime) -> None:
        if not garment_ids:
            return
        with self._writing("record_wear") as conn:
            self._apply_wear(conn, "record_wear", garment_ids, worn_at)

    def log_outfit(self, entry: OutfitEntry) -> OutfitEntry:
        """Save a diary entry and wear its garments in one transaction."""

        with self._writing("log_outfit") as conn:
            self._upsert_entry(conn, entry)
            self._apply_wear(conn, "log_outfit", entry.garment_ids, entry.logged_at)
        return entry

    # Diary entries

    def _items_for(
        self, conn: sqlite3.Connection, table: str, key: str, owner_ids: List[str]
    ) -> Dict[str, List[Garment]]:
        grouped: Dict[str, List[Garment]] = {owner_id: [] for owner_id in owner_ids}
        if not owner_ids:
            return grouped
        rows = conn.execute(
            f"SELECT link.{key} AS owner_id, g.* FROM {table} AS link "
            f"JOIN garments AS g ON g.garment_id = link.garment_id "
            f"WHERE link.{key} IN ({_placeholders(owner_ids)}) "
            f"ORDER BY link.{key}, link.position",
            owner_ids,
        ).fetchall()
        for row in rows:
            grouped[row["owner_id"]].append(self._row_to_garment(row))
        return grouped

    def fetch_entries(self, mood: str | None = None, limit: int | None = None) -> List[OutfitEntry]:
        query = "SELECT * FROM outfit_entries"
        params: List[object] = []
        if mood is not None:
            query += " WHERE mood = ?"
            params.append(mood)
        query += " ORDER BY logged_at DESC, entry_id"
        if limit is not None:
            query += " LIMIT ?"
            params.append(int(limit))
        with self._reading("fetch_entries") as conn:
            rows = conn.execute(query, params).fetchall()
            items = self._items_for(
                conn, "outfit_entry_items", "entry_id", [row["entry_id"] for row in rows]
            )
        return [
            OutfitEntry(
                entry_id=row["entry_id"],
                logged_at=coerce_datetime(row["logged_at"]),
                mood=row["mood"] or "",
                notes=row["notes"] or "",
                image=row["image"],
                items=items[row["entry_id"]],
            )
            for row in rows
        ]

    def _upsert_entry(self, conn: sqlite3.Connection, entry: OutfitEntry) -> None:
        conn.execute(
            """
            INSERT INTO outfit_entries (entry_id, logged_at, mood, notes, image)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(entry_id) DO UPDATE SET
                logged_at = excluded.logged_at,
                mood = excluded.mood,
                notes = excluded.notes,
                image = excluded.image
            """,
            (entry.entry_id, _to_db_time(entry.logged_at), entry.mood, entry.notes, entry.image),
        )
        self._replace_links(conn, "outfit_entry_items", "entry_id", entry.entry_id, entry.garment_ids)

    # Calendar slots

    def fetch_slots(self, start: datetime, end: datetime) -> List[CalendarSlot]:
        with self._reading("fetch_slots") as conn:
            rows = conn.execute(
                "SELECT * FROM calendar_slots WHERE date >= ? AND date < ? ORDER BY date, slot_id",
                (_to_db_time(start), _to_db_time(end)),
            ).fetchall()
            items = self._items_for(
                conn, "calendar_slot_items", "slot_id", [row["slot_id"] for row in rows]
            )
        return [
            CalendarSlot(
                slot_id=row["slot_id"],
                date=coerce_datetime(row["date"]),
                occasion=row["occasion"] or "",
                notes=row["notes"] or "",
                planned_items=items[row["slot_id"]],
            )
            for row in rows
        ]

    def _upsert_slot(self, conn: sqlite3.Connection, slot: CalendarSlot) -> None:
        conn.execute(
            """
            INSERT INTO calendar_slots (slot_id, date, occasion, notes)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(slot_id) DO UPDATE SET
                date = excluded.date,
                occasion = excluded.occasion,
                notes = excluded.notes
            """,
            (slot.slot_id, _to_db_time(slot.date), slot.occasion, slot.notes),
        )
        self._replace_links(conn, "calendar_slot_items", "slot_id", slot.slot_id, slot.garment_ids)

    @staticmethod
    def _replace_links(
        conn: sqlite3.Connection, table: str, key: str, owner_id: str, garment_ids: Iterable[str]
    ) -> None:
        conn.execute(f"DELETE FROM {table} WHERE {key} = ?", (owner_id,))
        conn.executemany(
            f"INSERT INTO {table} ({key}, garment_id, position) VALUES (?, ?, ?)",
            [(owner_id, garment_id, position) for position, garment_id in enumerate(garment_ids)],
        )

    # Generic entity operations

    def save(self, entity: Entity) -> Entity:
        if isinstance(entity, Garment):
            upsert = self._upsert_garment
        elif isinstance(entity, OutfitEntry):
            upsert = self._upsert_entry
        elif isinstance(entity, CalendarSlot):
            upsert = self._upsert_slot
        else:
            raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
        with self._writing(f"save_{type(entity).__name__}") as conn:
            upsert(conn, entity)
        return entity

    def delete(self, entity: Entity) -> bool:
        if isinstance(entity, Garment):
            table, key, value = "garments", "garment_id", entity.garment_id
        elif isinstance(entity, OutfitEntry):
            table, key, value = "outfit_entries", "entry_id", entity.entry_id
        elif isinstance(entity, CalendarSlot):
            table, key, value = "calendar_slots", "slot_id", entity.slot_id
        else:
            raise TypeError(f"Unsupported entity type: {type(entity).__name__}")
        with self._writing(f"delete_{type(entity).__name__}") as conn:
            cursor = conn.execute(f"DELETE FROM {table} WHERE {key} = ?", (value,))
            return cursor.rowcount > 0


__all__ = [
    "GarmentFilter",
    "WardrobeStore",
    "SQLiteWardrobeStore",
    "StoreError",
    "StoreReadFailure",
    "StoreWriteFailure",
]
