"""Persistencia SQLite clave/valor y coleccion de registros de salud."""

from __future__ import annotations

import json
import logging
import sqlite3
from collections.abc import Callable, Iterable
from datetime import date
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser

from salud_tracker.config import DEFAULT_STORAGE_KEY
from salud_tracker.model import HealthEntry

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS local_storage (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

Listener = Callable[[tuple[HealthEntry, ...]], None]


class SQLiteKeyValueStore:
    """Almacenamiento clave/valor persistente (equivalente a localStorage)."""

    def __init__(self, db_path: Path) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def get_item(self, key: str) -> str | None:
        """Devuelve el valor guardado o None si la clave no existe."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM local_storage WHERE key = ?", (key,)
            ).fetchone()
        if row is None:
            return None
        return str(row["value"])

    def set_item(self, key: str, value: str) -> None:
        """Guarda el valor (upsert) y confirma de inmediato."""
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO local_storage(key, value) VALUES(?, ?)
                ON CONFLICT(key) DO UPDATE SET value=excluded.value
                """,
                (key, value),
            )
            conn.commit()

    def remove_item(self, key: str) -> None:
        """Borra la clave; no falla si no existe."""
        with self._connect() as conn:
            conn.execute("DELETE FROM local_storage WHERE key = ?", (key,))
            conn.commit()


class EntryStore:
    """Coleccion de HealthEntry ordenada por fecha descendente.

    Every mutation is written through to the key/value store immediately,
    as a JSON array under a single key.
    """

    def __init__(
        self,
        storage: SQLiteKeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._key = key
        self._entries: list[HealthEntry] = []
        self._listeners: list[Listener] = []

    @property
    def entries(self) -> tuple[HealthEntry, ...]:
        """Current collection, newest first."""
        return tuple(self._entries)

    def ids(self) -> set[str]:
        return {entry.id for entry in self._entries}

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def load(self) -> tuple[HealthEntry, ...]:
        """Lee la coleccion persistida; datos ausentes o corruptos -> vacia."""
        raw = self._storage.get_item(self._key)
        self._entries = sort_entries(_parse_entries(raw, self._key))
        logger.debug("Loaded %d entries from key %r", len(self._entries), self._key)
        self._notify()
        return self.entries

    def add(self, entry: HealthEntry) -> None:
        """Append, re-sort by date descending and persist.

        Raises:
            ValueError: If an entry with the same id is already stored.
        """
        if entry.id in self.ids():
            raise ValueError(f"Duplicate entry id: {entry.id}")
        self._entries = sort_entries([*self._entries, entry])
        self._persist()
        logger.info("Added entry %s for %s", entry.id, entry.date)
        self._notify()

    def remove(self, entry_id: str) -> bool:
        """Remove the entry with that id; missing ids are a no-op.

        Returns:
            True if an entry was removed.
        """
        kept = [entry for entry in self._entries if entry.id != entry_id]
        removed = len(kept) != len(self._entries)
        self._entries = kept
        self._persist()
        if removed:
            logger.info("Removed entry %s", entry_id)
        else:
            logger.debug("No entry with id %s to remove", entry_id)
        self._notify()
        return removed

    def _persist(self) -> None:
        payload = json.dumps([entry.to_dict() for entry in self._entries])
        self._storage.set_item(self._key, payload)

    def _notify(self) -> None:
        # The mutation is already persisted; a failing listener must not undo it.
        snapshot = self.entries
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Entry listener %r failed", listener)


def sort_entries(entries: Iterable[HealthEntry]) -> list[HealthEntry]:
    """Sort newest first; entries sharing a date keep insertion order."""
    return sorted(entries, key=lambda e: _date_key(e.date), reverse=True)


def parse_entry_date(value: str) -> date | None:
    """Parse a stored yyyy-MM-dd date; None if it is not a date."""
    if not value or not value.strip():
        return None
    try:
        return date_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        return None


def _date_key(value: str) -> date:
    parsed = parse_entry_date(value)
    return parsed if parsed is not None else date.min


def _parse_entries(raw: str | None, key: str) -> list[HealthEntry]:
    if raw is None:
        return []
    try:
        parsed: Any = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Stored value for %r is not valid JSON; starting empty", key)
        return []
    if not isinstance(parsed, list):
        logger.warning("Stored value for %r is not a JSON array; starting empty", key)
        return []

    out: list[HealthEntry] = []
    seen: set[str] = set()
    for item in parsed:
        entry = HealthEntry.from_dict(item)
        if entry is None:
            logger.warning("Skipping malformed stored entry: %r", item)
            continue
        if entry.id in seen:
            logger.warning("Skipping stored entry with duplicate id %s", entry.id)
            continue
        seen.add(entry.id)
        out.append(entry)
    return out
