from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from salud_tracker.model import HealthEntry
from salud_tracker.storage import EntryStore, SQLiteKeyValueStore, sort_entries


def _store(tmp_path: Path) -> tuple[SQLiteKeyValueStore, EntryStore]:
    kv = SQLiteKeyValueStore(tmp_path / "nested" / "app.sqlite3")
    store = EntryStore(kv)
    store.load()
    return kv, store


def test_key_value_roundtrip_and_upsert(tmp_path: Path) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "kv.sqlite3")
    assert kv.get_item("healthEntries") is None

    kv.set_item("healthEntries", "[]")
    kv.set_item("healthEntries", '[{"id": "1", "date": "2024-01-01"}]')
    assert kv.get_item("healthEntries") == '[{"id": "1", "date": "2024-01-01"}]'

    kv.remove_item("healthEntries")
    kv.remove_item("healthEntries")
    assert kv.get_item("healthEntries") is None


def test_load_empty_when_key_absent(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    assert store.entries == ()


def test_add_keeps_date_descending(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    for entry_id, day in [
        ("1", "2024-01-02"),
        ("2", "2024-03-01"),
        ("3", "2023-12-31"),
        ("4", "2024-01-15"),
    ]:
        store.add(HealthEntry(id=entry_id, date=day))
        dates = [e.date for e in store.entries]
        assert dates == sorted(dates, reverse=True)

    assert [e.id for e in store.entries] == ["2", "4", "1", "3"]


def test_same_date_keeps_insertion_order(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    store.add(HealthEntry(id="a", date="2024-01-01"))
    store.add(HealthEntry(id="b", date="2024-01-01"))
    store.add(HealthEntry(id="c", date="2024-01-02"))
    assert [e.id for e in store.entries] == ["c", "a", "b"]


def test_scenario_stored_order(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    store.add(HealthEntry(id="1", date="2024-01-01", weight=70.0))
    store.add(HealthEntry(id="2", date="2024-01-03", weight=72.0))
    assert [e.date for e in store.entries] == ["2024-01-03", "2024-01-01"]


def test_load_after_add_preserves_all_fields(tmp_path: Path) -> None:
    kv, store = _store(tmp_path)
    entry = HealthEntry(
        id="1704067200000",
        date="2024-01-01",
        weight=70.5,
        calories=2100,
        steps=10234,
        exercise="Running",
        duration=45,
        notes="  felt good ",
    )
    store.add(entry)

    reloaded = EntryStore(kv).load()
    assert reloaded == (entry,)


def test_persisted_json_omits_absent_fields(tmp_path: Path) -> None:
    kv, store = _store(tmp_path)
    store.add(HealthEntry(id="1", date="2024-01-01", steps=0))

    raw = kv.get_item("healthEntries")
    assert raw is not None
    assert json.loads(raw) == [{"id": "1", "date": "2024-01-01", "steps": 0}]


def test_remove_is_idempotent(tmp_path: Path) -> None:
    kv, store = _store(tmp_path)
    store.add(HealthEntry(id="1", date="2024-01-01"))
    store.add(HealthEntry(id="2", date="2024-01-02"))

    assert store.remove("1") is True
    after_first = store.entries
    assert store.remove("1") is False
    assert store.entries == after_first
    assert [e.id for e in EntryStore(kv).load()] == ["2"]


def test_remove_missing_id_is_noop(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    store.add(HealthEntry(id="1", date="2024-01-01"))
    assert store.remove("nope") is False
    assert [e.id for e in store.entries] == ["1"]


def test_add_rejects_duplicate_id(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    store.add(HealthEntry(id="1", date="2024-01-01"))
    with pytest.raises(ValueError):
        store.add(HealthEntry(id="1", date="2024-01-05"))
    assert len(store.entries) == 1


@pytest.mark.parametrize("raw", ["{not json", '{"id": "1"}', "42", '"text"'])
def test_malformed_storage_loads_empty(
    tmp_path: Path, raw: str, caplog: pytest.LogCaptureFixture
) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "app.sqlite3")
    kv.set_item("healthEntries", raw)
    with caplog.at_level(logging.WARNING):
        entries = EntryStore(kv).load()
    assert entries == ()
    assert "starting empty" in caplog.text


def test_malformed_items_are_skipped(tmp_path: Path) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "app.sqlite3")
    payload = [
        {"id": "1", "date": "2024-01-01", "weight": "heavy", "steps": 5000},
        "garbage",
        {"date": "2024-01-02"},
        {"id": "2", "date": "2024-01-03", "calories": True, "duration": 30.7},
        {"id": "2", "date": "2024-01-04"},
    ]
    kv.set_item("healthEntries", json.dumps(payload))

    entries = EntryStore(kv).load()
    assert [e.id for e in entries] == ["2", "1"]
    assert entries[0].calories is None
    assert entries[0].duration == 30
    assert entries[1].weight is None
    assert entries[1].steps == 5000


def test_load_sorts_unsorted_storage(tmp_path: Path) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "app.sqlite3")
    kv.set_item(
        "healthEntries",
        json.dumps(
            [
                {"id": "1", "date": "2024-01-01"},
                {"id": "2", "date": "2024-02-01"},
            ]
        ),
    )
    assert [e.id for e in EntryStore(kv).load()] == ["2", "1"]


def test_custom_key_is_isolated(tmp_path: Path) -> None:
    kv = SQLiteKeyValueStore(tmp_path / "app.sqlite3")
    EntryStore(kv, key="other").add(HealthEntry(id="1", date="2024-01-01"))
    assert EntryStore(kv).load() == ()
    assert len(EntryStore(kv, key="other").load()) == 1


def test_subscribers_notified_on_every_change(tmp_path: Path) -> None:
    _, store = _store(tmp_path)
    seen: list[int] = []
    unsubscribe = store.subscribe(lambda entries: seen.append(len(entries)))

    store.add(HealthEntry(id="1", date="2024-01-01"))
    store.add(HealthEntry(id="2", date="2024-01-02"))
    store.remove("1")
    store.remove("1")
    unsubscribe()
    store.add(HealthEntry(id="3", date="2024-01-03"))

    assert seen == [1, 2, 1, 1]


def test_sort_entries_puts_invalid_dates_last() -> None:
    entries = [
        HealthEntry(id="1", date=""),
        HealthEntry(id="2", date="2024-01-01"),
        HealthEntry(id="3", date="not a date"),
        HealthEntry(id="4", date="2024-05-01"),
    ]
    assert [e.id for e in sort_entries(entries)] == ["4", "2", "1", "3"]


def test_failing_listener_does_not_undo_add(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    kv, store = _store(tmp_path)
    seen: list[int] = []

    def _broken(_entries: tuple[HealthEntry, ...]) -> None:
        raise RuntimeError("render failed")

    store.subscribe(_broken)
    store.subscribe(lambda entries: seen.append(len(entries)))

    with caplog.at_level(logging.ERROR):
        store.add(HealthEntry(id="1", date="2024-01-01"))
        assert store.remove("1") is True

    assert seen == [1, 0]
    assert "listener" in caplog.text
    assert EntryStore(kv).load() == ()
