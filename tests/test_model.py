from __future__ import annotations

from salud_tracker.model import HealthEntry


def test_to_dict_omits_absent_fields() -> None:
    entry = HealthEntry(id="1", date="2024-01-01", weight=70.5, exercise="Gym")
    assert entry.to_dict() == {
        "id": "1",
        "date": "2024-01-01",
        "weight": 70.5,
        "exercise": "Gym",
    }


def test_from_dict_coerces_numbers() -> None:
    entry = HealthEntry.from_dict(
        {"id": "1", "date": "2024-01-01", "weight": 70, "steps": 8000.0}
    )
    assert entry is not None
    assert entry.weight == 70.0
    assert isinstance(entry.weight, float)
    assert entry.steps == 8000
    assert isinstance(entry.steps, int)


def test_from_dict_drops_invalid_values() -> None:
    entry = HealthEntry.from_dict(
        {
            "id": "1",
            "date": "2024-01-01",
            "weight": "70",
            "calories": False,
            "exercise": "",
            "notes": 5,
        }
    )
    assert entry == HealthEntry(id="1", date="2024-01-01")


def test_from_dict_rejects_non_entries() -> None:
    assert HealthEntry.from_dict(["1", "2024-01-01"]) is None
    assert HealthEntry.from_dict({"id": 1, "date": "2024-01-01"}) is None
    assert HealthEntry.from_dict({"id": "1"}) is None


def test_from_dict_drops_out_of_range_integers() -> None:
    entry = HealthEntry.from_dict(
        {
            "id": "1",
            "date": "2024-01-01",
            "steps": 99999999999999999999,
            "calories": 1e30,
            "duration": 10**400,
            "weight": 10**400,
        }
    )
    assert entry == HealthEntry(id="1", date="2024-01-01")
