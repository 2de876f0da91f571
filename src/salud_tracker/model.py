"""Modelos tipados para registros diarios de salud y datos de graficos."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any

OPTIONAL_FIELDS = ["weight", "calories", "steps", "exercise", "duration", "notes"]
INT_FIELDS = ["calories", "steps", "duration"]
TEXT_FIELDS = ["exercise", "notes"]
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class HealthEntry:
    """One user-submitted daily health record."""

    id: str
    date: str
    weight: float | None = None
    calories: int | None = None
    steps: int | None = None
    exercise: str | None = None
    duration: int | None = None
    notes: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict, omitting absent fields."""
        out: dict[str, Any] = {"id": self.id, "date": self.date}
        for name in OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        return out

    @classmethod
    def from_dict(cls, item: Any) -> HealthEntry | None:
        """Build an entry from a decoded JSON object; None if not an entry."""
        if not isinstance(item, dict):
            return None
        entry_id = item.get("id")
        day = item.get("date")
        if not isinstance(entry_id, str) or not isinstance(day, str):
            return None
        return cls(
            id=entry_id,
            date=day,
            weight=_coerce_float(item.get("weight")),
            calories=_coerce_int(item.get("calories")),
            steps=_coerce_int(item.get("steps")),
            exercise=_coerce_text(item.get("exercise")),
            duration=_coerce_int(item.get("duration")),
            notes=_coerce_text(item.get("notes")),
        )


@dataclass(frozen=True)
class WeightPoint:
    """Weight chart point (date-based)."""

    day: date | None
    label: str
    value: float


@dataclass(frozen=True)
class ActivityPoint:
    """Activity chart point; missing metrics are charted as zero."""

    day: date | None
    label: str
    steps: int
    duration: int


@dataclass(frozen=True)
class Stats:
    """Aggregate statistics over the whole collection."""

    avg_weight: str
    total_workouts: int
    avg_steps: int


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if not isinstance(value, (int, float)):
        return None
    try:
        out = float(value)
    except OverflowError:
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def fits_int64(value: int) -> bool:
    """True if the value fits the 64-bit integer columns used for charts."""
    return INT64_MIN <= value <= INT64_MAX


def _coerce_int(value: Any) -> int | None:
    number = _coerce_float(value)
    if number is None:
        return None
    out = int(value) if isinstance(value, int) else int(number)
    return out if fits_int64(out) else None


def _coerce_text(value: Any) -> str | None:
    if not isinstance(value, str) or not value:
        return None
    return value
