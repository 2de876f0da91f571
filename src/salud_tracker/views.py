"""Vistas derivadas: series para graficos y estadisticas agregadas."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

import pandas as pd

from salud_tracker.model import ActivityPoint, HealthEntry, Stats, WeightPoint
from salud_tracker.storage import parse_entry_date

ENTRY_COLUMNS = [
    "id",
    "date",
    "weight",
    "calories",
    "steps",
    "exercise",
    "duration",
    "notes",
]
NO_WEIGHT = "-"
COLUMN_DTYPES = {
    "weight": "Float64",
    "calories": "Int64",
    "steps": "Int64",
    "duration": "Int64",
}


@dataclass(frozen=True)
class Dashboard:
    """Everything the presentation layer renders, computed in one pass."""

    entries: tuple[HealthEntry, ...]
    weight: list[WeightPoint]
    activity: list[ActivityPoint]
    stats: Stats


def entries_to_frame(entries: Sequence[HealthEntry]) -> pd.DataFrame:
    """Convert entries to a DataFrame (store order) with nullable dtypes."""
    columns = {
        name: pd.array(
            [getattr(entry, name) for entry in entries],
            dtype=COLUMN_DTYPES.get(name, "object"),
        )
        for name in ENTRY_COLUMNS
    }
    return pd.DataFrame(columns, columns=ENTRY_COLUMNS)


def chart_label(value: str) -> str:
    """Short axis label ("Jan 03") for a stored yyyy-MM-dd date."""
    day = parse_entry_date(value)
    if day is None:
        return value
    return day.strftime("%b %d")


def weight_series(entries: Sequence[HealthEntry]) -> list[WeightPoint]:
    """Entries with a weight, oldest to newest."""
    df = entries_to_frame(entries)
    df = df[df["weight"].notna()].iloc[::-1]
    return [
        WeightPoint(
            day=parse_entry_date(str(row["date"])),
            label=chart_label(str(row["date"])),
            value=float(row["weight"]),
        )
        for _, row in df.iterrows()
    ]


def activity_series(entries: Sequence[HealthEntry]) -> list[ActivityPoint]:
    """Entries with steps or duration, oldest to newest; gaps charted as 0."""
    df = entries_to_frame(entries)
    mask = df["steps"].notna() | df["duration"].notna()
    df = df.loc[mask].iloc[::-1].copy()
    df["steps"] = df["steps"].fillna(0)
    df["duration"] = df["duration"].fillna(0)
    return [
        ActivityPoint(
            day=parse_entry_date(str(row["date"])),
            label=chart_label(str(row["date"])),
            steps=int(row["steps"]),
            duration=int(row["duration"]),
        )
        for _, row in df.iterrows()
    ]


def compute_stats(entries: Sequence[HealthEntry]) -> Stats:
    """Average weight, workout count and average steps over all entries."""
    df = entries_to_frame(entries)

    weights = df["weight"].dropna()
    avg_weight = (
        _round_half_up(float(weights.mean()), "0.1") if not weights.empty else NO_WEIGHT
    )

    exercise = df["exercise"].astype("string").fillna("")
    total_workouts = int((exercise.str.len() > 0).sum())

    steps = df["steps"].dropna()
    avg_steps = math.floor(float(steps.mean()) + 0.5) if not steps.empty else 0

    return Stats(
        avg_weight=avg_weight,
        total_workouts=total_workouts,
        avg_steps=int(avg_steps),
    )


def weight_domain(series: Sequence[WeightPoint]) -> tuple[float, float] | None:
    """Y axis range for the weight chart: 2 kg of margin on each side."""
    if not series:
        return None
    values = [point.value for point in series]
    return min(values) - 2, max(values) + 2


def build_dashboard(entries: Sequence[HealthEntry]) -> Dashboard:
    return Dashboard(
        entries=tuple(entries),
        weight=weight_series(entries),
        activity=activity_series(entries),
        stats=compute_stats(entries),
    )


def _round_half_up(value: float, quantum: str) -> str:
    """Round like JS toFixed; huge or non-finite values use plain formatting."""
    places = len(quantum.partition(".")[2])
    if not math.isfinite(value):
        return format(value, f".{places}f")
    try:
        rounded = Decimal(value).quantize(Decimal(quantum), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return format(value, f".{places}f")
    return str(rounded)
