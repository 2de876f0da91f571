"""Borrador del formulario de carga y conversion de texto a HealthEntry."""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, fields
from datetime import datetime

from dateutil import tz

from salud_tracker.model import HealthEntry, fits_int64

DATE_FORMAT = "%Y-%m-%d"

_FLOAT_PREFIX = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INT_PREFIX = re.compile(r"[+-]?[0-9]+")


@dataclass
class EntryDraft:
    """In-progress form values, all kept as raw text."""

    date: str
    weight: str = ""
    calories: str = ""
    steps: str = ""
    exercise: str = ""
    duration: str = ""
    notes: str = ""

    @classmethod
    def blank(cls, day: str) -> EntryDraft:
        return cls(date=day)

    def reset(self, day: str) -> None:
        """Vuelve a los valores por defecto (fecha = hoy, resto vacio)."""
        for item in fields(self):
            setattr(self, item.name, "")
        self.date = day

    def update(self, field_name: str, value: str) -> None:
        """Set one raw field value.

        Raises:
            KeyError: If the draft has no such field.
        """
        if field_name not in self.field_names():
            raise KeyError(field_name)
        setattr(self, field_name, value)

    @staticmethod
    def field_names() -> list[str]:
        return [item.name for item in fields(EntryDraft)]


def local_now(tzname: str | None = None) -> datetime:
    """Current time in the configured zone (local zone when unset)."""
    zone = tz.gettz(tzname) if tzname else tz.tzlocal()
    return datetime.now(tz=zone)


def today(tzname: str | None = None) -> str:
    """Fecha actual como yyyy-MM-dd."""
    return local_now(tzname).strftime(DATE_FORMAT)


def parse_float(text: str) -> float | None:
    """Leading numeric prefix as float, or None if there is none."""
    match = _FLOAT_PREFIX.match(text.lstrip())
    if match is None:
        return None
    value = float(match.group(0))
    if math.isinf(value):
        return None
    return value


def parse_int(text: str) -> int | None:
    """Leading integer prefix; fractional input is truncated ("30.9" -> 30).

    Values outside the 64-bit range are treated as absent.
    """
    match = _INT_PREFIX.match(text.lstrip())
    if match is None:
        return None
    value = int(match.group(0))
    return value if fits_int64(value) else None


def parse_text(text: str) -> str | None:
    """Texto vacio (o solo espacios) -> None; si no, se guarda tal cual."""
    if not text.strip():
        return None
    return text


def make_entry_id(now: datetime, taken_ids: Iterable[str] = ()) -> str:
    """Id from the creation time in epoch milliseconds, bumped until unique."""
    taken = set(taken_ids)
    millis = int(now.timestamp() * 1000)
    while str(millis) in taken:
        millis += 1
    return str(millis)


def submit_draft(
    draft: EntryDraft,
    *,
    now: datetime,
    taken_ids: Iterable[str] = (),
) -> HealthEntry:
    """Convert the draft into a new entry.

    Never rejects a submission: unparseable numbers and empty text become
    absent fields.
    """
    return HealthEntry(
        id=make_entry_id(now, taken_ids),
        date=draft.date,
        weight=parse_float(draft.weight),
        calories=parse_int(draft.calories),
        steps=parse_int(draft.steps),
        exercise=parse_text(draft.exercise),
        duration=parse_int(draft.duration),
        notes=parse_text(draft.notes),
    )
