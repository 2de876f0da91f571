"""Estado de la sesion de la app: pestaña activa, borrador y coleccion."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum

from salud_tracker.form import EntryDraft, local_now, submit_draft, today
from salud_tracker.model import HealthEntry
from salud_tracker.storage import EntryStore
from salud_tracker.views import Dashboard, build_dashboard

logger = logging.getLogger(__name__)


class Tab(str, Enum):
    """Display modes; any tab can be selected from any other."""

    LOG = "log"
    WEIGHT = "weight"
    ACTIVITY = "activity"


class TrackerSession:
    """Presentation-independent state behind the Kivy widgets."""

    def __init__(self, store: EntryStore, tzname: str | None = None) -> None:
        self.store = store
        self.tzname = tzname
        self.tab = Tab.LOG
        self.draft = EntryDraft.blank(today(tzname))

    def start(self) -> Dashboard:
        """Load the persisted collection once, at startup."""
        self.store.load()
        logger.info("Session started with %d entries", len(self.store.entries))
        return self.dashboard()

    def select_tab(self, tab: Tab | str) -> Tab:
        self.tab = Tab(tab)
        return self.tab

    def update_draft(self, field_name: str, value: str) -> None:
        self.draft.update(field_name, value)

    def save_draft(self, now: datetime | None = None) -> HealthEntry:
        """Store the draft as a new entry and reset the form."""
        moment = now if now is not None else local_now(self.tzname)
        entry = submit_draft(self.draft, now=moment, taken_ids=self.store.ids())
        self.store.add(entry)
        self.draft.reset(today(self.tzname))
        return entry

    def delete_entry(self, entry_id: str) -> bool:
        return self.store.remove(entry_id)

    def dashboard(self) -> Dashboard:
        """Fresh derived views for the current collection."""
        return build_dashboard(self.store.entries)
