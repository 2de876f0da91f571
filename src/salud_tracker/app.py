"""App Kivy con pestañas: registro diario, grafico de peso y de actividad."""

from __future__ import annotations

import logging
from collections.abc import Callable

from salud_tracker.charts import axis_ticks, format_tick, scale_points, value_domain
from salud_tracker.config import AppConfig
from salud_tracker.model import HealthEntry, Stats
from salud_tracker.session import Tab, TrackerSession
from salud_tracker.storage import EntryStore, SQLiteKeyValueStore, parse_entry_date
from salud_tracker.views import Dashboard, weight_domain

logger = logging.getLogger(__name__)

FORM_FIELDS = [
    ("date", "Fecha", None),
    ("weight", "Peso (kg)", "float"),
    ("calories", "Calorias", "int"),
    ("steps", "Pasos", "int"),
    ("exercise", "Ejercicio", None),
    ("duration", "Duracion (min)", "int"),
    ("notes", "Notas", None),
]
TAB_TITLES = {
    Tab.LOG: "Registrar",
    Tab.WEIGHT: "Peso",
    Tab.ACTIVITY: "Actividad",
}
WEIGHT_COLOR = "#4f46e5"
STEPS_COLOR = "#ea580c"
DURATION_COLOR = "#16a34a"
CHART_MARGIN = 36
EMPTY_ENTRIES = "Sin registros todavia. Empeza a registrar!"
EMPTY_WEIGHT = "Sin datos de peso todavia. Agrega algunos registros!"
EMPTY_ACTIVITY = "Sin datos de actividad todavia. Agrega algunos registros!"


def run_app(config: AppConfig) -> int:
    """Lanza la app Kivy."""
    from kivy.app import App
    from kivy.clock import Clock
    from kivy.core.text import Label as CoreLabel
    from kivy.core.window import Window
    from kivy.graphics import Color, Line, Rectangle
    from kivy.uix.boxlayout import BoxLayout
    from kivy.uix.button import Button
    from kivy.uix.gridlayout import GridLayout
    from kivy.uix.label import Label
    from kivy.uix.scrollview import ScrollView
    from kivy.uix.tabbedpanel import TabbedPanel, TabbedPanelItem
    from kivy.uix.textinput import TextInput
    from kivy.uix.widget import Widget
    from kivy.utils import escape_markup, get_color_from_hex

    class LineChart(Widget):
        """Single-series line chart drawn on the widget canvas."""

        def __init__(self, color: str, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self._color = get_color_from_hex(color)
            self._labels: list[str] = []
            self._values: list[float] = []
            self._domain: tuple[float, float] | None = None
            self.bind(pos=self._redraw, size=self._redraw)

        def set_series(
            self,
            labels: list[str],
            values: list[float],
            domain: tuple[float, float] | None = None,
        ) -> None:
            self._labels = labels
            self._values = values
            self._domain = domain
            self._redraw()

        def _redraw(self, *_args: object) -> None:
            self.canvas.clear()
            if not self._values:
                return
            left = self.x + CHART_MARGIN
            bottom = self.y + CHART_MARGIN
            width = max(self.width - 2 * CHART_MARGIN, 1)
            height = max(self.height - 2 * CHART_MARGIN, 1)
            domain = value_domain(self._values, self._domain)
            span = domain[1] - domain[0]

            with self.canvas:
                Color(0.85, 0.85, 0.85, 1)
                for tick in axis_ticks(domain):
                    y = bottom + height * (tick - domain[0]) / span
                    Line(points=[left, y, left + width, y], width=1)
                    self._draw_text(format_tick(tick), self.x + 2, y - 8)

                points = scale_points(self._values, width, height, domain)
                shifted: list[float] = []
                for index in range(0, len(points), 2):
                    shifted.extend([left + points[index], bottom + points[index + 1]])
                Color(*self._color)
                if len(shifted) > 2:
                    Line(points=shifted, width=2)
                for index in range(0, len(shifted), 2):
                    Line(circle=(shifted[index], shifted[index + 1], 3), width=1.5)

                for label, index in zip(self._labels, range(0, len(shifted), 2)):
                    self._draw_text(label, shifted[index] - 18, self.y + 6)

        def _draw_text(self, text: str, x: float, y: float) -> None:
            core = CoreLabel(text=text, font_size=12)
            core.refresh()
            Color(0.3, 0.3, 0.3, 1)
            Rectangle(texture=core.texture, pos=(x, y), size=core.texture.size)

    class SaludTrackerApp(App):
        """Main Kivy app."""

        def __init__(self, **kwargs: object) -> None:
            super().__init__(**kwargs)
            self.app_config = config
            storage = SQLiteKeyValueStore(config.db_path)
            self.session = TrackerSession(
                EntryStore(storage, key=config.storage_key),
                tzname=config.timezone,
            )
            self.inputs: dict[str, TextInput] = {}
            self.stat_labels: dict[str, Label] = {}
            self.status: Label | None = None
            self.entries_grid: GridLayout | None = None
            self.weight_box: BoxLayout | None = None
            self.activity_box: BoxLayout | None = None
            self.weight_chart = LineChart(WEIGHT_COLOR)
            self.steps_chart = LineChart(STEPS_COLOR)
            self.duration_chart = LineChart(DURATION_COLOR)
            self._tab_items: dict[TabbedPanelItem, Tab] = {}

        def build(self) -> BoxLayout:
            self.title = "Salud Tracker"
            Window.bind(on_key_down=self._on_key_down)

            root = BoxLayout(orientation="vertical", spacing=8, padding=10)
            root.add_widget(
                Label(
                    text="Salud Tracker: registro diario de peso y actividad.",
                    size_hint_y=None,
                    height=36,
                )
            )

            stats_row = BoxLayout(
                orientation="horizontal",
                spacing=8,
                size_hint_y=None,
                height=48,
            )
            for key in ["avg_weight", "total_workouts", "avg_steps"]:
                label = Label(text="", halign="center")
                self.stat_labels[key] = label
                stats_row.add_widget(label)
            root.add_widget(stats_row)

            panel = TabbedPanel(do_default_tab=False)
            log_item = self._add_tab(panel, Tab.LOG, self._build_log_tab())
            self.weight_box = BoxLayout(orientation="vertical", padding=8)
            self._add_tab(panel, Tab.WEIGHT, self.weight_box)
            self.activity_box = BoxLayout(orientation="vertical", padding=8, spacing=8)
            self._add_tab(panel, Tab.ACTIVITY, self.activity_box)
            panel.bind(current_tab=self._on_tab_change)
            Clock.schedule_once(lambda *_args: panel.switch_to(log_item))
            root.add_widget(panel)

            self.status = Label(text="", size_hint_y=None, height=30)
            root.add_widget(self.status)

            self.session.store.subscribe(lambda _entries: self._render())
            try:
                self.session.start()
            except Exception as exc:
                self._show_error("cargar", exc)
            return root

        def _add_tab(
            self, panel: TabbedPanel, tab: Tab, content: Widget
        ) -> TabbedPanelItem:
            item = TabbedPanelItem(text=TAB_TITLES[tab])
            item.add_widget(content)
            panel.add_widget(item)
            self._tab_items[item] = tab
            return item

        def _build_log_tab(self) -> BoxLayout:
            content = BoxLayout(orientation="horizontal", spacing=10, padding=8)

            form = BoxLayout(orientation="vertical", spacing=6)
            form.add_widget(Label(text="Nuevo registro", size_hint_y=None, height=30))
            grid = GridLayout(cols=2, spacing=4, size_hint_y=None)
            grid.bind(minimum_height=grid.setter("height"))
            for field_name, title, input_filter in FORM_FIELDS:
                multiline = field_name == "notes"
                height = 90 if multiline else 34
                grid.add_widget(
                    Label(text=title, size_hint_x=0.35, size_hint_y=None, height=height)
                )
                inp = TextInput(
                    text=getattr(self.session.draft, field_name),
                    multiline=multiline,
                    input_filter=input_filter,
                    size_hint_y=None,
                    height=height,
                )
                inp.bind(text=self._make_draft_setter(field_name))
                self.inputs[field_name] = inp
                grid.add_widget(inp)
            form.add_widget(grid)
            save_btn = Button(text="Guardar registro", size_hint_y=None, height=44)
            save_btn.bind(on_press=self._on_save)
            form.add_widget(save_btn)
            form.add_widget(Widget())
            content.add_widget(form)

            recent = BoxLayout(orientation="vertical", spacing=6)
            recent.add_widget(
                Label(text="Registros recientes", size_hint_y=None, height=30)
            )
            self.entries_grid = GridLayout(cols=1, spacing=6, size_hint_y=None)
            self.entries_grid.bind(minimum_height=self.entries_grid.setter("height"))
            scroll = ScrollView()
            scroll.add_widget(self.entries_grid)
            recent.add_widget(scroll)
            content.add_widget(recent)
            return content

        def _make_draft_setter(
            self, field_name: str
        ) -> Callable[[TextInput, str], None]:
            def setter(_instance: TextInput, value: str) -> None:
                self.session.update_draft(field_name, value)

            return setter

        def _on_key_down(
            self,
            _window: object,
            keycode: int,
            _scancode: int,
            _text: str,
            _modifiers: list[str],
        ) -> bool:
            # Esc: salir de fullscreen o cerrar app.
            if keycode != 27:
                return False
            if Window.fullscreen:
                Window.fullscreen = False
            else:
                self.stop()
            return True

        def _on_tab_change(self, _panel: TabbedPanel, item: TabbedPanelItem) -> None:
            tab = self._tab_items.get(item)
            if tab is not None:
                self.session.select_tab(tab)

        def _on_save(self, _: object) -> None:
            try:
                entry = self.session.save_draft()
            except Exception as exc:
                self._show_error("guardar", exc)
                return
            self._sync_inputs()
            if self.status is not None:
                self.status.text = f"Registro guardado: {format_entry_title(entry)}"

        def _on_delete(self, entry_id: str) -> None:
            try:
                removed = self.session.delete_entry(entry_id)
            except Exception as exc:
                self._show_error("borrar", exc)
                return
            if self.status is not None:
                self.status.text = "Registro borrado." if removed else ""

        def _sync_inputs(self) -> None:
            for field_name, inp in self.inputs.items():
                inp.text = getattr(self.session.draft, field_name)

        def _render(self) -> None:
            dashboard = self.session.dashboard()
            self._render_stats(dashboard.stats)
            self._render_entries(dashboard)
            self._render_weight(dashboard)
            self._render_activity(dashboard)

        def _render_stats(self, stats: Stats) -> None:
            for key, text in format_stats(stats).items():
                self.stat_labels[key].text = text

        def _render_entries(self, dashboard: Dashboard) -> None:
            if self.entries_grid is None:
                return
            self.entries_grid.clear_widgets()
            if not dashboard.entries:
                self.entries_grid.add_widget(
                    Label(text=EMPTY_ENTRIES, size_hint_y=None, height=60)
                )
                return
            for entry in dashboard.entries:
                self.entries_grid.add_widget(self._entry_card(entry))

        def _entry_card(self, entry: HealthEntry) -> BoxLayout:
            details = [escape_markup(line) for line in format_entry_details(entry)]
            lines = len(details) + (1 if entry.notes else 0)
            card = BoxLayout(
                orientation="vertical",
                size_hint_y=None,
                height=40 + 22 * max(lines, 1),
            )
            title_row = BoxLayout(orientation="horizontal", size_hint_y=None, height=36)
            title_row.add_widget(Label(text=format_entry_title(entry), bold=True))
            delete_btn = Button(text="Borrar", size_hint_x=0.25)
            delete_btn.bind(
                on_press=lambda *_args, entry_id=entry.id: self._on_delete(entry_id)
            )
            title_row.add_widget(delete_btn)
            card.add_widget(title_row)
            body = list(details)
            if entry.notes:
                body.append(f"[i]{escape_markup(entry.notes)}[/i]")
            card.add_widget(Label(text="\n".join(body), markup=True))
            return card

        def _render_weight(self, dashboard: Dashboard) -> None:
            if self.weight_box is None:
                return
            self.weight_box.clear_widgets()
            if not dashboard.weight:
                self.weight_box.add_widget(Label(text=EMPTY_WEIGHT))
                return
            self.weight_box.add_widget(
                Label(text="Evolucion del peso (kg)", size_hint_y=None, height=30)
            )
            self.weight_chart.set_series(
                [point.label for point in dashboard.weight],
                [point.value for point in dashboard.weight],
                weight_domain(dashboard.weight),
            )
            self.weight_box.add_widget(self.weight_chart)

        def _render_activity(self, dashboard: Dashboard) -> None:
            if self.activity_box is None:
                return
            self.activity_box.clear_widgets()
            if not dashboard.activity:
                self.activity_box.add_widget(Label(text=EMPTY_ACTIVITY))
                return
            labels = [point.label for point in dashboard.activity]
            self.activity_box.add_widget(
                Label(text="Pasos diarios", size_hint_y=None, height=30)
            )
            self.steps_chart.set_series(
                labels, [float(point.steps) for point in dashboard.activity]
            )
            self.activity_box.add_widget(self.steps_chart)
            self.activity_box.add_widget(
                Label(text="Duracion del ejercicio (min)", size_hint_y=None, height=30)
            )
            self.duration_chart.set_series(
                labels, [float(point.duration) for point in dashboard.activity]
            )
            self.activity_box.add_widget(self.duration_chart)

        def _show_error(self, action: str, exc: Exception) -> None:
            error_type = type(exc).__name__
            logger.exception("Error al %s", action)
            if self.status is not None:
                self.status.text = f"Error al {action} ({error_type}): {exc}"

    SaludTrackerApp().run()
    return 0


def format_entry_title(entry: HealthEntry) -> str:
    """Long date title ("January 03, 2024") for the entry list."""
    day = parse_entry_date(entry.date)
    if day is None:
        return entry.date
    return day.strftime("%B %d, %Y")


def format_entry_details(entry: HealthEntry) -> list[str]:
    """Human-readable lines for the recorded metrics only."""
    lines: list[str] = []
    if entry.weight is not None:
        lines.append(f"Peso: {_format_number(entry.weight)} kg")
    if entry.calories is not None:
        lines.append(f"Calorias: {entry.calories}")
    if entry.steps is not None:
        lines.append(f"Pasos: {entry.steps:,}")
    if entry.exercise is not None:
        lines.append(f"Ejercicio: {entry.exercise}")
    if entry.duration is not None:
        lines.append(f"Duracion: {entry.duration} min")
    return lines


def format_stats(stats: Stats) -> dict[str, str]:
    """Texto de las tarjetas de estadisticas."""
    return {
        "avg_weight": f"Peso promedio\n{stats.avg_weight} kg",
        "total_workouts": f"Entrenamientos\n{stats.total_workouts}",
        "avg_steps": f"Pasos/dia promedio\n{stats.avg_steps:,}",
    }


def _format_number(value: float) -> str:
    """Format numbers without trailing zeros or scientific notation."""
    if value.is_integer():
        return str(int(value))
    text = format(value, "f").rstrip("0").rstrip(".")
    return text if text else "0"
