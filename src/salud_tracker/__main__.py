"""Punto de entrada de la app Kivy."""

from __future__ import annotations

from salud_tracker.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
