"""Configuracion de la app (rutas, clave de almacenamiento, zona horaria, logs)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_STORAGE_KEY = "healthEntries"
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass(frozen=True)
class AppConfig:
    """Runtime configuration for the tracker."""

    db_path: Path
    storage_key: str = DEFAULT_STORAGE_KEY
    timezone: str | None = None
    log_level: str = "INFO"
    log_file: Path | None = None
    log_format: str = DEFAULT_LOG_FORMAT


def default_db_path() -> Path:
    """Default SQLite file, next to the working directory."""
    return Path.cwd() / "salud_tracker.sqlite3"
