"""CLI para lanzar el registro diario de salud."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from pathlib import Path

from salud_tracker.app import run_app
from salud_tracker.config import DEFAULT_STORAGE_KEY, AppConfig, default_db_path
from salud_tracker.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="Registro diario de peso, calorias, pasos y ejercicio."
    )
    parser.add_argument(
        "--db-path",
        default=str(default_db_path()),
        help="Archivo SQLite con los registros (default: ./salud_tracker.sqlite3).",
    )
    parser.add_argument(
        "--storage-key",
        default=DEFAULT_STORAGE_KEY,
        help=f"Clave bajo la que se guardan los registros (default: {DEFAULT_STORAGE_KEY}).",
    )
    parser.add_argument(
        "--timezone",
        default=None,
        help="Zona horaria para la fecha de hoy (default: zona local).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Nivel de logging (default: INFO).",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Archivo de log opcional.",
    )
    return parser.parse_args(argv)


def build_config(ns: argparse.Namespace) -> AppConfig:
    """Build the app configuration from parsed arguments."""
    return AppConfig(
        db_path=Path(ns.db_path).expanduser().resolve(),
        storage_key=ns.storage_key,
        timezone=ns.timezone,
        log_level=ns.log_level,
        log_file=Path(ns.log_file).expanduser() if ns.log_file else None,
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Run the tracker.

    Returns:
        Exit code (0 on success, 1 if the GUI cannot start).
    """
    config = build_config(parse_args(argv))
    setup_logging(config)
    logger.info("Using database %s (key %r)", config.db_path, config.storage_key)
    try:
        return run_app(config)
    except ImportError as exc:
        print(f"No se pudo iniciar Kivy: {exc}")
        print("Instala dependencias de GUI: pip install kivy")
        return 1
