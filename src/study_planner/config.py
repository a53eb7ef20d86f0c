# src/study_planner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Environment variables (all optional):
- SSP_APP_NAME         display name (default: study-planner)
- SSP_LOG_LEVEL        console log level (default: INFO)
- SSP_DATA_DIR         local data directory (default: .local/ssp)
- SSP_STORAGE_BACKEND  "json" (one file per key) or "sqlite" (default: json)
- SSP_DB_PATH          SQLite path for the sqlite backend (default: <data_dir>/planner.sqlite3)
- SSP_BACKUP_DIR       where /export writes backups (default: <data_dir>/backups)
- SSP_TICK_SECONDS     pomodoro tick interval in seconds (default: 1.0)

Planner preferences (focus/break minutes, theme, ...) are user data and live in the
store, not here.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "SSP"

STORAGE_BACKENDS = ("json", "sqlite")


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


load_dotenv(override=False)


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Storage ----
    data_dir: Path
    storage_backend: str
    db_path: Path
    backup_dir: Path

    # ---- Pomodoro ----
    tick_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "study-planner").strip() or "study-planner"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/ssp"))

        storage_backend = _env(_k("STORAGE_BACKEND"), "json").strip().lower()
        if storage_backend not in STORAGE_BACKENDS:
            storage_backend = "json"

        db_path = _env_path(_k("DB_PATH"), data_dir / "planner.sqlite3")
        backup_dir = _env_path(_k("BACKUP_DIR"), data_dir / "backups")

        # Floor at 100ms.
        tick_seconds = max(0.1, _env_float(_k("TICK_SECONDS"), 1.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            storage_backend=storage_backend,
            db_path=db_path,
            backup_dir=backup_dir,
            tick_seconds=tick_seconds,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
