# src/taskmate/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- Nothing required at import time; every value has a default.
- Components receive settings explicitly; get_settings() is for entrypoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "TASKMATE"

STORAGE_SQLITE = "sqlite"
STORAGE_MEMORY = "memory"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


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


def _env_choice(name: str, default: str, choices: set[str]) -> str:
    raw = _env(name, default).strip().lower()
    return raw if raw in choices else default


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Connector flags ----
    console_enabled: bool

    # ---- Storage ----
    storage: str
    data_dir: Path
    tasks_db_path: Path

    # ---- Notifications ----
    notifications_authorized: bool
    notification_poll_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "taskmate").strip() or "taskmate"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)

        storage = _env_choice(_k("STORAGE"), STORAGE_SQLITE, {STORAGE_SQLITE, STORAGE_MEMORY})
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/taskmate"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")

        notifications_authorized = _env_bool(_k("NOTIFICATIONS_AUTHORIZED"), True)
        notification_poll_seconds = max(0.1, _env_float(_k("NOTIFICATION_POLL_SECONDS"), 1.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            console_enabled=console_enabled,
            storage=storage,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            notifications_authorized=notifications_authorized,
            notification_poll_seconds=notification_poll_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env once and return the process-wide settings."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
