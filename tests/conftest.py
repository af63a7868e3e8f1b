# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskmate.cli.bootstrap import create_initial_state
from taskmate.core.state import AppState
from taskmate.tasks.task_scheduler import ReminderScheduler
from taskmate.tasks.task_store import TaskStore

from .fakes import FailingRepo, FixedClock, RecordingDelivery

NOW = datetime(2026, 10, 18, 12, 0)


@pytest.fixture()
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture()
def delivery() -> RecordingDelivery:
    return RecordingDelivery()


@pytest.fixture()
def scheduler(delivery: RecordingDelivery, clock: FixedClock) -> ReminderScheduler:
    return ReminderScheduler(delivery, clock=clock)


@pytest.fixture()
def repo() -> FailingRepo:
    return FailingRepo()


@pytest.fixture()
def reminder_errors() -> list:
    return []


@pytest.fixture()
def store(repo: FailingRepo, scheduler: ReminderScheduler, reminder_errors: list) -> TaskStore:
    return TaskStore(
        repo,
        scheduler,
        on_reminder_error=lambda task_id, err: reminder_errors.append((task_id, err)),
    )


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with the bootstrap.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskmate-test",
        log_level="DEBUG",
        console_enabled=False,
        storage="sqlite",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        notifications_authorized=True,
        notification_poll_seconds=0.01,
    )


@pytest.fixture()
def state(settings: SimpleNamespace, clock: FixedClock) -> AppState:
    """
    AppState wired by the real composition root.

    NOTE: We keep the real SQLite repository and notification center here because
    their wiring is part of what we want to test; only the clock is fixed.
    """
    return create_initial_state(settings=settings, clock=clock)
