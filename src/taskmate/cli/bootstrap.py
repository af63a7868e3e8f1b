# src/taskmate/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (repository / notifications / scheduler / store).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..config import STORAGE_MEMORY, get_settings
from ..core.errors import SchedulingError
from ..core.ports import Clock, TaskRepository
from ..core.state import AppState
from ..notifications.center import LocalNotificationCenter
from ..notifications.selection import TaskSelection
from ..storage.memory_repo import InMemoryTaskRepository
from ..storage.sqlite_repo import SqliteTaskRepository
from ..tasks.task_models import TaskId
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)

MAX_REMINDER_ERRORS = 20


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def _build_repo(settings) -> TaskRepository:
    if settings.storage == STORAGE_MEMORY:
        logger.info("Using in-memory task storage (nothing is saved).")
        return InMemoryTaskRepository()
    return SqliteTaskRepository(settings.tasks_db_path)


def _rearm_reminders(
    store: TaskStore,
    scheduler: ReminderScheduler,
    on_error: Callable[[TaskId, SchedulingError], None],
) -> None:
    # Pending notifications live in-process, so a fresh start has none.
    armed = 0
    for task in store.list():
        if not task.reminder_enabled:
            continue
        outcome = scheduler.reconcile(task, False, None)
        if outcome.scheduled:
            armed += 1
        elif outcome.error is not None:
            logger.warning("Reminder not re-armed task_id=%s: %s", task.id, outcome.error.reason)
            on_error(task.id, outcome.error)
    if armed:
        logger.info("Re-armed %d reminders from storage.", armed)


def create_initial_state(*, settings=None, clock: Clock = datetime.now) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    repo = _build_repo(settings)
    selection = TaskSelection()
    notifications = LocalNotificationCenter(selection, authorized=settings.notifications_authorized)
    scheduler = ReminderScheduler(notifications, clock=clock)

    reminder_errors: list[str] = []

    def on_reminder_error(task_id: TaskId, error: SchedulingError) -> None:
        reminder_errors.append(f"{task_id[:8]}: {error.reason}")
        del reminder_errors[:-MAX_REMINDER_ERRORS]

    store = TaskStore(repo, scheduler, on_reminder_error=on_reminder_error)
    _rearm_reminders(store, scheduler, on_reminder_error)

    return AppState(
        settings=settings,
        repo=repo,
        notifications=notifications,
        selection=selection,
        scheduler=scheduler,
        store=store,
        clock=clock,
        reminder_errors=reminder_errors,
    )
