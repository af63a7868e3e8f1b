# src/taskmate/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..notifications.center import LocalNotificationCenter
from ..notifications.selection import TaskSelection
from ..tasks.task_scheduler import ReminderScheduler
from ..tasks.task_store import TaskStore
from .ports import Clock, TaskRepository


@dataclass
class AppState:
    # Store Settings on the state for easy access in command handlers.
    settings: object

    repo: TaskRepository
    notifications: LocalNotificationCenter
    selection: TaskSelection
    scheduler: ReminderScheduler
    store: TaskStore

    clock: Clock = datetime.now
    reminder_errors: list[str] = field(default_factory=list)
