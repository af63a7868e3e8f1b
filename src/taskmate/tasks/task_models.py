# src/taskmate/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

TaskId = str


def new_task_id() -> TaskId:
    return str(uuid.uuid4())


@dataclass(slots=True, frozen=True)
class TaskRecord:
    """
    A single to-do item.

    Records are immutable values. TaskStore produces a new record on every
    mutation (dataclasses.replace), so a snapshot handed to a reader never changes.
    """

    id: TaskId
    title: str
    details: str | None
    due_date: datetime

    is_completed: bool = False
    reminder_enabled: bool = False

    def is_overdue(self, now: datetime) -> bool:
        """Incomplete and due on an earlier calendar day than `now`."""
        if self.is_completed:
            return False
        return self.due_date.date() < now.date()


@dataclass(slots=True, frozen=True)
class ReminderPayload:
    task_id: TaskId
    title: str
    body: str

    @classmethod
    def for_task(cls, task: TaskRecord) -> ReminderPayload:
        return cls(
            task_id=task.id,
            title=f"Task Reminder: {task.title}",
            body=task.details or "No additional details",
        )


def normalize_title(raw: str | None) -> str:
    return (raw or "").strip()


def normalize_details(raw: str | None) -> str | None:
    if raw is None:
        return None
    text = raw.strip()
    return text or None
