# src/taskmate/tasks/task_api.py

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from .task_models import TaskRecord


@dataclass(slots=True, frozen=True)
class TaskStats:
    total: int
    completed: int
    pending: int
    today: int
    upcoming: int
    overdue: int


def filter_tasks(tasks: Iterable[TaskRecord], query: str | None) -> list[TaskRecord]:
    """
    Case-insensitive substring search over title and details.
    A blank query matches everything. Order is preserved.
    """
    needle = (query or "").strip().casefold()
    if not needle:
        return list(tasks)

    out: list[TaskRecord] = []
    for t in tasks:
        if needle in t.title.casefold() or needle in (t.details or "").casefold():
            out.append(t)
    return out


def compute_stats(tasks: Iterable[TaskRecord], now: datetime) -> TaskStats:
    items = list(tasks)
    today = now.date()
    completed = sum(1 for t in items if t.is_completed)
    return TaskStats(
        total=len(items),
        completed=completed,
        pending=len(items) - completed,
        today=sum(1 for t in items if t.due_date.date() == today),
        upcoming=sum(1 for t in items if t.due_date > now),
        overdue=sum(1 for t in items if t.is_overdue(now)),
    )


def format_due(due: datetime) -> str:
    return due.strftime("%Y-%m-%d %H:%M")


def format_task_line(task: TaskRecord, now: datetime) -> str:
    mark = "x" if task.is_completed else " "
    flags = ""
    if task.reminder_enabled:
        flags += " [reminder]"
    if task.is_overdue(now):
        flags += " [overdue]"
    return f"[{mark}] {format_due(task.due_date)}  {task.title}{flags}  ({task.id[:8]})"
