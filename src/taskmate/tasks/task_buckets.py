# src/taskmate/tasks/task_buckets.py

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timedelta
from enum import StrEnum

from .task_models import TaskRecord


class Bucket(StrEnum):
    """Time-relative display groups, in output order."""

    OVERDUE = "Overdue"
    TODAY = "Today"
    TOMORROW = "Tomorrow"
    UPCOMING = "Upcoming"


def classify(task: TaskRecord, now: datetime) -> Bucket:
    today = now.date()
    tomorrow = today + timedelta(days=1)
    task_day = task.due_date.date()

    if task_day < today:
        return Bucket.OVERDUE
    if task_day == today:
        return Bucket.TODAY
    if task_day == tomorrow:
        return Bucket.TOMORROW
    return Bucket.UPCOMING


def bucket_tasks(tasks: Iterable[TaskRecord], now: datetime) -> list[tuple[str, list[TaskRecord]]]:
    """
    Partition tasks into (label, tasks) groups relative to `now`'s calendar day.

    Input order is kept inside each group. Groups come out as
    Overdue, Today, Tomorrow, Upcoming; empty groups are dropped.
    """
    groups: dict[Bucket, list[TaskRecord]] = {b: [] for b in Bucket}
    for task in tasks:
        groups[classify(task, now)].append(task)

    return [(b.value, members) for b, members in groups.items() if members]
