# src/taskmate/tasks/task_store.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from ..core.errors import NotFoundError, PersistenceError, SchedulingError, ValidationError
from ..core.ports import TaskRepository
from .task_models import TaskId, TaskRecord, new_task_id, normalize_details, normalize_title
from .task_scheduler import ReconcileOutcome, ReminderScheduler

logger = logging.getLogger(__name__)

ReminderErrorCallback = Callable[[TaskId, SchedulingError], None]


def _check_local(due_date: datetime) -> None:
    # Buckets, sorting and reminders all compare against the naive local clock.
    if due_date.tzinfo is not None:
        raise ValidationError("due date must be local time (no UTC offset)")


class TaskStore:
    """
    Mutation authority for task records.

    Every mutation follows the same order:
    - validate (ValidationError / NotFoundError, nothing touched)
    - persist through the repository (PersistenceError aborts, nothing applied)
    - apply the change to the in-memory projection
    - reconcile the reminder (failures are reported, never raised)

    Thread-safety:
    - mutations are serialized by one re-entrant lock
    - reads return a copy of an immutable snapshot
    """

    def __init__(
        self,
        repo: TaskRepository,
        scheduler: ReminderScheduler,
        *,
        on_reminder_error: ReminderErrorCallback | None = None,
    ) -> None:
        self._repo = repo
        self._scheduler = scheduler
        self._on_reminder_error = on_reminder_error
        self._lock = threading.RLock()
        self._tasks: tuple[TaskRecord, ...] = ()
        self.last_error: PersistenceError | None = None

        self.refresh()
        logger.info("TaskStore ready total=%s", len(self._tasks))

    # ---- reads ----

    def refresh(self) -> None:
        """Reload the projection from the repository. A failed load leaves it empty."""
        with self._lock:
            try:
                records = self._repo.fetch_all()
            except PersistenceError as e:
                logger.error("Failed to fetch tasks: %s", e)
                self.last_error = e
                self._tasks = ()
                return
            self.last_error = None
            self._tasks = tuple(records)
            logger.debug("Fetched %d tasks", len(records))

    def list(self) -> list[TaskRecord]:
        """All tasks sorted by due date; ties keep insertion order."""
        snapshot = self._tasks
        return sorted(snapshot, key=lambda t: t.due_date)

    def get(self, task_id: TaskId) -> TaskRecord:
        for task in self._tasks:
            if task.id == task_id:
                return task
        raise NotFoundError(task_id)

    def count(self) -> int:
        return len(self._tasks)

    # ---- mutations ----

    def create(
        self,
        title: str,
        details: str | None,
        due_date: datetime,
        reminder_enabled: bool = False,
        is_completed: bool = False,
    ) -> TaskId:
        clean_title = normalize_title(title)
        if not clean_title:
            raise ValidationError("title is required")
        _check_local(due_date)

        record = TaskRecord(
            id=new_task_id(),
            title=clean_title,
            details=normalize_details(details),
            due_date=due_date,
            is_completed=bool(is_completed),
            reminder_enabled=bool(reminder_enabled),
        )

        with self._lock:
            self._repo.insert(record)
            self._tasks = (*self._tasks, record)
            logger.debug("Task created id=%s due=%s reminder=%s", record.id, record.due_date, record.reminder_enabled)

            # A create is a transition from "no reminder".
            self._reconcile(record, previous_reminder_enabled=False, previous_due_date=None)
        return record.id

    def update(
        self,
        task_id: TaskId,
        title: str,
        details: str | None,
        due_date: datetime,
        reminder_enabled: bool,
        is_completed: bool,
    ) -> TaskRecord:
        with self._lock:
            current = self.get(task_id)

            clean_title = normalize_title(title)
            if not clean_title:
                raise ValidationError("title is required")
            _check_local(due_date)

            old_reminder = current.reminder_enabled
            old_due_date = current.due_date

            record = replace(
                current,
                title=clean_title,
                details=normalize_details(details),
                due_date=due_date,
                reminder_enabled=bool(reminder_enabled),
                is_completed=bool(is_completed),
            )
            self._repo.update(record)
            self._replace(record)
            logger.debug("Task updated id=%s due=%s reminder=%s", record.id, record.due_date, record.reminder_enabled)

            self._reconcile(record, previous_reminder_enabled=old_reminder, previous_due_date=old_due_date)
            return record

    def delete(self, task_id: TaskId) -> None:
        with self._lock:
            current = self.get(task_id)

            # The notification must be gone before the record is.
            self._scheduler.cancel(task_id)
            try:
                self._repo.delete(task_id)
            except PersistenceError:
                # The record survives, so its reminder must survive too.
                self._reconcile(current, previous_reminder_enabled=False, previous_due_date=None)
                raise

            self._tasks = tuple(t for t in self._tasks if t.id != task_id)
            logger.debug("Task deleted id=%s", task_id)

    def toggle_completion(self, task_id: TaskId) -> TaskRecord:
        """Flip is_completed. The reminder lifecycle is independent and left alone."""
        with self._lock:
            current = self.get(task_id)
            record = replace(current, is_completed=not current.is_completed)
            self._repo.update(record)
            self._replace(record)
            logger.debug("Task toggled id=%s completed=%s", record.id, record.is_completed)
            return record

    # ---- helpers ----

    def _replace(self, record: TaskRecord) -> None:
        self._tasks = tuple(record if t.id == record.id else t for t in self._tasks)

    def _reconcile(
        self,
        record: TaskRecord,
        *,
        previous_reminder_enabled: bool,
        previous_due_date: datetime | None,
    ) -> ReconcileOutcome:
        outcome = self._scheduler.reconcile(record, previous_reminder_enabled, previous_due_date)
        if outcome.error is not None:
            logger.warning("Reminder not armed task_id=%s: %s", record.id, outcome.error.reason)
            if self._on_reminder_error is not None:
                try:
                    self._on_reminder_error(record.id, outcome.error)
                except Exception:
                    logger.exception("on_reminder_error callback failed task_id=%s", record.id)
        return outcome
