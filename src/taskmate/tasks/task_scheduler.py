# src/taskmate/tasks/task_scheduler.py

from __future__ import annotations

"""
Reminder scheduler.

Keeps exactly one scheduled notification per task whose reminder is enabled and
whose due date is still in the future, and zero for every other task.

reconcile() is a transition function over (previous state, new state): it
decides whether the outstanding notification must be cancelled and whether a
new one must be armed. The notification itself is keyed by task id, so arming
again replaces, never duplicates.

How and when a notification is actually shown belongs to the delivery
collaborator, not the scheduler.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from ..core.errors import SchedulingError
from ..core.ports import Clock, NotificationDelivery
from .task_models import ReminderPayload, TaskId, TaskRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ReconcileOutcome:
    """What reconcile() did for one task."""

    task_id: TaskId
    cancelled: bool = False
    scheduled: bool = False
    skipped_past: bool = False
    error: SchedulingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ReminderScheduler:
    def __init__(self, delivery: NotificationDelivery, *, clock: Clock = datetime.now) -> None:
        self._delivery = delivery
        self._clock = clock

    def reconcile(
        self,
        task: TaskRecord,
        previous_reminder_enabled: bool,
        previous_due_date: datetime | None,
    ) -> ReconcileOutcome:
        """
        Bring the notification for `task` in line with its new state.

        - previously armed and now disabled, or due date moved -> cancel
        - now enabled and due in the future -> (re)schedule at due_date
        - now enabled but due not in the future -> silent no-op
        """
        cancelled = False
        due_changed = previous_due_date is not None and previous_due_date != task.due_date
        if previous_reminder_enabled and (not task.reminder_enabled or due_changed):
            self.cancel(task.id)
            cancelled = True

        if not task.reminder_enabled:
            return ReconcileOutcome(task_id=task.id, cancelled=cancelled)

        now = self._clock()
        if task.due_date <= now:
            logger.debug("Reminder not armed for past due date task_id=%s due=%s", task.id, task.due_date)
            return ReconcileOutcome(task_id=task.id, cancelled=cancelled, skipped_past=True)

        error = self._schedule(task)
        return ReconcileOutcome(
            task_id=task.id,
            cancelled=cancelled,
            scheduled=error is None,
            error=error,
        )

    def cancel(self, task_id: TaskId) -> None:
        """Remove any scheduled notification for task_id. Idempotent."""
        try:
            self._delivery.cancel(task_id)
        except Exception:
            logger.debug("Notification cancel failed task_id=%s (ignored)", task_id, exc_info=True)
            return
        logger.debug("Notification cancelled task_id=%s", task_id)

    def _schedule(self, task: TaskRecord) -> SchedulingError | None:
        payload = ReminderPayload.for_task(task)
        try:
            result = self._delivery.schedule(task.id, task.due_date, payload)
        except Exception as e:
            logger.exception("Notification schedule raised task_id=%s", task.id)
            return SchedulingError(task.id, str(e) or type(e).__name__)

        if not result.accepted:
            return SchedulingError(task.id, result.reason or "rejected by delivery")

        logger.info("Reminder scheduled task_id=%s fire_at=%s", task.id, task.due_date)
        return None
