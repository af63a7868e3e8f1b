# src/taskmate/notifications/center.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import DeliveryResult
from ..tasks.task_models import ReminderPayload, TaskId
from .selection import TaskSelection

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class PendingNotification:
    task_id: TaskId
    fire_at: datetime
    payload: ReminderPayload


class LocalNotificationCenter:
    """
    In-process local notification delivery.

    Pending notifications are keyed by task id: scheduling the same id again
    replaces the earlier request. Nothing fires on its own; the host drives
    fire_due() (see runner.run_notification_loop).

    Authorization mirrors a platform permission prompt: while not authorized,
    schedule() is rejected rather than silently dropped.
    """

    def __init__(self, selection: TaskSelection | None = None, *, authorized: bool = True) -> None:
        self._lock = threading.Lock()
        self._pending: dict[TaskId, PendingNotification] = {}
        self._authorized = authorized
        self.selection = selection

    @property
    def authorized(self) -> bool:
        return self._authorized

    def set_authorized(self, granted: bool) -> None:
        self._authorized = bool(granted)
        logger.info("Notification permission %s", "granted" if granted else "denied")

    # ---- NotificationDelivery ----

    def schedule(self, task_id: TaskId, fire_at: datetime, payload: ReminderPayload) -> DeliveryResult:
        if not self._authorized:
            logger.warning("Notification permission denied task_id=%s", task_id)
            return DeliveryResult.rejected("notification permission not granted")

        with self._lock:
            replaced = task_id in self._pending
            self._pending[task_id] = PendingNotification(task_id=task_id, fire_at=fire_at, payload=payload)
        logger.debug("Notification pending task_id=%s fire_at=%s replaced=%s", task_id, fire_at, replaced)
        return DeliveryResult.ok()

    def cancel(self, task_id: TaskId) -> None:
        with self._lock:
            self._pending.pop(task_id, None)

    # ---- host side ----

    def pending(self) -> list[PendingNotification]:
        with self._lock:
            items = list(self._pending.values())
        return sorted(items, key=lambda n: n.fire_at)

    def pending_for(self, task_id: TaskId) -> PendingNotification | None:
        with self._lock:
            return self._pending.get(task_id)

    def fire_due(self, now: datetime) -> list[PendingNotification]:
        """Remove and return every notification whose fire time has come, earliest first."""
        with self._lock:
            due = [n for n in self._pending.values() if n.fire_at <= now]
            for n in due:
                del self._pending[n.task_id]
        due.sort(key=lambda n: n.fire_at)
        return due

    def activate(self, task_id: TaskId) -> None:
        """The user opened a delivered notification."""
        logger.debug("Notification activated task_id=%s", task_id)
        if self.selection is not None:
            self.selection.select(task_id)
