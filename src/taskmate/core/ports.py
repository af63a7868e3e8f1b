# src/taskmate/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The task store and reminder scheduler depend on Protocols instead of concrete
implementations. This keeps storage and notification delivery swappable and
makes testing easier.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Awaitable, Protocol

if TYPE_CHECKING:
    from ..notifications.center import PendingNotification
    from ..tasks.task_models import ReminderPayload, TaskId, TaskRecord

Clock = Callable[[], datetime]


@dataclass(slots=True, frozen=True)
class DeliveryResult:
    """Outcome of asking the delivery mechanism to arm a notification."""

    accepted: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> DeliveryResult:
        return cls(accepted=True)

    @classmethod
    def rejected(cls, reason: str) -> DeliveryResult:
        return cls(accepted=False, reason=reason)


class TaskRepository(Protocol):
    """
    Persistence collaborator.

    Every method raises PersistenceError on failure.
    fetch_all() returns records sorted by due_date, ties in insertion order.
    """

    def fetch_all(self) -> list[TaskRecord]: ...
    def insert(self, record: TaskRecord) -> None: ...
    def update(self, record: TaskRecord) -> None: ...
    def delete(self, task_id: TaskId) -> None: ...


class NotificationDelivery(Protocol):
    """
    Local notification mechanism.

    schedule() replaces any outstanding notification with the same task id.
    cancel() is idempotent. Delivery is fire-and-forget: nobody polls for
    confirmation.
    """

    def schedule(self, task_id: TaskId, fire_at: datetime, payload: ReminderPayload) -> DeliveryResult: ...
    def cancel(self, task_id: TaskId) -> None: ...


class NotificationPresenter(Protocol):
    """Host-side port: how a fired notification reaches the user."""

    def present(self, notification: PendingNotification) -> Awaitable[None]: ...
