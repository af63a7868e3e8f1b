# src/taskmate/notifications/selection.py

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from ..tasks.task_models import TaskId

logger = logging.getLogger(__name__)

SelectionListener = Callable[[TaskId], None]


class TaskSelection:
    """
    The "last selected task id" hand-off.

    Written when the user activates a delivered notification; read by the host
    to navigate to that task. Hosts either poll (consume) or subscribe.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._task_id: TaskId | None = None
        self._listeners: list[SelectionListener] = []

    @property
    def selected_task_id(self) -> TaskId | None:
        with self._lock:
            return self._task_id

    def select(self, task_id: TaskId) -> None:
        with self._lock:
            self._task_id = task_id
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(task_id)
            except Exception:
                logger.exception("Selection listener failed task_id=%s", task_id)

    def consume(self) -> TaskId | None:
        """Return the selected id and clear it."""
        with self._lock:
            task_id, self._task_id = self._task_id, None
            return task_id

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
