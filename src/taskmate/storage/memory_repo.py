# src/taskmate/storage/memory_repo.py

from __future__ import annotations

import threading

from ..core.errors import PersistenceError
from ..tasks.task_models import TaskId, TaskRecord


class InMemoryTaskRepository:
    """Dict-backed repository for demos and tests (nothing survives the process)."""

    def __init__(self, records: list[TaskRecord] | None = None) -> None:
        self._lock = threading.Lock()
        self._rows: dict[TaskId, TaskRecord] = {}
        for r in records or []:
            self._rows[r.id] = r

    def fetch_all(self) -> list[TaskRecord]:
        with self._lock:
            rows = list(self._rows.values())
        # dict order is insertion order; sorted() is stable.
        return sorted(rows, key=lambda t: t.due_date)

    def insert(self, record: TaskRecord) -> None:
        with self._lock:
            if record.id in self._rows:
                raise PersistenceError(f"insert failed: duplicate id={record.id}")
            self._rows[record.id] = record

    def update(self, record: TaskRecord) -> None:
        with self._lock:
            if record.id not in self._rows:
                raise PersistenceError(f"update failed: no row for id={record.id}")
            self._rows[record.id] = record

    def delete(self, task_id: TaskId) -> None:
        with self._lock:
            if self._rows.pop(task_id, None) is None:
                raise PersistenceError(f"delete failed: no row for id={task_id}")
