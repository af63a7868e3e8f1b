# src/taskmate/core/errors.py

"""
Error taxonomy.

- ValidationError / NotFoundError: rejected before any side effect.
- PersistenceError: the repository call failed; the store applies nothing.
- SchedulingError: non-fatal; reported through a side channel, never raised
  out of a task mutation.
"""

from __future__ import annotations


class TaskmateError(Exception):
    """Base class for all taskmate errors."""


class ValidationError(TaskmateError, ValueError):
    pass


class NotFoundError(TaskmateError, LookupError):
    def __init__(self, task_id: str) -> None:
        super().__init__(f"task not found: {task_id}")
        self.task_id = task_id


class PersistenceError(TaskmateError, RuntimeError):
    pass


class SchedulingError(TaskmateError, RuntimeError):
    def __init__(self, task_id: str, reason: str) -> None:
        super().__init__(f"reminder for task {task_id} not armed: {reason}")
        self.task_id = task_id
        self.reason = reason
