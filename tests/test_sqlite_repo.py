# tests/test_sqlite_repo.py

from __future__ import annotations

import sqlite3
from datetime import timedelta
from pathlib import Path

import pytest

from taskmate.core.errors import PersistenceError
from taskmate.storage.sqlite_repo import SqliteTaskRepository
from taskmate.tasks.task_models import TaskRecord
from taskmate.tasks.task_scheduler import ReminderScheduler
from taskmate.tasks.task_store import TaskStore

from .conftest import NOW


def _t(task_id: str, due_offset_h: float, **kw) -> TaskRecord:
    return TaskRecord(
        id=task_id,
        title=kw.pop("title", task_id),
        details=kw.pop("details", None),
        due_date=NOW + timedelta(hours=due_offset_h),
        **kw,
    )


def test_insert_update_delete(tmp_path: Path) -> None:
    repo = SqliteTaskRepository(tmp_path / "tasks.sqlite3")

    rec = _t("a", 1, details="with details", reminder_enabled=True)
    repo.insert(rec)
    assert repo.fetch_all() == [rec]

    changed = TaskRecord(
        id="a",
        title="renamed",
        details=None,
        due_date=NOW + timedelta(days=1, microseconds=250),
        is_completed=True,
        reminder_enabled=False,
    )
    repo.update(changed)
    assert repo.fetch_all() == [changed]

    repo.delete("a")
    assert repo.fetch_all() == []
    assert repo.count() == 0


def test_fetch_all_orders_by_due_then_insertion(tmp_path: Path) -> None:
    repo = SqliteTaskRepository(tmp_path / "tasks.sqlite3")
    repo.insert(_t("late", 48))
    repo.insert(_t("tie-1", 5))
    repo.insert(_t("tie-2", 5))
    repo.insert(_t("early", -3))
    repo.insert(_t("fractional", 5.0001))

    assert [r.id for r in repo.fetch_all()] == ["early", "tie-1", "tie-2", "fractional", "late"]


def test_missing_rows_raise_persistence_error(tmp_path: Path) -> None:
    repo = SqliteTaskRepository(tmp_path / "tasks.sqlite3")

    with pytest.raises(PersistenceError):
        repo.update(_t("ghost", 1))
    with pytest.raises(PersistenceError):
        repo.delete("ghost")


def test_duplicate_id_raises_persistence_error(tmp_path: Path) -> None:
    repo = SqliteTaskRepository(tmp_path / "tasks.sqlite3")
    repo.insert(_t("dup", 1))

    with pytest.raises(PersistenceError):
        repo.insert(_t("dup", 2))


def test_schema_migration_adds_missing_columns(tmp_path: Path) -> None:
    db = tmp_path / "old.sqlite3"
    conn = sqlite3.connect(db)
    conn.execute(
        """
        CREATE TABLE tasks (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            due_at TEXT NOT NULL
        )
        """
    )
    conn.execute(
        "INSERT INTO tasks(id, title, due_at) VALUES (?, ?, ?)",
        ("legacy", "From an old build", NOW.isoformat(timespec="microseconds")),
    )
    conn.commit()
    conn.close()

    repo = SqliteTaskRepository(db)

    (rec,) = repo.fetch_all()
    assert rec.id == "legacy"
    assert rec.details is None
    assert rec.is_completed is False
    assert rec.reminder_enabled is False


def test_store_survives_restart(tmp_path: Path, delivery, clock) -> None:
    db = tmp_path / "tasks.sqlite3"
    scheduler = ReminderScheduler(delivery, clock=clock)

    store = TaskStore(SqliteTaskRepository(db), scheduler)
    first = store.create("Renew passport", "bring photos", NOW + timedelta(days=10), reminder_enabled=True)
    store.create("Buy bread", None, NOW + timedelta(hours=2))
    store.toggle_completion(first)

    reopened = TaskStore(SqliteTaskRepository(db), scheduler)

    titles = [(t.title, t.is_completed, t.reminder_enabled) for t in reopened.list()]
    assert titles == [("Buy bread", False, False), ("Renew passport", True, True)]
    assert reopened.get(first).details == "bring photos"
