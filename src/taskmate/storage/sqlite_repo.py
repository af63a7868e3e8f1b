# src/taskmate/storage/sqlite_repo.py

from __future__ import annotations

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from datetime import datetime
from pathlib import Path

from ..core.errors import PersistenceError
from ..tasks.task_models import TaskId, TaskRecord

logger = logging.getLogger(__name__)


class SqliteTaskRepository:
    """
    SQLite task repository.

    The schema is intentionally simple and migration-safe:
    - create table if missing
    - use PRAGMA table_info to detect missing columns
    - add columns with ALTER TABLE only when needed

    Ordering:
    - `seq` is an autoincrement column that records insertion order;
      fetch_all() sorts by due_at, then seq.

    Thread-safety:
    - each method opens its own SQLite connection
    """

    def __init__(self, db_path: str | Path = "tasks.sqlite3") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()
        logger.info("SqliteTaskRepository ready db=%s", self._db_path)

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        self._configure_conn(conn)
        return conn

    @staticmethod
    def _configure_conn(conn: sqlite3.Connection) -> None:
        with contextlib.suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL")

    @contextlib.contextmanager
    def _connect(self, action: str) -> Iterator[sqlite3.Connection]:
        """Open a connection and turn sqlite3 errors into PersistenceError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise PersistenceError(f"{action} failed: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            logger.exception("SQLite %s failed db=%s", action, self._db_path)
            raise PersistenceError(f"{action} failed: {e}") from e
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        with self._connect("schema") as conn:
            cur = conn.cursor()

            cur.execute(
                """
                CREATE TABLE IF NOT EXISTS tasks (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    details TEXT,
                    due_at TEXT NOT NULL,
                    is_completed INTEGER NOT NULL DEFAULT 0,
                    reminder_enabled INTEGER NOT NULL DEFAULT 0
                )
                """
            )

            # Migrations (safe): add missing columns.
            cur.execute("PRAGMA table_info(tasks)")
            cols = {row["name"] for row in cur.fetchall()}

            def add_col(name: str, decl: str) -> None:
                if name in cols:
                    return
                cur.execute(f"ALTER TABLE tasks ADD COLUMN {name} {decl}")
                logger.info("SqliteTaskRepository migration: added column %s", name)

            add_col("details", "TEXT")
            add_col("is_completed", "INTEGER NOT NULL DEFAULT 0")
            add_col("reminder_enabled", "INTEGER NOT NULL DEFAULT 0")

            cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_due ON tasks(due_at, seq)")
            conn.commit()

    @staticmethod
    def _dt_to_str(value: datetime) -> str:
        # Fixed width keeps lexical order equal to chronological order.
        return value.isoformat(timespec="microseconds")

    @staticmethod
    def _row_to_task(row: sqlite3.Row) -> TaskRecord:
        return TaskRecord(
            id=str(row["id"]),
            title=str(row["title"] or ""),
            details=row["details"],
            due_date=datetime.fromisoformat(row["due_at"]),
            is_completed=bool(row["is_completed"]),
            reminder_enabled=bool(row["reminder_enabled"]),
        )

    # ---- public API ----

    def fetch_all(self) -> list[TaskRecord]:
        with self._connect("fetch_all") as conn:
            cur = conn.execute("SELECT * FROM tasks ORDER BY due_at ASC, seq ASC")
            return [self._row_to_task(r) for r in cur.fetchall()]

    def insert(self, record: TaskRecord) -> None:
        with self._connect("insert") as conn:
            conn.execute(
                """
                INSERT INTO tasks(id, title, details, due_at, is_completed, reminder_enabled)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    record.id,
                    record.title,
                    record.details,
                    self._dt_to_str(record.due_date),
                    int(record.is_completed),
                    int(record.reminder_enabled),
                ),
            )
            conn.commit()
        logger.debug("Task row inserted id=%s", record.id)

    def update(self, record: TaskRecord) -> None:
        with self._connect("update") as conn:
            cur = conn.execute(
                """
                UPDATE tasks
                SET title = ?,
                    details = ?,
                    due_at = ?,
                    is_completed = ?,
                    reminder_enabled = ?
                WHERE id = ?
                """,
                (
                    record.title,
                    record.details,
                    self._dt_to_str(record.due_date),
                    int(record.is_completed),
                    int(record.reminder_enabled),
                    record.id,
                ),
            )
            conn.commit()
            if cur.rowcount != 1:
                raise PersistenceError(f"update failed: no row for id={record.id}")

    def delete(self, task_id: TaskId) -> None:
        with self._connect("delete") as conn:
            cur = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            conn.commit()
            if cur.rowcount != 1:
                raise PersistenceError(f"delete failed: no row for id={task_id}")

    def count(self) -> int:
        with self._connect("count") as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tasks").fetchone()
            return int(n)
