# tests/test_notifications.py

from __future__ import annotations

import asyncio
import time
from datetime import timedelta

import pytest

from taskmate.notifications.center import LocalNotificationCenter
from taskmate.notifications.runner import run_notification_loop, start_notifications_in_background
from taskmate.notifications.selection import TaskSelection
from taskmate.storage.memory_repo import InMemoryTaskRepository
from taskmate.tasks.task_models import ReminderPayload
from taskmate.tasks.task_scheduler import ReminderScheduler
from taskmate.tasks.task_store import TaskStore

from .conftest import NOW
from .fakes import FakePresenter, FixedClock


def _payload(task_id: str) -> ReminderPayload:
    return ReminderPayload(task_id=task_id, title=f"Task Reminder: {task_id}", body="No additional details")


def test_schedule_replaces_by_task_id() -> None:
    center = LocalNotificationCenter()

    center.schedule("a", NOW + timedelta(hours=1), _payload("a"))
    center.schedule("a", NOW + timedelta(hours=3), _payload("a"))

    pending = center.pending()
    assert len(pending) == 1
    assert pending[0].fire_at == NOW + timedelta(hours=3)


def test_cancel_twice_is_same_as_once() -> None:
    center = LocalNotificationCenter()
    center.schedule("a", NOW + timedelta(hours=1), _payload("a"))

    center.cancel("a")
    after_one = center.pending()
    center.cancel("a")

    assert center.pending() == after_one == []


def test_unauthorized_schedule_is_rejected() -> None:
    center = LocalNotificationCenter(authorized=False)

    result = center.schedule("a", NOW + timedelta(hours=1), _payload("a"))

    assert not result.accepted
    assert "permission" in (result.reason or "")
    assert center.pending_for("a") is None

    center.set_authorized(True)
    assert center.schedule("a", NOW + timedelta(hours=1), _payload("a")).accepted


def test_fire_due_pops_only_due_in_fire_order() -> None:
    center = LocalNotificationCenter()
    center.schedule("later", NOW + timedelta(hours=2), _payload("later"))
    center.schedule("second", NOW + timedelta(minutes=30), _payload("second"))
    center.schedule("first", NOW + timedelta(minutes=10), _payload("first"))

    fired = center.fire_due(NOW + timedelta(hours=1))

    assert [n.task_id for n in fired] == ["first", "second"]
    assert [n.task_id for n in center.pending()] == ["later"]
    assert center.fire_due(NOW + timedelta(hours=1)) == []


def test_activate_writes_selection() -> None:
    selection = TaskSelection()
    seen: list[str] = []
    unsubscribe = selection.subscribe(seen.append)
    center = LocalNotificationCenter(selection)

    center.activate("task-42")

    assert selection.selected_task_id == "task-42"
    assert seen == ["task-42"]
    assert selection.consume() == "task-42"
    assert selection.consume() is None

    unsubscribe()
    center.activate("task-43")
    assert seen == ["task-42"]


def test_failing_selection_listener_does_not_break_others() -> None:
    selection = TaskSelection()
    seen: list[str] = []

    def broken(_task_id: str) -> None:
        raise RuntimeError("view gone")

    selection.subscribe(broken)
    selection.subscribe(seen.append)
    selection.select("x")

    assert seen == ["x"]


def test_store_and_center_keep_one_notification_per_task(clock: FixedClock) -> None:
    center = LocalNotificationCenter()
    store = TaskStore(InMemoryTaskRepository(), ReminderScheduler(center, clock=clock))

    task_id = store.create("Stand-up", None, NOW + timedelta(hours=1), reminder_enabled=True)
    store.update(task_id, "Stand-up", None, NOW + timedelta(hours=2), reminder_enabled=True, is_completed=False)
    store.update(task_id, "Stand-up (moved)", None, NOW + timedelta(hours=3), reminder_enabled=True, is_completed=False)

    pending = center.pending()
    assert len(pending) == 1
    assert pending[0].fire_at == NOW + timedelta(hours=3)
    assert pending[0].payload.title == "Task Reminder: Stand-up (moved)"

    store.delete(task_id)
    assert center.pending() == []


@pytest.mark.asyncio
async def test_loop_presents_due_notifications_once() -> None:
    clock = FixedClock(NOW)
    center = LocalNotificationCenter()
    center.schedule("soon", NOW + timedelta(seconds=1), _payload("soon"))
    center.schedule("later", NOW + timedelta(days=1), _payload("later"))
    presenter = FakePresenter()

    runner = asyncio.create_task(
        run_notification_loop(center, presenter, interval_seconds=0.01, clock=clock)
    )

    await asyncio.sleep(0.03)
    assert presenter.shown == []

    clock.advance(seconds=5)
    await asyncio.sleep(0.05)
    runner.cancel()
    with pytest.raises(asyncio.CancelledError):
        await runner

    assert [n.task_id for n in presenter.shown] == ["soon"]
    assert [n.task_id for n in center.pending()] == ["later"]


@pytest.mark.asyncio
async def test_loop_survives_presenter_failure_and_stops_on_event() -> None:
    center = LocalNotificationCenter()
    center.schedule("a", NOW - timedelta(seconds=1), _payload("a"))
    presenter = FakePresenter(fail=True)
    stop = asyncio.Event()

    runner = asyncio.create_task(
        run_notification_loop(center, presenter, interval_seconds=0.01, clock=lambda: NOW, stop_event=stop)
    )
    await asyncio.sleep(0.03)
    stop.set()
    await asyncio.wait_for(runner, timeout=1.0)

    assert center.pending() == []
    assert presenter.shown == []


def test_background_runner_starts_and_stops() -> None:
    center = LocalNotificationCenter()
    presenter = FakePresenter()
    center.schedule("now", NOW - timedelta(minutes=1), _payload("now"))

    runner = start_notifications_in_background(center, presenter, interval_seconds=0.01, clock=lambda: NOW)
    assert runner is not None

    deadline = time.monotonic() + 2.0
    while not presenter.shown and time.monotonic() < deadline:
        time.sleep(0.01)
    runner.stop()
    runner.join(timeout=2.0)

    assert not runner.thread.is_alive()
    assert [n.task_id for n in presenter.shown] == ["now"]
