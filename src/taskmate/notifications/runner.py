# src/taskmate/notifications/runner.py

from __future__ import annotations

"""
Notification runner.

A small polling loop that:
- asks the notification center for notifications whose fire time has come,
- hands each one to an injected presenter port.

Formatting and the actual user-facing output belong to the presenter, not the loop.
"""

import asyncio
import contextlib
import logging
import threading
from dataclasses import dataclass
from datetime import datetime

from ..core.ports import Clock, NotificationPresenter
from .center import LocalNotificationCenter

logger = logging.getLogger(__name__)


async def run_notification_loop(
        center: LocalNotificationCenter,
        presenter: NotificationPresenter,
        *,
        interval_seconds: float = 1.0,
        clock: Clock = datetime.now,
        stop_event: asyncio.Event | None = None,
) -> None:
    """
    Simple polling loop.

    Every interval_seconds:
    - fire due notifications (fire_at <= now)
    - present each via presenter.present(...)
      A failing presenter is logged; the notification is not retried.

    To stop the loop, set stop_event or cancel the coroutine/task.
    """
    sleep_s = max(0.01, float(interval_seconds))

    while stop_event is None or not stop_event.is_set():
        try:
            due = center.fire_due(clock())
        except Exception:
            logger.exception("fire_due failed")
            due = []

        for notification in due:
            try:
                await presenter.present(notification)
                logger.info("Reminder delivered task_id=%s", notification.task_id)
            except Exception:
                logger.exception("present failed task_id=%s", notification.task_id)

        if stop_event is None:
            await asyncio.sleep(sleep_s)
        else:
            with contextlib.suppress(asyncio.TimeoutError):
                await asyncio.wait_for(stop_event.wait(), timeout=sleep_s)


@dataclass
class NotificationBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal notification loop stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_notifications_in_background(
        center: LocalNotificationCenter,
        presenter: NotificationPresenter,
        *,
        interval_seconds: float = 1.0,
        clock: Clock = datetime.now,
) -> NotificationBackgroundRunner | None:
    """
    Start the notification loop in a background thread.

    The console REPL blocks on input(), so the loop gets its own event loop.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(
                run_notification_loop(
                    center,
                    presenter,
                    interval_seconds=interval_seconds,
                    clock=clock,
                    stop_event=stop_event,
                )
            )
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="taskmate-notifications", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Notification thread did not initialize properly.")
        return None

    logger.info("Notification background thread started.")
    return NotificationBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
