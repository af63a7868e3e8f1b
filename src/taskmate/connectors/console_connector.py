# src/taskmate/connectors/console_connector.py

from __future__ import annotations

import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..cli.commands import render_task
from ..core.errors import NotFoundError
from ..core.state import AppState
from ..notifications.center import PendingNotification

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleNotificationPresenter:
    """Prints fired reminders into the console (NotificationPresenter port)."""

    async def present(self, notification: PendingNotification) -> None:
        payload = notification.payload
        _print_ts(f"[REMINDER] {payload.title}\n    {payload.body}\n    /open {notification.task_id[:8]} to view")


def _show_selected(state: AppState) -> None:
    task_id = state.selection.consume()
    if task_id is None:
        return
    try:
        task = state.store.get(task_id)
    except NotFoundError:
        _print_ts(f"Reminder refers to a task that no longer exists ({task_id[:8]}).")
        return
    _print_ts(render_task(task))


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Manage your tasks. Use /help for commands. Use /exit to quit.\n")

    def emit(text: str) -> None:
        _print_ts(text)

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            _show_selected(state)
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            cmd_response = "Commands start with '/'. Use /help to list them."

        _print_ts(cmd_response)
        _show_selected(state)

    logger.info("Console connector finished.")
