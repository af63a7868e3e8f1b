# src/taskmate/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, then starts:
- the notification loop in a background thread,
- the console REPL in the main thread (optional).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import ConsoleNotificationPresenter, run_console_loop
from ..logging_setup import setup_logging
from ..notifications.runner import start_notifications_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=settings.log_level)
    logger.debug("Logging to %s", log_file)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)

    runner = start_notifications_in_background(
        state.notifications,
        ConsoleNotificationPresenter(),
        interval_seconds=settings.notification_poll_seconds,
        clock=state.clock,
    )

    # Use an Event so main can wait without a busy while-loop.
    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGINT, _handle_signal)
        signal.signal(signal.SIGTERM, _handle_signal)
    except (ValueError, OSError):
        # Some platforms may not support SIGTERM, etc.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
            stop_main.set()
        else:
            logger.info("Console disabled. Delivering reminders only. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=5.0)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
