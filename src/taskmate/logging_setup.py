# src/taskmate/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskmate.log"
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Decides what reaches the interactive prompt.

    The console is shared with the user typing commands, so only our own
    records pass freely. The reminder thread prints delivered reminders on its
    own; its log lines would interleave with them, so it needs `quiet_floor`.
    Everything else (captured py.warnings included) needs `foreign_floor`.
    """

    def __init__(
        self,
        app_prefix: str = "taskmate.",
        quiet_prefixes: tuple[str, ...] = ("taskmate.notifications.",),
        quiet_floor: int = logging.WARNING,
        foreign_floor: int = logging.ERROR,
    ) -> None:
        super().__init__()
        self.app_prefix = app_prefix
        self.quiet_prefixes = quiet_prefixes
        self.quiet_floor = quiet_floor
        self.foreign_floor = foreign_floor

    def filter(self, record: logging.LogRecord) -> bool:
        if not record.name.startswith(self.app_prefix):
            return record.levelno >= self.foreign_floor
        if record.name.startswith(self.quiet_prefixes):
            return record.levelno >= self.quiet_floor
        return True


def resolve_level(level: int | str, default: int = logging.INFO) -> int:
    """Accept 10 / "debug" / "DEBUG"; unknown names fall back to `default`."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/taskmate",
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.DEBUG,
) -> Path:
    """
    Install two root handlers: a filtered stderr one for the prompt and a
    `taskmate.log` file one that keeps everything at `file_level`.

    Replaces any handlers already on the root logger, so calling it twice does
    not duplicate output. Returns the log file path.
    """
    log_file = Path(log_dir) / LOG_FILE_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
    root.setLevel(logging.DEBUG)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(resolve_level(console_level))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())

    to_file = logging.FileHandler(log_file, encoding="utf-8")
    to_file.setLevel(resolve_level(file_level, logging.DEBUG))
    to_file.setFormatter(fmt)

    root.addHandler(console)
    root.addHandler(to_file)

    # warnings.warn(...) arrives as 'py.warnings' records
    logging.captureWarnings(True)
    return log_file
