# tests/test_logging_setup.py

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from taskmate.logging_setup import _ConsoleNoiseFilter, resolve_level, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_app_logs_and_quiets_the_rest() -> None:
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("taskmate.tasks.task_store", logging.DEBUG))
    assert not f.filter(_record("taskmate.notifications.runner", logging.INFO))
    assert f.filter(_record("taskmate.notifications.runner", logging.WARNING))
    assert not f.filter(_record("py.warnings", logging.WARNING))
    assert not f.filter(_record("urllib3", logging.WARNING))
    assert f.filter(_record("urllib3", logging.ERROR))


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        log_file = setup_logging(log_dir=tmp_path / "logs", console_level="warning")
        logging.getLogger("taskmate.test").debug("hello file")
        for h in root.handlers:
            h.flush()

        assert log_file == tmp_path / "logs" / "taskmate.log"
        assert root.handlers[0].level == logging.WARNING
        text = log_file.read_text("utf-8")
        assert "hello file" in text
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
            h.close()
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)


@pytest.mark.parametrize(
    ("level", "expected"),
    [(logging.DEBUG, logging.DEBUG), ("debug", logging.DEBUG), (" Error ", logging.ERROR), ("chatty", logging.INFO)],
)
def test_resolve_level(level, expected) -> None:
    assert resolve_level(level) == expected
