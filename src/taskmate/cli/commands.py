# src/taskmate/cli/commands.py

from __future__ import annotations

import inspect
import logging
import re
from collections.abc import Callable
from datetime import datetime, time, timedelta
from typing import cast

from ..core.errors import NotFoundError, PersistenceError, ValidationError
from ..core.state import AppState
from ..tasks.task_api import compute_stats, filter_tasks, format_due, format_task_line
from ..tasks.task_buckets import bucket_tasks
from ..tasks.task_models import TaskRecord

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)

_RELATIVE_RE = re.compile(r"^\+(\d+)([mhd])$")
_ON_VALUES = {"on", "1", "true", "yes", "y"}
_OFF_VALUES = {"off", "0", "false", "no", "n"}


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}
        self._raw: set[str] = set()

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
        raw: bool = False,
    ) -> None:
        """raw=True hands the handler the untouched remainder of the line as args[0]."""
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        names = [key, *(a.lower() for a in aliases)]
        for alias in names[1:]:
            self._handlers[alias] = handler
        if raw:
            self._raw.update(names)

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.

        Validation and lookup errors become the reply text; anything else propagates.
        """
        if not line.startswith("/"):
            return None

        head = line[1:].split(maxsplit=1)
        if not head:
            return "Empty command. Use /help to list available commands."

        name = head[0].lower()
        rest = head[1] if len(head) > 1 else ""
        args = [rest] if name in self._raw else rest.split()

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        try:
            if nparams >= 3:
                h3 = cast(CommandHandler3, handler)
                return h3(state, args, emit)

            h2 = cast(CommandHandler2, handler)
            return h2(state, args)
        except ValidationError as e:
            return f"Rejected: {e}"
        except NotFoundError as e:
            return f"Not found: {e.task_id}"
        except PersistenceError as e:
            logger.error("Command /%s failed to save: %s", name, e)
            return "Could not save the change. See the log for details."

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- argument helpers ----


def parse_due(text: str, now: datetime) -> datetime:
    """
    Accepted forms:
      2026-10-20 14:00 | 2026-10-20T14:00 | 2026-10-20 (09:00)
      today 18:00 | tomorrow 09:30 | +30m | +2h | +1d
    """
    raw = " ".join(text.split())
    if not raw:
        raise ValidationError("due date is required")

    m = _RELATIVE_RE.match(raw.lower())
    if m:
        amount = int(m.group(1))
        unit = {"m": "minutes", "h": "hours", "d": "days"}[m.group(2)]
        return now + timedelta(**{unit: amount})

    day_word, _, rest = raw.lower().partition(" ")
    if day_word in ("today", "tomorrow"):
        day = now.date() + timedelta(days=1 if day_word == "tomorrow" else 0)
        try:
            at = time.fromisoformat(rest) if rest else time(9, 0)
        except ValueError as e:
            raise ValidationError(f"bad time: {rest!r}") from e
        if at.tzinfo is not None:
            raise ValidationError("due date must be local time")
        return datetime.combine(day, at)

    try:
        parsed = datetime.fromisoformat(raw.replace(" ", "T", 1))
    except ValueError as e:
        raise ValidationError(f"bad due date: {text.strip()!r}") from e
    if parsed.tzinfo is not None:
        raise ValidationError("due date must be local time")
    if len(raw) == 10:
        parsed = parsed.replace(hour=9)
    return parsed


def parse_flag(value: str) -> bool:
    v = value.strip().lower()
    if v in _ON_VALUES:
        return True
    if v in _OFF_VALUES:
        return False
    raise ValidationError(f"expected on/off, got {value.strip()!r}")


def resolve_task(state: AppState, ref: str) -> TaskRecord:
    """Find a task by full id or unique id prefix."""
    ref = ref.strip()
    if not ref:
        raise ValidationError("task id is required")
    matches = [t for t in state.store.list() if t.id.startswith(ref)]
    if len(matches) > 1:
        raise ValidationError(f"id prefix {ref!r} is ambiguous")
    if not matches:
        raise NotFoundError(ref)
    return matches[0]


def _segments(text: str) -> list[str]:
    return [s.strip() for s in text.split("|")]


def render_task(task: TaskRecord) -> str:
    return (
        f"Task {task.id}\n"
        f"  Title: {task.title}\n"
        f"  Details: {task.details or '-'}\n"
        f"  Due: {format_due(task.due_date)}\n"
        f"  Completed: {'yes' if task.is_completed else 'no'}\n"
        f"  Reminder: {'on' if task.reminder_enabled else 'off'}"
    )


# ---- handlers ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /add <due> | <title> [| <details>] [| remind]
    """
    parts = _segments(" ".join(args))
    if len(parts) < 2:
        return "Usage: /add <due> | <title> [| <details>] [| remind]"

    now = state.clock()
    due = parse_due(parts[0], now)
    title = parts[1]
    rest = parts[2:]

    remind = False
    if rest and rest[-1].lower() == "remind":
        remind = True
        rest = rest[:-1]
    details = rest[0] if rest else None

    if remind and due < now:
        # Same rule as the edit form: no reminders for past instants.
        remind = False
        if emit:
            emit("Reminders can't be set for past dates and times; reminder disabled.")

    task_id = state.store.create(title, details, due, reminder_enabled=remind)
    return f"Added {task_id[:8]}: {title.strip()} (due {format_due(due)})"


def cmd_edit(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    """
    /edit <id> title=... | details=... | due=... | remind=on|off | done=on|off
    """
    head = " ".join(args).split(maxsplit=1)
    if not head:
        return "Usage: /edit <id> title=... | details=... | due=... | remind=on|off | done=on|off"

    task = resolve_task(state, head[0])
    now = state.clock()

    title, details, due = task.title, task.details, task.due_date
    remind, done = task.reminder_enabled, task.is_completed

    for seg in _segments(head[1] if len(head) > 1 else ""):
        if not seg:
            continue
        key, sep, value = seg.partition("=")
        key = key.strip().lower()
        if not sep:
            raise ValidationError(f"expected key=value, got {seg!r}")
        if key == "title":
            title = value
        elif key == "details":
            details = value
        elif key == "due":
            due = parse_due(value, now)
        elif key == "remind":
            remind = parse_flag(value)
        elif key == "done":
            done = parse_flag(value)
        else:
            raise ValidationError(f"unknown field {key!r}")

    if remind and due < now:
        remind = False
        if emit:
            emit("Reminders can't be set for past dates and times; reminder disabled.")

    updated = state.store.update(task.id, title, details, due, remind, done)
    return f"Updated {updated.id[:8]}: {updated.title}"


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <id>"
    task = state.store.toggle_completion(resolve_task(state, args[0]).id)
    return f"{task.title}: {'completed' if task.is_completed else 'not completed'}"


def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <id>"
    task = resolve_task(state, args[0])
    state.store.delete(task.id)
    return f"Deleted {task.id[:8]}: {task.title}"


def _render_buckets(state: AppState, tasks: list[TaskRecord], empty_text: str) -> str:
    if not tasks:
        return empty_text
    now = state.clock()
    lines: list[str] = []
    for label, members in bucket_tasks(tasks, now):
        lines.append(f"{label}:")
        lines.extend(f"  {format_task_line(t, now)}" for t in members)
    return "\n".join(lines)


def cmd_list(state: AppState, args: list[str]) -> str:
    return _render_buckets(state, state.store.list(), "No tasks added yet. Use /add to create one.")


def cmd_search(state: AppState, args: list[str]) -> str:
    query = " ".join(args)
    found = filter_tasks(state.store.list(), query)
    return _render_buckets(state, found, f"No tasks match {query!r}.")


def cmd_stats(state: AppState, args: list[str]) -> str:
    s = compute_stats(state.store.list(), state.clock())
    return (
        "Stats:\n"
        f"  Total: {s.total}\n"
        f"  Completed: {s.completed}\n"
        f"  Pending: {s.pending}\n"
        f"  Due today: {s.today}\n"
        f"  Upcoming: {s.upcoming}\n"
        f"  Overdue: {s.overdue}"
    )


def cmd_reminders(state: AppState, args: list[str]) -> str:
    """
    /reminders       -> pending notifications + recent failures
    /reminders on    -> grant notification permission
    /reminders off   -> revoke notification permission
    """
    if args:
        granted = parse_flag(args[0])
        state.notifications.set_authorized(granted)
        return f"Notification permission {'granted' if granted else 'revoked'}."

    lines = [f"Notification permission: {'granted' if state.notifications.authorized else 'not granted'}"]
    pending = state.notifications.pending()
    if pending:
        lines.append("Pending reminders:")
        for n in pending:
            lines.append(f"  {format_due(n.fire_at)}  {n.payload.title}  ({n.task_id[:8]})")
    else:
        lines.append("No pending reminders.")
    if state.reminder_errors:
        lines.append("Recent failures:")
        lines.extend(f"  {e}" for e in state.reminder_errors)
    return "\n".join(lines)


def cmd_open(state: AppState, args: list[str]) -> str:
    """Act as if the user tapped the reminder for this task."""
    if not args:
        return "Usage: /open <id>"
    task = resolve_task(state, args[0])
    state.notifications.activate(task.id)
    return f"Opened reminder for {task.id[:8]}."


def cmd_show(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /show <id>"
    return render_task(resolve_task(state, args[0]))


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register(
    "add", cmd_add, help_text="Add a task: /add <due> | <title> [| <details>] [| remind].", raw=True
)
registry.register(
    "edit",
    cmd_edit,
    help_text="Edit a task: /edit <id> title=.. | details=.. | due=.. | remind=on|off | done=on|off.",
    raw=True,
)
registry.register("done", cmd_done, help_text="Toggle completion: /done <id>.", aliases=["toggle"])
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["delete", "rm"])
registry.register("list", cmd_list, help_text="List tasks grouped by due date.", aliases=["ls"])
registry.register("search", cmd_search, help_text="Search titles and details: /search <text>.")
registry.register("stats", cmd_stats, help_text="Show task counts.")
registry.register(
    "reminders", cmd_reminders, help_text="Pending reminders: /reminders | /reminders on|off."
)
registry.register("open", cmd_open, help_text="Open a delivered reminder: /open <id>.")
registry.register("show", cmd_show, help_text="Show one task: /show <id>.")
