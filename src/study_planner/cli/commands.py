# src/study_planner/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import cast

from ..core.errors import NotFoundError, PlannerError, ValidationError
from ..core.state import AppState
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandHandler2 = Callable[[AppState, list[str]], str]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], str]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Planner errors (validation, not found, conflicts) become the reply text.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

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
        except PlannerError as e:
            logger.info("/%s rejected: %s", name, e)
            return f"Error: {e}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- helpers ----


def _pipe_fields(args: list[str]) -> list[str]:
    return [p.strip() for p in " ".join(args).split("|")]


def _resolve_task(state: AppState, ref: str) -> Task:
    """Accept a 1-based position from /tasks or a task id."""
    tasks = state.tasks.all()
    if ref.isdigit():
        idx = int(ref)
        if 1 <= idx <= len(tasks):
            return tasks[idx - 1]
    task = state.tasks.by_id(ref)
    if task is None:
        raise NotFoundError(f"no task {ref!r} (use the number from /tasks or the id)")
    return task


def _format_task(i: int, t: Task) -> str:
    mark = "x" if t.done else " "
    due = f" due {t.deadline}" if t.deadline else ""
    return f"{i:>2}. [{mark}] {t.label} ({t.priority.value}){due} pomodoros={t.pomodoros_completed} id={t.id}"


def _key_values(items: list[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for item in items:
        if not item:
            continue
        if "=" not in item:
            raise ValidationError(f"expected key=value, got {item!r}")
        key, value = item.split("=", 1)
        out[key.strip().lower()] = value.strip()
    return out


# ---- general ----


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    settings = state.settings
    errors = state.store.errors
    pomo = state.pomodoro.view()
    active = state.sessions.active
    return (
        "Status:\n"
        f"  Storage: {getattr(settings, 'storage_backend', '?')} ({getattr(settings, 'data_dir', '?')})\n"
        f"  Persistence errors: {'; '.join(str(e) for e in errors.values()) if errors else 'none'}\n"
        f"  Tasks: {state.tasks.count()}  Sessions: {len(state.sessions.all())}\n"
        f"  Tracking: {'since ' + active.start if active else 'idle'}\n"
        f"  Pomodoro: {pomo.state.value} {pomo.display} (attached: {pomo.attached_label})"
    )


# ---- tasks ----


def cmd_add(state: AppState, args: list[str]) -> str:
    """
    /add subject | title [| deadline YYYY-MM-DD [| priority low/medium/high [| notes]]]
    """
    fields = _pipe_fields(args) + [""] * 5
    data = {
        "subject": fields[0],
        "title": fields[1],
        "deadline": fields[2],
        "priority": fields[3] or "medium",
        "notes": fields[4],
    }
    task = state.tasks.add(data)
    return f"Added: {task.label} (id={task.id})"


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <n|id> | title=... | subject=... | deadline=... | priority=... | notes=... | done=yes/no
    """
    if not args:
        return "Usage: /edit <n|id> | field=value | field=value ..."
    task = _resolve_task(state, args[0])
    changes = _key_values(_pipe_fields(args[1:]))
    if not changes:
        return "Nothing to change."
    task = state.tasks.update(task.id, changes)
    return f"Saved: {task.label}"


def cmd_tasks(state: AppState, args: list[str]) -> str:
    tasks = state.tasks.all()
    if not tasks:
        return "No tasks yet. Use /add subject | title"
    return "\n".join(_format_task(i, t) for i, t in enumerate(tasks, start=1))


def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <n|id>"
    task = state.tasks.toggle_done(_resolve_task(state, args[0]).id)
    return f"{'Done' if task.done else 'Not done'}: {task.label}"


def cmd_del(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /del <n|id>"
    task = _resolve_task(state, args[0])
    state.tasks.remove(task.id)
    return f"Deleted task: \"{task.title}\""


def cmd_clear(state: AppState, args: list[str]) -> str:
    if not args or args[0].lower() != "yes":
        return "This deletes every task. Confirm with /clear yes"
    state.tasks.clear()
    return "All tasks cleared."


def cmd_day(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /day YYYY-MM-DD"
    tasks = state.tasks.by_date(args[0])
    if not tasks:
        return f"No tasks due {args[0]}."
    return "\n".join(f"- {t.label} ({t.priority.value})" for t in tasks)


def cmd_today(state: AppState, args: list[str]) -> str:
    view = state.planner.view or state.planner.refresh()
    if not view.today_tasks:
        return "Nothing due today."
    return "\n".join(f"- {t.title} • {t.subject}" for t in view.today_tasks)


def cmd_pomos(state: AppState, args: list[str]) -> str:
    """
    /pomos                 -> per-task pomodoro counts
    /pomos <n|id> dec      -> remove one pomodoro (never below 0)
    /pomos <n|id> reset    -> set to 0
    """
    if len(args) >= 2:
        task = _resolve_task(state, args[0])
        action = args[1].lower()
        if action in ("dec", "-1"):
            task = state.tasks.decrement_pomodoro(task.id)
        elif action == "reset":
            task = state.tasks.reset_pomodoro(task.id)
        else:
            return "Usage: /pomos <n|id> dec|reset"
        return f"{task.label}: {task.pomodoros_completed} pomodoros"

    view = state.planner.view or state.planner.refresh()
    if not view.pomodoro_summary:
        return "No tasks yet."
    return "\n".join(f"- {t.label}: {n}" for t, n in view.pomodoro_summary)


# ---- time tracking ----


def cmd_track(state: AppState, args: list[str]) -> str:
    """
    /track start [n|id]   -> start a session (optionally for a task)
    /track stop           -> stop the running session
    /track del <n>        -> delete a session (number from /sessions)
    """
    if not args:
        return "Usage: /track start [n|id] | /track stop | /track del <n>"
    sub = args[0].lower()

    if sub == "start":
        task_id = _resolve_task(state, args[1]).id if len(args) > 1 else None
        session = state.sessions.start(task_id)
        return f"Tracking started at {session.start}."

    if sub == "stop":
        session = state.sessions.stop()
        return f"Tracking stopped: {session.duration} min."

    if sub == "del" and len(args) > 1:
        sessions = state.sessions.all()
        ref = args[1]
        if ref.isdigit() and 1 <= int(ref) <= len(sessions):
            ref = sessions[int(ref) - 1].id
        if state.sessions.by_id(ref) is None:
            raise NotFoundError(f"no session {args[1]!r}")
        state.sessions.remove(ref)
        return "Session deleted."

    return "Usage: /track start [n|id] | /track stop | /track del <n>"


def cmd_sessions(state: AppState, args: list[str]) -> str:
    view = state.planner.view or state.planner.refresh()
    if not view.sessions:
        return "No sessions yet."
    lines = []
    for i, (s, label) in enumerate(view.sessions, start=1):
        running = " (running)" if s.active else ""
        suffix = f" • {label}" if label else ""
        lines.append(f"{i:>2}. {s.start[:16].replace('T', ' ')} - {s.duration} min{running}{suffix}")
    return "\n".join(lines)


# ---- pomodoro ----


def cmd_pomo(state: AppState, args: list[str]) -> str:
    """
    /pomo                   -> status
    /pomo start|pause|reset
    /pomo attach <n|id|none>
    """
    engine = state.pomodoro
    sub = args[0].lower() if args else "status"

    if sub == "start":
        engine.start()
    elif sub == "pause":
        engine.pause()
    elif sub == "reset":
        engine.reset()
    elif sub == "attach":
        if len(args) < 2 or args[1].lower() == "none":
            engine.attach(None)
        else:
            engine.attach(_resolve_task(state, args[1]).id)
    elif sub != "status":
        return "Usage: /pomo start|pause|reset|status | /pomo attach <n|id|none>"

    v = engine.view()
    return f"Pomodoro: {v.state.value} ({v.phase.value}) {v.display} • attached: {v.attached_label}"


# ---- analytics ----


def cmd_stats(state: AppState, args: list[str]) -> str:
    stats = state.planner.aggregator.mini_stats()
    return f"{stats.total_tasks} tasks • {stats.total_pomodoros} pomodoros"


def cmd_week(state: AppState, args: list[str]) -> str:
    days = state.planner.aggregator.weekly_minutes()
    peak = max([30] + [m for _, m in days])
    lines = ["Minutes tracked, last 7 days:"]
    for day, minutes in days:
        bar = "#" * round(minutes / peak * 30)
        lines.append(f"  {day} {minutes:>4}m {bar}")
    return "\n".join(lines)


# ---- settings / backup ----

_SETTING_KEYS = {
    "focus": "focus_minutes",
    "break": "break_minutes",
    "theme": "theme",
    "firstday": "first_day",
    "reminders": "reminders",
}


def cmd_settings(state: AppState, args: list[str]) -> str:
    """
    /settings                                   -> show
    /settings focus=30 break=5 theme=light firstday=1 reminders=on
    """
    if args:
        raw = _key_values(args)
        unknown = sorted(set(raw) - set(_SETTING_KEYS))
        if unknown:
            return f"Unknown setting(s): {', '.join(unknown)}. Known: {', '.join(_SETTING_KEYS)}"
        state.planner.update_settings(**{_SETTING_KEYS[k]: v for k, v in raw.items()})

    s = state.planner.settings
    return (
        "Settings:\n"
        f"  focus={s.focus_minutes} min  break={s.break_minutes} min\n"
        f"  theme={s.theme.value}  firstday={s.first_day}  reminders={'on' if s.reminders else 'off'}"
    )


def cmd_export(state: AppState, args: list[str]) -> str:
    directory = Path(args[0]).expanduser() if args else Path(getattr(state.settings, "backup_dir", "."))
    path = state.planner.write_backup(directory)
    return f"Exported to {path}"


def cmd_import(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /import <path-to-backup.json>"
    path = Path(" ".join(args)).expanduser()
    try:
        text = path.read_text("utf-8")
    except OSError as e:
        return f"Cannot read {path}: {e.strerror or e}"
    replaced = state.planner.import_json(text)
    if not replaced:
        return "Nothing to import (no tasks/sessions/settings keys)."
    return f"Imported successfully ({', '.join(replaced)})."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Storage, counts, timers.")
registry.register("add", cmd_add, help_text="Add a task: /add subject | title | deadline | priority | notes.")
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <n> | title=... | deadline=...")
registry.register("tasks", cmd_tasks, help_text="List tasks.", aliases=["ls"])
registry.register("done", cmd_done, help_text="Toggle done: /done <n>.")
registry.register("del", cmd_del, help_text="Delete a task: /del <n>.", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Delete all tasks: /clear yes.")
registry.register("day", cmd_day, help_text="Tasks due on a date: /day YYYY-MM-DD.")
registry.register("today", cmd_today, help_text="Tasks due today.")
registry.register("pomos", cmd_pomos, help_text="Pomodoro counts: /pomos | /pomos <n> dec|reset.")
registry.register("track", cmd_track, help_text="Time tracking: /track start [n] | stop | del <n>.")
registry.register("sessions", cmd_sessions, help_text="List tracked sessions.")
registry.register("pomo", cmd_pomo, help_text="Timer: /pomo start|pause|reset|attach <n|none>.")
registry.register("stats", cmd_stats, help_text="Task and pomodoro totals.")
registry.register("week", cmd_week, help_text="Minutes tracked over the last 7 days.")
registry.register("settings", cmd_settings, help_text="Show/change: /settings focus=25 break=5 theme=dark.")
registry.register("export", cmd_export, help_text="Write a JSON backup: /export [dir].")
registry.register("import", cmd_import, help_text="Replace data from a backup: /import <file>.")
