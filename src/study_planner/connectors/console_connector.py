# src/study_planner/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.state import AppState
from ..pomodoro.engine import Phase, PhaseComplete
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _rewrite_prev_line(line: str) -> None:
    """
    Replace the last terminal line with `line`.
    Best-effort: if not a TTY, just print a new line.
    """
    try:
        if sys.stdout.isatty():
            sys.stdout.write("\033[1A\033[2K\r")
            sys.stdout.write(line + "\n")
            sys.stdout.flush()
        else:
            print(line)
    except OSError:
        print(line)


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def phase_message(event: PhaseComplete, state: AppState) -> str:
    if event.completed == Phase.FOCUS:
        task = state.tasks.by_id(event.credited_task_id)
        credit = f" +1 pomodoro for \"{task.title}\"." if task else ""
        return f"[POMODORO] Focus complete, take a break.{credit}"
    return "[POMODORO] Break over, back to focus."


def celebrate_message(task: Task) -> str:
    return f"[DONE] Nice work: \"{task.title}\" ({task.subject})"


def _attach_notifications(state: AppState) -> None:
    """Print timer and completion notifications; these may arrive from the tick thread."""

    def on_phase(event: PhaseComplete) -> None:
        bell = "\a" if state.store.settings.reminders else ""
        _print_ts(bell + phase_message(event, state))

    def on_celebrate(task: Task) -> None:
        _print_ts(celebrate_message(task))

    state.events.on_pomodoro_phase_complete.connect(on_phase)
    state.events.on_celebrate.connect(on_celebrate)


def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Study planner ready. Use /help for commands. Use /exit to quit.\n")

    lock = getattr(state, "lock", None)
    _attach_notifications(state)

    def emit(text: str) -> None:
        print(f"[{_ts_local()}] {text}", flush=True)

    while True:
        try:
            user_input = input(">>> ").strip()
            _rewrite_prev_line(f"[{_ts_local()}] >>> {user_input}")
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            _print_ts("Commands start with '/'. Try /help.")
            continue

        try:
            if lock:
                with lock:
                    cmd_response = command_registry.handle(state, user_input, emit=emit)
            else:
                cmd_response = command_registry.handle(state, user_input, emit=emit)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is not None:
            _print_ts(cmd_response)

    logger.info("Console connector finished.")
