# tests/test_commands.py

from __future__ import annotations

import inspect
import json
from pathlib import Path

from study_planner.cli.commands import CommandRegistry, cmd_add, cmd_import, registry


def test_command_registry_routes_2_and_3_params(state) -> None:
    reg = CommandRegistry()
    called = {"h2": 0, "h3": 0}
    notes: list[str] = []

    def h2(state, args):
        called["h2"] += 1
        return "h2:" + ",".join(args)

    def h3(state, args, emit):
        called["h3"] += 1
        if emit is not None:
            emit("note")
        return "h3"

    reg.register("a", h2, "a", aliases=["alpha"])
    reg.register("b", h3, "b")

    assert reg.handle(state, "/a x y") == "h2:x,y"
    assert reg.handle(state, "/ALPHA") == "h2:"
    assert reg.handle(state, "/b", emit=notes.append) == "h3"
    assert called == {"h2": 2, "h3": 1}
    assert notes == ["note"]
    assert "/a - a" in reg.build_help()
    assert "alpha" not in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")
    assert "Empty command" in (reg.handle(state, "/") or "")


def test_add_list_done_edit(state) -> None:
    reply = registry.handle(state, "/add Math | Algebra | 2026-03-10 | high | chapter 3")
    assert reply.startswith("Added: Algebra - Math")

    task = state.tasks.all()[0]
    assert task.notes == "chapter 3"

    listing = registry.handle(state, "/tasks")
    assert listing.startswith(" 1. [ ] Algebra - Math (high) due 2026-03-10")

    assert registry.handle(state, "/done 1") == "Done: Algebra - Math"
    assert state.tasks.by_id(task.id).done is True

    assert registry.handle(state, f"/edit {task.id} | title=Geometry | priority=low") == "Saved: Geometry - Math"
    assert state.tasks.by_id(task.id).priority.value == "low"


def test_planner_errors_become_replies(state) -> None:
    assert registry.handle(state, "/add Math") == "Error: subject and title are required"
    assert registry.handle(state, "/del 5").startswith("Error: no task '5'")
    assert registry.handle(state, "/track stop") == "Error: no active session to stop"
    assert registry.handle(state, "/add Math | Algebra | tomorrow").startswith("Error: deadline")
    assert state.tasks.count() == 0


def test_today_and_day(state) -> None:
    assert registry.handle(state, "/today") == "Nothing due today."
    registry.handle(state, "/add Math | Algebra | 2026-03-10")
    assert registry.handle(state, "/today") == "- Algebra • Math"
    assert registry.handle(state, "/day 2026-03-10") == "- Algebra - Math (medium)"
    assert registry.handle(state, "/day 2026-03-11") == "No tasks due 2026-03-11."


def test_pomodoro_commands(state, ticker) -> None:
    registry.handle(state, "/add Math | Algebra")
    registry.handle(state, "/settings focus=1")

    reply = registry.handle(state, "/pomo attach 1")
    assert "attached: Algebra" in reply

    reply = registry.handle(state, "/pomo start")
    assert reply.startswith("Pomodoro: running_focus (focus) 01:00")

    ticker.fire(60)
    assert "Algebra - Math: 1" in registry.handle(state, "/pomos")
    assert registry.handle(state, "/pomos 1 dec") == "Algebra - Math: 0 pomodoros"
    assert registry.handle(state, "/stats") == "1 tasks • 0 pomodoros"

    reply = registry.handle(state, "/pomo pause")
    assert reply.startswith("Pomodoro: paused (break)")


def test_tracking_and_week(state, clock) -> None:
    assert registry.handle(state, "/sessions") == "No sessions yet."
    assert registry.handle(state, "/track start").startswith("Tracking started")
    assert registry.handle(state, "/track start").startswith("Error:")
    clock.advance(minutes=25)
    assert registry.handle(state, "/track stop") == "Tracking stopped: 25 min."

    assert "25 min" in registry.handle(state, "/sessions")
    week = registry.handle(state, "/week").splitlines()
    assert len(week) == 8
    assert week[-1].startswith("  2026-03-10   25m")

    assert registry.handle(state, "/track del 1") == "Session deleted."
    assert state.sessions.all() == []


def test_settings_command(state) -> None:
    reply = registry.handle(state, "/settings focus=30 theme=light reminders=on")
    assert "focus=30 min" in reply
    assert "theme=light" in reply
    assert "reminders=on" in reply
    assert "Unknown setting(s): volume" in registry.handle(state, "/settings volume=3")


def test_clear_requires_confirmation(state) -> None:
    registry.handle(state, "/add Math | Algebra")
    assert "Confirm" in registry.handle(state, "/clear")
    assert state.tasks.count() == 1
    assert registry.handle(state, "/clear yes") == "All tasks cleared."
    assert state.tasks.count() == 0


def test_export_then_import(state, tmp_path: Path) -> None:
    registry.handle(state, "/add Math | Algebra")
    reply = registry.handle(state, f"/export {tmp_path}")
    path = tmp_path / "ssp_backup_2026-03-10.json"
    assert reply == f"Exported to {path}"

    registry.handle(state, "/clear yes")
    assert registry.handle(state, f"/import {path}") == (
        "Imported successfully (tasks, sessions, settings)."
    )
    assert [t.title for t in state.tasks.all()] == ["Algebra"]

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps([1, 2]), "utf-8")
    assert registry.handle(state, f"/import {bad}").startswith("Error: Invalid backup file")
    assert registry.handle(state, f"/import {tmp_path / 'missing.json'}").startswith("Cannot read")


def test_edit_done_flag_and_bad_priority(state) -> None:
    registry.handle(state, "/add Math | Algebra")
    registry.handle(state, "/done 1")

    assert registry.handle(state, "/edit 1 | done=false") == "Saved: Algebra - Math"
    assert state.tasks.all()[0].done is False
    registry.handle(state, "/edit 1 | done=yes")
    assert state.tasks.all()[0].done is True

    assert registry.handle(state, "/edit 1 | done=later").startswith("Error: done")
    assert state.tasks.all()[0].done is True

    assert registry.handle(state, "/add Math | Geometry | | urgent").startswith("Error: priority")
    assert registry.handle(state, "/edit 1 | priority=asap").startswith("Error: priority")
    assert state.tasks.count() == 1


def test_status_lists_persistence_errors(state) -> None:
    assert "Persistence errors: none" in registry.handle(state, "/status")


def test_add_and_import_ignore_emitter(state, tmp_path: Path) -> None:
    notes: list[str] = []
    for handler in (cmd_add, cmd_import):
        assert list(inspect.signature(handler).parameters) == ["state", "args"]

    assert registry.handle(state, "/add Math | Algebra", emit=notes.append).startswith("Added:")
    missing = tmp_path / "missing.json"
    assert registry.handle(state, f"/import {missing}", emit=notes.append).startswith("Cannot read")
    assert notes == []
