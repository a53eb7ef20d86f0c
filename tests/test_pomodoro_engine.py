# tests/test_pomodoro_engine.py

from __future__ import annotations

import pytest

from study_planner.pomodoro.engine import Phase, PomodoroState, format_remaining


@pytest.fixture()
def short_focus(state):
    """One-minute focus / five-minute break, engine reset so the new length is picked up."""
    state.planner.update_settings(focus_minutes=1, break_minutes=5)
    state.pomodoro.reset()
    return state


def test_initial_state(state) -> None:
    engine = state.pomodoro
    assert engine.state == PomodoroState.READY
    assert engine.phase == Phase.FOCUS
    assert engine.display() == "25:00"
    assert engine.attached_task_id is None


def test_reset_uses_focus_length(short_focus) -> None:
    engine = short_focus.pomodoro
    assert engine.state == PomodoroState.READY
    assert engine.remaining_ms == 60_000
    assert engine.display() == "01:00"


def test_full_focus_phase_credits_attached_task(short_focus, ticker) -> None:
    state = short_focus
    task = state.tasks.add({"subject": "Math", "title": "Algebra"})
    events = []
    state.events.on_pomodoro_phase_complete.connect(events.append)

    state.pomodoro.attach(task.id)
    state.pomodoro.start()
    assert state.pomodoro.state == PomodoroState.RUNNING_FOCUS
    assert len(ticker.live) == 1

    ticker.fire(59)
    assert state.pomodoro.state == PomodoroState.RUNNING_FOCUS
    assert state.pomodoro.remaining_ms == 1000
    assert state.tasks.by_id(task.id).pomodoros_completed == 0

    ticker.fire(1)
    assert state.pomodoro.state == PomodoroState.RUNNING_BREAK
    assert state.pomodoro.phase == Phase.BREAK
    assert state.pomodoro.remaining_ms == 5 * 60 * 1000
    assert state.tasks.by_id(task.id).pomodoros_completed == 1

    assert len(events) == 1
    assert events[0].completed == Phase.FOCUS
    assert events[0].next_phase == Phase.BREAK
    assert events[0].credited_task_id == task.id


def test_break_completion_returns_to_focus_without_credit(short_focus, ticker) -> None:
    state = short_focus
    task = state.tasks.add({"subject": "Math", "title": "Algebra"})
    state.pomodoro.attach(task.id)
    state.pomodoro.start()

    ticker.fire(60 + 5 * 60)

    assert state.pomodoro.state == PomodoroState.RUNNING_FOCUS
    assert state.pomodoro.remaining_ms == 60_000
    assert state.tasks.by_id(task.id).pomodoros_completed == 1


def test_pause_and_resume_keep_phase(short_focus, ticker) -> None:
    engine = short_focus.pomodoro
    engine.start()
    ticker.fire(70)
    assert engine.state == PomodoroState.RUNNING_BREAK
    remaining = engine.remaining_ms

    engine.pause()
    assert engine.state == PomodoroState.PAUSED
    assert ticker.live == []
    ticker.fire(5)
    assert engine.remaining_ms == remaining

    engine.start()
    assert engine.state == PomodoroState.RUNNING_BREAK
    assert engine.remaining_ms == remaining
    assert len(ticker.live) == 1


def test_start_while_running_is_noop(short_focus, ticker) -> None:
    engine = short_focus.pomodoro
    engine.start()
    engine.start()
    assert len(ticker.streams) == 1


def test_stale_tick_after_pause_is_ignored(short_focus, ticker) -> None:
    engine = short_focus.pomodoro
    engine.start()
    old_callback = ticker.streams[0].callback

    engine.pause()
    engine.start()
    before = engine.remaining_ms
    old_callback()

    assert engine.remaining_ms == before
    ticker.fire(1)
    assert engine.remaining_ms == before - 1000


def test_reset_while_running_stops_ticks(short_focus, ticker) -> None:
    engine = short_focus.pomodoro
    engine.start()
    ticker.fire(10)
    engine.reset()
    assert engine.state == PomodoroState.READY
    assert engine.remaining_ms == 60_000
    assert ticker.live == []


def test_tick_outside_running_does_nothing(short_focus) -> None:
    engine = short_focus.pomodoro
    engine.tick()
    assert engine.remaining_ms == 60_000
    assert engine.state == PomodoroState.READY


def test_deleting_attached_task_detaches(short_focus, ticker) -> None:
    state = short_focus
    task = state.tasks.add({"subject": "Math", "title": "Algebra"})
    state.pomodoro.attach(task.id)
    state.pomodoro.start()

    state.tasks.remove(task.id)
    assert state.pomodoro.attached_task_id is None
    assert state.pomodoro.view().attached_label == "none"

    ticker.fire(60)
    assert state.pomodoro.state == PomodoroState.RUNNING_BREAK


def test_attach_unknown_task_detaches(state) -> None:
    task = state.tasks.add({"subject": "Math", "title": "Algebra"})
    state.pomodoro.attach(task.id)
    state.pomodoro.attach("nope")
    assert state.pomodoro.attached_task_id is None

    state.pomodoro.attach(task.id)
    state.pomodoro.attach(None)
    assert state.pomodoro.attached_task_id is None


def test_settings_change_applies_only_when_ready(short_focus, ticker) -> None:
    state = short_focus
    state.planner.update_settings(focus_minutes=2)
    assert state.pomodoro.remaining_ms == 120_000

    state.pomodoro.start()
    ticker.fire(1)
    state.planner.update_settings(focus_minutes=30)
    assert state.pomodoro.remaining_ms == 119_000


def test_first_start_from_fresh_engine(state, ticker) -> None:
    state.pomodoro.start()
    assert state.pomodoro.phase == Phase.FOCUS
    assert state.pomodoro.remaining_ms == 25 * 60 * 1000
    assert ticker.streams[0].interval_seconds == 1.0


def test_view_reports_attached_title(state) -> None:
    task = state.tasks.add({"subject": "Math", "title": "Algebra"})
    state.pomodoro.attach(task.id)
    view = state.pomodoro.view()
    assert view.attached_task_id == task.id
    assert view.attached_label == "Algebra"
    assert view.state == PomodoroState.READY


@pytest.mark.parametrize(
    ("ms", "text"),
    [(0, "00:00"), (1, "00:01"), (59_001, "01:00"), (61_000, "01:01"), (25 * 60 * 1000, "25:00")],
)
def test_format_remaining_rounds_up(ms, text) -> None:
    assert format_remaining(ms) == text
