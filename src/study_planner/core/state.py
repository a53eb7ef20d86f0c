# src/study_planner/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ..pomodoro.engine import PomodoroEngine
from ..storage.store import Store
from ..tasks.task_repo import TaskRepository
from ..tracking.session_repo import SessionRepository
from .events import PlannerEvents
from .planner import StudyPlanner
from .ports import Clock, KeyValueBackend, TickScheduler


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    clock: Clock
    store: Store
    events: PlannerEvents
    tasks: TaskRepository
    sessions: SessionRepository
    pomodoro: PomodoroEngine
    planner: StudyPlanner

    # Single-writer discipline: the REPL and the tick thread both hold this while
    # touching planner state.
    lock: threading.RLock = field(default_factory=threading.RLock)


def build_state(
    settings,
    *,
    backend: KeyValueBackend,
    clock: Clock,
    ticker: TickScheduler,
    lock: threading.RLock | None = None,
) -> AppState:
    """
    Wire the core around concrete collaborators.

    Construction order matters for signal ordering: the engine subscribes to
    on_tasks_changed before the planner does.
    """
    store = Store.open(backend)
    events = PlannerEvents()
    tasks = TaskRepository(store, events, clock)
    sessions = SessionRepository(store, events, clock, tasks)
    pomodoro = PomodoroEngine(
        tasks,
        lambda: store.settings,
        ticker,
        events,
        tick_seconds=float(getattr(settings, "tick_seconds", 1.0)),
    )
    planner = StudyPlanner(store, events, tasks, sessions, pomodoro, clock)
    planner.refresh()

    return AppState(
        settings=settings,
        clock=clock,
        store=store,
        events=events,
        tasks=tasks,
        sessions=sessions,
        pomodoro=pomodoro,
        planner=planner,
        lock=lock if lock is not None else threading.RLock(),
    )
