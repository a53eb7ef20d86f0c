# src/study_planner/core/planner.py

from __future__ import annotations

"""
Recompute-and-refresh coordinator.

Repositories and the pomodoro engine announce every mutation through PlannerEvents.
StudyPlanner listens to those signals and answers each one with a full recompute of
every derived view (PlannerView), published on on_views_refreshed. There is no
partial/incremental refresh: each pass re-reads all tasks and sessions.

It is also the home of the operations that span several slots: settings edits and
import/export.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..pomodoro.engine import PomodoroEngine, PomodoroView
from ..stats.aggregator import Aggregator, MiniStats
from ..storage.backup import export_json, parse_import, write_backup
from ..storage.store import Store
from ..tasks.task_models import Task
from ..tasks.task_repo import TaskRepository
from ..tracking.session_models import Session
from ..tracking.session_repo import SessionRepository
from .events import PlannerEvents
from .planner_settings import PlannerSettings
from .ports import Clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PlannerView:
    tasks: list[Task]
    today_tasks: list[Task]
    mini_stats: MiniStats
    weekly_minutes: list[tuple[str, int]]
    pomodoro_summary: list[tuple[Task, int]]
    sessions: list[tuple[Session, str]]
    active_session: Session | None
    pomodoro: PomodoroView
    settings: PlannerSettings


class StudyPlanner:
    def __init__(
        self,
        store: Store,
        events: PlannerEvents,
        tasks: TaskRepository,
        sessions: SessionRepository,
        pomodoro: PomodoroEngine,
        clock: Clock,
    ) -> None:
        self._store = store
        self.events = events
        self.tasks = tasks
        self.sessions = sessions
        self.pomodoro = pomodoro
        self._clock = clock
        self.aggregator = Aggregator(tasks, sessions, clock)
        self.view: PlannerView | None = None

        # Connected after the engine's own tasks_changed listener, so a deleted
        # attached task is already detached when the views are recomputed.
        events.on_tasks_changed.connect(self._on_change)
        events.on_sessions_changed.connect(self._on_change)
        events.on_pomodoro_changed.connect(self._on_change)

    def _on_change(self) -> None:
        self.refresh()

    def refresh(self) -> PlannerView:
        agg = self.aggregator
        view = PlannerView(
            tasks=self.tasks.all(),
            today_tasks=agg.today_tasks(),
            mini_stats=agg.mini_stats(),
            weekly_minutes=agg.weekly_minutes(),
            pomodoro_summary=agg.per_task_pomodoro_summary(),
            sessions=[(s, self.sessions.label(s)) for s in self.sessions.all()],
            active_session=self.sessions.active,
            pomodoro=self.pomodoro.view(),
            settings=self._store.settings,
        )
        self.view = view
        self.events.on_views_refreshed.emit(view)
        return view

    # ---- settings ----

    @property
    def settings(self) -> PlannerSettings:
        return self._store.settings

    def update_settings(self, **changes: Any) -> PlannerSettings:
        self._store.settings = self._store.settings.merged(**changes)
        self._store.save_settings()
        self.pomodoro.sync_settings()
        logger.info("Settings updated: %s", self._store.settings.to_dict())
        self.refresh()
        return self._store.settings

    # ---- import / export ----

    def export_json(self) -> str:
        return export_json(self._store)

    def write_backup(self, directory: str | Path) -> Path:
        return write_backup(self._store, directory, self._clock.now().date())

    def import_json(self, text: str) -> list[str]:
        """
        Replace the slots present in the document; returns the names replaced.

        Raises ValidationError (state untouched) for invalid JSON or shape.
        """
        payload = parse_import(text)
        self._store.replace(
            tasks=payload.tasks,
            sessions=payload.sessions,
            settings=payload.settings,
        )
        logger.info("Imported backup, replaced=%s", payload.replaced)

        if payload.sessions is not None:
            self.sessions.reload_active()
        if payload.settings is not None:
            self.pomodoro.sync_settings()

        if payload.tasks is not None:
            self.events.on_tasks_changed.emit()
        if payload.sessions is not None:
            self.events.on_sessions_changed.emit()
        if payload.settings is not None:
            self.refresh()
        return payload.replaced
