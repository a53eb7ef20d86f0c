# src/study_planner/tracking/session_repo.py

from __future__ import annotations

import logging
from datetime import date

from ..core.clock import parse_iso, to_iso
from ..core.errors import ConflictError, StateError
from ..core.events import PlannerEvents
from ..core.ids import new_id
from ..core.ports import Clock
from ..stats.aggregator import weekly_minutes
from ..storage.store import Store
from ..tasks.task_repo import TaskRepository
from .session_models import Session, duration_minutes

logger = logging.getLogger(__name__)


class SessionRepository:
    """
    Time-tracking sessions + the single active-session pointer.

    The active session is the one with stop=None. At most one exists; it is tracked
    here by id and restored from the stored collection on load/import.
    """

    def __init__(
        self,
        store: Store,
        events: PlannerEvents,
        clock: Clock,
        tasks: TaskRepository,
    ) -> None:
        self._store = store
        self._events = events
        self._clock = clock
        self._tasks = tasks
        self._active_id: str | None = None
        self.reload_active()

    def _commit(self) -> None:
        self._store.save_sessions()
        self._events.on_sessions_changed.emit()

    def reload_active(self) -> None:
        """
        Re-derive the active pointer from stored data (newest unfinished session).

        Any older unfinished sessions (hand-edited or merged backups) are closed at their
        own start time with duration 0, so at most one session stays active.
        """
        self._active_id = None
        closed = 0
        for session in self._store.sessions:
            if not session.active:
                continue
            if self._active_id is None:
                self._active_id = session.id
                logger.info("Restored active session id=%s started=%s", session.id, session.start)
                continue
            logger.warning("Closing extra unfinished session id=%s started=%s", session.id, session.start)
            session.stop = session.start
            session.duration = 0
            closed += 1
        if closed:
            self._store.save_sessions()

    # ---- queries ----

    def all(self) -> list[Session]:
        return list(self._store.sessions)

    def by_id(self, session_id: str) -> Session | None:
        for session in self._store.sessions:
            if session.id == session_id:
                return session
        return None

    @property
    def active(self) -> Session | None:
        if self._active_id is None:
            return None
        return self.by_id(self._active_id)

    def label(self, session: Session) -> str:
        """Title of the tracked task; '(task)' when it was deleted since."""
        if not session.task_id:
            return ""
        task = self._tasks.by_id(session.task_id)
        return task.title if task else "(task)"

    def weekly_minutes(self, reference_date: date) -> list[tuple[str, int]]:
        return weekly_minutes(self._store.sessions, reference_date)

    # ---- lifecycle ----

    def start(self, task_id: str | None = None) -> Session:
        current = self.active
        if current is not None:
            raise ConflictError(f"session {current.id} is already running since {current.start}")

        session = Session(
            id=new_id({s.id for s in self._store.sessions}),
            task_id=task_id or None,
            start=to_iso(self._clock.now()),
        )
        self._store.sessions.insert(0, session)
        self._active_id = session.id
        logger.info("Session started id=%s task=%s", session.id, session.task_id)
        self._commit()
        return session

    def stop(self) -> Session:
        session = self.active
        if session is None:
            raise StateError("no active session to stop")

        now = self._clock.now()
        started = parse_iso(session.start)
        if started is not None and started.tzinfo is None:
            # Naive timestamps (hand-edited or legacy imports) are taken as local time.
            started = started.astimezone()
        session.stop = to_iso(now)
        session.duration = duration_minutes(started, now) if started is not None else 0
        self._active_id = None
        logger.info("Session stopped id=%s duration=%d min", session.id, session.duration)
        self._commit()
        return session

    def remove(self, session_id: str) -> None:
        before = len(self._store.sessions)
        self._store.sessions = [s for s in self._store.sessions if s.id != session_id]
        if len(self._store.sessions) == before:
            return
        if self._active_id == session_id:
            self._active_id = None
        logger.info("Session removed id=%s", session_id)
        self._commit()
