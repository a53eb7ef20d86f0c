# src/study_planner/stats/aggregator.py

from __future__ import annotations

"""
Derived views over the current tasks/sessions.

Everything here is a pure function of its inputs: no caching, no incremental
bookkeeping. The planner recomputes all views after every change; cost is linear in
the number of tasks + sessions, which is fine for one person's planner and is the
ceiling to revisit if collections ever reach many thousands of records.
"""

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, timedelta

from ..core.clock import date_key
from ..core.ports import Clock
from ..tasks.task_models import Task
from ..tracking.session_models import Session


@dataclass(frozen=True, slots=True)
class MiniStats:
    total_tasks: int
    total_pomodoros: int


def today_tasks(tasks: Sequence[Task], today: date) -> list[Task]:
    key = today.isoformat()
    return [t for t in tasks if t.deadline == key]


def mini_stats(tasks: Sequence[Task]) -> MiniStats:
    return MiniStats(
        total_tasks=len(tasks),
        total_pomodoros=sum(t.pomodoros_completed for t in tasks),
    )


def weekly_minutes(sessions: Sequence[Session], reference_date: date) -> list[tuple[str, int]]:
    """7 (date, minutes) buckets ending at reference_date, oldest first."""
    totals: dict[str, int] = defaultdict(int)
    for s in sessions:
        totals[date_key(s.start)] += s.duration

    out: list[tuple[str, int]] = []
    for back in range(6, -1, -1):
        key = (reference_date - timedelta(days=back)).isoformat()
        out.append((key, totals.get(key, 0)))
    return out


def per_task_pomodoro_summary(tasks: Sequence[Task]) -> list[tuple[Task, int]]:
    return [(t, t.pomodoros_completed) for t in tasks]


def tasks_by_date(tasks: Sequence[Task], year: int, month: int) -> dict[str, list[Task]]:
    """Deadline-dated tasks of one month keyed by ISO date (calendar consumers)."""
    prefix = f"{year:04d}-{month:02d}-"
    out: dict[str, list[Task]] = {}
    for t in tasks:
        if t.deadline.startswith(prefix):
            out.setdefault(t.deadline, []).append(t)
    return out


class Aggregator:
    """The pure views above, bound to live repositories and a clock."""

    def __init__(self, tasks, sessions, clock: Clock) -> None:
        self._tasks = tasks
        self._sessions = sessions
        self._clock = clock

    def today(self) -> date:
        return self._clock.now().date()

    def today_tasks(self) -> list[Task]:
        return today_tasks(self._tasks.all(), self.today())

    def mini_stats(self) -> MiniStats:
        return mini_stats(self._tasks.all())

    def weekly_minutes(self) -> list[tuple[str, int]]:
        return weekly_minutes(self._sessions.all(), self.today())

    def per_task_pomodoro_summary(self) -> list[tuple[Task, int]]:
        return per_task_pomodoro_summary(self._tasks.all())

    def tasks_by_date(self, year: int, month: int) -> dict[str, list[Task]]:
        return tasks_by_date(self._tasks.all(), year, month)
