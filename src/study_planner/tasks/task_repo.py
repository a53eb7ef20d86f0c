# src/study_planner/tasks/task_repo.py

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..core.clock import is_iso_date, to_iso
from ..core.errors import NotFoundError, ValidationError
from ..core.events import PlannerEvents
from ..core.flags import parse_flag
from ..core.ids import new_id
from ..core.ports import Clock
from ..storage.store import Store
from .task_models import Priority, Task

logger = logging.getLogger(__name__)

_EDITABLE = ("subject", "title", "deadline", "priority", "notes", "done")


def _clean_deadline(raw: Any) -> str:
    value = str(raw or "").strip()
    if value and not is_iso_date(value):
        raise ValidationError(f"deadline must be YYYY-MM-DD, got {value!r}")
    return value


def _clean_priority(raw: Any) -> Priority:
    """User-supplied priority; blank means medium, anything unknown is rejected."""
    if isinstance(raw, Priority):
        return raw
    value = str(raw or "").strip().lower()
    if not value:
        return Priority.MEDIUM
    try:
        return Priority(value)
    except ValueError:
        raise ValidationError(
            f"priority must be one of {', '.join(p.value for p in Priority)}, got {value!r}"
        ) from None


def _clean_done(raw: Any) -> bool:
    done = parse_flag(raw, default=None)
    if done is None:
        raise ValidationError(f"done must be true or false, got {raw!r}")
    return done


class TaskRepository:
    """
    Owns the task collection held by the Store.

    Ordering is most-recent-first: add() inserts at the front.
    Every mutation writes the full task slot, then fires on_tasks_changed.
    Other components refer to tasks by id only and must treat a missing id as "no task".
    """

    def __init__(self, store: Store, events: PlannerEvents, clock: Clock) -> None:
        self._store = store
        self._events = events
        self._clock = clock

    def _commit(self) -> None:
        self._store.save_tasks()
        self._events.on_tasks_changed.emit()

    def _require(self, task_id: str) -> Task:
        task = self.by_id(task_id)
        if task is None:
            raise NotFoundError(f"task {task_id!r} not found")
        return task

    # ---- queries ----

    def all(self) -> list[Task]:
        return list(self._store.tasks)

    def count(self) -> int:
        return len(self._store.tasks)

    def by_id(self, task_id: str | None) -> Task | None:
        if not task_id:
            return None
        for task in self._store.tasks:
            if task.id == task_id:
                return task
        return None

    def by_date(self, date_str: str) -> list[Task]:
        return [t for t in self._store.tasks if t.deadline and t.deadline == date_str]

    # ---- mutations ----

    def add(self, data: Mapping[str, Any]) -> Task:
        subject = str(data.get("subject") or "").strip()
        title = str(data.get("title") or "").strip()
        if not subject or not title:
            raise ValidationError("subject and title are required")

        task = Task(
            id=new_id({t.id for t in self._store.tasks}),
            subject=subject,
            title=title,
            deadline=_clean_deadline(data.get("deadline")),
            priority=_clean_priority(data.get("priority")),
            notes=str(data.get("notes") or ""),
            created_at=to_iso(self._clock.now()),
        )
        self._store.tasks.insert(0, task)
        logger.info("Task added id=%s subject=%s deadline=%s", task.id, task.subject, task.deadline or "-")
        self._commit()
        return task

    def update(self, task_id: str, partial: Mapping[str, Any]) -> Task:
        task = self._require(task_id)

        changes = {k: partial[k] for k in _EDITABLE if k in partial}
        # Validate everything before touching the task.
        if "subject" in changes:
            changes["subject"] = str(changes["subject"] or "").strip()
            if not changes["subject"]:
                raise ValidationError("subject cannot be empty")
        if "title" in changes:
            changes["title"] = str(changes["title"] or "").strip()
            if not changes["title"]:
                raise ValidationError("title cannot be empty")
        if "deadline" in changes:
            changes["deadline"] = _clean_deadline(changes["deadline"])
        if "priority" in changes:
            changes["priority"] = _clean_priority(changes["priority"])
        if "notes" in changes:
            changes["notes"] = str(changes["notes"] or "")
        if "done" in changes:
            changes["done"] = _clean_done(changes["done"])

        was_done = task.done
        for name, value in changes.items():
            setattr(task, name, value)
        logger.debug("Task updated id=%s fields=%s", task_id, sorted(changes))
        self._commit()
        if not was_done and task.done:
            self._events.on_celebrate.emit(task)
        return task

    def remove(self, task_id: str) -> None:
        """
        Delete a task; unknown ids are ignored.

        Sessions keep their taskId as a historical reference. The pomodoro engine
        drops its attachment when it sees the id disappear (on_tasks_changed).
        """
        before = len(self._store.tasks)
        self._store.tasks = [t for t in self._store.tasks if t.id != task_id]
        if len(self._store.tasks) == before:
            return
        logger.info("Task removed id=%s", task_id)
        self._commit()

    def clear(self) -> None:
        if not self._store.tasks:
            return
        n = len(self._store.tasks)
        self._store.tasks = []
        logger.info("All tasks cleared (%d)", n)
        self._commit()

    def toggle_done(self, task_id: str) -> Task:
        task = self._require(task_id)
        was_done = task.done
        task.done = not task.done
        self._commit()
        if not was_done and task.done:
            self._events.on_celebrate.emit(task)
        return task

    def increment_pomodoro(self, task_id: str) -> Task:
        task = self._require(task_id)
        task.pomodoros_completed += 1
        self._commit()
        return task

    def decrement_pomodoro(self, task_id: str) -> Task:
        task = self._require(task_id)
        task.pomodoros_completed = max(0, task.pomodoros_completed - 1)
        self._commit()
        return task

    def reset_pomodoro(self, task_id: str) -> Task:
        task = self._require(task_id)
        task.pomodoros_completed = 0
        self._commit()
        return task
