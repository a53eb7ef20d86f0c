# src/study_planner/storage/store.py

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from typing import Any

from ..core.errors import PersistenceError
from ..core.planner_settings import PlannerSettings
from ..core.ports import KeyValueBackend
from ..tasks.task_models import Task
from ..tracking.session_models import Session

logger = logging.getLogger(__name__)

TASKS_KEY = "ssp_tasks_v1"
SESSIONS_KEY = "ssp_sessions_v1"
SETTINGS_KEY = "ssp_settings_v1"


def decode_tasks(raw: Any) -> list[Task]:
    """Tolerant decoding: skip junk records, keep the first of duplicate ids."""
    if not isinstance(raw, list):
        return []
    out: list[Task] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            continue
        task = Task.from_dict(item)
        if task is None:
            continue
        if task.id in seen:
            logger.warning("Dropping duplicate task id=%s", task.id)
            continue
        seen.add(task.id)
        out.append(task)
    return out


def decode_sessions(raw: Any) -> list[Session]:
    if not isinstance(raw, list):
        return []
    out: list[Session] = []
    seen: set[str] = set()
    for item in raw:
        if not isinstance(item, dict):
            continue
        session = Session.from_dict(item)
        if session is None:
            continue
        if session.id in seen:
            logger.warning("Dropping duplicate session id=%s", session.id)
            continue
        seen.add(session.id)
        out.append(session)
    return out


def decode_settings(raw: Any) -> PlannerSettings:
    if not isinstance(raw, dict):
        return PlannerSettings()
    return PlannerSettings.from_dict(raw)


class Store:
    """
    In-memory snapshot of the three persisted slots + the only gateway to storage.

    - slots are loaded once (open()) and held in memory
    - every mutating operation elsewhere calls save_tasks()/save_sessions()/save_settings()
      which writes the full slot (no diffs, last write wins)
    - reads never raise: malformed or unreadable data falls back to defaults
    - writes never raise: failures land in errors/last_error and the log; an entry
      stays until that same key is written successfully
    """

    def __init__(self, backend: KeyValueBackend) -> None:
        self._backend = backend
        self.tasks: list[Task] = []
        self.sessions: list[Session] = []
        self.settings: PlannerSettings = PlannerSettings()
        self._errors: dict[str, PersistenceError] = {}

    @classmethod
    def open(cls, backend: KeyValueBackend) -> Store:
        store = cls(backend)
        store.reload()
        return store

    def reload(self) -> None:
        self.tasks = decode_tasks(self.load(TASKS_KEY, []))
        self.sessions = decode_sessions(self.load(SESSIONS_KEY, []))
        self.settings = decode_settings(self.load(SETTINGS_KEY, {}))
        logger.info(
            "Store loaded tasks=%d sessions=%d focus=%s break=%s",
            len(self.tasks),
            len(self.sessions),
            self.settings.focus_minutes,
            self.settings.break_minutes,
        )

    # ---- failure tracking ----

    @property
    def errors(self) -> dict[str, PersistenceError]:
        """Keys whose last read or write failed."""
        return dict(self._errors)

    @property
    def last_error(self) -> PersistenceError | None:
        """Most recent failure among keys that are still failing."""
        return next(reversed(self._errors.values()), None)

    def _fail(self, key: str, error: PersistenceError) -> None:
        self._errors.pop(key, None)
        self._errors[key] = error

    # ---- raw key-value access ----

    def load(self, key: str, fallback: Any) -> Any:
        try:
            raw = self._backend.get(key)
        except Exception as e:
            logger.exception("Storage read failed key=%s", key)
            self._fail(key, PersistenceError(f"read {key}: {e}"))
            return fallback
        if not raw:
            return fallback
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning("Malformed JSON under key=%s; using fallback", key)
            return fallback

    def save(self, key: str, value: Any) -> None:
        try:
            self._backend.set(key, json.dumps(value, ensure_ascii=False))
        except Exception as e:
            logger.exception("Storage write failed key=%s", key)
            self._fail(key, PersistenceError(f"write {key}: {e}"))
            return
        self._errors.pop(key, None)

    # ---- slot snapshots ----

    def save_tasks(self) -> None:
        self.save(TASKS_KEY, [t.to_dict() for t in self.tasks])

    def save_sessions(self) -> None:
        self.save(SESSIONS_KEY, [s.to_dict() for s in self.sessions])

    def save_settings(self) -> None:
        self.save(SETTINGS_KEY, self.settings.to_dict())

    def save_all(self) -> None:
        self.save_tasks()
        self.save_sessions()
        self.save_settings()

    def replace(
        self,
        *,
        tasks: Iterable[Task] | None = None,
        sessions: Iterable[Session] | None = None,
        settings: PlannerSettings | None = None,
    ) -> None:
        """Swap whole slots (import). Slots passed as None are left untouched."""
        if tasks is not None:
            self.tasks = list(tasks)
            self.save_tasks()
        if sessions is not None:
            self.sessions = list(sessions)
            self.save_sessions()
        if settings is not None:
            self.settings = settings
            self.save_settings()

    def snapshot(self) -> dict[str, Any]:
        return {
            "tasks": [t.to_dict() for t in self.tasks],
            "sessions": [s.to_dict() for s in self.sessions],
            "settings": self.settings.to_dict(),
        }
