# src/study_planner/storage/backup.py

"""
Export / import of the whole planner as one JSON document.

Export: {"tasks": [...], "sessions": [...], "settings": {...}}, pretty-printed.
Import: any of the three keys may be present; a present key replaces its slot
wholesale (no merge). The document is fully decoded before anything is replaced,
so a bad file never leaves state half-imported.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from ..core.errors import ValidationError
from ..core.planner_settings import PlannerSettings
from ..tasks.task_models import Task
from ..tracking.session_models import Session
from .store import Store, decode_sessions, decode_settings, decode_tasks

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ImportPayload:
    tasks: list[Task] | None = None
    sessions: list[Session] | None = None
    settings: PlannerSettings | None = None

    @property
    def replaced(self) -> list[str]:
        names = []
        if self.tasks is not None:
            names.append("tasks")
        if self.sessions is not None:
            names.append("sessions")
        if self.settings is not None:
            names.append("settings")
        return names


def backup_filename(day: date) -> str:
    return f"ssp_backup_{day.isoformat()}.json"


def export_json(store: Store) -> str:
    return json.dumps(store.snapshot(), ensure_ascii=False, indent=2)


def write_backup(store: Store, directory: str | Path, day: date) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / backup_filename(day)
    tmp = path.with_suffix(".tmp")
    tmp.write_text(export_json(store), "utf-8")
    os.replace(tmp, path)
    logger.info("Backup written to %s", path)
    return path


def parse_import(text: str) -> ImportPayload:
    """Decode an import document; raises ValidationError for invalid JSON or shape."""
    try:
        data: Any = json.loads(text)
    except ValueError as e:
        raise ValidationError(f"Invalid backup file: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("Invalid backup file: expected a JSON object")

    payload = ImportPayload()
    # A key that is present but empty (e.g. "tasks": []) still replaces its slot.
    if data.get("tasks") is not None:
        if not isinstance(data["tasks"], list):
            raise ValidationError("Invalid backup file: 'tasks' must be a list")
        payload.tasks = decode_tasks(data["tasks"])
    if data.get("sessions") is not None:
        if not isinstance(data["sessions"], list):
            raise ValidationError("Invalid backup file: 'sessions' must be a list")
        payload.sessions = decode_sessions(data["sessions"])
    if data.get("settings") is not None:
        if not isinstance(data["settings"], dict):
            raise ValidationError("Invalid backup file: 'settings' must be an object")
        payload.settings = decode_settings(data["settings"])
    return payload
