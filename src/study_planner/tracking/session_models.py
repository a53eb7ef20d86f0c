# src/study_planner/tracking/session_models.py

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any


def duration_minutes(start: datetime, stop: datetime) -> int:
    """Whole minutes between two instants, half-up rounded, never negative."""
    seconds = (stop - start).total_seconds()
    return max(0, int(math.floor(seconds / 60 + 0.5)))


@dataclass(slots=True)
class Session:
    id: str
    task_id: str | None
    start: str
    stop: str | None = None
    duration: int = 0  # minutes, set when the session is stopped

    @property
    def active(self) -> bool:
        return self.stop is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "taskId": self.task_id,
            "start": self.start,
            "stop": self.stop,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Session | None:
        session_id = str(raw.get("id") or "").strip()
        start = str(raw.get("start") or "").strip()
        if not session_id or not start:
            return None
        task_id = raw.get("taskId")
        stop = raw.get("stop")
        try:
            duration = int(raw.get("duration") or 0)
        except (TypeError, ValueError):
            duration = 0
        return cls(
            id=session_id,
            task_id=str(task_id) if task_id else None,
            start=start,
            stop=str(stop) if stop else None,
            duration=max(0, duration),
        )
