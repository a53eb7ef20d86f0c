# src/study_planner/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ..core.flags import parse_flag


class Priority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: Any) -> Priority:
        if isinstance(raw, Priority):
            return raw
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.MEDIUM


@dataclass(slots=True)
class Task:
    id: str
    subject: str
    title: str
    deadline: str  # ISO date "YYYY-MM-DD" or "" for no deadline
    priority: Priority
    notes: str
    created_at: str
    done: bool = False
    pomodoros_completed: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "subject": self.subject,
            "title": self.title,
            "deadline": self.deadline,
            "priority": self.priority.value,
            "notes": self.notes,
            "createdAt": self.created_at,
            "done": self.done,
            "pomodorosCompleted": self.pomodoros_completed,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Task | None:
        """Decode a persisted/imported record; None if it has no usable id."""
        task_id = str(raw.get("id") or "").strip()
        if not task_id:
            return None
        try:
            pomos = int(raw.get("pomodorosCompleted") or 0)
        except (TypeError, ValueError):
            pomos = 0
        return cls(
            id=task_id,
            subject=str(raw.get("subject") or ""),
            title=str(raw.get("title") or ""),
            deadline=str(raw.get("deadline") or ""),
            priority=Priority.parse(raw.get("priority")),
            notes=str(raw.get("notes") or ""),
            created_at=str(raw.get("createdAt") or ""),
            done=bool(parse_flag(raw.get("done"))),
            pomodoros_completed=max(0, pomos),
        )

    @property
    def label(self) -> str:
        return f"{self.title} - {self.subject}"
