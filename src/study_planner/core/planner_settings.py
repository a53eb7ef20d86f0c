# src/study_planner/core/planner_settings.py

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

from .flags import parse_flag

DEFAULT_FOCUS_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5


class Theme(StrEnum):
    DARK = "dark"
    LIGHT = "light"

    @classmethod
    def parse(cls, raw: Any) -> Theme:
        try:
            return cls(str(raw or "").strip().lower())
        except ValueError:
            return cls.DARK


def _minutes(raw: Any, default: int) -> int:
    """Positive integer minutes; unparsable input falls back to the default."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return max(1, value)


def _first_day(raw: Any) -> int:
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return 0
    return value if 0 <= value <= 6 else 0


@dataclass(frozen=True, slots=True)
class PlannerSettings:
    """User preferences persisted next to tasks and sessions."""

    focus_minutes: int = DEFAULT_FOCUS_MINUTES
    break_minutes: int = DEFAULT_BREAK_MINUTES
    theme: Theme = Theme.DARK
    first_day: int = 0  # 0 = Sunday ... 6 = Saturday
    reminders: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "focusMinutes": self.focus_minutes,
            "breakMinutes": self.break_minutes,
            "theme": self.theme.value,
            "firstDay": self.first_day,
            "reminders": self.reminders,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> PlannerSettings:
        return cls(
            focus_minutes=_minutes(raw.get("focusMinutes"), DEFAULT_FOCUS_MINUTES),
            break_minutes=_minutes(raw.get("breakMinutes"), DEFAULT_BREAK_MINUTES),
            theme=Theme.parse(raw.get("theme")),
            first_day=_first_day(raw.get("firstDay", 0)),
            reminders=bool(parse_flag(raw.get("reminders"))),
        )

    def merged(self, **changes: Any) -> PlannerSettings:
        """
        Apply user edits with the same coercion as decoding.

        Accepts focus_minutes, break_minutes, theme, first_day, reminders; None values
        are ignored.
        """
        updates: dict[str, Any] = {}
        if changes.get("focus_minutes") is not None:
            updates["focus_minutes"] = _minutes(changes["focus_minutes"], DEFAULT_FOCUS_MINUTES)
        if changes.get("break_minutes") is not None:
            updates["break_minutes"] = _minutes(changes["break_minutes"], DEFAULT_BREAK_MINUTES)
        if changes.get("theme") is not None:
            updates["theme"] = Theme.parse(changes["theme"])
        if changes.get("first_day") is not None:
            updates["first_day"] = _first_day(changes["first_day"])
        if changes.get("reminders") is not None:
            updates["reminders"] = bool(parse_flag(changes["reminders"]))
        return replace(self, **updates)
