# src/study_planner/core/events.py

from __future__ import annotations

"""
Signals the core emits for external consumers (renderers, audio, notifications).

A Signal is a plain ordered list of callbacks. Listeners run synchronously, in
connection order, inside the emitting operation. A listener that raises is logged and
skipped: a broken renderer must not undo a task edit that was already persisted.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[..., None]


class Signal:
    def __init__(self, name: str) -> None:
        self.name = name
        self._listeners: list[Listener] = []

    def connect(self, listener: Listener) -> Listener:
        self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, *args: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener %r failed on signal %s", listener, self.name)

    def __len__(self) -> int:
        return len(self._listeners)


@dataclass(slots=True)
class PlannerEvents:
    """
    on_tasks_changed()                    task collection mutated
    on_sessions_changed()                 session collection mutated
    on_pomodoro_phase_complete(event)     a focus/break phase ran out (PhaseComplete)
    on_pomodoro_changed()                 engine state or attachment changed
    on_celebrate(task)                    a task went from not-done to done
    on_views_refreshed(view)              derived views were recomputed (PlannerView)
    """

    on_tasks_changed: Signal = field(default_factory=lambda: Signal("tasks_changed"))
    on_sessions_changed: Signal = field(default_factory=lambda: Signal("sessions_changed"))
    on_pomodoro_phase_complete: Signal = field(
        default_factory=lambda: Signal("pomodoro_phase_complete")
    )
    on_pomodoro_changed: Signal = field(default_factory=lambda: Signal("pomodoro_changed"))
    on_celebrate: Signal = field(default_factory=lambda: Signal("celebrate"))
    on_views_refreshed: Signal = field(default_factory=lambda: Signal("views_refreshed"))
