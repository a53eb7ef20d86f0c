# src/study_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core consumes exactly three things from the outside world:
- wall-clock time (Clock),
- a key-value persistence primitive (KeyValueBackend),
- a periodic-tick scheduling primitive (TickScheduler).
"""

from collections.abc import Callable
from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current local time (timezone-aware)."""

    def now(self) -> datetime: ...


class KeyValueBackend(Protocol):
    """
    Raw string storage keyed by name.

    get() returns None for a missing key. Both methods may raise; the Store turns
    failures into fallbacks / PersistenceError.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class TickHandle(Protocol):
    def cancel(self) -> None: ...


class TickScheduler(Protocol):
    """
    Periodic callback primitive.

    schedule_every() starts calling `callback` every `interval_seconds` until the
    returned handle is cancelled. After cancel() returns, the callback must not start
    again.
    """

    def schedule_every(self, interval_seconds: float, callback: Callable[[], None]) -> TickHandle: ...
