# src/study_planner/pomodoro/engine.py

from __future__ import annotations

"""
Pomodoro state machine.

    READY  --start-->  RUNNING_FOCUS  --(focus runs out)-->  RUNNING_BREAK
                            ^                                      |
                            +---------(break runs out)-------------+
    RUNNING_* --pause--> PAUSED --start--> back to the paused phase
    any       --reset--> READY (phase=focus, remaining=focus duration)

Time is counted in milliseconds, one TICK_MS step per scheduled tick. The engine
never auto-pauses at a phase boundary; it keeps ticking into the next phase.

The attached task is held by id only. Focus completions credit it through the task
repository at that moment; if the task is gone, nothing is credited.
"""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum

from ..core.events import PlannerEvents
from ..core.planner_settings import PlannerSettings
from ..core.ports import TickHandle, TickScheduler
from ..tasks.task_repo import TaskRepository

logger = logging.getLogger(__name__)

TICK_MS = 1000


class PomodoroState(StrEnum):
    READY = "ready"
    RUNNING_FOCUS = "running_focus"
    RUNNING_BREAK = "running_break"
    PAUSED = "paused"


class Phase(StrEnum):
    FOCUS = "focus"
    BREAK = "break"


_RUNNING = (PomodoroState.RUNNING_FOCUS, PomodoroState.RUNNING_BREAK)


@dataclass(frozen=True, slots=True)
class PhaseComplete:
    completed: Phase
    next_phase: Phase
    credited_task_id: str | None


@dataclass(frozen=True, slots=True)
class PomodoroView:
    state: PomodoroState
    phase: Phase
    remaining_ms: int
    display: str
    attached_task_id: str | None
    attached_label: str


def format_remaining(ms: int) -> str:
    """MM:SS, rounding up to the next whole second."""
    total = max(0, math.ceil(ms / 1000))
    return f"{total // 60:02d}:{total % 60:02d}"


class PomodoroEngine:
    def __init__(
        self,
        tasks: TaskRepository,
        settings: Callable[[], PlannerSettings],
        ticker: TickScheduler,
        events: PlannerEvents,
        *,
        tick_seconds: float = 1.0,
    ) -> None:
        self._tasks = tasks
        self._settings = settings
        self._ticker = ticker
        self._events = events
        self._tick_seconds = tick_seconds

        self.state = PomodoroState.READY
        self.phase = Phase.FOCUS
        self.remaining_ms = 0
        self._attached: str | None = None

        self._handle: TickHandle | None = None
        # Bumped whenever the tick stream is (re)started or stopped; a tick carrying an
        # older generation was scheduled before a pause/reset and is ignored.
        self._generation = 0

        events.on_tasks_changed.connect(self._drop_dangling_attachment)

    # ---- durations ----

    def _focus_ms(self) -> int:
        return max(1, self._settings().focus_minutes) * 60 * 1000

    def _break_ms(self) -> int:
        return max(1, self._settings().break_minutes) * 60 * 1000

    # ---- tick stream ----

    def _schedule(self) -> None:
        self._cancel_tick()
        generation = self._generation
        self._handle = self._ticker.schedule_every(
            self._tick_seconds, lambda: self._on_scheduled_tick(generation)
        )

    def _cancel_tick(self) -> None:
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _on_scheduled_tick(self, generation: int) -> None:
        if generation != self._generation:
            logger.debug("Ignoring stale tick (generation %d != %d)", generation, self._generation)
            return
        self.tick()

    # ---- state machine ----

    @property
    def running(self) -> bool:
        return self.state in _RUNNING

    @property
    def attached_task_id(self) -> str | None:
        return self._attached

    def start(self) -> None:
        if self.running:
            return
        if self.remaining_ms <= 0:
            self.phase = Phase.FOCUS
            self.remaining_ms = self._focus_ms()
        self.state = (
            PomodoroState.RUNNING_FOCUS if self.phase == Phase.FOCUS else PomodoroState.RUNNING_BREAK
        )
        self._schedule()
        logger.info("Pomodoro started phase=%s remaining=%s", self.phase.value, self.display())
        self._events.on_pomodoro_changed.emit()

    def pause(self) -> None:
        if not self.running:
            return
        self._cancel_tick()
        self.state = PomodoroState.PAUSED
        logger.info("Pomodoro paused phase=%s remaining=%s", self.phase.value, self.display())
        self._events.on_pomodoro_changed.emit()

    def reset(self) -> None:
        self._cancel_tick()
        self.state = PomodoroState.READY
        self.phase = Phase.FOCUS
        self.remaining_ms = self._focus_ms()
        logger.info("Pomodoro reset")
        self._events.on_pomodoro_changed.emit()

    def sync_settings(self) -> None:
        """Pick up a new focus length while idle; running or paused phases keep theirs."""
        if self.state == PomodoroState.READY and self.remaining_ms > 0:
            self.remaining_ms = self._focus_ms()

    def tick(self) -> None:
        if not self.running:
            return
        self.remaining_ms -= TICK_MS
        if self.remaining_ms <= 0:
            self._complete_phase()

    def _complete_phase(self) -> None:
        completed = self.phase
        if completed == Phase.FOCUS:
            self.phase = Phase.BREAK
            self.state = PomodoroState.RUNNING_BREAK
            self.remaining_ms = self._break_ms()
        else:
            self.phase = Phase.FOCUS
            self.state = PomodoroState.RUNNING_FOCUS
            self.remaining_ms = self._focus_ms()

        credited: str | None = None
        if completed == Phase.FOCUS and self._tasks.by_id(self._attached) is not None:
            self._tasks.increment_pomodoro(self._attached)
            credited = self._attached

        logger.info(
            "Pomodoro %s complete -> %s (credited=%s)", completed.value, self.phase.value, credited
        )
        self._events.on_pomodoro_phase_complete.emit(
            PhaseComplete(completed=completed, next_phase=self.phase, credited_task_id=credited)
        )
        self._events.on_pomodoro_changed.emit()

    # ---- attachment ----

    def attach(self, task_id: str | None) -> None:
        if task_id and self._tasks.by_id(task_id) is None:
            logger.warning("Cannot attach unknown task id=%s; detaching", task_id)
            task_id = None
        self._attached = task_id or None
        logger.debug("Pomodoro attached to %s", self._attached)
        self._events.on_pomodoro_changed.emit()

    def _drop_dangling_attachment(self) -> None:
        if self._attached and self._tasks.by_id(self._attached) is None:
            logger.info("Attached task %s no longer exists; detaching", self._attached)
            self._attached = None
            self._events.on_pomodoro_changed.emit()

    # ---- presentation ----

    def display(self) -> str:
        return format_remaining(self.remaining_ms or self._focus_ms())

    def view(self) -> PomodoroView:
        task = self._tasks.by_id(self._attached)
        return PomodoroView(
            state=self.state,
            phase=self.phase,
            remaining_ms=self.remaining_ms,
            display=self.display(),
            attached_task_id=self._attached,
            attached_label=task.title if task else "none",
        )
