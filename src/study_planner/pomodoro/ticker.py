# src/study_planner/pomodoro/ticker.py

from __future__ import annotations

"""
Periodic tick primitives for the pomodoro engine.

ThreadTicker: a daemon thread per tick stream; used by the console app, where the
main thread is blocked in input(). Pass the same lock the REPL holds while running
commands: the callback runs under it, and a stream cancelled while the lock is held
never fires again.

AsyncioTicker: an asyncio task per tick stream, for hosts that already run an event
loop. Cancel it like any other task.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext

logger = logging.getLogger(__name__)


class _ThreadTick:
    def __init__(self, stop: threading.Event, thread: threading.Thread) -> None:
        self._stop = stop
        self.thread = thread

    def cancel(self) -> None:
        self._stop.set()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()


class ThreadTicker:
    def __init__(self, lock: AbstractContextManager | None = None) -> None:
        self._lock = lock

    def schedule_every(self, interval_seconds: float, callback: Callable[[], None]) -> _ThreadTick:
        interval = max(0.01, float(interval_seconds))
        stop = threading.Event()
        lock = self._lock if self._lock is not None else nullcontext()

        def runner() -> None:
            # Event.wait returns True once cancelled, False on timeout.
            while not stop.wait(interval):
                with lock:
                    if stop.is_set():
                        break
                    try:
                        callback()
                    except Exception:
                        logger.exception("Tick callback failed")
            logger.debug("Tick thread finished")

        thread = threading.Thread(target=runner, name="pomodoro-ticker", daemon=True)
        handle = _ThreadTick(stop, thread)
        thread.start()
        logger.debug("Tick thread started interval=%.2fs", interval)
        return handle


class _AsyncTick:
    def __init__(self) -> None:
        self.task: asyncio.Task[None] | None = None
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True
        if self.task is not None:
            self.task.cancel()


class AsyncioTicker:
    """
    schedule_every() must be called from inside a running event loop.
    """

    def schedule_every(self, interval_seconds: float, callback: Callable[[], None]) -> _AsyncTick:
        interval = max(0.001, float(interval_seconds))
        handle = _AsyncTick()

        async def runner() -> None:
            while True:
                await asyncio.sleep(interval)
                if handle.cancelled:
                    return
                try:
                    callback()
                except Exception:
                    logger.exception("Tick callback failed")

        handle.task = asyncio.get_running_loop().create_task(runner())
        return handle
