# tests/fakes.py

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

# Fixed, offset-aware "now" so date buckets do not depend on the machine's timezone.
DEFAULT_NOW = datetime(2026, 3, 10, 9, 0, 0, tzinfo=timezone(timedelta(hours=2)))


class FakeClock:
    """Deterministic Clock: time only moves when a test calls advance()."""

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


@dataclass(slots=True)
class ManualStream:
    interval_seconds: float
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(slots=True)
class ManualTicker:
    """
    TickScheduler that never fires on its own.

    - streams keeps every stream ever scheduled (cancelled ones included)
    - fire(n) delivers n ticks to the streams that are still live
    """

    streams: list[ManualStream] = field(default_factory=list)

    def schedule_every(self, interval_seconds: float, callback: Callable[[], None]) -> ManualStream:
        stream = ManualStream(interval_seconds, callback)
        self.streams.append(stream)
        return stream

    @property
    def live(self) -> list[ManualStream]:
        return [s for s in self.streams if not s.cancelled]

    def fire(self, n: int = 1) -> None:
        for _ in range(n):
            for stream in list(self.streams):
                if not stream.cancelled:
                    stream.callback()


class FailingBackend:
    """KeyValueBackend whose writes always fail (reads can be made to fail too)."""

    def __init__(self, *, fail_reads: bool = False) -> None:
        self.fail_reads = fail_reads
        self.write_attempts = 0

    def get(self, key: str) -> str | None:
        if self.fail_reads:
            raise OSError(f"cannot read {key}")
        return None

    def set(self, key: str, value: str) -> None:
        self.write_attempts += 1
        raise OSError("disk full")


class KeyFailingBackend:
    """MemoryBackend-like store whose writes fail for the keys listed in `failing`."""

    def __init__(self, failing: set[str]) -> None:
        self.failing = set(failing)
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        if key in self.failing:
            raise OSError(f"cannot write {key}")
        self.data[key] = value
