# src/study_planner/core/clock.py

from __future__ import annotations

from datetime import date, datetime


class SystemClock:
    """Local wall-clock time with the machine's UTC offset attached."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


def to_iso(dt: datetime) -> str:
    return dt.isoformat(timespec="milliseconds")


def parse_iso(raw: str) -> datetime | None:
    try:
        return datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        return None


def date_key(ts: str) -> str:
    """
    Calendar-date bucket of a stored timestamp.

    Timestamps are written in local time with their offset, so the first ten
    characters are the local calendar date.
    """
    return (ts or "")[:10]


def is_iso_date(raw: str) -> bool:
    try:
        date.fromisoformat(raw)
    except (TypeError, ValueError):
        return False
    return True
