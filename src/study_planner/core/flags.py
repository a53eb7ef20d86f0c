# src/study_planner/core/flags.py

from __future__ import annotations

from typing import Any

_TRUE = frozenset({"1", "true", "yes", "y", "on"})
_FALSE = frozenset({"0", "false", "no", "n", "off", ""})


def parse_flag(raw: Any, default: bool | None = False) -> bool | None:
    """
    Boolean from JSON values and user text ("on"/"off", "true"/"false", 1/0, ...).

    Strings outside the known words, and None, yield `default`.
    """
    if raw is None:
        return default
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        return default
    return bool(raw)
