# src/study_planner/core/ids.py

from __future__ import annotations

from collections.abc import Container
from uuid import uuid4


def new_id(taken: Container[str]) -> str:
    """Short random hex id, unique against `taken`."""
    while True:
        candidate = uuid4().hex[:12]
        if candidate not in taken:
            return candidate
