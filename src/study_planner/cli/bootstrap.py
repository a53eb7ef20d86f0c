# src/study_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations (storage backend, system clock, thread ticker)
  into AppState.
"""

from __future__ import annotations

import logging
import threading

from ..config import get_settings
from ..core.clock import SystemClock
from ..core.state import AppState, build_state
from ..pomodoro.ticker import ThreadTicker
from ..storage.backends import create_backend

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.backup_dir.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    # One lock shared by the REPL and the tick thread.
    lock = threading.RLock()

    state = build_state(
        settings,
        backend=create_backend(settings),
        clock=SystemClock(),
        ticker=ThreadTicker(lock),
        lock=lock,
    )
    logger.info(
        "State ready backend=%s tasks=%d sessions=%d",
        settings.storage_backend,
        state.tasks.count(),
        len(state.sessions.all()),
    )
    return state

