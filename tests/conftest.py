# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from study_planner.core.state import AppState, build_state
from study_planner.storage.backends import MemoryBackend

from .fakes import FakeClock, ManualTicker


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="study-planner-test",
        log_level="DEBUG",
        # Paths (tmp per test run)
        data_dir=tmp_path,
        storage_backend="json",
        db_path=tmp_path / "planner.sqlite3",
        backup_dir=tmp_path / "backups",
        tick_seconds=1.0,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def ticker() -> ManualTicker:
    return ManualTicker()


@pytest.fixture()
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    backend: MemoryBackend,
    clock: FakeClock,
    ticker: ManualTicker,
) -> AppState:
    """
    AppState wired with deterministic fakes.

    Storage is a real MemoryBackend so persisted JSON can be asserted on; time and
    ticks only move when a test says so.
    """
    return build_state(settings, backend=backend, clock=clock, ticker=ticker)
