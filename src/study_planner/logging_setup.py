# src/study_planner/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "ssp.log"

_PACKAGE = "study_planner."
_TICKER = "study_planner.pomodoro.ticker"

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _ConsoleNoiseFilter(logging.Filter):
    """
    Console-side filter so log lines stay out of the way of the REPL prompt.

    Planner modules pass through at the handler level, except the ticker thread,
    which only surfaces problems (WARNING+). Captured warnings and other libraries
    show up only at ERROR+.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_TICKER):
            return record.levelno >= logging.WARNING
        if record.name.startswith(_PACKAGE):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(
    *,
    log_dir: str | Path = ".local/ssp",
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Route planner logs to stderr (filtered, console_level) and to <log_dir>/ssp.log
    (everything from file_level up). Returns the log file path.

    Replaces any handlers already on the root logger, so calling it again (tests,
    re-entry from main) does not duplicate output.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.addFilter(_ConsoleNoiseFilter())

    logfile = logging.FileHandler(str(log_file), encoding="utf-8")
    logfile.setLevel(file_level)

    for handler in (console, logfile):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    # warnings.warn() -> "py.warnings" logger
    logging.captureWarnings(True)
    return log_file
