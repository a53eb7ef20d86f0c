# src/study_planner/core/errors.py

"""
Error kinds raised by the planner core.

All of them are raised synchronously to the immediate caller; nothing is retried.
PersistenceError is the exception: the Store records it (Store.last_error) instead of
raising, because in-memory state stays authoritative for the process lifetime.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for every error the core raises on purpose."""


class ValidationError(PlannerError, ValueError):
    """Required input missing or malformed; the operation made no change."""


class NotFoundError(PlannerError, LookupError):
    """An operation referenced an id that does not exist."""


class ConflictError(PlannerError):
    """Starting a time-tracking session while another one is active."""


class StateError(PlannerError):
    """Operation not valid in the current state (e.g. stopping with no active session)."""


class PersistenceError(PlannerError):
    """Storage read/write failure. Logged and observable, never fatal."""
