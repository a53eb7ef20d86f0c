"""
Time tracking.

Components:
- session_models.py: Session record and duration rounding
- session_repo.py: start/stop/delete with at most one active session
"""
