"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_repo.py: CRUD + pomodoro counters over the Store, announces on_tasks_changed
"""
