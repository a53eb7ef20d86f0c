"""Smart study planner: tasks, time tracking and a pomodoro timer over a local key-value store."""

__version__ = "0.1.0"
