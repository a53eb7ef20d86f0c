"""
Persistence.

Components:
- backends.py: key-value backends (memory, JSON directory, SQLite)
- store.py: the three slots (tasks, sessions, settings) with lenient loading
- backup.py: export/import of the whole planner as one JSON document
"""
