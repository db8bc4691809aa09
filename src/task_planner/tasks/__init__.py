"""
Task subsystem.

Components:
- task_models.py: data structures (Task)
- ordering.py: display order (open first, newest first)
- task_store.py: live snapshot + retrying create/toggle/delete
- local_collection.py: SQLite-backed live collection
- task_api.py: small high-level helpers used by the rest of the app
"""
