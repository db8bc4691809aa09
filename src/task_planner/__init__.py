"""Single-user task list with a live task feed and AI-generated suggestions."""

__version__ = "0.1.0"
