# src/task_planner/tasks/task_models.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    text: str
    completed: bool = False
    # None until the collection has resolved its server timestamp.
    created_at: float | None = None


def _as_timestamp(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    # Objects with a to-seconds accessor (datetime-like).
    ts = getattr(raw, "timestamp", None)
    if callable(ts):
        try:
            return float(ts())
        except Exception:
            return None
    return None


def task_from_record(task_id: str, record: dict[str, Any] | None) -> Task:
    """Build a Task from a raw collection record; malformed fields get defaults."""
    record = record or {}
    text = record.get("text")
    return Task(
        id=str(task_id),
        text=text if isinstance(text, str) else "",
        completed=bool(record.get("completed", False)),
        created_at=_as_timestamp(record.get("createdAt")),
    )
