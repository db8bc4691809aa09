# src/task_planner/tasks/ordering.py

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from .task_models import Task


def _sort_key(task: Task) -> tuple[bool, float]:
    created = task.created_at if task.created_at is not None else -math.inf
    return (task.completed, -created)


def order_tasks(tasks: Mapping[str, Task] | Iterable[Task]) -> list[Task]:
    """
    Incomplete tasks first, then newest first within each group.

    A task without a resolved timestamp sinks to the end of its group.
    sorted() is stable, so equal keys keep the snapshot order.
    """
    items = tasks.values() if isinstance(tasks, Mapping) else tasks
    return sorted(items, key=_sort_key)
