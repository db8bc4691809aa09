# src/task_planner/core/conditions.py

from __future__ import annotations

import itertools
import logging

from .errors import TaskPlannerError

logger = logging.getLogger(__name__)


class ConditionBoard:
    """
    Unresolved error conditions, one slot per kind.

    The user sees the most recent one. A success of the same kind clears it.
    """

    def __init__(self) -> None:
        self._seq = itertools.count(1)
        self._slots: dict[str, tuple[int, TaskPlannerError]] = {}

    def report(self, err: TaskPlannerError) -> None:
        self._slots[err.kind] = (next(self._seq), err)
        logger.debug("Condition reported kind=%s: %s", err.kind, err)

    def clear(self, kind: str) -> None:
        self._slots.pop(kind, None)

    def get(self, kind: str) -> TaskPlannerError | None:
        slot = self._slots.get(kind)
        return slot[1] if slot else None

    def current(self) -> TaskPlannerError | None:
        if not self._slots:
            return None
        return max(self._slots.values(), key=lambda s: s[0])[1]
