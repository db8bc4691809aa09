# src/task_planner/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the task collection and the generation backend swappable and
makes testing easier.
"""

from collections.abc import Callable
from typing import Any, Protocol

TaskRecord = dict[str, Any]
# Raw record as stored in a collection: {"text": ..., "completed": ..., "createdAt": ...}.

SnapshotCallback = Callable[[dict[str, TaskRecord]], None]
ErrorCallback = Callable[[BaseException], None]
Unsubscribe = Callable[[], None]


class _ServerTimestamp:
    """Sentinel replaced by the collection's own clock on insert."""

    _instance: "_ServerTimestamp | None" = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class TaskCollection(Protocol):
    """
    Remote task collection addressed by `{namespace}/{principal}/tasks`.

    listen() delivers full snapshots (never deltas) asynchronously, in the order
    the store produced them. The four operations may each fail.
    """

    def listen(
            self,
            path: str,
            on_snapshot: SnapshotCallback,
            on_error: ErrorCallback,
    ) -> Unsubscribe: ...

    async def insert(self, path: str, fields: TaskRecord) -> str: ...

    async def update(self, path: str, record_id: str, fields: TaskRecord) -> None: ...

    async def delete(self, path: str, record_id: str) -> None: ...


class TaskGenerator(Protocol):
    """Goal -> decoded JSON body (expected shape: {"tasks": [str, ...]})."""

    async def generate(self, prompt: str) -> Any: ...
