# src/task_planner/tasks/task_store.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from ..core.conditions import ConditionBoard
from ..core.errors import MutationFailed, SubscriptionFailed
from ..core.ports import SERVER_TIMESTAMP, TaskCollection, TaskRecord, Unsubscribe
from ..core.retry import RetryExecutor
from .ordering import order_tasks
from .task_models import Task, task_from_record

logger = logging.getLogger(__name__)

TasksListener = Callable[[list[Task]], None]


class Subscription:
    """Handle for one live feed. unsubscribe() is idempotent."""

    def __init__(self, store: "TaskStore", principal_id: str, path: str) -> None:
        self.principal_id = principal_id
        self.path = path
        self._store = store
        self._cancel: Unsubscribe | None = None
        self._active = True
        self.failed = False

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        if not self._active:
            return
        self._active = False
        cancel, self._cancel = self._cancel, None
        try:
            if cancel is not None:
                cancel()
        finally:
            self._store._subscription_closed(self)


class TaskStore:
    """
    Authoritative view of the current principal's tasks.

    The snapshot is replaced wholesale on each feed delivery; mutations are never
    spliced locally, their effect shows up with the next snapshot.

    All mutations go through the RetryExecutor. Terminal failures raise
    MutationFailed and are recorded on the ConditionBoard.
    """

    def __init__(
        self,
        collection: TaskCollection,
        *,
        namespace: str,
        retry: RetryExecutor | None = None,
        conditions: ConditionBoard | None = None,
    ) -> None:
        self._collection = collection
        self._namespace = namespace.strip("/")
        self._retry = retry or RetryExecutor()
        self.conditions = conditions if conditions is not None else ConditionBoard()

        self._subscription: Subscription | None = None
        self._snapshot: dict[str, Task] = {}
        self._loading = False
        self._listeners: list[TasksListener] = []

        # Text-input state: cleared only after a successful create().
        self.draft = ""

    # ---- views ----

    def collection_path(self, principal_id: str) -> str:
        return f"{self._namespace}/{principal_id}/tasks"

    @property
    def principal_id(self) -> str | None:
        sub = self._subscription
        return sub.principal_id if sub is not None and sub.active else None

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def snapshot(self) -> Mapping[str, Task]:
        return MappingProxyType(self._snapshot)

    @property
    def tasks(self) -> list[Task]:
        return order_tasks(self._snapshot)

    def get(self, task_id: str) -> Task | None:
        return self._snapshot.get(task_id)

    def add_listener(self, listener: TasksListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # ---- live feed ----

    def subscribe(self, principal_id: str) -> Subscription:
        if not principal_id:
            raise ValueError("principal_id is required")

        current = self._subscription
        if current is not None and current.active:
            if current.principal_id == principal_id and not current.failed:
                return current
            if current.failed:
                logger.info("Reopening failed feed %s", current.path)
            else:
                logger.info(
                    "Principal changed %s -> %s; closing previous feed",
                    current.principal_id,
                    principal_id,
                )
            current.unsubscribe()

        path = self.collection_path(principal_id)
        sub = Subscription(self, principal_id, path)
        self._subscription = sub
        self._snapshot = {}
        self._loading = True

        try:
            sub._cancel = self._collection.listen(
                path,
                lambda records: self._deliver(sub, records),
                lambda exc: self._feed_failed(sub, exc),
            )
        except Exception as e:
            sub._active = False
            self._subscription = None
            self._loading = False
            err = SubscriptionFailed(path, e)
            logger.error("Could not open live feed on %s: %r", path, e)
            self.conditions.report(err)
            raise err from e
        logger.info("Subscribed to %s", path)
        return sub

    def unsubscribe(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()

    def _subscription_closed(self, sub: Subscription) -> None:
        if sub is not self._subscription:
            return
        self._subscription = None
        self._snapshot = {}
        self._loading = False
        logger.info("Unsubscribed from %s", sub.path)
        self._notify()

    def _deliver(self, sub: Subscription, records: Mapping[str, TaskRecord]) -> None:
        if sub is not self._subscription or not sub.active or sub.failed:
            logger.debug("Dropping snapshot for stale feed %s", sub.path)
            return
        self._snapshot = {
            str(rid): task_from_record(str(rid), rec) for rid, rec in records.items()
        }
        self._loading = False
        self.conditions.clear(SubscriptionFailed.kind)
        logger.debug("Snapshot %s: %d task(s)", sub.path, len(self._snapshot))
        self._notify()

    def _feed_failed(self, sub: Subscription, exc: BaseException) -> None:
        # A failed feed is over: later snapshots are dropped until subscribe() reopens it.
        if sub is not self._subscription or not sub.active or sub.failed:
            return
        sub.failed = True
        self._loading = False
        logger.error("Live feed error on %s: %r", sub.path, exc)
        self.conditions.report(SubscriptionFailed(sub.path, exc))

    def _notify(self) -> None:
        ordered = self.tasks
        for listener in list(self._listeners):
            try:
                listener(ordered)
            except Exception:
                logger.exception("Tasks listener failed")

    # ---- mutations ----

    def _failed(self, operation: str, task_id: str | None, exc: Exception) -> MutationFailed:
        err = MutationFailed(operation, task_id, exc)
        logger.error("Mutation %s failed task_id=%s: %r", operation, task_id, exc)
        self.conditions.report(err)
        return err

    async def create(self, text: str) -> str | None:
        """Insert a new incomplete task. Returns the new id, or None on no-op."""
        trimmed = (text or "").strip()
        principal_id = self.principal_id
        if not trimmed or principal_id is None:
            return None

        path = self.collection_path(principal_id)
        fields: dict[str, Any] = {
            "text": trimmed,
            "completed": False,
            "createdAt": SERVER_TIMESTAMP,
        }
        try:
            new_id = await self._retry.execute(
                lambda: self._collection.insert(path, dict(fields)),
                label="create task",
            )
        except Exception as e:
            raise self._failed("create", None, e) from e

        self.conditions.clear(MutationFailed.kind)
        self.draft = ""
        logger.info("Task created id=%s", new_id)
        return new_id

    async def toggle_completion(self, task_id: str, completed: bool | None = None) -> bool:
        """
        Flip `completed` on a task.

        `completed` is the value currently shown for the task; when omitted it is
        read from the snapshot.
        """
        principal_id = self.principal_id
        if principal_id is None:
            return False

        if completed is None:
            task = self._snapshot.get(task_id)
            if task is None:
                logger.warning("toggle_completion: unknown task_id=%s", task_id)
                return False
            completed = task.completed

        path = self.collection_path(principal_id)
        try:
            await self._retry.execute(
                lambda: self._collection.update(path, task_id, {"completed": not completed}),
                label="toggle task",
            )
        except Exception as e:
            raise self._failed("toggle", task_id, e) from e

        self.conditions.clear(MutationFailed.kind)
        logger.info("Task %s -> completed=%s", task_id, not completed)
        return True

    async def delete(self, task_id: str) -> bool:
        principal_id = self.principal_id
        if principal_id is None:
            return False

        path = self.collection_path(principal_id)
        try:
            await self._retry.execute(
                lambda: self._collection.delete(path, task_id),
                label="delete task",
            )
        except Exception as e:
            raise self._failed("delete", task_id, e) from e

        self.conditions.clear(MutationFailed.kind)
        logger.info("Task deleted id=%s", task_id)
        return True
