# tests/test_local_collection.py

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from task_planner.core.conditions import ConditionBoard
from task_planner.core.ports import SERVER_TIMESTAMP
from task_planner.core.retry import RetryExecutor
from task_planner.tasks.local_collection import LocalTaskCollection
from task_planner.tasks.task_store import TaskStore

from .fakes import InstantSleeper, flush

PATH = "artifacts/app/users/u1/tasks"


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


@pytest.mark.asyncio
async def test_insert_update_delete_deliver_full_snapshots(tmp_path: Path) -> None:
    col = LocalTaskCollection(tmp_path / "tasks.sqlite3", clock=Clock())
    snapshots: list[dict] = []
    errors: list[BaseException] = []
    unsubscribe = col.listen(PATH, snapshots.append, errors.append)

    # Delivery is never inline.
    assert snapshots == []
    await flush()
    assert snapshots == [{}]

    rid = await col.insert(PATH, {"text": "A", "completed": False, "createdAt": SERVER_TIMESTAMP})
    await flush()
    assert snapshots[-1] == {rid: {"text": "A", "completed": False, "createdAt": 1001.0}}

    await col.update(PATH, rid, {"completed": True})
    await flush()
    assert snapshots[-1][rid]["completed"] is True
    assert snapshots[-1][rid]["text"] == "A"

    await col.delete(PATH, rid)
    await flush()
    assert snapshots[-1] == {}
    assert errors == []

    unsubscribe()
    await col.insert(PATH, {"text": "B"})
    await flush()
    assert snapshots[-1] == {}
    assert col.count_records(PATH) == 1


@pytest.mark.asyncio
async def test_update_missing_raises_and_delete_missing_is_noop(tmp_path: Path) -> None:
    col = LocalTaskCollection(tmp_path / "tasks.sqlite3")
    with pytest.raises(KeyError):
        await col.update(PATH, "nope", {"completed": True})
    await col.delete(PATH, "nope")


@pytest.mark.asyncio
async def test_scopes_are_isolated_and_persist(tmp_path: Path) -> None:
    db = tmp_path / "tasks.sqlite3"
    col = LocalTaskCollection(db)
    await col.insert(PATH, {"text": "mine"})
    await col.insert("artifacts/app/users/u2/tasks", {"text": "theirs"})

    reopened = LocalTaskCollection(db)
    snap = reopened.read_snapshot(PATH)
    assert [r["text"] for r in snap.values()] == ["mine"]
    assert reopened.count_records() == 2


@pytest.mark.asyncio
async def test_task_store_on_local_collection(tmp_path: Path) -> None:
    col = LocalTaskCollection(tmp_path / "tasks.sqlite3", clock=Clock())
    store = TaskStore(
        col,
        namespace="artifacts/app/users",
        retry=RetryExecutor(sleep=InstantSleeper()),
        conditions=ConditionBoard(),
    )
    store.subscribe("u1")
    await flush()

    first = await store.create("first")
    second = await store.create("second")
    await flush()
    assert [t.text for t in store.tasks] == ["second", "first"]

    await store.toggle_completion(second)
    await flush()
    assert [(t.text, t.completed) for t in store.tasks] == [("first", False), ("second", True)]

    await store.delete(first)
    await flush()
    assert [t.id for t in store.tasks] == [second]


@pytest.mark.asyncio
async def test_read_error_ends_listener(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    col = LocalTaskCollection(tmp_path / "tasks.sqlite3")
    snapshots: list[dict] = []
    errors: list[BaseException] = []
    col.listen(PATH, snapshots.append, errors.append)

    def broken(path: str) -> dict:
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(col, "read_snapshot", broken)
    await flush()
    assert len(errors) == 1
    assert snapshots == []

    monkeypatch.undo()
    await col.insert(PATH, {"text": "after"})
    await flush()
    assert snapshots == []
    assert len(errors) == 1
