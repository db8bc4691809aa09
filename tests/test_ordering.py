# tests/test_ordering.py

from __future__ import annotations

import random

from task_planner.tasks.ordering import order_tasks
from task_planner.tasks.task_models import Task, task_from_record


def _random_tasks(rng: random.Random, n: int) -> list[Task]:
    out = []
    for i in range(n):
        created = None if rng.random() < 0.2 else float(rng.randint(0, 20))
        out.append(Task(id=f"t{i}", text=f"task {i}", completed=rng.random() < 0.4, created_at=created))
    return out


def test_snapshot_scenario_orders_open_newest_first_then_completed() -> None:
    snapshot = {
        "a": task_from_record("a", {"text": "A", "completed": False, "createdAt": 10}),
        "b": task_from_record("b", {"text": "B", "completed": True, "createdAt": 20}),
        "c": task_from_record("c", {"text": "C", "completed": False, "createdAt": 30}),
    }
    assert [t.id for t in order_tasks(snapshot)] == ["c", "a", "b"]


def test_unresolved_timestamp_sinks_to_end_of_its_group() -> None:
    tasks = [
        Task(id="pending", text="p", completed=False, created_at=None),
        Task(id="old", text="o", completed=False, created_at=1.0),
        Task(id="done-pending", text="dp", completed=True, created_at=None),
        Task(id="done", text="d", completed=True, created_at=5.0),
    ]
    assert [t.id for t in order_tasks(tasks)] == ["old", "pending", "done", "done-pending"]


def test_equal_keys_keep_input_order() -> None:
    tasks = [
        Task(id="x", text="x", created_at=7.0),
        Task(id="y", text="y", created_at=7.0),
        Task(id="z", text="z", created_at=7.0),
    ]
    assert [t.id for t in order_tasks(tasks)] == ["x", "y", "z"]
    assert [t.id for t in order_tasks(list(reversed(tasks)))] == ["z", "y", "x"]


def test_ordering_properties_hold_for_random_sets() -> None:
    rng = random.Random(1234)
    for _ in range(200):
        ordered = order_tasks(_random_tasks(rng, rng.randint(0, 12)))

        # idempotent
        assert order_tasks(ordered) == ordered

        # every incomplete task precedes every completed one
        flags = [t.completed for t in ordered]
        assert flags == sorted(flags)

        # newest first inside each group
        for group in (False, True):
            stamps = [
                t.created_at if t.created_at is not None else float("-inf")
                for t in ordered
                if t.completed is group
            ]
            assert stamps == sorted(stamps, reverse=True)


def test_task_from_record_defaults_malformed_fields() -> None:
    t = task_from_record("id1", {"text": 42, "createdAt": "soon"})
    assert t == Task(id="id1", text="", completed=False, created_at=None)
