# src/task_planner/plans/plan_models.py

"""
Saved plans as returned by the plans backend.

A plan is read-only on the client: it is generated, listed, shown and
deleted, never edited.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PlanTask:
    id: str
    title: str
    description: str = ""
    estimated_hours: float = 0.0
    priority: str = ""
    category: str = ""
    dependencies: tuple[str, ...] = ()
    start_day: int | None = None
    end_day: int | None = None


@dataclass(frozen=True, slots=True)
class Milestone:
    name: str
    completion_day: int | None = None


@dataclass(frozen=True, slots=True)
class Plan:
    id: str
    goal: str
    summary: str = ""
    total_estimated_days: float = 0
    tasks: tuple[PlanTask, ...] = ()
    milestones: tuple[Milestone, ...] = ()
    recommendations: tuple[str, ...] = ()
    created_at: str | None = None

    @property
    def total_estimated_hours(self) -> float:
        return sum(t.estimated_hours for t in self.tasks)


def _num(val: Any, default: float = 0.0) -> float:
    if isinstance(val, bool):
        return default
    if isinstance(val, (int, float)):
        return val
    try:
        return float(val)
    except (TypeError, ValueError):
        return default


def _day(val: Any) -> int | None:
    if isinstance(val, bool) or not isinstance(val, (int, float)):
        return None
    return int(val)


def _task_from_dict(data: dict[str, Any], timeline: dict[str, Any]) -> PlanTask:
    tid = str(data.get("id", ""))
    span = timeline.get(tid)
    span = span if isinstance(span, dict) else {}
    deps = data.get("dependencies")
    return PlanTask(
        id=tid,
        title=str(data.get("title", "")),
        description=str(data.get("description") or ""),
        estimated_hours=_num(data.get("estimatedHours")),
        priority=str(data.get("priority") or ""),
        category=str(data.get("category") or ""),
        dependencies=tuple(str(d) for d in deps) if isinstance(deps, list) else (),
        start_day=_day(span.get("startDay")),
        end_day=_day(span.get("endDay")),
    )


def _list(val: Any) -> list[Any]:
    return val if isinstance(val, list) else []


def plan_from_dict(data: dict[str, Any]) -> Plan:
    """Build a Plan from backend JSON, tolerating missing optional fields."""
    timeline = data.get("timeline")
    timeline = {str(k): v for k, v in timeline.items()} if isinstance(timeline, dict) else {}
    created_at = data.get("createdAt")

    return Plan(
        id=str(data.get("id", "")),
        goal=str(data.get("goal", "")),
        summary=str(data.get("summary") or ""),
        total_estimated_days=_num(data.get("totalEstimatedDays")),
        tasks=tuple(
            _task_from_dict(t, timeline) for t in _list(data.get("tasks")) if isinstance(t, dict)
        ),
        milestones=tuple(
            Milestone(name=str(m.get("name", "")), completion_day=_day(m.get("completionDay")))
            for m in _list(data.get("milestones"))
            if isinstance(m, dict)
        ),
        recommendations=tuple(str(r) for r in _list(data.get("recommendations"))),
        created_at=str(created_at) if created_at is not None else None,
    )
