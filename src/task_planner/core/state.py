# src/task_planner/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..plans.plan_book import PlanBook
from ..suggestions.reconciler import SuggestionReconciler
from ..tasks.task_store import TaskStore
from .conditions import ConditionBoard
from .ports import TaskCollection
from .session import SessionBinding


@dataclass
class AppState:
    # Settings are kept on the state for easy access in commands/connectors.
    settings: Any

    collection: TaskCollection
    session: SessionBinding
    conditions: ConditionBoard
    task_store: TaskStore
    suggestions: SuggestionReconciler
    plans: PlanBook
