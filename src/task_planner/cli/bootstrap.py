# src/task_planner/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires concrete implementations into AppState (collection/session/generator/plans).
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.conditions import ConditionBoard
from ..core.ports import TaskGenerator
from ..core.retry import RetryExecutor
from ..core.session import SessionBinding
from ..core.state import AppState
from ..llm.client import HttpTaskGenerator
from ..llm.offline import OfflineTaskGenerator
from ..llm.plans import HttpPlanClient
from ..plans.plan_book import PlanBook
from ..suggestions.reconciler import SuggestionReconciler
from ..tasks.local_collection import LocalTaskCollection
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def _make_generator(settings) -> TaskGenerator:
    if settings.offline_generator:
        logger.info("Using offline task generator.")
        return OfflineTaskGenerator()
    try:
        return HttpTaskGenerator(
            settings.api_url,
            connect_timeout_seconds=settings.http_connect_timeout_seconds,
            read_timeout_seconds=settings.http_read_timeout_seconds,
        )
    except RuntimeError:
        # Fallback for demos / local runs without a generation backend.
        logger.warning("Generation API URL missing; using offline task generator.")
        return OfflineTaskGenerator()


def create_initial_state(
    *, settings=None, collection=None, generator=None, plan_client=None
) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings (and the collaborators) injectable makes the app easier to test.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    retry = RetryExecutor(
        max_attempts=settings.retry_max_attempts,
        base_delay_seconds=settings.retry_base_delay_seconds,
    )
    conditions = ConditionBoard()

    if collection is None:
        collection = LocalTaskCollection(settings.tasks_db_path)
    if generator is None:
        generator = _make_generator(settings)
    if plan_client is None:
        plan_client = HttpPlanClient(
            settings.api_url,
            connect_timeout_seconds=settings.http_connect_timeout_seconds,
            read_timeout_seconds=settings.http_read_timeout_seconds,
        )

    store = TaskStore(
        collection,
        namespace=settings.namespace,
        retry=retry,
        conditions=conditions,
    )

    return AppState(
        settings=settings,
        collection=collection,
        session=SessionBinding(
            session_path=settings.session_path,
            principal_id=settings.principal_id,
        ),
        conditions=conditions,
        task_store=store,
        suggestions=SuggestionReconciler(store, generator, retry=retry, conditions=conditions),
        plans=PlanBook(plan_client, conditions=conditions),
    )
