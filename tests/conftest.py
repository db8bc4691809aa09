# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import httpx
import pytest

from task_planner.cli.bootstrap import create_initial_state
from task_planner.core.conditions import ConditionBoard
from task_planner.core.retry import RetryExecutor
from task_planner.core.state import AppState
from task_planner.llm.plans import HttpPlanClient
from task_planner.tasks.task_store import TaskStore

from .fakes import FakeCollection, FakeGenerator, FakePlansBackend, InstantSleeper

NAMESPACE = "artifacts/test-app/users"


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="task-planner-test",
        log_level="DEBUG",
        app_id="test-app",
        namespace=NAMESPACE,
        principal_id=None,
        api_url="http://backend.test/api",
        offline_generator=False,
        http_connect_timeout_seconds=1.0,
        http_read_timeout_seconds=1.0,
        retry_max_attempts=3,
        # Zero base delay: retries do not wait in tests.
        retry_base_delay_seconds=0.0,
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        session_path=tmp_path / "session.json",
    )


@pytest.fixture()
def sleeper() -> InstantSleeper:
    return InstantSleeper()


@pytest.fixture()
def retry(sleeper: InstantSleeper) -> RetryExecutor:
    return RetryExecutor(max_attempts=3, base_delay_seconds=1.0, sleep=sleeper)


@pytest.fixture()
def collection() -> FakeCollection:
    return FakeCollection()


@pytest.fixture()
def generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def store(collection: FakeCollection, retry: RetryExecutor) -> TaskStore:
    return TaskStore(collection, namespace=NAMESPACE, retry=retry, conditions=ConditionBoard())


@pytest.fixture()
def plans_backend() -> FakePlansBackend:
    return FakePlansBackend()


@pytest.fixture()
def plan_client(settings: SimpleNamespace, plans_backend: FakePlansBackend) -> HttpPlanClient:
    return HttpPlanClient(settings.api_url, transport=httpx.MockTransport(plans_backend))


@pytest.fixture()
def state(
    settings: SimpleNamespace,
    collection: FakeCollection,
    generator: FakeGenerator,
    plan_client: HttpPlanClient,
) -> AppState:
    """AppState wired by the real bootstrap with in-memory collaborators."""
    return create_initial_state(
        settings=settings, collection=collection, generator=generator, plan_client=plan_client
    )
