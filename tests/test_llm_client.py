# tests/test_llm_client.py

from __future__ import annotations

import json

import httpx
import pytest

from task_planner.core.errors import GenerationFailed, GenerationHTTPError
from task_planner.llm.client import HttpTaskGenerator, friendly_generation_message
from task_planner.llm.offline import OfflineTaskGenerator


@pytest.mark.asyncio
async def test_posts_prompt_and_returns_body() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"tasks": ["Draft outline", "Book venue"]})

    gen = HttpTaskGenerator("http://backend.test/api/", transport=httpx.MockTransport(handler))
    body = await gen.generate("Plan a conference")

    assert body == {"tasks": ["Draft outline", "Book venue"]}
    assert gen.url == "http://backend.test/api/generate-tasks"
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"prompt": "Plan a conference"}


@pytest.mark.asyncio
async def test_error_status_raises_with_server_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"error": "API key missing"})

    gen = HttpTaskGenerator("http://backend.test/api", transport=httpx.MockTransport(handler))
    with pytest.raises(GenerationHTTPError) as exc_info:
        await gen.generate("x")

    assert exc_info.value.status_code == 500
    assert friendly_generation_message(exc_info.value) == "API key missing"


@pytest.mark.asyncio
async def test_error_status_without_json_body_uses_default_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    gen = HttpTaskGenerator("http://backend.test/api", transport=httpx.MockTransport(handler))
    with pytest.raises(GenerationHTTPError) as exc_info:
        await gen.generate("x")

    assert exc_info.value.server_message is None
    assert friendly_generation_message(exc_info.value) == GenerationFailed.DEFAULT_MESSAGE


@pytest.mark.asyncio
async def test_non_json_success_body_is_returned_as_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    gen = HttpTaskGenerator("http://backend.test/api", transport=httpx.MockTransport(handler))
    assert await gen.generate("x") is None


def test_missing_url_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        HttpTaskGenerator("  ")


@pytest.mark.asyncio
async def test_offline_generator_splits_goal() -> None:
    gen = OfflineTaskGenerator()
    assert await gen.generate("buy paint, prep walls and paint the room") == {
        "tasks": ["Buy paint", "Prep walls", "Paint the room"]
    }
    single = await gen.generate("learn Go")
    assert len(single["tasks"]) == 3
    assert all("learn Go" in t for t in single["tasks"])


def test_unrelated_errors_get_the_default_message() -> None:
    assert friendly_generation_message(httpx.ConnectError("refused")) == GenerationFailed.DEFAULT_MESSAGE
    assert friendly_generation_message(RuntimeError("boom")) == GenerationFailed.DEFAULT_MESSAGE
