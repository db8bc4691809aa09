# src/task_planner/llm/client.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import GenerationError, GenerationFailed, GenerationHTTPError

logger = logging.getLogger(__name__)


def _make_timeout_obj(connect_s: float, read_s: float) -> httpx.Timeout:
    return httpx.Timeout(
        connect=connect_s,
        read=read_s,
        write=10.0,
        pool=connect_s,
    )


def _server_message(response: httpx.Response) -> str | None:
    """Best-effort `error` field from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("error", "details", "message"):
            val = body.get(key)
            if isinstance(val, str) and val.strip():
                return val.strip()
    return None


class HttpTaskGenerator:
    """
    Client for the task generation backend: POST {api_url}/generate-tasks.

    Returns the decoded JSON body as-is; shape validation belongs to the caller.
    Non-2xx answers raise GenerationHTTPError. No retries here (the caller wraps
    calls in a RetryExecutor).
    """

    def __init__(
        self,
        api_url: str,
        *,
        connect_timeout_seconds: float = 5.0,
        read_timeout_seconds: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not api_url or not api_url.strip():
            raise RuntimeError("Generation API URL is not set. Set PLANNER_API_URL in your .env.")
        self._url = api_url.rstrip("/") + "/generate-tasks"
        self._timeout = _make_timeout_obj(connect_timeout_seconds, read_timeout_seconds)
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    async def generate(self, prompt: str) -> Any:
        logger.info("Generation: POST %s (prompt %d chars)", self._url, len(prompt))
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._url, json={"prompt": prompt})

        if not response.is_success:
            msg = _server_message(response)
            logger.info("Generation: HTTP %s (%s)", response.status_code, msg or "no message")
            raise GenerationHTTPError(response.status_code, msg)

        try:
            return response.json()
        except ValueError:
            # 2xx with a non-JSON body: let shape validation report it.
            logger.info("Generation: non-JSON success body")
            return None


def failure_message(err: BaseException) -> str | None:
    """Best-available user-facing message for a failed generation call."""
    if isinstance(err, GenerationHTTPError):
        return err.server_message
    if isinstance(err, GenerationError):
        return err.message
    return None


def friendly_generation_message(err: BaseException) -> str:
    msg = failure_message(err)
    return msg or GenerationFailed.DEFAULT_MESSAGE
