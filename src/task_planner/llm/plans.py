# src/task_planner/llm/plans.py

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..core.errors import PlanRequestFailed
from ..plans.plan_models import Plan, plan_from_dict
from .client import _make_timeout_obj, _server_message

logger = logging.getLogger(__name__)


class HttpPlanClient:
    """
    Client for the saved-plans backend.

    - GET    {api_url}/plans          -> {"success": true, "plans": [...]}
    - POST   {api_url}/generate-plan  {"goal": ...} -> {"plan": {...}}
    - DELETE {api_url}/plans/{id}

    Every failure (transport error, non-2xx, unexpected body) is raised as
    PlanRequestFailed with the best user-facing message available.
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
            raise RuntimeError("Plans API URL is not set. Set PLANNER_API_URL in your .env.")
        self._base = api_url.rstrip("/")
        self._timeout = _make_timeout_obj(connect_timeout_seconds, read_timeout_seconds)
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base

    async def _request(self, method: str, path: str, fallback: str, **kwargs: Any) -> Any:
        url = self._base + path
        logger.info("Plans: %s %s", method, url)
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Plans: %s %s failed: %r", method, url, e)
            raise PlanRequestFailed(fallback, cause=e) from e

        if not response.is_success:
            msg = _server_message(response)
            logger.info("Plans: HTTP %s (%s)", response.status_code, msg or "no message")
            raise PlanRequestFailed(msg or fallback)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise PlanRequestFailed(fallback, cause=e) from e

    async def list_plans(self) -> list[Plan]:
        body = await self._request("GET", "/plans", "Failed to fetch plans.")
        if not isinstance(body, dict) or not body.get("success"):
            raise PlanRequestFailed("Failed to fetch plans.")
        plans = body.get("plans")
        if not isinstance(plans, list):
            return []
        return [plan_from_dict(p) for p in plans if isinstance(p, dict)]

    async def generate_plan(self, goal: str) -> Plan:
        body = await self._request(
            "POST", "/generate-plan", "Failed to generate plan", json={"goal": goal}
        )
        plan = body.get("plan") if isinstance(body, dict) else None
        if not isinstance(plan, dict):
            raise PlanRequestFailed("Server returned no plan.")
        return plan_from_dict(plan)

    async def delete_plan(self, plan_id: str) -> None:
        await self._request("DELETE", f"/plans/{plan_id}", "Failed to delete plan.")
