# src/task_planner/plans/plan_book.py

from __future__ import annotations

import logging

from ..core.conditions import ConditionBoard
from ..core.errors import PlanRequestFailed
from ..llm.plans import HttpPlanClient
from .plan_models import Plan

logger = logging.getLogger(__name__)


class PlanBook:
    """
    Saved plans and the plan currently on screen.

    Failures are logged, recorded on the ConditionBoard and raised as
    PlanRequestFailed; a later successful call clears the condition.
    """

    def __init__(self, client: HttpPlanClient, *, conditions: ConditionBoard | None = None) -> None:
        self._client = client
        self.conditions = conditions if conditions is not None else ConditionBoard()
        self.saved: list[Plan] = []
        self.current: Plan | None = None
        self.is_generating = False

    def _failed(self, err: PlanRequestFailed) -> None:
        logger.error("Plan request failed: %s", err.message)
        self.conditions.report(err)

    async def refresh(self) -> list[Plan]:
        try:
            plans = await self._client.list_plans()
        except PlanRequestFailed as e:
            self._failed(e)
            raise
        self.saved = plans
        self.conditions.clear(PlanRequestFailed.kind)
        logger.debug("Loaded %d saved plan(s)", len(plans))
        return list(plans)

    async def generate(self, goal: str) -> Plan:
        if not goal.strip():
            raise PlanRequestFailed("Please enter a goal")
        if self.is_generating:
            raise PlanRequestFailed("Already generating a plan.")

        self.is_generating = True
        self.current = None
        try:
            try:
                plan = await self._client.generate_plan(goal)
            except PlanRequestFailed as e:
                self._failed(e)
                raise
        finally:
            self.is_generating = False

        self.current = plan
        self.conditions.clear(PlanRequestFailed.kind)
        logger.info("Plan generated id=%s tasks=%d", plan.id, len(plan.tasks))
        await self._refresh_after_change()
        return plan

    def load(self, index: int) -> Plan:
        """Show saved plan number `index` (1-based)."""
        if index < 1 or index > len(self.saved):
            raise IndexError(index)
        self.current = self.saved[index - 1]
        return self.current

    async def delete(self, plan_id: str) -> None:
        try:
            await self._client.delete_plan(plan_id)
        except PlanRequestFailed as e:
            self._failed(e)
            raise

        if self.current is not None and self.current.id == plan_id:
            self.current = None
        self.saved = [p for p in self.saved if p.id != plan_id]
        self.conditions.clear(PlanRequestFailed.kind)
        logger.info("Plan deleted id=%s", plan_id)
        await self._refresh_after_change()

    async def _refresh_after_change(self) -> None:
        # The change itself succeeded; a failed refresh stays on the board.
        try:
            await self.refresh()
        except PlanRequestFailed:
            logger.warning("Saved plans not refreshed after a change")
