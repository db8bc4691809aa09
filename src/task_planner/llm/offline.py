# src/task_planner/llm/offline.py

from __future__ import annotations

import re
from typing import Any

_SPLIT = re.compile(r"\s*(?:,|;|\band then\b|\bthen\b|\band\b|\n)\s*", re.IGNORECASE)


class OfflineTaskGenerator:
    """
    Offline deterministic generator used for demos when no backend is configured.

    Behavior:
    - splits the goal on commas / "and" / "then" into steps
    - a goal with a single step gets a small generic plan around it
    """

    async def generate(self, prompt: str) -> Any:
        goal = (prompt or "").strip().rstrip(".")
        parts = [p.strip() for p in _SPLIT.split(goal) if p and p.strip()]

        if len(parts) > 1:
            tasks = [p[:1].upper() + p[1:] for p in parts]
        else:
            tasks = [
                f"Define what done looks like for: {goal}",
                f"List the resources needed for: {goal}",
                f"Schedule the first step of: {goal}",
            ]
        return {"tasks": tasks}
