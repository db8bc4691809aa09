# src/task_planner/suggestions/reconciler.py

from __future__ import annotations

"""
AI suggestion workflow.

Holds the transient suggestion buffer (never persisted) and merges accepted
suggestions into the TaskStore through its normal create path.
"""

import logging
from typing import Any

from ..core.conditions import ConditionBoard
from ..core.errors import GenerationError, GenerationFailed, GenerationFormatError
from ..core.ports import TaskGenerator
from ..core.retry import RetryExecutor
from ..llm.client import friendly_generation_message
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def parse_suggestions(body: Any) -> list[str]:
    """Validate a generation response: {"tasks": [str, ...]}."""
    if not isinstance(body, dict):
        raise GenerationFormatError()
    tasks = body.get("tasks")
    if not isinstance(tasks, list) or not all(isinstance(t, str) for t in tasks):
        raise GenerationFormatError()
    return list(tasks)


class SuggestionReconciler:
    def __init__(
        self,
        store: TaskStore,
        generator: TaskGenerator,
        *,
        retry: RetryExecutor | None = None,
        conditions: ConditionBoard | None = None,
    ) -> None:
        self._store = store
        self._generator = generator
        self._retry = retry or RetryExecutor()
        self.conditions = conditions if conditions is not None else store.conditions

        self.prompt = ""
        self.suggestions: list[str] = []
        self.error: GenerationError | None = None
        self.is_generating = False
        self.dialog_open = False

    def open_dialog(self) -> None:
        self.prompt = ""
        self.suggestions = []
        self.error = None
        self.conditions.clear(GenerationError.kind)
        self.dialog_open = True

    async def generate(self, prompt: str | None = None) -> list[str]:
        """
        Ask the generator for suggestions and replace the buffer with them.

        Outcomes are recorded on `error` (and the ConditionBoard), not raised.
        """
        if self.is_generating:
            return list(self.suggestions)
        if prompt is not None:
            self.prompt = prompt
        goal = self.prompt
        if not goal.strip():
            return list(self.suggestions)

        self.is_generating = True
        self.error = None
        self.suggestions = []
        try:
            try:
                body = await self._retry.execute(
                    lambda: self._generator.generate(goal),
                    label="generate tasks",
                )
            except Exception as e:
                logger.error("Generation failed: %r", e)
                self._set_error(GenerationFailed(friendly_generation_message(e), cause=e))
                return []

            try:
                suggestions = parse_suggestions(body)
            except GenerationFormatError as e:
                logger.warning("Generation returned unexpected shape: %s", type(body).__name__)
                self._set_error(e)
                return []

            self.suggestions = suggestions
            self.conditions.clear(GenerationError.kind)
            logger.info("Generation produced %d suggestion(s)", len(suggestions))
            return list(suggestions)
        finally:
            self.is_generating = False

    def _set_error(self, err: GenerationError) -> None:
        self.error = err
        self.conditions.report(err)

    async def promote(self, text: str) -> str | None:
        """Move one suggestion into the task list. Unknown text is a no-op."""
        try:
            self.suggestions.remove(text)
        except ValueError:
            logger.debug("promote: %r is not in the suggestion buffer", text)
            return None
        return await self._store.create(text)

    def dismiss_all(self) -> None:
        self.suggestions = []
        self.error = None
        self.prompt = ""
        self.dialog_open = False
        self.conditions.clear(GenerationError.kind)

    def clear_buffer(self) -> None:
        self.suggestions = []
