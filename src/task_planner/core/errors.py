# src/task_planner/core/errors.py

"""
Error taxonomy.

Each condition carries a `kind`. The ConditionBoard keeps at most one
unresolved condition per kind, and a later success of the same kind clears it.
"""

from __future__ import annotations


class TaskPlannerError(Exception):
    kind = "generic"

    @property
    def message(self) -> str:
        return str(self)


class MutationFailed(TaskPlannerError):
    """A create/toggle/delete call exhausted its retry budget."""

    kind = "mutation"

    _MESSAGES = {
        "create": "Could not add task. Please try again.",
        "toggle": "Could not update task status.",
        "delete": "Could not delete task.",
    }

    def __init__(self, operation: str, task_id: str | None, cause: BaseException) -> None:
        super().__init__(self._MESSAGES.get(operation, f"Could not {operation} task."))
        self.operation = operation
        self.task_id = task_id
        self.cause = cause


class SubscriptionFailed(TaskPlannerError):
    """The live feed reported an error. Not restarted automatically."""

    kind = "subscription"

    def __init__(self, path: str, cause: BaseException | None = None) -> None:
        super().__init__("Failed to fetch tasks in real-time.")
        self.path = path
        self.cause = cause


class GenerationError(TaskPlannerError):
    kind = "generation"


class GenerationFailed(GenerationError):
    """Generation call exhausted retries or returned a non-success status."""

    DEFAULT_MESSAGE = "Failed to connect to the AI service. Check your backend and API key."

    def __init__(self, message: str | None = None, cause: BaseException | None = None) -> None:
        super().__init__((message or "").strip() or self.DEFAULT_MESSAGE)
        self.cause = cause


class GenerationFormatError(GenerationError):
    """A 2xx response without a `tasks` list of strings. Never retried."""

    def __init__(self, message: str = "AI returned an unexpected format.") -> None:
        super().__init__(message)


class GenerationHTTPError(Exception):
    """Transport-level non-2xx answer from the generation endpoint."""

    def __init__(self, status_code: int, server_message: str | None = None) -> None:
        detail = server_message or f"HTTP {status_code}"
        super().__init__(f"Generation endpoint returned {status_code}: {detail}")
        self.status_code = status_code
        self.server_message = server_message


class PlanRequestFailed(TaskPlannerError):
    """A saved-plans call (list, generate, delete) failed."""

    kind = "plan"

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause
