# src/task_planner/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..core.errors import SubscriptionFailed
from ..core.session import SessionBinding
from .task_store import TaskStore

logger = logging.getLogger(__name__)


def bind_store_to_session(store: TaskStore, session: SessionBinding) -> Callable[[], None]:
    """
    Keep the store's live feed scoped to the session's principal.

    - principal set     -> subscribe (the previous feed is closed first)
    - principal cleared -> unsubscribe (snapshot is dropped)

    Returns a callable that detaches the binding.
    """

    def on_principal(principal_id: str | None) -> None:
        if principal_id is None:
            store.unsubscribe()
            return
        try:
            store.subscribe(principal_id)
        except SubscriptionFailed:
            # Already recorded on the ConditionBoard by the store.
            logger.warning("Live feed could not be opened for %s", principal_id)

    remove = session.add_listener(on_principal)
    if session.principal_id is not None:
        on_principal(session.principal_id)
    return remove


async def submit_draft(store: TaskStore, text: str | None = None) -> str | None:
    """
    Form-submit helper: set the draft (if given) and create a task from it.

    On failure the draft is kept so the user can retry.
    """
    if text is not None:
        store.draft = text
    return await store.create(store.draft)
