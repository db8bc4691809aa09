# src/task_planner/core/session.py

"""
Session binding.

Supplies the principal id that scopes the visible task collection. The id is
either configured explicitly or an anonymous id persisted as JSON in the local
data dir (stable across runs until sign-out).
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import uuid
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

PrincipalListener = Callable[[str | None], None]


class SessionBinding:
    def __init__(
        self,
        *,
        session_path: str | Path | None = None,
        principal_id: str | None = None,
    ) -> None:
        self._session_path = Path(session_path) if session_path else None
        self._configured = (principal_id or "").strip() or None
        self._principal_id: str | None = None
        self._listeners: list[PrincipalListener] = []

    @property
    def principal_id(self) -> str | None:
        return self._principal_id

    @property
    def ready(self) -> bool:
        return self._principal_id is not None

    @property
    def anonymous(self) -> bool:
        return self._principal_id is not None and self._configured is None

    def add_listener(self, listener: PrincipalListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_principal(self, principal_id: str | None) -> None:
        if principal_id == self._principal_id:
            return
        self._principal_id = principal_id
        for listener in list(self._listeners):
            try:
                listener(principal_id)
            except Exception:
                logger.exception("Session listener failed")

    # ---- persistence (anonymous principal) ----

    def _load_anonymous(self) -> str | None:
        path = self._session_path
        if path is None or not path.exists():
            return None
        try:
            data = json.loads(path.read_text("utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", path)
            return None
        pid = data.get("principal_id") if isinstance(data, dict) else None
        return pid.strip() if isinstance(pid, str) and pid.strip() else None

    def _save_anonymous(self, principal_id: str) -> None:
        path = self._session_path
        if path is None:
            return
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps({"principal_id": principal_id}), "utf-8")
        os.replace(tmp, path)
        with contextlib.suppress(OSError):
            os.chmod(path, 0o600)

    def _forget_anonymous(self) -> None:
        path = self._session_path
        if path is not None:
            with contextlib.suppress(FileNotFoundError):
                path.unlink()

    # ---- public API ----

    def sign_in(self) -> str:
        """Resolve the principal: configured id first, then a (new) anonymous id."""
        if self._principal_id is not None:
            return self._principal_id

        if self._configured is not None:
            principal_id = self._configured
            logger.info("Signed in as configured principal %s", principal_id)
        else:
            principal_id = self._load_anonymous() or ""
            if not principal_id:
                principal_id = uuid.uuid4().hex
                self._save_anonymous(principal_id)
                logger.info("Signed in anonymously as new principal %s", principal_id)
            else:
                logger.info("Signed in anonymously as %s", principal_id)

        self._set_principal(principal_id)
        return principal_id

    def sign_out(self) -> None:
        if self._principal_id is None:
            return
        logger.info("Signing out principal %s", self._principal_id)
        if self._configured is None:
            self._forget_anonymous()
        self._set_principal(None)
