# src/task_planner/tasks/local_collection.py

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import sqlite3
import time
import uuid
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..core.ports import (
    SERVER_TIMESTAMP,
    ErrorCallback,
    SnapshotCallback,
    TaskRecord,
    Unsubscribe,
)

logger = logging.getLogger(__name__)


class _Listener:
    __slots__ = ("path", "on_snapshot", "on_error", "active")

    def __init__(self, path: str, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> None:
        self.path = path
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True


class LocalTaskCollection:
    """
    SQLite-backed live task collection.

    Records are JSON documents keyed by (path, id). After every committed write
    each listener on the written path gets a full snapshot, scheduled with
    loop.call_soon so delivery is asynchronous and FIFO.

    Thread-safety:
    - each method opens its own SQLite connection
    - listeners must be registered from the event loop thread
    """

    def __init__(
        self,
        db_path: str | Path = "tasks.sqlite3",
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._listeners: list[_Listener] = []
        self._ensure_schema()
        logger.info("LocalTaskCollection ready db=%s total=%s", self._db_path, self.count_records())

    def close(self) -> None:
        """Detach all listeners (no persistent connections to close)."""
        for lst in self._listeners:
            lst.active = False
        self._listeners.clear()

    # ---- low-level helpers ----

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), timeout=30.0)
        conn.row_factory = sqlite3.Row
        with contextlib.suppress(sqlite3.DatabaseError):
            conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _ensure_schema(self) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS records (
                    path TEXT NOT NULL,
                    id TEXT NOT NULL,
                    seq INTEGER NOT NULL,
                    data TEXT NOT NULL DEFAULT '{}',
                    PRIMARY KEY (path, id)
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_records_path_seq ON records(path, seq)")
            conn.commit()
        finally:
            conn.close()

    @staticmethod
    def _encode(data: TaskRecord) -> str:
        return json.dumps(data, ensure_ascii=False)

    @staticmethod
    def _decode(raw: str | None) -> TaskRecord:
        if not raw:
            return {}
        try:
            val = json.loads(raw)
            return val if isinstance(val, dict) else {}
        except ValueError:
            logger.warning("Corrupt record payload ignored")
            return {}

    def _resolve(self, fields: TaskRecord) -> TaskRecord:
        now = self._clock()
        return {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}

    def count_records(self, path: str | None = None) -> int:
        conn = self._get_conn()
        try:
            if path is None:
                (n,) = conn.execute("SELECT COUNT(*) FROM records").fetchone()
            else:
                (n,) = conn.execute("SELECT COUNT(*) FROM records WHERE path = ?", (path,)).fetchone()
            return int(n)
        finally:
            conn.close()

    def read_snapshot(self, path: str) -> dict[str, TaskRecord]:
        """Full current view of `path`, in insertion order."""
        conn = self._get_conn()
        try:
            rows = conn.execute(
                "SELECT id, data FROM records WHERE path = ? ORDER BY seq ASC", (path,)
            ).fetchall()
            return {str(r["id"]): self._decode(r["data"]) for r in rows}
        finally:
            conn.close()

    # ---- live feed ----

    def listen(
        self,
        path: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        lst = _Listener(path, on_snapshot, on_error)
        self._listeners.append(lst)
        self._schedule(lst)

        def unsubscribe() -> None:
            lst.active = False
            if lst in self._listeners:
                self._listeners.remove(lst)

        return unsubscribe

    def _schedule(self, lst: _Listener) -> None:
        asyncio.get_running_loop().call_soon(self._emit, lst)

    def _emit(self, lst: _Listener) -> None:
        if not lst.active:
            return
        try:
            snapshot = self.read_snapshot(lst.path)
        except sqlite3.Error as e:
            logger.exception("Snapshot read failed path=%s", lst.path)
            # An error ends the listener; the owner must listen again.
            lst.active = False
            if lst in self._listeners:
                self._listeners.remove(lst)
            lst.on_error(e)
            return
        lst.on_snapshot(snapshot)

    def _changed(self, path: str) -> None:
        for lst in list(self._listeners):
            if lst.path == path and lst.active:
                self._schedule(lst)

    # ---- operations ----

    async def insert(self, path: str, fields: TaskRecord) -> str:
        record_id = uuid.uuid4().hex
        data = self._resolve(fields)

        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO records(path, id, seq, data)
                VALUES (?, ?, (SELECT COALESCE(MAX(seq), 0) + 1 FROM records), ?)
                """,
                (path, record_id, self._encode(data)),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Record inserted path=%s id=%s", path, record_id)
        self._changed(path)
        return record_id

    async def update(self, path: str, record_id: str, fields: TaskRecord) -> None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT data FROM records WHERE path = ? AND id = ?", (path, record_id)
            ).fetchone()
            if row is None:
                raise KeyError(f"No record {record_id!r} under {path!r}")
            data: dict[str, Any] = self._decode(row["data"])
            data.update(self._resolve(fields))
            conn.execute(
                "UPDATE records SET data = ? WHERE path = ? AND id = ?",
                (self._encode(data), path, record_id),
            )
            conn.commit()
        finally:
            conn.close()

        logger.debug("Record updated path=%s id=%s fields=%s", path, record_id, sorted(fields))
        self._changed(path)

    async def delete(self, path: str, record_id: str) -> None:
        conn = self._get_conn()
        try:
            cur = conn.execute(
                "DELETE FROM records WHERE path = ? AND id = ?", (path, record_id)
            )
            conn.commit()
            removed = cur.rowcount
        finally:
            conn.close()

        # Deleting a missing record is a no-op, like the hosted store.
        if removed:
            logger.debug("Record deleted path=%s id=%s", path, record_id)
            self._changed(path)
