# src/task_planner/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- No secrets required at import time.
- Every path lives under a gitignored local data dir by default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "PLANNER"

DEFAULT_API_URL = "http://localhost:5001/api"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Task collection scope ----
    app_id: str
    namespace: str

    # ---- Session ----
    principal_id: str | None

    # ---- Generation endpoint ----
    api_url: str
    offline_generator: bool
    http_connect_timeout_seconds: float
    http_read_timeout_seconds: float

    # ---- Retry ----
    retry_max_attempts: int
    retry_base_delay_seconds: float

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    tasks_db_path: Path
    session_path: Path

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "task-planner").strip() or "task-planner"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        app_id = _env(_k("APP_ID"), "default-app-id").strip() or "default-app-id"
        namespace = (_env(_k("NAMESPACE"), "") or f"artifacts/{app_id}/users").strip("/ ")

        principal_id = (_first_env(_k("PRINCIPAL_ID"), default="") or "").strip() or None

        # REACT_APP_API_URL is accepted so an existing frontend .env can be reused.
        api_url = (
            _first_env(_k("API_URL"), "REACT_APP_API_URL", default=DEFAULT_API_URL)
            or DEFAULT_API_URL
        ).rstrip("/")
        offline_generator = _env_bool(_k("OFFLINE_GENERATOR"), False)
        http_connect_timeout_seconds = _env_float(_k("HTTP_CONNECT_TIMEOUT_SECONDS"), 5.0)
        http_read_timeout_seconds = _env_float(_k("HTTP_READ_TIMEOUT_SECONDS"), 60.0)

        retry_max_attempts = max(1, _env_int(_k("RETRY_MAX_ATTEMPTS"), 3))
        retry_base_delay_seconds = max(0.0, _env_float(_k("RETRY_BASE_DELAY_SECONDS"), 1.0))

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/task_planner"))
        tasks_db_path = _env_path(_k("TASKS_DB_PATH"), data_dir / "tasks.sqlite3")
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")

        return Settings(
            app_name=app_name,
            log_level=log_level,
            app_id=app_id,
            namespace=namespace,
            principal_id=principal_id,
            api_url=api_url,
            offline_generator=offline_generator,
            http_connect_timeout_seconds=http_connect_timeout_seconds,
            http_read_timeout_seconds=http_read_timeout_seconds,
            retry_max_attempts=retry_max_attempts,
            retry_base_delay_seconds=retry_base_delay_seconds,
            data_dir=data_dir,
            tasks_db_path=tasks_db_path,
            session_path=session_path,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
