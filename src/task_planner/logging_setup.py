# src/task_planner/logging_setup.py

from __future__ import annotations

import logging
import sys
from pathlib import Path

# Logger prefix -> lowest level shown on the console.
# Snapshot deliveries and per-request HTTP lines are file-only unless they go wrong.
_CONSOLE_FLOORS: tuple[tuple[str, int], ...] = (
    ("task_planner.tasks.local_collection", logging.WARNING),
    ("task_planner.llm.", logging.WARNING),
    ("task_planner.", logging.NOTSET),
    ("py.warnings", logging.ERROR),
)


class _ConsoleNoiseFilter(logging.Filter):
    """Keeps the console readable while the REPL is waiting for input."""

    def filter(self, record: logging.LogRecord) -> bool:
        for prefix, floor in _CONSOLE_FLOORS:
            if record.name.startswith(prefix):
                return record.levelno >= floor
        # Third party: errors only.
        return record.levelno >= logging.ERROR


def level_from_name(name: str | int | None, default: int = logging.INFO) -> int:
    if isinstance(name, int):
        return name
    level = logging.getLevelName(str(name or "").strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    *,
    log_dir: str | Path = ".local/task_planner",
    console_level: str | int = logging.INFO,
    file_level: str | int = logging.DEBUG,
) -> Path:
    """
    Console handler on stderr, filtered for interactive use, plus a full
    UTF-8 log file `planner.log` under `log_dir`. Returns the log file path.

    Call once, before the first log line.
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "planner.log"

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level_from_name(console_level))
    console.setFormatter(fmt)
    console.addFilter(_ConsoleNoiseFilter())
    root.addHandler(console)

    file_handler = logging.FileHandler(str(log_file), encoding="utf-8")
    file_handler.setLevel(level_from_name(file_level, logging.DEBUG))
    file_handler.setFormatter(fmt)
    root.addHandler(file_handler)

    # warnings.warn(...) -> 'py.warnings'
    logging.captureWarnings(True)

    # httpx logs every request at INFO; keep the file focused on our own lines.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return log_file
