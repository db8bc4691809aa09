# src/task_planner/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, signs in, binds the task feed to the
session, then runs the console REPL on the event loop.
"""

from __future__ import annotations

import asyncio
import logging

from ..cli.bootstrap import create_initial_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging
from ..tasks.task_api import bind_store_to_session

logger = logging.getLogger(__name__)


def _shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    try:
        state.task_store.unsubscribe()
    except Exception:
        logger.exception("Failed to close the live feed.")

    close = getattr(state.collection, "close", None)
    if callable(close):
        try:
            close()
        except Exception:
            logger.debug("Collection close failed.", exc_info=True)


async def run(state: AppState) -> None:
    detach = bind_store_to_session(state.task_store, state.session)
    try:
        state.session.sign_in()
        await run_console_loop(state)
    finally:
        detach()
        _shutdown(state)


def main() -> None:
    settings = get_settings()

    log_file = setup_logging(log_dir=settings.data_dir, console_level=settings.log_level)

    logger.info("Starting %s (log file %s)...", settings.app_name, log_file)

    state = create_initial_state(settings=settings)

    try:
        asyncio.run(run(state))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down...")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
