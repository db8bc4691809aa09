# src/task_planner/connectors/console_connector.py

from __future__ import annotations

import asyncio
import logging
from datetime import datetime

from ..cli.commands import registry as command_registry
from ..core.errors import MutationFailed, SubscriptionFailed
from ..core.state import AppState
from ..tasks.task_api import submit_draft

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


async def _read_line(prompt: str) -> str:
    # input() blocks; run it off the loop so feed deliveries keep flowing.
    return await asyncio.to_thread(input, prompt)


async def run_console_loop(state: AppState) -> None:
    logger.info("Console connector started (principal=%s).", state.session.principal_id)
    _print_ts("[CONSOLE] Type a task to add it. Use /help for commands. Use /exit to quit.\n")

    last_reported = None

    while True:
        try:
            user_input = (await _read_line(">>> ")).strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        try:
            cmd_response = await command_registry.handle(state, user_input, emit=_print_ts)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response is None:
            # Plain text is the "add task" form.
            try:
                new_id = await submit_draft(state.task_store, user_input)
                cmd_response = "Added." if new_id else "Not signed in yet; task not added."
            except MutationFailed as e:
                cmd_response = e.message

        _print_ts(cmd_response)

        # Surface feed problems that arrived in the background.
        cond = state.conditions.current()
        if cond is not None and cond is not last_reported and cond.kind == SubscriptionFailed.kind:
            _print_ts(f"[FEED] {cond.message}")
        last_reported = cond

    logger.info("Console connector finished.")
