# src/task_planner/cli/commands.py

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import cast

from ..core.errors import MutationFailed, PlanRequestFailed, SubscriptionFailed
from ..core.state import AppState
from ..plans.plan_models import Plan
from ..tasks.task_models import Task

CommandEmitter = Callable[[str], None]
CommandResult = str | Awaitable[str]
CommandHandler2 = Callable[[AppState, list[str]], CommandResult]
CommandHandler3 = Callable[[AppState, list[str], CommandEmitter | None], CommandResult]
CommandHandler = CommandHandler2 | CommandHandler3

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(
        self,
        state: AppState,
        line: str,
        emit: CommandEmitter | None = None,
    ) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        Handlers may be plain functions or coroutines.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            nparams = len(inspect.signature(handler).parameters)
        except (TypeError, ValueError):
            nparams = 3

        if nparams >= 3:
            result = cast(CommandHandler3, handler)(state, args, emit)
        else:
            result = cast(CommandHandler2, handler)(state, args)

        if inspect.isawaitable(result):
            result = await result
        return result

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def format_task_list(tasks: list[Task]) -> str:
    """Incomplete section, then completed section; numbers follow the ordered list."""
    incomplete = [t for t in tasks if not t.completed]
    completed = [t for t in tasks if t.completed]

    if not tasks:
        return "You have no tasks! Type a task, or use /gen <goal> to start planning."

    lines = [f"Tasks ({len(incomplete)}):"]
    if not incomplete:
        lines.append("  Great job! All tasks completed.")
    for i, t in enumerate(incomplete, start=1):
        lines.append(f"  {i}. [ ] {t.text}")

    if completed:
        lines.append(f"Completed ({len(completed)}):")
        for i, t in enumerate(completed, start=len(incomplete) + 1):
            lines.append(f"  {i}. [x] {t.text}")
    return "\n".join(lines)


def _pick_task(state: AppState, args: list[str]) -> Task | str:
    """Resolve a 1-based list number; returns a usage message on bad input."""
    tasks = state.task_store.tasks
    if not args or not args[0].isdigit():
        return "Give the task number shown by /list."
    n = int(args[0])
    if n < 1 or n > len(tasks):
        return f"No task #{n}. There are {len(tasks)} task(s)."
    return tasks[n - 1]


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    store = state.task_store
    principal = state.session.principal_id or "(not signed in)"
    kind = "anonymous" if state.session.anonymous else "configured"
    tasks = store.tasks
    done = sum(1 for t in tasks if t.completed)
    cond = state.conditions.current()
    return (
        "Status:\n"
        f"  Principal: {principal} ({kind})\n"
        f"  Feed: {'loading' if store.loading else ('live' if store.principal_id else 'closed')}\n"
        f"  Tasks: {len(tasks) - done} open, {done} completed\n"
        f"  Last problem: {cond.message if cond else 'none'}"
    )


def cmd_list(state: AppState, args: list[str]) -> str:
    if state.task_store.loading:
        return "Loading tasks..."
    return format_task_list(state.task_store.tasks)


async def cmd_add(state: AppState, args: list[str]) -> str:
    text = " ".join(args)
    if not text.strip():
        return "Usage: /add <task text>"
    state.task_store.draft = text
    try:
        new_id = await state.task_store.create(text)
    except MutationFailed as e:
        return e.message
    if new_id is None:
        return "Not signed in yet; task not added."
    return f"Added: {text.strip()}"


async def cmd_done(state: AppState, args: list[str]) -> str:
    picked = _pick_task(state, args)
    if isinstance(picked, str):
        return picked
    try:
        await state.task_store.toggle_completion(picked.id, picked.completed)
    except MutationFailed as e:
        return e.message
    return f"{'Reopened' if picked.completed else 'Completed'}: {picked.text}"


async def cmd_rm(state: AppState, args: list[str]) -> str:
    picked = _pick_task(state, args)
    if isinstance(picked, str):
        return picked
    try:
        await state.task_store.delete(picked.id)
    except MutationFailed as e:
        return e.message
    return f"Deleted: {picked.text}"


def _format_suggestions(state: AppState) -> str:
    rec = state.suggestions
    if rec.error is not None:
        return rec.error.message
    if not rec.suggestions:
        return "No suggestions."
    lines = ["Suggestions:"]
    for i, s in enumerate(rec.suggestions, start=1):
        lines.append(f"  {i}. {s}")
    lines.append("Use /accept <n> to add one, /dismiss to close, /clear to drop all.")
    return "\n".join(lines)


def cmd_ai(state: AppState, args: list[str]) -> str:
    state.suggestions.open_dialog()
    return (
        "AI Task Generator: tell the AI what you want to achieve "
        "and it will break it down into tasks. Use /gen <goal>."
    )


async def cmd_gen(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    rec = state.suggestions
    goal = " ".join(args)
    if not goal.strip() and not rec.prompt.strip():
        return "Usage: /gen <goal>"
    if rec.is_generating:
        return "Already generating..."
    if not rec.dialog_open:
        rec.open_dialog()
    if emit is not None:
        emit("Generating...")
    await rec.generate(goal if goal.strip() else None)
    return _format_suggestions(state)


async def cmd_accept(state: AppState, args: list[str]) -> str:
    rec = state.suggestions
    if not args or not args[0].isdigit():
        return "Usage: /accept <n>"
    n = int(args[0])
    if n < 1 or n > len(rec.suggestions):
        return f"No suggestion #{n}."
    text = rec.suggestions[n - 1]
    try:
        new_id = await rec.promote(text)
    except MutationFailed as e:
        return e.message
    if new_id is None:
        return "Not signed in yet; suggestion not added."
    return f"Added: {text}"


def cmd_dismiss(state: AppState, args: list[str]) -> str:
    state.suggestions.dismiss_all()
    return "Suggestions dismissed."


def cmd_clear(state: AppState, args: list[str]) -> str:
    state.suggestions.clear_buffer()
    return "Suggestions cleared."


def _fmt_num(val: float) -> str:
    return f"{val:g}"


def format_saved_plans(plans: list[Plan]) -> str:
    if not plans:
        return "No saved plans yet. Create your first plan with /plan <goal>."
    lines = [f"Saved plans ({len(plans)}):"]
    for i, p in enumerate(plans, start=1):
        created = f", created {p.created_at[:10]}" if p.created_at else ""
        lines.append(
            f"  {i}. {p.goal} ({_fmt_num(p.total_estimated_days)} days, {len(p.tasks)} tasks{created})"
        )
        if p.summary:
            lines.append(f"     {p.summary}")
    lines.append("Use /showplan <n> to open one, /rmplan <n> to delete it.")
    return "\n".join(lines)


def format_plan(plan: Plan) -> str:
    """Summary, totals, milestones, task breakdown, recommendations."""
    lines = [plan.goal]
    if plan.summary:
        lines.append(plan.summary)
    lines.append(
        f"Duration: {_fmt_num(plan.total_estimated_days)} days | "
        f"Tasks: {len(plan.tasks)} | "
        f"Est. hours: {_fmt_num(plan.total_estimated_hours)}h"
    )

    if plan.milestones:
        lines.append("Milestones:")
        for m in plan.milestones:
            day = f"Day {m.completion_day}" if m.completion_day is not None else "Day ?"
            lines.append(f"  - {m.name} ({day})")

    lines.append("Task breakdown:")
    for t in plan.tasks:
        head = f"  {t.id}. {t.title}"
        if t.priority:
            head += f" [{t.priority}]"
        lines.append(head)
        if t.description:
            lines.append(f"     {t.description}")
        meta = [f"{_fmt_num(t.estimated_hours)}h"]
        if t.start_day is not None or t.end_day is not None:
            meta.append(f"days {t.start_day}-{t.end_day}")
        if t.category:
            meta.append(t.category)
        if t.dependencies:
            meta.append("depends on #" + ", #".join(t.dependencies))
        lines.append("     " + " | ".join(meta))

    if plan.recommendations:
        lines.append("Recommendations:")
        for i, rec in enumerate(plan.recommendations, start=1):
            lines.append(f"  {i}. {rec}")
    return "\n".join(lines)


async def cmd_plans(state: AppState, args: list[str]) -> str:
    try:
        plans = await state.plans.refresh()
    except PlanRequestFailed as e:
        return e.message
    return format_saved_plans(plans)


async def cmd_plan(state: AppState, args: list[str], emit: CommandEmitter | None = None) -> str:
    book = state.plans
    goal = " ".join(args)
    if not args:
        if book.current is None:
            return "No plan open. Use /plan <goal> or /showplan <n>."
        return format_plan(book.current)
    if emit is not None:
        emit("Generating plan...")
    try:
        plan = await book.generate(goal)
    except PlanRequestFailed as e:
        return e.message
    return format_plan(plan)


def _pick_plan_number(state: AppState, args: list[str]) -> int | str:
    saved = state.plans.saved
    if not args or not args[0].isdigit():
        return "Give the plan number shown by /plans."
    n = int(args[0])
    if n < 1 or n > len(saved):
        return f"No plan #{n}. There are {len(saved)} saved plan(s)."
    return n


def cmd_showplan(state: AppState, args: list[str]) -> str:
    picked = _pick_plan_number(state, args)
    if isinstance(picked, str):
        return picked
    return format_plan(state.plans.load(picked))


async def cmd_rmplan(state: AppState, args: list[str]) -> str:
    picked = _pick_plan_number(state, args)
    if isinstance(picked, str):
        return picked
    plan = state.plans.saved[picked - 1]
    try:
        await state.plans.delete(plan.id)
    except PlanRequestFailed as e:
        return e.message
    return f"Deleted plan: {plan.goal}"


def cmd_reconnect(state: AppState, args: list[str]) -> str:
    principal = state.session.principal_id
    if principal is None:
        return "Not signed in."
    failed = state.conditions.get(SubscriptionFailed.kind) is not None
    try:
        state.task_store.subscribe(principal)
    except SubscriptionFailed as e:
        return e.message
    return "Live feed reopened." if failed else "Live feed is open."


def cmd_logout(state: AppState, args: list[str]) -> str:
    session = state.session
    if not session.ready:
        return "Not signed in."
    session.sign_out()
    # Signing out drops back to a fresh session, like the original app does.
    principal = session.sign_in()
    return f"Signed out. Now signed in as {principal}."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show session, feed and last problem.")
registry.register("list", cmd_list, help_text="Show tasks (open first, newest first).", aliases=["ls"])
registry.register("add", cmd_add, help_text="Add a task: /add <text> (plain text works too).")
registry.register("done", cmd_done, help_text="Toggle completion: /done <n>.", aliases=["toggle"])
registry.register("rm", cmd_rm, help_text="Delete a task: /rm <n>.", aliases=["del"])
registry.register("ai", cmd_ai, help_text="Open the AI task generator.")
registry.register("gen", cmd_gen, help_text="Generate suggestions: /gen <goal>.")
registry.register("accept", cmd_accept, help_text="Add suggestion n to your tasks: /accept <n>.")
registry.register("dismiss", cmd_dismiss, help_text="Dismiss suggestions and close the generator.")
registry.register("clear", cmd_clear, help_text="Clear all suggestions, keep the generator open.")
registry.register("plans", cmd_plans, help_text="List saved plans.")
registry.register("plan", cmd_plan, help_text="Generate a plan: /plan <goal> (no goal shows the open plan).")
registry.register("showplan", cmd_showplan, help_text="Open saved plan n: /showplan <n>.")
registry.register("rmplan", cmd_rmplan, help_text="Delete saved plan n: /rmplan <n>.")
registry.register("reconnect", cmd_reconnect, help_text="Reopen the live task feed after an error.")
registry.register("logout", cmd_logout, help_text="Sign out and start a new anonymous session.")
