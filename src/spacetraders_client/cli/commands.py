# src/spacetraders_client/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from ..core.state import AppState
from ..tasks.task_api import InvalidateQuery, schedule_invalidation, schedule_invalidation_after
from ..tasks.task_models import InvalidScheduleError

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /after, ...)."""

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

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
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

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def _ts_local(ts: float) -> str:
    return datetime.fromtimestamp(ts).astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _parse_at(raw: str) -> float | str:
    """Epoch seconds if numeric, otherwise the raw string (resolved as ISO-8601 later)."""
    try:
        return float(raw)
    except ValueError:
        return raw


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_status(state: AppState, args: list[str]) -> str:
    runner = state.driver_runner
    driver_state = runner.driver.state.value if runner is not None else "not started"
    interval = getattr(state.settings, "poll_interval_seconds", None)
    next_due = state.queue.next_due_at()
    next_s = _ts_local(next_due) if next_due is not None else "-"
    return (
        "Status:\n"
        f"  Poll driver: {driver_state} (every {interval}s)\n"
        f"  Pending tasks: {len(state.queue)}\n"
        f"  Next due: {next_s}\n"
        f"  Stale views: {len(state.cache.stale_keys())}"
    )


def cmd_pending(state: AppState, args: list[str]) -> str:
    tasks = state.queue.pending()
    if not tasks:
        return "No pending tasks."
    now_ts = state.queue.now()
    lines = [f"Pending tasks ({len(tasks)}):"]
    for t in tasks:
        action = t.action
        what = ":".join(map(str, action.query_key)) if isinstance(action, InvalidateQuery) else repr(action)
        lines.append(f"  {t.id}  in {t.due_at - now_ts:7.1f}s  ({_ts_local(t.due_at)})  {what}")
    return "\n".join(lines)


def cmd_after(state: AppState, args: list[str]) -> str:
    """
    /after <seconds> <key...>  -> refresh the view <key...> after <seconds>
    """
    if len(args) < 2:
        return "Usage: /after <seconds> <key...>"
    try:
        delay = float(args[0])
    except ValueError:
        return f"Not a number of seconds: {args[0]}"

    try:
        task_id = schedule_invalidation_after(state.queue, state.cache, args[1:], delay_seconds=delay)
    except InvalidScheduleError as e:
        return f"Cannot schedule: {e}"
    return f"Scheduled {task_id} in {delay:g}s."


def cmd_at(state: AppState, args: list[str]) -> str:
    """
    /at <iso-time|epoch> <key...>  -> refresh the view <key...> at an absolute time
    """
    if len(args) < 2:
        return "Usage: /at <iso-time|epoch> <key...>"
    try:
        task_id = schedule_invalidation(state.queue, state.cache, args[1:], due_at=_parse_at(args[0]))
    except InvalidScheduleError as e:
        return f"Cannot schedule: {e}"
    return f"Scheduled {task_id}."


def cmd_cancel(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /cancel <task-id>"
    if state.queue.cancel(args[0]):
        return f"Cancelled {args[0]}."
    return f"No pending task with id {args[0]}."


def cmd_stale(state: AppState, args: list[str]) -> str:
    entries = state.cache.stale_keys()
    if not entries:
        return "No stale views."
    lines = ["Stale views:"]
    for e in entries:
        lines.append(f"  {':'.join(map(str, e.query_key))}  x{e.count}  since {_ts_local(e.invalidated_at)}")
    return "\n".join(lines)


def cmd_fresh(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /fresh <key...>"
    if state.cache.mark_fresh(args):
        return f"Marked {':'.join(args)} fresh."
    return f"{':'.join(args)} was not stale."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("status", cmd_status, help_text="Show poll driver and queue status.")
registry.register("pending", cmd_pending, help_text="List pending deferred tasks.", aliases=["ls"])
registry.register("after", cmd_after, help_text="Refresh a view later: /after <seconds> <key...>.")
registry.register("at", cmd_at, help_text="Refresh a view at a time: /at <iso-time|epoch> <key...>.")
registry.register("cancel", cmd_cancel, help_text="Cancel a pending task: /cancel <task-id>.")
registry.register("stale", cmd_stale, help_text="List views marked stale.")
registry.register("fresh", cmd_fresh, help_text="Mark a view refetched: /fresh <key...>.")
