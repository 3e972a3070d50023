# src/spacetraders_client/tasks/task_queue.py

from __future__ import annotations

"""
Deferred task queue.

Holds actions keyed by an absolute due time and runs them once that time has
passed. The server never pushes "ship arrived" or "cooldown expired" events,
so producers schedule a cache invalidation for the moment they know it happens.

The queue does not drive itself: PollDriver calls drain() on a fixed cadence.
"""

import logging
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import replace

from ..core.ports import DeferredAction
from .task_models import InvalidScheduleError, ScheduledTask, resolve_delay, resolve_due_at

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class TaskQueue:
    """
    Unordered multiset of pending ScheduledTask entries.

    Thread-safety:
    - the pending list is guarded by a lock
    - actions run outside the lock, so an action may schedule follow-up tasks
      (those land in a later drain, never the current one)
    """

    def __init__(self, *, clock: Clock = time.time) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: list[ScheduledTask] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._pending)

    def now(self) -> float:
        return self._clock()

    # ---- producers ----

    def schedule(self, task: ScheduledTask) -> str:
        """
        Add one task to the pending set and return its id.

        Raises InvalidScheduleError (and enqueues nothing) if task.due_at is not
        a resolvable point in time or task.action is not runnable.
        """
        due_at = resolve_due_at(task.due_at)
        if not callable(getattr(task.action, "run", None)):
            raise InvalidScheduleError(f"Task action has no run() method: {task.action!r}")

        task_id = task.id or uuid.uuid4().hex
        accepted = replace(task, due_at=due_at, id=task_id)

        with self._lock:
            self._pending.append(accepted)

        logger.debug("Scheduled task_id=%s due_at=%.3f", task_id, due_at)
        return task_id

    def schedule_after(
        self,
        action: DeferredAction,
        delay_seconds: float,
        *,
        task_id: str | None = None,
    ) -> str:
        """Schedule action to run delay_seconds from now (zero or negative: next drain)."""
        delay = resolve_delay(delay_seconds)
        return self.schedule(ScheduledTask(action=action, due_at=self._clock() + delay, id=task_id))

    def cancel(self, task_id: str) -> bool:
        """Remove pending tasks with this id without running them."""
        with self._lock:
            before = len(self._pending)
            self._pending = [t for t in self._pending if t.id != task_id]
            removed = before - len(self._pending)

        if removed:
            logger.debug("Cancelled task_id=%s (%d entries)", task_id, removed)
        return removed > 0

    def clear(self) -> int:
        """Drop every pending task (queue disposal). Returns how many were dropped."""
        with self._lock:
            dropped = len(self._pending)
            self._pending = []
        if dropped:
            logger.info("Task queue cleared, dropped %d pending tasks", dropped)
        return dropped

    # ---- inspection ----

    def pending(self) -> list[ScheduledTask]:
        """Snapshot of pending tasks, soonest first."""
        with self._lock:
            # Copies: callers must not be able to edit queued tasks.
            snapshot = [replace(t) for t in self._pending]
        snapshot.sort(key=lambda t: t.due_at)
        return snapshot

    def next_due_at(self) -> float | None:
        with self._lock:
            if not self._pending:
                return None
            return min(t.due_at for t in self._pending)

    # ---- consumer ----

    def drain(self, now: float | None = None) -> int:
        """
        Run every task with due_at <= now exactly once and drop it.

        now is sampled once for the whole pass. Due tasks are removed from the
        pending set before any action runs. A failing action is logged and does
        not stop the others. Returns the number of due tasks.
        """
        if now is None:
            now = self._clock()

        with self._lock:
            due = [t for t in self._pending if t.due_at <= now]
            if not due:
                return 0
            self._pending = [t for t in self._pending if t.due_at > now]
            remaining = len(self._pending)

        due.sort(key=lambda t: t.due_at)
        logger.debug("Draining %d due tasks (%d still pending)", len(due), remaining)

        for task in due:
            try:
                task.action.run()
            except Exception:
                logger.exception("Deferred action failed task_id=%s due_at=%.3f", task.id, task.due_at)

        return len(due)
