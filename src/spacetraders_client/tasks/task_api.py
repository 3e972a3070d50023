# src/spacetraders_client/tasks/task_api.py

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from ..core.ports import CacheInvalidator, DeferredAction, QueryKey
from .task_models import InvalidScheduleError, ScheduledTask, resolve_delay, resolve_due_at
from .task_queue import TaskQueue

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class InvalidateQuery:
    """Mark one cached view stale when run."""

    invalidator: CacheInvalidator
    query_key: tuple

    def run(self) -> None:
        self.invalidator.invalidate(self.query_key)


@dataclass(slots=True, frozen=True)
class CallbackAction:
    fn: Callable[[], object]

    def run(self) -> None:
        self.fn()


def as_action(obj: DeferredAction | Callable[[], object]) -> DeferredAction:
    """Accept either a DeferredAction or a plain zero-arg callable."""
    if callable(getattr(obj, "run", None)):
        return obj  # type: ignore[return-value]
    if callable(obj):
        return CallbackAction(obj)
    raise InvalidScheduleError(f"Not a deferred action or callable: {obj!r}")


def supersede_id(query_key: QueryKey) -> str:
    """Stable task id for "the pending refresh of this view"."""
    return "invalidate:" + ":".join(str(part) for part in query_key)


def schedule_invalidation(
    queue: TaskQueue,
    invalidator: CacheInvalidator,
    query_key: QueryKey,
    *,
    due_at: Any,
    supersede: bool = False,
) -> str:
    """
    Schedule "mark query_key stale" at an absolute time (epoch seconds, datetime or ISO string).

    With supersede=True an earlier pending refresh of the same view is cancelled,
    otherwise it is left to fire (harmless: it only marks data stale).
    """
    key = tuple(query_key)
    task = ScheduledTask(action=InvalidateQuery(invalidator, key), due_at=due_at)

    if supersede:
        # Resolve first: a bad time must not drop the earlier refresh.
        task.due_at = resolve_due_at(due_at)
        task.id = supersede_id(key)
        queue.cancel(task.id)

    return queue.schedule(task)


def schedule_invalidation_after(
    queue: TaskQueue,
    invalidator: CacheInvalidator,
    query_key: QueryKey,
    *,
    delay_seconds: float,
    supersede: bool = False,
) -> str:
    """Relative-time variant of schedule_invalidation."""
    key = tuple(query_key)
    action = InvalidateQuery(invalidator, key)

    if supersede:
        # Resolve first: a bad delay must not drop the earlier refresh.
        due_at = resolve_due_at(queue.now() + resolve_delay(delay_seconds))
        task_id = supersede_id(key)
        queue.cancel(task_id)
        return queue.schedule(ScheduledTask(action=action, due_at=due_at, id=task_id))

    return queue.schedule_after(action, delay_seconds)


def invalidate_after_cooldown(
    queue: TaskQueue,
    invalidator: CacheInvalidator,
    cooldown: Mapping[str, Any] | None,
    query_key: QueryKey,
) -> str | None:
    """
    Refresh query_key when a ship's reactor cooldown ends.

    cooldown is the server payload: {"shipSymbol", "totalSeconds", "remainingSeconds",
    "expiration"?}. expiration wins when present; otherwise remainingSeconds is used.
    Returns the task id, or None when the ship has no active cooldown.
    """
    if not cooldown:
        return None

    expiration = cooldown.get("expiration")
    if expiration:
        task_id = schedule_invalidation(queue, invalidator, query_key, due_at=expiration)
    else:
        remaining = resolve_delay(cooldown.get("remainingSeconds") or 0)
        if remaining <= 0:
            return None
        task_id = schedule_invalidation_after(queue, invalidator, query_key, delay_seconds=remaining)

    logger.info(
        "Cooldown refresh scheduled ship=%s key=%s task_id=%s",
        cooldown.get("shipSymbol"),
        tuple(query_key),
        task_id,
    )
    return task_id


def invalidate_after_arrival(
    queue: TaskQueue,
    invalidator: CacheInvalidator,
    nav: Mapping[str, Any] | None,
    query_key: QueryKey,
) -> str | None:
    """
    Refresh query_key when a ship in transit arrives (nav.route.arrival).

    Returns None unless nav.status is IN_TRANSIT.
    """
    if not nav or nav.get("status") != "IN_TRANSIT":
        return None

    route = nav.get("route") or {}
    arrival = route.get("arrival")
    if not arrival:
        raise InvalidScheduleError(f"Ship in transit without an arrival time: {nav!r}")

    task_id = schedule_invalidation(queue, invalidator, query_key, due_at=arrival)
    logger.info(
        "Arrival refresh scheduled waypoint=%s key=%s task_id=%s",
        (route.get("destination") or {}).get("symbol"),
        tuple(query_key),
        task_id,
    )
    return task_id
