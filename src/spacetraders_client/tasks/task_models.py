# src/spacetraders_client/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from ..core.ports import DeferredAction


class InvalidScheduleError(ValueError):
    """Raised when a task's due time cannot be resolved to a point in time."""


@dataclass(slots=True)
class ScheduledTask:
    """
    One pending deferred action.

    due_at is absolute (epoch seconds once the queue has accepted the task).
    Before scheduling it may also be a datetime or an ISO-8601 string, as the
    server reports cooldown expirations and arrival times that way.
    """

    action: DeferredAction
    due_at: Any
    id: str | None = None


def _representable(ts: float, value: Any) -> float:
    """Reject timestamps that are not finite or fall outside the datetime range (never due)."""
    if not math.isfinite(ts):
        raise InvalidScheduleError(f"Can't schedule for an invalid time: {value!r}")
    try:
        datetime.fromtimestamp(ts, timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise InvalidScheduleError(f"Can't schedule for an out-of-range time: {value!r}") from None
    return ts


def resolve_due_at(value: Any) -> float:
    """
    Convert a due time into epoch seconds.

    Accepts finite int/float epoch seconds, datetime (naive means UTC) and
    ISO-8601 strings ("Z" suffix allowed). Anything else raises InvalidScheduleError.
    """
    if isinstance(value, bool):
        raise InvalidScheduleError(f"Can't schedule for an invalid time: {value!r}")

    if isinstance(value, (int, float)):
        try:
            ts = float(value)
        except OverflowError:
            raise InvalidScheduleError(f"Can't schedule for an invalid time: {value!r}") from None
        return _representable(ts, value)

    if isinstance(value, str):
        raw = value.strip()
        if raw.endswith(("Z", "z")):
            raw = raw[:-1] + "+00:00"
        try:
            value = datetime.fromisoformat(raw)
        except ValueError:
            raise InvalidScheduleError(f"Can't schedule for an invalid date: {value!r}") from None

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        try:
            return _representable(value.timestamp(), value)
        except (OverflowError, OSError, ValueError):
            raise InvalidScheduleError(f"Can't schedule for an invalid date: {value!r}") from None

    raise InvalidScheduleError(f"Can't schedule for an invalid time: {value!r}")


def resolve_delay(value: Any) -> float:
    """Validate a relative delay in seconds (fractional, zero and negative are fine)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidScheduleError(f"Delay must be a number of seconds, got {value!r}")
    try:
        delay = float(value)
    except OverflowError:
        raise InvalidScheduleError(f"Delay out of range, got {value!r}") from None
    if not math.isfinite(delay):
        raise InvalidScheduleError(f"Delay must be finite, got {value!r}")
    return delay
