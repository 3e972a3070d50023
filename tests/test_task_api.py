# tests/test_task_api.py

from __future__ import annotations

import pytest

from spacetraders_client.tasks.task_api import (
    CallbackAction,
    InvalidateQuery,
    as_action,
    invalidate_after_arrival,
    invalidate_after_cooldown,
    schedule_invalidation,
    schedule_invalidation_after,
)
from spacetraders_client.tasks.task_models import InvalidScheduleError
from spacetraders_client.tasks.task_queue import TaskQueue

from .fakes import FakeClock, FakeInvalidator, RecordingAction

# FakeClock starts at 2023-11-14T22:13:20Z.
T0_PLUS_60 = "2023-11-14T22:14:20.000Z"


def test_schedule_invalidation_marks_key_stale_when_due(
    queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator
) -> None:
    schedule_invalidation(queue, invalidator, ["get-my-ships"], due_at=T0_PLUS_60)

    queue.drain(clock.now + 59)
    assert invalidator.invalidated == []

    queue.drain(clock.now + 60)
    assert invalidator.invalidated == [("get-my-ships",)]


def test_schedule_invalidation_rejects_bad_time(queue: TaskQueue, invalidator: FakeInvalidator) -> None:
    with pytest.raises(InvalidScheduleError):
        schedule_invalidation(queue, invalidator, ["get-my-ships"], due_at="not-a-date")
    assert len(queue) == 0


def test_without_supersede_old_refresh_still_fires(
    queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator
) -> None:
    key = ("get-ship-nav", "SHIP-1")
    schedule_invalidation_after(queue, invalidator, key, delay_seconds=30)
    schedule_invalidation_after(queue, invalidator, key, delay_seconds=90)

    queue.drain(clock.now + 100)
    assert invalidator.invalidated == [key, key]


def test_supersede_replaces_pending_refresh(
    queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator
) -> None:
    key = ("get-ship-nav", "SHIP-1")
    first = schedule_invalidation_after(queue, invalidator, key, delay_seconds=30, supersede=True)
    second = schedule_invalidation(queue, invalidator, key, due_at=clock.now + 90, supersede=True)

    assert first == second == "invalidate:get-ship-nav:SHIP-1"
    assert len(queue) == 1

    queue.drain(clock.now + 60)
    assert invalidator.invalidated == []
    queue.drain(clock.now + 90)
    assert invalidator.invalidated == [key]


def test_supersede_with_bad_time_keeps_old_refresh(queue: TaskQueue, invalidator: FakeInvalidator) -> None:
    key = ("get-ship-cooldown", "SHIP-1")
    schedule_invalidation_after(queue, invalidator, key, delay_seconds=30, supersede=True)

    with pytest.raises(InvalidScheduleError):
        schedule_invalidation(queue, invalidator, key, due_at="garbage", supersede=True)
    with pytest.raises(InvalidScheduleError):
        schedule_invalidation_after(queue, invalidator, key, delay_seconds="soon", supersede=True)  # type: ignore[arg-type]

    assert len(queue) == 1


def test_cooldown_expiration(queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator) -> None:
    cooldown = {
        "shipSymbol": "SHIP-1",
        "totalSeconds": 60,
        "remainingSeconds": 60,
        "expiration": T0_PLUS_60,
    }
    task_id = invalidate_after_cooldown(queue, invalidator, cooldown, ["get-ship-cooldown", "SHIP-1"])

    assert task_id is not None
    assert queue.next_due_at() == pytest.approx(clock.now + 60)


def test_cooldown_without_expiration_uses_remaining_seconds(
    queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator
) -> None:
    cooldown = {"shipSymbol": "SHIP-1", "totalSeconds": 70, "remainingSeconds": 45}
    invalidate_after_cooldown(queue, invalidator, cooldown, ["get-ship-cooldown", "SHIP-1"])

    assert queue.next_due_at() == pytest.approx(clock.now + 45)


def test_no_cooldown_schedules_nothing(queue: TaskQueue, invalidator: FakeInvalidator) -> None:
    assert invalidate_after_cooldown(queue, invalidator, None, ["k"]) is None
    assert (
        invalidate_after_cooldown(
            queue, invalidator, {"shipSymbol": "SHIP-1", "totalSeconds": 0, "remainingSeconds": 0}, ["k"]
        )
        is None
    )
    assert len(queue) == 0


def test_arrival_in_transit(queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator) -> None:
    nav = {
        "systemSymbol": "X1-DF55",
        "waypointSymbol": "X1-DF55-20250Z",
        "status": "IN_TRANSIT",
        "route": {
            "destination": {"symbol": "X1-DF55-20250Z"},
            "departureTime": "2023-11-14T22:13:00Z",
            "arrival": T0_PLUS_60,
        },
    }
    invalidate_after_arrival(queue, invalidator, nav, ["get-my-ships"])

    queue.drain(clock.now + 60)
    assert invalidator.invalidated == [("get-my-ships",)]


def test_arrival_ignored_when_docked(queue: TaskQueue, invalidator: FakeInvalidator) -> None:
    nav = {"status": "DOCKED", "route": {"arrival": T0_PLUS_60}}
    assert invalidate_after_arrival(queue, invalidator, nav, ["get-my-ships"]) is None
    assert len(queue) == 0


def test_arrival_in_transit_without_time_is_an_error(queue: TaskQueue, invalidator: FakeInvalidator) -> None:
    with pytest.raises(InvalidScheduleError):
        invalidate_after_arrival(queue, invalidator, {"status": "IN_TRANSIT", "route": {}}, ["k"])


def test_as_action() -> None:
    action = RecordingAction()
    assert as_action(action) is action

    hits: list[int] = []
    wrapped = as_action(lambda: hits.append(1))
    assert isinstance(wrapped, CallbackAction)
    wrapped.run()
    assert hits == [1]

    with pytest.raises(InvalidScheduleError):
        as_action(42)  # type: ignore[arg-type]


def test_invalidate_query_action(invalidator: FakeInvalidator) -> None:
    InvalidateQuery(invalidator, ("get-contracts",)).run()
    assert invalidator.invalidated == [("get-contracts",)]


def test_supersede_with_out_of_range_delay_keeps_old_refresh(
    queue: TaskQueue, clock: FakeClock, invalidator: FakeInvalidator
) -> None:
    key = ("get-ship-nav", "SHIP-1")
    schedule_invalidation_after(queue, invalidator, key, delay_seconds=30, supersede=True)

    with pytest.raises(InvalidScheduleError):
        schedule_invalidation_after(queue, invalidator, key, delay_seconds=1e300, supersede=True)

    queue.drain(clock.now + 30)
    assert invalidator.invalidated == [key]
